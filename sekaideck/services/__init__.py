"""
sekaideck services.

Card and deck calculation over master and user data.
"""

from sekaideck.services.card_calculator import CardCalculator, apply_card_config
from sekaideck.services.data_provider import (
    DataProvider,
    DataRepository,
    InMemoryDataProvider,
    JsonDataProvider,
)
from sekaideck.services.deck_calculator import (
    DeckBonusRules,
    DeckCalculator,
    DeckComposition,
    SupportDeckPool,
    get_deck_detail_by_cards,
    select_support_deck,
    validate_deck_cards,
)
from sekaideck.services.event_service import EventService
from sekaideck.services.power_calculator import AreaItemService, CardPowerCalculator, HonorService
from sekaideck.services.skill_calculator import CardSkillCalculator

__all__ = [
    "AreaItemService",
    "CardCalculator",
    "CardPowerCalculator",
    "CardSkillCalculator",
    "DataProvider",
    "DataRepository",
    "DeckBonusRules",
    "DeckCalculator",
    "DeckComposition",
    "EventService",
    "HonorService",
    "InMemoryDataProvider",
    "JsonDataProvider",
    "SupportDeckPool",
    "apply_card_config",
    "get_deck_detail_by_cards",
    "select_support_deck",
    "validate_deck_cards",
]
