"""
Shared recommendation plumbing.

Every recommendation call gets a fresh DataRepository, so master tables
are parsed once per call and nothing leaks between calls.
"""

import logging

from sekaideck.models.card import CardConfig, CardDetail
from sekaideck.models.event import EventConfig
from sekaideck.models.user import UserCard
from sekaideck.recommend.search import DebugLog
from sekaideck.services.card_calculator import CardCalculator
from sekaideck.services.data_provider import DataProvider, DataRepository
from sekaideck.services.deck_calculator import DeckCalculator
from sekaideck.services.power_calculator import AreaItemService

logger = logging.getLogger(__name__)


def _no_debug(message: str) -> None:
    pass


class BaseDeckRecommend:
    """Loads the player's cards into CardDetail records."""

    def __init__(self, provider: DataProvider) -> None:
        self.provider = provider

    def new_repository(self) -> DataRepository:
        return DataRepository(self.provider)

    @staticmethod
    def debug_sink(debug_log: DebugLog | None) -> DebugLog:
        return debug_log or _no_debug

    async def load_cards(
        self,
        repository: DataRepository,
        card_config: dict[str, CardConfig],
        event_config: EventConfig | None = None,
    ) -> list[CardDetail]:
        """Details for every owned card whose rarity is enabled."""
        user_cards = await repository.user("userCards", UserCard)
        area_item_levels = await AreaItemService(repository).get_area_item_levels()
        return await CardCalculator(repository).batch_get_card_detail(
            user_cards, area_item_levels, card_config, event_config
        )

    async def load_honor_bonus(self, repository: DataRepository) -> int:
        return await DeckCalculator(repository).get_honor_bonus_power()
