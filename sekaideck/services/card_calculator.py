"""
Card detail aggregation.

Combines a card's power, skill maps, event bonus and support bonus into
one immutable CardDetail. Build options from the caller (per-rarity
CardConfig) are applied to the owned card first.
"""

import logging
from dataclasses import dataclass, field

from sekaideck.models.card import CardConfig, CardDetail
from sekaideck.models.event import EventConfig
from sekaideck.models.master import AreaItemLevel, Card, CardEpisode, GameCharacter, GameCharacterUnit
from sekaideck.models.user import EPISODE_READ, TRAINING_DONE, UserCard, UserCardEpisode
from sekaideck.services.data_provider import DataRepository, find_or_raise
from sekaideck.services.event_service import card_units, get_card_event_bonus, get_card_support_bonus
from sekaideck.services.power_calculator import CardPowerCalculator
from sekaideck.services.skill_calculator import NO_SCORE_LIMIT, CardSkillCalculator

logger = logging.getLogger(__name__)

RARITY_MAX_LEVEL: dict[str, int] = {
    "rarity_1": 20,
    "rarity_2": 30,
    "rarity_3": 50,
    "rarity_4": 60,
    "rarity_birthday": 60,
}

TRAINABLE_RARITIES = frozenset({"rarity_3", "rarity_4"})

MAX_MASTER_RANK = 5
MAX_SKILL_LEVEL = 4


def apply_card_config(
    user_card: UserCard,
    card: Card,
    config: CardConfig | None,
    episodes: list[CardEpisode],
) -> UserCard:
    """Owned card with build options applied (unchanged without options)."""
    if config is None:
        return user_card

    update: dict[str, object] = {}
    if config.rank_max:
        update["level"] = RARITY_MAX_LEVEL.get(card.card_rarity_type, user_card.level)
        if card.card_rarity_type in TRAINABLE_RARITIES:
            update["special_training_status"] = TRAINING_DONE
    if config.master_max:
        update["master_rank"] = MAX_MASTER_RANK
    if config.skill_max:
        update["skill_level"] = MAX_SKILL_LEVEL
    if config.episode_read:
        update["episodes"] = tuple(
            UserCardEpisode(card_episode_id=e.id, scenario_status=EPISODE_READ)
            for e in episodes
            if e.card_id == card.id
        )
    if not update:
        return user_card
    return user_card.model_copy(update=update)


@dataclass
class CardCalculator:
    """Builds CardDetail records for owned cards."""

    repository: DataRepository
    power_calculator: CardPowerCalculator = field(init=False)
    skill_calculator: CardSkillCalculator = field(init=False)

    def __post_init__(self) -> None:
        self.power_calculator = CardPowerCalculator(self.repository)
        self.skill_calculator = CardSkillCalculator(self.repository)

    async def get_card_detail(
        self,
        user_card: UserCard,
        area_item_levels: list[AreaItemLevel],
        card_config: dict[str, CardConfig] | None = None,
        event_config: EventConfig | None = None,
        score_up_limit: float = NO_SCORE_LIMIT,
    ) -> CardDetail | None:
        """
        Build one card's detail.

        Returns:
            The CardDetail, or None if the card's rarity is disabled

        Raises:
            NotFoundError: If master or user records the card needs are missing
        """
        cards = await self.repository.master("cards", Card)
        card = find_or_raise(cards, lambda c: c.id == user_card.card_id, "Card", detail=f"id={user_card.card_id}")

        config = (card_config or {}).get(card.card_rarity_type)
        if config is not None and config.disable:
            return None
        episodes = await self.repository.master("cardEpisodes", CardEpisode) if config else []
        user_card = apply_card_config(user_card, card, config, episodes)

        characters = {c.id: c for c in await self.repository.master("gameCharacters", GameCharacter)}
        units = card_units(card, characters)

        power = await self.power_calculator.get_card_power(user_card, card, units, area_item_levels)
        skill = await self.skill_calculator.get_card_skill(user_card, card, score_up_limit)

        event_bonus = None
        support_bonus = None
        if event_config is not None:
            character_units = {
                u.id: u for u in await self.repository.master("gameCharacterUnits", GameCharacterUnit)
            }
            event_bonus = get_card_event_bonus(
                card, units, user_card.master_rank, event_config, character_units
            )
            support_bonus = get_card_support_bonus(card, units, user_card.master_rank, event_config)

        return CardDetail(
            card_id=card.id,
            character_id=card.character_id,
            units=units,
            attr=card.attr,
            rarity=card.card_rarity_type,
            level=user_card.level,
            skill_level=user_card.skill_level,
            master_rank=user_card.master_rank,
            trained=user_card.trained,
            power=power,
            skill=skill,
            event_bonus=event_bonus,
            support_deck_bonus=support_bonus,
        )

    async def batch_get_card_detail(
        self,
        user_cards: list[UserCard],
        area_item_levels: list[AreaItemLevel],
        card_config: dict[str, CardConfig] | None = None,
        event_config: EventConfig | None = None,
        score_up_limit: float = NO_SCORE_LIMIT,
    ) -> list[CardDetail]:
        """Build details for every owned card whose rarity is enabled, in input order."""
        details: list[CardDetail] = []
        for user_card in user_cards:
            detail = await self.get_card_detail(
                user_card, area_item_levels, card_config, event_config, score_up_limit
            )
            if detail is not None:
                details.append(detail)
        logger.info("Built %d/%d card details", len(details), len(user_cards))
        return details
