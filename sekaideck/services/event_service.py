"""
Event configuration and per-card event bonuses.

An EventConfig is assembled once per search from the event master tables.
Card bonuses are then pure functions of (card, config).
"""

import logging
from dataclasses import dataclass

from sekaideck.models.card import CardEventBonus
from sekaideck.models.event import EventConfig, EventType
from sekaideck.models.master import (
    VIRTUAL_SINGER_UNIT,
    Card,
    Event,
    EventCard,
    EventDeckBonus,
    EventRarityBonusRate,
    GameCharacter,
    GameCharacterUnit,
    WorldBloomDifferentAttributeBonus,
    WorldBloomSupportDeckBonus,
)
from sekaideck.services.data_provider import DataRepository, find_or_raise

logger = logging.getLogger(__name__)

SPECIFIC_CHARACTER = "specific"
OTHER_CHARACTERS = "others"


def deck_bonus_matches(
    row: EventDeckBonus,
    card: Card,
    units: tuple[str, ...],
    character_units: dict[int, GameCharacterUnit],
) -> bool:
    """
    Whether a deck-bonus row applies to a card.

    A row may name a character-unit, an attribute, or both; every named
    condition must hold. Virtual singers match the character-unit of
    their support unit (or the virtual singer unit without one).
    """
    if row.game_character_unit_id is not None:
        character_unit = character_units.get(row.game_character_unit_id)
        if character_unit is None or character_unit.game_character_id != card.character_id:
            return False
        own_unit = units[-1]
        if character_unit.unit != own_unit:
            return False
    if row.card_attr is not None and row.card_attr != card.attr:
        return False
    return row.game_character_unit_id is not None or row.card_attr is not None


def get_card_event_bonus(
    card: Card,
    units: tuple[str, ...],
    master_rank: int,
    config: EventConfig,
    character_units: dict[int, GameCharacterUnit],
) -> CardEventBonus:
    """Event bonus of one card under an event."""
    fixed = 0.0
    for row in config.deck_bonuses:
        if deck_bonus_matches(row, card, units, character_units):
            fixed = max(fixed, row.bonus_rate)

    for rate in config.rarity_bonus_rates:
        if rate.card_rarity_type == card.card_rarity_type and rate.master_rank == master_rank:
            fixed += rate.bonus_rate
            break

    event_card = config.event_cards.get(card.id)
    return CardEventBonus(
        fixed_bonus=fixed,
        card_bonus=event_card.bonus_rate if event_card else 0.0,
        leader_bonus=event_card.leader_bonus_rate if event_card else 0.0,
        cap=config.card_bonus_cap,
    )


def get_card_support_bonus(
    card: Card,
    units: tuple[str, ...],
    master_rank: int,
    config: EventConfig,
) -> float | None:
    """
    World bloom support deck bonus of one card.

    Only cards of the support unit qualify; the chapter character's own
    cards use the "specific" row, everyone else the "others" row.
    """
    if not config.has_support_deck:
        return None
    support_unit = config.filter_unit
    if support_unit is not None and support_unit not in units:
        return 0.0
    character_type = (
        SPECIFIC_CHARACTER if card.character_id == config.special_character_id else OTHER_CHARACTERS
    )
    for row in config.support_deck_bonuses:
        if (
            row.card_rarity_type != card.card_rarity_type
            or row.world_bloom_support_deck_character_type != character_type
        ):
            continue
        for rank_bonus in row.master_rank_bonuses:
            if rank_bonus.master_rank == master_rank:
                return rank_bonus.bonus_rate
    return 0.0


def card_units(card: Card, characters: dict[int, GameCharacter]) -> tuple[str, ...]:
    """
    Units a card belongs to.

    Virtual singers with a support unit belong to both the virtual singer
    unit and their support unit; the support unit comes last.
    """
    character = characters.get(card.character_id)
    unit = character.unit if character is not None else VIRTUAL_SINGER_UNIT
    if unit == VIRTUAL_SINGER_UNIT and card.support_unit not in ("none", VIRTUAL_SINGER_UNIT):
        return (VIRTUAL_SINGER_UNIT, card.support_unit)
    return (unit,)


@dataclass
class EventService:
    """Builds EventConfig objects from master data."""

    repository: DataRepository

    async def get_event_config(self, event_id: int, special_character_id: int = 0) -> EventConfig:
        """
        Assemble the configuration of an event.

        Args:
            event_id: Event master id
            special_character_id: World bloom chapter character (0 for none)

        Raises:
            NotFoundError: If the event or the special character does not exist
        """
        events = await self.repository.master("events", Event)
        event = find_or_raise(events, lambda e: e.id == event_id, "Event", detail=f"id={event_id}")
        event_type = EventType(event.event_type)

        deck_bonuses = tuple(
            b
            for b in await self.repository.master("eventDeckBonuses", EventDeckBonus)
            if b.event_id == event_id
        )
        event_cards = {
            c.card_id: c
            for c in await self.repository.master("eventCards", EventCard)
            if c.event_id == event_id
        }
        rarity_rates = tuple(await self.repository.master("eventRarityBonusRates", EventRarityBonusRate))

        support_unit = None
        different_attribute: dict[int, float] = {}
        support_rows: tuple[WorldBloomSupportDeckBonus, ...] = ()
        if event_type == EventType.WORLD_BLOOM:
            different_attribute = {
                row.attribute_count: row.bonus_rate
                for row in await self.repository.master(
                    "worldBloomDifferentAttributeBonuses", WorldBloomDifferentAttributeBonus
                )
            }
            support_rows = tuple(
                await self.repository.master("worldBloomSupportDeckBonuses", WorldBloomSupportDeckBonus)
            )
            if special_character_id:
                characters = await self.repository.master("gameCharacters", GameCharacter)
                character = find_or_raise(
                    characters,
                    lambda c: c.id == special_character_id,
                    "Game character",
                    detail=f"id={special_character_id}",
                )
                support_unit = character.unit

        config = EventConfig(
            event_id=event_id,
            event_type=event_type,
            event_unit=None if event.unit == "none" else event.unit,
            special_character_id=special_character_id,
            world_bloom_support_unit=support_unit,
            deck_bonuses=deck_bonuses,
            event_cards=event_cards,
            rarity_bonus_rates=rarity_rates,
            card_bonus_count_limits=dict(event.card_bonus_count_limits),
            card_bonus_cap=event.card_bonus_cap,
            different_attribute_bonuses=different_attribute,
            support_deck_bonuses=support_rows,
        )
        logger.debug(
            "Event %d config: type=%s unit=%s support_unit=%s",
            event_id,
            event_type.value,
            config.event_unit,
            support_unit,
        )
        return config
