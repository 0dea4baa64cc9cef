"""Event and live context models."""

from dataclasses import dataclass, field
from enum import Enum

from sekaideck.models.master import (
    EventCard,
    EventDeckBonus,
    EventRarityBonusRate,
    WorldBloomSupportDeckBonus,
)


class EventType(str, Enum):
    """Event formats with distinct point formulas."""

    MARATHON = "marathon"
    CHEERFUL = "cheerful_carnival"
    WORLD_BLOOM = "world_bloom"


class LiveType(str, Enum):
    """Live modes with distinct score formulas."""

    SOLO = "solo"
    AUTO = "auto"
    MULTI = "multi"
    CHEERFUL = "cheerful"


@dataclass(frozen=True)
class EventConfig:
    """
    Read-only description of the active event.

    Attributes:
        event_id: Event master id
        event_type: Point formula family
        event_unit: Unit the event is restricted to ("box" events), if any
        special_character_id: World bloom chapter character (0 if none)
        world_bloom_support_unit: Unit of the chapter character; support
            deck cards must belong to it
        deck_bonuses: Character/attribute match rows
        event_cards: Limited-card rows by card id
        rarity_bonus_rates: Master-rank bonus rows
        card_bonus_count_limits: Per-rarity count of cards whose limited
            bonus counts toward the deck
        card_bonus_cap: Ceiling on one card's total bonus
        different_attribute_bonuses: World bloom bonus by distinct attribute count
        support_deck_bonuses: World bloom support deck rows
    """

    event_id: int
    event_type: EventType
    event_unit: str | None = None
    special_character_id: int = 0
    world_bloom_support_unit: str | None = None
    deck_bonuses: tuple[EventDeckBonus, ...] = ()
    event_cards: dict[int, EventCard] = field(default_factory=dict)
    rarity_bonus_rates: tuple[EventRarityBonusRate, ...] = ()
    card_bonus_count_limits: dict[str, int] = field(default_factory=dict)
    card_bonus_cap: float | None = None
    different_attribute_bonuses: dict[int, float] = field(default_factory=dict)
    support_deck_bonuses: tuple[WorldBloomSupportDeckBonus, ...] = ()

    @property
    def filter_unit(self) -> str | None:
        """Unit the card pool is restricted to before search."""
        if self.world_bloom_support_unit is not None:
            return self.world_bloom_support_unit
        return self.event_unit

    @property
    def has_support_deck(self) -> bool:
        return self.event_type == EventType.WORLD_BLOOM and bool(self.support_deck_bonuses)
