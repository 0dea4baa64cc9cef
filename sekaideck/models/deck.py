from dataclasses import dataclass

from sekaideck.models.card import CardPowerDetail
from sekaideck.models.skill import SkillCase


@dataclass(frozen=True, slots=True)
class DeckCardSkillDetail:
    """The skill a member actually fields in this deck."""

    skill_id: int
    is_post_training: bool
    score_up: float
    life_recovery: float

    @classmethod
    def from_case(cls, case: SkillCase, score_up: float) -> "DeckCardSkillDetail":
        return cls(
            skill_id=case.skill_id,
            is_post_training=case.is_post_training,
            score_up=score_up,
            life_recovery=case.life_recovery,
        )


@dataclass(frozen=True, slots=True)
class DeckCardDetail:
    """One member of a deck with its composition-dependent values."""

    card_id: int
    character_id: int
    units: tuple[str, ...]
    attr: str
    level: int
    skill_level: int
    master_rank: int
    power: CardPowerDetail
    skill: DeckCardSkillDetail
    event_bonus: float | None = None


@dataclass(frozen=True, slots=True)
class DeckPowerDetail:
    base: int = 0
    area_item_bonus: int = 0
    character_bonus: int = 0
    honor_bonus: int = 0

    @property
    def total(self) -> int:
        return self.base + self.area_item_bonus + self.character_bonus + self.honor_bonus


@dataclass(frozen=True)
class DeckDetail:
    """
    Aggregate over an ordered 2-5 card sequence.

    Position 0 is the leader.

    Attributes:
        cards: Members in deck order
        power: Power totals including honor bonus
        event_bonus: Total event bonus (None outside events)
        support_deck_bonus: World bloom support deck bonus (None outside world bloom)
        life_recovery: Sum of the members' life recovery
    """

    cards: tuple[DeckCardDetail, ...]
    power: DeckPowerDetail
    event_bonus: float | None = None
    support_deck_bonus: float | None = None
    life_recovery: float = 0.0

    @property
    def card_ids(self) -> tuple[int, ...]:
        return tuple(c.card_id for c in self.cards)

    @property
    def leader(self) -> DeckCardDetail:
        return self.cards[0]

    @property
    def total_event_bonus(self) -> float:
        """Event bonus plus support deck bonus."""
        return (self.event_bonus or 0.0) + (self.support_deck_bonus or 0.0)


@dataclass(frozen=True)
class RecommendDeck:
    """A scored deck emitted by a search. Never mutated after emission."""

    deck: DeckDetail
    score: float

    @property
    def card_ids(self) -> tuple[int, ...]:
        return self.deck.card_ids

    @property
    def cards(self) -> tuple[DeckCardDetail, ...]:
        return self.deck.cards

    @property
    def event_bonus(self) -> float | None:
        return self.deck.event_bonus

    @property
    def support_deck_bonus(self) -> float | None:
        return self.deck.support_deck_bonus


@dataclass(frozen=True, slots=True)
class SupportDeckCard:
    """A card picked for the world bloom support deck."""

    card_id: int
    character_id: int
    support_deck_bonus: float

