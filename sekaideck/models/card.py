"""
Card Detail Models.

A CardDetail is everything the search needs to know about one owned
card in one scoring context. It is built once before search begins and
never mutated afterwards.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from sekaideck.models.skill import CardSkill

# Power cases are keyed by (units the full deck shares with the card,
# whether the full deck shares the card's attribute)
PowerKey = tuple[frozenset[str], bool]

NO_SHARED_UNITS: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class CardPowerDetail:
    """Power of one card under one deck composition."""

    base: int
    area_item_bonus: int
    character_bonus: int

    @property
    def total(self) -> int:
        return self.base + self.area_item_bonus + self.character_bonus


@dataclass
class CardPowerCases:
    """Power detail per composition case."""

    _cases: dict[PowerKey, CardPowerDetail] = field(default_factory=dict)

    def set(self, shared_units: frozenset[str], shared_attr: bool, power: CardPowerDetail) -> None:
        self._cases[(shared_units, shared_attr)] = power

    def get(self, shared_units: frozenset[str], shared_attr: bool) -> CardPowerDetail:
        """
        Power when the full deck shares `shared_units` and (maybe) the attribute.

        Falls back to the no-sharing case for combinations that were not
        precomputed.
        """
        power = self._cases.get((shared_units, shared_attr))
        if power is None:
            power = self._cases[(NO_SHARED_UNITS, False)]
        return power

    def keys(self) -> list[PowerKey]:
        return list(self._cases)

    def max_total(self) -> int:
        return max(p.total for p in self._cases.values())


@dataclass(frozen=True, slots=True)
class CardEventBonus:
    """
    Event bonus contributed by one card.

    Attributes:
        fixed_bonus: Character/attribute match plus master rank bonus
        card_bonus: Event-card (limited) bonus, subject to count limits
        leader_bonus: Extra bonus only while the card leads the deck
        cap: Optional ceiling on the card's total contribution
    """

    fixed_bonus: float = 0.0
    card_bonus: float = 0.0
    leader_bonus: float = 0.0
    cap: float | None = None

    def _capped(self, value: float) -> float:
        if self.cap is None:
            return value
        return min(value, self.cap)

    def get_bonus(self, leader: bool = False, with_card_bonus: bool = True) -> float:
        value = self.fixed_bonus
        if with_card_bonus:
            value += self.card_bonus
        if leader:
            value += self.leader_bonus
        return self._capped(value)

    def min_bonus(self) -> float:
        """Guaranteed contribution whatever the deck looks like."""
        return self._capped(self.fixed_bonus)

    def max_bonus(self, leader: bool = True) -> float:
        return self.get_bonus(leader=leader, with_card_bonus=True)


@dataclass(frozen=True, eq=False)
class CardDetail:
    """One owned card's full contribution context."""

    card_id: int
    character_id: int
    units: tuple[str, ...]
    attr: str
    rarity: str
    level: int
    skill_level: int
    master_rank: int
    trained: bool
    power: CardPowerCases
    skill: CardSkill
    event_bonus: CardEventBonus | None = None
    support_deck_bonus: float | None = None

    def max_event_bonus(self) -> float:
        if self.event_bonus is None:
            return 0.0
        return self.event_bonus.max_bonus(leader=True)

    def min_event_bonus(self) -> float:
        if self.event_bonus is None:
            return 0.0
        return self.event_bonus.min_bonus()


class CardConfig(BaseModel):
    """Build options applied to every owned card of one rarity."""

    disable: bool = Field(default=False, description="Leave this rarity out of the pool")
    rank_max: bool = Field(default=False, description="Treat cards as max level (and trained)")
    episode_read: bool = Field(default=False, description="Treat both side stories as read")
    master_max: bool = Field(default=False, description="Treat cards as master rank 5")
    skill_max: bool = Field(default=False, description="Treat cards as max skill level")
