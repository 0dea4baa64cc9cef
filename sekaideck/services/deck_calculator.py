"""
Deck aggregation.

Turns an ordered card sequence (leader first) into a DeckDetail:
- each member's power case from what the full deck shares
- each member's skill from the deck's composition, including
  "reference" skills that copy part of the best teammate's skill
- event bonus with per-rarity card-bonus limits, leader-only bonuses,
  per-card caps and the world bloom different-attribute table
- world bloom support deck bonus from the cards left out of the deck

INVARIANT: Character ids in a deck are pairwise distinct (single-character
challenge decks are unique by card id instead). `validate_deck_cards`
checks this; the search hot loop relies on the search never building
such a sequence and does not re-check.
"""

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from sekaideck.config import (
    BONUS_PRECISION,
    MAX_MEMBER_COUNT,
    MIN_MEMBER_COUNT,
    settings,
)
from sekaideck.models.card import NO_SHARED_UNITS, CardDetail
from sekaideck.models.deck import (
    DeckCardDetail,
    DeckCardSkillDetail,
    DeckDetail,
    DeckPowerDetail,
    SupportDeckCard,
)
from sekaideck.models.event import EventConfig
from sekaideck.models.failure import DeckInvariantError
from sekaideck.models.master import VIRTUAL_SINGER_UNIT
from sekaideck.models.skill import DIFFERENT_UNIT_CASE, REFERENCE_CASE, SkillCase
from sekaideck.services.data_provider import DataRepository
from sekaideck.services.power_calculator import HonorService

logger = logging.getLogger(__name__)


class SupportDeckPool:
    """
    Support deck candidates ranked by support bonus.

    The support deck is the `size` best support cards that are not in the
    main deck. Ranking once up front keeps per-deck selection linear.
    """

    def __init__(self, all_cards: Sequence[CardDetail], size: int | None = None) -> None:
        self.size = settings.support_deck_size if size is None else size
        self.ranked = sorted(
            (c for c in all_cards if c.support_deck_bonus),
            key=lambda c: (-(c.support_deck_bonus or 0.0), c.card_id),
        )
        self._max_bonus = self.bonus(set())

    def select(self, exclude_card_ids: set[int]) -> list[CardDetail]:
        selected: list[CardDetail] = []
        for card in self.ranked:
            if len(selected) >= self.size:
                break
            if card.card_id in exclude_card_ids:
                continue
            selected.append(card)
        return selected

    def bonus(self, exclude_card_ids: set[int]) -> float:
        return sum(c.support_deck_bonus or 0.0 for c in self.select(exclude_card_ids))

    def max_bonus(self) -> float:
        """Ceiling on the support bonus of any deck."""
        return self._max_bonus


@dataclass(frozen=True)
class DeckBonusRules:
    """Event rules that shape the deck's total event bonus."""

    card_bonus_count_limits: dict[str, int] = field(default_factory=dict)
    different_attribute_bonuses: dict[int, float] = field(default_factory=dict)

    @classmethod
    def from_event(cls, config: EventConfig | None) -> "DeckBonusRules":
        if config is None:
            return cls()
        return cls(
            card_bonus_count_limits=config.card_bonus_count_limits,
            different_attribute_bonuses=config.different_attribute_bonuses,
        )

    def max_different_attribute_bonus(self) -> float:
        # Attribute counts missing from the table add nothing
        return max([0.0, *self.different_attribute_bonuses.values()])


def validate_deck_cards(cards: Sequence[CardDetail], same_character: bool = False) -> None:
    """
    Check a card sequence against the deck invariants.

    Args:
        cards: Candidate deck, leader first
        same_character: Single-character deck (unique by card id)

    Raises:
        DeckInvariantError: On a bad member count or duplicate members
    """
    if not MIN_MEMBER_COUNT <= len(cards) <= MAX_MEMBER_COUNT:
        raise DeckInvariantError(
            f"A deck needs {MIN_MEMBER_COUNT}-{MAX_MEMBER_COUNT} cards, got {len(cards)}"
        )
    card_ids = [c.card_id for c in cards]
    if len(set(card_ids)) != len(card_ids):
        raise DeckInvariantError("Deck contains the same card twice", detail=str(card_ids))
    if same_character:
        return
    character_ids = [c.character_id for c in cards]
    if len(set(character_ids)) != len(character_ids):
        raise DeckInvariantError(
            "Deck contains the same character twice", detail=str(character_ids)
        )


def _best_case(candidates: list[SkillCase]) -> SkillCase:
    return max(candidates, key=lambda c: c.fixed_score_bonus)


def _resolve_member_skills(cards: Sequence[CardDetail]) -> list[DeckCardSkillDetail]:
    """Pick each member's best skill case for this composition."""
    unit_counts: Counter[str] = Counter(u for card in cards for u in card.units)

    fixed_cases: list[SkillCase] = []
    reference_cases: list[SkillCase | None] = []
    for index, card in enumerate(cards):
        teammate_units = {
            u
            for other_index, other in enumerate(cards)
            if other_index != index
            for u in other.units
            if u != VIRTUAL_SINGER_UNIT
        }
        candidates: list[SkillCase] = []
        references: list[SkillCase] = []
        for skill_map in card.skill.variants():
            for unit in card.units:
                candidates.append(skill_map.resolve(unit, unit_counts[unit]))
            if skill_map.has(DIFFERENT_UNIT_CASE):
                candidates.append(skill_map.resolve(DIFFERENT_UNIT_CASE, len(teammate_units)))
            if skill_map.has(REFERENCE_CASE):
                references.append(skill_map.resolve(REFERENCE_CASE, 1))
        fixed_cases.append(_best_case(candidates))
        reference_cases.append(_best_case(references) if references else None)

    skills: list[DeckCardSkillDetail] = []
    for index, fixed in enumerate(fixed_cases):
        chosen = fixed
        score_up = fixed.fixed_score_bonus
        reference = reference_cases[index]
        if reference is not None:
            best_teammate = max(
                (c.score_bonus_when_referenced for i, c in enumerate(fixed_cases) if i != index),
                default=0.0,
            )
            boosted = reference.fixed_score_bonus + min(
                best_teammate * reference.reference_rate / 100,
                reference.reference_max_bonus,
            )
            if boosted >= score_up:
                chosen = reference
                score_up = boosted
        skills.append(DeckCardSkillDetail.from_case(chosen, score_up))
    return skills


def _card_bonus_allowed(cards: Sequence[CardDetail], limits: dict[str, int]) -> set[int]:
    """Card ids whose event-card bonus counts under the per-rarity limits."""
    allowed: set[int] = set()
    by_rarity: dict[str, list[CardDetail]] = {}
    for card in cards:
        if card.event_bonus is None or card.event_bonus.card_bonus <= 0:
            continue
        by_rarity.setdefault(card.rarity, []).append(card)
    for rarity, group in by_rarity.items():
        limit = limits.get(rarity)
        group.sort(key=lambda c: (-(c.event_bonus.card_bonus if c.event_bonus else 0.0), c.card_id))
        kept = group if limit is None else group[:limit]
        allowed.update(c.card_id for c in kept)
    return allowed


class DeckComposition:
    """
    The leader-independent part of a deck aggregate.

    Skills, power cases, card-bonus allowances and the support deck depend
    only on which cards are in the deck, not on who leads. Build one per
    card set and `arrange` it once per leader.
    """

    def __init__(
        self,
        cards: Sequence[CardDetail],
        honor_bonus: int = 0,
        rules: DeckBonusRules | None = None,
        support_pool: SupportDeckPool | None = None,
    ) -> None:
        rules = rules or DeckBonusRules()
        self.cards = tuple(cards)
        self.honor_bonus = honor_bonus

        full_deck = len(cards) == MAX_MEMBER_COUNT
        unit_counts: Counter[str] = Counter(u for card in cards for u in card.units)
        attrs = {card.attr for card in cards}
        shared_attr = full_deck and len(attrs) == 1

        self.skills = _resolve_member_skills(cards)
        self.powers = [
            card.power.get(
                frozenset(u for u in card.units if unit_counts[u] == len(cards))
                if full_deck
                else NO_SHARED_UNITS,
                shared_attr,
            )
            for card in cards
        ]

        self.has_event = any(card.event_bonus is not None for card in cards)
        self.allowed = (
            _card_bonus_allowed(cards, rules.card_bonus_count_limits) if self.has_event else set()
        )
        self.attribute_bonus = rules.different_attribute_bonuses.get(len(attrs), 0.0)

        self.support_bonus = None
        if support_pool is not None:
            self.support_bonus = round(
                support_pool.bonus({c.card_id for c in cards}), BONUS_PRECISION
            )

    def arrange(self, leader_index: int = 0) -> DeckDetail:
        """The DeckDetail with `cards[leader_index]` leading, others in order."""
        order = [leader_index, *(i for i in range(len(self.cards)) if i != leader_index)]

        members: list[DeckCardDetail] = []
        base = area = character = 0
        event_bonus_sum = 0.0
        life_recovery = 0.0
        for position, index in enumerate(order):
            card = self.cards[index]
            power = self.powers[index]
            skill = self.skills[index]
            base += power.base
            area += power.area_item_bonus
            character += power.character_bonus
            life_recovery += skill.life_recovery

            member_bonus = None
            if card.event_bonus is not None:
                member_bonus = card.event_bonus.get_bonus(
                    leader=position == 0, with_card_bonus=card.card_id in self.allowed
                )
                event_bonus_sum += member_bonus

            members.append(
                DeckCardDetail(
                    card_id=card.card_id,
                    character_id=card.character_id,
                    units=card.units,
                    attr=card.attr,
                    level=card.level,
                    skill_level=card.skill_level,
                    master_rank=card.master_rank,
                    power=power,
                    skill=skill,
                    event_bonus=member_bonus,
                )
            )

        event_bonus = None
        if self.has_event:
            event_bonus = round(event_bonus_sum + self.attribute_bonus, BONUS_PRECISION)

        return DeckDetail(
            cards=tuple(members),
            power=DeckPowerDetail(
                base=base,
                area_item_bonus=area,
                character_bonus=character,
                honor_bonus=self.honor_bonus,
            ),
            event_bonus=event_bonus,
            support_deck_bonus=self.support_bonus,
            life_recovery=life_recovery,
        )


def get_deck_detail_by_cards(
    cards: Sequence[CardDetail],
    honor_bonus: int = 0,
    rules: DeckBonusRules | None = None,
    support_pool: SupportDeckPool | None = None,
) -> DeckDetail:
    """
    Aggregate an ordered card sequence into a DeckDetail.

    Does not validate the deck invariants; see `validate_deck_cards`.

    Args:
        cards: Members, leader first
        honor_bonus: Flat power from honors
        rules: Event bonus rules (card-bonus limits, attribute table)
        support_pool: Ranked support candidates (world bloom only)
    """
    return DeckComposition(cards, honor_bonus, rules, support_pool).arrange(0)


@dataclass
class DeckCalculator:
    """Validating deck aggregation backed by user data (honors)."""

    repository: DataRepository
    honor_service: HonorService = field(init=False)

    def __post_init__(self) -> None:
        self.honor_service = HonorService(self.repository)

    async def get_honor_bonus_power(self) -> int:
        return await self.honor_service.get_honor_bonus_power()

    async def get_deck_detail(
        self,
        cards: Sequence[CardDetail],
        all_cards: Sequence[CardDetail],
        event_config: EventConfig | None = None,
        same_character: bool = False,
    ) -> DeckDetail:
        """
        Aggregate a hand-built deck.

        Raises:
            DeckInvariantError: If the sequence breaks a deck invariant
        """
        validate_deck_cards(cards, same_character=same_character)
        support_pool = None
        if event_config is not None and event_config.has_support_deck:
            support_pool = SupportDeckPool(all_cards)
        return get_deck_detail_by_cards(
            cards,
            honor_bonus=await self.get_honor_bonus_power(),
            rules=DeckBonusRules.from_event(event_config),
            support_pool=support_pool,
        )


def select_support_deck(
    main_cards: Sequence[CardDetail],
    all_cards: Sequence[CardDetail],
    size: int | None = None,
) -> list[SupportDeckCard]:
    """The support deck that goes with a main deck."""
    pool = SupportDeckPool(all_cards, size)
    return [
        SupportDeckCard(
            card_id=c.card_id,
            character_id=c.character_id,
            support_deck_bonus=c.support_deck_bonus or 0.0,
        )
        for c in pool.select({c.card_id for c in main_cards})
    ]
