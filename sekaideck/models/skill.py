"""
Skill Case Models.

A card's skill contribution depends on the deck it sits in. The skill
resolver precomputes one SkillCase per composition case; the deck
aggregator later picks the case that applies.

Case keys are (composition_class, member_count, attribute_member_count):
- ("any", 1, 1): unconditional fallback, ALWAYS present
- ("ref", 1, 1): skill copies part of a teammate's skill
- ("diff", n, 1): bonus by number of distinct units among teammates (n <= 2)
- (unit, n, 1): same-unit stacking with n members of that unit

INVARIANT: Lookup follows the fixed rule order in SKILL_CASE_RULES.
A later rule is never consulted once an earlier rule hits.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from sekaideck.models.failure import NotFoundError, UnsupportedDataError

ANY_CASE = "any"
REFERENCE_CASE = "ref"
DIFFERENT_UNIT_CASE = "diff"

# Highest distinct-unit tier a unit-count skill distinguishes
MAX_DIFFERENT_UNIT_COUNT = 2

CaseKey = tuple[str, int, int]


class SkillEffectKind(str, Enum):
    """Closed set of skill effect kinds the resolver understands."""

    SCORE_UP = "score_up"
    LIFE_RECOVERY = "life_recovery"
    CHARACTER_RANK_SCORE_UP = "character_rank_score_up"
    REFERENCE_SCORE_UP = "reference_score_up"
    UNIT_COUNT_SCORE_UP = "unit_count_score_up"
    JUDGMENT_UP = "judgment_up"


# Raw master data effect type -> kind
RAW_EFFECT_TYPES: dict[str, SkillEffectKind] = {
    "score_up": SkillEffectKind.SCORE_UP,
    "score_up_condition_life": SkillEffectKind.SCORE_UP,
    "score_up_keep": SkillEffectKind.SCORE_UP,
    "life_recovery": SkillEffectKind.LIFE_RECOVERY,
    "score_up_character_rank": SkillEffectKind.CHARACTER_RANK_SCORE_UP,
    "other_member_score_up_reference_rate": SkillEffectKind.REFERENCE_SCORE_UP,
    "score_up_unit_count": SkillEffectKind.UNIT_COUNT_SCORE_UP,
    "judgment_up": SkillEffectKind.JUDGMENT_UP,
}


class UnknownSkillEffectError(UnsupportedDataError):
    """Raised when master data carries an effect type with no handler."""

    def __init__(self, effect_type: str) -> None:
        self.effect_type = effect_type
        super().__init__(f"Unknown skill effect type: {effect_type}", detail=effect_type)


def effect_kind(raw_type: str) -> SkillEffectKind:
    """Map a raw effect type to its kind."""
    try:
        return RAW_EFFECT_TYPES[raw_type]
    except KeyError:
        raise UnknownSkillEffectError(raw_type) from None


@dataclass(frozen=True, slots=True)
class ResolvedEffect:
    """
    One skill effect at the player's skill level.

    Payload fields are only meaningful for their kind:
        value: score-up / life / rank bonus / reference rate / unit-count bonus
        value2: reference max bonus
        character_rank: threshold for CHARACTER_RANK_SCORE_UP
        unit_count: distinct-unit count for UNIT_COUNT_SCORE_UP
        same_unit: (unit, per-member value) for stacking SCORE_UP
    """

    kind: SkillEffectKind
    value: float
    value2: float = 0.0
    character_rank: int | None = None
    unit_count: int | None = None
    same_unit: tuple[str, float] | None = None


@dataclass(frozen=True, slots=True)
class SkillCase:
    """Skill contribution of one card under one composition case."""

    skill_id: int
    is_post_training: bool
    fixed_score_bonus: float
    score_bonus_when_referenced: float
    life_recovery: float
    has_reference_effect: bool = False
    reference_rate: float = 0.0
    reference_max_bonus: float = 0.0

    def effect_values(self) -> tuple[float, ...]:
        """Everything about the case that can change a deck's score."""
        return (
            self.fixed_score_bonus,
            self.score_bonus_when_referenced,
            self.life_recovery,
            float(self.has_reference_effect),
            self.reference_rate,
            self.reference_max_bonus,
        )


def _reference_rule(context: str, count: int) -> CaseKey | None:
    return (REFERENCE_CASE, 1, 1) if context == REFERENCE_CASE else None


def _different_unit_rule(context: str, count: int) -> CaseKey | None:
    if context != DIFFERENT_UNIT_CASE:
        return None
    return (DIFFERENT_UNIT_CASE, min(count, MAX_DIFFERENT_UNIT_COUNT), 1)


def _unit_rule(context: str, count: int) -> CaseKey | None:
    return (context, count, 1)


def _fallback_rule(context: str, count: int) -> CaseKey | None:
    return (ANY_CASE, 1, 1)


# Evaluated in order; the first rule whose key exists wins
SKILL_CASE_RULES: tuple[Callable[[str, int], CaseKey | None], ...] = (
    _reference_rule,
    _different_unit_rule,
    _unit_rule,
    _fallback_rule,
)


@dataclass
class SkillCaseMap:
    """Composition case -> SkillCase, with ordered-rule resolution."""

    _cases: dict[CaseKey, SkillCase] = field(default_factory=dict)

    def set(self, context: str, member_count: int, attr_member_count: int, case: SkillCase) -> None:
        self._cases[(context, member_count, attr_member_count)] = case

    def get_exact(self, key: CaseKey) -> SkillCase | None:
        return self._cases.get(key)

    def has(self, context: str) -> bool:
        """True if any case is stored under this composition class."""
        return any(key[0] == context for key in self._cases)

    def keys(self) -> list[CaseKey]:
        return list(self._cases)

    def cases(self) -> list[SkillCase]:
        return list(self._cases.values())

    def effects(self) -> dict[CaseKey, tuple[float, ...]]:
        """Case values by key, without skill ids."""
        return {key: case.effect_values() for key, case in self._cases.items()}

    def resolve(self, context: str, count: int) -> SkillCase:
        """
        Resolve the case for a composition context.

        Args:
            context: "ref", "diff", or a concrete unit name
            count: teammate/member count for the context

        Raises:
            NotFoundError: If no rule produces a stored key
        """
        for rule in SKILL_CASE_RULES:
            key = rule(context, count)
            if key is None:
                continue
            case = self._cases.get(key)
            if case is not None:
                return case
        raise NotFoundError("Skill case", detail=f"context={context} count={count}")

    def max_score_bonus(self) -> float:
        """Ceiling on this map's score-up over every composition."""
        best = 0.0
        for case in self._cases.values():
            value = case.fixed_score_bonus
            if case.has_reference_effect:
                value += case.reference_max_bonus
            best = max(best, value)
        return best


@dataclass
class CardSkill:
    """
    A card's skill maps.

    `skill` holds the post-training skill, or the only skill when the card
    has one. `pre_training` is populated only when the two differ.
    """

    skill: SkillCaseMap = field(default_factory=SkillCaseMap)
    pre_training: SkillCaseMap | None = None

    @property
    def has_pre_training(self) -> bool:
        return self.pre_training is not None

    def get_skill(self, context: str, count: int) -> SkillCase:
        return self.skill.resolve(context, count)

    def get_pre_training_skill(self, context: str, count: int) -> SkillCase:
        if self.pre_training is None:
            raise NotFoundError("Pre-training skill")
        return self.pre_training.resolve(context, count)

    def variants(self) -> list[SkillCaseMap]:
        """Every skill map the card can field."""
        if self.pre_training is None:
            return [self.skill]
        return [self.skill, self.pre_training]

    def max_score_bonus(self) -> float:
        return max(m.max_score_bonus() for m in self.variants())

    def same_effects(self, other: "CardSkill") -> bool:
        """True if both skills score identically in every deck."""
        return [m.effects() for m in self.variants()] == [m.effects() for m in other.variants()]
