"""
Card skill resolution.

Derives a card's SkillCaseMap for every deck composition it can meet:
the unconditional fallback, same-unit stacking, "reference" skills that
copy part of a teammate's skill, and skills that scale with the number
of distinct units in the deck.

INVARIANT: Every map carries an ("any", 1, 1) case.
INVARIANT: Every SkillEffectKind has exactly one handler (checked at import).
"""

import math
from collections.abc import Callable
from dataclasses import dataclass, field

from sekaideck.models.master import Card, Skill
from sekaideck.models.skill import (
    ANY_CASE,
    DIFFERENT_UNIT_CASE,
    MAX_DIFFERENT_UNIT_COUNT,
    REFERENCE_CASE,
    CardSkill,
    ResolvedEffect,
    SkillCase,
    SkillCaseMap,
    SkillEffectKind,
    effect_kind,
)
from sekaideck.models.user import UserCard, UserCharacter
from sekaideck.services.data_provider import DataRepository, find_or_raise

# Same-unit stacking covers decks with 1-5 members of the unit
MAX_SAME_UNIT_COUNT = 5

NO_SCORE_LIMIT = math.inf


@dataclass
class SkillTotals:
    """Accumulated effect values of one skill at the player's level."""

    skill_id: int
    is_post_training: bool
    score_up_basic: float = 0.0
    score_up_character_rank: float = 0.0
    life_recovery: float = 0.0
    same_unit: tuple[str, float] | None = None
    reference: tuple[float, float] | None = None  # (rate, max)
    different_unit: dict[int, float] | None = None
    character_rank: int = 0

    @property
    def fixed_score_up(self) -> float:
        return self.score_up_basic + self.score_up_character_rank


def _apply_score_up(totals: SkillTotals, effect: ResolvedEffect) -> None:
    if effect.same_unit is not None:
        totals.same_unit = effect.same_unit
    totals.score_up_basic = max(totals.score_up_basic, effect.value)


def _apply_life_recovery(totals: SkillTotals, effect: ResolvedEffect) -> None:
    totals.life_recovery += effect.value


def _apply_character_rank(totals: SkillTotals, effect: ResolvedEffect) -> None:
    if effect.character_rank is None or effect.character_rank > totals.character_rank:
        return
    totals.score_up_character_rank = max(totals.score_up_character_rank, effect.value)


def _apply_reference(totals: SkillTotals, effect: ResolvedEffect) -> None:
    totals.reference = (effect.value, effect.value2)


def _apply_unit_count(totals: SkillTotals, effect: ResolvedEffect) -> None:
    if totals.different_unit is None:
        totals.different_unit = {}
    if effect.unit_count is not None:
        totals.different_unit[effect.unit_count] = effect.value


def _apply_nothing(totals: SkillTotals, effect: ResolvedEffect) -> None:
    pass


EFFECT_HANDLERS: dict[SkillEffectKind, Callable[[SkillTotals, ResolvedEffect], None]] = {
    SkillEffectKind.SCORE_UP: _apply_score_up,
    SkillEffectKind.LIFE_RECOVERY: _apply_life_recovery,
    SkillEffectKind.CHARACTER_RANK_SCORE_UP: _apply_character_rank,
    SkillEffectKind.REFERENCE_SCORE_UP: _apply_reference,
    SkillEffectKind.UNIT_COUNT_SCORE_UP: _apply_unit_count,
    SkillEffectKind.JUDGMENT_UP: _apply_nothing,
}

_unhandled = set(SkillEffectKind) - set(EFFECT_HANDLERS)
if _unhandled:
    raise RuntimeError(f"Skill effect kinds without a handler: {sorted(k.value for k in _unhandled)}")


def resolve_effects(skill: Skill, skill_level: int) -> list[ResolvedEffect]:
    """
    Resolve a skill's effects at a skill level.

    Raises:
        NotFoundError: If an effect has no detail row for the level
        UnknownSkillEffectError: If an effect type has no handler
    """
    effects: list[ResolvedEffect] = []
    for effect in skill.skill_effects:
        kind = effect_kind(effect.skill_effect_type)
        detail = find_or_raise(
            effect.skill_effect_details,
            lambda d: d.level == skill_level,
            "Skill effect detail",
            detail=f"skill={skill.id} effect={effect.id} level={skill_level}",
        )
        same_unit = None
        if kind == SkillEffectKind.SCORE_UP and effect.skill_enhance is not None:
            same_unit = (
                effect.skill_enhance.skill_enhance_condition.unit,
                effect.skill_enhance.activate_effect_value,
            )
        effects.append(
            ResolvedEffect(
                kind=kind,
                value=detail.activate_effect_value,
                value2=detail.activate_effect_value2 or 0.0,
                character_rank=effect.activate_character_rank,
                unit_count=effect.activate_unit_count,
                same_unit=same_unit,
            )
        )
    return effects


def accumulate(
    skill: Skill,
    skill_level: int,
    character_rank: int,
    is_post_training: bool,
) -> SkillTotals:
    """Fold a skill's effects into totals."""
    totals = SkillTotals(
        skill_id=skill.id,
        is_post_training=is_post_training,
        character_rank=character_rank,
    )
    for effect in resolve_effects(skill, skill_level):
        EFFECT_HANDLERS[effect.kind](totals, effect)
    return totals


def build_case_map(totals: SkillTotals, score_up_limit: float = NO_SCORE_LIMIT) -> SkillCaseMap:
    """
    Expand totals into composition cases.

    Args:
        totals: Accumulated skill values
        score_up_limit: Hard cap on any case's score-up
    """
    cases = SkillCaseMap()
    self_fixed = totals.fixed_score_up
    capped = min(self_fixed, score_up_limit)
    base = SkillCase(
        skill_id=totals.skill_id,
        is_post_training=totals.is_post_training,
        fixed_score_bonus=capped,
        score_bonus_when_referenced=capped,
        life_recovery=totals.life_recovery,
    )
    cases.set(ANY_CASE, 1, 1, base)

    if totals.same_unit is not None:
        unit, per_member = totals.same_unit
        for count in range(1, MAX_SAME_UNIT_COUNT + 1):
            # A full unit of five counts every member, not just teammates
            multiplier = MAX_SAME_UNIT_COUNT if count == MAX_SAME_UNIT_COUNT else count - 1
            value = min(base.fixed_score_bonus + multiplier * per_member, score_up_limit)
            cases.set(
                unit,
                count,
                1,
                SkillCase(
                    skill_id=base.skill_id,
                    is_post_training=base.is_post_training,
                    fixed_score_bonus=value,
                    score_bonus_when_referenced=value,
                    life_recovery=base.life_recovery,
                ),
            )

    if totals.reference is not None:
        rate, max_bonus = totals.reference
        cases.set(
            REFERENCE_CASE,
            1,
            1,
            SkillCase(
                skill_id=base.skill_id,
                is_post_training=base.is_post_training,
                fixed_score_bonus=base.fixed_score_bonus,
                score_bonus_when_referenced=base.score_bonus_when_referenced,
                life_recovery=base.life_recovery,
                has_reference_effect=True,
                reference_rate=rate,
                reference_max_bonus=min(max_bonus, score_up_limit - self_fixed),
            ),
        )

    if totals.different_unit is not None:
        for count in range(0, MAX_DIFFERENT_UNIT_COUNT + 1):
            value = base.fixed_score_bonus
            if count > 0 and count in totals.different_unit:
                value = min(value + totals.different_unit[count], score_up_limit)
            cases.set(
                DIFFERENT_UNIT_CASE,
                count,
                1,
                SkillCase(
                    skill_id=base.skill_id,
                    is_post_training=base.is_post_training,
                    fixed_score_bonus=value,
                    score_bonus_when_referenced=value,
                    life_recovery=base.life_recovery,
                ),
            )

    return cases


@dataclass
class CardSkillCalculator:
    """Builds CardSkill maps from master and user data."""

    repository: DataRepository
    _ranks: dict[int, int] = field(default_factory=dict)

    async def get_card_skill(
        self,
        user_card: UserCard,
        card: Card,
        score_up_limit: float = NO_SCORE_LIMIT,
    ) -> CardSkill:
        """
        Resolve a card's skill maps.

        With a distinct post-training skill, the post-training map is the
        main map and the original skill goes to the pre-training map.

        Args:
            user_card: Owned card (skill level)
            card: Card master record
            score_up_limit: Cap on score-up (special competitive modes)

        Raises:
            NotFoundError: Missing skill, skill level detail, or character rank
        """
        character_rank = await self.get_character_rank(card.character_id)
        before = accumulate(
            await self.get_skill(card.skill_id),
            user_card.skill_level,
            character_rank,
            is_post_training=False,
        )
        after_id = card.special_training_skill_id
        if after_id is None or after_id == card.skill_id:
            return CardSkill(skill=build_case_map(before, score_up_limit))

        after = accumulate(
            await self.get_skill(after_id),
            user_card.skill_level,
            character_rank,
            is_post_training=True,
        )
        return CardSkill(
            skill=build_case_map(after, score_up_limit),
            pre_training=build_case_map(before, score_up_limit),
        )

    async def get_skill(self, skill_id: int) -> Skill:
        skills = await self.repository.master("skills", Skill)
        return find_or_raise(skills, lambda s: s.id == skill_id, "Skill", detail=f"id={skill_id}")

    async def get_character_rank(self, character_id: int) -> int:
        if character_id not in self._ranks:
            user_characters = await self.repository.user("userCharacters", UserCharacter)
            user_character = find_or_raise(
                user_characters,
                lambda c: c.character_id == character_id,
                "User character",
                detail=f"character_id={character_id}",
            )
            self._ranks[character_id] = user_character.character_rank
        return self._ranks[character_id]
