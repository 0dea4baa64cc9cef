"""
Live score estimation.

Expected live score of a deck on one song:

    floor(power * 4 * (base_rate + sum(slot_weight * skill / 100)))

Solo and auto lives fire each member's skill once in a random order and
the leader's skill again at the end, so the five member slots use the
mean skill value. Multi lives field the leader's skill boosted by 20% of
every other member's skill in every slot.
"""

import math

from sekaideck.analysis.score import ScoreFunction
from sekaideck.models.deck import DeckDetail
from sekaideck.models.event import LiveType
from sekaideck.models.master import MusicMeta

# Share of the other members' skills added to the leader's in multi lives
MULTI_TEAMMATE_SKILL_RATE = 0.2

SKILL_SLOT_COUNT = 6


def get_base_rate(music_meta: MusicMeta, live_type: LiveType) -> float:
    if live_type == LiveType.AUTO:
        return music_meta.base_score_auto
    if live_type in (LiveType.MULTI, LiveType.CHEERFUL):
        return music_meta.base_score + music_meta.fever_score
    return music_meta.base_score


def get_slot_weights(music_meta: MusicMeta, live_type: LiveType) -> tuple[float, ...]:
    if live_type == LiveType.AUTO:
        return music_meta.skill_score_auto
    if live_type in (LiveType.MULTI, LiveType.CHEERFUL):
        return music_meta.skill_score_multi
    return music_meta.skill_score_solo


def get_slot_skills(deck: DeckDetail, live_type: LiveType) -> list[float]:
    """Skill value firing in each of the six activation slots."""
    skills = [c.skill.score_up for c in deck.cards]
    leader = skills[0]
    if live_type in (LiveType.MULTI, LiveType.CHEERFUL):
        boosted = leader + MULTI_TEAMMATE_SKILL_RATE * sum(skills[1:])
        return [boosted] * SKILL_SLOT_COUNT
    mean = sum(skills) / len(skills)
    return [mean] * (SKILL_SLOT_COUNT - 1) + [leader]


def get_live_score(music_meta: MusicMeta, deck: DeckDetail, live_type: LiveType) -> int:
    """Expected live score of a deck."""
    weights = get_slot_weights(music_meta, live_type)
    skill_rate = sum(
        weight * skill / 100 for weight, skill in zip(weights, get_slot_skills(deck, live_type))
    )
    return math.floor(deck.power.total * 4 * (get_base_rate(music_meta, live_type) + skill_rate))


def live_score_function(live_type: LiveType) -> ScoreFunction:
    def score(music_meta: MusicMeta, deck: DeckDetail) -> float:
        return get_live_score(music_meta, deck, live_type)

    return score
