"""
MySEKAI event points.

Both floors are part of the game's formula: the power bonus is floored to
one decimal and the final product is floored before scaling. The search
ranks by the unfloored internal value so small gains still count.
"""

import math
from dataclasses import dataclass

from sekaideck.analysis.score import ScoreFunction
from sekaideck.models.deck import DeckDetail
from sekaideck.models.master import MusicMeta

FLOOR_EPSILON = 1e-6
POWER_BONUS_DIVISOR = 450000
POINT_SCALE = 500


@dataclass(frozen=True, slots=True)
class MysekaiScore:
    """
    Attributes:
        power_bonus: Power multiplier floored to one decimal
        event_point: Points as the game awards them
        internal_point: Unfloored product used for ranking
    """

    power_bonus: float
    event_point: int
    internal_point: float


def get_power_bonus(power: int) -> float:
    return math.floor((1 + power / POWER_BONUS_DIVISOR) * 10 + FLOOR_EPSILON) / 10


def get_mysekai_score(deck: DeckDetail) -> MysekaiScore:
    power_bonus = get_power_bonus(deck.power.total)
    bonus_rate = math.floor(deck.total_event_bonus + FLOOR_EPSILON) / 100
    product = power_bonus * (1 + bonus_rate)
    return MysekaiScore(
        power_bonus=power_bonus,
        event_point=math.floor(product + FLOOR_EPSILON) * POINT_SCALE,
        internal_point=product * POINT_SCALE,
    )


def mysekai_point_function() -> ScoreFunction:
    def score(music_meta: MusicMeta, deck: DeckDetail) -> float:
        return get_mysekai_score(deck).internal_point

    return score
