"""
Event point calculation.

Points per play for marathon, cheerful carnival and world bloom events.
Floors follow the game's integer arithmetic; the 1e-6 nudge keeps
products such as 1.15 * 100 from flooring one point short.
"""

import math

from sekaideck.analysis.live_score import get_live_score
from sekaideck.analysis.score import ScoreFunction
from sekaideck.models.deck import DeckDetail
from sekaideck.models.event import EventType, LiveType
from sekaideck.models.master import MusicMeta

FLOOR_EPSILON = 1e-6

SOLO_BASE_POINT = 100
SOLO_SCORE_STEP = 20000

MULTI_BASE_POINT = 114
CHEERFUL_BASE_POINT = 110
MULTI_SCORE_STEP = 17000
MULTI_OTHER_SCORE_CAP = 5200000
MULTI_OTHER_SCORE_STEP = 400000
MULTI_OTHER_PLAYERS = 4

CHEERFUL_LIFE_BASE = 1000
CHEERFUL_LIFE_RATE_BASE = 1.15
CHEERFUL_LIFE_DIVISOR = 5000
CHEERFUL_LIFE_RATE_MIN = 0.1
CHEERFUL_LIFE_RATE_MAX = 0.2


def get_base_point(score: int, live_type: LiveType) -> int:
    """
    Points before the song rate and event bonus.

    Multi lives also count the other four players' score; they are assumed
    to play as well as this deck.
    """
    if live_type in (LiveType.SOLO, LiveType.AUTO):
        return SOLO_BASE_POINT + score // SOLO_SCORE_STEP
    base = CHEERFUL_BASE_POINT if live_type == LiveType.CHEERFUL else MULTI_BASE_POINT
    other_score = min(score * MULTI_OTHER_PLAYERS, MULTI_OTHER_SCORE_CAP)
    return base + score // MULTI_SCORE_STEP + other_score // MULTI_OTHER_SCORE_STEP


def get_life_rate(deck: DeckDetail, event_type: EventType, live_type: LiveType) -> float:
    if event_type != EventType.CHEERFUL or live_type != LiveType.CHEERFUL:
        return 1.0
    life = CHEERFUL_LIFE_BASE + deck.life_recovery
    bonus = min(max(life / CHEERFUL_LIFE_DIVISOR, CHEERFUL_LIFE_RATE_MIN), CHEERFUL_LIFE_RATE_MAX)
    return CHEERFUL_LIFE_RATE_BASE + bonus


def get_event_bonus(deck: DeckDetail, event_type: EventType) -> float:
    """Bonus feeding the point formula (world bloom adds the support deck)."""
    if event_type == EventType.WORLD_BLOOM:
        return deck.total_event_bonus
    return deck.event_bonus or 0.0


def get_event_point(
    music_meta: MusicMeta,
    deck: DeckDetail,
    event_type: EventType,
    live_type: LiveType,
) -> int:
    """Event points one play of the song earns with this deck."""
    score = get_live_score(music_meta, deck, live_type)
    base = get_base_point(score, live_type)
    music_rate = music_meta.event_rate / 100
    bonus = get_event_bonus(deck, event_type)
    point = math.floor(base * music_rate * (1 + bonus / 100) + FLOOR_EPSILON)
    return math.floor(point * get_life_rate(deck, event_type, live_type))


def event_point_function(event_type: EventType, live_type: LiveType) -> ScoreFunction:
    def score(music_meta: MusicMeta, deck: DeckDetail) -> float:
        return get_event_point(music_meta, deck, event_type, live_type)

    return score
