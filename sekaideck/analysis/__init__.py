from sekaideck.analysis.event_point import event_point_function, get_event_point
from sekaideck.analysis.live_score import get_live_score, live_score_function
from sekaideck.analysis.mysekai import MysekaiScore, get_mysekai_score, mysekai_point_function
from sekaideck.analysis.score import ScoreFunction

__all__ = [
    "MysekaiScore",
    "ScoreFunction",
    "event_point_function",
    "get_event_point",
    "get_live_score",
    "get_mysekai_score",
    "live_score_function",
    "mysekai_point_function",
]
