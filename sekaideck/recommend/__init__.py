from sekaideck.recommend.bloom_support import BloomSupportDeckRecommend
from sekaideck.recommend.bonus_target import EventBonusDeckRecommend
from sekaideck.recommend.challenge import ChallengeLiveDeckRecommend
from sekaideck.recommend.config import (
    DeckRecommendConfig,
    EventBonusDeckRecommendConfig,
    validate_member_count,
)
from sekaideck.recommend.event import EventDeckRecommend
from sekaideck.recommend.mysekai import MysekaiDeckRecommend
from sekaideck.recommend.search import (
    BestDeckSearch,
    BestDeckSearchState,
    BonusSearchState,
    BonusTargetSearch,
)

__all__ = [
    "BestDeckSearch",
    "BestDeckSearchState",
    "BloomSupportDeckRecommend",
    "BonusSearchState",
    "BonusTargetSearch",
    "ChallengeLiveDeckRecommend",
    "DeckRecommendConfig",
    "EventBonusDeckRecommend",
    "EventBonusDeckRecommendConfig",
    "EventDeckRecommend",
    "MysekaiDeckRecommend",
    "validate_member_count",
]
