from sekaideck.models.card import (
    CardConfig,
    CardDetail,
    CardEventBonus,
    CardPowerCases,
    CardPowerDetail,
)
from sekaideck.models.deck import (
    DeckCardDetail,
    DeckCardSkillDetail,
    DeckDetail,
    DeckPowerDetail,
    RecommendDeck,
    SupportDeckCard,
)
from sekaideck.models.event import EventConfig, EventType, LiveType
from sekaideck.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    DeckInvariantError,
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    OutcomeType,
    UnsupportedDataError,
    create_known_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from sekaideck.models.master import MusicMeta
from sekaideck.models.skill import (
    CardSkill,
    SkillCase,
    SkillCaseMap,
    SkillEffectKind,
    UnknownSkillEffectError,
)

__all__ = [
    # Cards
    "CardConfig",
    "CardDetail",
    "CardEventBonus",
    "CardPowerCases",
    "CardPowerDetail",
    # Decks
    "DeckCardDetail",
    "DeckCardSkillDetail",
    "DeckDetail",
    "DeckPowerDetail",
    "RecommendDeck",
    "SupportDeckCard",
    # Events
    "EventConfig",
    "EventType",
    "LiveType",
    "MusicMeta",
    # Failures
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "ApiResponse",
    "DeckInvariantError",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "NotFoundError",
    "OutcomeType",
    "UnsupportedDataError",
    "create_known_failure",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
    # Skills
    "CardSkill",
    "SkillCase",
    "SkillCaseMap",
    "SkillEffectKind",
    "UnknownSkillEffectError",
]
