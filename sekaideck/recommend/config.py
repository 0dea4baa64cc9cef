"""Caller-facing recommendation options."""

from dataclasses import dataclass, field

from sekaideck.config import DEFAULT_MEMBER_COUNT, DEFAULT_RESULT_LIMIT, MAX_MEMBER_COUNT, MIN_MEMBER_COUNT
from sekaideck.models.card import CardConfig
from sekaideck.models.failure import DeckInvariantError
from sekaideck.models.master import MusicMeta
from sekaideck.recommend.search import DebugLog


@dataclass
class DeckRecommendConfig:
    """
    Options for best-deck recommendation.

    Attributes:
        music_meta: Song being played
        member: Deck size (2-5)
        card_config: Build options keyed by rarity
        limit: Number of decks to return
        debug_log: Optional progress sink, observational only
    """

    music_meta: MusicMeta
    member: int = DEFAULT_MEMBER_COUNT
    card_config: dict[str, CardConfig] = field(default_factory=dict)
    limit: int = DEFAULT_RESULT_LIMIT
    debug_log: DebugLog | None = None


@dataclass
class EventBonusDeckRecommendConfig:
    """
    Options for bonus-target recommendation.

    Attributes:
        music_meta: Song being played
        member: Deck size (2-5)
        card_config: Build options keyed by rarity
        specific_bonuses: Only accept these bonus values (matched within 0.001)
        debug_log: Optional progress sink, observational only
    """

    music_meta: MusicMeta
    member: int = DEFAULT_MEMBER_COUNT
    card_config: dict[str, CardConfig] = field(default_factory=dict)
    specific_bonuses: list[float] | None = None
    debug_log: DebugLog | None = None


def validate_member_count(member: int) -> None:
    """
    Raises:
        DeckInvariantError: If the deck size is outside 2-5
    """
    if not MIN_MEMBER_COUNT <= member <= MAX_MEMBER_COUNT:
        raise DeckInvariantError(
            f"Deck size must be {MIN_MEMBER_COUNT}-{MAX_MEMBER_COUNT}, got {member}"
        )
