"""
Deck recommendation endpoints.

Every endpoint answers with the ApiResponse envelope:
- success with a (possibly empty) list of decks
- known failure for missing data or an invalid deck size
- unknown failure for anything else
"""

import logging
from collections.abc import Awaitable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from sekaideck.config import DEFAULT_MEMBER_COUNT, DEFAULT_RESULT_LIMIT
from sekaideck.models.card import CardConfig
from sekaideck.models.deck import RecommendDeck
from sekaideck.models.event import LiveType
from sekaideck.models.failure import (
    ApiResponse,
    KnownError,
    create_known_failure,
    create_success,
    create_unknown_failure,
)
from sekaideck.models.master import MusicMeta
from sekaideck.recommend import (
    ChallengeLiveDeckRecommend,
    DeckRecommendConfig,
    EventBonusDeckRecommend,
    EventBonusDeckRecommendConfig,
    EventDeckRecommend,
    MysekaiDeckRecommend,
)
from sekaideck.services.data_provider import DataProvider, get_data_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckRequest(BaseModel):
    """Options shared by every recommendation request."""

    music_meta: MusicMeta
    member: int = DEFAULT_MEMBER_COUNT
    card_config: dict[str, CardConfig] = Field(default_factory=dict)


class EventDeckRequest(DeckRequest):
    event_id: int
    live_type: LiveType = LiveType.MULTI
    special_character_id: int = 0
    limit: int = Field(default=DEFAULT_RESULT_LIMIT, ge=1, le=100)


class ChallengeDeckRequest(DeckRequest):
    character_id: int
    limit: int = Field(default=DEFAULT_RESULT_LIMIT, ge=1, le=100)


class MysekaiDeckRequest(DeckRequest):
    event_id: int
    limit: int = Field(default=DEFAULT_RESULT_LIMIT, ge=1, le=100)


class BonusDeckRequest(DeckRequest):
    event_id: int
    target_bonus: float
    max_bonus: float | None = None
    live_type: LiveType = LiveType.MULTI
    special_character_id: int = 0
    specific_bonuses: list[float] | None = None


class DeckCardResponse(BaseModel):
    """One member of a recommended deck."""

    card_id: int
    character_id: int
    level: int
    skill_level: int
    master_rank: int
    power: int
    skill_score_up: float
    event_bonus: float | None = None


class DeckResponse(BaseModel):
    """A recommended deck, leader first."""

    card_ids: list[int]
    score: float
    power: int
    event_bonus: float | None = None
    support_deck_bonus: float | None = None
    life_recovery: float = 0.0
    cards: list[DeckCardResponse]

    @classmethod
    def from_recommend(cls, recommend: RecommendDeck) -> "DeckResponse":
        deck = recommend.deck
        return cls(
            card_ids=list(deck.card_ids),
            score=recommend.score,
            power=deck.power.total,
            event_bonus=deck.event_bonus,
            support_deck_bonus=deck.support_deck_bonus,
            life_recovery=deck.life_recovery,
            cards=[
                DeckCardResponse(
                    card_id=c.card_id,
                    character_id=c.character_id,
                    level=c.level,
                    skill_level=c.skill_level,
                    master_rank=c.master_rank,
                    power=c.power.total,
                    skill_score_up=c.skill.score_up,
                    event_bonus=c.event_bonus,
                )
                for c in deck.cards
            ],
        )


DeckListResponse = ApiResponse[list[DeckResponse]]


async def _respond(response: Response, pending: Awaitable[list[RecommendDeck]]) -> ApiResponse[Any]:
    """Run a recommendation and wrap the outcome in the envelope."""
    try:
        decks = await pending
    except KnownError as e:
        logger.info("Recommendation failed: %s (%s)", e.message, e.detail)
        response.status_code = e.status_code
        return create_known_failure(e)
    except Exception as e:
        logger.exception("Unexpected error during recommendation")
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return create_unknown_failure(e)
    return create_success([DeckResponse.from_recommend(d) for d in decks])


@router.post("/event", response_model=DeckListResponse)
async def recommend_event_deck(
    request: EventDeckRequest,
    response: Response,
    provider: Annotated[DataProvider, Depends(get_data_provider)],
) -> ApiResponse[Any]:
    """Decks earning the most event points per play."""
    config = DeckRecommendConfig(
        music_meta=request.music_meta,
        member=request.member,
        card_config=request.card_config,
        limit=request.limit,
    )
    return await _respond(
        response,
        EventDeckRecommend(provider).recommend_event_deck(
            request.event_id, request.live_type, config, request.special_character_id
        ),
    )


@router.post("/challenge", response_model=DeckListResponse)
async def recommend_challenge_deck(
    request: ChallengeDeckRequest,
    response: Response,
    provider: Annotated[DataProvider, Depends(get_data_provider)],
) -> ApiResponse[Any]:
    """Highest-scoring single-character decks for a challenge live."""
    config = DeckRecommendConfig(
        music_meta=request.music_meta,
        member=request.member,
        card_config=request.card_config,
        limit=request.limit,
    )
    return await _respond(
        response,
        ChallengeLiveDeckRecommend(provider).recommend_challenge_live_deck(request.character_id, config),
    )


@router.post("/mysekai", response_model=DeckListResponse)
async def recommend_mysekai_deck(
    request: MysekaiDeckRequest,
    response: Response,
    provider: Annotated[DataProvider, Depends(get_data_provider)],
) -> ApiResponse[Any]:
    """Decks earning the most MySEKAI event points."""
    config = DeckRecommendConfig(
        music_meta=request.music_meta,
        member=request.member,
        card_config=request.card_config,
        limit=request.limit,
    )
    return await _respond(
        response,
        MysekaiDeckRecommend(provider).recommend_mysekai_deck(request.event_id, config),
    )


@router.post("/bonus", response_model=DeckListResponse)
async def recommend_bonus_deck(
    request: BonusDeckRequest,
    response: Response,
    provider: Annotated[DataProvider, Depends(get_data_provider)],
) -> ApiResponse[Any]:
    """
    Decks whose event bonus hits a target value or range.

    Returns one deck per distinct bonus, ascending.
    """
    config = EventBonusDeckRecommendConfig(
        music_meta=request.music_meta,
        member=request.member,
        card_config=request.card_config,
        specific_bonuses=request.specific_bonuses,
    )
    return await _respond(
        response,
        EventBonusDeckRecommend(provider).recommend_event_bonus_deck(
            request.event_id,
            request.target_bonus,
            request.live_type,
            config,
            request.special_character_id,
            request.max_bonus,
        ),
    )
