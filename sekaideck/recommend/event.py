import logging

from sekaideck.analysis.event_point import event_point_function
from sekaideck.filtering.candidate_pool import build_candidate_pool
from sekaideck.models.deck import RecommendDeck
from sekaideck.models.event import LiveType
from sekaideck.recommend.base import BaseDeckRecommend
from sekaideck.recommend.config import DeckRecommendConfig, validate_member_count
from sekaideck.recommend.search import BestDeckSearch
from sekaideck.services.deck_calculator import DeckBonusRules, SupportDeckPool
from sekaideck.services.event_service import EventService

logger = logging.getLogger(__name__)


class EventDeckRecommend(BaseDeckRecommend):
    """Decks that earn the most event points per play."""

    async def recommend_event_deck(
        self,
        event_id: int,
        live_type: LiveType,
        config: DeckRecommendConfig,
        special_character_id: int = 0,
    ) -> list[RecommendDeck]:
        """
        Recommend event decks.

        Args:
            event_id: Event master id
            live_type: Live mode the points are earned in
            config: Song, deck size, build options, result limit
            special_character_id: World bloom chapter character (0 for none)

        Returns:
            Up to config.limit decks, best first (empty if none can be built)

        Raises:
            NotFoundError: If master or user records are missing
            DeckInvariantError: If the deck size is outside 2-5
        """
        validate_member_count(config.member)
        debug_log = self.debug_sink(config.debug_log)
        repository = self.new_repository()

        event_config = await EventService(repository).get_event_config(event_id, special_character_id)
        all_cards = await self.load_cards(repository, config.card_config, event_config)
        pool = build_candidate_pool(all_cards, unit=event_config.filter_unit)
        debug_log(f"Cards after unit filter {event_config.filter_unit}: {len(pool)}/{len(all_cards)}")

        search = BestDeckSearch(
            score_function=event_point_function(event_config.event_type, live_type),
            music_meta=config.music_meta,
            member=config.member,
            limit=config.limit,
            honor_bonus=await self.load_honor_bonus(repository),
            rules=DeckBonusRules.from_event(event_config),
            support_pool=SupportDeckPool(all_cards) if event_config.has_support_deck else None,
        )
        decks = search.search(pool, debug_log)
        logger.info("Event %d (%s): %d deck(s) recommended", event_id, live_type.value, len(decks))
        return decks
