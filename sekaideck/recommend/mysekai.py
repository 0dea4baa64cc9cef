import logging

from sekaideck.analysis.mysekai import mysekai_point_function
from sekaideck.filtering.candidate_pool import build_candidate_pool
from sekaideck.models.deck import RecommendDeck
from sekaideck.recommend.base import BaseDeckRecommend
from sekaideck.recommend.config import DeckRecommendConfig, validate_member_count
from sekaideck.recommend.search import BestDeckSearch
from sekaideck.services.deck_calculator import DeckBonusRules, SupportDeckPool
from sekaideck.services.event_service import EventService

logger = logging.getLogger(__name__)


class MysekaiDeckRecommend(BaseDeckRecommend):
    """Decks that earn the most MySEKAI event points."""

    async def recommend_mysekai_deck(
        self,
        event_id: int,
        config: DeckRecommendConfig,
    ) -> list[RecommendDeck]:
        """
        Ranked by the unfloored internal point so decks that tie after the
        game's flooring still order by their real strength.
        """
        validate_member_count(config.member)
        debug_log = self.debug_sink(config.debug_log)
        repository = self.new_repository()

        event_config = await EventService(repository).get_event_config(event_id)
        all_cards = await self.load_cards(repository, config.card_config, event_config)
        pool = build_candidate_pool(all_cards, unit=event_config.filter_unit)
        debug_log(f"Cards after unit filter {event_config.filter_unit}: {len(pool)}/{len(all_cards)}")

        search = BestDeckSearch(
            score_function=mysekai_point_function(),
            music_meta=config.music_meta,
            member=config.member,
            limit=config.limit,
            honor_bonus=await self.load_honor_bonus(repository),
            rules=DeckBonusRules.from_event(event_config),
            support_pool=SupportDeckPool(all_cards) if event_config.has_support_deck else None,
        )
        decks = search.search(pool, debug_log)
        logger.info("MySEKAI event %d: %d deck(s) recommended", event_id, len(decks))
        return decks
