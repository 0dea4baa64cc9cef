import logging

from sekaideck.analysis.live_score import live_score_function
from sekaideck.filtering.candidate_pool import build_candidate_pool
from sekaideck.models.deck import RecommendDeck
from sekaideck.models.event import LiveType
from sekaideck.recommend.base import BaseDeckRecommend
from sekaideck.recommend.config import DeckRecommendConfig, validate_member_count
from sekaideck.recommend.search import BestDeckSearch

logger = logging.getLogger(__name__)


class ChallengeLiveDeckRecommend(BaseDeckRecommend):
    """
    Highest-scoring solo decks for a challenge live.

    Challenge lives are played with one character's cards only, so the deck
    is unique by card rather than by character.
    """

    async def recommend_challenge_live_deck(
        self,
        character_id: int,
        config: DeckRecommendConfig,
    ) -> list[RecommendDeck]:
        validate_member_count(config.member)
        debug_log = self.debug_sink(config.debug_log)
        repository = self.new_repository()

        all_cards = await self.load_cards(repository, config.card_config)
        pool = build_candidate_pool(all_cards, character_id=character_id)
        debug_log(f"Cards of character {character_id}: {len(pool)}/{len(all_cards)}")

        search = BestDeckSearch(
            score_function=live_score_function(LiveType.SOLO),
            music_meta=config.music_meta,
            member=config.member,
            limit=config.limit,
            honor_bonus=await self.load_honor_bonus(repository),
            distinct_characters=False,
        )
        decks = search.search(pool, debug_log)
        logger.info("Challenge live character %d: %d deck(s) recommended", character_id, len(decks))
        return decks
