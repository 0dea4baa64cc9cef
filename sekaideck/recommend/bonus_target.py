import logging

from sekaideck.filtering.candidate_pool import build_candidate_pool
from sekaideck.models.deck import RecommendDeck
from sekaideck.models.event import LiveType
from sekaideck.recommend.base import BaseDeckRecommend
from sekaideck.recommend.config import EventBonusDeckRecommendConfig, validate_member_count
from sekaideck.recommend.search import BonusTargetSearch
from sekaideck.services.deck_calculator import DeckBonusRules, SupportDeckPool
from sekaideck.services.event_service import EventService

logger = logging.getLogger(__name__)


class EventBonusDeckRecommend(BaseDeckRecommend):
    """Decks whose total event bonus hits a target (score control)."""

    async def recommend_event_bonus_deck(
        self,
        event_id: int,
        target_bonus: float,
        live_type: LiveType,
        config: EventBonusDeckRecommendConfig,
        special_character_id: int = 0,
        max_bonus: float | None = None,
    ) -> list[RecommendDeck]:
        """
        Recommend decks by event bonus.

        Args:
            event_id: Event master id
            target_bonus: Exact target, or the lower end when max_bonus is given
            live_type: Live mode (kept for parity with event recommendation)
            config: Deck size, build options, specific bonus values
            special_character_id: World bloom chapter character (0 for none)
            max_bonus: Upper end of the target range

        Returns:
            At most one deck per distinct bonus, ascending by bonus; empty if
            nothing lands in range

        Raises:
            NotFoundError: If master or user records are missing
            DeckInvariantError: If the deck size is outside 2-5
        """
        validate_member_count(config.member)
        debug_log = self.debug_sink(config.debug_log)
        min_bonus = target_bonus
        upper = target_bonus if max_bonus is None else max_bonus
        if min_bonus > upper:
            debug_log(f"Empty bonus range [{min_bonus}, {upper}]")
            return []

        repository = self.new_repository()
        event_config = await EventService(repository).get_event_config(event_id, special_character_id)
        all_cards = await self.load_cards(repository, config.card_config, event_config)
        pool = build_candidate_pool(all_cards, unit=event_config.filter_unit)
        debug_log(f"Cards after unit filter {event_config.filter_unit}: {len(pool)}/{len(all_cards)}")

        search = BonusTargetSearch(
            member=config.member,
            honor_bonus=await self.load_honor_bonus(repository),
            rules=DeckBonusRules.from_event(event_config),
            support_pool=SupportDeckPool(all_cards) if event_config.has_support_deck else None,
        )
        decks = search.search(pool, min_bonus, upper, config.specific_bonuses, debug_log)
        logger.info(
            "Event %d (%s) bonus [%s, %s]: %d deck(s) found",
            event_id,
            live_type.value,
            min_bonus,
            upper,
            len(decks),
        )
        return decks
