import logging

from sekaideck.models.card import CardConfig
from sekaideck.models.deck import SupportDeckCard
from sekaideck.models.failure import NotFoundError
from sekaideck.recommend.base import BaseDeckRecommend
from sekaideck.services.deck_calculator import select_support_deck
from sekaideck.services.event_service import EventService

logger = logging.getLogger(__name__)


class BloomSupportDeckRecommend(BaseDeckRecommend):
    """The world bloom support deck that goes with a chosen main deck."""

    async def recommend_bloom_support_deck(
        self,
        main_card_ids: list[int],
        event_id: int,
        special_character_id: int,
        card_config: dict[str, CardConfig] | None = None,
    ) -> list[SupportDeckCard]:
        """
        Pick the support deck for a main deck.

        Returns:
            Support cards, best first; empty outside world bloom events

        Raises:
            NotFoundError: If a main deck card is not owned
        """
        repository = self.new_repository()
        event_config = await EventService(repository).get_event_config(event_id, special_character_id)
        if not event_config.has_support_deck:
            logger.info("Event %d has no support deck", event_id)
            return []

        all_cards = await self.load_cards(repository, card_config or {}, event_config)
        by_id = {c.card_id: c for c in all_cards}
        missing = [card_id for card_id in main_card_ids if card_id not in by_id]
        if missing:
            raise NotFoundError("Main deck card", detail=f"ids={missing}")

        support = select_support_deck([by_id[i] for i in main_card_ids], all_cards)
        logger.info("Event %d: %d support card(s) selected", event_id, len(support))
        return support
