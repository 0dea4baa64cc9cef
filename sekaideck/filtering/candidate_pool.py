"""
Candidate Pool Builder: Deterministic Pre-Search Filtering.

Narrows the owned-card pool before a search runs.

INVARIANTS:
- Filtering is monotonic (only removes cards, never adds)
- Same inputs → same pool, in the same order (deterministic)
- No filter set → full pool returned (passthrough)
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sekaideck.models.card import CardDetail
from sekaideck.models.master import VIRTUAL_SINGER_UNIT

logger = logging.getLogger(__name__)


@dataclass
class CandidatePoolMetrics:
    """Pool sizes recorded per build."""

    total_cards: int = 0
    after_unit_filter: int = 0
    after_character_filter: int = 0
    final_pool_size: int = 0


def _filter_by_unit(cards: list[CardDetail], unit: str | None) -> list[CardDetail]:
    """
    Keep cards of the event's unit.

    Virtual singer cards without a support unit belong to no fixed unit
    and are always allowed.
    """
    if unit is None:
        return cards
    return [c for c in cards if c.units == (VIRTUAL_SINGER_UNIT,) or unit in c.units]


def _filter_by_character(cards: list[CardDetail], character_id: int | None) -> list[CardDetail]:
    """Keep one character's cards (challenge live)."""
    if character_id is None:
        return cards
    return [c for c in cards if c.character_id == character_id]


def build_candidate_pool(
    cards: Sequence[CardDetail],
    unit: str | None = None,
    character_id: int | None = None,
) -> list[CardDetail]:
    """
    Build a candidate pool by filtering card details.

    Applies filters in order:
    1. Unit (event unit or world bloom support unit)
    2. Character

    Args:
        cards: Every enabled owned card
        unit: Eligible unit, or None for no unit restriction
        character_id: Only this character's cards, or None

    Returns:
        Surviving cards in input order
    """
    metrics = CandidatePoolMetrics(total_cards=len(cards))

    candidates = _filter_by_unit(list(cards), unit)
    metrics.after_unit_filter = len(candidates)

    candidates = _filter_by_character(candidates, character_id)
    metrics.after_character_filter = len(candidates)

    metrics.final_pool_size = len(candidates)

    logger.info(
        "candidate_pool_built",
        extra={
            "total": metrics.total_cards,
            "after_unit": metrics.after_unit_filter,
            "after_character": metrics.after_character_filter,
            "final": metrics.final_pool_size,
        },
    )
    return candidates
