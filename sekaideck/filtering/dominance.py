"""
Dominated Card Removal.

A card A covers card B when swapping B out for A can never lower a deck's
score under any monotone score function:
- same character, units, attribute and rarity (so every composition rule
  treats them alike)
- at least B's power in every power case
- identical skill effects
- at least B's fixed and leader bonus, the same event-card bonus, no caps
- with a support deck, no more support bonus than B (A leaving the support
  deck costs no more than B leaving it)

If `keep` other cards of B's character dominate it, each top-`keep` deck
that holds B has `keep` swaps that score at least as well, so B can go.

INVARIANTS:
- Filtering is monotonic (only removes cards, never adds)
- Surviving cards keep their input order
- Fully identical cards are ranked by card id, so one always survives
"""

import logging
from collections.abc import Sequence

from sekaideck.models.card import CardDetail

logger = logging.getLogger(__name__)


def _has_cap(card: CardDetail) -> bool:
    return card.event_bonus is not None and card.event_bonus.cap is not None


def _event_bonus_covers(a: CardDetail, b: CardDetail, swap_card_bonus: bool) -> bool:
    if a.event_bonus is None or b.event_bonus is None:
        return a.event_bonus is None and b.event_bonus is None
    x, y = a.event_bonus, b.event_bonus
    if not swap_card_bonus and (x.card_bonus or y.card_bonus):
        return False
    return (
        x.cap is None
        and y.cap is None
        and x.card_bonus == y.card_bonus
        and x.fixed_bonus >= y.fixed_bonus
        and x.leader_bonus >= y.leader_bonus
    )


def covers(
    a: CardDetail,
    b: CardDetail,
    compare_support: bool = False,
    swap_card_bonus: bool = True,
) -> bool:
    """
    True if `a` can replace `b` in any deck without lowering its score.

    `swap_card_bonus` is False when some pool card has a capped bonus;
    equal event-card bonuses are then not interchangeable, since the
    per-rarity limit breaks ties by card id and may hand the bonus to the
    capped card.
    """
    if (a.character_id, a.units, a.attr, a.rarity) != (b.character_id, b.units, b.attr, b.rarity):
        return False
    for key in {*a.power.keys(), *b.power.keys()}:
        if a.power.get(*key).total < b.power.get(*key).total:
            return False
    if not _event_bonus_covers(a, b, swap_card_bonus):
        return False
    if compare_support and (a.support_deck_bonus or 0.0) > (b.support_deck_bonus or 0.0):
        return False
    return a.skill.same_effects(b.skill)


def dominates(
    a: CardDetail,
    b: CardDetail,
    compare_support: bool = False,
    swap_card_bonus: bool = True,
) -> bool:
    """Strict version of `covers`; ties go to the lower card id."""
    if a is b or not covers(a, b, compare_support, swap_card_bonus):
        return False
    return a.card_id < b.card_id or not covers(b, a, compare_support, swap_card_bonus)


def drop_dominated_cards(
    cards: Sequence[CardDetail],
    keep: int,
    compare_support: bool = False,
) -> list[CardDetail]:
    """
    Remove cards that at least `keep` same-character cards dominate.

    Args:
        cards: Candidate pool (character-unique decks only)
        keep: Number of decks the search returns
        compare_support: The deck has a world bloom support deck

    Returns:
        Surviving cards in input order
    """
    if keep <= 0:
        return list(cards)

    swap_card_bonus = not any(_has_cap(c) for c in cards)
    by_character: dict[int, list[CardDetail]] = {}
    for card in cards:
        by_character.setdefault(card.character_id, []).append(card)

    dropped: set[int] = set()
    for group in by_character.values():
        if len(group) <= keep:
            continue
        for card in group:
            dominators = sum(
                1 for other in group if dominates(other, card, compare_support, swap_card_bonus)
            )
            if dominators >= keep:
                dropped.add(card.card_id)

    survivors = [c for c in cards if c.card_id not in dropped]
    logger.debug("Dominated cards dropped: %d of %d", len(dropped), len(cards))
    return survivors
