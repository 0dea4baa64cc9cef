"""
Score function contract.

A score function maps (song, deck) to the scalar a best-deck search
maximizes. It must be deterministic and side-effect free.

INVARIANT: Score functions are monotone non-decreasing in deck power,
event bonus, support bonus and every member's skill value. The search
prunes with optimistic decks and relies on this.
"""

from collections.abc import Callable

from sekaideck.models.deck import DeckDetail
from sekaideck.models.master import MusicMeta

ScoreFunction = Callable[[MusicMeta, DeckDetail], float]
