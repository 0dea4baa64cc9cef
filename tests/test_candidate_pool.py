"""
Tests for Candidate Pool Builder.

These tests verify:
- Unit filtering (off-unit cards removed, plain virtual singers retained)
- Character filtering (challenge live pools)
- Monotonicity (each filter reduces or preserves size)
- Determinism (same inputs → same pool, same order)
- No-filter passthrough (no unit, no character → full pool)
"""

import logging

import pytest

from sekaideck.filtering import build_candidate_pool


@pytest.fixture
def cards(make_card) -> list:
    return [
        make_card(1, 1, units=("light_sound",)),
        make_card(2, 3, units=("idol",)),
        make_card(3, 21, units=("piapro",)),
        make_card(4, 21, units=("piapro", "light_sound")),
        make_card(5, 22, units=("piapro", "idol")),
        make_card(6, 1, units=("light_sound",)),
    ]


class TestUnitFilter:
    def test_keeps_unit_members(self, cards) -> None:
        pool = build_candidate_pool(cards, unit="idol")
        assert [c.card_id for c in pool] == [2, 3, 5]

    def test_support_unit_virtual_singers_follow_support_unit(self, cards) -> None:
        """A virtual singer supporting another unit is not eligible."""
        pool = build_candidate_pool(cards, unit="light_sound")
        assert [c.card_id for c in pool] == [1, 3, 4, 6]

    def test_unknown_unit_keeps_only_plain_virtual_singers(self, cards) -> None:
        assert [c.card_id for c in build_candidate_pool(cards, unit="school_refusal")] == [3]


class TestCharacterFilter:
    def test_keeps_one_character(self, cards) -> None:
        assert [c.card_id for c in build_candidate_pool(cards, character_id=1)] == [1, 6]

    def test_filters_combine(self, cards) -> None:
        assert [c.card_id for c in build_candidate_pool(cards, unit="idol", character_id=21)] == [3]


class TestPoolProperties:
    def test_passthrough(self, cards) -> None:
        pool = build_candidate_pool(cards)

        assert pool == cards
        assert pool is not cards

    def test_monotonic(self, cards) -> None:
        by_unit = build_candidate_pool(cards, unit="light_sound")
        by_both = build_candidate_pool(cards, unit="light_sound", character_id=1)

        assert len(by_both) <= len(by_unit) <= len(cards)
        assert set(map(id, by_both)) <= set(map(id, by_unit))

    def test_deterministic(self, cards) -> None:
        first = build_candidate_pool(cards, unit="idol")
        second = build_candidate_pool(cards, unit="idol")
        assert [c.card_id for c in first] == [c.card_id for c in second]

    def test_logs_pool_sizes(self, cards, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="sekaideck.filtering.candidate_pool"):
            build_candidate_pool(cards, unit="idol")

        [record] = [r for r in caplog.records if r.getMessage() == "candidate_pool_built"]
        assert record.total == 6
        assert record.final == 3
