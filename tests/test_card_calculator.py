"""Tests for card detail aggregation (power, build options, event bonuses)."""

import pytest

from sekaideck.models.card import NO_SHARED_UNITS, CardConfig
from sekaideck.models.event import EventType
from sekaideck.models.failure import NotFoundError
from sekaideck.models.skill import ANY_CASE
from sekaideck.models.user import UserCard
from sekaideck.services.card_calculator import CardCalculator
from sekaideck.services.data_provider import DataRepository
from sekaideck.services.event_service import EventService
from sekaideck.services.power_calculator import AreaItemService, HonorService

LIGHT_SOUND_ONLY = frozenset({"light_sound"})


@pytest.fixture
def repository(provider) -> DataRepository:
    return DataRepository(provider)


async def _detail(repository, card_id, card_config=None, event_config=None):
    area_item_levels = await AreaItemService(repository).get_area_item_levels()
    return await CardCalculator(repository).get_card_detail(
        UserCard(card_id=card_id), area_item_levels, card_config, event_config
    )


class TestCardPower:
    """Power cases as the game computes them."""

    async def test_base_power_with_bonuses(self, repository) -> None:
        """Character rank adds 1%, unit and attribute items add 5% + 2%."""
        detail = await _detail(repository, 101)
        power = detail.power.get(NO_SHARED_UNITS, False)

        assert power.base == 3000
        assert power.character_bonus == 30
        assert power.area_item_bonus == 210
        assert power.total == 3240

    async def test_all_match_rates(self, repository) -> None:
        """A deck sharing the unit and attribute switches to all-match rates."""
        detail = await _detail(repository, 101)

        assert detail.power.get(LIGHT_SOUND_ONLY, False).area_item_bonus == 360
        assert detail.power.get(LIGHT_SOUND_ONLY, True).area_item_bonus == 420
        assert detail.power.max_total() == 3000 + 30 + 420

    async def test_unmatched_area_items(self, repository) -> None:
        """An idol/cool card gains nothing from light_sound and cute items."""
        detail = await _detail(repository, 103)
        assert detail.power.get(NO_SHARED_UNITS, False).area_item_bonus == 0

    async def test_missing_card_raises(self, repository) -> None:
        with pytest.raises(NotFoundError):
            await _detail(repository, 999)

    async def test_missing_level_parameters_raise(self, repository) -> None:
        area_item_levels = await AreaItemService(repository).get_area_item_levels()
        with pytest.raises(NotFoundError):
            await CardCalculator(repository).get_card_detail(
                UserCard(card_id=101, level=7), area_item_levels
            )

    async def test_honor_bonus(self, repository) -> None:
        assert await HonorService(repository).get_honor_bonus_power() == 500


class TestCardConfig:
    """Per-rarity build options."""

    async def test_rank_max_levels_and_trains(self, repository) -> None:
        detail = await _detail(repository, 101, {"rarity_4": CardConfig(rank_max=True)})

        assert detail.level == 60
        assert detail.trained
        assert detail.power.get(NO_SHARED_UNITS, False).base == 6000 + 300

    async def test_rank_max_does_not_train_low_rarity(self, repository) -> None:
        detail = await _detail(repository, 109, {"rarity_2": CardConfig(rank_max=True)})

        assert detail.level == 30
        assert not detail.trained
        assert detail.power.get(NO_SHARED_UNITS, False).base == 3600

    async def test_master_max(self, repository) -> None:
        detail = await _detail(repository, 101, {"rarity_4": CardConfig(master_max=True)})

        assert detail.master_rank == 5
        assert detail.power.get(NO_SHARED_UNITS, False).base == 3000 + 250

    async def test_episode_read(self, repository) -> None:
        detail = await _detail(repository, 101, {"rarity_4": CardConfig(episode_read=True)})
        assert detail.power.get(NO_SHARED_UNITS, False).base == 3000 + 200

    async def test_skill_max(self, repository) -> None:
        detail = await _detail(repository, 101, {"rarity_4": CardConfig(skill_max=True)})

        assert detail.skill_level == 4
        assert detail.skill.get_skill(ANY_CASE, 1).fixed_score_bonus == 40

    async def test_disable_drops_card(self, repository) -> None:
        assert await _detail(repository, 101, {"rarity_4": CardConfig(disable=True)}) is None

    async def test_other_rarities_untouched(self, repository) -> None:
        detail = await _detail(repository, 103, {"rarity_4": CardConfig(rank_max=True)})
        assert detail.level == 1

    async def test_batch_skips_disabled_rarities(self, repository, user_data) -> None:
        user_cards = [UserCard.model_validate(row) for row in user_data["userCards"]]
        area_item_levels = await AreaItemService(repository).get_area_item_levels()

        details = await CardCalculator(repository).batch_get_card_detail(
            user_cards, area_item_levels, {"rarity_4": CardConfig(disable=True)}
        )

        assert [d.card_id for d in details] == [103, 104, 105, 108, 109]


class TestCardEventBonus:
    """Event and support bonuses per card."""

    async def test_character_and_attribute_row(self, repository) -> None:
        config = await EventService(repository).get_event_config(1)
        detail = await _detail(repository, 102, event_config=config)

        assert detail.event_bonus.fixed_bonus == 50
        assert detail.event_bonus.card_bonus == 20
        assert detail.event_bonus.leader_bonus == 0

    async def test_single_condition_row(self, repository) -> None:
        config = await EventService(repository).get_event_config(1)
        detail = await _detail(repository, 101, event_config=config)
        assert detail.event_bonus.fixed_bonus == 25

    async def test_virtual_singer_matches_support_unit_row(self, repository) -> None:
        config = await EventService(repository).get_event_config(1)
        detail = await _detail(repository, 107, event_config=config)

        assert detail.units == ("piapro", "light_sound")
        assert detail.event_bonus.fixed_bonus == 50
        assert detail.event_bonus.max_bonus(leader=True) == 65
        assert detail.event_bonus.min_bonus() == 50

    async def test_master_rank_bonus(self, repository) -> None:
        config = await EventService(repository).get_event_config(1)
        detail = await _detail(repository, 101, {"rarity_4": CardConfig(master_max=True)}, config)
        assert detail.event_bonus.fixed_bonus == 25 + 10

    async def test_no_bonus_outside_events(self, repository) -> None:
        detail = await _detail(repository, 101)

        assert detail.event_bonus is None
        assert detail.support_deck_bonus is None

    async def test_support_bonus_for_special_character(self, repository) -> None:
        config = await EventService(repository).get_event_config(2, special_character_id=1)

        assert config.event_type == EventType.WORLD_BLOOM
        assert config.filter_unit == "light_sound"
        assert (await _detail(repository, 101, event_config=config)).support_deck_bonus == 15
        assert (await _detail(repository, 102, event_config=config)).support_deck_bonus == 3
        assert (await _detail(repository, 107, event_config=config)).support_deck_bonus == 3

    async def test_support_bonus_outside_support_unit(self, repository) -> None:
        config = await EventService(repository).get_event_config(2, special_character_id=1)
        assert (await _detail(repository, 103, event_config=config)).support_deck_bonus == 0.0

    async def test_unknown_event_raises(self, repository) -> None:
        with pytest.raises(NotFoundError):
            await EventService(repository).get_event_config(404)

    async def test_unknown_special_character_raises(self, repository) -> None:
        with pytest.raises(NotFoundError):
            await EventService(repository).get_event_config(2, special_character_id=99)
