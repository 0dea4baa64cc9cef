"""Tests for the data access layer."""

import json

import pytest

from sekaideck.models.failure import NotFoundError
from sekaideck.models.master import Card
from sekaideck.models.user import UserCard
from sekaideck.services.data_provider import (
    DataRepository,
    InMemoryDataProvider,
    JsonDataProvider,
    find_or_raise,
)


@pytest.fixture
def json_provider(tmp_path, master_data, user_data) -> JsonDataProvider:
    master_dir = tmp_path / "master"
    master_dir.mkdir()
    for name, rows in master_data.items():
        (master_dir / f"{name}.json").write_text(json.dumps(rows), encoding="utf-8")
    user_file = tmp_path / "user.json"
    user_file.write_text(json.dumps(user_data), encoding="utf-8")
    return JsonDataProvider(master_dir, user_file)


class TestInMemoryDataProvider:
    async def test_missing_table_reads_empty(self) -> None:
        provider = InMemoryDataProvider()

        assert await provider.get_master_data("cards") == []
        assert await provider.get_user_data("userCards") == []


class TestJsonDataProvider:
    async def test_reads_master_and_user_tables(self, json_provider) -> None:
        cards = await json_provider.get_master_data("cards")
        user_cards = await json_provider.get_user_data("userCards")

        assert len(cards) == 9
        assert user_cards[0]["cardId"] == 101

    async def test_missing_master_table(self, json_provider) -> None:
        with pytest.raises(NotFoundError):
            await json_provider.get_master_data("musics")

    async def test_missing_user_file(self, tmp_path) -> None:
        provider = JsonDataProvider(tmp_path, tmp_path / "nope.json")
        with pytest.raises(NotFoundError):
            await provider.get_user_data("userCards")

    async def test_unknown_user_table_reads_empty(self, json_provider) -> None:
        assert await json_provider.get_user_data("userMysekaiGates") == []


class TestDataRepository:
    async def test_validates_rows(self, provider) -> None:
        repository = DataRepository(provider)

        cards = await repository.master("cards", Card)
        user_cards = await repository.user("userCards", UserCard)

        assert cards[0].id == 101
        assert cards[0].card_rarity_type == "rarity_4"
        assert user_cards[0].card_id == 101

    async def test_tables_are_memoized(self, provider) -> None:
        repository = DataRepository(provider)

        first = await repository.master("cards", Card)
        provider.master["cards"] = []

        assert await repository.master("cards", Card) is first
        assert await DataRepository(provider).master("cards", Card) == []

    def test_find_or_raise(self) -> None:
        assert find_or_raise([1, 2, 3], lambda x: x > 1, "Number") == 2
        with pytest.raises(NotFoundError) as exc_info:
            find_or_raise([1], lambda x: x > 1, "Number", detail="x>1")
        assert exc_info.value.message == "Number not found"
