"""Tests for the master data download job."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from sekaideck.jobs.download_master_data import run_download
from sekaideck.services.master_data import MASTER_TABLES, download_master_data

BASE_URL = "https://example.com/master"


class TestDownloadMasterData:
    @respx.mock
    async def test_writes_one_file_per_table(self, tmp_path) -> None:
        """Each table is saved as <table>.json with its row count returned."""
        respx.get(f"{BASE_URL}/cards.json").mock(
            return_value=httpx.Response(200, json=[{"id": 1}, {"id": 2}])
        )
        respx.get(f"{BASE_URL}/skills.json").mock(return_value=httpx.Response(200, json=[{"id": 1}]))

        counts = await download_master_data(tmp_path, BASE_URL, tables=("cards", "skills"))

        assert counts == {"cards": 2, "skills": 1}
        assert json.loads((tmp_path / "cards.json").read_text(encoding="utf-8")) == [{"id": 1}, {"id": 2}]
        assert (tmp_path / "skills.json").exists()

    @respx.mock
    async def test_trailing_slash_in_base_url(self, tmp_path) -> None:
        route = respx.get(f"{BASE_URL}/events.json").mock(return_value=httpx.Response(200, json=[]))

        await download_master_data(tmp_path, BASE_URL + "/", tables=("events",))

        assert route.called

    @respx.mock
    async def test_http_error_propagates(self, tmp_path) -> None:
        respx.get(f"{BASE_URL}/cards.json").mock(return_value=httpx.Response(404))

        with pytest.raises(httpx.HTTPStatusError):
            await download_master_data(tmp_path, BASE_URL, tables=("cards",))

    @respx.mock
    async def test_non_array_table_rejected(self, tmp_path) -> None:
        respx.get(f"{BASE_URL}/cards.json").mock(return_value=httpx.Response(200, json={"id": 1}))

        with pytest.raises(ValueError):
            await download_master_data(tmp_path, BASE_URL, tables=("cards",))

    def test_tables_cover_calculator_inputs(self) -> None:
        for table in ("cards", "skills", "events", "eventDeckBonuses", "worldBloomSupportDeckBonuses"):
            assert table in MASTER_TABLES


class TestRunDownload:
    async def test_returns_counts(self) -> None:
        with patch(
            "sekaideck.jobs.download_master_data.download_master_data",
            new_callable=AsyncMock,
            return_value={"cards": 3},
        ):
            assert await run_download() == {"cards": 3}

    async def test_reraises_failures(self) -> None:
        with (
            patch(
                "sekaideck.jobs.download_master_data.download_master_data",
                new_callable=AsyncMock,
                side_effect=httpx.HTTPError("Network error"),
            ),
            pytest.raises(httpx.HTTPError),
        ):
            await run_download()
