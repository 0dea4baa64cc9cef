"""
Master data download.

Fetches the master tables the calculators read, one JSON file per table,
into the local data directory that JsonDataProvider serves.
"""

import json
import logging
from pathlib import Path

import httpx

from sekaideck.config import settings

logger = logging.getLogger(__name__)

MASTER_TABLES: tuple[str, ...] = (
    "areaItemLevels",
    "cardEpisodes",
    "cards",
    "characterRanks",
    "eventCards",
    "eventDeckBonuses",
    "eventRarityBonusRates",
    "events",
    "gameCharacterUnits",
    "gameCharacters",
    "honors",
    "masterLessons",
    "skills",
    "worldBloomDifferentAttributeBonuses",
    "worldBloomSupportDeckBonuses",
)


async def download_master_data(
    output_dir: Path | None = None,
    base_url: str | None = None,
    tables: tuple[str, ...] = MASTER_TABLES,
) -> dict[str, int]:
    """
    Download master tables.

    Args:
        output_dir: Where to write `<table>.json`. Defaults to settings.data_dir
        base_url: Master data root. Defaults to settings.master_data_url
        tables: Table names to fetch

    Returns:
        Row count per downloaded table.

    Raises:
        ValueError: If a table is not a JSON array
        httpx.HTTPError: If a download fails
    """
    output_dir = output_dir or settings.data_dir
    base_url = (base_url or settings.master_data_url).rstrip("/")
    output_dir.mkdir(parents=True, exist_ok=True)

    counts: dict[str, int] = {}
    async with httpx.AsyncClient(timeout=60.0) as client:
        for table in tables:
            response = await client.get(f"{base_url}/{table}.json")
            response.raise_for_status()
            rows = response.json()
            if not isinstance(rows, list):
                raise ValueError(f"Master table {table} is not a JSON array")

            with open(output_dir / f"{table}.json", "w", encoding="utf-8") as f:
                json.dump(rows, f, ensure_ascii=False)
            counts[table] = len(rows)
            logger.debug("Downloaded %s (%d rows)", table, len(rows))

    return counts
