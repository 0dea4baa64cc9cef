"""
Download game master data.

Run this job before serving recommendations from local files.
"""

import asyncio
import logging

from sekaideck.services.master_data import download_master_data

logger = logging.getLogger(__name__)


async def run_download() -> dict[str, int]:
    """Download every master table the calculators read."""
    logger.info("Downloading master data...")

    try:
        counts = await download_master_data()
        logger.info("Downloaded %d master tables (%d rows)", len(counts), sum(counts.values()))
        return counts
    except Exception as e:
        logger.error("Failed to download master data: %s", e)
        raise


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download())


if __name__ == "__main__":
    main()
