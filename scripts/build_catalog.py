#!/usr/bin/env python
"""Fold raw items into the catalog and fill missing summaries.

Usage:
    python scripts/build_catalog.py                 # Build from the newest 500 raw items
    python scripts/build_catalog.py --limit 100     # Build from 100 raw items
    python scripts/build_catalog.py --summaries     # Also write missing summaries
    python scripts/build_catalog.py --summaries --llm
"""

import argparse
import asyncio
import logging

from affiscope.config import get_settings
from affiscope.db import Database
from affiscope.services.catalog import CatalogService
from affiscope.services.llm import get_llm_provider
from affiscope.services.summary import SummaryService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def build_catalog(limit: int, summaries: bool = False, use_llm: bool = False):
    """Build the catalog and optionally generate summaries.

    Args:
        limit: Maximum number of raw items to scan.
        summaries: If True, write summaries for products without one.
        use_llm: If True, rewrite summaries with the configured provider.
    """
    settings = get_settings()

    async with Database(settings.database_path) as db:
        result = await CatalogService(db).build_from_raw(limit)
        logger.info(
            f"Scanned: {result.scanned}, New: {result.upserted}, "
            f"Merged: {result.merged}, Skipped: {result.skipped}"
        )

        if not summaries:
            return

        llm = get_llm_provider(settings) if use_llm else None
        try:
            summary = await SummaryService(db, llm).generate_missing()
        finally:
            if llm:
                await llm.close()

        logger.info(f"Summaries written: {summary.updated}/{summary.scanned}")


def main():
    parser = argparse.ArgumentParser(description="Build the deduplicated catalog")
    parser.add_argument(
        "--limit",
        type=int,
        default=500,
        help="Maximum number of raw items to scan"
    )
    parser.add_argument(
        "--summaries",
        action="store_true",
        help="Write summaries for products without one"
    )
    parser.add_argument(
        "--llm",
        action="store_true",
        help="Rewrite summaries with the completion API"
    )
    args = parser.parse_args()

    asyncio.run(build_catalog(args.limit, summaries=args.summaries, use_llm=args.llm))


if __name__ == "__main__":
    main()
