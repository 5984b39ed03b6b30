#!/usr/bin/env python3
"""Print the normalized title and dedupe key of product titles.

Usage:
    python scripts/dedupe_key.py "【新品】Chair (Black)" "chair black"
    python scripts/dedupe_key.py --catalog   # list catalog keys sharing a title
"""

import asyncio
import sys

from affiscope.config import get_settings
from affiscope.db import Database
from affiscope.utils.dedup import make_dedupe_key, normalize_title


def show_titles(titles: list[str]) -> None:
    """Print normalization results for each title."""
    for title in titles:
        print(f"{make_dedupe_key(title)}  {normalize_title(title)!r}  <- {title!r}")


async def list_catalog(limit: int = 20) -> None:
    """List the catalog products that merged the most offers."""
    settings = get_settings()
    async with Database(settings.database_path) as db:
        rows = await db.fetchall(
            """
            SELECT dedupe_key, product_name, json_array_length(data, '$.offers') AS offers
            FROM catalog_products
            ORDER BY offers DESC
            LIMIT ?
            """,
            (limit,),
        )

        print("Most merged products:\n")
        for row in rows:
            print(f"  {row['dedupe_key'][:8]}  {row['offers']:>3}  {row['product_name'][:50]}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print('Usage: python dedupe_key.py "<title>" ["<title>" ...]')
        print("       python dedupe_key.py --catalog [limit]")
        sys.exit(1)

    if sys.argv[1] == "--catalog":
        limit = int(sys.argv[2]) if len(sys.argv) > 2 else 20
        asyncio.run(list_catalog(limit))
    else:
        show_titles(sys.argv[1:])
