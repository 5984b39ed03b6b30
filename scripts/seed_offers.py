#!/usr/bin/env python3
"""Seed the database with sample gallery offers."""

import asyncio
import json
import time

from affiscope.config import get_settings
from affiscope.db import Database

INITIAL_OFFERS = [
    {
        "id": "a8-chair-ergo",
        "title": "エルゴノミクスチェア 公式ストア",
        "description": "腰痛対策のランバーサポート付き",
        "site_ids": ["chairscope"],
        "creatives": [{"type": "text", "href": "https://px.a8.net/svt/ejp?a8mat=sample1", "label": "公式で詳しく見る"}],
    },
    {
        "id": "a8-powerbank-10000",
        "title": "モバイルバッテリー 10000mAh PD20W",
        "site_ids": ["powerbank-scope", "affiscope"],
        "creatives": [{"type": "banner", "href": "https://px.a8.net/svt/ejp?a8mat=sample2", "img_src": "https://www.a8.net/sample2.png"}],
    },
]


async def seed_offers():
    """Insert sample offers into the database."""
    settings = get_settings()
    now = int(time.time() * 1000)

    async with Database(settings.database_path) as db:
        await db.executemany(
            """
            INSERT OR IGNORE INTO offers
                (id, title, description, images, creatives, site_ids, archived, updated_at)
            VALUES (?, ?, ?, '[]', ?, ?, FALSE, ?)
            """,
            [
                (
                    offer["id"],
                    offer["title"],
                    offer.get("description"),
                    json.dumps(offer["creatives"]),
                    json.dumps(offer["site_ids"]),
                    now,
                )
                for offer in INITIAL_OFFERS
            ],
        )
        await db.commit()
    print(f"Seeded {len(INITIAL_OFFERS)} offers")


if __name__ == "__main__":
    asyncio.run(seed_offers())
