"""Offer gallery routes."""

import json
import logging
from typing import Annotated

from litestar import Controller, get, post
from litestar.di import Provide
from litestar.params import Parameter

from ..db import Database, db_dependency
from ..middleware import provide_site_id
from ..models import AffiliateOffer, AffiliateOfferCreate, OfferList
from ..services.catalog import now_ms

logger = logging.getLogger(__name__)


def row_to_offer(row) -> AffiliateOffer:
    data = dict(row)
    for field in ("images", "creatives", "site_ids"):
        data[field] = json.loads(data[field] or "[]")
    data["archived"] = bool(data["archived"])
    return AffiliateOffer(**data)


class OfferController(Controller):
    """Controller for affiliate offer endpoints."""

    path = "/api/offers"
    dependencies = {
        "db": Provide(db_dependency),
        "site_id": Provide(provide_site_id),
    }

    @get("/")
    async def list_offers(
        self,
        db: Database,
        site_id: str,
        limit: Annotated[int, Parameter(query="limit", ge=1, le=100)] = 24,
    ) -> OfferList:
        """List the current site's live offers, newest first."""
        rows = await db.fetchall(
            """
            SELECT * FROM offers
            WHERE archived = 0
              AND EXISTS (SELECT 1 FROM json_each(offers.site_ids) WHERE value = ?)
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (site_id, limit),
        )
        return OfferList(site_id=site_id, items=[row_to_offer(row) for row in rows])

    @post("/")
    async def upsert_offer(self, db: Database, data: AffiliateOfferCreate) -> AffiliateOffer:
        """Create or replace an offer."""
        await db.execute(
            """
            INSERT OR REPLACE INTO offers
                (id, title, description, images, creatives, site_ids, archived, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                data.id,
                data.title,
                data.description,
                json.dumps(data.images),
                json.dumps([c.model_dump() for c in data.creatives]),
                json.dumps(data.site_ids),
                data.archived,
                now_ms(),
            ),
        )
        await db.commit()
        logger.info(f"Saved offer {data.id} for sites {data.site_ids}")

        row = await db.fetchone("SELECT * FROM offers WHERE id = ?", (data.id,))
        return row_to_offer(row)
