"""Catalog service: turns raw listings into deduplicated catalog products."""

import hashlib
import logging
import math
import re
import time

from ..db import Database
from ..models import (
    BuildCatalogResult,
    Capacity,
    CatalogOffer,
    CatalogProduct,
    PricePoint,
    RawItem,
    RawItemCreate,
)
from ..utils.dedup import make_dedupe_key
from .enrich import enrich_for_site

logger = logging.getLogger(__name__)

HAS_TYPE_C_RE = re.compile(r"usb[-\s]?c|type[-\s]?c|pd", re.IGNORECASE)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_raw_id(item: RawItemCreate) -> str:
    """Generate a stable raw item ID from the shop item code or URL."""
    if item.item_code:
        return f"{item.site_id}_{item.item_code}"
    return hashlib.sha256(item.item_url.encode()).hexdigest()[:16]


def offer_key(offer: CatalogOffer) -> str:
    """Key identifying the same shop offer across ingestion runs."""
    return f"{offer.source}:{offer.item_code or ''}:{offer.shop_name or ''}".lower()


def to_catalog_unit(raw: RawItem, now: int) -> CatalogProduct:
    """Convert one raw item into a single-offer catalog product."""
    offer = CatalogOffer(
        source="rakuten",
        price=raw.price,
        url=raw.affiliate_url or raw.item_url,
        shop_name=raw.shop_name,
        item_code=raw.item_code,
        last_seen_ts=now,
    )

    enriched = enrich_for_site(raw.site_id, raw.title, "auto")
    specs = enriched.specs
    capacity = None
    if specs.get("capacity_mAh") or specs.get("capacity_Wh"):
        capacity = Capacity(mAh=specs.get("capacity_mAh"), Wh=specs.get("capacity_Wh"))

    return CatalogProduct(
        dedupe_key=make_dedupe_key(raw.title),
        product_name=raw.title,
        brand=raw.shop_name,
        image_url=raw.image_url,
        price=raw.price,
        affiliate_url=offer.url,
        offers=[offer],
        price_history=(
            [PricePoint(ts=now, source="rakuten", price=raw.price)]
            if raw.price > 0
            else []
        ),
        capacity=capacity,
        output_power=specs.get("max_output_w") or specs.get("ac_output_w"),
        has_type_c=bool(HAS_TYPE_C_RE.search(raw.title)),
        tags=enriched.tags,
        category=enriched.category_id,
        created_at=now,
        updated_at=now,
    )


def merge_catalog(
    existing: CatalogProduct, incoming: CatalogProduct, now: int
) -> CatalogProduct:
    """Merge an incoming catalog unit into the stored product.

    Offers are merged by shop, the display price follows the cheapest offer,
    and the price history grows only when the display price changes.
    """
    offers: dict[str, CatalogOffer] = {offer_key(o): o for o in existing.offers}
    for offer in incoming.offers:
        key = offer_key(offer)
        prev = offers.get(key)
        if prev is None:
            offers[key] = offer
            continue
        offers[key] = prev.model_copy(
            update={
                "price": offer.price,
                "url": prev.url if prev.url is not None else offer.url,
                "last_seen_ts": max(prev.last_seen_ts, offer.last_seen_ts),
            }
        )
    merged_offers = list(offers.values())

    # Representative values come from the cheapest offer
    cheapest = min(merged_offers, key=lambda o: o.price, default=None)
    display_price = cheapest.price if cheapest else existing.price
    display_url = existing.affiliate_url
    if display_url is None and cheapest:
        display_url = cheapest.url

    price_history = list(existing.price_history)
    last = price_history[-1] if price_history else None
    if display_price is not None and (last is None or last.price != display_price):
        price_history.append(
            PricePoint(
                ts=now,
                source=cheapest.source if cheapest else "rakuten",
                price=display_price,
            )
        )

    def fill(name: str):
        value = getattr(existing, name)
        return value if value is not None else getattr(incoming, name)

    return existing.model_copy(
        update={
            "product_name": (
                incoming.product_name
                if len(existing.product_name) <= len(incoming.product_name)
                else existing.product_name
            ),
            "brand": fill("brand"),
            "image_url": fill("image_url"),
            "price": display_price,
            "affiliate_url": display_url,
            "offers": merged_offers,
            "price_history": price_history,
            "capacity": fill("capacity"),
            "output_power": fill("output_power"),
            "weight": fill("weight"),
            "has_type_c": fill("has_type_c"),
            "updated_at": now,
        }
    )


class CatalogService:
    """Service for raw item ingestion and catalog maintenance."""

    def __init__(self, db: Database):
        self.db = db

    async def ingest_raw(self, item: RawItemCreate, now: int | None = None) -> RawItem:
        """Insert or refresh a raw item. ``fetched_at`` keeps the first sighting."""
        now = now or now_ms()
        raw_id = generate_raw_id(item)

        await self.db.execute(
            """
            INSERT INTO raw_items (id, site_id, item_code, item_url, affiliate_url,
                                   shop_name, title, price, image_url, source,
                                   fetched_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                item_url = excluded.item_url,
                affiliate_url = excluded.affiliate_url,
                shop_name = excluded.shop_name,
                title = excluded.title,
                price = excluded.price,
                image_url = excluded.image_url,
                updated_at = excluded.updated_at
            """,
            (
                raw_id,
                item.site_id,
                item.item_code,
                item.item_url,
                item.affiliate_url,
                item.shop_name,
                item.title,
                item.price,
                item.image_url,
                item.source,
                now,
                now,
            ),
        )
        await self.db.commit()

        row = await self.db.fetchone("SELECT * FROM raw_items WHERE id = ?", (raw_id,))
        return RawItem(**dict(row))

    async def get_product(self, dedupe_key: str) -> CatalogProduct | None:
        """Load a catalog product by dedupe key."""
        row = await self.db.fetchone(
            "SELECT data FROM catalog_products WHERE dedupe_key = ?", (dedupe_key,)
        )
        if not row:
            return None
        return CatalogProduct.model_validate_json(row["data"])

    async def save_product(self, product: CatalogProduct) -> None:
        """Write a catalog product, replacing any previous version."""
        await self.db.execute(
            """
            INSERT OR REPLACE INTO catalog_products
                (dedupe_key, product_name, data, ai_summary, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                product.dedupe_key,
                product.product_name,
                product.model_dump_json(),
                product.ai_summary,
                product.created_at,
                product.updated_at,
            ),
        )

    async def list_products(
        self, page: int = 1, page_size: int = 20
    ) -> tuple[list[CatalogProduct], int]:
        """List catalog products, most recently updated first."""
        count_row = await self.db.fetchone("SELECT COUNT(*) FROM catalog_products")
        total = count_row[0] if count_row else 0

        offset = (page - 1) * page_size
        rows = await self.db.fetchall(
            """
            SELECT data FROM catalog_products
            ORDER BY updated_at DESC
            LIMIT ? OFFSET ?
            """,
            (page_size, offset),
        )
        items = [CatalogProduct.model_validate_json(row["data"]) for row in rows]
        return items, total

    async def build_from_raw(self, limit: int = 500) -> BuildCatalogResult:
        """Fold the newest raw items into the catalog.

        Args:
            limit: Maximum number of raw items to scan

        Returns:
            Counts of scanned, inserted, merged and skipped items
        """
        now = now_ms()
        result = BuildCatalogResult()

        rows = await self.db.fetchall(
            "SELECT * FROM raw_items ORDER BY updated_at DESC LIMIT ?", (limit,)
        )

        for row in rows:
            result.scanned += 1
            data = dict(row)
            price = data.get("price")
            if not data.get("title") or price is None or not math.isfinite(price):
                result.skipped += 1
                continue

            incoming = to_catalog_unit(RawItem(**data), now)
            existing = await self.get_product(incoming.dedupe_key)

            if existing is None:
                await self.save_product(incoming)
                result.upserted += 1
            else:
                await self.save_product(merge_catalog(existing, incoming, now))
                result.merged += 1
                logger.debug(
                    f"Merged '{incoming.product_name}' into {incoming.dedupe_key}"
                )

        await self.db.commit()
        logger.info(
            f"Catalog build: scanned={result.scanned} upserted={result.upserted} "
            f"merged={result.merged} skipped={result.skipped}"
        )
        return result
