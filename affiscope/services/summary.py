"""Short catalog summaries shown on product cards."""

import logging

from ..db import Database
from ..models import CatalogProduct, SummaryResult
from .catalog import now_ms
from .llm import LLMProvider

logger = logging.getLogger(__name__)

SUMMARY_MAX_CHARS = 150

SUMMARY_SYSTEM_PROMPT = """You write product blurbs for a Japanese comparison site.
Rewrite the given facts as one natural Japanese sentence of at most 150 characters.
Do not invent specifications that are not in the facts."""


def yen(price: float | None) -> str:
    """Format a price as yen, empty when unknown."""
    if price is None:
        return ""
    # up to three fraction digits, trailing zeros dropped
    return "¥" + f"{price:,.3f}".rstrip("0").rstrip(".")


def clip(text: str, max_chars: int = SUMMARY_MAX_CHARS) -> str:
    """Clip text to max_chars, ending with an ellipsis when cut."""
    if len(text) > max_chars:
        return text[: max_chars - 1] + "…"
    return text


def make_summary(product: CatalogProduct) -> str:
    """Build a one-line summary from name, specs, price and tags."""
    capacity = ""
    if product.capacity and product.capacity.mAh:
        capacity = f"{product.capacity.mAh:,}mAh"
    elif product.capacity and product.capacity.Wh:
        capacity = f"{product.capacity.Wh}Wh"

    output = f"{product.output_power:g}W" if product.output_power is not None else ""

    weight = ""
    if product.weight is not None:
        weight = (
            f"{product.weight / 1000:.1f}kg"
            if product.weight >= 1000
            else f"{product.weight:g}g"
        )

    parts = [product.product_name]
    specs = " / ".join(s for s in (capacity, output, weight) if s)
    if specs:
        parts.append(f"主なスペック: {specs}")
    price = yen(product.price)
    if price:
        parts.append(f"参考価格: {price}")
    tags = [t for t in product.tags if t][:3]
    if tags:
        parts.append(f"タグ: {'・'.join(tags)}")

    return clip("。".join(parts))


class SummaryService:
    """Fills ``ai_summary`` on catalog products that lack one."""

    def __init__(self, db: Database, llm: LLMProvider | None = None):
        self.db = db
        self.llm = llm

    async def _summarize(self, product: CatalogProduct) -> str:
        text = make_summary(product)
        if self.llm is None or not text:
            return text
        rewritten = await self.llm.complete(text, SUMMARY_SYSTEM_PROMPT)
        return clip(rewritten.strip()) or text

    async def generate_missing(self, limit: int = 400) -> SummaryResult:
        """Generate summaries for the newest products without one."""
        rows = await self.db.fetchall(
            """
            SELECT data FROM catalog_products
            WHERE ai_summary = ''
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (limit,),
        )

        result = SummaryResult(scanned=len(rows))
        now = now_ms()

        for row in rows:
            product = CatalogProduct.model_validate_json(row["data"])
            text = await self._summarize(product)
            if not text:
                continue

            product = product.model_copy(update={"ai_summary": text, "updated_at": now})
            await self.db.execute(
                """
                UPDATE catalog_products
                SET data = ?, ai_summary = ?, updated_at = ?
                WHERE dedupe_key = ?
                """,
                (product.model_dump_json(), text, now, product.dedupe_key),
            )
            result.updated += 1

        await self.db.commit()
        logger.info(f"Summaries: scanned={result.scanned} updated={result.updated}")
        return result
