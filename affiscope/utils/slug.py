"""Slug helpers for blog posts generated from offers and products."""

import re
from datetime import date, datetime
from urllib.parse import quote

SAFE_RE = re.compile(r"[^a-z0-9\u3040-\u309f\u30a0-\u30ff\u3400-\u4dbf\u4e00-\u9fff\-_.~]+")
DASHES_RE = re.compile(r"-+")


def safe_segment(text: str | None) -> str:
    """Make text safe for a document path or URL, keeping Japanese script."""
    text = (text or "").lower()
    text = SAFE_RE.sub("-", text)
    text = DASHES_RE.sub("-", text)
    return text.strip("-")


def format_ymd(ts: int | None = None) -> str:
    """Format an epoch-millisecond timestamp (default: now) as YYYYMMDD."""
    moment = datetime.fromtimestamp(ts / 1000) if ts else datetime.now()
    return moment.strftime("%Y%m%d")


def a8_blog_slug(
    site_id: str, offer_id: str, title: str | None = None, ts: int | None = None
) -> str:
    """Unique slug for an A8 offer blog post.

    Format: ``a8-<siteId>-<offerId>-<YYYYMMDD>[-<title, 40 chars>]``
    """
    base = f"a8-{safe_segment(site_id)}-{safe_segment(offer_id)}-{format_ymd(ts)}"
    if title:
        tail = safe_segment(title)[:40]
        if tail:
            return f"{base}-{tail}"
    return base


def daily_slug(site_id: str, product_key: str, today: date | None = None) -> str:
    """Slug for the daily product post: ``<siteId>_<productKey>_<YYYYMMDD>``.

    The product key is percent-encoded, so ``shop:123`` becomes ``shop%3A123``.
    """
    today = today or date.today()
    safe_key = quote(product_key, safe="-_.!~*'()")
    return f"{site_id}_{safe_key}_{today.strftime('%Y%m%d')}"
