"""Product deduplication utilities.

Listings of the same product arrive from several shops with different
bracket styles, promo noise, casing and spacing. This module reduces a title
to a canonical form and hashes it, so that the catalog keeps one document
per product.
"""

import hashlib
import re
import unicodedata
from dataclasses import dataclass
from urllib.parse import urlparse

# East-Asian and ASCII brackets
BRACKETS_RE = re.compile(r"[【】\[\]()（）]")

WHITESPACE_RE = re.compile(r"\s+")

# Symbols that carry meaning in titles (percentages, pricing, model numbers).
# Changing this set changes the dedupe key of already-ingested products.
KEPT_SYMBOLS = frozenset("%+.-")

# Uppercase tokens that look like model numbers but are port/feature names
NOT_A_MODEL = frozenset({"USB", "TYPEC", "TYPE-C", "PD", "QC", "LED"})

MODEL_TOKEN_RE = re.compile(r"[A-Z0-9-]{4,}")


def _is_kept(ch: str) -> bool:
    if ch in KEPT_SYMBOLS or ch.isspace():
        return True
    # Unicode letters (L*) and numbers (N*)
    return unicodedata.category(ch)[0] in ("L", "N")


def normalize_title(title: str) -> str:
    """Normalize a product title for duplicate detection.

    - Convert to lowercase
    - Replace brackets with spaces
    - Replace anything but letters, numbers, whitespace and ``%+.-`` with spaces
    - Collapse whitespace

    Args:
        title: The raw product title

    Returns:
        Normalized title, possibly empty
    """
    text = title.lower()
    text = BRACKETS_RE.sub(" ", text)
    text = "".join(c if _is_kept(c) else " " for c in text)
    text = WHITESPACE_RE.sub(" ", text)
    return text.strip()


def make_dedupe_key(title: str) -> str:
    """Generate the catalog dedupe key for a product title.

    Titles that normalize identically always share a key.

    Returns:
        40-character lowercase SHA-1 hex digest
    """
    norm = normalize_title(title)
    return hashlib.sha1(norm.encode("utf-8")).hexdigest()


@dataclass
class DedupeSource:
    """Identifiers available for a listing, strongest first."""

    product_name: str
    asin: str | None = None
    jan: str | None = None
    ean: str | None = None
    model_number: str | None = None
    image_url: str | None = None


def model_from_name(name: str | None) -> str | None:
    """Guess a model number from a product name."""
    if not name:
        return None
    for token in MODEL_TOKEN_RE.findall(name.upper()):
        if token not in NOT_A_MODEL:
            return token
    return None


def image_key(url: str | None) -> str | None:
    """Return the file name of an image URL, ignoring the query string."""
    if not url:
        return None
    path = urlparse(url).path
    return path.rstrip("/").split("/")[-1] or None


def build_dedupe_key(src: DedupeSource) -> tuple[str, str]:
    """Build a dedupe key from the strongest identifier a listing has.

    Returns:
        ``(key, reason)`` where reason names the identifier used
    """
    if src.asin:
        return f"asin:{src.asin}", "asin"
    if src.jan:
        return f"jan:{src.jan}", "jan"
    if src.ean:
        return f"ean:{src.ean}", "ean"
    if src.model_number:
        return f"model:{src.model_number}", "modelNumber"

    model = model_from_name(src.product_name)
    if model:
        return f"model:{model}", "modelFromName"

    image = image_key(src.image_url)
    if image:
        return f"img:{image}", "imageKey"

    norm = WHITESPACE_RE.sub(" ", (src.product_name or "").lower())[:120]
    return f"title:{norm}", "title"
