"""Utility modules for the Affiscope backend."""

from .dedup import build_dedupe_key, make_dedupe_key, normalize_title
from .slug import a8_blog_slug, daily_slug

__all__ = [
    "normalize_title",
    "make_dedupe_key",
    "build_dedupe_key",
    "a8_blog_slug",
    "daily_slug",
]
