"""Services module."""

from .catalog import CatalogService, merge_catalog, to_catalog_unit
from .llm import ClaudeProvider, LLMProvider, OpenAIProvider, get_llm_provider
from .site_config import SiteConfigStore
from .sites import SiteCatalog
from .summary import SummaryService, make_summary

__all__ = [
    "CatalogService",
    "merge_catalog",
    "to_catalog_unit",
    "LLMProvider",
    "OpenAIProvider",
    "ClaudeProvider",
    "get_llm_provider",
    "SiteConfigStore",
    "SiteCatalog",
    "SummaryService",
    "make_summary",
]
