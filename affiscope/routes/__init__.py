"""Routes module."""

from .catalog import CatalogController
from .offers import OfferController
from .sites import SiteController

__all__ = [
    "CatalogController",
    "OfferController",
    "SiteController",
]
