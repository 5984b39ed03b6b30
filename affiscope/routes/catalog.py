"""Catalog routes: raw ingestion, catalog build, summaries and dedupe keys."""

import logging
from typing import Annotated

from litestar import Controller, get, post
from litestar.datastructures import State
from litestar.di import Provide
from litestar.exceptions import NotFoundException, ServiceUnavailableException
from litestar.params import Parameter

from ..db import Database, db_dependency
from ..models import (
    BuildCatalogResult,
    CatalogList,
    CatalogProduct,
    DedupeKeyRequest,
    DedupeKeyResponse,
    RawItem,
    RawItemCreate,
    SummaryResult,
)
from ..services.catalog import CatalogService
from ..services.llm import get_llm_provider
from ..services.summary import SummaryService
from ..utils.dedup import make_dedupe_key, normalize_title

logger = logging.getLogger(__name__)


class CatalogController(Controller):
    """Controller for catalog endpoints."""

    path = "/api/catalog"
    dependencies = {"db": Provide(db_dependency)}

    @get("/")
    async def list_products(
        self,
        db: Database,
        page: Annotated[int, Parameter(query="page", ge=1)] = 1,
        page_size: Annotated[int, Parameter(query="page_size", ge=1, le=100)] = 20,
    ) -> CatalogList:
        """List catalog products, most recently updated first."""
        items, total = await CatalogService(db).list_products(page, page_size)
        return CatalogList(items=items, total=total, page=page, page_size=page_size)

    @get("/{dedupe_key:str}")
    async def get_product(self, db: Database, dedupe_key: str) -> CatalogProduct:
        """Get a single catalog product by dedupe key."""
        product = await CatalogService(db).get_product(dedupe_key)
        if product is None:
            raise NotFoundException(f"Product not found: {dedupe_key}")
        return product

    @post("/raw")
    async def ingest_raw(self, db: Database, data: RawItemCreate) -> RawItem:
        """Store a scraped listing for the next catalog build."""
        return await CatalogService(db).ingest_raw(data)

    @post("/build", status_code=200)
    async def build_catalog(
        self,
        db: Database,
        limit: Annotated[int, Parameter(query="limit", ge=1, le=5000)] = 500,
    ) -> BuildCatalogResult:
        """Merge the newest raw items into the catalog."""
        return await CatalogService(db).build_from_raw(limit)

    @post("/summaries", status_code=200)
    async def generate_summaries(
        self,
        db: Database,
        state: State,
        limit: Annotated[int, Parameter(query="limit", ge=1, le=5000)] = 400,
        use_llm: Annotated[bool, Parameter(query="use_llm")] = False,
    ) -> SummaryResult:
        """Write summaries for products that have none.

        With ``use_llm`` the summary is rewritten by the configured provider.
        """
        if not use_llm:
            return await SummaryService(db).generate_missing(limit)

        try:
            llm = get_llm_provider(state.settings)
        except ValueError as e:
            raise ServiceUnavailableException(str(e)) from e

        try:
            return await SummaryService(db, llm).generate_missing(limit)
        finally:
            await llm.close()

    @post("/dedupe-key", status_code=200)
    async def dedupe_key(self, data: DedupeKeyRequest) -> DedupeKeyResponse:
        """Show how a title normalizes and which dedupe key it gets."""
        return DedupeKeyResponse(
            title=data.title,
            normalized=normalize_title(data.title),
            dedupe_key=make_dedupe_key(data.title),
        )
