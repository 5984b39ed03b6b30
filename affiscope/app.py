"""Litestar application setup."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from litestar import Litestar, get
from litestar.config.cors import CORSConfig
from litestar.datastructures import State
from litestar.logging import LoggingConfig
from litestar.middleware import DefineMiddleware
from litestar.openapi import OpenAPIConfig
from litestar.openapi.spec import Contact

from .config import Settings, get_settings
from .db import Database
from .middleware import SiteMiddleware
from .models import HealthResponse
from .routes import CatalogController, OfferController, SiteController
from .services.site_config import SiteConfigStore
from .services.sites import SiteCatalog

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncIterator[None]:
    """Application lifespan context manager.

    Connects the database on startup and closes it on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting Affiscope with database: {settings.database_path}")

    db = Database(settings.database_path)
    await db.connect()
    app.state.db = db

    try:
        yield
    finally:
        await db.disconnect()
        logger.info("Database connection closed")


@get("/api/health")
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", database="connected")


def create_app(settings: Settings | None = None) -> Litestar:
    """Create the Litestar application for the given settings."""
    settings = settings or get_settings()

    state = State(
        {
            "settings": settings,
            "site_catalog": SiteCatalog.load(settings.sites_dir, settings.host_site_map),
            "site_configs": SiteConfigStore(settings.sites_dir),
        }
    )

    # CORS configuration for frontend development
    cors_config = CORSConfig(
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    # OpenAPI documentation configuration
    openapi_config = OpenAPIConfig(
        title="Affiscope API",
        version="0.1.0",
        description="Multi-site affiliate catalog and offer gallery API",
        contact=Contact(name="Affiscope"),
    )

    # Logging configuration
    logging_config = LoggingConfig(
        root={"level": settings.log_level, "handlers": ["console"]},
        formatters={
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        log_exceptions="always",
    )

    return Litestar(
        route_handlers=[
            health_check,
            SiteController,
            OfferController,
            CatalogController,
        ],
        middleware=[DefineMiddleware(SiteMiddleware)],
        lifespan=[lifespan],
        state=state,
        cors_config=cors_config,
        openapi_config=openapi_config,
        logging_config=logging_config,
    )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "affiscope.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
