"""Database connection and schema management."""

import logging
from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
from litestar.datastructures import State

logger = logging.getLogger(__name__)

# SQL Schema definitions
SCHEMA_SQL = """
-- Raw items: listings as scraped, one row per shop item
CREATE TABLE IF NOT EXISTS raw_items (
    id TEXT PRIMARY KEY,
    site_id TEXT NOT NULL,
    item_code TEXT,
    item_url TEXT NOT NULL,
    affiliate_url TEXT,
    shop_name TEXT,
    title TEXT NOT NULL,
    price REAL,
    image_url TEXT,
    source TEXT NOT NULL DEFAULT 'rakuten',
    fetched_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

-- Catalog: one JSON document per dedupe key
CREATE TABLE IF NOT EXISTS catalog_products (
    dedupe_key TEXT PRIMARY KEY,
    product_name TEXT NOT NULL,
    data TEXT NOT NULL,
    ai_summary TEXT NOT NULL DEFAULT '',
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

-- Affiliate offers shown in site galleries
CREATE TABLE IF NOT EXISTS offers (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    images TEXT NOT NULL DEFAULT '[]',
    creatives TEXT NOT NULL DEFAULT '[]',
    site_ids TEXT NOT NULL DEFAULT '[]',
    archived BOOLEAN NOT NULL DEFAULT FALSE,
    updated_at INTEGER NOT NULL
);

-- Indexes for common queries
CREATE INDEX IF NOT EXISTS idx_raw_items_updated_at ON raw_items(updated_at);
CREATE INDEX IF NOT EXISTS idx_raw_items_site_id ON raw_items(site_id);
CREATE INDEX IF NOT EXISTS idx_catalog_updated_at ON catalog_products(updated_at);
CREATE INDEX IF NOT EXISTS idx_offers_updated_at ON offers(updated_at);
"""


class Database:
    """Async SQLite database wrapper.

    Constructed explicitly and owned by whoever connects it: the application
    lifespan for the web app, or a script's ``main``.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Establish database connection and initialize schema."""
        # Ensure the data directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row

        await self._init_schema()

        logger.info(f"Connected to database: {self.db_path}")

    async def _init_schema(self) -> None:
        """Initialize database schema."""
        if self._connection is None:
            raise RuntimeError("Database not connected")

        await self._connection.executescript(SCHEMA_SQL)
        await self._connection.commit()
        logger.info("Database schema initialized")

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
            logger.info("Database connection closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.disconnect()

    @property
    def connection(self) -> aiosqlite.Connection:
        """Get the active database connection."""
        if self._connection is None:
            raise RuntimeError("Database not connected")
        return self._connection

    async def execute(
        self, sql: str, parameters: tuple | dict | None = None
    ) -> aiosqlite.Cursor:
        """Execute a SQL statement."""
        if parameters:
            return await self.connection.execute(sql, parameters)
        return await self.connection.execute(sql)

    async def executemany(
        self, sql: str, parameters: list[tuple | dict]
    ) -> aiosqlite.Cursor:
        """Execute a SQL statement with multiple parameter sets."""
        return await self.connection.executemany(sql, parameters)

    async def fetchone(
        self, sql: str, parameters: tuple | dict | None = None
    ) -> aiosqlite.Row | None:
        """Execute a query and fetch one result."""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self, sql: str, parameters: tuple | dict | None = None
    ) -> list[aiosqlite.Row]:
        """Execute a query and fetch all results."""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchall()

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.connection.commit()


async def db_dependency(state: State) -> AsyncGenerator[Database, None]:
    """Dependency injection for database access in routes."""
    yield state.db
