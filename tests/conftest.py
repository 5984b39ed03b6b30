"""Shared fixtures: temporary database, site definitions and app client."""

import json

import pytest
from litestar.testing import AsyncTestClient

from affiscope.app import create_app
from affiscope.config import Settings
from affiscope.db import Database

SITES = {
    "affiscope": {
        "siteId": "affiscope",
        "displayName": "Affiscope",
        "domain": "localhost",
    },
    "chairscope": {
        "siteId": "chairscope",
        "displayName": "ChairScope",
        "domain": "www.chairscope.com",
        "brand": {"primary": "#1F2937", "theme": "dark"},
        "analytics": {"ga4MeasurementId": "G-CHAIR"},
        "affiliate": {"amazon": {"partnerTag": "chairscope-22"}},
    },
}


@pytest.fixture
def sites_dir(tmp_path):
    """Directory with one JSON file per site."""
    directory = tmp_path / "sites"
    directory.mkdir()
    for site_id, data in SITES.items():
        (directory / f"{site_id}.json").write_text(json.dumps(data), encoding="utf-8")
    return directory


@pytest.fixture
def settings(tmp_path, sites_dir):
    return Settings(
        database_path=str(tmp_path / "data" / "test.db"),
        sites_dir=str(sites_dir),
        default_site_id="affiscope",
        openai_api_key="",
        anthropic_api_key="",
    )


@pytest.fixture
async def db(settings):
    """Connected database on a temporary file."""
    async with Database(settings.database_path) as database:
        yield database


@pytest.fixture
async def client(settings):
    """Create async test client."""
    async with AsyncTestClient(app=create_app(settings)) as client:
        yield client
