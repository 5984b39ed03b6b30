"""Tests for the site catalog and per-site config store."""

import json

import pytest

from affiscope.services.site_config import SiteConfigStore
from affiscope.services.sites import SiteCatalog


@pytest.fixture
def catalog(sites_dir) -> SiteCatalog:
    return SiteCatalog.load(sites_dir)


def test_load_applies_defaults(catalog):
    affiscope = catalog.get_entry("affiscope")
    assert affiscope.display_name == "Affiscope"
    assert affiscope.brand.primary == "#111827"
    assert affiscope.brand.accent == "#22D3EE"
    assert affiscope.brand.logo_url == "/logos/default.svg"
    assert affiscope.brand.theme == "light"

    chair = catalog.get_entry("chairscope")
    assert chair.brand.primary == "#1F2937"
    assert chair.brand.theme == "dark"
    assert chair.analytics.ga4_measurement_id == "G-CHAIR"


def test_load_skips_broken_files(sites_dir):
    (sites_dir / "broken.json").write_text("{not json", encoding="utf-8")
    (sites_dir / "no-id.json").write_text(json.dumps({"displayName": "x"}), encoding="utf-8")

    catalog = SiteCatalog.load(sites_dir)

    assert sorted(catalog.site_ids) == ["affiscope", "chairscope"]


def test_load_skips_documents_with_wrong_shapes(tmp_path):
    (tmp_path / "ok.json").write_text(json.dumps({"siteId": "ok"}), encoding="utf-8")
    (tmp_path / "list.json").write_text("[1, 2]", encoding="utf-8")
    (tmp_path / "number.json").write_text("42", encoding="utf-8")
    (tmp_path / "domain.json").write_text(
        json.dumps({"siteId": "d", "domain": ["x"]}), encoding="utf-8"
    )

    catalog = SiteCatalog.load(tmp_path)

    assert catalog.site_ids == ["ok"]


def test_non_object_sections_fall_back_to_defaults(tmp_path):
    (tmp_path / "b.json").write_text(
        json.dumps({"siteId": "b", "brand": "x", "analytics": [1], "features": 3}),
        encoding="utf-8",
    )

    entry = SiteCatalog.load(tmp_path).get_entry("b")

    assert entry.brand.primary == "#111827"
    assert entry.analytics.ga4_measurement_id is None


def test_load_missing_directory(tmp_path):
    catalog = SiteCatalog.load(tmp_path / "nope")
    assert catalog.sites == []
    assert catalog.resolve(default="affiscope") == "affiscope"


def test_display_name_defaults_to_site_id(tmp_path):
    (tmp_path / "bare.json").write_text(json.dumps({"siteId": "bare"}), encoding="utf-8")
    entry = SiteCatalog.load(tmp_path).get_entry("bare")
    assert entry.display_name == "bare"
    assert entry.domain == "localhost"


def test_domain_map_covers_www_variants(catalog):
    assert catalog.domain_to_site_id["www.chairscope.com"] == "chairscope"
    assert catalog.domain_to_site_id["chairscope.com"] == "chairscope"
    assert catalog.domain_to_site_id["localhost"] == "affiscope"
    assert catalog.domain_to_site_id["www.localhost"] == "affiscope"


def test_site_for_host_ignores_port_and_case(catalog):
    assert catalog.site_for_host("ChairScope.com") == "chairscope"
    assert catalog.site_for_host("localhost:3000") == "affiscope"
    assert catalog.site_for_host("example.org") is None
    assert catalog.site_for_host(None) is None


def test_host_map_overrides(sites_dir):
    catalog = SiteCatalog.load(sites_dir, {"Preview.Example.com": "chairscope"})
    assert catalog.site_for_host("preview.example.com") == "chairscope"


def test_resolve_priority(catalog):
    # request parameter beats cookie beats host beats default
    assert catalog.resolve("chairscope", "affiscope", "localhost", "affiscope") == "chairscope"
    assert catalog.resolve(None, "chairscope", "localhost", "affiscope") == "chairscope"
    assert catalog.resolve(None, None, "www.chairscope.com", "affiscope") == "chairscope"
    assert catalog.resolve(None, None, "example.org", "chairscope") == "chairscope"


def test_resolve_ignores_unknown_and_blank_values(catalog):
    assert catalog.resolve(" ", "unknown", "chairscope.com", "affiscope") == "chairscope"
    assert catalog.resolve(" chairscope ", None, None, "affiscope") == "chairscope"


def test_resolve_unknown_default_falls_back_to_first_site(catalog):
    assert catalog.resolve(None, None, None, "missing") == "affiscope"


def test_get_entry_unknown_falls_back_to_first(catalog):
    assert catalog.get_entry("missing").site_id == "affiscope"


def test_get_entry_without_sites():
    with pytest.raises(LookupError):
        SiteCatalog([]).get_entry("any")


def test_public_config(catalog):
    local = catalog.public_config("affiscope")
    assert local.url_origin == "http://localhost"
    assert local.title == "Affiscope"
    assert local.description.startswith("Affiscope - ")

    chair = catalog.public_config("chairscope", ga4_fallback="G-ENV")
    assert chair.url_origin == "https://www.chairscope.com"
    assert chair.brand_color == "#1F2937"
    assert chair.theme == "dark"
    assert chair.analytics.ga4_measurement_id == "G-CHAIR"


def test_public_config_ga4_fallback(catalog):
    config = catalog.public_config("affiscope", ga4_fallback="G-ENV")
    assert config.analytics.ga4_measurement_id == "G-ENV"


# --- SiteConfigStore ---


def test_store_reads_and_caches(sites_dir):
    store = SiteConfigStore(sites_dir)

    config = store.get("chairscope")
    assert config["siteId"] == "chairscope"

    (sites_dir / "chairscope.json").unlink()
    assert store.get("chairscope") is config


def test_store_caches_misses_until_cleared(sites_dir):
    store = SiteConfigStore(sites_dir)
    assert store.get("later") is None

    (sites_dir / "later.json").write_text(json.dumps({"siteId": "later"}), encoding="utf-8")
    assert store.get("later") is None

    store.clear()
    assert store.get("later") == {"siteId": "later"}


def test_store_broken_file_is_none(sites_dir):
    (sites_dir / "broken.json").write_text("{", encoding="utf-8")
    assert SiteConfigStore(sites_dir).get("broken") is None


def test_store_rejects_path_escape(sites_dir):
    (sites_dir.parent / "secret.json").write_text("{}", encoding="utf-8")
    assert SiteConfigStore(sites_dir).get("../secret") is None


def test_affiliate_tag(sites_dir):
    store = SiteConfigStore(sites_dir)
    assert store.affiliate_tag("chairscope") == "chairscope-22"
    assert store.affiliate_tag("affiscope") is None
    assert store.affiliate_tag("missing") is None
