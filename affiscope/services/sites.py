"""Site catalog: site definitions from sites/*.json and siteId resolution."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..models import PublicSiteConfig, SiteAnalytics, SiteEntry

logger = logging.getLogger(__name__)

LOCAL_DOMAIN_RE = re.compile(r"(^|\.)localhost$|(^|\.)127\.0\.0\.1$")


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def parse_site_entry(data: Any) -> SiteEntry:
    """Build a SiteEntry from a site JSON document, filling defaults.

    Raises:
        ValueError: If the document is not a JSON object.
        KeyError: If siteId is missing.
    """
    if not isinstance(data, dict):
        raise ValueError(f"site document must be an object, got {type(data).__name__}")
    brand = _section(data, "brand")
    analytics = _section(data, "analytics")
    return SiteEntry.model_validate(
        {
            "site_id": data["siteId"],
            "display_name": data.get("displayName") or data["siteId"],
            "domain": data.get("domain") or "localhost",
            "brand": {
                k: v
                for k, v in {
                    "primary": brand.get("primary"),
                    "accent": brand.get("accent"),
                    "logo_url": brand.get("logoUrl"),
                    "theme": brand.get("theme"),
                }.items()
                if v is not None
            },
            "features": _section(data, "features"),
            "analytics": {
                "ga4_measurement_id": analytics.get("ga4MeasurementId"),
                "hotjar_site_id": analytics.get("hotjarSiteId"),
                "clarity_project_id": analytics.get("clarityProjectId"),
            },
        }
    )


class SiteCatalog:
    """All known sites, with host lookup and siteId resolution."""

    def __init__(self, sites: list[SiteEntry], host_map: dict[str, str] | None = None):
        self.sites = sites
        self.domain_to_site_id = self._build_domain_map(sites)
        # Explicit host entries win over declared domains
        self.domain_to_site_id.update(
            {host.lower(): site_id for host, site_id in (host_map or {}).items()}
        )

    @classmethod
    def load(cls, sites_dir: str | Path, host_map: dict[str, str] | None = None) -> "SiteCatalog":
        """Load every *.json in sites_dir. Unreadable files are skipped."""
        directory = Path(sites_dir)
        sites: list[SiteEntry] = []

        if not directory.is_dir():
            logger.warning(f"Sites directory not found: {directory}")
            return cls(sites, host_map)

        for path in sorted(directory.glob("*.json")):
            try:
                sites.append(parse_site_entry(json.loads(path.read_text(encoding="utf-8"))))
            except (OSError, ValueError, KeyError, ValidationError) as e:
                logger.warning(f"Failed to read site file {path}: {e}")

        logger.info(f"Loaded {len(sites)} sites from {directory}")
        return cls(sites, host_map)

    @staticmethod
    def _build_domain_map(sites: list[SiteEntry]) -> dict[str, str]:
        """Map canonical, naked and www. domains to their site."""
        mapping: dict[str, str] = {}
        for site in sites:
            canonical = site.domain.lower()
            naked = canonical.removeprefix("www.")
            mapping[canonical] = site.site_id
            mapping[naked] = site.site_id
            mapping[f"www.{naked}"] = site.site_id
        return mapping

    @property
    def site_ids(self) -> list[str]:
        return [s.site_id for s in self.sites]

    def site_for_host(self, host: str | None) -> str | None:
        """Look up a Host header value, with or without its port."""
        if not host:
            return None
        host = host.strip().lower()
        return self.domain_to_site_id.get(host) or self.domain_to_site_id.get(
            host.split(":")[0]
        )

    def resolve(
        self,
        requested: str | None = None,
        cookie: str | None = None,
        host: str | None = None,
        default: str | None = None,
    ) -> str:
        """Resolve the siteId for a request.

        Priority: explicit request parameter, cookie, Host lookup, default.
        Request and cookie values are only honoured for known sites.

        Returns:
            The resolved siteId. Falls back to the first loaded site, or to
            the default when no sites are loaded.
        """
        known = set(self.site_ids)
        for candidate in (requested, cookie):
            candidate = (candidate or "").strip()
            if candidate and candidate in known:
                return candidate

        from_host = self.site_for_host(host)
        if from_host:
            return from_host

        if default and (default in known or not self.sites):
            return default
        if self.sites:
            return self.sites[0].site_id
        return default or ""

    def get_entry(self, site_id: str) -> SiteEntry:
        """Return the entry for site_id, or the first site when unknown.

        Raises:
            LookupError: If no sites are loaded at all.
        """
        for site in self.sites:
            if site.site_id == site_id:
                return site
        if not self.sites:
            raise LookupError("No sites are configured")
        logger.warning(f"Unknown siteId: {site_id} -> fallback to {self.sites[0].site_id}")
        return self.sites[0]

    def public_config(self, site_id: str, ga4_fallback: str | None = None) -> PublicSiteConfig:
        """Build the frontend-facing config of a site."""
        site = self.get_entry(site_id)

        proto = "http" if LOCAL_DOMAIN_RE.search(site.domain) else "https"

        analytics: SiteAnalytics = site.analytics
        ga4 = analytics.ga4_measurement_id or ga4_fallback
        if ga4:
            analytics = analytics.model_copy(update={"ga4_measurement_id": ga4})

        return PublicSiteConfig(
            site_id=site.site_id,
            title=site.display_name,
            description=f"{site.display_name} - 比較・レビュー・おすすめ情報を毎日自動更新。",
            url_origin=f"{proto}://{site.domain}",
            brand_color=site.brand.primary,
            logo_url=site.brand.logo_url,
            theme=site.brand.theme,
            analytics=analytics,
        )
