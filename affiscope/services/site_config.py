"""Per-site JSON configuration with a read-through cache."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SiteConfigStore:
    """Loads ``<sites_dir>/<siteId>.json`` once per siteId.

    Misses are cached too: a missing or unparsable file yields ``None``
    until ``clear()`` is called.
    """

    def __init__(self, sites_dir: str | Path):
        self.sites_dir = Path(sites_dir)
        self._cache: dict[str, dict[str, Any] | None] = {}

    def _path_for(self, site_id: str) -> Path | None:
        path = self.sites_dir / f"{site_id}.json"
        # siteId comes from requests; refuse anything that escapes sites_dir
        if path.resolve().parent != self.sites_dir.resolve():
            return None
        return path

    def get(self, site_id: str) -> dict[str, Any] | None:
        """Return the raw site config, or None if it cannot be read."""
        if site_id in self._cache:
            return self._cache[site_id]

        config = None
        path = self._path_for(site_id)
        if path is not None:
            try:
                config = json.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                logger.debug(f"No site config for {site_id}")
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to read site config {path}: {e}")

        self._cache[site_id] = config
        return config

    def affiliate_tag(self, site_id: str, network: str = "amazon") -> str | None:
        """Partner tag configured for an affiliate network, if any."""
        config = self.get(site_id) or {}
        network_config = (config.get("affiliate") or {}).get(network) or {}
        return network_config.get("partnerTag")

    def clear(self) -> None:
        self._cache.clear()
