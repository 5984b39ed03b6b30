"""Site routes: which site am I on, switching sites, site config."""

from typing import Annotated, Any

from litestar import Controller, Request, get
from litestar.datastructures import State
from litestar.di import Provide
from litestar.exceptions import NotFoundException
from litestar.params import Parameter
from litestar.response import Redirect

from ..middleware import (
    SITE_COOKIE,
    SKIP_SITE_COOKIE,
    provide_site_id,
    site_cookie,
)
from ..models import PublicSiteConfig, WhoAmIResponse

ONE_YEAR_SECONDS = 60 * 60 * 24 * 365


class SiteController(Controller):
    """Controller for site selection endpoints."""

    path = "/api"
    dependencies = {"site_id": Provide(provide_site_id)}

    @get("/whoami")
    async def whoami(self, request: Request, site_id: str) -> WhoAmIResponse:
        """Show the site cookie, Host header and the site they resolve to."""
        return WhoAmIResponse(
            cookie=request.cookies.get(SITE_COOKIE),
            host=request.headers.get("host"),
            resolved=site_id,
        )

    @get("/switch-site", opt={SKIP_SITE_COOKIE: True})
    async def switch_site(
        self,
        request: Request,
        state: State,
        want: Annotated[str | None, Parameter(query="siteId")] = None,
    ) -> Redirect:
        """Remember a site for a year and go back to the home page."""
        resolved = state.site_catalog.resolve(
            requested=want,
            host=request.headers.get("host"),
            default=state.settings.default_site_id,
        )
        return Redirect(
            path="/",
            cookies=[site_cookie(resolved, max_age=ONE_YEAR_SECONDS)],
        )

    @get("/site")
    async def get_site(self, state: State, site_id: str) -> PublicSiteConfig:
        """Get the frontend config of the current site."""
        try:
            return state.site_catalog.public_config(
                site_id, ga4_fallback=state.settings.ga4_measurement_id or None
            )
        except LookupError as e:
            raise NotFoundException(str(e)) from e

    @get("/site/config")
    async def get_site_config(self, state: State, site_id: str) -> dict[str, Any]:
        """Get the raw JSON config of the current site."""
        config = state.site_configs.get(site_id)
        if config is None:
            raise NotFoundException(f"No config for site: {site_id}")
        return config
