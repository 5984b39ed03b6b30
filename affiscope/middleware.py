"""Site selection middleware.

Every response carries the resolved siteId as a cookie and an ``x-site-id``
header. A ``?site=<id>`` query parameter switches site: the client is
redirected to the same URL without the parameter.
"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from litestar import Request
from litestar.datastructures import Cookie, MutableScopeHeaders
from litestar.enums import ScopeType
from litestar.middleware import AbstractMiddleware
from litestar.response.redirect import ASGIRedirectResponse
from litestar.types import Message, Receive, Scope, Send

SITE_COOKIE = "siteId"
SITE_HEADER = "x-site-id"
SITE_QUERY_PARAM = "site"

# Route handlers with this opt set manage the site cookie themselves
SKIP_SITE_COOKIE = "skip_site_cookie"


def resolve_request_site(request: Request, requested: str | None = None) -> str:
    """Resolve the siteId for a request from parameter, cookie, host and default."""
    state = request.app.state
    return state.site_catalog.resolve(
        requested=requested,
        cookie=request.cookies.get(SITE_COOKIE),
        host=request.headers.get("host"),
        default=state.settings.default_site_id,
    )


async def provide_site_id(request: Request) -> str:
    """Dependency providing the current request's siteId."""
    return resolve_request_site(request)


def site_cookie(site_id: str, max_age: int | None = None) -> Cookie:
    return Cookie(
        key=SITE_COOKIE,
        value=site_id,
        path="/",
        httponly=False,
        samesite="lax",
        max_age=max_age,
    )


def strip_query_param(url: str, name: str) -> str:
    """Return url without the given query parameter."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
    return urlunsplit(parts._replace(query=urlencode(query)))


class SiteMiddleware(AbstractMiddleware):
    """Keeps the site cookie and header current on every HTTP response."""

    scopes = {ScopeType.HTTP}
    exclude_opt_key = SKIP_SITE_COOKIE

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request: Request = Request(scope)
        requested = (request.query_params.get(SITE_QUERY_PARAM) or "").strip()
        site_id = resolve_request_site(request, requested or None)
        cookie = site_cookie(site_id)

        if requested:
            target = strip_query_param(str(request.url), SITE_QUERY_PARAM)
            response = ASGIRedirectResponse(
                path=target,
                status_code=302,
                headers={SITE_HEADER: site_id},
                cookies=[cookie],
            )
            await response(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableScopeHeaders.from_message(message=message)
                headers[SITE_HEADER] = site_id
                headers.add("set-cookie", cookie.to_header(header=""))
            await send(message)

        await self.app(scope, receive, send_wrapper)
