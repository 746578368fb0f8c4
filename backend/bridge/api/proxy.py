"""
Raw reverse proxy for /v1/* and /api/* paths without a named handler.

Included after every named router. The app factory records the named routers'
routes on app.state.named_routes; a request whose path belongs to a named
handler but whose method does not gets a 405 here instead of being proxied.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from loguru import logger
from starlette.routing import Match

from bridge.api.deps import get_app_settings, get_upstream
from bridge.clients.upstream import UpstreamClient, relay
from bridge.config import Settings
from bridge.core.cancellation import cancel_on_disconnect
from bridge.core.errors import UpstreamUnavailable

router = APIRouter(tags=["proxy"])

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]
PROXY_PREFIXES = ("/v1/", "/api/")


def shadowing_route(request: Request) -> APIRoute | None:
    """Return the named route that owns this path, if any."""
    for route in request.app.state.named_routes:
        if not isinstance(route, APIRoute) or not route.path.startswith(PROXY_PREFIXES):
            continue
        match, _ = route.matches(request.scope)
        if match != Match.NONE:
            return route
    return None


async def proxy(
    request: Request,
    upstream: UpstreamClient = Depends(get_upstream),
    settings: Settings = Depends(get_app_settings),
):
    named = shadowing_route(request)
    if named is not None:
        return JSONResponse(
            status_code=405,
            content={"error": "Method not allowed"},
            headers={"Allow": ", ".join(sorted(named.methods))},
        )

    body = await request.body()
    try:
        resp = await cancel_on_disconnect(
            request,
            upstream.forward(
                request.method,
                request.url.path,
                request.url.query,
                dict(request.headers),
                body,
            ),
            settings.disconnect_poll_interval,
        )
    except UpstreamUnavailable as e:
        logger.error("Proxy error: {}", e.details)
        return JSONResponse(
            status_code=502,
            content={"error": "Upstream API is not available", "details": e.details},
        )

    logger.info("Proxied {} {} -> {}", request.method, request.url.path, resp.status_code)
    return relay(resp)


router.add_api_route("/v1/{path:path}", proxy, methods=PROXY_METHODS, include_in_schema=False)
router.add_api_route("/api/{path:path}", proxy, methods=PROXY_METHODS, include_in_schema=False)
