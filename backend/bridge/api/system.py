from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from bridge.api.deps import get_upstream
from bridge.clients.upstream import UpstreamClient
from bridge.core.errors import UpstreamUnavailable
from bridge.models.system import HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health(upstream: UpstreamClient = Depends(get_upstream)):
    try:
        resp = await upstream.health()
    except UpstreamUnavailable as e:
        logger.warning("Health check: upstream unreachable: {}", e.details)
        return JSONResponse(
            status_code=503,
            content={
                "status": "error",
                "message": "Upstream API is not available",
                "error": e.details,
            },
        )

    return HealthResponse(
        status="ok",
        message="Bridge server is running",
        upstream_status=resp.status_code == 200,
        upstream_url=upstream.base_url,
    )
