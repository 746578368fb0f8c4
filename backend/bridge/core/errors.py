"""
Error taxonomy for the bridge and the FastAPI handlers that render it.

Every error body is JSON with at least an "error" key, except upstream status
passthrough, which relays the upstream body untouched.
"""
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from loguru import logger


class BridgeError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            content["details"] = self.details
        return content


class ClientInputError(BridgeError):
    """Malformed body, unsupported file, missing field. Never reaches upstream."""

    status_code = 400


class UpstreamError(BridgeError):
    status_code = 502


class UpstreamUnavailable(UpstreamError):
    """Connection refused, timeout or other transport failure."""

    status_code = 502


class UpstreamParseError(UpstreamError):
    """Upstream answered 200 with a body we cannot decode."""

    status_code = 500


class UpstreamStatusError(UpstreamError):
    """Upstream answered with a non-200 status; body is relayed as-is."""

    def __init__(self, status_code: int, body: bytes, media_type: str | None = None):
        super().__init__(f"Upstream returned status {status_code}")
        self.status_code = status_code
        self.body = body
        self.media_type = media_type or "application/json"


class ClientDisconnected(Exception):
    """The inbound client went away before the upstream call finished."""


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.error("{} {} failed upstream: {} ({})", request.method, request.url.path, exc.message, exc.details)
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def upstream_status_handler(request: Request, exc: UpstreamStatusError) -> Response:
    logger.warning("{} {}: upstream status {} passed through", request.method, request.url.path, exc.status_code)
    return Response(content=exc.body, status_code=exc.status_code, media_type=exc.media_type)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Invalid request to {}: {}", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


async def client_disconnected_handler(request: Request, exc: ClientDisconnected) -> Response:
    logger.info("Client disconnected during {} {}", request.method, request.url.path)
    return Response(status_code=499)
