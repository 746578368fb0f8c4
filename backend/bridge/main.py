from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from loguru import logger

from bridge.api import chat, documents, proxy, static, system
from bridge.clients.upstream import UpstreamClient
from bridge.config import Settings, get_settings
from bridge.core.cors import OpenCORSMiddleware
from bridge.core.errors import (
    BridgeError,
    ClientDisconnected,
    UpstreamStatusError,
    bridge_error_handler,
    client_disconnected_handler,
    upstream_status_handler,
    validation_error_handler,
)
from bridge.core.logging import configure_logging

ENDPOINTS = [
    "GET    /health - Health check",
    "POST   /api/upload - Upload files",
    "GET    /api/files - List files",
    "DELETE /api/files/{doc_id} - Delete file",
    "DELETE /api/files/delete-all - Delete all files",
    "GET    /api/processing-status?filename=file.pdf - Check processing status",
    "POST   /api/chat - Chat with modes: rag, search, basic, summarize",
    "POST   /api/clear-history - Clear chat history",
    "POST   /api/embeddings - Generate embeddings",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("Starting bridge server on port {}", settings.port)
    logger.info("Upstream API: {}", settings.upstream_url)

    static_dir = Path(settings.static_dir)
    if not static_dir.exists():
        logger.warning("Static directory {} not found. Creating it...", static_dir)
        static_dir.mkdir(parents=True, exist_ok=True)

    logger.info("Web UI available at http://{}:{}", settings.host, settings.port)
    logger.info("API endpoints:")
    for line in ENDPOINTS:
        logger.info("  {}", line)
    yield
    logger.info("Bridge server shut down")


def create_app(settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="PrivateGPT Bridge",
        version="0.1.0",
        description="HTTP bridge between the browser UI and the PrivateGPT document-QA API",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upstream = UpstreamClient(settings, transport=transport)

    app.add_middleware(OpenCORSMiddleware)

    app.add_exception_handler(BridgeError, bridge_error_handler)
    app.add_exception_handler(UpstreamStatusError, upstream_status_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ClientDisconnected, client_disconnected_handler)

    # Named handlers first, then the generic proxies, then static files.
    named_routers = [system.router, chat.router, documents.router]
    app.state.named_routes = [route for named in named_routers for route in named.routes]
    for named in named_routers:
        app.include_router(named)
    app.include_router(proxy.router)
    app.include_router(static.router)

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
