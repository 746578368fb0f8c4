"""
Thin async client for the upstream document-QA API using httpx.

One short-lived AsyncClient per call, each with the timeout of its operation
weight. No retries: transport failures surface as UpstreamUnavailable.
"""
from typing import Any
from urllib.parse import quote

import httpx
from fastapi.responses import Response
from loguru import logger
from pydantic import ValidationError

from bridge.config import Settings
from bridge.core.errors import UpstreamError, UpstreamParseError, UpstreamStatusError, UpstreamUnavailable
from bridge.models.files import IngestedFileList

# Not forwarded in either direction. httpx hands back a decoded body, so the
# upstream's length and encoding no longer describe it.
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
    "host",
    "content-length",
    "content-encoding",
}


class UpstreamClient:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.base_url = settings.upstream_url
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=self._transport)

    async def _request(self, method: str, path: str, timeout: float, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client(timeout) as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            # Transport failures, timeouts and undecodable bodies alike.
            raise UpstreamUnavailable("Upstream API error", details=str(e) or type(e).__name__) from e
        except httpx.InvalidURL as e:
            raise UpstreamError("Invalid upstream request", details=str(e)) from e

    async def health(self) -> httpx.Response:
        return await self._request("GET", "/health", self.settings.metadata_timeout)

    async def post_json(self, endpoint: str, payload: dict[str, Any], timeout: float | None = None) -> httpx.Response:
        return await self._request(
            "POST",
            endpoint,
            timeout or self.settings.generation_timeout,
            json=payload,
        )

    async def ingest_file(self, filename: str, content: bytes, content_type: str | None = None) -> httpx.Response:
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        return await self._request("POST", "/v1/ingest/file", self.settings.upload_timeout, files=files)

    async def list_ingested(self) -> IngestedFileList:
        """
        Fetch the raw, non-deduplicated list of ingested files.

        Raises UpstreamUnavailable, UpstreamStatusError on non-200 and
        UpstreamParseError when the body does not decode.
        """
        resp = await self._request("GET", "/v1/ingest/list", self.settings.metadata_timeout)
        if resp.status_code != 200:
            raise UpstreamStatusError(resp.status_code, resp.content, resp.headers.get("content-type"))
        try:
            return IngestedFileList.model_validate_json(resp.content)
        except ValidationError as e:
            raise UpstreamParseError("Error parsing response", details=str(e)) from e

    async def delete_ingested(self, doc_id: str) -> httpx.Response:
        return await self._request(
            "DELETE",
            f"/v1/ingest/{quote(doc_id, safe='')}",
            self.settings.metadata_timeout,
        )

    async def embeddings(self, body: bytes) -> httpx.Response:
        return await self._request(
            "POST",
            "/v1/embeddings",
            self.settings.upload_timeout,
            content=body,
            headers={"Content-Type": "application/json"},
        )

    async def forward(
        self,
        method: str,
        path: str,
        query: str = "",
        headers: dict[str, str] | None = None,
        body: bytes = b"",
    ) -> httpx.Response:
        target = f"{path}?{query}" if query else path
        logger.debug("Proxying {} {} to {}{}", method, path, self.base_url, path)
        return await self._request(
            method,
            target,
            self.settings.generation_timeout,
            headers=strip_hop_by_hop(headers or {}),
            content=body or None,
        )


def strip_hop_by_hop(headers: Any) -> dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in HOP_BY_HOP_HEADERS}


def relay(resp: httpx.Response) -> Response:
    """Pass an upstream response through: status, body and end-to-end headers."""
    response = Response(content=resp.content, status_code=resp.status_code)
    # multi_items keeps repeated headers such as Set-Cookie apart.
    for key, value in resp.headers.multi_items():
        if key.lower() not in HOP_BY_HOP_HEADERS:
            response.raw_headers.append((key.lower().encode("latin-1"), value.encode("latin-1")))
    return response
