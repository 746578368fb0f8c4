"""
Pytest fixtures for the bridge: settings, a fake upstream behind
httpx.MockTransport, and a TestClient wired to both.
"""
import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from bridge.clients.upstream import UpstreamClient
from bridge.config import Settings
from bridge.main import create_app

UPSTREAM_URL = "http://upstream.test"


class FakeUpstream:
    """In-memory stand-in for the document-QA API."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.files: list[dict] = []
        self.failing_deletes: set[str] = set()
        self.unreachable = False
        self.overrides: dict[tuple[str, str], httpx.Response] = {}

    def add_file(self, doc_id: str, file_name: str | None = None) -> None:
        metadata = {"file_name": file_name} if file_name is not None else None
        self.files.append({"doc_id": doc_id, "doc_metadata": metadata})

    def calls(self, method: str, prefix: str = "") -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.startswith(prefix)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        key = (request.method, request.url.path)
        if key in self.overrides:
            return self.overrides[key]

        path = request.url.path
        if key == ("GET", "/health"):
            return httpx.Response(200, json={"status": "ok"})
        if key == ("GET", "/v1/ingest/list"):
            return httpx.Response(200, json={"object": "list", "model": "private-gpt", "data": self.files})
        if request.method == "DELETE" and path.startswith("/v1/ingest/"):
            doc_id = path.removeprefix("/v1/ingest/")
            if doc_id in self.failing_deletes:
                return httpx.Response(500, json={"detail": "delete failed"})
            self.files = [f for f in self.files if f["doc_id"] != doc_id]
            return httpx.Response(200, json={})
        if key == ("POST", "/v1/ingest/file"):
            return httpx.Response(200, json={"object": "list", "model": "private-gpt", "data": [{"doc_id": "new"}]})

        body = json.loads(request.content) if request.content else None
        return httpx.Response(
            200,
            json={"path": path, "query": request.url.query.decode(), "payload": body},
            headers={"X-Upstream": "yes"},
        )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    static_dir = tmp_path / "static"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<html>bridge</html>", encoding="utf-8")
    (static_dir / "app.js").write_text("console.log('bridge');", encoding="utf-8")
    return Settings(upstream_base_url=UPSTREAM_URL, static_dir=str(static_dir))


@pytest.fixture
def upstream_client(settings: Settings, upstream: FakeUpstream) -> UpstreamClient:
    return UpstreamClient(settings, transport=httpx.MockTransport(upstream))


@pytest.fixture
def client(settings: Settings, upstream: FakeUpstream):
    app = create_app(settings, transport=httpx.MockTransport(upstream))
    with TestClient(app) as test_client:
        yield test_client
