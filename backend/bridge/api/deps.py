from fastapi import Request

from bridge.clients.upstream import UpstreamClient
from bridge.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_upstream(request: Request) -> UpstreamClient:
    return request.app.state.upstream
