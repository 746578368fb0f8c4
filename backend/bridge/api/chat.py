from fastapi import APIRouter, Depends, Request
from loguru import logger

from bridge.api.deps import get_app_settings, get_upstream
from bridge.clients.upstream import UpstreamClient, relay
from bridge.config import Settings
from bridge.core.cancellation import cancel_on_disconnect
from bridge.core.modes import translate
from bridge.models.chat import UnifiedChatRequest

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat")
async def chat(
    body: UnifiedChatRequest,
    request: Request,
    upstream: UpstreamClient = Depends(get_upstream),
    settings: Settings = Depends(get_app_settings),
):
    config = body.config
    logger.info(
        "Chat request - mode: {}, use_context: {}, selected_docs: {}",
        config.mode, config.use_context, config.selected_docs,
    )

    endpoint, payload = translate(body, model=settings.model_name)
    resp = await cancel_on_disconnect(
        request,
        upstream.post_json(endpoint, payload, timeout=settings.generation_timeout),
        settings.disconnect_poll_interval,
    )

    logger.info("Chat request processed - mode: {}, endpoint: {}, status: {}", config.mode, endpoint, resp.status_code)
    return relay(resp)


@router.post("/clear-history")
async def clear_history():
    # History lives in the browser; nothing to clear here.
    return {"message": "History cleared successfully"}


@router.post("/embeddings")
async def embeddings(request: Request, upstream: UpstreamClient = Depends(get_upstream)):
    body = await request.body()
    resp = await upstream.embeddings(body)
    return relay(resp)
