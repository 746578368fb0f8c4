"""
Mode translation: one generic chat request in, one upstream call out.

    rag        /v1/chat/completions  full history, context per config, sources on
    basic      /v1/chat/completions  last 4 turns, never any document context
    summarize  /v1/completions       summary instruction + message, context forced on
    search     /v1/chunks            message only, no generation

Translation is pure; sending the payload is the caller's job.
"""
from enum import Enum
from typing import Any

from bridge.models.chat import ChatTurn, UnifiedChatRequest
from bridge.models.upstream import ChatCompletionPayload, ChunksPayload, CompletionPayload, ContextFilter

CHAT_ENDPOINT = "/v1/chat/completions"
COMPLETION_ENDPOINT = "/v1/completions"
CHUNKS_ENDPOINT = "/v1/chunks"

DEFAULT_MODEL = "private-gpt"
SEARCH_LIMIT = 10
SEARCH_PREV_NEXT_CHUNKS = 1
BASIC_HISTORY_TURNS = 4
SUMMARY_INSTRUCTION = "Please provide a comprehensive summary of the following content: "


class Mode(str, Enum):
    RAG = "rag"
    SEARCH = "search"
    BASIC = "basic"
    SUMMARIZE = "summarize"


def resolve_mode(raw: str | None) -> Mode:
    try:
        return Mode(raw)
    except ValueError:
        return Mode.RAG


def _context_filter(selected_docs: list[str]) -> ContextFilter | None:
    return ContextFilter(docs_ids=list(selected_docs)) if selected_docs else None


def _conversation(request: UnifiedChatRequest, history: list[ChatTurn]) -> list[ChatTurn]:
    messages: list[ChatTurn] = []
    if request.system_prompt:
        messages.append(ChatTurn(role="system", content=request.system_prompt))
    messages.extend(history)
    messages.append(ChatTurn(role="user", content=request.message))
    return messages


def _search(request: UnifiedChatRequest, model: str) -> tuple[str, ChunksPayload]:
    return CHUNKS_ENDPOINT, ChunksPayload(
        text=request.message,
        limit=SEARCH_LIMIT,
        prev_next_chunks=SEARCH_PREV_NEXT_CHUNKS,
        context_filter=_context_filter(request.config.selected_docs),
    )


def _basic(request: UnifiedChatRequest, model: str) -> tuple[str, ChatCompletionPayload]:
    # Older turns are dropped to bound the context size.
    history = request.history[-BASIC_HISTORY_TURNS:]
    return CHAT_ENDPOINT, ChatCompletionPayload(
        model=model,
        messages=_conversation(request, history),
        use_context=False,
        include_sources=False,
        max_tokens=request.config.max_tokens,
        temperature=request.config.temperature,
    )


def _summarize(request: UnifiedChatRequest, model: str) -> tuple[str, CompletionPayload]:
    return COMPLETION_ENDPOINT, CompletionPayload(
        model=model,
        prompt=f"{SUMMARY_INSTRUCTION}{request.message}",
        use_context=True,
        include_sources=True,
        context_filter=_context_filter(request.config.selected_docs),
        max_tokens=request.config.max_tokens,
        temperature=request.config.temperature,
    )


def _rag(request: UnifiedChatRequest, model: str) -> tuple[str, ChatCompletionPayload]:
    config = request.config
    context_filter = _context_filter(config.selected_docs) if config.use_context else None
    return CHAT_ENDPOINT, ChatCompletionPayload(
        model=model,
        messages=_conversation(request, request.history),
        use_context=config.use_context,
        include_sources=True,
        context_filter=context_filter,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
    )


_BUILDERS = {
    Mode.SEARCH: _search,
    Mode.BASIC: _basic,
    Mode.SUMMARIZE: _summarize,
    Mode.RAG: _rag,
}


def translate(request: UnifiedChatRequest, model: str = DEFAULT_MODEL) -> tuple[str, dict[str, Any]]:
    """Return the upstream endpoint and JSON payload for a chat request."""
    endpoint, payload = _BUILDERS[resolve_mode(request.config.mode)](request, model)
    return endpoint, payload.model_dump(exclude_none=True)
