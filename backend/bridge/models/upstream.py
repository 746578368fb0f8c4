"""
Payload shapes accepted by the upstream /v1 API.

Dumped with exclude_none so optional knobs are omitted rather than sent as null.
"""
from pydantic import BaseModel

from bridge.models.chat import ChatTurn


class ContextFilter(BaseModel):
    docs_ids: list[str]


class ChatCompletionPayload(BaseModel):
    model: str
    messages: list[ChatTurn]
    use_context: bool
    include_sources: bool
    stream: bool = False
    context_filter: ContextFilter | None = None
    max_tokens: int | None = None
    temperature: float | None = None


class CompletionPayload(BaseModel):
    model: str
    prompt: str
    use_context: bool
    include_sources: bool
    stream: bool = False
    context_filter: ContextFilter | None = None
    max_tokens: int | None = None
    temperature: float | None = None


class ChunksPayload(BaseModel):
    text: str
    limit: int
    prev_next_chunks: int
    stream: bool = False
    context_filter: ContextFilter | None = None
