from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatTurn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ModeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Kept as the raw string; unknown values fall back to rag at translation time.
    mode: str = "rag"
    use_context: bool = False
    selected_docs: list[str] = Field(default_factory=list)
    max_tokens: int | None = None
    temperature: float | None = None

    @field_validator("mode", mode="before")
    @classmethod
    def _none_mode(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("selected_docs", mode="before")
    @classmethod
    def _unique_docs(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return list(dict.fromkeys(value))
        return value


class UnifiedChatRequest(BaseModel):
    message: str
    config: ModeConfig = Field(default_factory=ModeConfig)
    system_prompt: str | None = None
    history: list[ChatTurn] = Field(default_factory=list)

    @field_validator("config", mode="before")
    @classmethod
    def _default_config(cls, value: Any) -> Any:
        return ModeConfig() if value is None else value

    @field_validator("history", mode="before")
    @classmethod
    def _default_history(cls, value: Any) -> Any:
        return [] if value is None else value
