from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Upstream document-QA API (PrivateGPT)
    upstream_base_url: str = "http://localhost:8001"
    model_name: str = "private-gpt"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    static_dir: str = "static"

    # Uploads
    max_upload_bytes: int = 50 * 1024 * 1024
    allowed_extensions: frozenset[str] = frozenset({
        ".pdf", ".docx", ".doc", ".txt", ".md", ".html",
        ".csv", ".json", ".pptx", ".ppt", ".epub", ".ipynb",
    })

    # Upstream timeouts in seconds, by operation weight
    metadata_timeout: float = 30.0
    upload_timeout: float = 60.0
    generation_timeout: float = 120.0

    # App
    log_level: str = "INFO"
    disconnect_poll_interval: float = 0.5

    @property
    def upstream_url(self) -> str:
        return self.upstream_base_url.rstrip("/")

    class Config:
        env_prefix = "BRIDGE_"
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
