from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOCAL_USER_ID: str = ""

    REDIS_URL: str = "redis://localhost:6379/0"
    PUSH_CHANNEL_PREFIX: str = "chat.user"

    CHAT_API_URL: str = "http://localhost:5000"
    CHAT_API_TOKEN: str = ""
    HTTP_TIMEOUT_SECONDS: float = 10.0

    PENDING_MUTATION_TTL_SECONDS: float = 30.0
    PENDING_MUTATION_MAX: int = 1000

    CORS_ORIGINS: list[str] = ["*"]

    WS_HEARTBEAT_SECONDS: int = 30
    WS_QUEUE_MAXSIZE: int = 256

    @property
    def push_channel(self) -> str:
        return f"{self.PUSH_CHANNEL_PREFIX}.{self.LOCAL_USER_ID}"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
