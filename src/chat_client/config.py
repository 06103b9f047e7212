from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    API_BASE_URL: str = "http://localhost:8080"
    DIRECTORY_PATH: str = "/api/users/all"
    PROVIDER_TOKEN_PATH: str = "/api/auth/twilio"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    MESSAGE_PAGE_SIZE: int = 30

    GROUP_UNIQUE_NAME_PREFIX: str = "group-"
    DIRECT_UNIQUE_NAME_PREFIX: str = "chat-"

    MEDIA_CACHE_CAPACITY: int = 100
    MEDIA_URL_TTL_SECONDS: int = 300

    AVATAR_URL_TEMPLATE: str = (
        "https://ui-avatars.com/api/?name={name}&background=808080&color=fff"
    )

    CHAT_SCREEN: str = "Chat"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
