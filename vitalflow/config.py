from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DASH_SCOPE_CHAT_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
DASH_SCOPE_IMAGE_URL = "https://dashscope.aliyuncs.com/api/v1/services/aigc/multimodal-generation/generation"
GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class LoggingSettings(BaseSettings):
    """Logging level only, so tools can log without the provider credentials."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    LOG_LEVEL: str = "INFO"


class Settings(LoggingSettings):
    """
    Manages all application settings. It automatically reads from
    environment variables or a .env file.
    """

    # Provider credentials
    QWEN_API_KEY: str
    GEMINI_API_KEY: Optional[str] = None

    # Chat provider (any OpenAI-compatible endpoint)
    QWEN_CHAT_URL: str = DASH_SCOPE_CHAT_URL
    QWEN_TEXT_MODEL: str = "qwen3-max"
    QWEN_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # Image provider
    IMAGE_PROVIDER: Literal["dashscope", "gemini"] = "dashscope"
    QWEN_IMAGE_URL: str = DASH_SCOPE_IMAGE_URL
    QWEN_IMAGE_MODEL: str = "qwen-image-plus"
    QWEN_IMAGE_SIZE: str = "1664*928"
    QWEN_IMAGE_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    GEMINI_IMAGE_URL: str = GEMINI_API_URL
    GEMINI_IMAGE_MODEL: str = "gemini-2.5-flash-image"

    # Server
    ALLOWED_ORIGINS: str = ""
    PORT: int = 4000
    # IANA zone used when printing reading dates, local time when unset
    TIMEZONE: Optional[str] = None

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings()


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process; raises if QWEN_API_KEY is missing."""
    return Settings()
