"""
Configuration loader for the Quick.ai backend.

Environment variables are centralized here to keep the rest of the code
focused on request handling and to make operational tuning clear.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # OpenAI-compatible completions API (OpenAI, Groq, ...)
    openai_api_key: Optional[str] = Field(None)
    openai_base_url: str = Field("https://api.openai.com/v1")
    llm_model: str = Field("llama-3.3-70b-versatile")
    llm_timeout_seconds: float = Field(60.0)

    # Background removal
    rembg_model: str = Field("u2net")
    temp_dir_prefix: str = Field("bg-rem-")
    # None keeps remote image fetches unbounded.
    image_fetch_timeout_seconds: Optional[float] = Field(None)

    # API
    host: str = Field("0.0.0.0")
    port: int = Field(5000)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field("INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {'|'.join(sorted(LOG_LEVELS))}")
        return v.upper()

    @field_validator("openai_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("OPENAI_BASE_URL must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("llm_timeout_seconds", "image_fetch_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("timeouts must be positive")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()
