"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    log_level: str = Field(default="INFO")

    # WhatsApp Cloud API (calling)
    waba_token: str = Field(min_length=1, description="Bearer token for the WhatsApp Business Account.")
    waba_phone_id: str = Field(min_length=1, description="phone_number_id of the WABA number receiving calls.")
    waba_base: str = Field(
        default="https://graph.facebook.com/v20.0",
        description="Base URL for the Cloud API, including the Graph API version.",
    )

    # Media edge
    edge_api: str = Field(min_length=1, description="Base URL of the media edge, e.g. https://edge.example.com")

    # Outgoing requests
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for every request to WhatsApp or the edge.",
    )

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    @field_validator("waba_base", "edge_api")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
