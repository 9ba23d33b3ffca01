"""Application configuration."""

import os
from urllib.parse import urlsplit

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    chatter_username: str
    chatter_password: str
    chatter_login_server_url: str = "https://login.salesforce.com"
    http_timeout_seconds: float = 30.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_login_server_url(raw: str) -> str:
    """Validate a login server address and strip any trailing slash."""
    cleaned = raw.strip()
    parts = urlsplit(cleaned)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"login server url must be an absolute http(s) url: {raw!r}")
    return cleaned.rstrip("/")
