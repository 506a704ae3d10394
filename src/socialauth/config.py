# Settings — environment / .env driven configuration.
# Created: 2026-10-12

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Process configuration.

    Every field can be set through a ``SOCIALAUTH_<FIELD>`` environment
    variable or a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="SOCIALAUTH_",
        env_file=".env",
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    # Credential files (<provider>_auth.json) live here
    data_dir: Path = Field(default_factory=Path.cwd)

    # Static shared secret for the /api/v1 routes; generated at startup if unset
    api_key: str | None = None

    # Base URL the providers redirect back to
    public_url: str = "http://localhost:8000"

    twitch_client_id: str = ""
    twitch_client_secret: str = ""
    twitch_redirect_uri: str | None = None
    twitch_scopes: list[str] = Field(
        default_factory=lambda: ["user:read:email", "channel:manage:broadcast", "channel:edit:commercial"]
    )

    twitter_api_key: str = ""
    twitter_api_secret: str = ""
    twitter_callback_url: str | None = None

    # Seconds; applied to every outbound provider call
    http_timeout: float = 15.0

    @property
    def resolved_twitch_redirect_uri(self) -> str:
        if self.twitch_redirect_uri:
            return self.twitch_redirect_uri
        return f"{self.public_url.rstrip('/')}/twitch/authorize/callback"

    @property
    def resolved_twitter_callback_url(self) -> str:
        if self.twitter_callback_url:
            return self.twitter_callback_url
        return f"{self.public_url.rstrip('/')}/twitter/authorize/callback"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_config_dir(settings: Settings | None = None) -> Path:
    """Get/create the directory holding the credential files."""
    d = (settings or get_settings()).data_dir
    d.mkdir(parents=True, exist_ok=True)
    return d
