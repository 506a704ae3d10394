# Providers — the per-process handle owning both provider integrations.
# Created: 2026-10-12

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from socialauth.config import Settings, get_config_dir
from socialauth.integrations.oauth import ProviderConfig
from socialauth.integrations.token_store import (
    CredentialStore,
    TwitchCredential,
    TwitterCredential,
)
from socialauth.integrations.twitch import TwitchClient
from socialauth.integrations.twitter import TwitterClient

logger = logging.getLogger(__name__)


@dataclass
class Providers:
    """Both integrations, built once at startup and injected into handlers."""

    twitch: TwitchClient
    twitter: TwitterClient

    def availability(self) -> dict[str, bool]:
        return {
            "twitch": self.twitch.store.is_connected(),
            "twitter": self.twitter.store.is_connected(),
        }

    def store_for(self, service: str) -> CredentialStore | None:
        client = {"twitch": self.twitch, "twitter": self.twitter}.get(service)
        return client.store if client else None


def build_providers(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> Providers:
    """Create both clients and load their persisted credentials.

    Raises CorruptCredentialError if a credential file exists but is invalid;
    the process must not start in that state.
    """
    data_dir = get_config_dir(settings)

    twitch_config = ProviderConfig.for_provider(
        "twitch",
        client_id=settings.twitch_client_id,
        client_secret=settings.twitch_client_secret,
        redirect_uri=settings.resolved_twitch_redirect_uri,
        scopes=settings.twitch_scopes,
    )
    twitter_config = ProviderConfig.for_provider(
        "twitter",
        client_id=settings.twitter_api_key,
        client_secret=settings.twitter_api_secret,
        redirect_uri=settings.resolved_twitter_callback_url,
    )

    twitch_store = CredentialStore("twitch", TwitchCredential, data_dir)
    twitter_store = CredentialStore("twitter", TwitterCredential, data_dir)
    twitch_store.load()
    twitter_store.load()

    for config in (twitch_config, twitter_config):
        if not config.client_id or not config.client_secret:
            logger.warning("%s client credentials are not configured", config.name)

    return Providers(
        twitch=TwitchClient(
            twitch_config, twitch_store, timeout=settings.http_timeout, transport=transport
        ),
        twitter=TwitterClient(
            twitter_config, twitter_store, timeout=settings.http_timeout, transport=transport
        ),
    )
