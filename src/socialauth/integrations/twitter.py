# Twitter Client — post status updates with the operator's OAuth 1.0a token.
# Created: 2026-10-12

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx
from pydantic import BaseModel

from socialauth.integrations import oauth1
from socialauth.integrations.errors import (
    ConfigError,
    UpstreamError,
    parse_error_envelope,
)
from socialauth.integrations.gateway import RequestGateway
from socialauth.integrations.oauth import ProviderConfig, ThreeLeggedFlow
from socialauth.integrations.token_store import CredentialStore, TwitterCredential

logger = logging.getLogger(__name__)


class Tweet(BaseModel):
    id: str
    text: str = ""


class TweetResponse(BaseModel):
    data: Tweet


def parse_twitter_error(response: httpx.Response) -> UpstreamError:
    """Twitter errors come in two shapes.

    v2: ``{"title": ..., "detail": ..., "status": 403}``
    v1.1 / oauth: ``{"errors": [{"code": 32, "message": ...}]}``
    """
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("errors"), list) and data["errors"]:
        first = data["errors"][0]
        if isinstance(first, dict) and first.get("message"):
            return UpstreamError(response.status_code, str(first["message"]))
    if data is None and response.text.strip():
        # oauth/* endpoints sometimes answer with plain text
        return UpstreamError(response.status_code, response.text.strip()[:500])
    return parse_error_envelope(response, ("detail", "title", "message"))


def twitter_auth_headers(consumer_key: str, consumer_secret: str):
    def _authorize(
        credential: TwitterCredential, method: str, url: str, params: Mapping[str, str]
    ) -> dict[str, str]:
        header = oauth1.sign_request(
            method,
            url,
            consumer_key=consumer_key,
            consumer_secret=consumer_secret,
            token=credential.oauth_token,
            token_secret=credential.oauth_token_secret,
            params=params,
        )
        return {"Authorization": header}

    return _authorize


class TwitterClient:
    """Twitter operations signed with the stored access token."""

    def __init__(
        self,
        config: ProviderConfig,
        store: CredentialStore[TwitterCredential],
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.store = store
        self.flow = ThreeLeggedFlow(
            config, store, parse_twitter_error, timeout=timeout, transport=transport
        )
        self.gateway = RequestGateway(
            store,
            twitter_auth_headers(config.client_id, config.client_secret),
            parse_twitter_error,
            timeout=timeout,
            transport=transport,
        )

    async def post_update(self, text: str) -> Tweet | None:
        """Post a status update. Returns the created tweet when Twitter echoes it."""
        if not text or not text.strip():
            raise ConfigError("tweet body is empty")

        res = await self.gateway.call(
            "POST",
            f"{self.config.api_base}/tweets",
            body={"text": text},
            response_model=TweetResponse,
        )
        if res is None:
            return None
        logger.info("Posted tweet %s", res.data.id)
        return res.data
