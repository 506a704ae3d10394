# Twitch Client — Helix API calls on behalf of the connected broadcaster.
# Created: 2026-10-12

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx
from pydantic import BaseModel, Field

from socialauth.integrations.errors import (
    MalformedUpstreamError,
    NotFoundError,
    UpstreamError,
    parse_error_envelope,
)
from socialauth.integrations.gateway import RequestGateway, require_body
from socialauth.integrations.oauth import AuthorizationCodeFlow, ProviderConfig
from socialauth.integrations.token_store import CredentialStore, TwitchCredential

logger = logging.getLogger(__name__)


class _IdEntry(BaseModel):
    id: str


class SearchResponse(BaseModel):
    data: list[_IdEntry] = Field(default_factory=list)


class Commercial(BaseModel):
    """Outcome of a commercial break request."""

    length: int
    message: str = ""
    retry_after: int = 0


class CommercialResponse(BaseModel):
    data: list[Commercial] = Field(default_factory=list)


def parse_twitch_error(response: httpx.Response) -> UpstreamError:
    """Twitch errors look like ``{"error": "Unauthorized", "status": 401, "message": "..."}``."""
    return parse_error_envelope(response, ("message", "error"))


def twitch_auth_headers(client_id: str):
    def _authorize(
        credential: TwitchCredential, method: str, url: str, params: Mapping[str, str]
    ) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {credential.access_token}",
            "Client-Id": client_id,
        }

    return _authorize


class TwitchClient:
    """Twitch Helix operations using the stored user access token."""

    def __init__(
        self,
        config: ProviderConfig,
        store: CredentialStore[TwitchCredential],
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.store = store
        self.flow = AuthorizationCodeFlow(
            config, store, parse_twitch_error, timeout=timeout, transport=transport
        )
        self.gateway = RequestGateway(
            store,
            twitch_auth_headers(config.client_id),
            parse_twitch_error,
            timeout=timeout,
            transport=transport,
        )

    def _url(self, path: str) -> str:
        return f"{self.config.api_base}/{path}"

    async def get_game_id(self, game_name: str) -> str:
        """Resolve a category name to its id (first search hit).

        Returns an empty string when nothing matches.
        """
        res = await self.gateway.call(
            "GET",
            self._url("search/categories"),
            params={"query": game_name},
            response_model=SearchResponse,
        )
        res = require_body(res, "search categories")
        if not res.data:
            logger.info("No Twitch category matches %r", game_name)
            return ""
        return res.data[0].id

    async def get_channel_id(self, login: str) -> str:
        """Resolve a channel login to its broadcaster id."""
        res = await self.gateway.call(
            "GET",
            self._url("users"),
            params={"login": login},
            response_model=SearchResponse,
        )
        res = require_body(res, "get users")
        if not res.data:
            raise NotFoundError(f"no twitch channel named {login!r}")
        return res.data[0].id

    async def update_channel(self, channel_id: str, game_id: str, title: str) -> None:
        """Set the live title and category. Twitch answers 204 No Content."""
        body: dict[str, str] = {"title": title}
        # An empty game_id would clear the category
        if game_id:
            body["game_id"] = game_id
        await self.gateway.call(
            "PATCH",
            self._url("channels"),
            params={"broadcaster_id": channel_id},
            body=body,
        )
        logger.info("Updated Twitch channel %s", channel_id)

    async def update_broadcast(self, login: str, game: str, title: str) -> None:
        """Resolve the channel and category by name, then update the channel."""
        channel_id = await self.get_channel_id(login)
        game_id = await self.get_game_id(game)
        await self.update_channel(channel_id, game_id, title)

    async def run_commercial(self, channel_id: str, length: int) -> Commercial:
        """Start a commercial break; returns the reported length and cooldown."""
        res = await self.gateway.call(
            "POST",
            self._url("channels/commercial"),
            body={"broadcaster_id": channel_id, "length": length},
            response_model=CommercialResponse,
        )
        res = require_body(res, "start commercial")
        if not res.data:
            raise MalformedUpstreamError("start commercial: empty data")
        return res.data[0]
