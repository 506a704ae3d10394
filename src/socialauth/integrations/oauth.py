# OAuth flows — authorization-code (Twitch) and 3-legged OAuth 1.0a (Twitter).
# Created: 2026-10-12
#
# Each flow turns a user-initiated "connect" into a stored credential.
# Network exchanges run outside the store lock; the lock is only taken to
# read or install in-memory state.

from __future__ import annotations

import logging
import urllib.parse
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from socialauth.integrations import oauth1
from socialauth.integrations.errors import (
    ConfigError,
    MalformedUpstreamError,
    UpstreamError,
)
from socialauth.integrations.gateway import DEFAULT_TIMEOUT, ErrorParser, dispatch
from socialauth.integrations.token_store import CredentialStore

logger = logging.getLogger(__name__)


# Default endpoints per provider
PROVIDERS: dict[str, dict[str, str]] = {
    "twitch": {
        "auth_url": "https://id.twitch.tv/oauth2/authorize",
        "token_url": "https://id.twitch.tv/oauth2/token",
        "request_token_url": "",
        "api_base": "https://api.twitch.tv/helix",
    },
    "twitter": {
        "auth_url": "https://api.twitter.com/oauth/authorize",
        "token_url": "https://api.twitter.com/oauth/access_token",
        "request_token_url": "https://api.twitter.com/oauth/request_token",
        "api_base": "https://api.twitter.com/2",
    },
}


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable identity of one provider integration."""

    name: str
    client_id: str
    client_secret: str
    redirect_uri: str
    authorize_url: str
    token_url: str
    api_base: str
    request_token_url: str = ""
    scopes: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def for_provider(
        cls,
        name: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: tuple[str, ...] | list[str] = (),
    ) -> ProviderConfig:
        urls = PROVIDERS.get(name)
        if not urls:
            raise ValueError(f"Unknown OAuth provider: {name}")
        return cls(
            name=name,
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            authorize_url=urls["auth_url"],
            token_url=urls["token_url"],
            api_base=urls["api_base"],
            request_token_url=urls["request_token_url"],
            scopes=tuple(scopes),
        )


@dataclass(frozen=True)
class RequestToken:
    """Short-lived OAuth 1.0a request token awaiting the user's verifier."""

    oauth_token: str
    oauth_token_secret: str


class AuthorizationFlow(ABC):
    """Drives one provider's handshake from "connect" to a stored credential."""

    def __init__(
        self,
        config: ProviderConfig,
        store: CredentialStore[Any],
        error_parser: ErrorParser,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.store = store
        self.error_parser = error_parser
        self.timeout = timeout
        self.transport = transport

    @abstractmethod
    async def begin(self) -> str:
        """Start the handshake and return the URL to send the user to."""

    @abstractmethod
    async def complete(self, params: Mapping[str, str]) -> None:
        """Finish the handshake from the provider's callback query params."""

    def _credential_from(self, data: Any):
        try:
            return self.store.credential_cls.from_dict(data)  # type: ignore[attr-defined]
        except (ValueError, TypeError) as e:
            raise MalformedUpstreamError(f"invalid {self.config.name} token response: {e}") from e


class AuthorizationCodeFlow(AuthorizationFlow):
    """OAuth 2.0 authorization code grant.

    ``begin`` is pure; the exchange code arrives in the callback itself.
    """

    def get_auth_url(self) -> str:
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.config.scopes),
            "force_verify": "true",
        }
        return f"{self.config.authorize_url}?{urllib.parse.urlencode(params)}"

    async def begin(self) -> str:
        return self.get_auth_url()

    async def complete(self, params: Mapping[str, str]) -> None:
        if params.get("error"):
            # User denied consent or the provider rejected the request
            message = params.get("error_description") or params["error"]
            raise UpstreamError(400, message)

        code = params.get("code")
        if not code:
            raise ConfigError("missing authorization code")

        await self.exchange_code(code)

    async def exchange_code(self, code: str) -> None:
        """Exchange an authorization code for a credential and store it."""
        response = await dispatch(
            "POST",
            self.config.token_url,
            timeout=self.timeout,
            transport=self.transport,
            data={
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.config.redirect_uri,
            },
        )
        if not response.is_success:
            raise self.error_parser(response)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedUpstreamError(f"unparseable {self.config.name} token response") from e

        credential = self._credential_from(data)
        await self.store.replace(credential)
        logger.info("OAuth credential obtained for %s", self.config.name)


class ThreeLeggedFlow(AuthorizationFlow):
    """OAuth 1.0a request-token / access-token exchange.

    Holds a single PendingAuthorization slot. Every ``begin`` overwrites it
    (last writer wins); concurrent handshakes are not deduplicated.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._pending: RequestToken | None = None

    @property
    def pending(self) -> RequestToken | None:
        return self._pending

    async def begin(self) -> str:
        url = self.config.request_token_url
        header = oauth1.sign_request(
            "POST",
            url,
            consumer_key=self.config.client_id,
            consumer_secret=self.config.client_secret,
            extra_oauth={"oauth_callback": self.config.redirect_uri},
        )
        response = await dispatch(
            "POST", url, timeout=self.timeout, transport=self.transport, headers={"Authorization": header}
        )
        if not response.is_success:
            raise self.error_parser(response)

        values = self._parse_form(response)
        token = RequestToken(values["oauth_token"], values["oauth_token_secret"])

        async with self.store.lock:
            if self._pending is not None:
                logger.debug("Replacing pending %s request token", self.config.name)
            self._pending = token

        params = urllib.parse.urlencode({"oauth_token": token.oauth_token})
        return f"{self.config.authorize_url}?{params}"

    async def complete(self, params: Mapping[str, str]) -> None:
        async with self.store.lock:
            pending = self._pending
        if pending is None:
            logger.info("No pending %s authorization, nothing to confirm", self.config.name)
            return

        if params.get("denied"):
            # User cancelled on the consent screen
            await self._clear_pending(pending)
            raise UpstreamError(400, f"{self.config.name} authorization denied by user")

        verifier = params.get("oauth_verifier")
        if not verifier:
            raise ConfigError("missing oauth_verifier")

        callback_token = params.get("oauth_token")
        if callback_token and callback_token != pending.oauth_token:
            logger.warning(
                "%s callback token does not match the pending request token", self.config.name
            )

        url = self.config.token_url
        header = oauth1.sign_request(
            "POST",
            url,
            consumer_key=self.config.client_id,
            consumer_secret=self.config.client_secret,
            token=pending.oauth_token,
            token_secret=pending.oauth_token_secret,
            extra_oauth={"oauth_verifier": verifier},
        )
        response = await dispatch(
            "POST", url, timeout=self.timeout, transport=self.transport, headers={"Authorization": header}
        )
        if not response.is_success:
            raise self.error_parser(response)

        credential = self._credential_from(self._parse_form(response))
        try:
            await self.store.replace(credential)
        finally:
            await self._clear_pending(pending)
        logger.info("OAuth credential obtained for %s", self.config.name)

    async def _clear_pending(self, pending: RequestToken) -> None:
        async with self.store.lock:
            # A newer begin() may have replaced the slot meanwhile
            if self._pending is pending:
                self._pending = None

    def _parse_form(self, response: httpx.Response) -> dict[str, str]:
        values = dict(urllib.parse.parse_qsl(response.text))
        if not values.get("oauth_token") or not values.get("oauth_token_secret"):
            raise MalformedUpstreamError(f"invalid {self.config.name} token response")
        return values
