# Gateway errors — one taxonomy for local state, transport and provider failures.
# Created: 2026-10-12
#
# Every failure surfaced by the credential store, the authorization flows and
# the request gateway is a GatewayError subclass. Provider-specific structure
# is dropped; only the status code and the human-readable message survive.

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

logger = logging.getLogger(__name__)

REASONS = {
    400: "bad request",
    401: "unauthorized",
    403: "unauthorized",
    404: "not found",
    422: "unprocessable entity",
    500: "internal server error",
    502: "bad gateway",
}


class GatewayError(Exception):
    """Base class for every error the gateway reports to its callers."""

    status: int = 500

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

    @property
    def reason(self) -> str:
        return REASONS.get(self.status, "unknown")

    def to_dict(self) -> dict[str, Any]:
        """Error body in the ``{status, error, message}`` shape the API returns."""
        return {"status": self.status, "error": self.reason, "message": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class NoCredentialError(GatewayError):
    """Operation attempted before the provider was connected."""

    status = 403

    def __init__(self, provider: str):
        super().__init__(f"no {provider} auth info available")
        self.provider = provider


class NotFoundError(GatewayError):
    """A named lookup legitimately had no match."""

    status = 404


class UpstreamError(GatewayError):
    """The provider answered with a structured failure."""

    def __init__(self, status: int, message: str):
        super().__init__(message, status=status)


class MalformedUpstreamError(GatewayError):
    """The provider response could not be parsed as expected."""

    status = 502


class TransportError(GatewayError):
    """Network, DNS, TLS or timeout failure before a response arrived."""

    status = 502


class ConfigError(GatewayError):
    """A URL, header or request could not be built from local inputs."""

    status = 500


class PersistenceError(GatewayError):
    """A credential file could not be read or written."""

    status = 500


class CorruptCredentialError(PersistenceError):
    """A credential file exists but does not hold a valid credential."""


def map_exception(exc: BaseException) -> GatewayError:
    """Translate any exception raised while talking to a provider into the taxonomy.

    The mapping is total: unknown exceptions become a ConfigError since they
    originate locally. The original message text is always kept.
    """
    if isinstance(exc, GatewayError):
        return exc
    message = str(exc) or type(exc).__name__
    # Order matters: InvalidURL/LocalProtocolError are not TransportErrors but
    # UnsupportedProtocol is.
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol, httpx.LocalProtocolError)):
        return ConfigError(message)
    if isinstance(exc, (httpx.TimeoutException, httpx.TransportError)):
        return TransportError(message)
    if isinstance(exc, (ValidationError, json.JSONDecodeError, httpx.DecodingError)):
        return MalformedUpstreamError(message)
    if isinstance(exc, OSError):
        return PersistenceError(message)
    if isinstance(exc, (ValueError, TypeError, UnicodeError)):
        return ConfigError(message)
    logger.debug("Unclassified gateway exception %s: %s", type(exc).__name__, message)
    return ConfigError(message)


def parse_error_envelope(response: httpx.Response, message_keys: tuple[str, ...]) -> UpstreamError:
    """Build an UpstreamError from a JSON error body.

    ``message_keys`` are tried in order; the first string value wins. The
    status comes from the body when present, otherwise from the response.
    Raises MalformedUpstreamError when the body is not a JSON object or holds
    none of the keys.
    """
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedUpstreamError(
            f"unparseable error response ({response.status_code}): {exc}"
        ) from exc

    if not isinstance(data, dict):
        raise MalformedUpstreamError(f"unexpected error response ({response.status_code})")

    for key in message_keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            status = data.get("status")
            if not isinstance(status, int) or isinstance(status, bool):
                status = response.status_code
            return UpstreamError(status, value)

    raise MalformedUpstreamError(
        f"error response ({response.status_code}) carries no message: {response.text[:200]}"
    )
