"""Provider integrations: credential storage, OAuth handshakes and the request gateway."""

from socialauth.integrations.errors import (
    ConfigError,
    CorruptCredentialError,
    GatewayError,
    MalformedUpstreamError,
    NoCredentialError,
    NotFoundError,
    PersistenceError,
    TransportError,
    UpstreamError,
)

__all__ = [
    "ConfigError",
    "CorruptCredentialError",
    "GatewayError",
    "MalformedUpstreamError",
    "NoCredentialError",
    "NotFoundError",
    "PersistenceError",
    "TransportError",
    "UpstreamError",
]
