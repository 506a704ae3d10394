# OAuth 1.0a request signing (RFC 5849, HMAC-SHA1).
# Created: 2026-10-12
#
# Used for the request-token / access-token legs of the Twitter handshake
# and for every authenticated Twitter API call afterwards.

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from collections.abc import Mapping
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit


def generate_nonce() -> str:
    return secrets.token_urlsafe(32)


def get_timestamp() -> str:
    return str(int(time.time()))


def percent_encode(value: str) -> str:
    """Percent-encode per RFC 3986: everything but A-Z a-z 0-9 - . _ ~"""
    return quote(str(value), safe="~")


def normalize_url(url: str) -> str:
    """Base string URI: scheme and host lowercased, no query or fragment."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, "", ""))


def signature_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    """``METHOD&url&normalized_params``, with params sorted after encoding."""
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params.items())
    param_str = "&".join(f"{k}={v}" for k, v in encoded)
    return "&".join(
        [method.upper(), percent_encode(normalize_url(url)), percent_encode(param_str)]
    )


def sign_hmac_sha1(base_string: str, consumer_secret: str, token_secret: str = "") -> str:
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("utf-8")


def authorization_header(oauth_params: Mapping[str, str]) -> str:
    """Format: ``OAuth k1="v1", k2="v2"`` with keys sorted."""
    items = sorted(oauth_params.items())
    return "OAuth " + ", ".join(f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in items)


def sign_request(
    method: str,
    url: str,
    *,
    consumer_key: str,
    consumer_secret: str,
    token: str | None = None,
    token_secret: str = "",
    params: Mapping[str, str] | None = None,
    extra_oauth: Mapping[str, str] | None = None,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> str:
    """Return the ``Authorization`` header value for one request.

    ``params`` are the query and form-encoded body parameters; query params
    already present in ``url`` are included too. JSON bodies are not signed.
    ``extra_oauth`` carries protocol params such as ``oauth_callback`` or
    ``oauth_verifier``.
    """
    oauth_params = {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": "HMAC-SHA1",
        "oauth_timestamp": timestamp or get_timestamp(),
        "oauth_version": "1.0",
    }
    if token:
        oauth_params["oauth_token"] = token
    if extra_oauth:
        oauth_params.update(extra_oauth)

    signed = dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))
    if params:
        signed.update({k: str(v) for k, v in params.items()})
    signed.update(oauth_params)

    base = signature_base_string(method, url, signed)
    oauth_params["oauth_signature"] = sign_hmac_sha1(base, consumer_secret, token_secret)
    return authorization_header(oauth_params)
