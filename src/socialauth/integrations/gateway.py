# Request Gateway — authenticated provider calls with uniform error classification.
# Created: 2026-10-12
#
# One attempt per call, explicit timeout, no retries. Responses are
# classified into: typed body, no content (None) or a GatewayError.

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from socialauth.integrations.errors import (
    ConfigError,
    GatewayError,
    MalformedUpstreamError,
    NoCredentialError,
    map_exception,
)
from socialauth.integrations.token_store import C, CredentialStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

DEFAULT_TIMEOUT = 15.0

# (credential, method, url, query params) -> auth headers
Authorizer = Callable[[Any, str, str, Mapping[str, str]], dict[str, str]]
# Non-2xx response -> error to raise
ErrorParser = Callable[[httpx.Response], GatewayError]


async def dispatch(
    method: str,
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """Send a single request. Every exception is mapped into the taxonomy."""
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            return await client.request(method, url, **kwargs)
    except Exception as e:
        err = map_exception(e)
        logger.warning("%s %s failed: %s", method, url, err.message)
        raise err from e


def is_empty(response: httpx.Response) -> bool:
    if response.status_code == 204:
        return True
    if response.headers.get("content-length") == "0":
        return True
    return not response.content


def classify(
    response: httpx.Response,
    error_parser: ErrorParser,
    response_model: type[M] | None = None,
) -> M | None:
    """Turn a provider response into a model, None, or a raised GatewayError."""
    if not response.is_success:
        err = error_parser(response)
        logger.warning("Provider returned %d: %s", response.status_code, err.message)
        raise err

    if is_empty(response):
        return None
    if response_model is None:
        return None

    try:
        return response_model.model_validate_json(response.content)
    except ValidationError as e:
        raise MalformedUpstreamError(
            f"unexpected {response_model.__name__} response: {e.error_count()} validation error(s)"
        ) from e


def require_body(value: T | None, what: str) -> T:
    """For callers that need a typed result: an empty body is malformed."""
    if value is None:
        raise MalformedUpstreamError(f"{what}: body was none")
    return value


class RequestGateway(Generic[C]):
    """Builds, dispatches and classifies authenticated calls for one provider.

    The credential is read once per call from the store snapshot; the store
    lock is never held while the request is in flight.
    """

    def __init__(
        self,
        store: CredentialStore[C],
        authorizer: Authorizer,
        error_parser: ErrorParser,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.store = store
        self.authorizer = authorizer
        self.error_parser = error_parser
        self.timeout = timeout
        self.transport = transport

    async def call(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: BaseModel | Mapping[str, Any] | None = None,
        response_model: type[M] | None = None,
    ) -> M | None:
        """Make one authenticated call.

        Args:
            method: HTTP method.
            url: Absolute endpoint URL.
            params: Query parameters.
            body: JSON body, sent for write methods.
            response_model: Pydantic model the success body is validated against.

        Returns:
            The validated model, or None when the provider returned no content.
        """
        credential = self.store.get()
        if credential is None:
            raise NoCredentialError(self.store.provider)

        query = {k: str(v) for k, v in (params or {}).items()}
        try:
            if httpx.URL(url).scheme not in ("http", "https"):
                raise ConfigError(f"invalid endpoint URL: {url!r}")
            headers = self.authorizer(credential, method.upper(), url, query)
        except GatewayError:
            raise
        except Exception as e:
            raise map_exception(e) from e

        kwargs: dict[str, Any] = {"params": query or None, "headers": headers}
        if body is not None:
            if isinstance(body, BaseModel):
                body = body.model_dump(exclude_none=True)
            kwargs["json"] = dict(body)

        response = await dispatch(
            method.upper(), url, timeout=self.timeout, transport=self.transport, **kwargs
        )
        return classify(response, self.error_parser, response_model)
