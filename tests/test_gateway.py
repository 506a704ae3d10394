# Tests for integrations/gateway.py and integrations/errors.py
# Created: 2026-10-12

import json

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from socialauth.integrations.errors import (
    ConfigError,
    GatewayError,
    MalformedUpstreamError,
    NoCredentialError,
    PersistenceError,
    TransportError,
    UpstreamError,
    map_exception,
)
from socialauth.integrations.gateway import RequestGateway, require_body
from socialauth.integrations.token_store import CredentialStore, TwitchCredential
from socialauth.integrations.twitch import parse_twitch_error, twitch_auth_headers


class Item(BaseModel):
    id: str
    name: str


@pytest.fixture
def store(tmp_path):
    return CredentialStore("twitch", TwitchCredential, tmp_path)


@pytest.fixture
async def connected_store(store):
    await store.replace(TwitchCredential(access_token="tok"))
    return store


def _gateway(store, provider) -> RequestGateway:
    return RequestGateway(
        store,
        twitch_auth_headers("client-id"),
        parse_twitch_error,
        transport=provider.transport,
    )


# ---------------------------------------------------------------------------
# No-credential gate
# ---------------------------------------------------------------------------


class TestNoCredential:
    @pytest.mark.parametrize("method", ["GET", "POST", "PATCH"])
    async def test_no_credential_no_network(self, store, provider, method):
        gateway = _gateway(store, provider)
        with pytest.raises(NoCredentialError) as exc_info:
            await gateway.call(method, "https://api.example.com/x", body={"a": 1})
        assert exc_info.value.status == 403
        assert provider.calls == 0

    async def test_authorizer_not_called(self, store, provider):
        called = []

        def _authorize(*args):
            called.append(args)
            return {}

        gateway = RequestGateway(store, _authorize, parse_twitch_error, transport=provider.transport)
        with pytest.raises(NoCredentialError):
            await gateway.call("GET", "https://api.example.com/x")
        assert called == []


# ---------------------------------------------------------------------------
# Request building / response classification
# ---------------------------------------------------------------------------


class TestCall:
    async def test_headers_query_and_body(self, connected_store, provider):
        provider.queue(httpx.Response(200, json={"id": "1", "name": "x"}))
        gateway = _gateway(connected_store, provider)

        item = await gateway.call(
            "POST",
            "https://api.example.com/things",
            params={"broadcaster_id": 123},
            body={"title": "hi"},
            response_model=Item,
        )

        assert item == Item(id="1", name="x")
        request = provider.requests[0]
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.headers["Client-Id"] == "client-id"
        assert request.url.params["broadcaster_id"] == "123"
        assert json.loads(request.content) == {"title": "hi"}

    async def test_model_body_is_serialized(self, connected_store, provider):
        provider.queue(httpx.Response(204))
        gateway = _gateway(connected_store, provider)
        await gateway.call("PATCH", "https://api.example.com/x", body=Item(id="1", name="n"))
        assert json.loads(provider.requests[0].content) == {"id": "1", "name": "n"}

    async def test_no_content_returns_none(self, connected_store, provider):
        provider.queue(httpx.Response(204))
        gateway = _gateway(connected_store, provider)
        assert await gateway.call("PATCH", "https://api.example.com/x", response_model=Item) is None

    async def test_zero_length_200_returns_none(self, connected_store, provider):
        provider.queue(httpx.Response(200, content=b""))
        gateway = _gateway(connected_store, provider)
        assert await gateway.call("GET", "https://api.example.com/x", response_model=Item) is None

    async def test_body_without_model_is_discarded(self, connected_store, provider):
        provider.queue(httpx.Response(200, json={"anything": True}))
        gateway = _gateway(connected_store, provider)
        assert await gateway.call("POST", "https://api.example.com/x") is None

    async def test_error_mapping_literal(self, connected_store, provider):
        provider.queue(
            httpx.Response(
                401, json={"status": 401, "message": "invalid token", "error": "Unauthorized"}
            )
        )
        gateway = _gateway(connected_store, provider)

        with pytest.raises(UpstreamError) as exc_info:
            await gateway.call("GET", "https://api.example.com/x", response_model=Item)

        assert exc_info.value.status == 401
        assert exc_info.value.message == "invalid token"

    async def test_unparseable_error_envelope(self, connected_store, provider):
        provider.queue(httpx.Response(503, text="Service Unavailable"))
        gateway = _gateway(connected_store, provider)
        with pytest.raises(MalformedUpstreamError):
            await gateway.call("GET", "https://api.example.com/x")

    async def test_invalid_success_body(self, connected_store, provider):
        provider.queue(httpx.Response(200, json={"id": 1}))
        gateway = _gateway(connected_store, provider)
        with pytest.raises(MalformedUpstreamError, match="Item"):
            await gateway.call("GET", "https://api.example.com/x", response_model=Item)

    async def test_non_json_success_body(self, connected_store, provider):
        provider.queue(httpx.Response(200, text="not json"))
        gateway = _gateway(connected_store, provider)
        with pytest.raises(MalformedUpstreamError):
            await gateway.call("GET", "https://api.example.com/x", response_model=Item)

    async def test_transport_failure(self, connected_store, provider):
        def _fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider.queue(_fail)
        gateway = _gateway(connected_store, provider)
        with pytest.raises(TransportError, match="connection refused"):
            await gateway.call("GET", "https://api.example.com/x")
        # Single attempt, no retry
        assert provider.calls == 1

    async def test_timeout_is_transport_error(self, connected_store, provider):
        def _timeout(request):
            raise httpx.ReadTimeout("timed out", request=request)

        provider.queue(_timeout)
        gateway = _gateway(connected_store, provider)
        with pytest.raises(TransportError):
            await gateway.call("GET", "https://api.example.com/x")

    async def test_bad_url_is_config_error(self, connected_store, provider):
        gateway = _gateway(connected_store, provider)
        with pytest.raises(ConfigError):
            await gateway.call("GET", "not a url")
        assert provider.calls == 0

    async def test_authorizer_failure_is_config_error(self, connected_store, provider):
        def _broken(*args):
            raise ValueError("bad header")

        gateway = RequestGateway(
            connected_store, _broken, parse_twitch_error, transport=provider.transport
        )
        with pytest.raises(ConfigError, match="bad header"):
            await gateway.call("GET", "https://api.example.com/x")
        assert provider.calls == 0

    async def test_concurrent_calls_share_snapshot(self, connected_store, provider):
        import asyncio

        provider.queue(*(httpx.Response(200, json={"id": str(i), "name": "n"}) for i in range(5)))
        gateway = _gateway(connected_store, provider)

        results = await asyncio.gather(
            *(gateway.call("GET", "https://api.example.com/x", response_model=Item) for _ in range(5))
        )
        assert len(results) == 5
        assert all(r.headers["Authorization"] == "Bearer tok" for r in provider.requests)


# ---------------------------------------------------------------------------
# require_body / map_exception
# ---------------------------------------------------------------------------


def test_require_body_none():
    with pytest.raises(MalformedUpstreamError, match="body was none"):
        require_body(None, "update channel")


def test_require_body_value():
    assert require_body("x", "anything") == "x"


class TestMapException:
    def test_gateway_error_passthrough(self):
        err = UpstreamError(400, "bad")
        assert map_exception(err) is err

    def test_transport(self):
        assert isinstance(map_exception(httpx.ConnectError("dns")), TransportError)

    def test_invalid_url(self):
        assert isinstance(map_exception(httpx.InvalidURL("bad url")), ConfigError)

    def test_json_decode(self):
        exc = json.JSONDecodeError("Expecting value", "x", 0)
        assert isinstance(map_exception(exc), MalformedUpstreamError)

    def test_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            Item.model_validate({})
        assert isinstance(map_exception(exc_info.value), MalformedUpstreamError)

    def test_os_error(self):
        mapped = map_exception(PermissionError("denied"))
        assert isinstance(mapped, PersistenceError)
        assert mapped.message == "denied"

    def test_unknown_keeps_message(self):
        mapped = map_exception(RuntimeError("boom"))
        assert isinstance(mapped, GatewayError)
        assert mapped.message == "boom"

    def test_to_dict(self):
        assert UpstreamError(401, "invalid token").to_dict() == {
            "status": 401,
            "error": "unauthorized",
            "message": "invalid token",
        }
