# Shared fixtures: a scripted provider behind httpx.MockTransport.
# Created: 2026-10-12

from collections.abc import Callable

import httpx
import pytest


class FakeProvider:
    """Replays queued responses and records every request it receives.

    A queued item is either an ``httpx.Response`` or a callable taking the
    request and returning a response (or raising an httpx exception).
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._queue: list[httpx.Response | Callable[[httpx.Request], httpx.Response]] = []

    def queue(self, *responses) -> "FakeProvider":
        self._queue.extend(responses)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            raise AssertionError(f"unexpected request: {request.method} {request.url}")
        item = self._queue.pop(0)
        return item(request) if callable(item) else item

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def provider():
    return FakeProvider()
