"""
Shared fixtures for fetch_httpc tests.
"""
import threading
from typing import Callable, List

import httpx
import pytest


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response] = None):
        self.requests: List[httpx.Request] = []
        self._lock = threading.Lock()
        self._respond = respond or (lambda request: httpx.Response(200, text="ok"))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        return self._respond(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def mock_transport(recorder):
    return httpx.MockTransport(recorder)


def raw_response(status_code: int = 200, body: bytes = b"", headers=None) -> httpx.Response:
    """Response whose body is still unread, as a network transport returns it."""
    return httpx.Response(status_code, headers=headers, stream=httpx.ByteStream(body))
