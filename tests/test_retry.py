"""
Tests for RetryTransport.

Coverage:
- Retry bound: inner calls never exceed max_retries + 1
- Decisions: default predicate, custom predicate, disabled predicate
- Backoff: linear lower bound, zero backoff
- Body replay across attempts
- Cancellation and deadlines during backoff
"""
import threading
import time
from unittest.mock import MagicMock

import httpx
import pytest

from conftest import Recorder
from fetch_httpc.config import RetryConfig, default_retry_condition
from fetch_httpc.context import Context
from fetch_httpc.errors import ContextCancelledError, DeadlineExceededError
from fetch_httpc.transports import RetryTransport
from fetch_httpc.transports.retry import replay_request
from fetch_httpc.types import CONTEXT_EXTENSION


def status_transport(status_code: int):
    recorder = Recorder(lambda request: httpx.Response(status_code))
    return recorder, httpx.MockTransport(recorder)


def sequence_transport(*statuses: int):
    """Return the given statuses in order, repeating the last one."""
    remaining = list(statuses)

    def respond(request):
        status = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return httpx.Response(status)

    recorder = Recorder(respond)
    return recorder, httpx.MockTransport(recorder)


class BrokenStream(httpx.SyncByteStream):
    def __iter__(self):
        raise OSError("body source went away")
        yield b""  # pragma: no cover


class AsyncBrokenStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        raise OSError("body source went away")
        yield b""  # pragma: no cover


def no_wait(max_retries: int = 3, **kwargs) -> RetryConfig:
    return RetryConfig(max_retries=max_retries, backoff_seconds=0, **kwargs)


class TestRetryTransportInit:
    """Tests for RetryTransport construction."""

    def test_default_config(self):
        """Should use default_retry_config when nothing is given."""
        transport = RetryTransport(httpx.MockTransport(Recorder()))
        assert transport.config.max_retries == 3
        assert transport.config.backoff_seconds == 1.0
        assert transport.config.retry_if is default_retry_condition

    def test_max_retries_shortcut(self):
        """Should build a config from max_retries."""
        transport = RetryTransport(httpx.MockTransport(Recorder()), max_retries=7)
        assert transport.config.max_retries == 7

    def test_config_wins_over_max_retries(self):
        """Should prefer an explicit config."""
        config = RetryConfig(max_retries=1)
        transport = RetryTransport(httpx.MockTransport(Recorder()), config, max_retries=9)
        assert transport.config is config


class TestRetryTransportSync:
    """Tests for the sync retry loop."""

    def test_success_is_not_retried(self):
        """Should send once on 200."""
        recorder, inner = status_transport(200)
        response = RetryTransport(inner, no_wait()).handle_request(
            httpx.Request("GET", "https://example.com")
        )
        assert response.status_code == 200
        assert recorder.calls == 1

    def test_retry_bound_on_server_error(self):
        """Should make exactly max_retries + 1 attempts and return the last response."""
        recorder, inner = status_transport(503)
        response = RetryTransport(inner, no_wait(3)).handle_request(
            httpx.Request("GET", "https://example.com")
        )
        assert response.status_code == 503
        assert recorder.calls == 4

    def test_retries_429(self):
        """Should retry rate-limited responses."""
        recorder, inner = sequence_transport(429, 200)
        response = RetryTransport(inner, no_wait()).handle_request(
            httpx.Request("GET", "https://example.com")
        )
        assert response.status_code == 200
        assert recorder.calls == 2

    def test_no_retry_on_404(self):
        """Should treat 404 as final."""
        recorder, inner = status_transport(404)
        response = RetryTransport(inner, no_wait()).handle_request(
            httpx.Request("GET", "https://example.com")
        )
        assert response.status_code == 404
        assert recorder.calls == 1

    def test_recovers_after_failures(self):
        """Should return the first non-retryable response."""
        recorder, inner = sequence_transport(500, 502, 200)
        response = RetryTransport(inner, no_wait()).handle_request(
            httpx.Request("GET", "https://example.com")
        )
        assert response.status_code == 200
        assert recorder.calls == 3

    def test_errors_retried_then_reraised(self):
        """Should retry transport errors and re-raise the last one."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError(f"refused {len(calls)}")

        transport = RetryTransport(httpx.MockTransport(handler), no_wait(2))
        with pytest.raises(httpx.ConnectError, match="refused 3"):
            transport.handle_request(httpx.Request("GET", "https://example.com"))
        assert len(calls) == 3

    def test_zero_retries_sends_once(self):
        """Should send exactly once with max_retries=0."""
        recorder, inner = status_transport(500)
        config = RetryConfig(max_retries=0, backoff_seconds=10)

        start = time.monotonic()
        response = RetryTransport(inner, config).handle_request(
            httpx.Request("GET", "https://example.com")
        )
        assert response.status_code == 500
        assert recorder.calls == 1
        assert time.monotonic() - start < 1

    def test_backoff_lower_bound(self):
        """Should wait at least backoff * (1 + 2 + ... + max_retries)."""
        recorder, inner = status_transport(503)
        config = RetryConfig(max_retries=2, backoff_seconds=0.05)

        start = time.monotonic()
        RetryTransport(inner, config).handle_request(httpx.Request("GET", "https://example.com"))
        elapsed = time.monotonic() - start

        assert recorder.calls == 3
        assert elapsed >= 0.05 * (1 + 2)

    def test_custom_predicate(self):
        """Should consult retry_if with response and error."""
        predicate = MagicMock(return_value=False)
        recorder, inner = status_transport(503)
        RetryTransport(inner, no_wait(retry_if=predicate)).handle_request(
            httpx.Request("GET", "https://example.com")
        )

        assert recorder.calls == 1
        response, error = predicate.call_args[0]
        assert response.status_code == 503
        assert error is None

    def test_predicate_none_disables_retry(self):
        """Should never retry when retry_if is None."""
        recorder, inner = status_transport(503)
        RetryTransport(inner, no_wait(retry_if=None)).handle_request(
            httpx.Request("GET", "https://example.com")
        )
        assert recorder.calls == 1

    def test_body_replayed_on_every_attempt(self):
        """Should send the same body on each attempt."""
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(503)

        transport = RetryTransport(httpx.MockTransport(handler), no_wait(2))
        transport.handle_request(
            httpx.Request("POST", "https://example.com", content=b'{"name":"John"}')
        )
        assert bodies == [b'{"name":"John"}'] * 3

    def test_streamed_body_replayed(self):
        """Should buffer a generator body once and replay it."""
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(500)

        def chunks():
            yield b"part1-"
            yield b"part2"

        transport = RetryTransport(httpx.MockTransport(handler), no_wait(1))
        transport.handle_request(httpx.Request("POST", "https://example.com", content=chunks()))
        assert bodies == [b"part1-part2", b"part1-part2"]

    def test_cancel_interrupts_backoff(self):
        """Should stop sleeping and raise once the context is cancelled."""
        recorder, inner = status_transport(503)
        ctx = Context()
        timer = threading.Timer(0.05, ctx.cancel)
        request = httpx.Request("GET", "https://example.com", extensions={CONTEXT_EXTENSION: ctx})

        start = time.monotonic()
        timer.start()
        try:
            with pytest.raises(ContextCancelledError):
                RetryTransport(inner, RetryConfig(max_retries=3, backoff_seconds=5)).handle_request(request)
        finally:
            timer.cancel()

        assert time.monotonic() - start < 2
        assert recorder.calls == 1

    def test_deadline_interrupts_backoff(self):
        """Should raise DeadlineExceededError when the deadline falls inside a backoff."""
        recorder, inner = status_transport(503)
        ctx = Context.with_timeout(0.1)
        request = httpx.Request("GET", "https://example.com", extensions={CONTEXT_EXTENSION: ctx})

        start = time.monotonic()
        with pytest.raises(DeadlineExceededError):
            RetryTransport(inner, RetryConfig(max_retries=3, backoff_seconds=5)).handle_request(request)
        assert time.monotonic() - start < 2

    def test_unreadable_body_sent_empty(self):
        """Should send an empty body when the request body cannot be buffered, and keep retrying."""
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(503)

        request = httpx.Request("POST", "https://example.com", stream=BrokenStream())
        response = RetryTransport(httpx.MockTransport(handler), no_wait(1)).handle_request(request)

        assert response.status_code == 503
        assert bodies == [b"", b""]


class TestRetryTransportAsync:
    """Tests for the async retry loop."""

    @pytest.mark.asyncio
    async def test_retry_bound(self):
        """Should make exactly max_retries + 1 attempts."""
        recorder, inner = status_transport(500)
        response = await RetryTransport(inner, no_wait(2)).handle_async_request(
            httpx.Request("GET", "https://example.com")
        )
        assert response.status_code == 500
        assert recorder.calls == 3

    @pytest.mark.asyncio
    async def test_no_retry_on_404(self):
        """Should treat 404 as final."""
        recorder, inner = status_transport(404)
        await RetryTransport(inner, no_wait()).handle_async_request(
            httpx.Request("GET", "https://example.com")
        )
        assert recorder.calls == 1

    @pytest.mark.asyncio
    async def test_errors_reraised(self):
        """Should re-raise the last error."""
        def handler(request):
            raise httpx.ReadError("reset")

        transport = RetryTransport(httpx.MockTransport(handler), no_wait(1))
        with pytest.raises(httpx.ReadError):
            await transport.handle_async_request(httpx.Request("GET", "https://example.com"))

    @pytest.mark.asyncio
    async def test_body_replayed(self):
        """Should replay the buffered body on the async path."""
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(502)

        transport = RetryTransport(httpx.MockTransport(handler), no_wait(1))
        await transport.handle_async_request(
            httpx.Request("PUT", "https://example.com", content=b"payload")
        )
        assert bodies == [b"payload", b"payload"]

    @pytest.mark.asyncio
    async def test_backoff_lower_bound(self):
        """Should wait at least the linear backoff."""
        recorder, inner = status_transport(503)
        config = RetryConfig(max_retries=2, backoff_seconds=0.05)

        start = time.monotonic()
        await RetryTransport(inner, config).handle_async_request(
            httpx.Request("GET", "https://example.com")
        )
        assert time.monotonic() - start >= 0.05 * (1 + 2)

    @pytest.mark.asyncio
    async def test_deadline_interrupts_backoff(self):
        """Should honour the context deadline while sleeping."""
        recorder, inner = status_transport(503)
        ctx = Context.with_timeout(0.1)
        request = httpx.Request("GET", "https://example.com", extensions={CONTEXT_EXTENSION: ctx})

        start = time.monotonic()
        with pytest.raises(DeadlineExceededError):
            await RetryTransport(inner, RetryConfig(max_retries=3, backoff_seconds=5)).handle_async_request(request)
        assert time.monotonic() - start < 2
        assert recorder.calls == 1

    @pytest.mark.asyncio
    async def test_cancel_interrupts_backoff(self):
        """Should stop sleeping and raise once the context is cancelled from another thread."""
        recorder, inner = status_transport(503)
        ctx = Context()
        timer = threading.Timer(0.05, ctx.cancel)
        request = httpx.Request("GET", "https://example.com", extensions={CONTEXT_EXTENSION: ctx})

        start = time.monotonic()
        timer.start()
        try:
            with pytest.raises(ContextCancelledError):
                await RetryTransport(inner, RetryConfig(max_retries=3, backoff_seconds=5)).handle_async_request(request)
        finally:
            timer.cancel()

        assert time.monotonic() - start < 2
        assert recorder.calls == 1

    @pytest.mark.asyncio
    async def test_unreadable_body_sent_empty(self):
        """Should send an empty body when the async request body cannot be buffered."""
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(503)

        request = httpx.Request("POST", "https://example.com", stream=AsyncBrokenStream())
        response = await RetryTransport(httpx.MockTransport(handler), no_wait(1)).handle_async_request(request)

        assert response.status_code == 503
        assert bodies == [b"", b""]


class TestReplayRequest:
    """Tests for replay_request."""

    def test_sets_content_length(self):
        """Should set Content-Length and drop Transfer-Encoding."""
        request = httpx.Request(
            "POST", "https://example.com", headers={"Transfer-Encoding": "chunked"}, content=b"abc"
        )
        replay = replay_request(request, b"abc")

        assert replay.headers["content-length"] == "3"
        assert "transfer-encoding" not in replay.headers
        assert replay.read() == b"abc"
