"""
Tests for error types, timeout detection and Context.
"""
import asyncio
import threading
import time

import httpx
import pytest

from conftest import raw_response
from fetch_httpc.context import Context
from fetch_httpc.core.response import Response
from fetch_httpc.errors import (
    BlockedDomainError,
    ContextCancelledError,
    DeadlineExceededError,
    DecodeError,
    FetchError,
    GzipDecodeError,
    HTTPError,
    is_timeout,
)


class TestHTTPError:
    """Tests for HTTPError."""

    def test_str(self):
        """Should format status and message."""
        err = HTTPError(404, "Not Found", b"missing")
        assert str(err) == "Request failed with status 404: Not Found"
        assert err.body == b"missing"

    def test_from_response(self):
        """Should take status, reason phrase and body from a response."""
        err = HTTPError.from_response(Response(raw_response(503, b"down")))
        assert err.status_code == 503
        assert err.message == "Service Unavailable"
        assert err.body == b"down"

    def test_from_response_custom_message(self):
        """Should prefer an explicit message."""
        err = HTTPError.from_response(Response(raw_response(400, b"")), "bad input")
        assert str(err) == "Request failed with status 400: bad input"


class TestErrorHierarchy:
    """Tests for the exception hierarchy."""

    def test_all_are_fetch_errors(self):
        """Should derive every error from FetchError."""
        for err in (
            BlockedDomainError("x.com"),
            HTTPError(500, "boom"),
            DecodeError("bad"),
            GzipDecodeError("bad gzip", b"raw"),
            ContextCancelledError(),
            DeadlineExceededError(),
        ):
            assert isinstance(err, FetchError)

    def test_blocked_domain_message(self):
        """Should name the blocked domain."""
        assert str(BlockedDomainError("malicious-site.com")) == "domain malicious-site.com is blocked"

    def test_deadline_is_timeout_error(self):
        """Should let DeadlineExceededError be caught as TimeoutError and as a cancellation."""
        err = DeadlineExceededError()
        assert isinstance(err, TimeoutError)
        assert isinstance(err, ContextCancelledError)
        assert str(err) == "context deadline exceeded"

    def test_cancelled_message(self):
        """Should use the canonical message."""
        assert str(ContextCancelledError()) == "context canceled"


class TestIsTimeout:
    """Tests for is_timeout."""

    @pytest.mark.parametrize("err", [
        httpx.ConnectTimeout("connect"),
        httpx.ReadTimeout("read"),
        httpx.WriteTimeout("write"),
        httpx.PoolTimeout("pool"),
        TimeoutError("builtin"),
        DeadlineExceededError(),
    ])
    def test_timeouts(self, err):
        """Should recognize timeout errors directly."""
        assert is_timeout(err) is True

    @pytest.mark.parametrize("err", [
        None,
        ValueError("nope"),
        httpx.ConnectError("refused"),
        ContextCancelledError(),
        HTTPError(504, "Gateway Timeout"),
    ])
    def test_non_timeouts(self, err):
        """Should reject everything else."""
        assert is_timeout(err) is False

    def test_wrapped_cause(self):
        """Should find a timeout in the cause chain."""
        try:
            try:
                raise httpx.ReadTimeout("inner")
            except httpx.ReadTimeout as inner:
                raise RuntimeError("outer") from inner
        except RuntimeError as outer:
            assert is_timeout(outer) is True

    def test_implicit_context(self):
        """Should follow implicit exception context."""
        try:
            try:
                raise TimeoutError("inner")
            except TimeoutError:
                raise ValueError("while handling")
        except ValueError as outer:
            assert is_timeout(outer) is True

    def test_cycle_terminates(self):
        """Should stop on a cyclic chain."""
        a = ValueError("a")
        b = ValueError("b")
        a.__cause__ = b
        b.__cause__ = a
        assert is_timeout(a) is False


class TestContext:
    """Tests for Context."""

    def test_background_never_done(self):
        """Should have no deadline and no error."""
        ctx = Context.background()
        assert ctx.done() is False
        assert ctx.err() is None
        assert ctx.remaining() is None
        assert ctx.deadline is None

    def test_cancel(self):
        """Should become done with ContextCancelledError."""
        ctx = Context()
        ctx.cancel()
        assert ctx.done() is True
        assert isinstance(ctx.err(), ContextCancelledError)
        with pytest.raises(ContextCancelledError):
            ctx.raise_if_done()

    def test_deadline_passes(self):
        """Should report DeadlineExceededError after the deadline."""
        ctx = Context.with_deadline(time.monotonic() - 0.01)
        assert ctx.done() is True
        assert isinstance(ctx.err(), DeadlineExceededError)
        assert ctx.remaining() == 0.0

    def test_remaining_counts_down(self):
        """Should report time left before the deadline."""
        ctx = Context.with_timeout(10)
        assert 9 < ctx.remaining() <= 10

    def test_wait_full_duration(self):
        """Should return True when the full duration elapses."""
        assert Context().wait(0.01) is True

    def test_wait_interrupted_by_cancel(self):
        """Should wake early and return False on cancel."""
        ctx = Context()
        threading.Timer(0.02, ctx.cancel).start()

        start = time.monotonic()
        assert ctx.wait(5) is False
        assert time.monotonic() - start < 2

    def test_wait_bounded_by_deadline(self):
        """Should stop at the deadline and return False."""
        ctx = Context.with_timeout(0.02)
        start = time.monotonic()
        assert ctx.wait(5) is False
        assert time.monotonic() - start < 2

    @pytest.mark.asyncio
    async def test_async_wait_full_duration(self):
        """Should return True when the full duration elapses."""
        assert await Context().async_wait(0.01) is True

    @pytest.mark.asyncio
    async def test_async_wait_interrupted_by_cancel(self):
        """Should wake the waiting task early on cancel."""
        ctx = Context()
        asyncio.get_running_loop().call_later(0.02, ctx.cancel)

        start = time.monotonic()
        assert await ctx.async_wait(5) is False
        assert time.monotonic() - start < 2
        assert ctx._async_waiters == []

    @pytest.mark.asyncio
    async def test_async_wait_already_cancelled(self):
        """Should return False at once when already cancelled."""
        ctx = Context()
        ctx.cancel()
        assert await ctx.async_wait(5) is False

    @pytest.mark.asyncio
    async def test_async_wait_bounded_by_deadline(self):
        """Should stop at the deadline and return False."""
        ctx = Context.with_timeout(0.02)
        start = time.monotonic()
        assert await ctx.async_wait(5) is False
        assert time.monotonic() - start < 2

    def test_repr(self):
        """Should show deadline and cancellation state."""
        assert repr(Context()) == "Context(deadline=None, cancelled=False)"
