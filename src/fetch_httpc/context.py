"""
Request-scoped cancellation and deadlines.
"""
import asyncio
import threading
import time
from typing import List, Optional, Tuple

from .errors import ContextCancelledError, DeadlineExceededError


class Context:
    """
    Cancellation token with an optional deadline.

    A Context is attached to a request and observed by the transport chain:
    the base transport refuses to start once it is done, its timeout is
    clipped to the remaining deadline, and retry backoff sleeps wake up as
    soon as it is cancelled.

    Example:
        ctx = Context.with_timeout(5.0)
        resp = client.get_with_context(ctx, "/api/users")
    """

    def __init__(self, deadline: Optional[float] = None) -> None:
        # deadline is a time.monotonic() value
        self._deadline = deadline
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._async_waiters: List[Tuple[asyncio.AbstractEventLoop, asyncio.Event]] = []

    @classmethod
    def background(cls) -> "Context":
        """A context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "Context":
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def with_deadline(cls, deadline: float) -> "Context":
        return cls(deadline=deadline)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self) -> None:
        with self._lock:
            self._cancelled.set()
            waiters = list(self._async_waiters)
        for loop, event in waiters:
            if not loop.is_closed():
                loop.call_soon_threadsafe(event.set)

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def done(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def err(self) -> Optional[ContextCancelledError]:
        """The error describing why the context is done, or None."""
        if self._cancelled.is_set():
            return ContextCancelledError()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError()
        return None

    def raise_if_done(self) -> None:
        error = self.err()
        if error is not None:
            raise error

    def wait(self, seconds: float) -> bool:
        """
        Sleep for up to ``seconds``, waking early if the context finishes.

        Returns True when the full duration elapsed, False when the context
        was cancelled or its deadline passed first.
        """
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._cancelled.wait(remaining)
            return False
        return not self._cancelled.wait(seconds)

    async def async_wait(self, seconds: float) -> bool:
        """
        Async variant of wait.

        ``cancel()`` may be called from any thread; it wakes the waiting
        task through its event loop.
        """
        event = asyncio.Event()
        waiter = (asyncio.get_running_loop(), event)
        with self._lock:
            if self._cancelled.is_set():
                return False
            self._async_waiters.append(waiter)

        remaining = self.remaining()
        bounded = remaining is not None and remaining < seconds
        try:
            await asyncio.wait_for(event.wait(), remaining if bounded else seconds)
        except asyncio.TimeoutError:
            return not bounded
        finally:
            with self._lock:
                self._async_waiters.remove(waiter)
        return False

    def __repr__(self) -> str:
        return f"Context(deadline={self._deadline!r}, cancelled={self._cancelled.is_set()})"
