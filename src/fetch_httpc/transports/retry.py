"""
Retry transport wrapper for httpx
"""
import asyncio
import logging
import time
from typing import Optional, Tuple

import httpx

from ..config import RetryConfig, default_retry_config
from ..context import Context
from ..errors import DeadlineExceededError
from ..types import CONTEXT_EXTENSION, Transport
from .base import WrapperTransport, clone_request

logger = logging.getLogger("fetch_httpc.transports.retry")


def replay_request(request: httpx.Request, body: bytes) -> httpx.Request:
    """Copy of ``request`` carrying a fresh stream over ``body``."""
    headers = request.headers.copy()
    headers.pop("transfer-encoding", None)
    headers["content-length"] = str(len(body))
    return clone_request(request, headers=headers, stream=httpx.ByteStream(body))


class RetryTransport(WrapperTransport):
    """
    Retry transport wrapper for httpx.

    Buffers the request body once, then sends up to ``max_retries + 1``
    attempts, each over a fresh copy of that body. After every attempt the
    retry predicate sees ``(response, error)``; when it says no, or the last
    attempt has been made, that outcome is returned (or re-raised) as is.
    Attempt N is followed by a sleep of ``backoff * (N + 1)``, which a
    cancelled request Context cuts short.

    Example:
        base = httpx.HTTPTransport()
        transport = RetryTransport(base, RetryConfig(max_retries=3, backoff_seconds=0.5))
        client = httpx.Client(transport=transport)
    """

    def __init__(
        self,
        inner: Transport,
        config: Optional[RetryConfig] = None,
        *,
        max_retries: Optional[int] = None,
    ) -> None:
        """
        Create a new RetryTransport.

        Args:
            inner: The wrapped transport to delegate requests to
            config: Retry config
            max_retries: Maximum retries (simple config, default predicate and backoff)
        """
        super().__init__(inner)
        if config:
            self._config = config
        elif max_retries is not None:
            self._config = RetryConfig(max_retries=max_retries)
        else:
            self._config = default_retry_config()

    @property
    def config(self) -> RetryConfig:
        return self._config

    def _should_retry(
        self,
        attempt: int,
        response: Optional[httpx.Response],
        error: Optional[Exception],
    ) -> bool:
        retry_if = self._config.retry_if
        should_retry = retry_if is not None and retry_if(response, error)
        return should_retry and attempt < self._config.max_retries

    def _attempt_request(self, request: httpx.Request, body: Optional[bytes]) -> httpx.Request:
        if body is None:
            return request
        return replay_request(request, body)

    def _log_retry(self, request: httpx.Request, attempt: int, delay: float,
                   response: Optional[httpx.Response], error: Optional[Exception]) -> None:
        outcome = f"error {error!r}" if error is not None else f"status {response.status_code}"
        logger.debug(
            f"retrying {request.method} {request.url} after {outcome} "
            f"(attempt {attempt + 1}/{self._config.max_retries + 1}, sleeping {delay:.3f}s)"
        )

    @staticmethod
    def _finish(response: Optional[httpx.Response], error: Optional[Exception]) -> httpx.Response:
        if error is not None:
            raise error
        return response

    # -- sync ---------------------------------------------------------------

    def _buffer_body(self, request: httpx.Request) -> Optional[bytes]:
        try:
            body = request.read()
        except (httpx.StreamError, OSError) as exc:
            logger.warning(f"could not buffer request body for retries, sending without it: {exc}")
            return b""
        return body or None

    def _sleep(self, delay: float, ctx: Optional[Context]) -> None:
        if ctx is None:
            if delay > 0:
                time.sleep(delay)
            return
        if not ctx.wait(delay):
            raise ctx.err() or DeadlineExceededError()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        body = self._buffer_body(request)
        ctx = request.extensions.get(CONTEXT_EXTENSION)

        response: Optional[httpx.Response] = None
        error: Optional[Exception] = None
        for attempt in range(self._config.max_retries + 1):
            response, error = self._try_once(self._attempt_request(request, body))
            if not self._should_retry(attempt, response, error):
                break
            delay = self._config.delay_for(attempt)
            self._log_retry(request, attempt, delay, response, error)
            if response is not None:
                response.close()
            self._sleep(delay, ctx)

        return self._finish(response, error)

    def _try_once(self, request: httpx.Request) -> Tuple[Optional[httpx.Response], Optional[Exception]]:
        try:
            return self._send(request), None
        except Exception as exc:
            return None, exc

    # -- async --------------------------------------------------------------

    async def _abuffer_body(self, request: httpx.Request) -> Optional[bytes]:
        try:
            body = await request.aread()
        except (httpx.StreamError, OSError) as exc:
            logger.warning(f"could not buffer request body for retries, sending without it: {exc}")
            return b""
        return body or None

    async def _asleep(self, delay: float, ctx: Optional[Context]) -> None:
        if ctx is None:
            await asyncio.sleep(delay)
            return
        if not await ctx.async_wait(delay):
            raise ctx.err() or DeadlineExceededError()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        body = await self._abuffer_body(request)
        ctx = request.extensions.get(CONTEXT_EXTENSION)

        response: Optional[httpx.Response] = None
        error: Optional[Exception] = None
        for attempt in range(self._config.max_retries + 1):
            response, error = await self._atry_once(self._attempt_request(request, body))
            if not self._should_retry(attempt, response, error):
                break
            delay = self._config.delay_for(attempt)
            self._log_retry(request, attempt, delay, response, error)
            if response is not None:
                await response.aclose()
            await self._asleep(delay, ctx)

        return self._finish(response, error)

    async def _atry_once(self, request: httpx.Request) -> Tuple[Optional[httpx.Response], Optional[Exception]]:
        try:
            return await self._asend(request), None
        except Exception as exc:
            return None, exc
