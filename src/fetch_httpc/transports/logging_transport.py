"""
Request/response logging transport wrapper.
"""
import logging
import time
from typing import Optional

import httpx

from ..types import Transport
from .base import WrapperTransport


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.2f}ms"
    return f"{seconds:.3f}s"


class LoggingTransport(WrapperTransport):
    """
    Logs method and URL before each request, then the status code (or error)
    and elapsed wall-clock time after it.

    Example:
        logger = logging.getLogger("myapp.http")
        transport = LoggingTransport(httpx.HTTPTransport(), logger)
    """

    def __init__(self, inner: Transport, logger: Optional[logging.Logger] = None) -> None:
        super().__init__(inner)
        self._logger = logger or logging.getLogger("fetch_httpc.http")

    def _before(self, request: httpx.Request) -> float:
        self._logger.info("→ %s %s", request.method, request.url)
        return time.perf_counter()

    def _after(self, start: float, response: Optional[httpx.Response], error: Optional[Exception]) -> None:
        took = format_duration(time.perf_counter() - start)
        if error is not None:
            self._logger.info("← Error: %s (took %s)", error, took)
        else:
            self._logger.info("← %d (took %s)", response.status_code, took)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        start = self._before(request)
        try:
            response = self._send(request)
        except Exception as error:
            self._after(start, None, error)
            raise
        self._after(start, response, None)
        return response

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        start = self._before(request)
        try:
            response = await self._asend(request)
        except Exception as error:
            self._after(start, None, error)
            raise
        self._after(start, response, None)
        return response
