"""
Debug transport: detailed request/response tracing with secret masking.
"""
import logging
import time
from typing import Optional

import httpx

from ..types import Transport
from ..utils import (
    GZIP_ERRORS,
    aread_raw,
    decode_gzip_body,
    is_gzip_encoded,
    mask_headers,
    read_raw,
)
from .base import WrapperTransport, clone_request
from .logging_transport import format_duration

DEFAULT_MAX_BODY_SIZE = 1024 * 1024

debug_logger = logging.getLogger("fetch_httpc.debug")


class DebugTransport(WrapperTransport):
    """
    Logs method, URL, headers and bodies of every exchange.

    Disabled instances are a pure passthrough. Sensitive headers
    (authorization, api-key, x-api-key, cookie; substring match) are logged
    with a fixed placeholder instead of their value. Bodies are capped at
    ``max_body_size`` bytes in the log and gzip-decoded for display when
    Content-Encoding says so; the caller always gets the full, raw body.

    Example:
        transport = DebugTransport(httpx.HTTPTransport(), enabled=True)
    """

    def __init__(
        self,
        inner: Transport,
        enabled: bool = True,
        *,
        logger: Optional[logging.Logger] = None,
        log_body: bool = True,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ) -> None:
        super().__init__(inner)
        self.enabled = enabled
        self.log_body = log_body
        self.max_body_size = max_body_size
        self._logger = logger or debug_logger

    def _log_headers(self, title: str, headers: httpx.Headers) -> None:
        if not headers:
            return
        self._logger.debug("%s:", title)
        for key, value in mask_headers(headers.multi_items()):
            self._logger.debug("\t%s: %s", key, value)

    def _decode_for_display(self, body: bytes, content_encoding: Optional[str]) -> bytes:
        if not body or not is_gzip_encoded(content_encoding):
            return body
        try:
            return decode_gzip_body(body)
        except GZIP_ERRORS as exc:
            self._logger.debug("Failed to decode gzip body: %s", exc)
            return body

    def _log_body(self, title: str, body: bytes, content_encoding: Optional[str]) -> None:
        if not body:
            return
        shown = self._decode_for_display(body[: self.max_body_size], content_encoding)
        self._logger.debug("%s:\n%s", title, shown.decode("utf-8", errors="replace"))

    def _log_request(self, request: httpx.Request) -> None:
        self._logger.debug("→ %s %s", request.method, request.url)
        self._log_headers("Request Headers", request.headers)

    def _log_error(self, error: Exception, start: float) -> None:
        self._logger.debug("✗ Error: %s (took %s)", error, format_duration(time.perf_counter() - start))

    def _log_response(self, response: httpx.Response, start: float) -> None:
        self._logger.debug(
            "← %d %s (took %s)",
            response.status_code,
            response.reason_phrase,
            format_duration(time.perf_counter() - start),
        )
        self._log_headers("Response Headers", response.headers)

    def _finish_response(
        self,
        response: httpx.Response,
        request: httpx.Request,
        body: bytes,
        decoded: bool,
    ) -> httpx.Response:
        encoding = None if decoded else response.headers.get("content-encoding")
        self._log_body("Response Body", body, encoding)
        if decoded:
            # httpx already holds the loaded body; hand the original back
            return response
        return httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            stream=httpx.ByteStream(body),
            request=request,
            extensions=response.extensions,
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if not self.enabled:
            return self._send(request)

        self._log_request(request)
        if self.log_body:
            try:
                body = request.read()
            except (httpx.StreamError, OSError) as exc:
                self._logger.debug("Request Body: <unreadable: %s>", exc)
            else:
                request = clone_request(request, stream=httpx.ByteStream(body))
                self._log_body("Request Body", body, request.headers.get("content-encoding"))

        start = time.perf_counter()
        try:
            response = self._send(request)
        except Exception as error:
            self._log_error(error, start)
            raise
        self._log_response(response, start)

        if not self.log_body:
            return response
        body, decoded = read_raw(response)
        return self._finish_response(response, request, body, decoded)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if not self.enabled:
            return await self._asend(request)

        self._log_request(request)
        if self.log_body:
            try:
                body = await request.aread()
            except (httpx.StreamError, OSError) as exc:
                self._logger.debug("Request Body: <unreadable: %s>", exc)
            else:
                request = clone_request(request, stream=httpx.ByteStream(body))
                self._log_body("Request Body", body, request.headers.get("content-encoding"))

        start = time.perf_counter()
        try:
            response = await self._asend(request)
        except Exception as error:
            self._log_error(error, start)
            raise
        self._log_response(response, start)

        if not self.log_body:
            return response
        body, decoded = await aread_raw(response)
        return self._finish_response(response, request, body, decoded)
