"""
Context-aware transport sitting directly above the base transport.
"""
from typing import Optional

import httpx

from ..context import Context
from ..types import CONTEXT_EXTENSION
from .base import WrapperTransport, clone_request

_TIMEOUT_KEYS = ("connect", "read", "write", "pool")


class ContextTransport(WrapperTransport):
    """
    Makes the network layer observe a request Context.

    A done context fails the request before any I/O. A context with a
    deadline clips the httpx timeout to the time left, and a timeout that
    fires after the deadline has passed is reported as the context's error.
    """

    @staticmethod
    def _context(request: httpx.Request) -> Optional[Context]:
        return request.extensions.get(CONTEXT_EXTENSION)

    def _prepare(self, request: httpx.Request, ctx: Context) -> httpx.Request:
        ctx.raise_if_done()
        remaining = ctx.remaining()
        if remaining is None:
            return request
        current = request.extensions.get("timeout") or {}
        clipped = {}
        for key in _TIMEOUT_KEYS:
            value = current.get(key)
            clipped[key] = remaining if value is None else min(value, remaining)
        extensions = dict(request.extensions)
        extensions["timeout"] = clipped
        return clone_request(request, extensions=extensions)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        ctx = self._context(request)
        if ctx is None:
            return self._send(request)
        try:
            return self._send(self._prepare(request, ctx))
        except httpx.TimeoutException as exc:
            error = ctx.err()
            if error is not None:
                raise error from exc
            raise

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        ctx = self._context(request)
        if ctx is None:
            return await self._asend(request)
        try:
            return await self._asend(self._prepare(request, ctx))
        except httpx.TimeoutException as exc:
            error = ctx.err()
            if error is not None:
                raise error from exc
            raise
