"""
Base class for transport wrappers.
"""
from typing import Any, Dict, Optional

import httpx

from ..types import Transport


def clone_request(
    request: httpx.Request,
    *,
    headers: Optional[httpx.Headers] = None,
    stream: Any = None,
    extensions: Optional[Dict[str, Any]] = None,
) -> httpx.Request:
    """
    Shallow copy of a request with selected fields replaced.

    The inbound request is treated as immutable; wrappers pass the copy on.
    """
    return httpx.Request(
        request.method,
        request.url,
        headers=headers if headers is not None else request.headers.copy(),
        stream=stream if stream is not None else request.stream,
        extensions=extensions if extensions is not None else dict(request.extensions),
    )


class WrapperTransport(httpx.BaseTransport, httpx.AsyncBaseTransport):
    """
    A transport that delegates to an inner transport it owns.

    Subclasses override ``handle_request`` / ``handle_async_request`` and
    call ``_send`` / ``_asend`` to reach the next layer. The same instance
    serves sync and async clients, as long as the inner transport does.
    """

    def __init__(self, inner: Transport) -> None:
        self._inner = inner

    @property
    def inner(self) -> Transport:
        return self._inner

    def _send(self, request: httpx.Request) -> httpx.Response:
        if not isinstance(self._inner, httpx.BaseTransport):
            raise TypeError(
                f"{type(self).__name__} wraps {type(self._inner).__name__}, "
                "which does not support sync requests"
            )
        return self._inner.handle_request(request)

    async def _asend(self, request: httpx.Request) -> httpx.Response:
        if not isinstance(self._inner, httpx.AsyncBaseTransport):
            raise TypeError(
                f"{type(self).__name__} wraps {type(self._inner).__name__}, "
                "which does not support async requests"
            )
        return await self._inner.handle_async_request(request)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._send(request)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._asend(request)

    def close(self) -> None:
        """Close the transport"""
        if isinstance(self._inner, httpx.BaseTransport):
            self._inner.close()

    async def aclose(self) -> None:
        """Close the transport"""
        if isinstance(self._inner, httpx.AsyncBaseTransport):
            await self._inner.aclose()
