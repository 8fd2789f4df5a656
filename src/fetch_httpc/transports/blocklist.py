"""
Domain block list transport wrapper.
"""
from typing import Iterable

import httpx

from ..errors import BlockedDomainError
from ..types import Transport
from .base import WrapperTransport


class BlockListTransport(WrapperTransport):
    """
    Refuses requests whose host contains any blocked substring.

    The check happens before delegating, so a blocked request never reaches
    the network. Note that a retry wrapper placed outside this one will see
    BlockedDomainError as an ordinary error and, with the default retry
    predicate, retry it; add the block list after the retry option to keep it
    outermost.

    Example:
        transport = BlockListTransport(httpx.HTTPTransport(), ["malicious-site.com"])
    """

    def __init__(self, inner: Transport, blocked_list: Iterable[str]) -> None:
        super().__init__(inner)
        self._blocked_list = list(blocked_list)

    @property
    def blocked_list(self) -> list:
        return list(self._blocked_list)

    def _check(self, request: httpx.Request) -> None:
        # netloc is host[:port], matching what the block list is compared against
        host = request.url.netloc.decode("ascii")
        for blocked in self._blocked_list:
            if blocked in host:
                raise BlockedDomainError(blocked, host)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self._check(request)
        return self._send(request)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self._check(request)
        return await self._asend(request)
