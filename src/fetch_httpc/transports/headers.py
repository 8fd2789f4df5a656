"""
Header and authentication transport wrappers.
"""
import base64
from typing import Mapping

import httpx

from ..types import Transport
from ..utils import mask_secret
from .base import WrapperTransport, clone_request


class HeaderTransport(WrapperTransport):
    """
    Adds fixed headers to every request.

    Configured headers overwrite any same-named header already on the request.

    Example:
        transport = HeaderTransport(httpx.HTTPTransport(), {"X-Tenant": "acme"})
    """

    def __init__(self, inner: Transport, headers: Mapping[str, str]) -> None:
        super().__init__(inner)
        self._headers = dict(headers)

    def _apply(self, request: httpx.Request) -> httpx.Request:
        headers = request.headers.copy()
        for key, value in self._headers.items():
            headers[key] = value
        return clone_request(request, headers=headers)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._send(self._apply(request))

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._asend(self._apply(request))


class BearerAuthTransport(HeaderTransport):
    """Sets ``Authorization: Bearer <token>`` on every request."""

    def __init__(self, inner: Transport, token: str) -> None:
        super().__init__(inner, {"Authorization": f"Bearer {token}"})
        self._token = token

    def __repr__(self) -> str:
        return f"BearerAuthTransport(token={mask_secret(self._token)!r})"


def basic_auth_value(username: str, password: str) -> str:
    """``Basic base64(username:password)``"""
    credentials = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


class BasicAuthTransport(HeaderTransport):
    """Sets HTTP Basic credentials on every request."""

    def __init__(self, inner: Transport, username: str, password: str) -> None:
        super().__init__(inner, {"Authorization": basic_auth_value(username, password)})
        self._username = username
        self._password = password

    def __repr__(self) -> str:
        return (
            f"BasicAuthTransport(username={self._username!r}, "
            f"password={mask_secret(self._password)!r})"
        )
