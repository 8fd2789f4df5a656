"""
Core modules for fetch_httpc.
"""
from .base_client import AsyncClient, Client
from .request_builder import RequestBuilder, build_url, is_absolute_url, resolve_url
from .response import Response

__all__ = [
    "AsyncClient",
    "Client",
    "RequestBuilder",
    "Response",
    "build_url",
    "is_absolute_url",
    "resolve_url",
]
