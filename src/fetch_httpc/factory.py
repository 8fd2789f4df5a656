"""
Factory functions for transports and clients
"""
from typing import Any, Dict, Iterable, Optional

import httpx

from .config import RetryConfig, resolve_verify
from .types import Interceptor, Transport
from . import options


DEFAULT_LIMITS = httpx.Limits(
    max_connections=100,
    max_keepalive_connections=10,
    keepalive_expiry=90.0,
)


def compose_transport(base: Transport, *wrappers: Interceptor) -> Transport:
    """
    Compose multiple transport wrappers together.

    Wrappers are applied in order, so each one becomes the new outermost
    layer: the LAST wrapper sees a request FIRST on the way down and sees the
    response LAST on the way back up.

    Args:
        base: The base transport to wrap
        *wrappers: Transport wrapper functions to apply in order

    Returns:
        Composed transport with all wrappers applied

    Example:
        transport = compose_transport(
            httpx.HTTPTransport(),
            lambda inner: RetryTransport(inner, max_retries=3),
            lambda inner: LoggingTransport(inner, logger),
        )
        # LoggingTransport runs first, so it logs once per call, not per attempt
    """
    transport = base
    for wrapper in wrappers:
        transport = wrapper(transport)
    return transport


def default_transport(verify: Optional[bool] = None, **kwargs: Any) -> httpx.HTTPTransport:
    """
    Fresh sync base transport with pooling defaults.

    - 100 maximum connections across all hosts
    - 10 keep-alive connections
    - 90 second keep-alive expiry
    - TLS verification on unless disabled explicitly or by environment
    """
    kwargs.setdefault("limits", DEFAULT_LIMITS)
    return httpx.HTTPTransport(verify=resolve_verify(verify), **kwargs)


def default_async_transport(verify: Optional[bool] = None, **kwargs: Any) -> httpx.AsyncHTTPTransport:
    """Fresh async base transport with the same defaults as default_transport."""
    kwargs.setdefault("limits", DEFAULT_LIMITS)
    return httpx.AsyncHTTPTransport(verify=resolve_verify(verify), **kwargs)


def _keyword_options(
    base_url: Optional[str],
    timeout: Optional[float],
    headers: Optional[Dict[str, str]],
    bearer_token: Optional[str],
    retry: Optional[RetryConfig],
    blocked_list: Optional[Iterable[str]],
    debug: bool,
    transport: Optional[Transport],
) -> list:
    opts = []
    if transport is not None:
        opts.append(options.with_transport(transport))
    if base_url:
        opts.append(options.with_base_url(base_url))
    if timeout is not None:
        opts.append(options.with_timeout(timeout))
    if headers:
        opts.append(options.with_headers(headers))
    if bearer_token:
        opts.append(options.with_authorization(bearer_token))
    if retry is not None:
        opts.append(options.with_retry(retry))
    if blocked_list:
        # Added after retry so blocked hosts fail once instead of being retried
        opts.append(options.with_blocked_list(blocked_list))
    if debug:
        opts.append(options.with_debug())
    return opts


def create_client(
    *,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
    bearer_token: Optional[str] = None,
    retry: Optional[RetryConfig] = None,
    blocked_list: Optional[Iterable[str]] = None,
    debug: bool = False,
    transport: Optional[Transport] = None,
):
    """
    Create a sync Client from keyword arguments.

    Example:
        client = create_client(
            base_url="https://api.example.com",
            retry=RetryConfig(max_retries=3, backoff_seconds=0.5),
        )
        response = client.get("/data")
    """
    # base_client imports this module for compose_transport
    from .core.base_client import Client

    return Client(*_keyword_options(
        base_url, timeout, headers, bearer_token, retry, blocked_list, debug, transport
    ))


def create_async_client(
    *,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
    bearer_token: Optional[str] = None,
    retry: Optional[RetryConfig] = None,
    blocked_list: Optional[Iterable[str]] = None,
    debug: bool = False,
    transport: Optional[Transport] = None,
):
    """Create an AsyncClient from keyword arguments."""
    from .core.base_client import AsyncClient

    return AsyncClient(*_keyword_options(
        base_url, timeout, headers, bearer_token, retry, blocked_list, debug, transport
    ))


def default_client():
    """Sync Client with default settings and no options."""
    from .core.base_client import Client

    return Client()
