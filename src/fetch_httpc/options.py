"""
Construction options for clients and per-request options for builders.

Client options are applied in call order. Options that install a transport
wrapper append an interceptor; interceptors are composed once the client
is built, each new one wrapping the previous ones, so the LAST wrapper
option runs FIRST on every request. For example, with

    Client(with_authorization(token), with_logger(log))

the logger sees the request before the Authorization header is added.
"""
import logging
import time
from typing import Callable, Iterable, Mapping, Optional

from .config import (
    DEFAULT_API_KEY_HEADER,
    DEFAULT_REQUEST_ID_HEADER,
    ClientConfig,
    RetryConfig,
)
from .context import Context
from .transports import (
    BasicAuthTransport,
    BearerAuthTransport,
    BlockListTransport,
    DebugTransport,
    HeaderTransport,
    LoggingTransport,
    RetryTransport,
)
from .types import Interceptor, Transport

Option = Callable[[ClientConfig], None]

# Callable[[RequestBuilder], None]; typed loosely to avoid a circular import
RequestOption = Callable[[object], None]


def with_base_url(base_url: str) -> Option:
    """
    Base URL for relative request URLs.

    Absolute request URLs (http:// or https://) ignore it.
    """
    def option(config: ClientConfig) -> None:
        config.base_url = base_url
    return option


def with_timeout(seconds: float) -> Option:
    """Default timeout for every request; builders may override it."""
    def option(config: ClientConfig) -> None:
        config.timeout = seconds
    return option


def with_headers(headers: Mapping[str, str]) -> Option:
    """Merge headers into the client's default headers."""
    def option(config: ClientConfig) -> None:
        config.headers.update(headers)
    return option


def with_header(key: str, value: str) -> Option:
    """Set one default header; the last write for a key wins."""
    def option(config: ClientConfig) -> None:
        config.headers[key] = value
    return option


def with_user_agent(user_agent: str) -> Option:
    return with_header("User-Agent", user_agent)


def with_content_type(content_type: str) -> Option:
    return with_header("Content-Type", content_type)


def with_accept(accept: str) -> Option:
    return with_header("Accept", accept)


def with_api_key(api_key: str, header_name: Optional[str] = None) -> Option:
    """API key header, ``X-Api-Key`` unless another name is given."""
    return with_header(header_name or DEFAULT_API_KEY_HEADER, api_key)


def with_request_id(header_name: Optional[str] = None) -> Option:
    """
    Request id header, ``X-Request-Id`` unless another name is given.

    The id is generated once, when the option is created, and is shared by
    every request the client sends.
    """
    request_id = f"req-{time.time_ns()}"
    return with_header(header_name or DEFAULT_REQUEST_ID_HEADER, request_id)


def with_interceptor(interceptor: Interceptor) -> Option:
    """
    Add a transport wrapper.

    Example:
        def tenant(inner):
            return HeaderTransport(inner, {"X-Tenant": "acme"})

        client = Client(with_interceptor(tenant))
    """
    def option(config: ClientConfig) -> None:
        config.interceptors.append(interceptor)
    return option


def with_header_transport(headers: Mapping[str, str]) -> Option:
    """Headers forced on every request at the transport layer."""
    frozen = dict(headers)
    return with_interceptor(lambda inner: HeaderTransport(inner, frozen))


def with_authorization(token: str) -> Option:
    """Bearer token authentication."""
    return with_interceptor(lambda inner: BearerAuthTransport(inner, token))


def with_base_auth(username: str, password: str) -> Option:
    """HTTP Basic authentication."""
    return with_interceptor(lambda inner: BasicAuthTransport(inner, username, password))


def with_blocked_list(blocked_list: Iterable[str]) -> Option:
    """Fail requests whose host contains any of these substrings."""
    blocked = list(blocked_list)
    return with_interceptor(lambda inner: BlockListTransport(inner, blocked))


def with_retry(config: RetryConfig) -> Option:
    """
    Retry failed requests.

    Example:
        client = Client(with_retry(RetryConfig(max_retries=3, backoff_seconds=1.0)))
    """
    return with_interceptor(lambda inner: RetryTransport(inner, config))


def with_logger(logger: logging.Logger) -> Option:
    """Log method, URL, status and timing of every request."""
    return with_interceptor(lambda inner: LoggingTransport(inner, logger))


def with_debug(enabled: bool = True, logger: Optional[logging.Logger] = None) -> Option:
    """Detailed request/response tracing with sensitive headers masked."""
    return with_interceptor(lambda inner: DebugTransport(inner, enabled, logger=logger))


def with_transport(transport: Transport) -> Option:
    """Replace the base transport, e.g. with httpx.MockTransport in tests."""
    def option(config: ClientConfig) -> None:
        config.transport = transport
    return option


def with_verify(verify: bool) -> Option:
    """TLS certificate verification for the default base transport."""
    def option(config: ClientConfig) -> None:
        config.verify = verify
    return option


# Per-request options

def header(key: str, value: str) -> RequestOption:
    """Add a header to one request."""
    def option(builder) -> None:
        builder.header(key, value)
    return option


def with_query(key: str, value: str) -> RequestOption:
    """Add a query parameter to one request."""
    def option(builder) -> None:
        builder.query(key, value)
    return option


def with_context(ctx: Context) -> RequestOption:
    """Attach a cancellation/deadline context to one request."""
    def option(builder) -> None:
        builder.context(ctx)
    return option
