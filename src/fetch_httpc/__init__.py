"""
HTTP client with a composable transport middleware chain.
"""
from .config import (
    ClientConfig,
    RetryConfig,
    default_retry_condition,
    default_retry_config,
)
from .context import Context
from .core import AsyncClient, Client, RequestBuilder, Response, resolve_url
from .errors import (
    BlockedDomainError,
    ContextCancelledError,
    DeadlineExceededError,
    DecodeError,
    FetchError,
    GzipDecodeError,
    HTTPError,
    is_timeout,
)
from .factory import (
    compose_transport,
    create_async_client,
    create_client,
    default_async_transport,
    default_client,
    default_transport,
)
from .options import (
    header,
    with_accept,
    with_api_key,
    with_authorization,
    with_base_auth,
    with_base_url,
    with_blocked_list,
    with_content_type,
    with_context,
    with_debug,
    with_header,
    with_header_transport,
    with_headers,
    with_interceptor,
    with_logger,
    with_query,
    with_request_id,
    with_retry,
    with_timeout,
    with_transport,
    with_user_agent,
    with_verify,
)
from .transports import (
    BasicAuthTransport,
    BearerAuthTransport,
    BlockListTransport,
    ContextTransport,
    DebugTransport,
    HeaderTransport,
    LoggingTransport,
    RetryTransport,
)
from .types import (
    CONTENT_TYPE_APPLICATION_CSV,
    CONTENT_TYPE_CSS,
    CONTENT_TYPE_CSV,
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_HTML,
    CONTENT_TYPE_JAVASCRIPT,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_MULTIPART,
    CONTENT_TYPE_OCTET_STREAM,
    CONTENT_TYPE_PDF,
    CONTENT_TYPE_PLAIN_TEXT,
    CONTENT_TYPE_XML,
    CONTENT_TYPE_ZIP,
)


__all__ = [
    # Clients
    "Client",
    "AsyncClient",
    "RequestBuilder",
    "Response",
    "resolve_url",
    # Configuration
    "ClientConfig",
    "RetryConfig",
    "default_retry_condition",
    "default_retry_config",
    "Context",
    # Errors
    "FetchError",
    "BlockedDomainError",
    "HTTPError",
    "DecodeError",
    "GzipDecodeError",
    "ContextCancelledError",
    "DeadlineExceededError",
    "is_timeout",
    # Factory functions
    "compose_transport",
    "create_client",
    "create_async_client",
    "default_client",
    "default_transport",
    "default_async_transport",
    # Client options
    "with_base_url",
    "with_timeout",
    "with_header",
    "with_headers",
    "with_user_agent",
    "with_content_type",
    "with_accept",
    "with_api_key",
    "with_request_id",
    "with_authorization",
    "with_base_auth",
    "with_blocked_list",
    "with_retry",
    "with_logger",
    "with_debug",
    "with_interceptor",
    "with_header_transport",
    "with_transport",
    "with_verify",
    # Request options
    "header",
    "with_query",
    "with_context",
    # Transport wrappers
    "HeaderTransport",
    "BearerAuthTransport",
    "BasicAuthTransport",
    "BlockListTransport",
    "LoggingTransport",
    "DebugTransport",
    "RetryTransport",
    "ContextTransport",
    # Content types
    "CONTENT_TYPE_JSON",
    "CONTENT_TYPE_XML",
    "CONTENT_TYPE_FORM",
    "CONTENT_TYPE_MULTIPART",
    "CONTENT_TYPE_PLAIN_TEXT",
    "CONTENT_TYPE_HTML",
    "CONTENT_TYPE_CSV",
    "CONTENT_TYPE_APPLICATION_CSV",
    "CONTENT_TYPE_JAVASCRIPT",
    "CONTENT_TYPE_CSS",
    "CONTENT_TYPE_PDF",
    "CONTENT_TYPE_ZIP",
    "CONTENT_TYPE_OCTET_STREAM",
]

__version__ = "1.0.0"
