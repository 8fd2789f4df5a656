"""
Transport wrappers for httpx's compose pattern.
"""
from .base import WrapperTransport, clone_request
from .headers import BasicAuthTransport, BearerAuthTransport, HeaderTransport
from .blocklist import BlockListTransport
from .logging_transport import LoggingTransport
from .debug import DebugTransport
from .retry import RetryTransport
from .context import ContextTransport

__all__ = [
    "WrapperTransport",
    "clone_request",
    "HeaderTransport",
    "BearerAuthTransport",
    "BasicAuthTransport",
    "BlockListTransport",
    "LoggingTransport",
    "DebugTransport",
    "RetryTransport",
    "ContextTransport",
]
