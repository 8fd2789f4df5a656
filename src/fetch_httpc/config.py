"""
Configuration for fetch_httpc.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx

from .types import Interceptor, RetryPredicate, Transport


DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "fetch-httpc/1.0"
DEFAULT_ACCEPT = "*/*"
DEFAULT_ACCEPT_ENCODING = "*"
DEFAULT_API_KEY_HEADER = "X-Api-Key"
DEFAULT_REQUEST_ID_HEADER = "X-Request-Id"


def default_retry_condition(
    response: Optional[httpx.Response],
    error: Optional[Exception],
) -> bool:
    """
    Default retry predicate.

    Retries on any error, on 5xx server errors and on 429 (rate limit).
    Every other status, including the remaining 4xx codes, is final.
    """
    if error is not None:
        return True
    if response is None:
        return False
    return response.status_code >= 500 or response.status_code == 429


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration"""

    max_retries: int = 3
    """Maximum number of retries after the first attempt. Default: 3"""

    backoff_seconds: float = 1.0
    """Base delay; attempt N waits backoff * (N + 1). Default: 1.0"""

    retry_if: Optional[RetryPredicate] = default_retry_condition
    """Retry predicate. None disables retrying entirely."""

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.backoff_seconds < 0:
            raise ValueError(f"backoff_seconds must be >= 0, got {self.backoff_seconds}")

    def delay_for(self, attempt: int) -> float:
        """Backoff delay after the given 0-indexed attempt."""
        return self.backoff_seconds * (attempt + 1)


def default_retry_config() -> RetryConfig:
    """
    RetryConfig with sensible defaults:
    - 3 maximum retries
    - 1 second base backoff
    - Retries on errors, 5xx status codes and 429
    """
    return RetryConfig(max_retries=3, backoff_seconds=1.0, retry_if=default_retry_condition)


@dataclass
class ClientConfig:
    """
    Client configuration, filled in by construction options in call order.

    ``interceptors`` are composed over ``transport`` once the client is built;
    the last one added becomes the outermost layer.
    """

    base_url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    interceptors: List[Interceptor] = field(default_factory=list)
    transport: Optional[Transport] = None
    verify: Optional[bool] = None


def is_ssl_verify_disabled_by_env() -> bool:
    """
    Check if SSL verification is disabled via environment variables.

    Returns True if any of these are set:
    - NODE_TLS_REJECT_UNAUTHORIZED=0
    - SSL_CERT_VERIFY=0
    """
    node_tls = os.environ.get("NODE_TLS_REJECT_UNAUTHORIZED", "")
    ssl_cert_verify = os.environ.get("SSL_CERT_VERIFY", "")
    return node_tls == "0" or ssl_cert_verify == "0"


def resolve_verify(verify: Optional[bool]) -> bool:
    """Explicit setting wins, otherwise fall back to the environment."""
    if verify is not None:
        return verify
    return not is_ssl_verify_disabled_by_env()
