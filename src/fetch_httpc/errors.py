"""
Error types for fetch_httpc.
"""
from typing import Optional

import httpx


class FetchError(Exception):
    """Base class for errors raised by fetch_httpc."""


class BlockedDomainError(FetchError):
    """Raised by the block list transport before any network access."""

    def __init__(self, domain: str, host: str = "") -> None:
        self.domain = domain
        self.host = host
        super().__init__(f"domain {domain} is blocked")


class HTTPError(FetchError):
    """
    Structured error for a non-2xx response.

    Verb methods never raise this on their own; callers build one when they
    want to turn a failed response into an exception.

    Example:
        resp = client.get("/api/users")
        if not resp.is_success():
            raise HTTPError.from_response(resp)
    """

    def __init__(self, status_code: int, message: str, body: bytes = b"") -> None:
        self.status_code = status_code
        self.message = message
        self.body = body
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Request failed with status {self.status_code}: {self.message}"

    @classmethod
    def from_response(cls, response, message: Optional[str] = None) -> "HTTPError":
        """Build an HTTPError from a Response, reading (and caching) its body."""
        body = response.bytes()
        if message is None:
            message = response.reason_phrase or httpx.codes.get_reason_phrase(response.status_code)
        return cls(response.status_code, message, body)


class DecodeError(FetchError, ValueError):
    """Raised when a response body cannot be decoded as JSON, XML or CSV."""


class GzipDecodeError(DecodeError):
    """
    Raised when a gzip-encoded body is malformed.

    ``body`` holds the original, still-compressed bytes.
    """

    def __init__(self, message: str, body: bytes) -> None:
        self.body = body
        super().__init__(message)


class ContextCancelledError(FetchError):
    """Raised when a request context is cancelled."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceededError(ContextCancelledError, TimeoutError):
    """Raised when a request context deadline passes."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


def is_timeout(err: Optional[BaseException]) -> bool:
    """
    Check whether an error is a timeout.

    Recognizes httpx timeouts (connect/read/write/pool), builtin TimeoutError
    (socket timeouts, asyncio timeouts, DeadlineExceededError) and either of
    those anywhere in the exception's cause chain.

    Example:
        try:
            client.get("/slow")
        except Exception as exc:
            if is_timeout(exc):
                logger.warning("request timed out")
    """
    seen = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, (httpx.TimeoutException, TimeoutError)):
            return True
        seen.add(id(err))
        err = err.__cause__ or err.__context__
    return False
