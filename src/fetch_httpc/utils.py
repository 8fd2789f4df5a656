"""
Shared helpers: gzip handling and header masking.
"""
import gzip
import zlib
from typing import Iterable, List, Optional, Tuple

import httpx

SENSITIVE_HEADERS = ("authorization", "api-key", "x-api-key", "cookie")
SENSITIVE_PLACEHOLDER = "***MODIFIED***SENSITIVE HEADER***"


def is_gzip_encoded(content_encoding: Optional[str]) -> bool:
    """Check if the content encoding is gzip."""
    return (content_encoding or "").lower() == "gzip"


def decode_gzip_body(body: bytes) -> bytes:
    """
    Decode gzip-encoded body data.

    Raises the underlying gzip/zlib/EOF error on malformed input; callers
    decide whether to fall back to the original bytes.
    """
    if not body:
        return body
    return gzip.decompress(body)


GZIP_ERRORS = (OSError, EOFError, zlib.error)


def is_sensitive_header(name: str) -> bool:
    """Case-insensitive substring match against the sensitive header set."""
    lowered = name.lower()
    return any(sensitive in lowered for sensitive in SENSITIVE_HEADERS)


def mask_headers(headers: Iterable[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Replace values of sensitive headers with a fixed placeholder."""
    return [
        (key, SENSITIVE_PLACEHOLDER if is_sensitive_header(key) else value)
        for key, value in headers
    ]


def mask_secret(value: Optional[str], visible_chars: int = 4) -> str:
    """Mask a secret for reprs and log lines."""
    if value is None:
        return "<None>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _loaded_content(response: httpx.Response) -> bytes:
    # a stream consumed by a failed read leaves no content behind
    try:
        return response.content
    except httpx.ResponseNotRead as exc:
        raise httpx.StreamConsumed() from exc


def read_raw(response: httpx.Response) -> Tuple[bytes, bool]:
    """
    Read the whole undecoded body of a response and close it.

    Returns ``(body, decoded)``. ``decoded`` is True when httpx had already
    loaded the body (e.g. a response built with ``content=``), in which case
    Content-Encoding has already been applied and must not be applied again.
    Raises httpx.StreamConsumed when an earlier read failed partway.
    """
    if response.is_stream_consumed:
        return _loaded_content(response), True
    try:
        return b"".join(response.iter_raw()), False
    finally:
        response.close()


async def aread_raw(response: httpx.Response) -> Tuple[bytes, bool]:
    """Async variant of read_raw."""
    if response.is_stream_consumed:
        return _loaded_content(response), True
    try:
        return b"".join([chunk async for chunk in response.aiter_raw()]), False
    finally:
        await response.aclose()
