"""
Fluent request builder and URL resolution.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import httpx

from ..config import DEFAULT_ACCEPT, DEFAULT_ACCEPT_ENCODING, DEFAULT_USER_AGENT
from ..context import Context
from ..types import CONTENT_TYPE_JSON, CONTENT_TYPE_XML, CONTEXT_EXTENSION
from .formats import encode_json, encode_xml

logger = logging.getLogger("fetch_httpc.request_builder")

BodyType = Union[bytes, str, Iterable[bytes], None]


def is_absolute_url(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def resolve_url(base_url: str, url: str) -> str:
    """
    Resolve a request URL against the client's base URL.

    Absolute URLs are returned untouched. Otherwise the base (trimmed, one
    trailing slash dropped) and the path (trimmed) are joined, inserting a
    slash only when the path does not start with one.
    """
    base_url = base_url.strip()
    url = url.strip()

    if is_absolute_url(url):
        return url
    if not base_url:
        return url

    if base_url.endswith("/"):
        base_url = base_url[:-1]
    if not url:
        return base_url
    if not url.startswith("/"):
        return f"{base_url}/{url}"
    return base_url + url


def build_url(base_url: str, url: str, query: Optional[List[Tuple[str, str]]] = None) -> str:
    """
    Resolve the URL and merge builder query parameters into it.

    Parameters are added to any query string already present. If the
    resolved URL cannot be parsed it is returned unchanged and the
    parameters are dropped.
    """
    full_url = resolve_url(base_url, url)
    if not query:
        return full_url

    try:
        parsed = httpx.URL(full_url)
    except httpx.InvalidURL as exc:
        logger.debug(f"build_url: cannot parse {full_url!r}, query not applied: {exc}")
        return full_url

    merged = list(parsed.params.multi_items()) + list(query)
    return str(parsed.copy_with(params=httpx.QueryParams(merged)))


class RequestBuilder:
    """
    Fluent builder for one HTTP request.

    Builders come from ``client.new_request()``, are configured by chained
    calls and consumed by ``do()``. Errors raised while preparing the body
    (e.g. an unserializable JSON value) are held back and raised by ``do()``.

    With an AsyncClient, ``do()`` returns a coroutine.

    Example:
        resp = (
            client.new_request()
            .method("POST")
            .url("/api/users")
            .header("X-Trace", "abc")
            .query("include", "profile")
            .json(user)
            .timeout(10)
            .do()
        )
    """

    def __init__(self, client: Any) -> None:
        self._client = client
        self._method = "GET"
        self._url = ""
        self._headers: Dict[str, str] = {}
        self._query: List[Tuple[str, str]] = []
        self._body: BodyType = None
        self._timeout: Optional[float] = None
        self._context: Optional[Context] = None
        self._error: Optional[Exception] = None

    def method(self, method: str) -> "RequestBuilder":
        self._method = method.upper()
        return self

    def url(self, url: str) -> "RequestBuilder":
        """Absolute URL, or a path relative to the client's base URL."""
        self._url = url
        return self

    def header(self, key: str, value: str) -> "RequestBuilder":
        self._headers[key] = value
        return self

    def headers(self, headers: Mapping[str, str]) -> "RequestBuilder":
        self._headers.update(headers)
        return self

    def query(self, key: str, value: Any) -> "RequestBuilder":
        """Append a query parameter; repeated keys give ?tag=a&tag=b."""
        self._query.append((key, str(value)))
        return self

    def query_params(self, params: Mapping[str, Any]) -> "RequestBuilder":
        """Set query parameters, replacing earlier values for the same keys."""
        keys = set(params)
        self._query = [(k, v) for k, v in self._query if k not in keys]
        self._query.extend((k, str(v)) for k, v in params.items())
        return self

    def body(self, body: BodyType) -> "RequestBuilder":
        """Raw body: bytes, str, or an iterator of bytes."""
        self._body = body
        return self

    def json(self, value: Any) -> "RequestBuilder":
        """JSON body; sets Content-Type: application/json."""
        try:
            self._body = encode_json(value)
        except (TypeError, ValueError) as exc:
            self._error = exc
        self.header("Content-Type", CONTENT_TYPE_JSON)
        return self

    def xml(self, value: Any, root: str = "root") -> "RequestBuilder":
        """XML body; sets Content-Type: application/xml."""
        try:
            self._body = encode_xml(value, root=root)
        except (TypeError, ValueError) as exc:
            self._error = exc
        self.header("Content-Type", CONTENT_TYPE_XML)
        return self

    def timeout(self, seconds: float) -> "RequestBuilder":
        """Per-request timeout, overriding the client default."""
        self._timeout = seconds
        return self

    def context(self, ctx: Context) -> "RequestBuilder":
        self._context = ctx
        return self

    def apply(self, *options) -> "RequestBuilder":
        """Apply per-request options (header, with_query, with_context)."""
        for option in options:
            option(self)
        return self

    def has_header(self, key: str) -> bool:
        lowered = key.lower()
        return any(k.lower() == lowered for k in self._headers)

    def _build_headers(self, default_headers: Mapping[str, str]) -> httpx.Headers:
        headers = httpx.Headers()
        for key, value in default_headers.items():
            headers[key] = value
        for key, value in self._headers.items():
            headers[key] = value

        if "user-agent" not in headers:
            headers["User-Agent"] = DEFAULT_USER_AGENT
        if "accept" not in headers:
            headers["Accept"] = DEFAULT_ACCEPT
        if "accept-encoding" not in headers:
            headers["Accept-Encoding"] = DEFAULT_ACCEPT_ENCODING
        return headers

    def build(self, base_url: str, default_headers: Mapping[str, str]) -> httpx.Request:
        """Build the httpx.Request; raises any deferred builder error."""
        if self._error is not None:
            raise self._error

        full_url = build_url(base_url, self._url, self._query)
        headers = self._build_headers(default_headers)
        extensions: Dict[str, Any] = {}
        if self._timeout is not None:
            extensions["timeout"] = httpx.Timeout(self._timeout).as_dict()
        if self._context is not None:
            extensions[CONTEXT_EXTENSION] = self._context

        logger.debug(f"RequestBuilder.build: method={self._method}, url={full_url}")
        return httpx.Request(
            self._method,
            full_url,
            headers=headers,
            content=self._body,
            extensions=extensions,
        )

    def do(self):
        """Execute the request through the client's transport chain."""
        return self._client.execute(self)
