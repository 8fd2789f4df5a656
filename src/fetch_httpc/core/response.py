"""
Response wrapper with a cached, gzip-aware body.
"""
import codecs
from typing import Any, List, Mapping, Optional, Type

import httpx

from ..errors import GzipDecodeError
from ..utils import GZIP_ERRORS, decode_gzip_body, is_gzip_encoded, read_raw
from .formats import decode_csv, decode_json, decode_xml, element_to_dict, to_model


class Response:
    """
    Wraps an httpx.Response whose body has not been read yet.

    The body is read from the network once, on first access, gunzipped when
    the server sent ``Content-Encoding: gzip``, and cached; every accessor
    after that works on the cached bytes.

    A read failure leaves nothing cached. A malformed gzip body raises
    GzipDecodeError carrying the compressed bytes; those raw bytes are kept so
    the stream is never read twice.
    """

    def __init__(
        self,
        response: httpx.Response,
        *,
        raw_body: Optional[bytes] = None,
        content_decoded: bool = False,
    ) -> None:
        self._response = response
        self._raw = raw_body
        self._raw_decoded = content_decoded
        self._body: Optional[bytes] = None
        self._csv_separator = ","

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def reason_phrase(self) -> str:
        return self._response.reason_phrase

    @property
    def url(self) -> httpx.URL:
        return self._response.url

    @property
    def http_response(self) -> httpx.Response:
        """The underlying httpx.Response."""
        return self._response

    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def bytes(self) -> bytes:
        """Body bytes, decompressed if gzip-encoded. Reads at most once."""
        if self._body is not None:
            return self._body

        if self._raw is None:
            self._raw, self._raw_decoded = read_raw(self._response)

        body = self._raw
        if not self._raw_decoded and is_gzip_encoded(self.headers.get("Content-Encoding")):
            try:
                body = decode_gzip_body(self._raw)
            except GZIP_ERRORS as exc:
                raise GzipDecodeError(f"failed to decode gzip body: {exc}", self._raw) from exc

        self._body = body
        return body

    def text(self) -> str:
        encoding = self._response.charset_encoding or "utf-8"
        try:
            codecs.lookup(encoding)
        except LookupError:
            encoding = "utf-8"
        return self.bytes().decode(encoding, errors="replace")

    # alias
    string = text

    def json(self, model: Optional[Type] = None) -> Any:
        """Decode the body as JSON, optionally into a dataclass or pydantic model."""
        return to_model(decode_json(self.bytes()), model)

    def xml(self, model: Optional[Type] = None) -> Any:
        """
        Parse the body as XML.

        Without a model the root Element is returned. With a model, the
        root's child elements are mapped by tag name onto its fields.
        """
        root = decode_xml(self.bytes())
        if model is None:
            return root
        return to_model(element_to_dict(root), model)

    def set_csv_separator(self, separator: str) -> "Response":
        if len(separator) != 1:
            raise ValueError(f"CSV separator must be a single character, got {separator!r}")
        self._csv_separator = separator
        return self

    def csv(
        self,
        model: Optional[Type] = None,
        *,
        schema: Optional[Mapping[str, str]] = None,
    ) -> List[Any]:
        """Decode the body as CSV with a header row; see decode_csv."""
        return decode_csv(self.bytes(), model, schema=schema, separator=self._csv_separator)

    def close(self) -> None:
        """Release the connection without reading the body."""
        if self._raw is None:
            self._response.close()

    def __repr__(self) -> str:
        return f"<Response [{self.status_code} {self.reason_phrase}]>"
