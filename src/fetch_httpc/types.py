"""
Type definitions for fetch_httpc.
"""
from typing import Callable, Literal, Optional, Union

import httpx


# HTTP methods
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

# Any transport a wrapper can sit on top of
Transport = Union[httpx.BaseTransport, httpx.AsyncBaseTransport]

# Wraps a transport and returns the new outermost layer
Interceptor = Callable[[Transport], Transport]

# Decides, from the last response or error, whether to try again
RetryPredicate = Callable[[Optional[httpx.Response], Optional[Exception]], bool]


# Common Content-Type header values
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_XML = "application/xml"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE_MULTIPART = "multipart/form-data"
CONTENT_TYPE_PLAIN_TEXT = "text/plain"
CONTENT_TYPE_HTML = "text/html"
CONTENT_TYPE_CSV = "text/csv"
CONTENT_TYPE_APPLICATION_CSV = "application/csv"
CONTENT_TYPE_JAVASCRIPT = "application/javascript"
CONTENT_TYPE_CSS = "text/css"
CONTENT_TYPE_PDF = "application/pdf"
CONTENT_TYPE_ZIP = "application/zip"
CONTENT_TYPE_OCTET_STREAM = "application/octet-stream"

# Extension key carrying the request Context through the transport chain
CONTEXT_EXTENSION = "fetch_httpc.context"
