"""
Sync and async HTTP clients built on httpx.
"""
import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Type

import httpx

from ..config import ClientConfig
from ..context import Context
from ..factory import compose_transport, default_async_transport, default_transport
from ..options import Option, RequestOption
from ..transports import ContextTransport
from ..utils import aread_raw
from .request_builder import RequestBuilder
from .response import Response

logger = logging.getLogger("fetch_httpc.client")


class _ClientBase:
    """Configuration and default-header handling shared by both clients."""

    def __init__(self, options: tuple) -> None:
        config = ClientConfig()
        for option in options:
            option(config)
        self._config = config
        self._headers: Dict[str, str] = dict(config.headers)
        self._headers_lock = threading.Lock()
        self._closed = False

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def timeout(self) -> float:
        return self._config.timeout

    @property
    def headers(self) -> Dict[str, str]:
        """Snapshot of the client's default headers."""
        with self._headers_lock:
            return dict(self._headers)

    @property
    def transport(self):
        """Outermost layer of the composed transport chain."""
        return self._transport

    def set_header(self, key: str, value: str) -> None:
        """Set a default header; safe while requests are in flight."""
        with self._headers_lock:
            self._headers[key] = value

    def set_headers(self, headers: Mapping[str, str]) -> None:
        with self._headers_lock:
            self._headers.update(headers)

    def new_request(self) -> RequestBuilder:
        """Builder for a request sent through this client."""
        return RequestBuilder(self)

    def _compose(self, base) -> Any:
        return compose_transport(ContextTransport(base), *self._config.interceptors)

    def _prepare(self, builder: RequestBuilder) -> httpx.Request:
        if self._closed:
            raise RuntimeError("Client has been closed")
        request = builder.build(self._config.base_url, self.headers)
        logger.debug(f"{type(self).__name__}.execute: method={request.method}, url={request.url}")
        return request

    def _builder(
        self,
        method: str,
        url: str,
        body: Any,
        opts: tuple,
        ctx: Optional[Context] = None,
    ) -> RequestBuilder:
        builder = self.new_request().method(method).url(url)
        if ctx is not None:
            builder.context(ctx)
        if body is not None:
            builder.json(body)
        return builder.apply(*opts)

    def _xml_builder(
        self,
        url: str,
        body: Any,
        opts: tuple,
        ctx: Optional[Context] = None,
    ) -> RequestBuilder:
        builder = self.new_request().method("POST").url(url)
        if ctx is not None:
            builder.context(ctx)
        if body is not None:
            builder.xml(body)
        return builder.apply(*opts)


class Client(_ClientBase):
    """
    Synchronous HTTP client.

    Requests run on the calling thread. One client may be shared by any
    number of threads.

    Example:
        client = Client(
            with_base_url("https://api.example.com"),
            with_authorization(token),
            with_retry(default_retry_config()),
        )
        resp = client.get("/users", with_query("page", "2"))
        users = resp.json()
    """

    def __init__(self, *options: Option) -> None:
        super().__init__(options)
        base = self._config.transport
        if base is None:
            base = default_transport(self._config.verify)
        self._transport = self._compose(base)
        self._client = httpx.Client(
            transport=self._transport,
            timeout=self._config.timeout,
            follow_redirects=True,
        )

    def execute(self, builder: RequestBuilder) -> Response:
        """Send a built request; the body is read lazily by the Response."""
        request = self._prepare(builder)
        response = self._client.send(request, stream=True)
        logger.debug(f"Client.execute: status={response.status_code}, url={request.url}")
        return Response(response)

    def get(self, url: str, *opts: RequestOption) -> Response:
        return self._builder("GET", url, None, opts).do()

    def post(self, url: str, body: Any = None, *opts: RequestOption) -> Response:
        """POST; a non-None body is sent as JSON."""
        return self._builder("POST", url, body, opts).do()

    def put(self, url: str, body: Any = None, *opts: RequestOption) -> Response:
        return self._builder("PUT", url, body, opts).do()

    def patch(self, url: str, body: Any = None, *opts: RequestOption) -> Response:
        return self._builder("PATCH", url, body, opts).do()

    def delete(self, url: str, *opts: RequestOption) -> Response:
        return self._builder("DELETE", url, None, opts).do()

    def get_with_context(self, ctx: Context, url: str, *opts: RequestOption) -> Response:
        return self._builder("GET", url, None, opts, ctx).do()

    def post_with_context(self, ctx: Context, url: str, body: Any = None, *opts: RequestOption) -> Response:
        return self._builder("POST", url, body, opts, ctx).do()

    def put_with_context(self, ctx: Context, url: str, body: Any = None, *opts: RequestOption) -> Response:
        return self._builder("PUT", url, body, opts, ctx).do()

    def patch_with_context(self, ctx: Context, url: str, body: Any = None, *opts: RequestOption) -> Response:
        return self._builder("PATCH", url, body, opts, ctx).do()

    def delete_with_context(self, ctx: Context, url: str, *opts: RequestOption) -> Response:
        return self._builder("DELETE", url, None, opts, ctx).do()

    # Format conveniences

    def get_json(self, url: str, model: Optional[Type] = None, *opts: RequestOption) -> Any:
        """GET and decode the JSON body, optionally into ``model``."""
        return self.get(url, *opts).json(model)

    def get_json_with_context(
        self, ctx: Context, url: str, model: Optional[Type] = None, *opts: RequestOption
    ) -> Any:
        return self.get_with_context(ctx, url, *opts).json(model)

    def post_json(
        self,
        url: str,
        body: Any = None,
        model: Optional[Type] = None,
        *opts: RequestOption,
        decode: bool = True,
    ) -> Any:
        """
        POST a JSON body and decode the JSON reply.

        With ``decode=False`` the reply body is discarded and None returned.
        """
        resp = self.post(url, body, *opts)
        if not decode:
            resp.close()
            return None
        return resp.json(model)

    def post_json_with_context(
        self,
        ctx: Context,
        url: str,
        body: Any = None,
        model: Optional[Type] = None,
        *opts: RequestOption,
        decode: bool = True,
    ) -> Any:
        resp = self.post_with_context(ctx, url, body, *opts)
        if not decode:
            resp.close()
            return None
        return resp.json(model)

    def get_xml(self, url: str, model: Optional[Type] = None, *opts: RequestOption) -> Any:
        """GET and parse the XML body; returns the root Element without a model."""
        return self.get(url, *opts).xml(model)

    def get_xml_with_context(
        self, ctx: Context, url: str, model: Optional[Type] = None, *opts: RequestOption
    ) -> Any:
        return self.get_with_context(ctx, url, *opts).xml(model)

    def post_xml(
        self,
        url: str,
        body: Any = None,
        model: Optional[Type] = None,
        *opts: RequestOption,
        decode: bool = True,
    ) -> Any:
        """POST an XML body (Content-Type: application/xml) and parse the XML reply."""
        resp = self._xml_builder(url, body, opts).do()
        if not decode:
            resp.close()
            return None
        return resp.xml(model)

    def post_xml_with_context(
        self,
        ctx: Context,
        url: str,
        body: Any = None,
        model: Optional[Type] = None,
        *opts: RequestOption,
        decode: bool = True,
    ) -> Any:
        resp = self._xml_builder(url, body, opts, ctx).do()
        if not decode:
            resp.close()
            return None
        return resp.xml(model)

    def get_csv(self, url: str, model: Optional[Type] = None, *opts: RequestOption) -> List[Any]:
        """GET and decode a comma-separated body with a header row."""
        return self.get(url, *opts).csv(model)

    def get_csv_with_context(
        self, ctx: Context, url: str, model: Optional[Type] = None, *opts: RequestOption
    ) -> List[Any]:
        return self.get_with_context(ctx, url, *opts).csv(model)

    def get_csv_with_separator(
        self, url: str, separator: str, model: Optional[Type] = None, *opts: RequestOption
    ) -> List[Any]:
        return self.get(url, *opts).set_csv_separator(separator).csv(model)

    def get_csv_with_separator_and_context(
        self,
        ctx: Context,
        url: str,
        separator: str,
        model: Optional[Type] = None,
        *opts: RequestOption,
    ) -> List[Any]:
        return self.get_with_context(ctx, url, *opts).set_csv_separator(separator).csv(model)

    def close(self) -> None:
        """Close the client and its transport chain."""
        self._client.close()
        self._closed = True

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class AsyncClient(_ClientBase):
    """
    Asynchronous HTTP client.

    Every verb is a coroutine. The response body is read before the verb
    returns, so Response accessors need no await.

    Example:
        async with AsyncClient(with_base_url("https://api.example.com")) as client:
            resp = await client.get("/users")
            users = resp.json()
    """

    def __init__(self, *options: Option) -> None:
        super().__init__(options)
        base = self._config.transport
        if base is None:
            base = default_async_transport(self._config.verify)
        self._transport = self._compose(base)
        self._client = httpx.AsyncClient(
            transport=self._transport,
            timeout=self._config.timeout,
            follow_redirects=True,
        )

    async def execute(self, builder: RequestBuilder) -> Response:
        request = self._prepare(builder)
        response = await self._client.send(request, stream=True)
        logger.debug(f"AsyncClient.execute: status={response.status_code}, url={request.url}")
        raw, decoded = await aread_raw(response)
        return Response(response, raw_body=raw, content_decoded=decoded)

    async def get(self, url: str, *opts: RequestOption) -> Response:
        return await self._builder("GET", url, None, opts).do()

    async def post(self, url: str, body: Any = None, *opts: RequestOption) -> Response:
        """POST; a non-None body is sent as JSON."""
        return await self._builder("POST", url, body, opts).do()

    async def put(self, url: str, body: Any = None, *opts: RequestOption) -> Response:
        return await self._builder("PUT", url, body, opts).do()

    async def patch(self, url: str, body: Any = None, *opts: RequestOption) -> Response:
        return await self._builder("PATCH", url, body, opts).do()

    async def delete(self, url: str, *opts: RequestOption) -> Response:
        return await self._builder("DELETE", url, None, opts).do()

    async def get_with_context(self, ctx: Context, url: str, *opts: RequestOption) -> Response:
        return await self._builder("GET", url, None, opts, ctx).do()

    async def post_with_context(
        self, ctx: Context, url: str, body: Any = None, *opts: RequestOption
    ) -> Response:
        return await self._builder("POST", url, body, opts, ctx).do()

    async def put_with_context(
        self, ctx: Context, url: str, body: Any = None, *opts: RequestOption
    ) -> Response:
        return await self._builder("PUT", url, body, opts, ctx).do()

    async def patch_with_context(
        self, ctx: Context, url: str, body: Any = None, *opts: RequestOption
    ) -> Response:
        return await self._builder("PATCH", url, body, opts, ctx).do()

    async def delete_with_context(self, ctx: Context, url: str, *opts: RequestOption) -> Response:
        return await self._builder("DELETE", url, None, opts, ctx).do()

    # Format conveniences

    async def get_json(self, url: str, model: Optional[Type] = None, *opts: RequestOption) -> Any:
        return (await self.get(url, *opts)).json(model)

    async def get_json_with_context(
        self, ctx: Context, url: str, model: Optional[Type] = None, *opts: RequestOption
    ) -> Any:
        return (await self.get_with_context(ctx, url, *opts)).json(model)

    async def post_json(
        self,
        url: str,
        body: Any = None,
        model: Optional[Type] = None,
        *opts: RequestOption,
        decode: bool = True,
    ) -> Any:
        resp = await self.post(url, body, *opts)
        return resp.json(model) if decode else None

    async def post_json_with_context(
        self,
        ctx: Context,
        url: str,
        body: Any = None,
        model: Optional[Type] = None,
        *opts: RequestOption,
        decode: bool = True,
    ) -> Any:
        resp = await self.post_with_context(ctx, url, body, *opts)
        return resp.json(model) if decode else None

    async def get_xml(self, url: str, model: Optional[Type] = None, *opts: RequestOption) -> Any:
        return (await self.get(url, *opts)).xml(model)

    async def get_xml_with_context(
        self, ctx: Context, url: str, model: Optional[Type] = None, *opts: RequestOption
    ) -> Any:
        return (await self.get_with_context(ctx, url, *opts)).xml(model)

    async def post_xml(
        self,
        url: str,
        body: Any = None,
        model: Optional[Type] = None,
        *opts: RequestOption,
        decode: bool = True,
    ) -> Any:
        resp = await self._xml_builder(url, body, opts).do()
        return resp.xml(model) if decode else None

    async def post_xml_with_context(
        self,
        ctx: Context,
        url: str,
        body: Any = None,
        model: Optional[Type] = None,
        *opts: RequestOption,
        decode: bool = True,
    ) -> Any:
        resp = await self._xml_builder(url, body, opts, ctx).do()
        return resp.xml(model) if decode else None

    async def get_csv(self, url: str, model: Optional[Type] = None, *opts: RequestOption) -> List[Any]:
        return (await self.get(url, *opts)).csv(model)

    async def get_csv_with_context(
        self, ctx: Context, url: str, model: Optional[Type] = None, *opts: RequestOption
    ) -> List[Any]:
        return (await self.get_with_context(ctx, url, *opts)).csv(model)

    async def get_csv_with_separator(
        self, url: str, separator: str, model: Optional[Type] = None, *opts: RequestOption
    ) -> List[Any]:
        return (await self.get(url, *opts)).set_csv_separator(separator).csv(model)

    async def get_csv_with_separator_and_context(
        self,
        ctx: Context,
        url: str,
        separator: str,
        model: Optional[Type] = None,
        *opts: RequestOption,
    ) -> List[Any]:
        resp = await self.get_with_context(ctx, url, *opts)
        return resp.set_csv_separator(separator).csv(model)

    async def close(self) -> None:
        await self._client.aclose()
        self._closed = True

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
