import contextlib
import logging
import math
import ssl
import typing

import certifi
import h11
import trio

from tern.exceptions import (
    CacheMiss,
    ConnectionError,
    InvalidResponse,
    LocalProtocolError,
    RemoteProtocolError,
    TernError,
    TimeoutError,
)
from tern.models import URL, CachePolicy, Headers, PreparedRequest, Response

CHUNK_SIZE = 65536

StreamOpener = typing.Callable[
    [URL, typing.Optional[ssl.SSLContext]], typing.Awaitable[trio.abc.Stream]
]

logger = logging.getLogger(__name__)


class Transport:
    """Puts a PreparedRequest on the wire and hands back the complete Response"""

    async def send(self, request: PreparedRequest) -> Response:
        raise NotImplementedError()


async def open_stream(
    url: URL, ssl_context: typing.Optional[ssl.SSLContext]
) -> trio.abc.Stream:
    scheme, host, port = url.origin
    stream: trio.abc.Stream = await trio.open_tcp_stream(host, port)
    if scheme == "https":
        stream = trio.SSLStream(
            stream, ssl_context, server_hostname=host, https_compatible=True
        )
        await stream.do_handshake()
    return stream


class H11Transport(Transport):
    """HTTP/1.1 over a fresh connection per request.

    Doesn't pool connections, follow redirects, store cookies or
    cache responses. A request that may only be answered from a cache
    fails with 'CacheMiss'.
    """

    def __init__(
        self,
        *,
        open_stream: StreamOpener = open_stream,
        ssl_context: typing.Optional[ssl.SSLContext] = None,
        max_body_size: typing.Optional[int] = None,
    ):
        self.open_stream = open_stream
        self.max_body_size = max_body_size
        self._ssl_context = ssl_context

    @property
    def ssl_context(self) -> ssl.SSLContext:
        if self._ssl_context is None:
            self._ssl_context = ssl.create_default_context(cafile=certifi.where())
        return self._ssl_context

    async def send(self, request: PreparedRequest) -> Response:
        if request.cache_policy is CachePolicy.RETURN_CACHE_DATA_DONT_LOAD:
            raise CacheMiss("no cached response available", request=request)

        timeout = request.timeout if request.timeout is not None else math.inf
        logger.debug("sending %s %s", request.method, request.url)
        with self._wrap_exceptions(request):
            with trio.fail_after(timeout):
                response = await self._exchange(request)
        logger.debug(
            "received %d with %d bytes for %s %s",
            response.status_code,
            len(response.data),
            request.method,
            request.url,
        )
        return response

    async def _exchange(self, request: PreparedRequest) -> Response:
        h11_conn = h11.Connection(h11.CLIENT)
        ssl_context = self.ssl_context if request.url.scheme == "https" else None
        stream = await self.open_stream(request.url, ssl_context)

        async with stream:
            await stream.send_all(h11_conn.send(_request_to_h11_event(request)))
            if request.body:
                await stream.send_all(h11_conn.send(h11.Data(data=request.body)))
            await stream.send_all(h11_conn.send(h11.EndOfMessage()))

            h11_response: typing.Optional[h11.Response] = None
            chunks: typing.List[bytes] = []
            received = 0
            while True:
                event = h11_conn.next_event()
                if event is h11.NEED_DATA:
                    h11_conn.receive_data(await stream.receive_some(CHUNK_SIZE))
                elif isinstance(event, h11.InformationalResponse):
                    continue
                elif isinstance(event, h11.Response):
                    h11_response = event
                elif isinstance(event, h11.Data):
                    received += len(event.data)
                    if self.max_body_size is not None and received > self.max_body_size:
                        raise InvalidResponse(
                            f"response body exceeds {self.max_body_size} bytes",
                            request=request,
                        )
                    chunks.append(event.data)
                elif isinstance(event, h11.EndOfMessage):
                    break
                else:
                    raise RemoteProtocolError(
                        "connection closed before the response was complete",
                        request=request,
                    )

        if h11_response is None:
            raise InvalidResponse("no response was received", request=request)
        return Response(
            status_code=h11_response.status_code,
            http_version=f"HTTP/{h11_response.http_version.decode()}",
            headers=list(h11_response.headers),
            data=b"".join(chunks),
            request=request,
        )

    @contextlib.contextmanager
    def _wrap_exceptions(self, request: PreparedRequest) -> typing.Iterator[None]:
        try:
            yield
        except TernError:
            raise
        except trio.TooSlowError as e:
            raise TimeoutError(
                f"no response within {request.timeout} seconds",
                request=request,
                error=e,
            ) from e
        except h11.LocalProtocolError as e:
            raise LocalProtocolError(str(e), request=request, error=e) from e
        except h11.RemoteProtocolError as e:
            raise RemoteProtocolError(str(e), request=request, error=e) from e
        except (OSError, trio.BrokenResourceError, trio.ClosedResourceError) as e:
            raise ConnectionError(
                f"could not connect to '{request.url.netloc}'",
                request=request,
                error=e,
            ) from e


def _request_to_h11_event(request: PreparedRequest) -> h11.Request:
    headers = Headers(request.headers.items())
    if "host" not in headers:
        _, host, port = request.url.origin
        if port != request.url.DEFAULT_PORT_BY_SCHEME.get(request.url.scheme):
            host += f":{port}"
        headers["Host"] = host
    if request.body is not None and "transfer-encoding" not in headers:
        headers.setdefault("Content-Length", str(len(request.body)))
    if request.cache_policy is CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA:
        headers.setdefault("Cache-Control", "no-cache")
    headers.setdefault("Accept-Encoding", "identity")
    headers.setdefault("Connection", "close")

    # Put the 'Host' header first in the request as it's required.
    h11_headers = [(b"Host", headers["host"].encode("latin-1"))]
    for k, v in headers.items():
        if k.lower() != "host":
            h11_headers.append((k.encode("latin-1"), v.encode("latin-1")))
    return h11.Request(
        method=str(request.method).encode(),
        target=request.target.encode("latin-1"),
        headers=h11_headers,
    )
