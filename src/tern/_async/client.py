import contextlib
import enum
import logging
import typing

from tern.containers import decode, decode_all
from tern.exceptions import (
    ErrorStatusCode,
    NonHTTPResponse,
    TernError,
    TransportError,
)
from tern.models import CachePolicy, Headers, HeadersType, PreparedRequest, Response
from tern.request import Request
from .prepare import AnyInterceptor, prepare_request
from .transport import H11Transport, Transport

U = typing.TypeVar("U")

logger = logging.getLogger(__name__)


class ResponseType(enum.Enum):
    LOCAL_CACHE = "LOCAL_CACHE"
    HTTP_CACHE = "HTTP_CACHE"
    REGULAR = "REGULAR"


class Result(typing.NamedTuple):
    value: typing.Any
    response: Response
    type: ResponseType


class Client:
    """
    Assembles Requests, sends them through the transport and
    decodes the response body into the Request's model.

    'interceptors' run in order on every PreparedRequest after the
    request's own interceptor, unless that one is exclusive.
    'headers' are sent with every request that doesn't set them.
    """

    def __init__(
        self,
        transport: typing.Optional[Transport] = None,
        *,
        interceptors: typing.Sequence[AnyInterceptor] = (),
        headers: typing.Optional[HeadersType] = None,
    ):
        self.transport = transport if transport is not None else H11Transport()
        self.interceptors = list(interceptors)
        self.headers = Headers(headers)

    async def fetch(self, request: Request[U], *, local_cache: bool = False) -> Result:
        """Sends the request and decodes one result from the response"""
        prepared, response = await self.send(request, local_cache=local_cache)
        with _attach(prepared, response):
            value = decode(request.model, response.data, request.path)
        return Result(value, response, _response_type(prepared, response))

    async def fetch_all(
        self, request: Request[U], *, local_cache: bool = False
    ) -> Result:
        """Sends the request and decodes a list of results from the response"""
        prepared, response = await self.send(request, local_cache=local_cache)
        with _attach(prepared, response):
            value = decode_all(request.model, response.data, request.path)
        return Result(value, response, _response_type(prepared, response))

    async def cached(self, request: Request[U]) -> Result:
        """Only answers from the transport's cache, never loads"""
        return await self.fetch(request, local_cache=True)

    async def send(
        self, request: Request[typing.Any], *, local_cache: bool = False
    ) -> typing.Tuple[PreparedRequest, Response]:
        """Assembles and sends the request. Raises 'ErrorStatusCode'
        unless the transport hands back a 2XX Response.
        """
        prepared = await prepare_request(
            request,
            local_cache=local_cache,
            interceptors=self.interceptors,
            default_headers=self.headers,
        )

        try:
            response = await self.transport.send(prepared)
        except TernError as e:
            if e.request is None:
                e.request = prepared
            raise
        except Exception as e:
            raise TransportError(
                f"transport failed: {e}", request=prepared, error=e
            ) from e

        if not isinstance(response, Response):
            raise NonHTTPResponse(
                f"transport returned {type(response).__name__} instead of a Response",
                request=prepared,
            )
        logger.debug("%s %s -> %d", prepared.method, prepared.url, response.status_code)
        if not response.is_success:
            raise ErrorStatusCode(
                response.status_code,
                response.data,
                request=prepared,
                response=response,
            )
        return prepared, response


@contextlib.contextmanager
def _attach(request: PreparedRequest, response: Response) -> typing.Iterator[None]:
    """Adds the request and response to any TernError raised within"""
    try:
        yield
    except TernError as e:
        if e.request is None:
            e.request = request
        if e.response is None:
            e.response = response
        raise


def _response_type(request: PreparedRequest, response: Response) -> ResponseType:
    if request.cache_policy is CachePolicy.RETURN_CACHE_DATA_DONT_LOAD:
        return ResponseType.LOCAL_CACHE
    if response.from_cache:
        return ResponseType.HTTP_CACHE
    return ResponseType.REGULAR
