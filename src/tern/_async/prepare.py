import functools
import logging
import typing

import trio

from tern.exceptions import (
    ConfigurationError,
    LocalCacheDisabled,
    MethodDoesNotSupportBody,
    TernError,
)
from tern.models import (
    URL,
    CachePolicy,
    Headers,
    HeadersType,
    PreparedRequest,
    URLType,
)
from tern.multipart import encode_multipart
from tern.params import flatten, urlencode
from tern.request import (
    JSON,
    AsyncInterceptor,
    Interceptor,
    Multipart,
    NoParams,
    Query,
    RawData,
    Request,
    SkipEncoding,
    URLEncoded,
)
from tern.utils import compact_json_dumps, sync_or_async

AnyInterceptor = typing.Union[Interceptor, AsyncInterceptor]

logger = logging.getLogger(__name__)


def cache_policy(request: Request[typing.Any], local_cache: bool) -> CachePolicy:
    """Picks how the transport may use cached data for the request.
    Asking for the local cache of a request that disabled it is an error.
    """
    if local_cache:
        if request.disable_local_cache:
            raise LocalCacheDisabled("local cache was disabled in the request")
        return CachePolicy.RETURN_CACHE_DATA_DONT_LOAD
    if request.disable_http_cache:
        return CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA
    return CachePolicy.USE_PROTOCOL_CACHE_POLICY


def prepare_url(
    url: URLType, params: typing.Optional[typing.Mapping[str, typing.Any]] = None
) -> URL:
    """Adds the flattened 'params' to the query of 'url'. Query items
    that are already in the URL stay first and are kept as they are.
    """
    url = URL.parse(url)
    new_params = urlencode(flatten(params)) if params is not None else ""
    query = "&".join(x for x in (url.params, new_params) if x)
    return url.copy_with(params=query or None)


def prepare_body(request: Request[typing.Any], prepared: PreparedRequest) -> None:
    """Sets the URL, the body and the 'Content-Type' header
    according to the parameters of the request.
    """
    params = request.params
    if isinstance(params, SkipEncoding):
        prepared.url = request.url.copy_with()
        return
    elif isinstance(params, NoParams):
        prepared.url = prepare_url(request.url)
        return
    elif isinstance(params, Query):
        prepared.url = prepare_url(request.url, params.params)
        return

    if not request.method.has_body:
        raise MethodDoesNotSupportBody(request.method)

    if isinstance(params, URLEncoded):
        prepared.body = urlencode(flatten(params.params)).encode("utf-8")
        content_type = "application/x-www-form-urlencoded"
    elif isinstance(params, JSON):
        prepared.body = compact_json_dumps(params.json).encode("utf-8")
        content_type = "application/json"
    elif isinstance(params, Multipart):
        prepared.body, content_type = encode_multipart(params.form, params.files)
    elif isinstance(params, RawData):
        prepared.body = params.data
        content_type = params.content_type
    else:
        raise ConfigurationError(f"unknown request parameters {params!r}")

    prepared.headers["Content-Type"] = content_type
    prepared.url = prepare_url(request.url)


def asynchronize(interceptor: Interceptor) -> AsyncInterceptor:
    """Wraps a sync interceptor so that it's only called once awaited"""

    @functools.wraps(interceptor)
    async def intercept(request: PreparedRequest) -> PreparedRequest:
        return interceptor(request)

    return intercept


def compose(*interceptors: Interceptor) -> Interceptor:
    """Chains sync interceptors left-to-right: compose(f, g)(x) == g(f(x))"""

    def intercept(request: PreparedRequest) -> PreparedRequest:
        for interceptor in interceptors:
            request = interceptor(request)
        return request

    return intercept


def interceptor_chain(
    request: Request[typing.Any], interceptors: typing.Sequence[AnyInterceptor]
) -> typing.List[AnyInterceptor]:
    """Lists the interceptors that apply to 'request' in the order they run.
    The request's own interceptor goes first, followed by 'interceptors'
    unless the request's interceptor is exclusive.
    """
    primary: typing.Optional[AsyncInterceptor] = request.async_interceptor
    if primary is None and request.interceptor is not None:
        primary = asynchronize(request.interceptor)

    if primary is None:
        return list(interceptors)
    if request.exclusive_interceptor:
        return [primary]
    return [primary, *interceptors]


async def apply_interceptors(
    prepared: PreparedRequest, interceptors: typing.Sequence[AnyInterceptor]
) -> PreparedRequest:
    """Runs each interceptor on the output of the previous one.
    No interceptor is started once the surrounding scope is cancelled.
    """
    for interceptor in interceptors:
        await trio.lowlevel.checkpoint_if_cancelled()
        logger.debug("applying interceptor %r", interceptor)
        result = await sync_or_async(interceptor, prepared)
        if not isinstance(result, PreparedRequest):
            raise ConfigurationError(
                f"interceptor {interceptor!r} returned {type(result).__name__} "
                f"instead of a PreparedRequest",
                request=prepared,
            )
        prepared = result
    return prepared


async def prepare_request(
    request: Request[typing.Any],
    *,
    local_cache: bool = False,
    interceptors: typing.Sequence[AnyInterceptor] = (),
    default_headers: typing.Optional[HeadersType] = None,
) -> PreparedRequest:
    """Builds the PreparedRequest that will be handed to the transport.
    'default_headers' are only used for names the request doesn't set.
    """
    policy = cache_policy(request, local_cache)
    logger.debug("cache policy for %r is %s", request, policy.name)

    # Names differing only in case collapse to the last one given.
    headers = Headers()
    for name, value in request.headers.items():
        headers[name] = value

    prepared = PreparedRequest(
        request.method,
        request.url.copy_with(),
        headers=headers,
        timeout=request.timeout,
        cache_policy=policy,
        handle_cookies=request.handle_cookies,
    )
    defaults = [
        (name, value)
        for name, value in Headers(default_headers).items()
        if name not in prepared.headers
    ]
    prepared.headers.extend(defaults)
    prepare_body(request, prepared)

    try:
        prepared = await apply_interceptors(
            prepared, interceptor_chain(request, interceptors)
        )
    except TernError as e:
        if e.request is None:
            e.request = prepared
        raise

    logger.debug("prepared %s %s", prepared.method, prepared.url)
    return prepared
