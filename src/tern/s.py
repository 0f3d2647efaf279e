"""Blocking interface. Each call runs the async implementation
to completion in its own 'trio.run()', so it must not be used
from within a running event loop.
"""
import functools
import typing

import trio

from ._async import client as _client
from ._async import prepare as _prepare
from .models import PreparedRequest
from .request import Request

__all__ = ["Client", "prepare_request"]


def prepare_request(
    request: Request[typing.Any], **kwargs: typing.Any
) -> PreparedRequest:
    return trio.run(functools.partial(_prepare.prepare_request, request, **kwargs))


class Client:
    """Same as 'tern.a.Client' but every method blocks until it's done.
    Async interceptors are still supported, they run on the event
    loop that's started for the call.
    """

    def __init__(self, *args: typing.Any, **kwargs: typing.Any):
        self._client = _client.Client(*args, **kwargs)

    @property
    def transport(self) -> typing.Any:
        return self._client.transport

    @property
    def interceptors(self) -> typing.List[typing.Any]:
        return self._client.interceptors

    def fetch(
        self, request: Request[typing.Any], **kwargs: typing.Any
    ) -> _client.Result:
        return trio.run(functools.partial(self._client.fetch, request, **kwargs))

    def fetch_all(
        self, request: Request[typing.Any], **kwargs: typing.Any
    ) -> _client.Result:
        return trio.run(functools.partial(self._client.fetch_all, request, **kwargs))

    def cached(self, request: Request[typing.Any]) -> _client.Result:
        return trio.run(self._client.cached, request)

    def send(
        self, request: Request[typing.Any], **kwargs: typing.Any
    ) -> typing.Tuple[PreparedRequest, typing.Any]:
        return trio.run(functools.partial(self._client.send, request, **kwargs))
