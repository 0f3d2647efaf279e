from .client import Client, Result, ResponseType
from .prepare import (
    apply_interceptors,
    asynchronize,
    cache_policy,
    compose,
    interceptor_chain,
    prepare_body,
    prepare_request,
    prepare_url,
)
from .transport import H11Transport, Transport, open_stream

__all__ = [
    "Client",
    "Result",
    "ResponseType",
    "apply_interceptors",
    "asynchronize",
    "cache_policy",
    "compose",
    "interceptor_chain",
    "prepare_body",
    "prepare_request",
    "prepare_url",
    "H11Transport",
    "Transport",
    "open_stream",
]
