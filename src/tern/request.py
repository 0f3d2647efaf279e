import dataclasses
import mimetypes
import os
import types
import typing

import filetype

from .models import GET, METHODS, URL, Method, PreparedRequest, URLType
from .utils import JSONType

U = typing.TypeVar("U")

Interceptor = typing.Callable[[PreparedRequest], PreparedRequest]
AsyncInterceptor = typing.Callable[
    [PreparedRequest], typing.Awaitable[PreparedRequest]
]


class MultipartFile(typing.NamedTuple):
    filename: str
    content_type: str
    data: bytes

    @classmethod
    def from_file(
        cls,
        file: typing.Union[str, "os.PathLike[str]", typing.BinaryIO],
        *,
        filename: typing.Optional[str] = None,
        content_type: typing.Optional[str] = None,
    ) -> "MultipartFile":
        """Reads a file from a path or a binary file-like object.
        If no 'content_type' is given it's guessed from the contents
        of the file and then from the name of the file.
        """
        if isinstance(file, (str, os.PathLike)):
            with open(file, "rb") as f:
                data = f.read()
            name = os.fspath(file)
        else:
            data = file.read()
            name = str(getattr(file, "name", "") or "")

        if filename is None:
            filename = os.path.basename(name)

        if content_type is None:
            content_type = filetype.guess_mime(data)

            # Couldn't guess by the contents of the file, so
            # we try the name of the file as a last-ditch effort.
            if content_type is None and filename:
                content_type, _ = mimetypes.guess_type(filename, strict=False)

        return cls(
            filename=filename,
            content_type=content_type or "application/octet-stream",
            data=data,
        )


@dataclasses.dataclass(frozen=True)
class NoParams:
    """URL is used as given, only normalized"""

    has_body: typing.ClassVar[bool] = False


@dataclasses.dataclass(frozen=True)
class SkipEncoding:
    """URL is passed through untouched"""

    has_body: typing.ClassVar[bool] = False


@dataclasses.dataclass(frozen=True)
class Query:
    """Parameters encoded into the URL query string for any method"""

    params: typing.Mapping[str, typing.Any]
    has_body: typing.ClassVar[bool] = False


@dataclasses.dataclass(frozen=True)
class URLEncoded:
    """Parameters encoded as an 'application/x-www-form-urlencoded' body"""

    params: typing.Mapping[str, typing.Any]
    has_body: typing.ClassVar[bool] = True


@dataclasses.dataclass(frozen=True)
class JSON:
    """A JSON-like tree serialized verbatim as an 'application/json' body"""

    json: JSONType
    has_body: typing.ClassVar[bool] = True


@dataclasses.dataclass(frozen=True)
class Multipart:
    """Form fields and named files as a 'multipart/form-data' body"""

    form: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    files: typing.Mapping[str, MultipartFile] = dataclasses.field(
        default_factory=dict
    )
    has_body: typing.ClassVar[bool] = True


@dataclasses.dataclass(frozen=True)
class RawData:
    """Bytes sent as-is with a caller supplied 'Content-Type'"""

    data: bytes
    content_type: str
    has_body: typing.ClassVar[bool] = True


ParamsType = typing.Union[
    NoParams, SkipEncoding, Query, URLEncoded, JSON, Multipart, RawData
]


@dataclasses.dataclass(frozen=True, eq=False)
class Request(typing.Generic[U]):
    """Describes one HTTP call and the type of the result it produces.

    'model' decides how the response body is decoded: 'str' and 'bool'
    use the text containers, 'tern.containers.Model' subclasses bring
    their own container and anything else is decoded from JSON.
    'path' locates the result within a structured response.

    If both 'interceptor' and 'async_interceptor' are given the
    async one wins and the sync one is ignored. An exclusive
    interceptor runs instead of the client's interceptors rather
    than before them.

    Requests compare and hash by identity, so they can be used as
    keys even when their parameters hold mappings.
    """

    url: URLType
    model: typing.Type[U] = typing.cast(typing.Type[U], str)
    method: typing.Union[Method, str] = GET
    params: ParamsType = NoParams()
    headers: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    timeout: float = 60.0
    disable_local_cache: bool = False
    disable_http_cache: bool = False
    path: typing.Optional[str] = None
    interceptor: typing.Optional[Interceptor] = None
    async_interceptor: typing.Optional[AsyncInterceptor] = None
    exclusive_interceptor: bool = False
    handle_cookies: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", URL.parse(self.url))
        if isinstance(self.method, str):
            name = self.method.upper()
            object.__setattr__(self, "method", METHODS.get(name, Method(name)))
        object.__setattr__(
            self, "headers", types.MappingProxyType(dict(self.headers or {}))
        )

    def replace(self, **changes: typing.Any) -> "Request[U]":
        """Returns a copy of the Request with the given fields changed"""
        return dataclasses.replace(self, **changes)

    def __repr__(self) -> str:
        return f"<Request [{self.method}] {str(self.url)!r}>"
