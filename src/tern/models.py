import enum
import typing
import urllib.parse

from .exceptions import URLError

HeadersType = typing.Union[
    typing.Mapping[str, str],
    typing.Mapping[bytes, bytes],
    typing.Iterable[typing.Tuple[str, str]],
    typing.Iterable[typing.Tuple[bytes, bytes]],
    "Headers",
]
URLType = typing.Union[str, "URL"]


class URL:
    """Absolute or relative URL split into its components.

    A URL parsed from a string renders back to exactly that string
    until one of its components is changed, after which it's
    rendered from the components.
    """

    DEFAULT_PORT_BY_SCHEME: typing.Dict[str, int] = {
        "http": 80,
        "https": 443,
    }
    _raw: typing.Optional[str] = None

    def __init__(
        self,
        *,
        scheme: typing.Optional[str] = None,
        username: typing.Optional[str] = None,
        password: typing.Optional[str] = None,
        host: typing.Optional[str] = None,
        port: typing.Optional[int] = None,
        path: typing.Optional[str] = None,
        params: typing.Optional[str] = None,
        fragment: typing.Optional[str] = None,
    ):
        self.scheme = scheme
        self.username = username
        self.password = password
        self.host = host
        self.port = port
        self.path = path
        # Percent-encoded query string without the leading '?'
        self.params = params
        self.fragment = fragment

    def __setattr__(self, name: str, value: typing.Any) -> None:
        if name != "_raw":
            super().__setattr__("_raw", None)
        super().__setattr__(name, value)

    @classmethod
    def parse(cls, url: URLType) -> "URL":
        """Splits a URL string into its components. Raises 'URLError'
        if the string has no decomposable representation.
        """
        if isinstance(url, URL):
            return url.copy_with()
        if not isinstance(url, str):
            raise URLError(f"expected a URL string, got {type(url).__name__}")
        if any(c.isspace() or ord(c) < 0x20 for c in url):
            raise URLError(f"invalid URL '{url}'")
        try:
            parts = urllib.parse.urlsplit(url)
            port = parts.port
        except ValueError as e:
            raise URLError(f"invalid URL '{url}'", error=e) from e
        if parts.netloc and not parts.hostname:
            raise URLError(f"invalid URL '{url}'")

        parsed = cls(
            scheme=parts.scheme or None,
            username=urllib.parse.unquote(parts.username) if parts.username else None,
            password=urllib.parse.unquote(parts.password) if parts.password else None,
            host=parts.hostname,
            port=port,
            path=parts.path or None,
            params=parts.query or None,
            fragment=parts.fragment or None,
        )
        parsed._raw = url
        return parsed

    @property
    def origin(self) -> typing.Tuple[str, str, int]:
        if self.scheme is None or self.host is None:
            raise URLError("origin cannot be determined for non-absolute URLs")
        if self.port is None:
            if self.scheme not in self.DEFAULT_PORT_BY_SCHEME:
                raise URLError(f"unknown default port for scheme '{self.scheme}'")
            port = self.DEFAULT_PORT_BY_SCHEME[self.scheme]
        else:
            port = self.port
        return self.scheme, self.host, port

    @property
    def netloc(self) -> str:
        if self.host is None:
            return ""
        userinfo = ""
        if self.username is not None:
            userinfo = urllib.parse.quote(self.username, safe="")
            if self.password is not None:
                userinfo += ":" + urllib.parse.quote(self.password, safe="")
            userinfo += "@"
        host = f"[{self.host}]" if ":" in self.host else self.host
        port = f":{self.port}" if self.port is not None else ""
        return f"{userinfo}{host}{port}"

    def copy_with(self, **changes: typing.Any) -> "URL":
        kwargs = dict(
            scheme=self.scheme,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            path=self.path,
            params=self.params,
            fragment=self.fragment,
        )
        kwargs.update(changes)
        url = URL(**kwargs)
        if not changes:
            url._raw = self._raw
        return url

    def __str__(self) -> str:
        if self._raw is not None:
            return self._raw
        return self._unsplit()

    def _unsplit(self) -> str:
        return urllib.parse.urlunsplit(
            (
                self.scheme or "",
                self.netloc,
                self.path or "",
                self.params or "",
                self.fragment or "",
            )
        )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            try:
                other = URL.parse(other)
            except URLError:
                return False
        if isinstance(other, URL):
            return self._unsplit() == other._unsplit()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._unsplit())

    def __repr__(self) -> str:
        return f"<URL {str(self)!r}>"


KT = typing.TypeVar("KT")
VT = typing.TypeVar("VT")
MultiMappingType = typing.Union[
    typing.Mapping[KT, VT], typing.Iterable[typing.Tuple[KT, VT]]
]


class MultiMapping(typing.Generic[KT, VT]):
    """Ordered mapping that allows a key to occur multiple times.
    Lookups go through '_normalize_key()' but the key is stored
    as it was given.
    """

    def __init__(self, values: typing.Optional[MultiMappingType] = None):
        self._internal: typing.Dict[typing.Any, typing.List[typing.Tuple[KT, VT]]] = {}
        if values:
            self.extend(values)

    def get_one(
        self, key: KT, default: typing.Optional[VT] = None
    ) -> typing.Optional[VT]:
        try:
            return self._internal[self._normalize_key(key)][0][1]
        except (KeyError, IndexError):
            return default

    get = get_one

    def get_all(self, key: KT) -> typing.List[VT]:
        try:
            return [x[1] for x in self._internal[self._normalize_key(key)]]
        except KeyError:
            return []

    def add(self, key: KT, value: VT) -> None:
        key = self._convert_key(key)
        self._internal.setdefault(self._normalize_key(key), []).append(
            (key, self._convert_value(value))
        )

    def extend(self, items: MultiMappingType) -> None:
        for k, v in items.items() if hasattr(items, "items") else items:
            self.add(k, v)

    def setdefault(self, key: KT, value: VT) -> VT:
        if key not in self:
            self[key] = value
        return typing.cast(VT, self.get_one(key))

    def keys(self) -> typing.Iterator[KT]:
        for items in self._internal.values():
            if items:
                yield items[0][0]

    def items(self) -> typing.Iterator[typing.Tuple[KT, VT]]:
        for items in self._internal.values():
            for k, v in items:
                yield k, v

    def copy(self) -> "MultiMapping[KT, VT]":
        return type(self)(list(self.items()))

    def __contains__(self, item: object) -> bool:
        return bool(self._internal.get(self._normalize_key(item), None))

    def __getitem__(self, item: KT) -> VT:
        try:
            return self._internal[self._normalize_key(item)][0][1]
        except (KeyError, IndexError):
            raise KeyError(item) from None

    def __setitem__(self, key: KT, value: VT) -> None:
        key = self._convert_key(key)
        self._internal[self._normalize_key(key)] = [(key, self._convert_value(value))]

    def __delitem__(self, key: KT) -> None:
        self._internal.pop(self._normalize_key(key), None)

    def __iter__(self) -> typing.Iterator[KT]:
        return self.keys()

    def __len__(self) -> int:
        return sum(len(x) for x in self._internal.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiMapping):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def _normalize_key(self, key: typing.Any) -> typing.Any:
        return key

    def _convert_key(self, key: typing.Any) -> KT:
        return key

    def _convert_value(self, value: typing.Any) -> VT:
        return value


class Headers(MultiMapping[str, str]):
    """Case-insensitive multi-mapping that remembers the case
    each header name was given in.
    """

    def _normalize_key(self, key: typing.Any) -> typing.Any:
        if isinstance(key, bytes):
            key = key.decode("latin-1")
        return key.lower() if isinstance(key, str) else key

    def _convert_key(self, key: typing.Any) -> str:
        if isinstance(key, bytes):
            key = key.decode("latin-1")
        return key

    def _convert_value(self, value: typing.Any) -> str:
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        return value

    def __repr__(self) -> str:
        return f"<Headers {list(self.items())!r}>"


class Method(typing.NamedTuple):
    """An HTTP method along with whether a request body
    is allowed to be sent with it.
    """

    name: str
    has_body: bool = False

    def __str__(self) -> str:
        return self.name


GET = Method("GET")
HEAD = Method("HEAD")
OPTIONS = Method("OPTIONS")
TRACE = Method("TRACE")
POST = Method("POST", has_body=True)
PUT = Method("PUT", has_body=True)
PATCH = Method("PATCH", has_body=True)
DELETE = Method("DELETE", has_body=True)

# Unknown method names are treated as not carrying a body.
METHODS: typing.Dict[str, Method] = {
    m.name: m for m in (GET, HEAD, OPTIONS, TRACE, POST, PUT, PATCH, DELETE)
}


class CachePolicy(enum.Enum):
    USE_PROTOCOL_CACHE_POLICY = "USE_PROTOCOL_CACHE_POLICY"
    RELOAD_IGNORING_LOCAL_CACHE_DATA = "RELOAD_IGNORING_LOCAL_CACHE_DATA"
    RETURN_CACHE_DATA_DONT_LOAD = "RETURN_CACHE_DATA_DONT_LOAD"


class PreparedRequest:
    """The transport-level request. Everything a transport needs
    to put the request on the wire: method, final URL, headers
    and the rendered body. This is what interceptors receive and
    what they must hand back.

    Request.target defaults to Request.url.path + ('?' + Request.url.params)?
    unless it's been set explicitly, like '*' for OPTIONS requests.
    """

    def __init__(
        self,
        method: Method,
        url: URLType,
        *,
        headers: typing.Optional[HeadersType] = None,
        body: typing.Optional[bytes] = None,
        timeout: typing.Optional[float] = None,
        cache_policy: CachePolicy = CachePolicy.USE_PROTOCOL_CACHE_POLICY,
        handle_cookies: bool = True,
    ):
        self.method = method
        self.url = url
        self.headers = headers
        self.body = body
        self.timeout = timeout
        self.cache_policy = cache_policy
        self.handle_cookies = handle_cookies

        self._target: typing.Optional[str] = None

    @property
    def url(self) -> URL:
        return self._url

    @url.setter
    def url(self, value: URLType) -> None:
        if not isinstance(value, URL):
            value = URL.parse(value)
        self._url = value

    @property
    def headers(self) -> Headers:
        return self._headers

    @headers.setter
    def headers(self, value: typing.Optional[HeadersType]) -> None:
        if not isinstance(value, Headers):
            value = Headers(value or ())
        self._headers = value

    @property
    def target(self) -> str:
        if self._target is not None:
            return self._target
        return (
            f"{self.url.path or '/'}{'?' + self.url.params if self.url.params else ''}"
        )

    @target.setter
    def target(self, value: str) -> None:
        self._target = value

    def copy(self) -> "PreparedRequest":
        request = PreparedRequest(
            self.method,
            self.url.copy_with(),
            headers=self.headers.copy(),
            body=self.body,
            timeout=self.timeout,
            cache_policy=self.cache_policy,
            handle_cookies=self.handle_cookies,
        )
        request._target = self._target
        return request

    def __repr__(self) -> str:
        return f"<PreparedRequest [{self.method}]>"


class Response:
    def __init__(
        self,
        status_code: int,
        http_version: str,
        headers: HeadersType,
        data: bytes = b"",
        request: typing.Optional[PreparedRequest] = None,
        from_cache: bool = False,
    ):
        self.status_code = status_code
        self.http_version = http_version
        self.headers = headers
        self.data = data
        self.request = request
        # Set by transports that answered from an HTTP cache.
        self.from_cache = from_cache

    @property
    def headers(self) -> Headers:
        return self._headers

    @headers.setter
    def headers(self, value: HeadersType) -> None:
        if not isinstance(value, Headers):
            value = Headers(value)
        self._headers = value

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def __repr__(self) -> str:
        return "<Response [%d]>" % self.status_code
