import typing

if typing.TYPE_CHECKING:
    from .models import Method, PreparedRequest, Response


class TernError(Exception):
    """Base error type for 'Tern' which may carry the PreparedRequest
    that was being sent, the Response that was received, and the
    encapsulated error if this error wraps a different exception.
    """

    def __init__(
        self,
        message: str,
        request: typing.Optional["PreparedRequest"] = None,
        response: typing.Optional["Response"] = None,
        error: typing.Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.request = request
        self.response = response
        self.error = error


class ConfigurationError(TernError):
    """The Request can't be assembled the way it is described"""


class MethodDoesNotSupportBody(ConfigurationError):
    """Error raised when a body-carrying payload is used with
    a method like 'GET' or 'HEAD' that can't carry a body.
    """

    def __init__(self, method: "Method", **kwargs: typing.Any):
        super().__init__(f"method '{method}' does not support a body", **kwargs)
        self.method = method


class LocalCacheDisabled(ConfigurationError):
    """Error raised when a local-cache-only fetch is asked
    for a Request with 'disable_local_cache=True'
    """


class URLError(ConfigurationError):
    """Error while parsing a URL"""


class MultipartEncodingError(TernError):
    """Generic error while rendering a multipart/form-data body"""


class InvalidKeyString(MultipartEncodingError):
    def __init__(self, key: str, **kwargs: typing.Any):
        super().__init__(f"form field name {key!r} can't be encoded", **kwargs)
        self.key = key


class InvalidValueString(MultipartEncodingError):
    def __init__(self, value: str, **kwargs: typing.Any):
        super().__init__(f"form field value {value!r} can't be encoded", **kwargs)
        self.value = value


class InvalidKeyOrFileName(MultipartEncodingError):
    def __init__(self, key: str, filename: str, **kwargs: typing.Any):
        super().__init__(
            f"file field name {key!r} or filename {filename!r} can't be encoded",
            **kwargs,
        )
        self.key = key
        self.filename = filename


class InvalidContentTypeString(MultipartEncodingError):
    def __init__(self, content_type: str, **kwargs: typing.Any):
        super().__init__(f"content-type {content_type!r} can't be encoded", **kwargs)
        self.content_type = content_type


class ParseError(TernError):
    """Generic error raised when response data can't be turned into a result"""


class StringParseError(ParseError):
    def __init__(self, encoding: str, **kwargs: typing.Any):
        super().__init__(
            f"can't parse text from data with required encoding '{encoding}'",
            **kwargs,
        )
        self.encoding = encoding


class PathNotFound(ParseError):
    """The path doesn't resolve to a node within the structured document"""

    def __init__(self, path: str, **kwargs: typing.Any):
        super().__init__(f"path '{path}' not found in document", **kwargs)
        self.path = path


class UnableToParseModel(ParseError):
    """Error raised when the located data can't be converted into the model"""


class ContainerDoesNotSupportArrays(ParseError):
    def __init__(self, container: str, **kwargs: typing.Any):
        super().__init__(
            f"data container '{container}' does not support arrays", **kwargs
        )
        self.container = container


class TransportError(TernError):
    """Generic error reported by the transport that sends a PreparedRequest"""


class NonHTTPResponse(TransportError):
    """Error raised when the transport hands back something that isn't a Response"""


class InvalidResponse(TransportError):
    """Error raised when a Response is missing information it must have"""


class ErrorStatusCode(TransportError):
    """Error raised when the status code of a Response isn't 2XX"""

    def __init__(self, status_code: int, data: bytes, **kwargs: typing.Any):
        super().__init__(f"unexpected status code {status_code}", **kwargs)
        self.status_code = status_code
        self.data = data


class CacheMiss(TransportError):
    """Error raised when only cached data is allowed but there is none"""


class HTTPError(TransportError):
    """Generic error relating to HTTP"""


class LocalProtocolError(HTTPError):
    """Error raised when sending something that isn't valid HTTP/1.1"""


class RemoteProtocolError(HTTPError):
    """Error raised when the remote peer doesn't speak valid HTTP/1.1"""


class TimeoutError(TransportError):
    """Error raised when an operation times out"""


class ConnectionError(TransportError):
    """Generic error raised while attempting to setup a connection"""
