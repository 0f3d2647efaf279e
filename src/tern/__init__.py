from .containers import (
    BoolContainer,
    DataContainer,
    DetectedTextContainer,
    Model,
    StructuredContainer,
    TextContainer,
    decode,
    decode_all,
    register_container,
)
from .exceptions import (
    CacheMiss,
    ConfigurationError,
    ConnectionError,
    ContainerDoesNotSupportArrays,
    ErrorStatusCode,
    HTTPError,
    InvalidContentTypeString,
    InvalidKeyOrFileName,
    InvalidKeyString,
    InvalidResponse,
    InvalidValueString,
    LocalCacheDisabled,
    LocalProtocolError,
    MethodDoesNotSupportBody,
    MultipartEncodingError,
    NonHTTPResponse,
    ParseError,
    PathNotFound,
    RemoteProtocolError,
    StringParseError,
    TernError,
    TimeoutError,
    TransportError,
    UnableToParseModel,
    URLError,
)
from .models import (
    DELETE,
    GET,
    HEAD,
    OPTIONS,
    PATCH,
    POST,
    PUT,
    TRACE,
    URL,
    CachePolicy,
    Headers,
    Method,
    PreparedRequest,
    Response,
)
from .multipart import BOUNDARY, encode_multipart
from .params import flatten, urlencode
from .request import (
    JSON,
    Multipart,
    MultipartFile,
    NoParams,
    Query,
    RawData,
    Request,
    SkipEncoding,
    URLEncoded,
)
from . import _async as a
from . import s

__all__ = [
    "BoolContainer",
    "DataContainer",
    "DetectedTextContainer",
    "Model",
    "StructuredContainer",
    "TextContainer",
    "decode",
    "decode_all",
    "register_container",
    "CacheMiss",
    "ConfigurationError",
    "ConnectionError",
    "ContainerDoesNotSupportArrays",
    "ErrorStatusCode",
    "HTTPError",
    "InvalidContentTypeString",
    "InvalidKeyOrFileName",
    "InvalidKeyString",
    "InvalidResponse",
    "InvalidValueString",
    "LocalCacheDisabled",
    "LocalProtocolError",
    "MethodDoesNotSupportBody",
    "MultipartEncodingError",
    "NonHTTPResponse",
    "ParseError",
    "PathNotFound",
    "RemoteProtocolError",
    "StringParseError",
    "TernError",
    "TimeoutError",
    "TransportError",
    "UnableToParseModel",
    "URLError",
    "DELETE",
    "GET",
    "HEAD",
    "OPTIONS",
    "PATCH",
    "POST",
    "PUT",
    "TRACE",
    "URL",
    "CachePolicy",
    "Headers",
    "Method",
    "PreparedRequest",
    "Response",
    "BOUNDARY",
    "encode_multipart",
    "flatten",
    "urlencode",
    "JSON",
    "Multipart",
    "MultipartFile",
    "NoParams",
    "Query",
    "RawData",
    "Request",
    "SkipEncoding",
    "URLEncoded",
    "a",
    "s",
]

__version__ = "dev"
