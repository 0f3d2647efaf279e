"""Implements multipart/form-data bodies

Sections are rendered with a fixed boundary so that equal
inputs always produce byte-for-byte equal bodies: form fields
first, then files, each group sorted by field name. The boundary
isn't escaped so it must not appear inside any of the payloads.
"""
import typing

from .exceptions import (
    InvalidContentTypeString,
    InvalidKeyOrFileName,
    InvalidKeyString,
    InvalidValueString,
    TernError,
)
from .request import MultipartFile

BOUNDARY = "__X_NST_BOUNDARY__"
CRLF = b"\r\n"


def encode_multipart(
    form: typing.Mapping[str, str],
    files: typing.Mapping[str, MultipartFile],
    *,
    boundary: str = BOUNDARY,
) -> typing.Tuple[bytes, str]:
    """Renders form fields and files into a multipart body.
    Returns the body and the value for the 'Content-Type' header.
    """
    boundary_line = b"--%b\r\n" % boundary.encode("ascii")
    data = bytearray()

    for key, value in sorted(form.items()):
        data += boundary_line
        data += _encode(
            f'Content-Disposition: form-data; name="{key}"\r\n\r\n',
            lambda: InvalidKeyString(key),
        )
        data += _encode(value, lambda: InvalidValueString(value)) + CRLF

    for key, file in sorted(files.items()):
        data += boundary_line
        data += _encode(
            f'Content-Disposition: form-data; name="{key}"; '
            f'filename="{file.filename}"\r\n',
            lambda: InvalidKeyOrFileName(key, file.filename),
        )
        data += _encode(
            f"Content-Type: {file.content_type}\r\n\r\n",
            lambda: InvalidContentTypeString(file.content_type),
        )
        data += file.data + CRLF

    data += b"--%b--\r\n" % boundary.encode("ascii")
    return bytes(data), f"multipart/form-data; boundary={boundary}"


def _encode(text: str, error: typing.Callable[[], TernError]) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        exc = error()
        exc.error = e
        raise exc from e
