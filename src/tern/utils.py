import codecs
import functools
import json
import typing

import chardet

RetType = typing.TypeVar("RetType")
AsyncCallable = typing.Union[
    typing.Callable[..., RetType],
    typing.Callable[..., typing.Awaitable[RetType]],
]
JSONType = typing.Union[
    typing.Mapping[typing.Any, typing.Any],
    typing.Sequence[typing.Any],
    int,
    bool,
    str,
    float,
    None,
]


def _int_to_urlenc() -> typing.Dict[int, bytes]:
    """Creates a mapping of ordinals to bytes encoded via url-encoding"""
    values = {}
    special = {0x2A, 0x2D, 0x2E, 0x5F}
    for byte in range(256):
        if (
            (0x61 <= byte <= 0x7A)
            or (0x41 <= byte <= 0x5A)
            or (0x30 <= byte <= 0x39)
            or (byte in special)
        ):  # Keep the ASCII
            values[byte] = bytes((byte,))
        elif byte == 0x20:  # Space -> '+'
            values[byte] = b"+"
        else:  # Percent-encoded
            values[byte] = b"%" + hex(byte)[2:].upper().zfill(2).encode()
    return values


INT_TO_URLENC = _int_to_urlenc()


@functools.lru_cache(128)
def is_known_encoding(encoding: str) -> typing.Optional[str]:
    """Given an encoding type, return either it's normalized name
    if we understand the codec otherwise return 'None'.
    """
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        return None


def detect_encoding(data: bytes, default: str = "utf-8") -> str:
    """Guesses the encoding of 'data' with chardet. Falls back
    to 'default' if chardet isn't confident or doesn't know the codec.
    """
    if not data:
        return "ascii"
    guess = chardet.detect(data)["encoding"]
    return (guess and is_known_encoding(guess)) or default


def compact_json_dumps(obj: JSONType) -> str:
    """Function that doesn't add extra whitespace when encoding JSON"""
    return json.dumps(obj, separators=(",", ":"))


async def sync_or_async(
    f: AsyncCallable, *args: typing.Any, **kwargs: typing.Any
) -> typing.Any:
    ret = f(*args, **kwargs)
    if hasattr(ret, "__await__"):
        ret = await ret
    return ret
