"""Flattening of nested parameters into bracket-style
key/value pairs, as understood by Rails, PHP and friends:

    {"f": {"a": [1, 2], "z": "1"}} -> f[a][]=1&f[a][]=2&f[z]=1
"""
import numbers
import typing

from .utils import INT_TO_URLENC

ParamPairs = typing.List[typing.Tuple[str, str]]


def flatten(value: typing.Any, key: typing.Optional[str] = None) -> ParamPairs:
    """Turns a tree of mappings, sequences and scalars into an ordered
    list of (key, value) pairs. Mapping entries are always visited
    in lexicographic key order so that equal inputs produce equal
    query strings and bodies.

    Values without a key (a bare top-level sequence or scalar)
    contribute nothing.
    """
    if isinstance(value, typing.Mapping):
        pairs: ParamPairs = []
        for nested_key, nested_value in sorted(
            value.items(), key=lambda item: str(item[0])
        ):
            nested_key = str(nested_key)
            pairs.extend(
                flatten(
                    nested_value,
                    f"{key}[{nested_key}]" if key is not None else nested_key,
                )
            )
        return pairs

    elif isinstance(value, str):
        if key is None:
            return []
        return [(key, value)]

    elif isinstance(value, typing.Sequence) and not isinstance(
        value, (bytes, bytearray)
    ):
        if key is None:
            return []
        pairs = []
        for item in value:
            pairs.extend(flatten(item, f"{key}[]"))
        return pairs

    text = _describe(value)
    if key is None or text is None:
        return []
    return [(key, text)]


def _describe(value: typing.Any) -> typing.Optional[str]:
    """Textual representation of a scalar or 'None' if it has none."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return None
    if isinstance(value, numbers.Number):
        return str(value)
    # Objects that define their own __str__ (Decimal, UUID, datetime, ...)
    if type(value).__str__ is not object.__str__:
        return str(value)
    return None


def quote(text: str) -> str:
    return b"".join([INT_TO_URLENC[byte] for byte in text.encode("utf-8")]).decode()


def urlencode(pairs: typing.Iterable[typing.Tuple[str, str]]) -> str:
    """Serializes pairs as 'application/x-www-form-urlencoded'"""
    return "&".join(f"{quote(k)}={quote(v)}" for k, v in pairs)
