"""Path addressing for structured (JSON) response bodies.

A path is a sequence of keys separated by '.', list elements are
addressed either as '[n]' or as a numeric segment:

    "data.items[0].name" == "data.items.0.name"

A missing path means the whole document.
"""
import functools
import json
import re
import typing

import pydantic

from .exceptions import ParseError, PathNotFound, UnableToParseModel

T = typing.TypeVar("T")
PathKey = typing.Union[str, int]

_SEGMENT_RE = re.compile(r"^([^\[\]]*)((?:\[\d+\])*)$")


def parse_path(path: str) -> typing.List[PathKey]:
    """Splits a path into its keys. Indexes from '[n]' become ints."""
    keys: typing.List[PathKey] = []
    for segment in path.split("."):
        match = _SEGMENT_RE.match(segment)
        if match is None:
            raise PathNotFound(path)
        name, indexes = match.groups()
        if not name and not indexes:
            raise PathNotFound(path)
        if name:
            keys.append(name)
        keys.extend(int(x) for x in re.findall(r"\d+", indexes))
    return keys


class _Empty:
    def __repr__(self) -> str:
        return "<empty document>"


_EMPTY = _Empty()


@functools.lru_cache(128)
def _cached_type_adapter(model: typing.Any) -> pydantic.TypeAdapter:
    return pydantic.TypeAdapter(model)


def _type_adapter(model: typing.Any) -> pydantic.TypeAdapter:
    try:
        hash(model)
    except TypeError:  # Type hints with unhashable metadata
        return pydantic.TypeAdapter(model)
    return _cached_type_adapter(model)


class Document:
    """A node within a parsed JSON document along with the
    path that was used to reach it.
    """

    def __init__(self, node: typing.Any, path: typing.Optional[str] = None):
        self.node = node
        self.path = path

    @classmethod
    def parse(cls, data: bytes) -> "Document":
        try:
            return cls(json.loads(data))
        except (ValueError, UnicodeDecodeError) as e:
            raise ParseError(f"can't parse JSON document: {e}", error=e) from e

    @classmethod
    def empty(cls) -> "Document":
        """Placeholder document that fails when it's decoded"""
        return cls(_EMPTY)

    @property
    def is_empty(self) -> bool:
        return self.node is _EMPTY

    def locate(self, path: typing.Optional[str]) -> "Document":
        """Descends to the node at 'path', relative to this node."""
        if path is None:
            return self
        if self.is_empty:
            raise PathNotFound(path)

        node = self.node
        for key in parse_path(path):
            if isinstance(node, typing.Mapping) and isinstance(key, str):
                if key not in node:
                    raise PathNotFound(path)
                node = node[key]
            elif isinstance(node, list):
                try:
                    index = int(key)
                except ValueError:
                    raise PathNotFound(path) from None
                if not 0 <= index < len(node):
                    raise PathNotFound(path)
                node = node[index]
            else:
                raise PathNotFound(path)

        full_path = path if self.path is None else f"{self.path}.{path}"
        return Document(node, full_path)

    def elements(self) -> typing.Optional["ArrayCursor"]:
        """Cursor over the elements if this node is a list, otherwise 'None'"""
        if isinstance(self.node, list):
            return ArrayCursor(self)
        return None

    def decode(self, model: typing.Type[T]) -> T:
        if self.is_empty:
            raise ParseError("empty document")
        try:
            adapter = _type_adapter(model)
        except pydantic.PydanticUserError as e:
            raise UnableToParseModel(
                f"can't decode into {model!r}: {e}", error=e
            ) from e
        try:
            return typing.cast(T, adapter.validate_python(self.node))
        except pydantic.ValidationError as e:
            where = f" at '{self.path}'" if self.path else ""
            raise UnableToParseModel(
                f"can't decode {getattr(model, '__name__', model)}{where}", error=e
            ) from e

    def __repr__(self) -> str:
        return f"<Document path={self.path!r}>"


class ArrayCursor:
    """Forward-only iterator over the elements of a list node.
    Every step hands out a new Document for the next element.
    Once exhausted it stays exhausted.
    """

    def __init__(self, document: Document):
        self._document = document
        self._items: typing.List[typing.Any] = document.node
        self._position = 0

    @property
    def count(self) -> int:
        return len(self._items)

    def __iter__(self) -> "ArrayCursor":
        return self

    def __next__(self) -> Document:
        if self._position >= len(self._items):
            raise StopIteration
        index = self._position
        self._position += 1
        path = f"[{index}]" if self._document.path is None else (
            f"{self._document.path}[{index}]"
        )
        return Document(self._items[index], path)


def locate(document: Document, path: typing.Optional[str]) -> Document:
    return document.locate(path)
