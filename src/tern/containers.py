"""Data containers turn the raw bytes of a response into a result.

Every result type is paired with exactly one container class:

- 'str' -> TextContainer
- 'bool' -> BoolContainer
- 'Model' subclasses -> whatever their 'container' attribute says
- anything else -> StructuredContainer, decoded from JSON with pydantic

A container can also split itself into multiple containers when
the data represents a sequence of results, see 'decode_all()'.
"""
import logging
import typing

from .exceptions import (
    ContainerDoesNotSupportArrays,
    StringParseError,
    TernError,
    UnableToParseModel,
)
from .structured import ArrayCursor, Document
from .utils import detect_encoding

T = typing.TypeVar("T")

logger = logging.getLogger(__name__)


class DataContainer:
    @classmethod
    def from_data(
        cls, data: bytes, path: typing.Optional[str] = None
    ) -> "DataContainer":
        raise NotImplementedError()

    @classmethod
    def empty(cls) -> "DataContainer":
        raise NotImplementedError()

    def iterate(self) -> typing.Optional[typing.Iterator["DataContainer"]]:
        """Returns an iterator of containers, one per element, if the
        data is a sequence. Returns 'None' if the container can't
        represent multiple values.
        """
        raise NotImplementedError()

    def to_value(self, model: typing.Any) -> typing.Any:
        raise NotImplementedError()


class TextContainer(DataContainer):
    """Response body decoded as text. 'path' is ignored."""

    encoding: typing.Optional[str] = "utf-8"

    def __init__(self, text: str):
        self.text = text

    @classmethod
    def from_data(
        cls, data: bytes, path: typing.Optional[str] = None
    ) -> "TextContainer":
        return cls(cls.decode_text(data))

    @classmethod
    def decode_text(cls, data: bytes) -> str:
        encoding = cls.encoding or detect_encoding(data)
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            raise StringParseError(encoding, error=e) from e

    @classmethod
    def empty(cls) -> "TextContainer":
        return cls("")

    def iterate(self) -> typing.Iterator["TextContainer"]:
        return (type(self)(line) for line in self.text.splitlines())

    def to_value(self, model: typing.Any) -> str:
        return self.text


class DetectedTextContainer(TextContainer):
    """Like TextContainer but the encoding is guessed with chardet"""

    encoding = None


class BoolContainer(DataContainer):
    """'true' or '1', case-insensitive and ignoring surrounding
    whitespace, is True. Anything else is False, this never fails.
    """

    encoding = "utf-8"

    def __init__(self, value: bool):
        self.value = value

    @classmethod
    def from_data(
        cls, data: bytes, path: typing.Optional[str] = None
    ) -> "BoolContainer":
        text = data.decode(cls.encoding, errors="replace")
        return cls(text.strip().lower() in ("true", "1"))

    @classmethod
    def empty(cls) -> "BoolContainer":
        return cls(False)

    def iterate(self) -> None:
        return None

    def to_value(self, model: typing.Any) -> bool:
        return self.value


class StructuredContainer(DataContainer):
    """JSON response body located at 'path' and decoded into
    the result type with a pydantic TypeAdapter.
    """

    def __init__(self, document: Document):
        self.document = document

    @classmethod
    def from_data(
        cls, data: bytes, path: typing.Optional[str] = None
    ) -> "StructuredContainer":
        return cls(Document.parse(data).locate(path))

    @classmethod
    def empty(cls) -> "StructuredContainer":
        return cls(Document.empty())

    def iterate(self) -> typing.Optional["StructuredElements"]:
        cursor = self.document.elements()
        if cursor is None:
            return None
        return StructuredElements(cursor)

    def to_value(self, model: typing.Type[T]) -> T:
        return self.document.decode(model)


class StructuredElements:
    """Iterator of StructuredContainer over the elements of a list
    node. 'count' is the length of the list, however far the
    iteration has gone.
    """

    def __init__(self, cursor: ArrayCursor):
        self._cursor = cursor

    @property
    def count(self) -> int:
        return self._cursor.count

    def __iter__(self) -> "StructuredElements":
        return self

    def __next__(self) -> StructuredContainer:
        return StructuredContainer(next(self._cursor))


class Model:
    """Base class for result types that construct themselves from a
    container. Sub-classes pick the container by setting 'container'.

        class Greeting(Model):
            container = TextContainer

            def __init__(self, text):
                self.text = text

            @classmethod
            def from_container(cls, container):
                return cls(container.text)
    """

    container: typing.ClassVar[typing.Type[DataContainer]] = StructuredContainer

    @classmethod
    def from_container(cls: typing.Type[T], container: typing.Any) -> T:
        raise NotImplementedError()


_CONTAINERS: typing.Dict[typing.Any, typing.Type[DataContainer]] = {
    str: TextContainer,
    bool: BoolContainer,
}


def register_container(
    model: typing.Any, container: typing.Type[DataContainer]
) -> None:
    """Pairs a result type with the container used to decode it"""
    _CONTAINERS[model] = container


def container_for(model: typing.Any) -> typing.Type[DataContainer]:
    if isinstance(model, type) and issubclass(model, Model):
        return model.container
    try:
        return _CONTAINERS.get(model, StructuredContainer)
    except TypeError:  # Unhashable type hints
        return StructuredContainer


def _value(model: typing.Any, container: DataContainer) -> typing.Any:
    if not (isinstance(model, type) and issubclass(model, Model)):
        return container.to_value(model)
    try:
        return model.from_container(container)
    except TernError:
        raise
    except Exception as e:
        raise UnableToParseModel(
            f"can't construct {model.__name__} from {type(container).__name__}",
            error=e,
        ) from e


def decode(
    model: typing.Type[T], data: bytes, path: typing.Optional[str] = None
) -> T:
    """Decodes 'data' into a single result of type 'model'"""
    container_class = container_for(model)
    logger.debug(
        "decoding %r with %s at path %r", model, container_class.__name__, path
    )
    return typing.cast(T, _value(model, container_class.from_data(data, path)))


def decode_all(
    model: typing.Type[T], data: bytes, path: typing.Optional[str] = None
) -> typing.List[T]:
    """Decodes 'data' into one result of type 'model' per element"""
    container_class = container_for(model)
    logger.debug(
        "decoding list of %r with %s at path %r",
        model,
        container_class.__name__,
        path,
    )
    elements = container_class.from_data(data, path).iterate()
    if elements is None:
        raise ContainerDoesNotSupportArrays(container_class.__name__)
    return [typing.cast(T, _value(model, element)) for element in elements]
