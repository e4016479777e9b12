"""Visitor dispatch: ad hoc decoding of a Value node by kind.

``ValueVisitor`` has one method per Value kind.  Each defaults to raising a
kind-specific ``ConversionError`` ("unexpected string", ...) that names what
the visitor ``expecting()``, so an implementation overrides only the kinds it
accepts.  ``dispatch`` inspects the node's kind and calls the matching method;
it is the only place in configtree that branches on ``ValueKind``.

Arrays and objects are handed to the visitor through pull-based views,
``SeqAccess`` and ``MapAccess``, so elements are extracted one at a time as
the visitor asks for them.

Example::

    class PortVisitor(ValueVisitor[int]):
        def expecting(self) -> str:
            return "a port number (0-65535)"

        def visit_i64(self, v: int) -> int:
            if not 0 <= v <= 65535:
                raise ConversionError("port", f"{v} out of range")
            return v

    dispatch(Value.integer(8080), PortVisitor())   # 8080
    dispatch(Value.string("x"), PortVisitor())     # ConversionError
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from configtree.errors import ConversionError, KeyNotFoundError, path_segment
from configtree.tree.value import Value, ValueKind

if TYPE_CHECKING:
    from configtree.extract.extractor import Extractor

__all__ = ["ExtractVisitor", "MapAccess", "SeqAccess", "ValueVisitor", "dispatch"]

T = TypeVar("T")


def _resolve(extractor: Extractor | None) -> Extractor:
    if extractor is not None:
        return extractor
    from configtree.extract.extractor import default_extractor

    return default_extractor()


class SeqAccess:
    """Sequential access to the elements of an ARRAY node.

    Elements are consumed front to back with ``next_element``; a failing
    element's ``ConversionError`` is prefixed with its index.  An element may
    legitimately extract to None (``T | None``, ``Any`` on Null), so loop on
    ``remaining`` rather than on the returned value::

        while seq.remaining:
            items.append(seq.next_element(int | None))
    """

    def __init__(
        self, items: tuple[Value, ...], extractor: Extractor | None = None
    ) -> None:
        self._items = items
        self._index = 0
        self._extractor = extractor

    def next_element(self, target: Any = Value, default: Any = None) -> Any:
        """Extract the next element as ``target``.

        Like ``next(iterator, default)``, returns ``default`` once the
        sequence is exhausted; pass a sentinel to tell that apart from an
        element that extracted to None.
        """
        if self._index >= len(self._items):
            return default
        index = self._index
        self._index += 1
        with path_segment(f"[{index}]"):
            return _resolve(self._extractor).extract_nested(
                target, self._items[index]
            )

    @property
    def position(self) -> int:
        """Index of the next element to be consumed."""
        return self._index

    @property
    def remaining(self) -> int:
        """Number of elements not yet consumed."""
        return len(self._items) - self._index

    def as_tuple(self) -> tuple[Value, ...]:
        return self._items

    def __iter__(self) -> Iterator[Value]:
        while self._index < len(self._items):
            self._index += 1
            yield self._items[self._index - 1]

    def __len__(self) -> int:
        return len(self._items)


class MapAccess:
    """Keyed access to the entries of an OBJECT node."""

    def __init__(
        self, entries: Mapping[str, Value], extractor: Extractor | None = None
    ) -> None:
        self._entries = entries
        self._extractor = extractor

    def get(self, key: str) -> Value | None:
        return self._entries.get(key)

    def extract(self, key: str, target: Any = Value) -> Any:
        """Extract the entry at ``key`` as ``target``.

        Raises:
            KeyNotFoundError: If ``key`` is absent.
            ConversionError:  If the entry does not convert; path prefixed
                with ``key``.
        """
        value = self._entries.get(key)
        if value is None:
            raise KeyNotFoundError(key)
        with path_segment(key):
            return _resolve(self._extractor).extract_nested(target, value)

    def keys(self) -> Iterator[str]:
        return iter(self._entries)

    def items(self) -> Iterator[tuple[str, Value]]:
        return iter(self._entries.items())

    def as_mapping(self) -> Mapping[str, Value]:
        return self._entries

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class ValueVisitor(Generic[T]):
    """Base class for kind-directed decoders of a single Value node.

    Subclasses override the ``visit_*`` methods for the kinds they accept
    and ``expecting`` to describe the accepted input in error messages.
    """

    def expecting(self) -> str:
        """Describe what this visitor accepts (used in error messages)."""
        return "any value"

    def unexpected(self, what: str) -> ConversionError:
        """Build the error raised for input this visitor does not accept."""
        return ConversionError(self.expecting(), f"unexpected {what}")

    def visit_null(self) -> T:
        raise self.unexpected("null")

    def visit_bool(self, v: bool) -> T:
        raise self.unexpected("boolean")

    def visit_i64(self, v: int) -> T:
        raise self.unexpected("integer")

    def visit_f64(self, v: float) -> T:
        raise self.unexpected("float")

    def visit_str(self, v: str) -> T:
        raise self.unexpected("string")

    def visit_seq(self, seq: SeqAccess) -> T:
        """Visit an array through sequential access; defaults to visit_array."""
        return self.visit_array(seq.as_tuple())

    def visit_array(self, items: tuple[Value, ...]) -> T:
        raise self.unexpected("array")

    def visit_map(self, entries: MapAccess) -> T:
        raise self.unexpected("object")

    def visit_enum(self, variant: str, value: Value) -> T:
        """Visit an enum variant name together with its associated value."""
        raise self.unexpected("enum variant")

    def visit_unknown(self, key: str, value: Value) -> None:
        """Handle an object key the visitor does not recognize; ignored by default."""
        return None

    def finish(self, output: T) -> T:
        """Post-process a successful visit; called by ``dispatch``."""
        return output


def dispatch(
    value: Value, visitor: ValueVisitor[T], extractor: Extractor | None = None
) -> T:
    """Drive ``visitor`` with the method matching ``value``'s kind.

    Args:
        value:     The node to decode.
        visitor:   Any ``ValueVisitor``.
        extractor: Extractor used by the ``SeqAccess``/``MapAccess`` views to
                   convert nested elements.  Defaults to the process-wide one.

    Returns:
        The visitor's output, passed through ``visitor.finish``.
    """
    kind = value.kind
    if kind is ValueKind.NULL:
        output = visitor.visit_null()
    elif kind is ValueKind.BOOL:
        output = visitor.visit_bool(value.payload)
    elif kind is ValueKind.INTEGER:
        output = visitor.visit_i64(value.payload)
    elif kind is ValueKind.FLOAT:
        output = visitor.visit_f64(value.payload)
    elif kind is ValueKind.STRING:
        output = visitor.visit_str(value.payload)
    elif kind is ValueKind.ARRAY:
        output = visitor.visit_seq(SeqAccess(value.payload, extractor))
    else:
        output = visitor.visit_map(MapAccess(value.payload, extractor))
    return visitor.finish(output)


class ExtractVisitor(ValueVisitor[T]):
    """Adapts the extraction protocol for ``target`` to the visitor interface."""

    def __init__(self, target: Any, extractor: Extractor | None = None) -> None:
        self._target = target
        self._extractor = extractor

    def expecting(self) -> str:
        return _resolve(self._extractor).type_name(self._target)

    def _extract(self, value: Value) -> T:
        return _resolve(self._extractor).extract_nested(self._target, value)  # type: ignore[no-any-return]

    def visit_null(self) -> T:
        return self._extract(Value.null())

    def visit_bool(self, v: bool) -> T:
        return self._extract(Value.bool(v))

    def visit_i64(self, v: int) -> T:
        return self._extract(Value.integer(v))

    def visit_f64(self, v: float) -> T:
        return self._extract(Value.float(v))

    def visit_str(self, v: str) -> T:
        return self._extract(Value.string(v))

    def visit_seq(self, seq: SeqAccess) -> T:
        return self._extract(Value.array(seq.as_tuple()))

    def visit_map(self, entries: MapAccess) -> T:
        return self._extract(Value.object(entries.as_mapping()))
