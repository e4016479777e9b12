"""Value and ValueKind: the format-agnostic configuration value tree.

Every format collaborator (JSON, YAML, TOML, environment variables, ...)
normalizes into this representation.  A Value is a closed tagged union over
exactly seven kinds and is immutable once constructed: arrays hold a tuple of
child Values and objects hold a read-only mapping over a private dict, so a
tree can be read from many threads at once.
"""

from __future__ import annotations

import builtins
import copy
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum, auto
from types import MappingProxyType
from typing import Any

__all__ = ["I64_MAX", "I64_MIN", "Value", "ValueKind"]

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


class ValueKind(StrEnum):
    """The seven kinds of node in a Value tree.

    - NULL     -> "null"
    - BOOL     -> "bool"
    - INTEGER  -> "integer" : signed 64-bit
    - FLOAT    -> "float"   : 64-bit IEEE 754
    - STRING   -> "string"
    - ARRAY    -> "array"   : ordered sequence of Values
    - OBJECT   -> "object"  : string keys to Values, order not meaningful
    """

    NULL = auto()
    BOOL = auto()
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    ARRAY = auto()
    OBJECT = auto()


# Human-readable names used in conversion error causes.
_TYPE_NAMES: dict[ValueKind, str] = {
    ValueKind.NULL: "null",
    ValueKind.BOOL: "boolean",
    ValueKind.INTEGER: "integer",
    ValueKind.FLOAT: "float",
    ValueKind.STRING: "string",
    ValueKind.ARRAY: "array",
    ValueKind.OBJECT: "object",
}

# Payload type each kind must carry; checked on every construction.
_PAYLOAD_TYPES: dict[ValueKind, type | tuple[type, ...]] = {
    ValueKind.NULL: type(None),
    ValueKind.BOOL: bool,
    ValueKind.INTEGER: int,
    ValueKind.FLOAT: float,
    ValueKind.STRING: str,
    ValueKind.ARRAY: tuple,
    ValueKind.OBJECT: MappingProxyType,
}


@dataclass(frozen=True, slots=True, repr=False)
class Value:
    """A node in a configuration value tree.

    Build nodes with the named constructors rather than the raw initializer::

        Value.object({
            "host": Value.string("localhost"),
            "ports": Value.array([Value.integer(80), Value.integer(443)]),
        })

    ``Value()`` is Null.

    Attributes:
        kind:    Which of the seven kinds this node is.
        payload: ``None`` for NULL, ``bool``/``int``/``float``/``str`` for the
                 scalar kinds, ``tuple[Value, ...]`` for ARRAY and a read-only
                 ``Mapping[str, Value]`` for OBJECT.
    """

    kind: ValueKind = ValueKind.NULL
    payload: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ValueKind):
            raise TypeError(f"kind must be ValueKind, got {type(self.kind).__name__}")
        expected = _PAYLOAD_TYPES[self.kind]
        # bool subclasses int
        wrong_bool = self.kind is ValueKind.INTEGER and isinstance(self.payload, bool)
        if wrong_bool or not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.kind} payload must not be {type(self.payload).__name__}; "
                "use the named constructors"
            )

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def null(cls) -> Value:
        return cls()

    @classmethod
    def bool(cls, value: builtins.bool) -> Value:
        if not isinstance(value, bool):
            raise TypeError(f"expected bool, got {type(value).__name__}")
        return cls(ValueKind.BOOL, value)

    @classmethod
    def integer(cls, value: int) -> Value:
        """Return an INTEGER node; ``value`` must fit in a signed 64-bit int."""
        # bool subclasses int; a bool here is a caller bug, not an integer
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected int, got {type(value).__name__}")
        if not I64_MIN <= value <= I64_MAX:
            raise ValueError(f"integer {value} out of 64-bit signed range")
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def float(cls, value: builtins.float) -> Value:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected float, got {type(value).__name__}")
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def string(cls, value: str) -> Value:
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}")
        return cls(ValueKind.STRING, str(value))

    @classmethod
    def array(cls, items: Iterable[Value] = ()) -> Value:
        children = tuple(items)
        for child in children:
            if not isinstance(child, Value):
                raise TypeError(
                    f"array items must be Value, got {type(child).__name__}"
                )
        return cls(ValueKind.ARRAY, children)

    @classmethod
    def object(cls, entries: Mapping[str, Value] | None = None) -> Value:
        children: dict[str, Value] = {}
        for key, child in (entries or {}).items():
            if not isinstance(key, str):
                raise TypeError(f"object keys must be str, got {type(key).__name__}")
            if not isinstance(child, Value):
                raise TypeError(
                    f"object values must be Value, got {type(child).__name__}"
                )
            children[key] = child
        return cls(ValueKind.OBJECT, MappingProxyType(children))

    @classmethod
    def from_python(cls, data: Any) -> Value:
        """Convert plain Python data into a Value tree (see ``ValueBuilder``)."""
        from configtree.tree.builder import ValueBuilder

        return ValueBuilder().build(data)

    # ------------------------------------------------------------------
    # Kind predicates
    # ------------------------------------------------------------------

    def is_null(self) -> builtins.bool:
        return self.kind is ValueKind.NULL

    def is_bool(self) -> builtins.bool:
        return self.kind is ValueKind.BOOL

    def is_integer(self) -> builtins.bool:
        return self.kind is ValueKind.INTEGER

    def is_float(self) -> builtins.bool:
        return self.kind is ValueKind.FLOAT

    def is_string(self) -> builtins.bool:
        return self.kind is ValueKind.STRING

    def is_array(self) -> builtins.bool:
        return self.kind is ValueKind.ARRAY

    def is_object(self) -> builtins.bool:
        return self.kind is ValueKind.OBJECT

    @property
    def type_name(self) -> str:
        """Human-readable kind name: "null", "boolean", "integer", ..."""
        return _TYPE_NAMES[self.kind]

    # ------------------------------------------------------------------
    # Narrow accessors: None on kind mismatch, never coerce across kinds
    # ------------------------------------------------------------------

    def as_bool(self) -> builtins.bool | None:
        if self.kind is ValueKind.BOOL:
            return self.payload  # type: ignore[no-any-return]
        return None

    def as_i64(self) -> int | None:
        if self.kind is ValueKind.INTEGER:
            return self.payload  # type: ignore[no-any-return]
        return None

    def as_u64(self) -> int | None:
        if self.kind is ValueKind.INTEGER and self.payload >= 0:
            return self.payload  # type: ignore[no-any-return]
        return None

    def as_f64(self) -> builtins.float | None:
        """Return a FLOAT payload, or an INTEGER payload widened to float."""
        if self.kind is ValueKind.FLOAT:
            return self.payload  # type: ignore[no-any-return]
        if self.kind is ValueKind.INTEGER:
            return float(self.payload)
        return None

    def as_str(self) -> str | None:
        if self.kind is ValueKind.STRING:
            return self.payload  # type: ignore[no-any-return]
        return None

    def as_array(self) -> tuple[Value, ...] | None:
        if self.kind is ValueKind.ARRAY:
            return self.payload  # type: ignore[no-any-return]
        return None

    def as_object(self) -> Mapping[str, Value] | None:
        if self.kind is ValueKind.OBJECT:
            return self.payload  # type: ignore[no-any-return]
        return None

    def get(self, key: str) -> Value | None:
        """Single-segment lookup on an OBJECT node; None for any other kind."""
        if self.kind is not ValueKind.OBJECT:
            return None
        return self.payload.get(key)  # type: ignore[no-any-return]

    # ------------------------------------------------------------------
    # Whole-tree helpers
    # ------------------------------------------------------------------

    def depth(self) -> int:
        """Return the nesting depth of this tree (a scalar has depth 1).

        Walks the tree with an explicit stack so arbitrarily deep input
        cannot exhaust the interpreter's call stack.
        """
        deepest = 0
        stack: list[tuple[Value, int]] = [(self, 1)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            if node.kind is ValueKind.ARRAY:
                stack.extend((child, level + 1) for child in node.payload)
            elif node.kind is ValueKind.OBJECT:
                stack.extend((child, level + 1) for child in node.payload.values())
        return deepest

    def to_python(self) -> Any:
        """Convert back to plain Python data (dict/list/str/int/float/bool/None)."""
        if self.kind is ValueKind.ARRAY:
            return [child.to_python() for child in self.payload]
        if self.kind is ValueKind.OBJECT:
            return {key: child.to_python() for key, child in self.payload.items()}
        return self.payload

    def clone(self) -> Value:
        """Return a full deep copy; no node is shared with the original."""
        return copy.deepcopy(self)

    def __deepcopy__(self, memo: dict[int, Any]) -> Value:
        if self.kind is ValueKind.ARRAY:
            return Value(
                ValueKind.ARRAY,
                tuple(copy.deepcopy(child, memo) for child in self.payload),
            )
        if self.kind is ValueKind.OBJECT:
            return Value(
                ValueKind.OBJECT,
                MappingProxyType(
                    {k: copy.deepcopy(v, memo) for k, v in self.payload.items()}
                ),
            )
        return Value(self.kind, self.payload)

    # ------------------------------------------------------------------
    # Equality and rendering
    # ------------------------------------------------------------------

    def __eq__(self, other: builtins.object) -> builtins.bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self.kind is not other.kind:
            return False
        if self.kind is ValueKind.OBJECT:
            return dict(self.payload) == dict(other.payload)
        return bool(self.payload == other.payload)

    def __hash__(self) -> int:
        if self.kind is ValueKind.OBJECT:
            return hash((self.kind, frozenset(self.payload.items())))
        return hash((self.kind, self.payload))

    def __str__(self) -> str:
        if self.kind is ValueKind.NULL:
            return "null"
        if self.kind is ValueKind.BOOL:
            return "true" if self.payload else "false"
        if self.kind is ValueKind.STRING:
            return f'"{self.payload}"'
        if self.kind is ValueKind.ARRAY:
            return "[" + ", ".join(str(child) for child in self.payload) + "]"
        if self.kind is ValueKind.OBJECT:
            entries = (f'"{key}": {child}' for key, child in self.payload.items())
            return "{" + ", ".join(entries) + "}"
        return repr(self.payload)

    def __repr__(self) -> str:
        return f"Value({self.kind.name}, {self})"
