"""Built-in extraction rules, expressed as ValueVisitors.

Each visitor accepts exactly the kinds its target type allows and leaves
every other kind to the ``ValueVisitor`` defaults, which raise a
``ConversionError`` naming the target type ("unexpected string", ...).

- bool / str: exact kind match, no cross-kind coercion.
- int and numpy integer widths: INTEGER only, range-checked.
- float and numpy float widths: INTEGER (widened) or FLOAT.
- Path: STRING only.
- Sequences, fixed tuples and mappings: element-wise, with every element's
  ``ConversionError`` prefixed by its index or key.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np

from configtree.errors import ConversionError, path_segment
from configtree.tree.value import I64_MAX, I64_MIN, Value
from configtree.visitor import MapAccess, SeqAccess, ValueVisitor

if TYPE_CHECKING:
    from configtree.extract.extractor import Extractor

__all__ = [
    "BoolVisitor",
    "FixedTupleVisitor",
    "FloatVisitor",
    "IntVisitor",
    "MappingVisitor",
    "PathVisitor",
    "SequenceVisitor",
    "StrVisitor",
    "float_visitor_for",
    "int_visitor_for",
]


class BoolVisitor(ValueVisitor[Any]):
    def __init__(self, name: str = "bool", cast: Callable[[bool], Any] = bool) -> None:
        self._name = name
        self._cast = cast

    def expecting(self) -> str:
        return self._name

    def visit_bool(self, v: bool) -> Any:
        return self._cast(v)


class StrVisitor(ValueVisitor[str]):
    def expecting(self) -> str:
        return "str"

    def visit_str(self, v: str) -> str:
        return v


class PathVisitor(ValueVisitor[Path]):
    def expecting(self) -> str:
        return "Path"

    def visit_str(self, v: str) -> Path:
        return Path(v)


class IntVisitor(ValueVisitor[Any]):
    """Accepts INTEGER values within ``[low, high]``."""

    def __init__(
        self,
        name: str,
        low: int = I64_MIN,
        high: int = I64_MAX,
        cast: Callable[[int], Any] = int,
    ) -> None:
        self._name = name
        self._low = low
        self._high = high
        self._cast = cast

    def expecting(self) -> str:
        return self._name

    def visit_i64(self, v: int) -> Any:
        if not self._low <= v <= self._high:
            raise ConversionError(
                self._name,
                f"value {v} out of range [{self._low}, {self._high}]",
            )
        return self._cast(v)


class FloatVisitor(ValueVisitor[Any]):
    """Accepts FLOAT values, and INTEGER values widened to float.

    Integers with no exact representation at the target width (beyond 2**53
    for float64, 2**24 for float32) are rejected unless ``lossy`` is set.  ``limit`` bounds
    finite magnitudes for narrower float widths (float32 overflow is an error, not infinity).
    """

    def __init__(
        self,
        name: str,
        cast: Callable[[float], Any] = float,
        lossy: bool = False,
        limit: float | None = None,
    ) -> None:
        self._name = name
        self._cast = cast
        self._lossy = lossy
        self._limit = limit

    def expecting(self) -> str:
        return self._name

    def visit_i64(self, v: int) -> Any:
        result = self.visit_f64(float(v))
        # compare at the target width: float32 rounds above 2**24
        if not self._lossy and int(result) != v:
            raise ConversionError(
                self._name,
                f"integer {v} cannot be represented exactly as {self._name}",
            )
        return result

    def visit_f64(self, v: float) -> Any:
        if self._limit is not None and math.isfinite(v) and abs(v) > self._limit:
            raise ConversionError(self._name, f"value {v} out of range for {self._name}")
        return self._cast(v)


class SequenceVisitor(ValueVisitor[Any]):
    """Accepts ARRAY values, extracting every element as ``element``."""

    def __init__(
        self,
        name: str,
        element: Any,
        build: Callable[[list[Any]], Any] = list,
    ) -> None:
        self._name = name
        self._element = element
        self._build = build

    def expecting(self) -> str:
        return self._name

    def visit_seq(self, seq: SeqAccess) -> Any:
        return self._build([seq.next_element(self._element) for _ in range(len(seq))])


class FixedTupleVisitor(ValueVisitor[tuple[Any, ...]]):
    """Accepts ARRAY values of exactly ``len(elements)`` items."""

    def __init__(self, name: str, elements: tuple[Any, ...]) -> None:
        self._name = name
        self._elements = elements

    def expecting(self) -> str:
        return self._name

    def visit_seq(self, seq: SeqAccess) -> tuple[Any, ...]:
        if len(seq) != len(self._elements):
            raise ConversionError(
                self._name,
                f"expected array of length {len(self._elements)}, found {len(seq)}",
            )
        return tuple(seq.next_element(element) for element in self._elements)


class MappingVisitor(ValueVisitor[dict[Any, Any]]):
    """Accepts OBJECT values; keys are extracted from their string form."""

    def __init__(self, name: str, key: Any, value: Any, extractor: Extractor) -> None:
        self._name = name
        self._key = key
        self._value = value
        self._extractor = extractor

    def expecting(self) -> str:
        return self._name

    def visit_map(self, entries: MapAccess) -> dict[Any, Any]:
        result: dict[Any, Any] = {}
        for raw_key in entries:
            with path_segment(raw_key):
                key = self._extractor.extract_nested(self._key, Value.string(raw_key))
            result[key] = entries.extract(raw_key, self._value)
        return result


def int_visitor_for(target: type[np.integer[Any]]) -> IntVisitor:
    """Range-checked visitor for a numpy integer width such as ``np.uint8``."""
    info = np.iinfo(target)
    return IntVisitor(
        target.__name__,
        low=max(int(info.min), I64_MIN),
        high=min(int(info.max), I64_MAX),
        cast=target,
    )


def float_visitor_for(target: type[np.floating[Any]], lossy: bool) -> FloatVisitor:
    """Visitor for a numpy float width such as ``np.float32``."""
    return FloatVisitor(
        target.__name__,
        cast=target,
        lossy=lossy,
        limit=float(np.finfo(target).max),
    )
