"""Extractor: type-directed conversion of Value nodes into Python values.

``Extractor.extract(target, value)`` looks up (or builds, once) an extraction
plan for the target type form and applies it.  Supported targets:

- ``bool``, ``str``, ``int``, ``float``, ``pathlib.Path``, ``typing.Any``
- numpy widths: ``np.int8`` ... ``np.uint64``, ``np.float32``, ``np.float64``,
  ``np.bool_``
- ``T | None``, ``list[T]``, ``tuple[T, ...]``, ``tuple[A, B]``, ``set[T]``,
  ``frozenset[T]``, ``dict[K, V]``, ``Mapping[K, V]``, ``Sequence[T]``
- ``Value`` itself (identity, returns a deep copy)
- dataclasses and ``ConfigEnum`` roots, through the schema compiler
- classes implementing the ``FromValue`` protocol, and any type with a
  converter registered via ``Extractor.register``

Plans are cached per extractor in an LRU cache, so each extractor pays the
planning cost of a type once.  Two extractors never share plans.
"""

from __future__ import annotations

import dataclasses
import threading
import types
from collections.abc import Callable, Mapping, Sequence, Set
from pathlib import Path
from typing import Annotated, Any, Union, get_args, get_origin

import numpy as np
import structlog
from cachetools import LRUCache, cachedmethod

from configtree.errors import ConversionError, SchemaError
from configtree.extract.config import ExtractConfig
from configtree.extract.primitives import (
    BoolVisitor,
    FixedTupleVisitor,
    FloatVisitor,
    IntVisitor,
    MappingVisitor,
    PathVisitor,
    SequenceVisitor,
    StrVisitor,
    float_visitor_for,
    int_visitor_for,
)
from configtree.protocols import FromValue
from configtree.schema.compiler import compile_enum, compile_struct
from configtree.schema.declare import ConfigEnum
from configtree.schema.model import optional_inner, read_enum_schema, read_struct_schema
from configtree.tree.value import Value
from configtree.visitor import ValueVisitor, dispatch

__all__ = ["Extractor", "Plan", "default_extractor"]

logger = structlog.get_logger(__name__)

# A compiled extraction routine for one target type form
Plan = Callable[[Value], Any]

_SEQUENCE_BUILDERS: dict[Any, Callable[[list[Any]], Any]] = {
    list: list,
    Sequence: list,
    set: set,
    Set: frozenset,
    frozenset: frozenset,
}


class Extractor:
    """Converts Value nodes into typed Python values.

    Example::

        extractor = Extractor()
        extractor.extract(list[np.uint16], Value.from_python([80, 443]))
        # [80, 443]

    Args:
        config: Tuning knobs; defaults to ``ExtractConfig()``.
    """

    def __init__(self, config: ExtractConfig | None = None) -> None:
        self._config: ExtractConfig = config if config is not None else ExtractConfig()
        self._plans: LRUCache[Any, Plan] = LRUCache(maxsize=self._config.cache_size)
        self._lock = threading.RLock()
        self._converters: dict[Any, Callable[[Value], Any]] = {}

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> ExtractConfig:
        return self._config

    @property
    def cached_plans(self) -> int:
        """Number of plans currently held in the cache."""
        return int(self._plans.currsize)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, target: Any, value: Value) -> Any:
        """Convert ``value`` into an instance of ``target``.

        Checks the nesting depth of ``value`` against ``config.max_depth``
        before converting.

        Raises:
            ConversionError:  A value has the wrong kind, shape or range.
            KeyNotFoundError: A mandatory struct key is absent.
            SchemaError:      ``target`` is not a supported type form.
        """
        max_depth = self._config.max_depth
        if max_depth is not None:
            depth = value.depth()
            if depth > max_depth:
                logger.debug(
                    "max_depth_exceeded",
                    target=self.type_name(target),
                    depth=depth,
                    max_depth=max_depth,
                )
                raise ConversionError(
                    self.type_name(target),
                    f"value nested {depth} levels deep exceeds max_depth={max_depth}",
                )
        return self.extract_nested(target, value)

    def extract_nested(self, target: Any, value: Value) -> Any:
        """Convert without the depth check; used by plans for nested values."""
        return self.plan_for(target)(value)

    def dispatch(self, value: Value, visitor: ValueVisitor[Any]) -> Any:
        """Drive ``visitor`` over ``value`` with this extractor behind its views."""
        return dispatch(value, visitor, self)

    def register(self, target: Any, converter: Callable[[Value], Any]) -> None:
        """Use ``converter`` for ``target`` in place of any built-in rule."""
        with self._lock:
            self._converters[target] = converter
            self._plans.clear()
        logger.debug("converter_registered", target=self.type_name(target))

    @cachedmethod(lambda self: self._plans, lock=lambda self: self._lock)
    def plan_for(self, target: Any) -> Plan:
        """Return the cached extraction plan for ``target``, building it once."""
        return self._build_plan(target)

    @staticmethod
    def type_name(target: Any) -> str:
        """Readable name of a target type form, used in error messages."""
        if isinstance(target, type) and get_origin(target) is None:
            return target.__name__
        return str(target).replace("typing.", "").replace("collections.abc.", "")

    # ------------------------------------------------------------------
    # Plan construction
    # ------------------------------------------------------------------

    def _visit_with(self, visitor: ValueVisitor[Any]) -> Plan:
        return lambda value: dispatch(value, visitor, self)

    def _build_plan(self, target: Any) -> Plan:
        converter = self._converters.get(target)
        if converter is not None:
            return converter

        if target is Value:
            return Value.clone
        if target is Any:
            return Value.to_python

        inner = optional_inner(target)
        if inner is not None:
            return self._optional_plan(inner)

        origin = get_origin(target)
        if origin is Annotated:
            return self.plan_for(get_args(target)[0])
        if origin is not None:
            return self._generic_plan(target, origin, get_args(target))

        scalar = self._scalar_visitor(target)
        if scalar is not None:
            return self._visit_with(scalar)

        if target in _SEQUENCE_BUILDERS or target is tuple:
            return self._generic_plan(target, target, ())
        if target in (dict, Mapping):
            return self._generic_plan(target, target, ())

        if isinstance(target, type):
            if isinstance(target, FromValue):
                return target.from_value
            if issubclass(target, ConfigEnum) and target.is_enum_root():
                return compile_enum(read_enum_schema(target), self)
            if dataclasses.is_dataclass(target):
                return compile_struct(read_struct_schema(target), self)

        raise SchemaError(f"no extraction rule for {self.type_name(target)}")

    def _scalar_visitor(self, target: Any) -> ValueVisitor[Any] | None:
        # bool before int: bool subclasses int
        if target is bool:
            return BoolVisitor()
        if target is str:
            return StrVisitor()
        if target is int:
            return IntVisitor("int")
        if target is float:
            return FloatVisitor("float", lossy=self._config.lossy_int_to_float)
        if target is Path:
            return PathVisitor()
        if isinstance(target, type):
            if issubclass(target, np.bool_):
                return BoolVisitor(target.__name__, cast=target)
            if issubclass(target, np.integer):
                return int_visitor_for(target)
            if issubclass(target, np.floating):
                return float_visitor_for(target, lossy=self._config.lossy_int_to_float)
        return None

    def _optional_plan(self, inner: Any) -> Plan:
        def plan(value: Value) -> Any:
            if value.is_null():
                return None
            return self.extract_nested(inner, value)

        return plan

    def _generic_plan(self, target: Any, origin: Any, args: tuple[Any, ...]) -> Plan:
        name = self.type_name(target)

        if origin is tuple:
            if not args:
                return self._visit_with(SequenceVisitor(name, Any, tuple))
            if len(args) == 2 and args[1] is Ellipsis:
                return self._visit_with(SequenceVisitor(name, args[0], tuple))
            return self._visit_with(FixedTupleVisitor(name, args))

        build = _SEQUENCE_BUILDERS.get(origin)
        if build is not None:
            element = args[0] if args else Any
            return self._visit_with(SequenceVisitor(name, element, build))

        if origin in (dict, Mapping):
            key, item = args if args else (str, Any)
            return self._visit_with(MappingVisitor(name, key, item, self))

        if origin is Union or origin is types.UnionType:
            raise SchemaError(
                f"cannot extract {name}: only 'T | None' unions are supported, "
                "declare a ConfigEnum for alternatives"
            )

        raise SchemaError(f"no extraction rule for {name}")


_default = Extractor()


def default_extractor() -> Extractor:
    """The process-wide extractor used by the module-level API."""
    return _default
