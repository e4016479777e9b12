"""Schema compiler: turns a StructSchema/EnumSchema into an extraction plan.

A plan is a callable ``plan(value) -> instance``.  Plans are built once per
declared type and extractor; everything that can be decided without input
data (field policies, parsed default literals, zero values, variant lookup
tables) is decided here so that a call only walks the input.

Nested field types are resolved through the owning ``Extractor`` at call
time, which keeps self-referential schemas (a ``Node`` holding
``list[Node]``) from recursing during compilation.
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, get_args, get_origin

import numpy as np
import structlog

from configtree.errors import ConversionError, KeyNotFoundError, SchemaError, path_segment
from configtree.schema.model import (
    EnumSchema,
    FieldPolicy,
    FieldSpec,
    StructSchema,
    VariantSpec,
    VariantStyle,
    is_optional,
)
from configtree.tree.value import Value

if TYPE_CHECKING:
    from configtree.extract.extractor import Extractor

__all__ = [
    "StructPlan",
    "TaggedEnumPlan",
    "UntaggedEnumPlan",
    "compile_enum",
    "compile_struct",
    "parse_default_literal",
    "zero_value",
]

logger = structlog.get_logger(__name__)

_ZERO_FACTORIES: dict[Any, Callable[[], Any]] = {
    bool: bool,
    int: int,
    float: float,
    str: str,
    list: list,
    set: set,
    frozenset: frozenset,
    dict: dict,
    Sequence: list,
    Mapping: dict,
    Path: Path,
}


def zero_value(tp: Any) -> Any:
    """Return the zero value of ``tp``, the analogue of a type's default.

    Raises:
        SchemaError: If ``tp`` has no zero value (e.g. a dataclass with
            mandatory fields).
    """
    if tp is Any or tp is type(None) or is_optional(tp):
        return None
    if tp is Value:
        return Value.null()

    origin = get_origin(tp) or tp
    if origin is tuple:
        args = get_args(tp)
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            return ()
        return tuple(zero_value(arg) for arg in args)
    factory = _ZERO_FACTORIES.get(origin)
    if factory is not None:
        return factory()
    if isinstance(tp, type) and issubclass(tp, (np.number, np.bool_)):
        return tp(0)
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        try:
            return tp()
        except TypeError as exc:
            raise SchemaError(f"{tp.__name__} has no zero value: {exc}") from exc
    raise SchemaError(f"{tp!r} has no zero value; declare an explicit default")


def _sniff_literal(literal: str) -> Value | None:
    """Read ``literal`` as an integer, float or boolean literal, if it is one."""
    if literal in ("true", "false"):
        return Value.bool(literal == "true")
    try:
        return Value.integer(int(literal))
    except ValueError:
        pass
    try:
        return Value.float(float(literal))
    except ValueError:
        return None


def parse_default_literal(literal: str, tp: Any, extractor: Extractor) -> Any:
    """Parse a ``default_literal`` according to the field type ``tp``.

    Integer, float and boolean literals are tried as such first; otherwise
    (or when the field type rejects them) the literal is extracted as a
    string, so ``str``, ``Path`` and string-accepting user types work.

    Raises:
        SchemaError: If neither reading converts to ``tp``.
    """
    candidates = [Value.string(literal)]
    sniffed = _sniff_literal(literal)
    if sniffed is not None:
        candidates.insert(0, sniffed)

    failures: list[str] = []
    for candidate in candidates:
        try:
            return extractor.extract_nested(tp, candidate)
        except (ConversionError, KeyNotFoundError) as exc:
            failures.append(str(exc))
    raise SchemaError(
        f"default literal {literal!r} does not parse as "
        f"{extractor.type_name(tp)}: {'; '.join(failures)}"
    )


class StructPlan:
    """Extraction plan for a dataclass."""

    def __init__(self, schema: StructSchema, extractor: Extractor) -> None:
        self._schema = schema
        self._extractor = extractor
        self._defaults: dict[str, Callable[[], Any]] = {}
        for spec in schema.fields:
            if spec.policy in (FieldPolicy.SKIP, FieldPolicy.DEFAULT):
                self._defaults[spec.name] = spec.default or _copying(zero_value(spec.type))
            elif spec.policy is FieldPolicy.DEFAULT_LITERAL:
                if spec.default_literal is None:
                    msg = f"{schema.name}.{spec.name}: default_literal policy without a literal"
                    raise SchemaError(msg)
                parsed = parse_default_literal(spec.default_literal, spec.type, extractor)
                self._defaults[spec.name] = _copying(parsed)

    @property
    def schema(self) -> StructSchema:
        return self._schema

    def __call__(self, value: Value) -> Any:
        entries = value.as_object()
        if entries is None:
            raise ConversionError(
                self._schema.name, f"expected object, found {value.type_name}"
            )
        kwargs = {
            spec.name: self._extract_field(spec, value, entries)
            for spec in self._schema.fields
        }
        return self._schema.type(**kwargs)

    def _extract_field(
        self, spec: FieldSpec, value: Value, entries: Mapping[str, Value]
    ) -> Any:
        policy = spec.policy
        if policy is FieldPolicy.SKIP:
            return self._defaults[spec.name]()
        if policy is FieldPolicy.FLATTEN:
            # inner errors already name keys of this same object
            return self._extractor.extract_nested(spec.type, value)

        raw = entries.get(spec.key)
        if raw is None:
            if policy is FieldPolicy.OPTIONAL:
                return None
            if policy in (FieldPolicy.DEFAULT_LITERAL, FieldPolicy.DEFAULT):
                return self._defaults[spec.name]()
            raise KeyNotFoundError(spec.key)

        with path_segment(spec.key):
            return self._extractor.extract_nested(spec.type, raw)


def _copying(value: Any) -> Callable[[], Any]:
    """Factory handing out independent copies of a precomputed default."""
    return lambda: copy.deepcopy(value)


class _EnumPlan:
    def __init__(self, schema: EnumSchema, extractor: Extractor) -> None:
        self._schema = schema
        self._extractor = extractor
        self._wrapped: dict[str, FieldSpec] = {}
        for variant in schema.variants:
            if variant.style is not VariantStyle.NEWTYPE:
                continue
            if variant.field is None:
                msg = f"{schema.name}.{variant.name}: newtype variant without a wrapped field"
                raise SchemaError(msg)
            self._wrapped[variant.name] = variant.field

    @property
    def schema(self) -> EnumSchema:
        return self._schema

    def _object_entries(self, value: Value) -> Mapping[str, Value]:
        entries = value.as_object()
        if entries is None:
            raise ConversionError(
                self._schema.name, f"expected object, found {value.type_name}"
            )
        return entries

    def _newtype(self, variant: VariantSpec, value: Value) -> Any:
        field = self._wrapped[variant.name]
        inner = self._extractor.extract_nested(field.type, value)
        return variant.type(**{field.name: inner})


class TaggedEnumPlan(_EnumPlan):
    """Internally tagged enum: the tag field selects the variant."""

    def __init__(self, schema: EnumSchema, extractor: Extractor) -> None:
        super().__init__(schema, extractor)
        self._tag: str = schema.tag or ""
        self._by_key = {variant.key: variant for variant in schema.variants}

    def __call__(self, value: Value) -> Any:
        entries = self._object_entries(value)
        raw_tag = entries.get(self._tag)
        tag = raw_tag.as_str() if raw_tag is not None else None
        if tag is None:
            raise ConversionError(
                self._schema.name, "missing or invalid tag field", key=self._tag
            )

        variant = self._by_key.get(tag)
        if variant is None:
            raise ConversionError(
                self._schema.name, f"unknown variant: {tag}", key=self._tag
            )

        # the variant body never reads the tag field itself
        if variant.style is VariantStyle.RECORD:
            return self._extractor.extract_nested(variant.type, value)
        if variant.style is VariantStyle.NEWTYPE:
            return self._newtype(variant, value)
        return variant.type()


class UntaggedEnumPlan(_EnumPlan):
    """Untagged enum: variants are probed by key in declaration order."""

    def __call__(self, value: Value) -> Any:
        entries = self._object_entries(value)
        failures: list[str] = []

        for variant in self._schema.variants:
            raw = entries.get(variant.key)
            if raw is None:
                failures.append(f"{variant.name}: key '{variant.key}' not present")
                continue
            if variant.style is VariantStyle.UNIT:
                return variant.type()
            if variant.style is VariantStyle.RECORD and not raw.is_object():
                failures.append(
                    f"{variant.name}: expected object at '{variant.key}', "
                    f"found {raw.type_name}"
                )
                continue
            try:
                if variant.style is VariantStyle.RECORD:
                    return self._extractor.extract_nested(variant.type, raw)
                return self._newtype(variant, raw)
            except (ConversionError, KeyNotFoundError) as exc:
                failures.append(f"{variant.name}: {exc}")

        logger.debug(
            "untagged_enum_no_match",
            type=self._schema.name,
            attempts=len(self._schema.variants),
        )
        raise ConversionError(
            self._schema.name, f"no matching variant found ({'; '.join(failures)})"
        )


def compile_struct(schema: StructSchema, extractor: Extractor) -> StructPlan:
    plan = StructPlan(schema, extractor)
    logger.debug(
        "struct_plan_compiled",
        type=schema.name,
        policies={spec.name: str(spec.policy) for spec in schema.fields},
    )
    return plan


def compile_enum(schema: EnumSchema, extractor: Extractor) -> TaggedEnumPlan | UntaggedEnumPlan:
    plan: TaggedEnumPlan | UntaggedEnumPlan
    if schema.tag is not None:
        plan = TaggedEnumPlan(schema, extractor)
    else:
        plan = UntaggedEnumPlan(schema, extractor)
    logger.debug(
        "enum_plan_compiled",
        type=schema.name,
        tag=schema.tag,
        variants=[variant.key for variant in schema.variants],
    )
    return plan
