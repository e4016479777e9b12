"""Schema model: the reflected shape of a declared struct or enum.

``read_struct_schema`` and ``read_enum_schema`` walk a dataclass or a
``ConfigEnum`` root once, resolve every field's presence policy according to
the precedence below, and cache the result per type.

Per-field precedence (first match wins):
1. SKIP            never read input; use the field default
2. FLATTEN         extract the field type from the enclosing object
3. REQUIRED        key must be present, even for Optional types
4. DEFAULT_LITERAL absent key -> literal parsed for the field type
5. DEFAULT         absent key -> declared default or the type's zero value
6. OPTIONAL        Optional type, absent key -> None
7. MANDATORY       absent key -> KeyNotFoundError
"""

from __future__ import annotations

import dataclasses
import threading
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Any, Union, get_args, get_origin

import structlog
from cachetools import LRUCache, cached
from cachetools.keys import hashkey

from configtree.errors import SchemaError
from configtree.schema.declare import METADATA_KEY, ConfigEnum, FieldOptions

__all__ = [
    "EnumSchema",
    "FieldPolicy",
    "FieldSpec",
    "StructSchema",
    "VariantSpec",
    "VariantStyle",
    "is_optional",
    "optional_inner",
    "read_enum_schema",
    "read_struct_schema",
]

logger = structlog.get_logger(__name__)


class FieldPolicy(StrEnum):
    """How a struct field is populated, in precedence order."""

    SKIP = auto()
    FLATTEN = auto()
    REQUIRED = auto()
    DEFAULT_LITERAL = auto()
    DEFAULT = auto()
    OPTIONAL = auto()
    MANDATORY = auto()


class VariantStyle(StrEnum):
    """Shape of an enum variant.

    - RECORD:  a dataclass with named fields
    - NEWTYPE: a single-field dataclass wrapping its field's type
    - UNIT:    no fields at all
    """

    RECORD = auto()
    NEWTYPE = auto()
    UNIT = auto()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One struct field as the compiler sees it.

    Attributes:
        name:            Python attribute name (constructor keyword).
        key:             Key read from the object (rename, else ``name``).
        type:            Resolved static type of the field.
        policy:          Resolved presence policy.
        optional:        Whether ``type`` is ``T | None``.
        default_literal: Literal for DEFAULT_LITERAL fields.
        default:         Zero-arg callable producing the declared default, or
                         None when the type's zero value applies.
    """

    name: str
    key: str
    type: Any
    policy: FieldPolicy
    optional: bool
    default_literal: str | None = None
    default: Callable[[], Any] | None = None


@dataclass(frozen=True, slots=True)
class StructSchema:
    type: type
    name: str
    fields: tuple[FieldSpec, ...]


@dataclass(frozen=True, slots=True)
class VariantSpec:
    """One enum variant.

    Attributes:
        type:  The variant class.
        name:  The variant class name.
        key:   Tag value / probe key (rename, else ``name``).
        style: RECORD, NEWTYPE or UNIT.
        field: For NEWTYPE, the wrapped field's spec; None otherwise.
    """

    type: type
    name: str
    key: str
    style: VariantStyle
    field: FieldSpec | None = None


@dataclass(frozen=True, slots=True)
class EnumSchema:
    """An enum root; ``tag`` is None for untagged enums."""

    type: type
    name: str
    tag: str | None
    variants: tuple[VariantSpec, ...]


def is_optional(tp: Any) -> bool:
    """True for ``T | None`` / ``Optional[T]`` forms."""
    return optional_inner(tp) is not None


def optional_inner(tp: Any) -> Any | None:
    """Return ``T`` for ``T | None``; None when ``tp`` is not Optional.

    Unions of several non-None members are returned whole (minus None).
    """
    origin = get_origin(tp)
    if origin is not Union and origin is not types.UnionType:
        return None
    args = get_args(tp)
    if type(None) not in args:
        return None
    rest = tuple(arg for arg in args if arg is not type(None))
    if len(rest) == 1:
        return rest[0]
    return Union[rest]  # noqa: UP007


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as exc:
        raise SchemaError(f"cannot resolve type hints of {cls.__name__}: {exc}") from exc


def _declared_default(field: dataclasses.Field[Any]) -> Callable[[], Any] | None:
    if field.default is not dataclasses.MISSING:
        value = field.default
        return lambda: value
    if field.default_factory is not dataclasses.MISSING:
        return field.default_factory
    return None


def _field_spec(field: dataclasses.Field[Any], hint: Any) -> FieldSpec:
    options: FieldOptions = field.metadata.get(METADATA_KEY) or FieldOptions()
    optional = is_optional(hint)
    default = _declared_default(field)

    if options.skip:
        policy = FieldPolicy.SKIP
    elif options.flatten:
        policy = FieldPolicy.FLATTEN
    elif options.required:
        policy = FieldPolicy.REQUIRED
    elif options.default_literal is not None:
        policy = FieldPolicy.DEFAULT_LITERAL
    elif options.type_default or default is not None:
        policy = FieldPolicy.DEFAULT
    elif optional:
        policy = FieldPolicy.OPTIONAL
    else:
        policy = FieldPolicy.MANDATORY

    return FieldSpec(
        name=field.name,
        key=options.rename or field.name,
        type=hint,
        policy=policy,
        optional=optional,
        default_literal=options.default_literal,
        default=None if options.type_default else default,
    )


@cached(cache=LRUCache(maxsize=1024), lock=threading.RLock())
def read_struct_schema(cls: type) -> StructSchema:
    """Reflect a dataclass into a ``StructSchema`` (cached per class).

    Fields declared with ``init=False`` are left to the dataclass itself.

    Raises:
        SchemaError: If ``cls`` is not a dataclass or its hints don't resolve.
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise SchemaError(f"{cls!r} is not a dataclass")
    hints = _type_hints(cls)
    fields = tuple(
        _field_spec(field, hints.get(field.name, Any))
        for field in dataclasses.fields(cls)
        if field.init
    )
    logger.debug("struct_schema_read", type=cls.__name__, fields=len(fields))
    return StructSchema(type=cls, name=cls.__name__, fields=fields)


def _variant_spec(cls: type[ConfigEnum]) -> VariantSpec:
    key = cls.__config_rename__ or cls.__name__
    fields = read_struct_schema(cls).fields if dataclasses.is_dataclass(cls) else ()

    if cls.__config_newtype__:
        if len(fields) != 1:
            raise SchemaError(
                f"newtype variant {cls.__name__} must have exactly one field, "
                f"found {len(fields)}"
            )
        return VariantSpec(cls, cls.__name__, key, VariantStyle.NEWTYPE, fields[0])
    if not fields:
        return VariantSpec(cls, cls.__name__, key, VariantStyle.UNIT)
    return VariantSpec(cls, cls.__name__, key, VariantStyle.RECORD)


@cached(
    cache=LRUCache(maxsize=1024),
    # variants declared after a first read invalidate the entry
    key=lambda cls: hashkey(cls, getattr(cls, "__config_variants__", ())),
    lock=threading.RLock(),
)
def read_enum_schema(cls: type[ConfigEnum]) -> EnumSchema:
    """Reflect a ``ConfigEnum`` root into an ``EnumSchema`` (cached per class).

    Raises:
        SchemaError: If ``cls`` is not an enum root, has no variants, or two
            variants share a key.
    """
    if not (isinstance(cls, type) and issubclass(cls, ConfigEnum) and cls.is_enum_root()):
        raise SchemaError(f"{cls!r} is not a ConfigEnum root")
    variants = tuple(_variant_spec(variant) for variant in cls.__config_variants__)
    if not variants:
        raise SchemaError(f"enum {cls.__name__} declares no variants")
    keys = [variant.key for variant in variants]
    duplicates = sorted({key for key in keys if keys.count(key) > 1})
    if duplicates:
        raise SchemaError(f"enum {cls.__name__} has duplicate variant keys: {duplicates}")
    logger.debug(
        "enum_schema_read",
        type=cls.__name__,
        tag=cls.__config_tag__,
        variants=len(variants),
    )
    return EnumSchema(
        type=cls, name=cls.__name__, tag=cls.__config_tag__, variants=variants
    )
