"""Declarative syntax for extraction schemas.

Structs are ordinary ``@dataclass`` classes.  Per-field attributes are
attached with ``setting``, a thin wrapper around ``dataclasses.field``::

    @dataclass
    class DatabaseConfig:
        host: str
        port: np.uint16 = setting(default_literal="5432")
        name: str = setting(rename="database_name")
        pool: Pool | None = setting(skip=True, default=None)
        debug: bool = setting(default=TYPE_DEFAULT)

Enums subclass ``ConfigEnum``; every direct subclass of an enum root is one
of its variants, in declaration order::

    class Backend(ConfigEnum, tag="type"):
        pass

    @dataclass
    class Postgres(Backend, rename="postgresql"):
        host: str
        port: np.uint16

    @dataclass
    class Sqlite(Backend):
        path: str

Omitting ``tag`` declares an untagged enum.  ``newtype=True`` marks a
single-field variant that wraps its field's type directly.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any, ClassVar

__all__ = ["METADATA_KEY", "TYPE_DEFAULT", "ConfigEnum", "FieldOptions", "setting"]

# Key under which field options live in ``dataclasses.Field.metadata``
METADATA_KEY = "configtree"


class _TypeDefault:
    """Sentinel: fall back to the field type's zero value when the key is absent."""

    _instance: ClassVar[_TypeDefault | None] = None

    def __new__(cls) -> _TypeDefault:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "TYPE_DEFAULT"


TYPE_DEFAULT: Any = _TypeDefault()


@dataclasses.dataclass(frozen=True, slots=True)
class FieldOptions:
    """Attributes attached to a dataclass field by ``setting``."""

    rename: str | None = None
    default_literal: str | None = None
    type_default: bool = False
    skip: bool = False
    flatten: bool = False
    required: bool = False


def setting(
    *,
    rename: str | None = None,
    default: Any = dataclasses.MISSING,
    default_factory: Callable[[], Any] | Any = dataclasses.MISSING,
    default_literal: str | None = None,
    skip: bool = False,
    flatten: bool = False,
    required: bool = False,
    **field_kwargs: Any,
) -> Any:
    """Declare a dataclass field with extraction attributes.

    Args:
        rename:          Key to read instead of the field identifier.
        default:         Value used when the key is absent.  ``TYPE_DEFAULT``
                         selects the field type's zero value.
        default_factory: Factory called when the key is absent.
        default_literal: String parsed according to the field type and used
                         when the key is absent, e.g. ``"8080"``.
        skip:            Never read input; always use the default.
        flatten:         Extract the field's type from the enclosing object.
        required:        The key must be present, even for Optional types.
        **field_kwargs:  Passed through to ``dataclasses.field``.

    Returns:
        A ``dataclasses.Field`` carrying the options in its metadata.
    """
    options = FieldOptions(
        rename=rename,
        default_literal=default_literal,
        type_default=default is TYPE_DEFAULT,
        skip=skip,
        flatten=flatten,
        required=required,
    )
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = options
    if default is TYPE_DEFAULT:
        default = dataclasses.MISSING
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata=metadata,
        **field_kwargs,
    )


class ConfigEnum:
    """Base class for extraction enums (tagged or untagged unions).

    A class deriving directly from ``ConfigEnum`` is an enum root; classes
    deriving from a root are its variants, registered in declaration order.

    Class keywords:
        tag:     (root) discriminator field name; omit for an untagged enum.
        rename:  (variant) key matched instead of the class name.
        newtype: (variant) wrap the single field's type directly.
    """

    __config_root__: ClassVar[type[ConfigEnum] | None] = None
    __config_tag__: ClassVar[str | None] = None
    __config_variants__: ClassVar[tuple[type[ConfigEnum], ...]] = ()
    __config_rename__: ClassVar[str | None] = None
    __config_newtype__: ClassVar[bool] = False

    def __init_subclass__(
        cls,
        *,
        tag: str | None = None,
        rename: str | None = None,
        newtype: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if ConfigEnum in cls.__bases__:
            if rename is not None or newtype:
                raise TypeError(
                    f"{cls.__name__}: rename/newtype apply to variants, not enum roots"
                )
            cls.__config_root__ = cls
            cls.__config_tag__ = tag
            cls.__config_variants__ = ()
            return

        root = cls.__config_root__
        if tag is not None:
            raise TypeError(f"{cls.__name__}: tag applies to enum roots, not variants")
        # Only direct children of the root are variants
        if root is not None and root in cls.__bases__:
            # A slots re-creation carries the options in its namespace, not as keywords
            own = cls.__dict__
            cls.__config_rename__ = rename or own.get("__config_rename__")
            cls.__config_newtype__ = newtype or own.get("__config_newtype__", False)
            # @dataclass(slots=True) re-creates the class; keep its original slot
            variants = list(root.__config_variants__)
            for index, existing in enumerate(variants):
                if existing.__qualname__ == cls.__qualname__:
                    variants[index] = cls
                    break
            else:
                variants.append(cls)
            root.__config_variants__ = tuple(variants)

    @classmethod
    def is_enum_root(cls) -> bool:
        return cls.__config_root__ is cls
