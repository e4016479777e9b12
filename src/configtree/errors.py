"""Error types raised while extracting typed values from a Value tree.

Two kinds of failure originate in extraction itself:

- ``KeyNotFoundError``: a required key is absent from an object.
- ``ConversionError``: a value of the wrong kind, shape or range was found.

``ConversionError`` carries a path key that starts empty and is prefixed by
each enclosing layer (sequence index, map key, struct field) as the error
propagates outward, so the top-level caller sees a fully qualified path such
as ``database.servers[2].port``.  Every other exception passes through those
layers untouched.

``SchemaError`` reports a broken declaration (an unsupported target type, an
unparseable default literal) and is raised when a schema is compiled.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = [
    "ConfigError",
    "ConversionError",
    "KeyNotFoundError",
    "SchemaError",
    "join_path",
    "path_segment",
]


def join_path(segment: str, key: str) -> str:
    """Prefix ``segment`` onto an existing dotted/indexed path ``key``.

    Index segments (``"[3]"``) attach without a dot; an empty ``key`` yields
    the segment itself.

    Example::

        join_path("servers", "[2].port")   # "servers[2].port"
        join_path("database", "servers")   # "database.servers"
        join_path("[0]", "")               # "[0]"
    """
    if not key:
        return segment
    if not segment:
        return key
    if key.startswith("["):
        return f"{segment}{key}"
    return f"{segment}.{key}"


class ConfigError(Exception):
    """Base class for every error raised by configtree."""


class KeyNotFoundError(ConfigError, LookupError):
    """A required configuration key is absent.

    Attributes:
        key: The missing key, exactly as it was looked up.
    """

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Configuration key '{self.key}' not found"


class ConversionError(ConfigError, ValueError):
    """A value could not be converted to the requested type.

    Attributes:
        key:       Dotted/indexed path to the offending value.  Empty at the
                   point of failure; enriched by enclosing layers.
        type_name: Name of the target type (or a visitor's ``expecting()``).
        cause:     Description of what went wrong, a string or an exception.
    """

    def __init__(
        self,
        type_name: str,
        cause: str | BaseException,
        key: str = "",
    ) -> None:
        super().__init__(type_name, cause, key)
        self.key = key
        self.type_name = type_name
        self.cause = cause

    def prefix_path(self, segment: str) -> None:
        """Prefix ``segment`` onto this error's path key in place."""
        self.key = join_path(segment, self.key)

    def __str__(self) -> str:
        return (
            f"Failed to convert value at '{self.key}' "
            f"to type {self.type_name}: {self.cause}"
        )


class SchemaError(ConfigError, TypeError):
    """A declared type cannot be turned into an extraction plan."""


@contextmanager
def path_segment(segment: str) -> Iterator[None]:
    """Prefix ``segment`` onto any ``ConversionError`` raised in the block.

    All other exceptions (``KeyNotFoundError``, errors raised by user
    visitors) propagate unchanged.

    Example::

        with path_segment("port"):
            extract(np.uint16, obj.get("port"))
    """
    try:
        yield
    except ConversionError as exc:
        exc.prefix_path(segment)
        raise
