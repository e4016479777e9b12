"""Public API functions for configtree.

This module provides the user-facing functions: extract, dispatch and
register_converter.  Each delegates to an ``Extractor``: the one passed in,
or the process-wide default so that compiled plans are shared between calls.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from configtree.extract.extractor import Extractor, default_extractor
from configtree.tree.value import Value
from configtree.visitor import ValueVisitor

__all__ = ["dispatch", "extract", "register_converter"]

T = TypeVar("T")
F = TypeVar("F", bound=Callable[[Value], Any])


def extract(target: Any, value: Value, *, extractor: Extractor | None = None) -> Any:
    """Convert a Value tree into an instance of ``target``.

    Args:
        target:    Any supported type form: ``int``, ``np.uint16``,
                   ``list[str]``, ``dict[str, float]``, ``T | None``, a
                   dataclass, a ``ConfigEnum`` root, ...
        value:     The node to convert.
        extractor: Extractor to use.  Defaults to the process-wide one.

    Returns:
        The converted value.

    Raises:
        ConversionError:  A value has the wrong kind, shape or range; its
            ``key`` names the path from ``value`` to the offending node.
        KeyNotFoundError: A mandatory key is absent.
        SchemaError:      ``target`` cannot be extracted at all.
    """
    return (extractor or default_extractor()).extract(target, value)


def dispatch(
    value: Value, visitor: ValueVisitor[T], *, extractor: Extractor | None = None
) -> T:
    """Drive ``visitor`` with the method matching ``value``'s kind.

    Args:
        value:     The node to decode.
        visitor:   Any ``ValueVisitor``.
        extractor: Extractor used for nested elements.  Defaults to the
                   process-wide one.

    Returns:
        The visitor's output.
    """
    return (extractor or default_extractor()).dispatch(value, visitor)


def register_converter(
    target: Any, *, extractor: Extractor | None = None
) -> Callable[[F], F]:
    """Decorator registering a converter function for ``target``.

    Usage::

        @register_converter(Decimal)
        def _decimal(value: Value) -> Decimal:
            text = value.as_str()
            if text is None:
                raise ConversionError("Decimal", f"expected string, found {value.type_name}")
            return Decimal(text)

    Args:
        target:    The type form the converter produces.
        extractor: Extractor to register with.  Defaults to the process-wide one.

    Returns:
        A decorator that registers the function and returns it unchanged.
    """

    def decorator(func: F) -> F:
        (extractor or default_extractor()).register(target, func)
        return func

    return decorator
