"""FromValue Protocol: the extension point for user-defined conversions.

Any class with a ``from_value`` classmethod taking a ``Value`` satisfies the
protocol; the extractor calls it in place of the built-in rules.  No
inheritance is required.

Example::

    from configtree import ConversionError, Value
    from configtree.protocols import FromValue

    class Color:
        def __init__(self, rgb: int) -> None:
            self.rgb = rgb

        @classmethod
        def from_value(cls, value: Value) -> Color:
            text = value.as_str()
            if text is None or not text.startswith("#"):
                raise ConversionError("Color", f"expected '#rrggbb', found {value}")
            return cls(int(text[1:], 16))

    assert isinstance(Color, FromValue)  # True: structural conformance
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from configtree.tree.value import Value

__all__ = ["FromValue"]


@runtime_checkable
class FromValue(Protocol):
    """Structural protocol for types that convert themselves from a Value.

    ``from_value`` must:
    - Return an instance of the implementing class.
    - Raise ``ConversionError`` (or ``KeyNotFoundError``) for input it does
      not accept, so enclosing layers can prefix the error's path.
    """

    @classmethod
    def from_value(cls, value: Value) -> Any: ...
