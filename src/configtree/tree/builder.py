"""ValueBuilder: converts plain Python data into a Value tree.

Format collaborators that hand back ordinary Python objects (``json.loads``,
``tomllib.loads``, ``yaml.safe_load``) feed their output through this builder
to obtain the normalized Value representation extraction works on.

Uses recursive dispatch over dicts, lists/tuples and scalars.  numpy scalars
and arrays are accepted and unwrapped to their Python equivalents.

JSON Pointer paths (RFC 6901) are tracked during traversal so that an
unsupported element is reported by location:
- Root is "" (empty string)
- Each level appends "/{key_or_index}"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np

from configtree.tree.value import Value

__all__ = ["PythonValue", "ValueBuilder"]

# Type alias for the plain data the builder accepts
PythonValue = (
    Mapping[str, Any] | list[Any] | tuple[Any, ...] | str | int | float | bool | None
)


@dataclass
class ValueBuilder:
    """Converts plain Python data into a Value tree.

    The dispatch order is critical: bool MUST be checked before int because
    bool is a subclass of int in Python (isinstance(True, int) is True).

    Attributes:
        max_depth: Deepest nesting accepted.  Input nested deeper raises
            ``ValueError`` instead of exhausting the interpreter stack.

    Example::

        builder = ValueBuilder()
        tree = builder.build({"server": {"port": 8080}})
        tree.get("server").get("port").as_i64()   # 8080
    """

    max_depth: int = 256

    def build(self, data: Any, path: str = "") -> Value:
        """Convert a Python value to a Value tree.

        Args:
            data: dict, list, tuple, str, int, float, bool, None, a numpy
                  scalar/array, or an existing ``Value`` (deep-copied).
            path: JSON Pointer path to this node. Defaults to "" (root).

        Returns:
            The root ``Value`` of the converted tree.

        Raises:
            TypeError:  If some element is not a supported type.
            ValueError: If an integer does not fit in 64 bits, or the input
                        is nested deeper than ``max_depth``.
        """
        return self._build(data, path, 1)

    def _build(self, data: Any, path: str, level: int) -> Value:
        if level > self.max_depth:
            raise ValueError(
                f"Value nested deeper than max_depth={self.max_depth} at {path!r}"
            )

        if isinstance(data, Value):
            return data.clone()

        # CRITICAL: bool MUST be checked before int (np.bool_ is not an int)
        if isinstance(data, (bool, np.bool_)):
            return Value.bool(bool(data))

        if isinstance(data, Mapping):
            return self._build_object(data, path, level)

        if isinstance(data, (list, tuple)):
            return self._build_array(data, path, level)

        if isinstance(data, np.ndarray):
            return self._build_array(data.tolist(), path, level)

        if isinstance(data, str):
            return Value.string(data)

        if isinstance(data, (int, np.integer)):
            try:
                return Value.integer(int(data))
            except ValueError as exc:
                raise ValueError(f"{exc} at {path!r}") from exc

        if isinstance(data, (float, np.floating)):
            return Value.float(float(data))

        if data is None:
            return Value.null()

        raise TypeError(f"Unsupported value type {type(data)!r} at {path!r}")

    def _build_object(self, obj: Mapping[Any, Any], path: str, level: int) -> Value:
        entries: dict[str, Value] = {}
        for key, val in obj.items():
            if not isinstance(key, str):
                raise TypeError(
                    f"Object keys must be str, got {type(key)!r} at {path!r}"
                )
            entries[key] = self._build(val, f"{path}/{key}", level + 1)
        return Value.object(entries)

    def _build_array(self, arr: list[Any] | tuple[Any, ...], path: str, level: int) -> Value:
        return Value.array(
            self._build(item, f"{path}/{idx}", level + 1)
            for idx, item in enumerate(arr)
        )
