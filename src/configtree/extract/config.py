"""ExtractConfig: tuning knobs for an Extractor.

ExtractConfig is a frozen (immutable) dataclass validated on construction.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["ExtractConfig"]


@dataclass(frozen=True, slots=True)
class ExtractConfig:
    """Immutable configuration for an ``Extractor``.

    Attributes:
        max_depth: Deepest Value tree a top-level ``extract`` call accepts.
            Deeper input is rejected with a ``ConversionError`` before any
            conversion starts, so adversarial nesting cannot exhaust the call
            stack.  ``None`` disables the check.  Default 128.
        lossy_int_to_float: When False (default), extracting a float from an
            integer that has no exact float64 representation (beyond 2**53)
            is a ``ConversionError``.  When True the integer is rounded.
        cache_size: Number of compiled extraction plans kept per extractor
            (LRU).  Default 512.
    """

    max_depth: int | None = 128
    lossy_int_to_float: bool = False
    cache_size: int = 512

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 1:
            msg = f"max_depth must be >= 1 or None, got {self.max_depth}"
            raise ValueError(msg)
        if self.cache_size < 1:
            msg = f"cache_size must be >= 1, got {self.cache_size}"
            raise ValueError(msg)
