"""Tests for scalar extraction rules.

Covers:
- bool / str / Path: exact kind match, no cross-kind coercion
- int: full 64-bit range
- numpy integer widths: range-checked against np.iinfo
- float and numpy float widths: integer widening, exactness at
  the target width (2**53 for float64, 2**24 for float32), float32 overflow
- Optional, Any and Value targets
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import numpy as np
import pytest

from configtree import ConversionError, ExtractConfig, Extractor, Value, extract
from configtree.tree.value import I64_MAX, I64_MIN

# ---------------------------------------------------------------------------
# bool / str / Path
# ---------------------------------------------------------------------------


class TestExactKinds:
    def test_bool(self) -> None:
        assert extract(bool, Value.bool(True)) is True

    def test_bool_does_not_parse_strings(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(bool, Value.string("true"))
        assert exc_info.value.type_name == "bool"
        assert exc_info.value.cause == "unexpected string"

    def test_bool_rejects_integer(self) -> None:
        with pytest.raises(ConversionError, match="unexpected integer"):
            extract(bool, Value.integer(1))

    def test_str(self) -> None:
        assert extract(str, Value.string("db.local")) == "db.local"

    def test_str_rejects_integer(self) -> None:
        with pytest.raises(ConversionError, match="to type str: unexpected integer"):
            extract(str, Value.integer(5))

    def test_path(self) -> None:
        assert extract(Path, Value.string("/var/lib/app")) == Path("/var/lib/app")

    def test_path_rejects_null(self) -> None:
        with pytest.raises(ConversionError, match="unexpected null"):
            extract(Path, Value.null())


# ---------------------------------------------------------------------------
# Integers
# ---------------------------------------------------------------------------


class TestIntegers:
    def test_int_full_range(self) -> None:
        assert extract(int, Value.integer(I64_MAX)) == I64_MAX
        assert extract(int, Value.integer(I64_MIN)) == I64_MIN

    def test_int_rejects_float(self) -> None:
        with pytest.raises(ConversionError, match="unexpected float"):
            extract(int, Value.float(1.0))

    @pytest.mark.parametrize(
        ("target", "value"),
        [
            (np.uint8, 255),
            (np.uint8, 0),
            (np.int8, -128),
            (np.int16, 32767),
            (np.uint16, 65535),
            (np.int32, -(2**31)),
            (np.uint32, 2**32 - 1),
            (np.int64, I64_MIN),
            (np.uint64, I64_MAX),
        ],
    )
    def test_width_accepts_bounds(self, target: Any, value: int) -> None:
        result = extract(target, Value.integer(value))
        assert isinstance(result, target)
        assert int(result) == value

    @pytest.mark.parametrize(
        ("target", "value", "type_name"),
        [
            (np.uint8, 300, "uint8"),
            (np.uint8, -1, "uint8"),
            (np.int8, 128, "int8"),
            (np.uint16, 70000, "uint16"),
            (np.int32, 2**31, "int32"),
            (np.uint64, -1, "uint64"),
        ],
    )
    def test_width_rejects_out_of_range(
        self, target: Any, value: int, type_name: str
    ) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(target, Value.integer(value))
        assert exc_info.value.type_name == type_name
        assert "out of range" in str(exc_info.value)

    def test_width_rejects_string(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(np.uint16, Value.string("8080"))
        assert exc_info.value.type_name == "uint16"
        assert exc_info.value.cause == "unexpected string"

    def test_range_message_names_bounds(self) -> None:
        with pytest.raises(ConversionError, match=r"value 300 out of range \[0, 255\]"):
            extract(np.uint8, Value.integer(300))


# ---------------------------------------------------------------------------
# Floats
# ---------------------------------------------------------------------------


class TestFloats:
    def test_float_from_float(self) -> None:
        assert extract(float, Value.float(0.25)) == 0.25

    def test_float_widens_integer(self) -> None:
        result = extract(float, Value.integer(3))
        assert result == 3.0
        assert isinstance(result, float)

    def test_exact_large_integer_accepted(self) -> None:
        """2**60 is a power of two and exactly representable."""
        assert extract(float, Value.integer(2**60)) == float(2**60)

    def test_inexact_large_integer_rejected(self) -> None:
        with pytest.raises(ConversionError, match="cannot be represented exactly"):
            extract(float, Value.integer(2**53 + 1))

    def test_inexact_large_integer_allowed_when_lossy(self) -> None:
        extractor = Extractor(ExtractConfig(lossy_int_to_float=True))
        assert extractor.extract(float, Value.integer(2**53 + 1)) == float(2**53)

    def test_float_rejects_string(self) -> None:
        with pytest.raises(ConversionError, match="unexpected string"):
            extract(float, Value.string("1.5"))

    def test_float32(self) -> None:
        result = extract(np.float32, Value.float(1.5))
        assert isinstance(result, np.float32)
        assert result == np.float32(1.5)

    def test_float32_overflow_rejected(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(np.float32, Value.float(1e39))
        assert exc_info.value.type_name == "float32"

    def test_float32_infinity_passes(self) -> None:
        assert np.isinf(extract(np.float32, Value.float(float("inf"))))

    def test_float32_inexact_integer_rejected(self) -> None:
        """2**24 + 1 fits float64 exactly but rounds at float32."""
        with pytest.raises(ConversionError) as exc_info:
            extract(np.float32, Value.integer(2**24 + 1))
        assert exc_info.value.type_name == "float32"
        assert "cannot be represented exactly as float32" in str(exc_info.value)

    def test_float32_exact_integer_accepted(self) -> None:
        assert extract(np.float32, Value.integer(2**24)) == np.float32(2**24)
        assert extract(np.float32, Value.integer(-(2**30))) == np.float32(-(2**30))

    def test_float32_inexact_integer_allowed_when_lossy(self) -> None:
        extractor = Extractor(ExtractConfig(lossy_int_to_float=True))
        result = extractor.extract(np.float32, Value.integer(2**24 + 1))
        assert result == np.float32(2**24)

    def test_float64_from_integer(self) -> None:
        result = extract(np.float64, Value.integer(7))
        assert isinstance(result, np.float64)
        assert result == 7.0


# ---------------------------------------------------------------------------
# Optional, Any, Value
# ---------------------------------------------------------------------------


class TestOptional:
    def test_null_is_none(self) -> None:
        assert extract(int | None, Value.null()) is None

    def test_typing_optional(self) -> None:
        assert extract(Optional[int], Value.null()) is None  # noqa: UP045
        assert extract(Optional[int], Value.integer(4)) == 4  # noqa: UP045

    def test_present_value_extracted(self) -> None:
        assert extract(np.uint8 | None, Value.integer(5)) == 5

    def test_malformed_value_is_an_error(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(str | None, Value.integer(5))
        assert exc_info.value.type_name == "str"


class TestDynamicTargets:
    def test_any_returns_plain_data(self) -> None:
        data = {"a": [1, 2.5, None], "b": "x"}
        assert extract(Any, Value.from_python(data)) == data

    def test_value_is_deep_clone(self) -> None:
        tree = Value.from_python({"a": [1, 2]})
        result = extract(Value, tree)
        assert result == tree
        assert result is not tree
        assert result.get("a") is not tree.get("a")
