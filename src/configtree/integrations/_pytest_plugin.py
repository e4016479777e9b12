"""pytest plugin for configtree.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.

Source: https://docs.pytest.org/en/stable/how-to/writing_plugins.html
"""

from __future__ import annotations

from typing import Any

import pytest

from configtree import ConversionError, Extractor, Value, extract


@pytest.fixture(scope="session")
def assert_conversion_error() -> Any:
    """Fixture that returns a callable asserting an extraction fails.

    The fixture is session-scoped because the returned callable is stateless
    (it delegates to extract() with the caller's extractor, or the default).

    Usage in tests::

        def test_port_range(assert_conversion_error):
            assert_conversion_error(np.uint16, {"port": 70000}, path="port")

        def test_element(assert_conversion_error):
            err = assert_conversion_error(list[int], ["x"], path="[0]", type_name="int")
            assert "unexpected string" in str(err)

    Returns:
        A callable ``_assert(target, value, path=None, type_name=None,
        extractor=None) -> ConversionError`` that raises ``AssertionError``
        when extraction succeeds, raises something other than
        ``ConversionError``, or fails at a different path or type.
    """

    def _assert(
        target: Any,
        value: Any,
        path: str | None = None,
        type_name: str | None = None,
        extractor: Extractor | None = None,
    ) -> ConversionError:
        """Assert that extracting ``target`` from ``value`` raises ConversionError.

        Args:
            target:    The type form to extract.
            value:     A ``Value`` or plain Python data (converted with
                       ``Value.from_python``).
            path:      Expected error path (``ConversionError.key``), if given.
            type_name: Expected ``ConversionError.type_name``, if given.
            extractor: Optional Extractor; defaults to the process-wide one.

        Returns:
            The raised ``ConversionError`` for further inspection.

        Raises:
            AssertionError: When the extraction does not fail as expected.
        """
        node = value if isinstance(value, Value) else Value.from_python(value)
        try:
            result = extract(target, node, extractor=extractor)
        except ConversionError as exc:
            if path is not None and exc.key != path:
                raise AssertionError(
                    f"ConversionError at unexpected path: "
                    f"expected {path!r}, got {exc.key!r}\n  error: {exc}"
                ) from exc
            if type_name is not None and exc.type_name != type_name:
                raise AssertionError(
                    f"ConversionError names unexpected type: "
                    f"expected {type_name!r}, got {exc.type_name!r}\n  error: {exc}"
                ) from exc
            return exc
        raise AssertionError(
            f"Extraction unexpectedly succeeded:\n"
            f"  target: {target}\n"
            f"  value:  {node}\n"
            f"  result: {result!r}"
        )

    return _assert
