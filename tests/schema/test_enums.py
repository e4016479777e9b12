"""Tests for ConfigEnum declarations and tagged / untagged enum extraction.

Covers:
- Variant registration in declaration order, rename and newtype keywords
- Tagged enums: tag lookup, renamed variants, unknown and missing tags,
  record / newtype / unit variants, error paths through the variant body
- Untagged enums: declaration-order probing, fall-through on failure, and
  the per-variant reasons in the no-match error
- Declaration errors surfaced as TypeError / SchemaError
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pytest
from structlog.testing import capture_logs

from configtree import (
    ConfigEnum,
    ConversionError,
    Extractor,
    SchemaError,
    Value,
    extract,
    setting,
)
from configtree.schema import VariantStyle, read_enum_schema

# ---------------------------------------------------------------------------
# Declarations: tagged
# ---------------------------------------------------------------------------


@dataclass
class Endpoint:
    host: str
    port: np.uint16 = setting(default_literal="5432")


class Backend(ConfigEnum, tag="type"):
    pass


@dataclass
class Postgres(Backend, rename="postgresql"):
    host: str
    port: np.uint16 = setting(default_literal="5432")


@dataclass
class Sqlite(Backend):
    path: Path


@dataclass
class Replica(Backend, newtype=True):
    endpoint: Endpoint


class Memory(Backend):
    pass


@dataclass(slots=True)
class Remote(Backend, rename="remote"):
    url: str


@dataclass
class Service:
    name: str
    backend: Backend


# ---------------------------------------------------------------------------
# Declarations: untagged
# ---------------------------------------------------------------------------


class Source(ConfigEnum):
    pass


@dataclass
class File(Source, rename="file"):
    path: str
    encoding: str = "utf-8"


@dataclass
class Inline(Source, rename="inline", newtype=True):
    text: str


class Stdin(Source, rename="stdin"):
    pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def tree(data: object) -> Value:
    return Value.from_python(data)


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class TestDeclaration:
    def test_roots(self) -> None:
        assert Backend.is_enum_root()
        assert Source.is_enum_root()
        assert not Postgres.is_enum_root()

    def test_variants_in_declaration_order(self) -> None:
        names = [variant.__name__ for variant in Backend.__config_variants__]
        assert names == ["Postgres", "Sqlite", "Replica", "Memory", "Remote"]

    def test_slots_recreation_keeps_single_entry(self) -> None:
        """@dataclass(slots=True) builds a new class; it replaces the first."""
        remotes = [v for v in Backend.__config_variants__ if v.__name__ == "Remote"]
        assert remotes == [Remote]
        assert Remote.__config_rename__ == "remote"

    def test_schema(self) -> None:
        schema = read_enum_schema(Backend)
        assert schema.tag == "type"
        styles = {variant.key: variant.style for variant in schema.variants}
        assert styles == {
            "postgresql": VariantStyle.RECORD,
            "Sqlite": VariantStyle.RECORD,
            "Replica": VariantStyle.NEWTYPE,
            "Memory": VariantStyle.UNIT,
            "remote": VariantStyle.RECORD,
        }

    def test_untagged_schema(self) -> None:
        assert read_enum_schema(Source).tag is None

    def test_rename_on_root_rejected(self) -> None:
        with pytest.raises(TypeError, match="apply to variants"):

            class Bad(ConfigEnum, rename="bad"):
                pass

    def test_tag_on_variant_rejected(self) -> None:
        class Root(ConfigEnum, tag="kind"):
            pass

        with pytest.raises(TypeError, match="tag applies to enum roots"):

            class Variant(Root, tag="other"):
                pass

    def test_duplicate_keys(self) -> None:
        class Dup(ConfigEnum, tag="kind"):
            pass

        class First(Dup, rename="same"):
            pass

        class Second(Dup, rename="same"):
            pass

        with pytest.raises(SchemaError, match="duplicate variant keys"):
            Extractor().extract(Dup, tree({"kind": "same"}))

    def test_no_variants(self) -> None:
        class Empty(ConfigEnum, tag="kind"):
            pass

        with pytest.raises(SchemaError, match="declares no variants"):
            Extractor().extract(Empty, tree({"kind": "x"}))

    def test_newtype_needs_one_field(self) -> None:
        class Wrapper(ConfigEnum):
            pass

        @dataclass
        class Pair(Wrapper, newtype=True):
            left: int
            right: int

        with pytest.raises(SchemaError, match="exactly one field"):
            Extractor().extract(Wrapper, tree({"Pair": 1}))

    def test_variants_added_later_are_seen(self) -> None:
        class Late(ConfigEnum, tag="kind"):
            pass

        class Early(Late):
            pass

        extractor = Extractor()
        assert isinstance(extractor.extract(Late, tree({"kind": "Early"})), Early)

        class After(Late):
            pass

        assert isinstance(Extractor().extract(Late, tree({"kind": "After"})), After)


# ---------------------------------------------------------------------------
# Tagged
# ---------------------------------------------------------------------------


class TestTaggedEnum:
    def test_renamed_record_variant(self) -> None:
        result = extract(Backend, tree({"type": "postgresql", "host": "db"}))
        assert result == Postgres(host="db", port=np.uint16(5432))
        assert isinstance(result, Backend)

    def test_class_name_variant(self) -> None:
        assert extract(Backend, tree({"type": "Sqlite", "path": "/tmp/x"})) == Sqlite(
            Path("/tmp/x")
        )

    def test_renamed_variant_ignores_class_name(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(Backend, tree({"type": "Postgres", "host": "db"}))
        assert exc_info.value.cause == "unknown variant: Postgres"
        assert exc_info.value.key == "type"
        assert exc_info.value.type_name == "Backend"

    def test_unknown_tag(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(Backend, tree({"type": "mysql"}))
        assert str(exc_info.value) == (
            "Failed to convert value at 'type' to type Backend: unknown variant: mysql"
        )

    def test_missing_tag(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(Backend, tree({"host": "db"}))
        assert exc_info.value.key == "type"
        assert exc_info.value.cause == "missing or invalid tag field"

    def test_non_string_tag(self) -> None:
        with pytest.raises(ConversionError, match="missing or invalid tag field"):
            extract(Backend, tree({"type": 1}))

    def test_requires_object(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(Backend, Value.string("postgresql"))
        assert exc_info.value.cause == "expected object, found string"

    def test_newtype_reads_whole_object(self) -> None:
        result = extract(Backend, tree({"type": "Replica", "host": "r1", "port": 6432}))
        assert result == Replica(Endpoint(host="r1", port=np.uint16(6432)))

    def test_unit_variant(self) -> None:
        assert isinstance(extract(Backend, tree({"type": "Memory"})), Memory)

    def test_slots_variant(self) -> None:
        assert extract(Backend, tree({"type": "remote", "url": "u"})) == Remote("u")

    def test_variant_error_path(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(Backend, tree({"type": "postgresql", "host": "db", "port": -1}))
        assert exc_info.value.key == "port"
        assert exc_info.value.type_name == "uint16"

    def test_enum_as_struct_field(self) -> None:
        data = {"name": "api", "backend": {"type": "postgresql", "host": 5}}
        with pytest.raises(ConversionError) as exc_info:
            extract(Service, tree(data))
        assert exc_info.value.key == "backend.host"

    def test_enum_in_collection(self) -> None:
        data = [{"type": "Memory"}, {"type": "nope"}]
        with pytest.raises(ConversionError) as exc_info:
            extract(list[Backend], tree(data))
        assert exc_info.value.key == "[1].type"

    def test_variant_extracted_directly(self) -> None:
        assert extract(Sqlite, tree({"path": "p"})) == Sqlite(Path("p"))


# ---------------------------------------------------------------------------
# Untagged
# ---------------------------------------------------------------------------


class TestUntaggedEnum:
    def test_record_variant(self) -> None:
        assert extract(Source, tree({"file": {"path": "/a"}})) == File(path="/a")

    def test_newtype_variant(self) -> None:
        assert extract(Source, tree({"inline": "hello"})) == Inline(text="hello")

    def test_unit_variant_matches_on_presence(self) -> None:
        assert isinstance(extract(Source, tree({"stdin": None})), Stdin)
        assert isinstance(extract(Source, tree({"stdin": True})), Stdin)

    def test_declaration_order_wins(self) -> None:
        result = extract(Source, tree({"inline": "x", "file": {"path": "a"}}))
        assert isinstance(result, File)

    def test_failed_variant_falls_through(self) -> None:
        result = extract(Source, tree({"file": {"nope": 1}, "inline": "x"}))
        assert result == Inline(text="x")

    def test_record_key_must_hold_object(self) -> None:
        result = extract(Source, tree({"file": "/a", "stdin": None}))
        assert isinstance(result, Stdin)

    def test_no_match(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(Source, tree({"other": 1}))
        err = exc_info.value
        assert err.type_name == "Source"
        assert err.key == ""
        assert str(err.cause).startswith("no matching variant found (")
        assert "File: key 'file' not present" in str(err)
        assert "Stdin: key 'stdin' not present" in str(err)

    def test_no_match_lists_reasons(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            extract(Source, tree({"file": "/a", "inline": 3}))
        message = str(exc_info.value)
        assert "File: expected object at 'file', found string" in message
        assert "Inline: " in message
        assert "unexpected integer" in message

    def test_requires_object(self) -> None:
        with pytest.raises(ConversionError, match="expected object, found array"):
            extract(Source, tree([]))

    def test_no_match_logged(self) -> None:
        extractor = Extractor()
        with capture_logs() as logs, pytest.raises(ConversionError):
            extractor.extract(Source, tree({}))
        events = [entry["event"] for entry in logs]
        assert "untagged_enum_no_match" in events
