"""Schema subpackage: declarative structs and enums, and their compiler.

Re-exports the public API for the schema module:
- setting / TYPE_DEFAULT: per-field extraction attributes for dataclasses
- ConfigEnum: base class for tagged and untagged enums
- read_struct_schema / read_enum_schema: cached schema reflection
"""

from configtree.schema.declare import TYPE_DEFAULT, ConfigEnum, setting
from configtree.schema.model import (
    EnumSchema,
    FieldPolicy,
    FieldSpec,
    StructSchema,
    VariantSpec,
    VariantStyle,
    read_enum_schema,
    read_struct_schema,
)

__all__ = [
    "TYPE_DEFAULT",
    "ConfigEnum",
    "EnumSchema",
    "FieldPolicy",
    "FieldSpec",
    "StructSchema",
    "VariantSpec",
    "VariantStyle",
    "read_enum_schema",
    "read_struct_schema",
    "setting",
]
