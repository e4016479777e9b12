"""configtree - typed extraction from dynamic configuration value trees."""

from __future__ import annotations

from configtree.api import dispatch, extract, register_converter
from configtree.errors import (
    ConfigError,
    ConversionError,
    KeyNotFoundError,
    SchemaError,
)
from configtree.extract.config import ExtractConfig
from configtree.extract.extractor import Extractor
from configtree.protocols import FromValue
from configtree.schema.declare import TYPE_DEFAULT, ConfigEnum, setting
from configtree.tree.builder import ValueBuilder
from configtree.tree.value import Value, ValueKind
from configtree.visitor import MapAccess, SeqAccess, ValueVisitor

__version__: str = "0.1.0"
__all__: list[str] = [
    "TYPE_DEFAULT",
    "ConfigEnum",
    "ConfigError",
    "ConversionError",
    "ExtractConfig",
    "Extractor",
    "FromValue",
    "KeyNotFoundError",
    "MapAccess",
    "SchemaError",
    "SeqAccess",
    "Value",
    "ValueBuilder",
    "ValueKind",
    "ValueVisitor",
    "dispatch",
    "extract",
    "register_converter",
    "setting",
]
