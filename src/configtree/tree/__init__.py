"""Tree subpackage for the dynamic configuration value representation.

Re-exports the public API for the tree module:
- Value: immutable node of a configuration value tree
- ValueKind: StrEnum of the seven node kinds
- ValueBuilder: converts plain Python data into a Value tree
"""

from configtree.tree.builder import ValueBuilder
from configtree.tree.value import Value, ValueKind

__all__ = ["Value", "ValueBuilder", "ValueKind"]
