"""Extract subpackage: type-directed conversion of Value trees.

Re-exports the public API for the extract module:
- Extractor: converts Value nodes into typed Python values, caching plans
- ExtractConfig: frozen configuration dataclass for an Extractor
- default_extractor: the process-wide Extractor behind the module-level API
"""

from configtree.extract.config import ExtractConfig
from configtree.extract.extractor import Extractor, default_extractor

__all__ = ["ExtractConfig", "Extractor", "default_extractor"]
