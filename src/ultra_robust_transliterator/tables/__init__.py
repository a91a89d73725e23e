"""Table layer for ultra robust transliteration.

This module provides the table data sources, the load-once table cache, and
the language override resolver.
"""

from .resolver import OverrideResolver
from .source import (
    BLOCK_SIZE,
    InMemoryTableSource,
    JsonTableSource,
    TableLoadError,
    TableSource,
    UnidecodeTableSource,
)
from .store import (
    BaseTable,
    OverrideHook,
    TableStore,
)

__all__ = [
    "BLOCK_SIZE",
    "BaseTable",
    "InMemoryTableSource",
    "JsonTableSource",
    "OverrideHook",
    "OverrideResolver",
    "TableLoadError",
    "TableSource",
    "TableStore",
    "UnidecodeTableSource",
]
