"""Ultra-Robust Transliterator.

A never-fail transliterator that reduces arbitrary, possibly malformed UTF-8
text to ASCII using block-organised base tables and per-language overrides.

Progressive API Disclosure:
- Level 1: Simple functions - transliterate(), remove_diacritics()
- Level 2: Configured engine - TransliterationEngine class
- Level 3: Shared tables - TableStore with custom sources and override hooks
"""

__version__ = "0.1.0"
__author__ = "Ultra Robust Transliterator Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured engine
from .api import TransliterationEngine, remove_diacritics, transliterate

# Decoding primitives
from .character import INVALID, CodepointDecoder, SourceUnit

# Configuration and result objects
from .shared import TransliterationConfig, TransliterationResult

# Level 3: Table management
from .tables import (
    InMemoryTableSource,
    JsonTableSource,
    OverrideResolver,
    TableLoadError,
    TableStore,
    UnidecodeTableSource,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions (progressive disclosure entry point)
    "transliterate",
    "remove_diacritics",

    # Level 2: Configured engine
    "TransliterationEngine",
    "TransliterationConfig",
    "TransliterationResult",

    # Level 3: Table management
    "TableStore",
    "OverrideResolver",
    "JsonTableSource",
    "InMemoryTableSource",
    "TableLoadError",
    "UnidecodeTableSource",

    # Decoding primitives
    "CodepointDecoder",
    "SourceUnit",
    "INVALID",
]
