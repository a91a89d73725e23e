"""Public transliteration API.

This module provides the module-level convenience functions and the
TransliterationEngine class.
"""

from .transliterator import (
    ReplacementKind,
    TransliterationEngine,
    remove_diacritics,
    transliterate,
)

__all__ = [
    "ReplacementKind",
    "TransliterationEngine",
    "remove_diacritics",
    "transliterate",
]
