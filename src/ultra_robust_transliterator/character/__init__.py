"""Character processing layer for ultra robust transliteration.

This module provides tolerant UTF-8 decoding into source units and the
codepoint classification used for diacritic removal, following the never-fail
philosophy.
"""

from .decoder import (
    INVALID,
    CodepointDecoder,
    SourceUnit,
    decode,
)
from .diacritics import (
    REPLACEMENT_CHARACTER,
    is_diacritic_candidate,
)

__all__ = [
    # Modules
    "decoder",
    "diacritics",
    # Decoding
    "INVALID",
    "CodepointDecoder",
    "SourceUnit",
    "decode",
    # Diacritic classification
    "REPLACEMENT_CHARACTER",
    "is_diacritic_candidate",
]
