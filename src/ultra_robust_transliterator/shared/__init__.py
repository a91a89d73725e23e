"""Shared utilities for ultra-robust transliteration.

This module provides shared data structures, configuration objects, result
types, and logging utilities used across all processing layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    TransliterationResult,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    TransliterationConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "TransliterationResult",
    "ConfigError",
    "ConfigValidationError",
    "TransliterationConfig",
    "CorrelationLogger",
    "get_logger",
]
