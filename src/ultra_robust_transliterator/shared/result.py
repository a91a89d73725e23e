"""Result objects and diagnostic types for ultra-robust transliteration.

This module defines the detailed result returned by the engine alongside the
diagnostic entries describing malformed input and truncation.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Input problems that were recovered
    ERROR = auto()      # Error conditions that were recovered


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class TransliterationResult:
    """Transliterated text with per-call statistics and diagnostics."""

    text: str
    language_code: str
    units_processed: int = 0
    bytes_consumed: int = 0
    unknown_units: int = 0
    invalid_units: int = 0
    override_hits: int = 0
    truncated: bool = False
    processing_time_ms: float = 0.0
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None

    @property
    def unknown_rate(self) -> float:
        """Share of processed units that fell back to the unknown substitute."""
        if self.units_processed == 0:
            return 0.0
        return self.unknown_units / self.units_processed

    @property
    def has_invalid_input(self) -> bool:
        """Whether any processed unit came from a malformed byte sequence."""
        return self.invalid_units > 0

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Append a diagnostic entry tagged with this result's correlation ID."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                position=position,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of a single severity."""
        return [d for d in self.diagnostics if d.severity == severity]
