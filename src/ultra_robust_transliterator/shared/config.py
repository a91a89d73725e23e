"""Configuration classes for ultra-robust transliteration.

This module provides the immutable configuration object that controls engine
defaults, table data location and diagnostics collection.
"""

import json
import re
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

# Language codes usable as table keys and data file names
LANGUAGE_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

DEFAULT_LANGUAGE = "en"
DEFAULT_UNKNOWN_SUBSTITUTE = "?"
IDENTIFIER_UNKNOWN_SUBSTITUTE = "_"
IDENTIFIER_MAX_LENGTH = 64


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class TransliterationConfig:
    """Engine-wide configuration for transliteration.

    Values here are defaults only: arguments passed to an individual
    transliterate call take precedence. Thread-safe due to frozen dataclass
    implementation.

    Attributes:
        default_language: Language code used when a call names none
        unknown_substitute: Text emitted for units without a replacement
        max_length: Default output length cap (None for unbounded)
        data_directory: Directory of JSON tables replacing the packaged data
        preload_languages: Override tables to load when an engine is built
        collect_diagnostics: Whether detailed results carry diagnostic entries
        correlation_id: Optional correlation ID for request tracking
    """

    default_language: str = DEFAULT_LANGUAGE
    unknown_substitute: str = DEFAULT_UNKNOWN_SUBSTITUTE
    max_length: Optional[int] = None
    data_directory: Optional[str] = None
    preload_languages: Tuple[str, ...] = ()
    collect_diagnostics: bool = True
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate transliteration configuration."""
        if not isinstance(self.default_language, str) or not self.default_language:
            raise ConfigValidationError(
                "default_language must be a non-empty string",
                field_name="default_language",
            )
        if not isinstance(self.unknown_substitute, str):
            raise ConfigValidationError(
                "unknown_substitute must be a string",
                field_name="unknown_substitute",
            )
        if self.max_length is not None and (
            isinstance(self.max_length, bool)
            or not isinstance(self.max_length, int)
            or self.max_length < 0
        ):
            raise ConfigValidationError(
                "max_length must be >= 0 or None",
                field_name="max_length",
            )

        # Lists arrive from JSON; keep the frozen instance hashable
        if not isinstance(self.preload_languages, tuple):
            object.__setattr__(
                self, "preload_languages", tuple(self.preload_languages)
            )
        invalid = [
            code for code in self.preload_languages
            if not isinstance(code, str) or not LANGUAGE_CODE_PATTERN.match(code)
        ]
        if invalid:
            raise ConfigValidationError(
                f"preload_languages contains invalid language codes: {invalid}",
                field_name="preload_languages",
                suggestions=["Use plain codes such as 'de' or 'pt-br'"],
            )

    def override(self, **kwargs: Any) -> "TransliterationConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Configuration fields to override

        Returns:
            New TransliterationConfig instance with overrides applied

        Example:
            >>> config = TransliterationConfig()
            >>> config.override(default_language="de").default_language
            'de'
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {unknown}",
                suggestions=sorted(known),
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result = asdict(self)
        result["preload_languages"] = list(self.preload_languages)
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransliterationConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than ignored so that typos in
        configuration files surface immediately.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be an object")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {unknown}",
                suggestions=sorted(known),
            )
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "TransliterationConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "TransliterationConfig":
        """Load configuration from a JSON file."""
        path = Path(config_path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read configuration file {path}: {e}") from e
        return cls.from_json(content)

    # Preset factory methods
    @classmethod
    def default(cls) -> "TransliterationConfig":
        """Create the default configuration."""
        return cls()

    @classmethod
    def identifier(
        cls, max_length: int = IDENTIFIER_MAX_LENGTH
    ) -> "TransliterationConfig":
        """Create configuration preset for building identifiers from text."""
        return cls(
            unknown_substitute=IDENTIFIER_UNKNOWN_SUBSTITUTE,
            max_length=max_length,
            collect_diagnostics=False,
        )
