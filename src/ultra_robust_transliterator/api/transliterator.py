"""Transliteration engine API with progressive disclosure.

This module provides module-level convenience functions for one-off calls and
the TransliterationEngine class for repeated use. Decoding never fails;
malformed input, unknown languages and unmapped characters all degrade to the
unknown substitute. Only a failure to load table data is raised to the caller.
"""

import time
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ultra_robust_transliterator.character import (
    INVALID,
    REPLACEMENT_CHARACTER,
    CodepointDecoder,
    SourceUnit,
    is_diacritic_candidate,
)
from ultra_robust_transliterator.shared import (
    DiagnosticSeverity,
    TransliterationConfig,
    TransliterationResult,
    get_logger,
)
from ultra_robust_transliterator.tables import (
    OverrideHook,
    OverrideResolver,
    TableStore,
)

# Type definitions for input data
InputType = Union[str, bytes, bytearray, memoryview]

# Constants for API operations
ASCII_MAX = 0x80
PREVIEW_LENGTH = 40  # Max length for input preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion


class ReplacementKind(Enum):
    """Where the replacement of a source unit came from."""
    ASCII = "ascii"
    OVERRIDE = "override"
    BASE = "base"
    UNKNOWN = "unknown"
    INVALID = "invalid"


def _to_bytes(text: InputType) -> bytes:
    """Convert input to the UTF-8 bytes the decoder consumes.

    Lone surrogates in ``str`` input are kept as their 3-byte encoding so the
    decoder reports them as malformed units instead of failing here.
    """
    if isinstance(text, str):
        return text.encode("utf-8", errors="surrogatepass")
    if isinstance(text, (bytes, bytearray, memoryview)):
        return bytes(text)
    raise TypeError(
        f"text must be str or bytes-like, got {type(text).__name__}"
    )


def _check_max_length(max_length: Optional[int]) -> None:
    """Validate a maximum output length."""
    if max_length is None:
        return
    if isinstance(max_length, bool) or not isinstance(max_length, int):
        raise TypeError(
            f"max_length must be an int or None, got {type(max_length).__name__}"
        )
    if max_length < 0:
        raise ValueError(f"max_length must be >= 0 or None, got {max_length}")


def _preview(data: bytes) -> str:
    """Short printable preview of input bytes for logs."""
    head = data[:PREVIEW_LENGTH].decode("utf-8", errors="replace")
    return head + "..." if len(data) > PREVIEW_LENGTH else head


def transliterate(
    text: InputType,
    language_code: str = "en",
    unknown_substitute: str = "?",
    max_length: Optional[int] = None,
    store: Optional[TableStore] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Transliterate text to ASCII.

    This is the primary entry point for one-off transliteration. Pass a shared
    ``store`` (or reuse a TransliterationEngine) when transliterating many
    strings so tables are loaded only once.

    Args:
        text: UTF-8 bytes (possibly malformed) or a string
        language_code: Case-sensitive language code selecting overrides
        unknown_substitute: Text emitted for characters without a replacement
        max_length: Maximum output length; replacements are never split
        store: Optional table store to share loaded tables
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Transliterated ASCII text

    Raises:
        TableLoadError: If table data cannot be loaded

    Examples:
        >>> transliterate("Ä Ö Ü Å Ø äöüåøhello", "de")
        'Ae Oe Ue A O aeoeueaohello'

        >>> transliterate("Ä Ö Ü Å Ø äöüåøhello", "de", max_length=5)
        'Ae Oe'

        >>> transliterate(bytes([0xF8, 0x80, 0x80, 0x80, 0x80]))
        '?'
    """
    engine = TransliterationEngine(store=store, correlation_id=correlation_id)
    return engine.transliterate(text, language_code, unknown_substitute, max_length)


def remove_diacritics(
    text: InputType,
    store: Optional[TableStore] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Replace accented Latin letters with their unaccented forms.

    Examples:
        >>> remove_diacritics("Crème brûlée, Øresund")
        'Creme brulee, Oresund'
    """
    engine = TransliterationEngine(store=store, correlation_id=correlation_id)
    return engine.remove_diacritics(text)


class TransliterationEngine:
    """Transliteration engine with shared, lazily loaded tables.

    The engine is a pure function of its inputs plus the read-only tables of
    its TableStore, so one instance can serve any number of threads.

    Attributes:
        config: Engine configuration supplying call defaults
        correlation_id: Correlation ID for request tracking

    Examples:
        Basic usage with default configuration:
        >>> engine = TransliterationEngine()
        >>> engine.transliterate("Søren Kierkegaard", "dk")
        'Soeren Kierkegaard'

        Identifier generation:
        >>> engine = TransliterationEngine(config=TransliterationConfig.identifier(8))
        >>> engine.transliterate("Größenwahn", "de")
        'Groessen'

        Sharing tables between engines:
        >>> store = TableStore()
        >>> german = TransliterationEngine(store, TransliterationConfig(default_language="de"))
        >>> danish = TransliterationEngine(store, TransliterationConfig(default_language="dk"))
    """

    def __init__(
        self,
        store: Optional[TableStore] = None,
        config: Optional[TransliterationConfig] = None,
        override_hooks: Optional[Iterable[OverrideHook]] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize transliteration engine.

        Args:
            store: Table store to share (built from config if None)
            config: Engine configuration (defaults if None)
            override_hooks: Override alter hooks for a store built here
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TransliterationConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "transliteration_engine")

        if store is None:
            store = TableStore.from_config(self.config, override_hooks)
        else:
            if override_hooks:
                raise ValueError(
                    "override_hooks only apply to a store built by the engine; "
                    "pass them to TableStore instead"
                )
            if self.config.preload_languages:
                store.preload(languages=self.config.preload_languages)

        self._store = store
        self._resolver = OverrideResolver(store)
        self._base_table = store.get_base_table()
        self._decoder = CodepointDecoder()

        # Engine usage statistics
        self._call_count = 0
        self._units_processed = 0
        self._truncated_calls = 0

        self.logger.debug(
            "TransliterationEngine initialized",
            extra={
                "source": store.source.description,
                "default_language": self.config.default_language,
            }
        )

    @property
    def store(self) -> TableStore:
        return self._store

    @property
    def resolver(self) -> OverrideResolver:
        return self._resolver

    def transliterate(
        self,
        text: InputType,
        language_code: Optional[str] = None,
        unknown_substitute: Optional[str] = None,
        max_length: Optional[int] = None
    ) -> str:
        """Transliterate text to ASCII.

        Arguments left as None fall back to the engine configuration.

        Args:
            text: UTF-8 bytes (possibly malformed) or a string
            language_code: Case-sensitive language code selecting overrides
            unknown_substitute: Text emitted for characters without a replacement
            max_length: Maximum output length; replacements are never split

        Returns:
            Transliterated ASCII text
        """
        return self.transliterate_detailed(
            text, language_code, unknown_substitute, max_length
        ).text

    def transliterate_detailed(
        self,
        text: InputType,
        language_code: Optional[str] = None,
        unknown_substitute: Optional[str] = None,
        max_length: Optional[int] = None
    ) -> TransliterationResult:
        """Transliterate text and report how each unit was resolved.

        Returns:
            TransliterationResult with text, counters and diagnostics
        """
        start_time = time.perf_counter()

        language = (
            language_code if language_code is not None
            else self.config.default_language
        )
        unknown = (
            unknown_substitute if unknown_substitute is not None
            else self.config.unknown_substitute
        )
        limit = max_length if max_length is not None else self.config.max_length
        _check_max_length(limit)
        if not isinstance(unknown, str):
            raise TypeError(
                f"unknown_substitute must be a str, got {type(unknown).__name__}"
            )

        data = _to_bytes(text)
        result = TransliterationResult(
            text="", language_code=language, correlation_id=self.correlation_id
        )

        if limit is None and data.isascii():
            # Fast path: every unit is its own replacement
            result.text = data.decode("ascii")
            result.units_processed = len(data)
            result.bytes_consumed = len(data)
        else:
            self._assemble(data, language, unknown, limit, result)

        result.processing_time_ms = (time.perf_counter() - start_time) * MS_PER_SECOND

        self._call_count += 1
        self._units_processed += result.units_processed
        if result.truncated:
            self._truncated_calls += 1

        self.logger.debug(
            "Transliteration completed",
            extra={
                "language_code": language,
                "input_bytes": len(data),
                "output_length": len(result.text),
                "unknown_units": result.unknown_units,
                "invalid_units": result.invalid_units,
                "truncated": result.truncated,
                "processing_time_ms": result.processing_time_ms,
            }
        )
        return result

    def remove_diacritics(self, text: InputType) -> str:
        """Replace accented Latin letters with their unaccented forms.

        Characters keep their identity unless they are accented Latin letters
        whose base replacement is a single character. Language overrides are
        never consulted. Malformed units become U+FFFD.

        Args:
            text: UTF-8 bytes (possibly malformed) or a string

        Returns:
            Text with diacritics removed
        """
        data = _to_bytes(text)
        pieces: List[str] = []

        for unit in self._decoder.decode(data):
            codepoint = unit.codepoint
            if codepoint == INVALID:
                pieces.append(REPLACEMENT_CHARACTER)
                continue

            character = chr(codepoint)
            if is_diacritic_candidate(codepoint):
                replacement = self._base_table.lookup(codepoint)
                if replacement is not None and len(replacement) == 1:
                    character = replacement
            pieces.append(character)

        return "".join(pieces)

    def resolve_unit(
        self, unit: SourceUnit, language_code: str, unknown_substitute: str
    ) -> Tuple[str, ReplacementKind]:
        """Compute the replacement of one source unit.

        Returns:
            Tuple of (replacement, where the replacement came from)
        """
        codepoint = unit.codepoint
        if codepoint == INVALID:
            return unknown_substitute, ReplacementKind.INVALID
        if codepoint < ASCII_MAX:
            return chr(codepoint), ReplacementKind.ASCII

        replacement = self._resolver.resolve(language_code, codepoint)
        if replacement is not None:
            return replacement, ReplacementKind.OVERRIDE

        replacement = self._base_table.lookup(codepoint)
        if replacement is not None:
            return replacement, ReplacementKind.BASE

        return unknown_substitute, ReplacementKind.UNKNOWN

    def _assemble(
        self,
        data: bytes,
        language_code: str,
        unknown_substitute: str,
        max_length: Optional[int],
        result: TransliterationResult
    ) -> None:
        """Resolve every unit and append replacements under the length bound."""
        collect = self.config.collect_diagnostics
        pieces: List[str] = []
        length = 0
        offset = 0

        for index, unit in enumerate(self._decoder.decode(data)):
            replacement, kind = self.resolve_unit(
                unit, language_code, unknown_substitute
            )

            if max_length is not None and length + len(replacement) > max_length:
                result.truncated = True
                if collect:
                    result.add_diagnostic(
                        DiagnosticSeverity.INFO,
                        "Output truncated at a source unit boundary",
                        "transliteration_engine",
                        position={"byte_offset": offset, "unit_index": index},
                        details={
                            "max_length": max_length,
                            "output_length": length,
                            "replacement_length": len(replacement),
                        },
                    )
                break

            pieces.append(replacement)
            length += len(replacement)
            result.units_processed += 1
            result.bytes_consumed += unit.byte_length

            if kind is ReplacementKind.INVALID:
                result.invalid_units += 1
                if collect:
                    result.add_diagnostic(
                        DiagnosticSeverity.WARNING,
                        "Malformed UTF-8 sequence replaced with unknown substitute",
                        "codepoint_decoder",
                        position={"byte_offset": offset, "unit_index": index},
                        details={
                            "byte_length": unit.byte_length,
                            "bytes": data[offset:offset + unit.byte_length].hex(),
                        },
                    )
            elif kind is ReplacementKind.UNKNOWN:
                result.unknown_units += 1
            elif kind is ReplacementKind.OVERRIDE:
                result.override_hits += 1

            offset += unit.byte_length

        result.text = "".join(pieces)

        if result.invalid_units:
            self.logger.warning(
                "Malformed input replaced during transliteration",
                extra={
                    "language_code": language_code,
                    "invalid_units": result.invalid_units,
                    "preview": _preview(data),
                }
            )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get engine usage statistics.

        Returns:
            Dictionary with call counters and table cache statistics
        """
        return {
            "total_calls": self._call_count,
            "units_processed": self._units_processed,
            "truncated_calls": self._truncated_calls,
            "correlation_id": self.correlation_id,
            "tables": self._store.statistics,
        }

    def reset_statistics(self) -> None:
        """Reset engine usage statistics."""
        self._call_count = 0
        self._units_processed = 0
        self._truncated_calls = 0

        self.logger.debug("Engine statistics reset")
