"""Lazily populated, load-once cache of transliteration tables.

The TableStore owns every table loaded from a TableSource. Base blocks and
language overrides are loaded on first use under a lock, frozen, and then
published; published tables are never mutated, so readers look them up
without taking the lock.
"""

import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ultra_robust_transliterator.shared import TransliterationConfig, get_logger

from .source import (
    BLOCK_SIZE,
    JsonTableSource,
    TableLoadError,
    TableSource,
    split_codepoint,
    validate_overrides,
)

Block = Tuple[Optional[str], ...]
OverrideTable = Mapping[int, str]
OverrideHook = Callable[[str, Dict[int, str]], None]

EMPTY_BLOCK: Block = ()
EMPTY_OVERRIDES: OverrideTable = MappingProxyType({})


class BaseTable:
    """Read-only view of the base mapping, populated block by block."""

    def __init__(self, store: "TableStore") -> None:
        self._store = store

    def lookup(self, codepoint: int) -> Optional[str]:
        """Get the base replacement of a codepoint.

        Args:
            codepoint: Unicode code point

        Returns:
            Replacement string, or None if the codepoint is unmapped
        """
        block_number, offset = split_codepoint(codepoint)
        block = self._store.get_block(block_number)
        if offset < len(block):
            return block[offset]
        return None

    def get(self, codepoint: int, default: Optional[str] = None) -> Optional[str]:
        replacement = self.lookup(codepoint)
        return default if replacement is None else replacement

    def __contains__(self, codepoint: object) -> bool:
        return isinstance(codepoint, int) and self.lookup(codepoint) is not None


class TableStore:
    """Registry of base blocks and per-language overrides.

    One store is meant to be constructed once and shared by every engine that
    uses the same table data. Loading is safe under concurrent first use: the
    first caller loads and publishes an immutable table while the others wait
    on the lock and then observe the published instance.

    Examples:
        >>> store = TableStore()
        >>> store.get_overrides("de")[0xC4]
        'Ae'
        >>> store.get_base_table().lookup(0xC4)
        'A'
    """

    def __init__(
        self,
        source: Optional[TableSource] = None,
        override_hooks: Optional[Iterable[OverrideHook]] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize table store.

        Args:
            source: Table data source (defaults to the packaged JSON tables)
            override_hooks: Callables that may alter a language's overrides
                once, before they are frozen and published
            correlation_id: Optional correlation ID for request tracking
        """
        self._source = source if source is not None else JsonTableSource.from_package()
        self._override_hooks: List[OverrideHook] = list(override_hooks or [])
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "table_store")

        self._lock = threading.RLock()
        self._blocks: Dict[int, Block] = {}
        self._overrides: Dict[str, OverrideTable] = {}
        self._base_table = BaseTable(self)

        # Statistics are best effort; reads do not take the lock
        self._cache_hits = 0
        self._cache_misses = 0

    @classmethod
    def from_config(
        cls,
        config: TransliterationConfig,
        override_hooks: Optional[Iterable[OverrideHook]] = None
    ) -> "TableStore":
        """Create a store for a configuration and preload its languages."""
        if config.data_directory:
            source: TableSource = JsonTableSource.from_directory(config.data_directory)
        else:
            source = JsonTableSource.from_package()
        store = cls(source, override_hooks, config.correlation_id)
        if config.preload_languages:
            store.preload(languages=config.preload_languages)
        return store

    @property
    def source(self) -> TableSource:
        return self._source

    def get_base_table(self) -> BaseTable:
        """Get the base table view."""
        return self._base_table

    def get_block(self, block_number: int) -> Block:
        """Get a base block, loading it on first use.

        Returns:
            Tuple of BLOCK_SIZE replacements (None where unmapped), or an
            empty tuple if the source has no data for the block
        """
        block = self._blocks.get(block_number)
        if block is not None:
            self._cache_hits += 1
            return block

        with self._lock:
            block = self._blocks.get(block_number)
            if block is None:
                self._cache_misses += 1
                block = self._load_block(block_number)
                self._blocks[block_number] = block
            else:
                self._cache_hits += 1
            return block

    def get_overrides(self, language_code: str) -> OverrideTable:
        """Get the override table of a language, loading it on first use.

        Unknown language codes yield an empty, read-only mapping.
        """
        overrides = self._overrides.get(language_code)
        if overrides is not None:
            self._cache_hits += 1
            return overrides

        with self._lock:
            overrides = self._overrides.get(language_code)
            if overrides is None:
                self._cache_misses += 1
                overrides = self._load_overrides(language_code)
                self._overrides[language_code] = overrides
            else:
                self._cache_hits += 1
            return overrides

    def preload(
        self,
        languages: Iterable[str] = (),
        blocks: Iterable[int] = ()
    ) -> None:
        """Load tables ahead of first use."""
        for language_code in languages:
            self.get_overrides(language_code)
        for block_number in blocks:
            self.get_block(block_number)

    def available_languages(self) -> List[str]:
        """Language codes with override data in the source, sorted."""
        return sorted(self._source.available_languages())

    @property
    def loaded_blocks(self) -> List[int]:
        return sorted(self._blocks)

    @property
    def loaded_languages(self) -> List[str]:
        return sorted(self._overrides)

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with loaded table counts and cache hit information
        """
        total = self._cache_hits + self._cache_misses
        return {
            "source": self._source.description,
            "loaded_blocks": len(self._blocks),
            "loaded_languages": len(self._overrides),
            "cache_hits": self._cache_hits,
            "cache_misses": self._cache_misses,
            "cache_hit_rate": self._cache_hits / total if total > 0 else 0.0,
        }

    def _load_block(self, block_number: int) -> Block:
        """Load and freeze one base block. Caller holds the lock."""
        try:
            data = self._source.load_block(block_number)
        except TableLoadError:
            self.logger.error(
                "Base block failed to load",
                extra={"block": block_number, "source": self._source.description}
            )
            raise
        except Exception as e:
            self.logger.error(
                "Table source raised while loading base block",
                extra={"block": block_number, "source": self._source.description}
            )
            raise TableLoadError(
                f"Could not load base block x{block_number:02x}: {e}",
                table=f"x{block_number:02x}",
            ) from e

        if not data:
            self.logger.debug(
                "No base data for block",
                extra={"block": block_number, "source": self._source.description}
            )
            return EMPTY_BLOCK

        entries: List[Optional[str]] = [None] * BLOCK_SIZE
        for offset, replacement in data.items():
            entries[offset] = replacement

        self.logger.debug(
            "Base block loaded",
            extra={
                "block": block_number,
                "mapped_entries": sum(1 for e in entries if e is not None),
                "source": self._source.description,
            }
        )
        return tuple(entries)

    def _load_overrides(self, language_code: str) -> OverrideTable:
        """Load, alter and freeze a language's overrides. Caller holds the lock."""
        table = f"overrides/{language_code}"
        try:
            data = self._source.load_overrides(language_code)
        except TableLoadError:
            self.logger.error(
                "Language overrides failed to load",
                extra={"language_code": language_code,
                       "source": self._source.description}
            )
            raise
        except Exception as e:
            self.logger.error(
                "Table source raised while loading language overrides",
                extra={"language_code": language_code,
                       "source": self._source.description}
            )
            raise TableLoadError(
                f"Could not load overrides for {language_code!r}: {e}", table=table
            ) from e

        working: Dict[int, str] = dict(data or {})
        if self._override_hooks:
            for hook in self._override_hooks:
                try:
                    hook(language_code, working)
                except Exception as e:
                    self.logger.error(
                        "Override hook failed",
                        extra={"language_code": language_code,
                               "hook": getattr(hook, "__name__", repr(hook))}
                    )
                    raise TableLoadError(
                        f"Override hook failed for {language_code!r}: {e}",
                        table=table,
                    ) from e
            working = validate_overrides(working, table)

        if not working:
            self.logger.debug(
                "No overrides for language",
                extra={"language_code": language_code}
            )
            return EMPTY_OVERRIDES

        self.logger.info(
            "Language overrides loaded",
            extra={
                "language_code": language_code,
                "entries": len(working),
                "source": self._source.description,
            }
        )
        return MappingProxyType(working)
