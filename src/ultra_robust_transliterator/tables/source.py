"""Table data sources for transliteration replacement tables.

A table source hands out raw, already-parsed table data: one base block of up
to 256 consecutive codepoints at a time, and the override mapping of a single
language. Sources never cache; caching and publication belong to the
TableStore.

The JSON layout mirrors the block organisation of the tables::

    data/base/x00.json        {"c4": "A", "df": "ss", ...}
    data/overrides/de.json    {"00c4": "Ae", "00d6": "Oe", ...}

Base keys are two hex digits giving the offset inside the block, override keys
are full hex codepoints. A ``null`` base value marks a codepoint as explicitly
unmapped.
"""

import importlib
import json
from abc import ABC, abstractmethod
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

import unidecode

from ultra_robust_transliterator.shared.config import LANGUAGE_CODE_PATTERN

# Block layout
BLOCK_SHIFT = 8
BLOCK_SIZE = 1 << BLOCK_SHIFT
OFFSET_MASK = BLOCK_SIZE - 1
MAX_CODEPOINT = 0x10FFFF

# Packaged data location
DATA_PACKAGE = "ultra_robust_transliterator.tables"
DATA_DIRECTORY = "data"
BASE_DIRECTORY = "base"
OVERRIDES_DIRECTORY = "overrides"
TABLE_SUFFIX = ".json"

BlockData = Dict[int, Optional[str]]
OverrideData = Dict[int, str]


class TableLoadError(Exception):
    """Raised when table data is missing or corrupt.

    Attributes:
        table: Name of the table that failed to load, if known
    """

    def __init__(self, message: str, table: Optional[str] = None) -> None:
        super().__init__(message)
        self.table = table


def block_file_name(block_number: int) -> str:
    """Data file name of a base block."""
    return f"x{block_number:02x}{TABLE_SUFFIX}"


def split_codepoint(codepoint: int) -> Tuple[int, int]:
    """Split a codepoint into its block number and offset within the block."""
    return codepoint >> BLOCK_SHIFT, codepoint & OFFSET_MASK


def _check_replacement(value: Any, table: str, key: Any) -> str:
    """Validate a replacement string."""
    if not isinstance(value, str):
        raise TableLoadError(
            f"Replacement for {key!r} in {table} must be a string, "
            f"got {type(value).__name__}",
            table=table,
        )
    if not value.isascii():
        raise TableLoadError(
            f"Replacement for {key!r} in {table} is not ASCII: {value!r}",
            table=table,
        )
    return value


def parse_block(data: Any, table: str) -> BlockData:
    """Validate decoded JSON for a base block.

    Args:
        data: Decoded JSON document
        table: Table name used in error messages

    Returns:
        Mapping of block offset to replacement (None for explicitly unmapped)
    """
    if not isinstance(data, dict):
        raise TableLoadError(f"Base table {table} must be a JSON object", table=table)

    block: BlockData = {}
    for key, value in data.items():
        try:
            offset = int(key, 16)
        except (TypeError, ValueError) as e:
            raise TableLoadError(
                f"Invalid offset {key!r} in base table {table}", table=table
            ) from e
        if not 0 <= offset < BLOCK_SIZE:
            raise TableLoadError(
                f"Offset {key!r} in base table {table} is outside the block",
                table=table,
            )
        block[offset] = None if value is None else _check_replacement(value, table, key)
    return block


def parse_overrides(data: Any, table: str) -> OverrideData:
    """Validate decoded JSON for a language override table.

    Args:
        data: Decoded JSON document
        table: Table name used in error messages

    Returns:
        Mapping of codepoint to replacement
    """
    if not isinstance(data, dict):
        raise TableLoadError(
            f"Override table {table} must be a JSON object", table=table
        )

    overrides: OverrideData = {}
    for key, value in data.items():
        try:
            codepoint = int(key, 16)
        except (TypeError, ValueError) as e:
            raise TableLoadError(
                f"Invalid codepoint {key!r} in override table {table}", table=table
            ) from e
        if not 0 <= codepoint <= MAX_CODEPOINT:
            raise TableLoadError(
                f"Codepoint {key!r} in override table {table} is out of range",
                table=table,
            )
        overrides[codepoint] = _check_replacement(value, table, key)
    return overrides


def validate_overrides(mapping: Mapping[int, str], table: str) -> OverrideData:
    """Validate an override mapping keyed by integer codepoints.

    Args:
        mapping: Codepoint to replacement mapping
        table: Table name used in error messages

    Returns:
        Validated copy of the mapping
    """
    checked: OverrideData = {}
    for codepoint, replacement in mapping.items():
        if (
            isinstance(codepoint, bool)
            or not isinstance(codepoint, int)
            or not 0 <= codepoint <= MAX_CODEPOINT
        ):
            raise TableLoadError(
                f"Invalid override codepoint {codepoint!r} in {table}", table=table
            )
        checked[codepoint] = _check_replacement(replacement, table, codepoint)
    return checked


class TableSource(ABC):
    """Abstract provider of base blocks and language overrides."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human readable location of the data, used in logs."""

    @abstractmethod
    def load_block(self, block_number: int) -> Optional[BlockData]:
        """Load one base block.

        Returns:
            Offset mapping, or None if the source has no data for the block
        """

    @abstractmethod
    def load_overrides(self, language_code: str) -> Optional[OverrideData]:
        """Load the overrides of one language.

        Returns:
            Codepoint mapping, or None if the language has no overrides
        """

    @abstractmethod
    def available_languages(self) -> FrozenSet[str]:
        """Language codes that have override tables."""


class JsonTableSource(TableSource):
    """Table source reading JSON documents from a package or directory."""

    def __init__(self, root: Any, description: Optional[str] = None) -> None:
        """Initialize JSON table source.

        Args:
            root: Path or importlib.resources Traversable holding the
                ``base`` and ``overrides`` directories
            description: Location shown in logs and error messages
        """
        self._root = root
        self._description = description or str(root)
        self._languages: Optional[FrozenSet[str]] = None

        if not root.is_dir():
            raise TableLoadError(
                f"Table data directory not found: {self._description}"
            )

    @classmethod
    def from_package(cls) -> "JsonTableSource":
        """Create a source over the tables shipped with this package."""
        root = files(DATA_PACKAGE).joinpath(DATA_DIRECTORY)
        return cls(root, description=f"package:{DATA_PACKAGE}/{DATA_DIRECTORY}")

    @classmethod
    def from_directory(cls, path: Union[str, Path]) -> "JsonTableSource":
        """Create a source over a directory of JSON tables."""
        directory = Path(path)
        return cls(directory, description=str(directory))

    @property
    def description(self) -> str:
        return self._description

    def load_block(self, block_number: int) -> Optional[BlockData]:
        name = block_file_name(block_number)
        data = self._read_json(BASE_DIRECTORY, name)
        if data is None:
            return None
        return parse_block(data, f"{BASE_DIRECTORY}/{name}")

    def load_overrides(self, language_code: str) -> Optional[OverrideData]:
        # Exact membership check keeps lookups case-sensitive on every filesystem
        if language_code not in self.available_languages():
            return None
        name = f"{language_code}{TABLE_SUFFIX}"
        data = self._read_json(OVERRIDES_DIRECTORY, name)
        if data is None:
            return None
        return parse_overrides(data, f"{OVERRIDES_DIRECTORY}/{name}")

    def available_languages(self) -> FrozenSet[str]:
        if self._languages is None:
            directory = self._root.joinpath(OVERRIDES_DIRECTORY)
            languages = set()
            if directory.is_dir():
                for entry in directory.iterdir():
                    if not entry.name.endswith(TABLE_SUFFIX):
                        continue
                    stem = entry.name[: -len(TABLE_SUFFIX)]
                    if LANGUAGE_CODE_PATTERN.match(stem):
                        languages.add(stem)
            self._languages = frozenset(languages)
        return self._languages

    def _read_json(self, directory: str, name: str) -> Optional[Any]:
        """Read and decode one JSON document, None if it does not exist."""
        entry = self._root.joinpath(directory).joinpath(name)
        table = f"{directory}/{name}"
        if not entry.is_file():
            return None
        try:
            return json.loads(entry.read_bytes().decode("utf-8"))
        except OSError as e:
            raise TableLoadError(
                f"Could not read {table} from {self._description}: {e}", table=table
            ) from e
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TableLoadError(
                f"Corrupt table {table} in {self._description}: {e}", table=table
            ) from e


class InMemoryTableSource(TableSource):
    """Table source over mappings supplied by the caller."""

    def __init__(
        self,
        base: Optional[Mapping[int, Optional[str]]] = None,
        overrides: Optional[Mapping[str, Mapping[int, str]]] = None,
    ) -> None:
        """Initialize in-memory table source.

        Args:
            base: Flat codepoint to replacement mapping, grouped into blocks here
            overrides: Language code to codepoint mapping
        """
        self._blocks: Dict[int, BlockData] = {}
        for codepoint, replacement in (base or {}).items():
            if not isinstance(codepoint, int) or not 0 <= codepoint <= MAX_CODEPOINT:
                raise TableLoadError(f"Invalid base codepoint: {codepoint!r}", "base")
            block_number, offset = split_codepoint(codepoint)
            block = self._blocks.setdefault(block_number, {})
            block[offset] = (
                None if replacement is None
                else _check_replacement(replacement, "base", codepoint)
            )

        self._overrides: Dict[str, OverrideData] = {
            language_code: validate_overrides(mapping, f"overrides/{language_code}")
            for language_code, mapping in (overrides or {}).items()
        }

    @property
    def description(self) -> str:
        return "memory"

    def load_block(self, block_number: int) -> Optional[BlockData]:
        block = self._blocks.get(block_number)
        return dict(block) if block is not None else None

    def load_overrides(self, language_code: str) -> Optional[OverrideData]:
        overrides = self._overrides.get(language_code)
        return dict(overrides) if overrides is not None else None

    def available_languages(self) -> FrozenSet[str]:
        return frozenset(self._overrides)


class UnidecodeTableSource(TableSource):
    """Base blocks from the Unidecode distribution.

    Unidecode ships one ``unidecode.xNNN`` module per block, each holding a
    ``data`` tuple indexed by offset. Language overrides come from a second
    source, the packaged JSON tables by default.
    """

    UNMAPPED_MARKERS = frozenset({"[?]"})

    def __init__(self, overrides: Optional[TableSource] = None) -> None:
        """Initialize Unidecode table source.

        Args:
            overrides: Source of language overrides (packaged tables if None)
        """
        self._overrides = overrides if overrides is not None else JsonTableSource.from_package()

    @property
    def description(self) -> str:
        return f"{unidecode.__name__}+{self._overrides.description}"

    @staticmethod
    def module_name(block_number: int) -> str:
        """Name of the Unidecode module holding a block."""
        return f"{unidecode.__name__}.x{block_number:03x}"

    def load_block(self, block_number: int) -> Optional[BlockData]:
        if not 0 <= block_number <= MAX_CODEPOINT >> BLOCK_SHIFT:
            return None
        name = self.module_name(block_number)
        try:
            module = importlib.import_module(name)
        except ModuleNotFoundError as e:
            if e.name != name:
                raise TableLoadError(f"Could not import {name}: {e}", table=name) from e
            return None

        data = getattr(module, "data", None)
        if not isinstance(data, (tuple, list)):
            raise TableLoadError(f"Table module {name} has no data sequence", table=name)

        block: BlockData = {}
        for offset, replacement in enumerate(data[:BLOCK_SIZE]):
            if replacement is None or replacement in self.UNMAPPED_MARKERS:
                continue
            block[offset] = _check_replacement(replacement, name, offset)
        return block

    def load_overrides(self, language_code: str) -> Optional[OverrideData]:
        return self._overrides.load_overrides(language_code)

    def available_languages(self) -> FrozenSet[str]:
        return self._overrides.available_languages()
