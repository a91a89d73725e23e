"""Language override lookup."""

from typing import Optional

from .store import TableStore


class OverrideResolver:
    """Resolves language-specific replacements from a TableStore.

    The resolver only answers whether a language overrides a codepoint.
    Falling back to the base table or to the unknown substitute is left to
    the engine.
    """

    def __init__(self, store: TableStore) -> None:
        self._store = store

    @property
    def store(self) -> TableStore:
        return self._store

    def resolve(self, language_code: str, codepoint: int) -> Optional[str]:
        """Get the override replacement of a codepoint for a language.

        Args:
            language_code: Case-sensitive language code
            codepoint: Unicode code point

        Returns:
            Replacement string, or None if the language has no override for it
        """
        return self._store.get_overrides(language_code).get(codepoint)

    def has_overrides(self, language_code: str) -> bool:
        """Whether a language defines any overrides."""
        return len(self._store.get_overrides(language_code)) > 0
