"""Word list lookups for move validation.

The engine only queries the list; loading it may happen later (for
example from a background task). Until `load()` or a constructor has
populated it, lookups raise `DictionaryNotReadyError` instead of quietly
rejecting every word.

Notes:
- words are kept in UPPERCASE, lookups are case-insensitive;
- blank tiles carry their assigned letter by the time words are built, so
  a `?` never reaches this module.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

log = logging.getLogger("scramble.dictionary")


class DictionaryNotReadyError(RuntimeError):
    """Lookup attempted before the word list was populated."""


class WordDictionary:
    """Set-backed dictionary of valid words."""

    def __init__(self, words: Iterable[str] | None = None) -> None:
        self._words: set[str] | None = None
        if words is not None:
            self._words = {w for w in (self._normalize(x) for x in words) if w}

    @staticmethod
    def _normalize(word: str) -> str:
        return word.strip().upper()

    @classmethod
    def from_words(cls, words: Iterable[str]) -> WordDictionary:
        return cls(words)

    @classmethod
    def from_path(cls, path: str | Path) -> WordDictionary:
        """Load a word list file; one word per line, `#` lines are comments."""
        inst = cls()
        inst.load(path)
        return inst

    def load(self, path: str | Path) -> int:
        words: set[str] = set()
        with Path(path).open(encoding="utf-8", errors="ignore") as f:
            for line in f:
                stripped = line.strip()
                if not stripped or stripped.startswith("#"):
                    continue
                words.add(self._normalize(stripped))
        self._words = words
        log.info("dictionary_loaded path=%s words=%s", path, len(words))
        return len(words)

    @property
    def is_ready(self) -> bool:
        return self._words is not None

    def count(self) -> int:
        return len(self._words or ())

    def is_valid_word(self, word: str) -> bool:
        if self._words is None:
            raise DictionaryNotReadyError("Dictionary is still loading...")
        if not word:
            return False
        return self._normalize(word) in self._words

    def invalid_words(self, words: Iterable[str]) -> list[str]:
        """Words from `words` that are not in the list (input order kept)."""
        return [w for w in words if not self.is_valid_word(w)]
