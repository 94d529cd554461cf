"""
SymSpell Suggestion Generator
=============================
Ranked corrections drawn from the active dictionary.

A SymSpell index is built lazily for each Dictionary and rebuilt when the
dictionary's revision changes (add, import, remove, reload).

Ranking: edit distance (Damerau OSA), then higher frequency, then length
closest to the input, then alphabetical.

Requires: pip install symspellpy
"""

import threading
import weakref
from typing import List, Optional, Tuple

from symspellpy import SymSpell, Verbosity

from config_logging import get_logger

from .dictionary import Dictionary
from .language import normalize

logger = get_logger('spellcore.suggestions')

DEFAULT_FREQUENCY = 1


def match_case(original: str, suggestion: str) -> str:
    """Copy the capitalization pattern of original onto suggestion."""
    if not original or not suggestion:
        return suggestion
    if len(original) > 1 and original.isupper():
        return suggestion.upper()
    if original[0].isupper():
        return suggestion[0].upper() + suggestion[1:]
    return suggestion


class SuggestionGenerator:
    """Builds and caches one SymSpell index per dictionary."""

    def __init__(self, max_edit_distance: int = 2, prefix_length: int = 7):
        """
        Args:
            max_edit_distance: Maximum edit distance for corrections (1-3)
            prefix_length: Length of prefix used by the SymSpell index
        """
        self.max_edit_distance = max_edit_distance
        self.prefix_length = prefix_length
        self._indexes = weakref.WeakKeyDictionary()
        self._lock = threading.Lock()

    def _build_index(self, dictionary: Dictionary) -> SymSpell:
        sym_spell = SymSpell(
            max_dictionary_edit_distance=self.max_edit_distance,
            prefix_length=self.prefix_length
        )
        frequencies = dictionary.frequencies
        for word in dictionary.words:
            sym_spell.create_dictionary_entry(
                word, max(frequencies.get(word, DEFAULT_FREQUENCY), DEFAULT_FREQUENCY))
        return sym_spell

    def index_for(self, dictionary: Dictionary) -> SymSpell:
        """SymSpell index for the dictionary's current revision."""
        with self._lock:
            entry = self._indexes.get(dictionary)
            if entry is not None and entry[0] == dictionary.revision:
                return entry[1]
            revision = dictionary.revision
            sym_spell = self._build_index(dictionary)
            self._indexes[dictionary] = (revision, sym_spell)
            logger.debug("SymSpell index built", language=dictionary.language.code,
                         word_count=dictionary.word_count, revision=revision)
            return sym_spell

    def candidates(self, token: str, dictionary: Dictionary) -> List[Tuple[str, int, int]]:
        """(term, distance, count) for every dictionary word within range, unranked."""
        norm = normalize(token, dictionary.language)
        if not norm:
            return []
        sym_spell = self.index_for(dictionary)
        results = sym_spell.lookup(
            norm,
            Verbosity.ALL,
            max_edit_distance=self.max_edit_distance,
            include_unknown=False
        )
        return [(item.term, item.distance, item.count)
                for item in results if item.term != norm]

    def suggest(self, token: str, dictionary: Dictionary,
                max_suggestions: int = 5) -> List[str]:
        """
        Up to max_suggestions corrections for token, best first.

        The exact match is never returned; an empty list is a valid answer.
        """
        if max_suggestions <= 0 or not token:
            return []
        norm = normalize(token, dictionary.language)
        ranked = sorted(
            self.candidates(token, dictionary),
            key=lambda c: (c[1], -c[2], abs(len(c[0]) - len(norm)), c[0])
        )

        suggestions: List[str] = []
        seen = set()
        for term, _distance, _count in ranked:
            cased = match_case(token, term)
            if cased in seen or cased == token:
                continue
            seen.add(cased)
            suggestions.append(cased)
            if len(suggestions) >= max_suggestions:
                break
        return suggestions

    def invalidate(self, dictionary: Optional[Dictionary] = None):
        with self._lock:
            if dictionary is None:
                self._indexes.clear()
            else:
                self._indexes.pop(dictionary, None)
