"""
Correctness Resolver
====================
Decides whether a classified token is spelled correctly, memoizing the
dictionary and leniency verdicts in a shared cache.
"""

import threading
from typing import Dict, Iterable, Optional, Tuple

from config_logging import get_logger

from .dictionary import Dictionary
from .language import Language, normalize
from .models import WordCategory

logger = get_logger('spellcore.resolver')

MAX_LENIENT_CODE_LENGTH = 15
MIN_LETTER_RATIO = 0.7
MAX_CHAR_REPEATS = 4
SHORT_WORD_LENGTH = 4
VOWELS = frozenset('aeiouyAEIOUY')

CacheKey = Tuple[str, str, str, bool, bool]


def has_repeated_characters(word: str, max_repeats: int = MAX_CHAR_REPEATS) -> bool:
    """True if any character repeats more than max_repeats times in a row."""
    current, count = None, 0
    for c in word:
        if c == current:
            count += 1
            if count > max_repeats:
                return True
        else:
            current, count = c, 1
    return False


def has_vowels(word: str) -> bool:
    return any(c in VOWELS for c in word)


def looks_reasonable(word: str) -> bool:
    """Plausible shape for a proper noun or acronym that isn't in the dictionary."""
    if not word:
        return False
    letters = sum(1 for c in word if c.isalpha())
    return (letters / len(word) > MIN_LETTER_RATIO
            and not has_repeated_characters(word, MAX_CHAR_REPEATS)
            and (len(word) <= SHORT_WORD_LENGTH or has_vowels(word)))


class CorrectnessCache:
    """Thread-safe verdict map. put() keeps the first value stored for a key."""

    def __init__(self):
        self._entries: Dict[CacheKey, bool] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(language: Language, normalized: str, category: WordCategory,
                 is_code_context: bool = False, case_sensitive: bool = False) -> CacheKey:
        return (language.code, normalized, category.value, bool(is_code_context),
                bool(case_sensitive))

    def get(self, key: CacheKey) -> Optional[bool]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: CacheKey, value: bool) -> bool:
        with self._lock:
            return self._entries.setdefault(key, value)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def clear_language(self, language: Language) -> int:
        """Drop every entry for language. Returns the number removed."""
        with self._lock:
            stale = [key for key in self._entries if key[0] == language.code]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Correctness cache entries cleared",
                         language=language.code, removed=len(stale))
        return len(stale)

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._entries


class CorrectnessResolver:
    """
    Resolution order: session/dictionary ignore lists, user-added words,
    the cache, then dictionary membership with category leniency.
    Ignore and user hits are never cached.
    """

    def __init__(self, cache: Optional[CorrectnessCache] = None):
        self.cache = cache if cache is not None else CorrectnessCache()

    def resolve(self, token: str, category: WordCategory, dictionary: Dictionary,
                is_code_context: bool = False, case_sensitive: bool = False,
                session_ignored: Iterable[str] = ()) -> bool:
        language = dictionary.language
        norm = normalize(token, language)

        if norm in session_ignored or token.strip().lower() in session_ignored:
            return True
        if dictionary.is_ignored(norm):
            return True
        if dictionary.is_user_word(norm):
            return True

        key = self.cache.make_key(language, norm, category, is_code_context, case_sensitive)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        verdict = self._lookup(token, category, dictionary, is_code_context, case_sensitive)
        return self.cache.put(key, verdict)

    @staticmethod
    def _lookup(token: str, category: WordCategory, dictionary: Dictionary,
                is_code_context: bool, case_sensitive: bool) -> bool:
        if dictionary.contains(token, case_sensitive=case_sensitive,
                               is_code_context=is_code_context):
            return True
        if category in (WordCategory.PROPER_NOUN, WordCategory.ACRONYM):
            return looks_reasonable(token)
        if category == WordCategory.CODE_IDENTIFIER:
            return len(token) <= MAX_LENIENT_CODE_LENGTH
        return False
