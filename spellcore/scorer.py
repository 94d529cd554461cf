"""
Confidence Scorer
=================
Heuristic likelihood that a token which failed resolution is a real typo.
"""

from .models import WordCategory

BASE_CONFIDENCE = 0.5

CATEGORY_WEIGHTS = {
    WordCategory.NORMAL: 1.2,
    WordCategory.CODE_IDENTIFIER: 0.3,  # code is usually intentional
    WordCategory.ACRONYM: 0.4,
    WordCategory.PROPER_NOUN: 0.6,
    WordCategory.TECHNICAL_TERM: 0.8,
}

SHORT_WORD_LENGTH = 3
SHORT_WORD_FACTOR = 0.3
LONG_WORD_LENGTH = 20
LONG_WORD_FACTOR = 0.7
COMPOUND_FACTOR = 1.1
TYPO_PATTERN_FACTOR = 1.3

# Substrings that are commonly misspelled
COMMON_TYPO_PATTERNS = ("ie", "ei", "tion", "sion", "able", "ible", "ment", "ness", "ough")


def has_common_typo_patterns(word: str) -> bool:
    return any(pattern in word for pattern in COMMON_TYPO_PATTERNS)


def calculate_confidence(word: str, category: WordCategory, is_correct: bool) -> float:
    """Confidence in [0, 1]; always 1.0 for correct tokens."""
    if is_correct:
        return 1.0

    confidence = BASE_CONFIDENCE * CATEGORY_WEIGHTS.get(category, 1.0)

    if len(word) < SHORT_WORD_LENGTH:
        confidence *= SHORT_WORD_FACTOR
    elif len(word) > LONG_WORD_LENGTH:
        confidence *= LONG_WORD_FACTOR

    if '_' in word or '-' in word:
        confidence *= COMPOUND_FACTOR

    if has_common_typo_patterns(word):
        confidence *= TYPO_PATTERN_FACTOR

    return min(max(confidence, 0.0), 1.0)
