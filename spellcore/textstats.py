"""
Text Statistics
===============
Word extraction, frequency counts, reading time and the
"create dictionary from text" helper.
"""

import math
from collections import Counter
from pathlib import Path
from typing import List, Tuple

from config_logging import get_logger, EmptyDictionaryError

from .dictionary import write_word_file, check_format
from .language import Language, ENGLISH, CJK_CHAR, normalize
from .tokenizer import PROSE_PATTERN, CJK_PATTERN, CODE_PATTERN

logger = get_logger('spellcore.textstats')

WORDS_PER_MINUTE = 200

CODE_SYMBOLS = frozenset([
    "var", "val", "fn", "def", "func", "cls", "obj", "arr", "vec", "str",
    "int", "num", "bool", "float", "double", "char", "byte", "ptr", "ref",
    "mut", "const", "static", "pub", "priv", "prot", "async", "await",
    "try", "catch", "throw", "null", "nil", "none", "some", "ok", "err",
    "true", "false", "self", "this", "super", "new", "del", "inc", "dec",
])


def _is_code_noise(word: str) -> bool:
    if word.lower() in CODE_SYMBOLS:
        return True
    if '_' in word and len(word) > 5:
        return True
    return any(c.isupper() for c in word) and len(word) > 3


def extract_words(text: str, is_cjk: bool = False, is_code: bool = False) -> List[str]:
    """Words in text, lower-cased (CJK runs are kept verbatim)."""
    if is_cjk:
        return [m.group().lower() for m in CJK_PATTERN.finditer(text)]
    if is_code:
        return [m.group().lower() for m in CODE_PATTERN.finditer(text)
                if len(m.group()) > 2 and not _is_code_noise(m.group())]
    return [m.group().lower() for m in PROSE_PATTERN.finditer(text)]


def word_frequency(text: str, is_cjk: bool = False, is_code: bool = False) -> Counter:
    return Counter(extract_words(text, is_cjk, is_code))


def most_common_words(freq, n: int) -> List[Tuple[str, int]]:
    """Top n by count, ties broken alphabetically."""
    return sorted(freq.items(), key=lambda item: (-item[1], item[0]))[:n]


def reading_time(text: str) -> Tuple[int, int]:
    """(minutes, seconds) at 200 words per minute."""
    words = len(extract_words(text))
    minutes, remainder = divmod(words, WORDS_PER_MINUTE)
    return minutes, remainder * 60 // WORDS_PER_MINUTE


def calculate_accuracy(correct: int, total: int) -> float:
    """Percentage correct, rounded half up; 100.0 for an empty document."""
    if total <= 0:
        return 100.0
    return float(math.floor(correct / total * 100.0 + 0.5))


def sanitize_word(word: str) -> str:
    """Keep alphanumerics, plus apostrophes and hyphens between two letters."""
    chars = word.strip()
    result = []
    for i, c in enumerate(chars):
        if c.isalnum():
            result.append(c)
        elif c in "'-" and 0 < i < len(chars) - 1 \
                and chars[i - 1].isalpha() and chars[i + 1].isalpha():
            result.append(c)
    return ''.join(result)


def is_valid_word(word: str) -> bool:
    word = word.strip()
    return len(word) >= 2 and any(c.isalpha() for c in word)


def is_cjk_text(text: str) -> bool:
    return CJK_CHAR.search(text) is not None


def build_dictionary(text: str, output_path, language: Language = ENGLISH,
                     min_length: int = 3) -> int:
    """
    Write a word list built from text to a .csv (word,frequency) or .txt file.

    Returns:
        Number of distinct words written

    Raises:
        UnsupportedFormatError: output is neither .csv nor .txt
        EmptyDictionaryError: no word in text qualifies
    """
    output_path = Path(output_path)
    check_format(output_path)

    counts = Counter()
    for word in extract_words(text, is_cjk=language.is_cjk):
        word = normalize(sanitize_word(word), language)
        if len(word) >= min_length and is_valid_word(word):
            counts[word] += 1

    if not counts:
        raise EmptyDictionaryError("No words qualified for the dictionary",
                                   path=str(output_path), min_length=min_length)

    written = write_word_file(output_path, counts.keys(), dict(counts))
    logger.info("Dictionary built from text", path=str(output_path),
                language=language.code, word_count=written)
    return written
