"""
Language Catalog
================
Closed catalog of supported languages, per-language normalization, and
lightweight language detection from sample text.

Detection is a common-word hit-rate heuristic plus a CJK code point ratio.
It is meant to pick a dictionary, not to be a general language identifier.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import regex as re


@dataclass(frozen=True, eq=False)
class Language:
    """A language tag. Equality and hashing use the code only."""
    code: str
    name: str
    is_cjk: bool = False
    is_custom: bool = False

    def __eq__(self, other):
        if not isinstance(other, Language):
            return NotImplemented
        return self.code == other.code

    def __hash__(self):
        return hash(self.code)

    def __repr__(self):
        return f"Language({self.code!r})"

    @property
    def is_auto(self) -> bool:
        return self.code == 'auto'

    @classmethod
    def custom(cls, code: str) -> 'Language':
        """Language for a user-supplied dictionary code."""
        code = code.strip().lower()
        if not code:
            raise ValueError("Custom language code must not be empty")
        return cls(code=code, name=f"Custom ({code})", is_custom=True)

    @classmethod
    def from_code(cls, code: str, allow_custom: bool = False) -> 'Language':
        """
        Look up a language by 3-letter code, 2-letter code or English name.

        Unknown codes map to English unless allow_custom is set, in which
        case a custom language with that code is returned.
        """
        if isinstance(code, Language):
            return code
        key = (code or '').strip().lower()
        found = _ALIASES.get(key)
        if found is not None:
            return found
        if allow_custom and key:
            return cls.custom(key)
        return ENGLISH

    def dictionary_filename(self, extension: str = 'txt') -> Optional[str]:
        """Base word list filename, e.g. ``dictionary(eng).txt``."""
        if self.is_auto:
            return None
        return f"dictionary({self.code}).{extension.lstrip('.')}"

    def to_dict(self):
        return {
            'code': self.code,
            'name': self.name,
            'is_cjk': self.is_cjk,
            'is_custom': self.is_custom,
        }


ENGLISH = Language('eng', 'English')
AFRIKAANS = Language('afr', 'Afrikaans')
FRENCH = Language('fra', 'French')
SPANISH = Language('spa', 'Spanish')
GERMAN = Language('deu', 'German')
CHINESE = Language('zho', 'Chinese', is_cjk=True)
ITALIAN = Language('ita', 'Italian')
PORTUGUESE = Language('por', 'Portuguese')
RUSSIAN = Language('rus', 'Russian')
JAPANESE = Language('jpn', 'Japanese', is_cjk=True)
KOREAN = Language('kor', 'Korean', is_cjk=True)
AUTO_DETECT = Language('auto', 'Auto-detect')

_CATALOG = (
    ENGLISH, AFRIKAANS, FRENCH, SPANISH, GERMAN, CHINESE,
    ITALIAN, PORTUGUESE, RUSSIAN, JAPANESE, KOREAN, AUTO_DETECT,
)

_ALIASES = {}
for _lang, _aliases in (
    (ENGLISH, ('eng', 'en', 'english')),
    (AFRIKAANS, ('afr', 'af', 'afrikaans')),
    (FRENCH, ('fra', 'fr', 'french')),
    (SPANISH, ('spa', 'es', 'spanish')),
    (GERMAN, ('deu', 'de', 'german')),
    (CHINESE, ('zho', 'zh', 'chinese')),
    (ITALIAN, ('ita', 'it', 'italian')),
    (PORTUGUESE, ('por', 'pt', 'portuguese')),
    (RUSSIAN, ('rus', 'ru', 'russian')),
    (JAPANESE, ('jpn', 'ja', 'japanese')),
    (KOREAN, ('kor', 'ko', 'korean')),
    (AUTO_DETECT, ('auto', 'autodetect', 'auto-detect')),
):
    for _alias in _aliases:
        _ALIASES[_alias] = _lang


def all_languages() -> List[Language]:
    """Catalog in declaration order, AutoDetect last."""
    return list(_CATALOG)


def normalize(word: str, language: Language) -> str:
    """Canonical stored form: lower-cased for Latin scripts, verbatim for CJK."""
    word = word.strip()
    if language.is_cjk:
        return word
    return word.lower()


# =============================================================================
# DETECTION
# =============================================================================

COMMON_WORDS = {
    ENGLISH: frozenset([
        "the", "and", "that", "have", "for", "with", "this", "from", "they", "would",
        "will", "what", "there", "their", "about", "which", "when", "who", "them",
        "some", "time", "could", "people", "other", "than", "then", "now", "look",
        "only", "come", "its", "over", "think", "also", "back", "after", "use",
        "two", "how", "our", "work", "first", "well", "way", "even", "new", "want",
    ]),
    AFRIKAANS: frozenset([
        "die", "en", "het", "vir", "om", "wat", "in", "is", "jy", "ek",
        "nie", "sy", "ons", "hulle", "daar", "maar", "my", "haar", "so", "by",
        "kan", "van", "dit", "te", "met", "hy", "was", "op", "een",
        "toe", "gaan", "moet", "nog", "al", "uit", "sê", "baie", "hier",
        "wees", "gewees", "word", "waar", "kom", "laat", "dink", "sien",
    ]),
    FRENCH: frozenset([
        "le", "la", "et", "que", "dans", "un", "est", "pour", "des", "les",
        "une", "pas", "son", "avec", "il", "elle", "qui", "mais", "nous",
        "vous", "ce", "se", "aux", "du", "de", "par", "sur", "sont",
        "cette", "été", "plus", "pouvoir", "comme", "tout", "faire", "me", "même",
        "sans", "autre", "aussi", "bien", "si", "y", "ou", "où", "lui", "donc",
    ]),
    SPANISH: frozenset([
        "el", "la", "de", "que", "y", "a", "en", "un", "ser", "se",
        "no", "haber", "por", "con", "su", "para", "como", "estar", "tener", "le",
        "lo", "todo", "pero", "más", "hacer", "o", "poder", "decir", "este", "ir",
        "otro", "ese", "si", "me", "ya", "ver", "porque", "dar", "cuando",
        "él", "muy", "sin", "vez", "mucho", "saber", "qué", "sobre", "mi", "alguno",
    ]),
    GERMAN: frozenset([
        "der", "die", "und", "in", "den", "von", "zu", "das", "mit", "sich",
        "des", "auf", "für", "ist", "im", "dem", "nicht", "ein", "eine",
        "als", "auch", "es", "an", "werden", "aus", "er", "hat", "dass", "sie",
        "nach", "wird", "bei", "einer", "um", "am", "sind", "noch", "wie",
    ]),
}

DETECTION_SAMPLE_WORDS = 50
MIN_DETECTION_SCORE = 10.0
DETECTION_CONFIDENCE = 25.0
CJK_RATIO_THRESHOLD = 0.3

CJK_CHAR = re.compile(r'[\p{Han}\p{Hiragana}\p{Katakana}\p{Hangul}]')
KANA_CHAR = re.compile(r'[\p{Hiragana}\p{Katakana}]')
HANGUL_CHAR = re.compile(r'\p{Hangul}')


def detect_from_text(text: str) -> List[Tuple[Language, float]]:
    """
    Score candidate languages for a text sample.

    Returns:
        Up to three (language, score) pairs, best first. Scores are
        percentages of the first 50 words found in each language's
        common-word list.
    """
    words = text.lower().split()
    if len(words) < 3:
        return [(ENGLISH, 100.0)]

    sample = words[:DETECTION_SAMPLE_WORDS]
    scores = {}
    for language, common in COMMON_WORDS.items():
        matches = sum(1 for word in sample if word in common)
        score = matches / len(sample) * 100.0
        if score > MIN_DETECTION_SCORE:
            scores[language] = score

    cjk_count = len(CJK_CHAR.findall(text))
    if cjk_count / max(len(text), 1) > CJK_RATIO_THRESHOLD:
        # Japanese text mixes kanji with kana, so kana decides first
        if KANA_CHAR.search(text):
            scores[JAPANESE] = 100.0
        elif HANGUL_CHAR.search(text):
            scores[KOREAN] = 100.0
        else:
            scores[CHINESE] = 100.0

    if not scores:
        return [(ENGLISH, 80.0)]

    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return ranked[:3]


def detect_language(text: str) -> Language:
    """Best guess for text, English when unsure."""
    if not text or not text.strip():
        return ENGLISH
    results = detect_from_text(text)
    if results and results[0][1] > DETECTION_CONFIDENCE:
        return results[0][0]
    return ENGLISH


def resolve_language(language: Optional[Language], text: str = '') -> Language:
    """Concrete language for a check; AutoDetect is replaced by detection."""
    if language is None:
        return ENGLISH
    if isinstance(language, str):
        language = Language.from_code(language, allow_custom=True)
    if language.is_auto:
        return detect_language(text)
    return language
