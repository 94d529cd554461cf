"""
spellcore v1.0.0
================
Spell checking engine for prose and source code.

Features:
- Language catalog with common-word and CJK detection
- Per-language dictionaries with user-added and ignored words
- Token classification (acronyms, proper nouns, code identifiers)
- Confidence scoring that keeps code and acronym noise out of accuracy
- SymSpell-backed correction suggestions
- Flask JSON API

Author: spellcore
"""

from .language import (
    Language,
    all_languages,
    normalize,
    detect_from_text,
    detect_language,
    resolve_language,
    ENGLISH,
    AUTO_DETECT,
)
from .models import WordCategory, WordCheck, DocumentAnalysis
from .dictionary import Dictionary, DictionaryManager
from .tokenizer import Tokenizer, Token, is_code_file, is_likely_code
from .classifier import classify, looks_like_code_identifier
from .resolver import CorrectnessCache, CorrectnessResolver
from .scorer import calculate_confidence
from .suggestions import SuggestionGenerator
from .analyzer import SpellChecker, analyze

__version__ = "1.0.0"
__all__ = [
    'Language',
    'all_languages',
    'normalize',
    'detect_from_text',
    'detect_language',
    'resolve_language',
    'ENGLISH',
    'AUTO_DETECT',
    'WordCategory',
    'WordCheck',
    'DocumentAnalysis',
    'Dictionary',
    'DictionaryManager',
    'Tokenizer',
    'Token',
    'is_code_file',
    'is_likely_code',
    'classify',
    'looks_like_code_identifier',
    'CorrectnessCache',
    'CorrectnessResolver',
    'calculate_confidence',
    'SuggestionGenerator',
    'SpellChecker',
    'analyze',
]
