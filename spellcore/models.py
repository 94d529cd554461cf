"""
Spell Check Models
==================
Data classes for per-token and per-document spell check results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

from .language import Language, ENGLISH


class WordCategory(str, Enum):
    """Semantic category assigned to a token before resolution."""
    NORMAL = 'normal'
    CODE_IDENTIFIER = 'code_identifier'
    ACRONYM = 'acronym'
    PROPER_NOUN = 'proper_noun'
    TECHNICAL_TERM = 'technical_term'


@dataclass(frozen=True)
class WordCheck:
    """
    Result for one token.

    Attributes:
        word: Normalized text (lower-cased unless the language is CJK)
        original: Token as it appears in the source
        start: 0-based character offset within the line
        end: 0-based exclusive end offset within the line
        line: 1-based line number
        column: 1-based column (start + 1)
        is_correct: False only for tokens flagged at or above the threshold
        confidence: How sure we are that an incorrect token is a typo (0-1)
        category: Classifier category
        suggestions: Ranked corrections, most likely first
    """
    word: str
    original: str
    start: int
    end: int
    line: int
    column: int
    is_correct: bool
    confidence: float
    category: WordCategory = WordCategory.NORMAL
    suggestions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'word': self.word,
            'original': self.original,
            'start': self.start,
            'end': self.end,
            'line': self.line,
            'column': self.column,
            'is_correct': self.is_correct,
            'confidence': round(self.confidence, 4),
            'category': self.category.value,
            'suggestions': list(self.suggestions),
        }


@dataclass(frozen=True)
class DocumentAnalysis:
    """
    Aggregate result for one analyze call.

    words keeps document order (line, then offset) even when lines were
    checked in parallel.
    """
    total_words: int
    misspelled_words: int
    accuracy: float
    words: Tuple[WordCheck, ...] = ()
    suggestions_count: int = 0
    language: Language = ENGLISH
    lines_checked: int = 0
    check_duration_ms: float = 0.0
    likely_code: bool = False
    file_type: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def empty(cls, language: Language = ENGLISH, file_type: Optional[str] = None,
              **metadata) -> 'DocumentAnalysis':
        """Zero totals and 100% accuracy; what callers get when checking fails."""
        return cls(
            total_words=0,
            misspelled_words=0,
            accuracy=100.0,
            language=language,
            file_type=file_type,
            metadata=metadata,
        )

    @property
    def misspellings(self) -> List[WordCheck]:
        return [w for w in self.words if not w.is_correct]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'total_words': self.total_words,
            'misspelled_words': self.misspelled_words,
            'accuracy': self.accuracy,
            'words': [w.to_dict() for w in self.words],
            'suggestions_count': self.suggestions_count,
            'language': self.language.to_dict(),
            'lines_checked': self.lines_checked,
            'check_duration_ms': round(self.check_duration_ms, 2),
            'likely_code': self.likely_code,
            'file_type': self.file_type,
            'metadata': dict(self.metadata),
        }
