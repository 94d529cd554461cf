"""
Tokenizer
=========
Splits lines into word tokens. One of three patterns is picked per
document: CJK, source code, or prose.
"""

from typing import Iterator, NamedTuple, Optional

import regex as re

from .language import Language

MIN_TOKEN_LENGTH = 2
MIN_CODE_TOKEN_LENGTH = 3

# Letters (with combining marks) joined by embedded apostrophes or hyphens
PROSE_PATTERN = re.compile(r"\b\p{L}[\p{L}\p{M}]*(?:['’-]\p{L}[\p{L}\p{M}]*)*\b")

CJK_PATTERN = re.compile(
    r"[\p{Han}\p{Hiragana}\p{Katakana}\p{Hangul}]+"
    r"|\p{Latin}+(?:['’-]\p{Latin}+)*"
)

# Identifier-shaped runs; digits and underscores stay inside the token
CODE_PATTERN = re.compile(r"\b[A-Za-z_][A-Za-z0-9_]*(?:['-][A-Za-z0-9_]+)*")

CODE_EXTENSIONS = frozenset([
    'rs', 'py', 'js', 'ts', 'jsx', 'tsx', 'java', 'c', 'cc', 'cpp', 'h', 'hpp',
    'go', 'rb', 'php', 'cs', 'swift', 'kt', 'scala', 'hs', 'lua', 'pl', 'r', 'm',
    'f', 'f90', 'f95', 'f03', 'f08', 'v', 'sv', 'vhd', 'vhdl', 'asm', 's',
    'sh', 'bash', 'zsh', 'fish', 'ps1', 'bat', 'cmd', 'yml', 'yaml', 'toml',
    'json', 'xml', 'html', 'htm', 'css', 'scss', 'less',
])

CODE_INDICATORS = (
    '{', '}', '->', '=>', 'fn ', 'def ', 'function ', 'class ', 'import ',
    'export ', '#include', 'pub ', 'let ', 'const ', 'var ', 'return ',
)

SENTENCE_END = ('.', '!', '?')


class Token(NamedTuple):
    text: str
    start: int
    end: int


def is_code_file(filename: Optional[str]) -> bool:
    """True when the filename extension is a known source-code extension."""
    if not filename or '.' not in filename:
        return False
    ext = filename.rsplit('.', 1)[-1].lower()
    return ext in CODE_EXTENSIONS


def _is_code_line(line: str) -> bool:
    stripped = line.strip()
    if ';' in stripped and not stripped.startswith('//'):
        return True
    return any(indicator in stripped for indicator in CODE_INDICATORS)


def is_likely_code(text: str) -> bool:
    """Heuristic over the first ten lines; two indicator lines mean code."""
    lines = text.splitlines()
    if len(lines) < 3:
        return False
    return sum(1 for line in lines[:10] if _is_code_line(line)) >= 2


def starts_sentence(line: str, start: int) -> bool:
    """True if the token at start opens the line or follows . ! or ?"""
    before = line[:start].rstrip()
    return not before or before.endswith(SENTENCE_END)


class Tokenizer:
    """Pattern-bound line tokenizer."""

    def __init__(self, pattern, min_length: int = MIN_TOKEN_LENGTH, kind: str = 'prose'):
        self.pattern = pattern
        self.min_length = max(min_length, MIN_TOKEN_LENGTH)
        self.kind = kind

    @classmethod
    def for_context(cls, language: Language, is_code: bool = False) -> 'Tokenizer':
        if language.is_cjk:
            return cls(CJK_PATTERN, kind='cjk')
        if is_code:
            return cls(CODE_PATTERN, MIN_CODE_TOKEN_LENGTH, kind='code')
        return cls(PROSE_PATTERN, kind='prose')

    def tokenize(self, line: str) -> Iterator[Token]:
        """Yield tokens for one line; offsets are 0-based character offsets."""
        for match in self.pattern.finditer(line):
            text = match.group()
            if len(text) < self.min_length:
                continue
            yield Token(text, match.start(), match.end())

    def __repr__(self):
        return f"Tokenizer({self.kind})"
