"""
Word Classifier
===============
Assigns a WordCategory to a token. Rules are evaluated in table order and
the first match wins, so an all-caps acronym is never read as a proper noun.
"""

from typing import NamedTuple

from .models import WordCategory

MAX_ACRONYM_LENGTH = 6
MIN_TECHNICAL_TERM_LENGTH = 6

COMMON_CAPITALIZED = frozenset(["I", "A", "The", "And", "But", "Or", "For", "Nor", "Yet", "So"])

CODE_PREFIXES = ('get_', 'set_', 'is_', 'has_')
CODE_SUFFIXES = ('_t', '_ptr', 'Handler', 'Service', 'Manager', 'Factory')


class TokenContext(NamedTuple):
    token: str
    is_code_context: bool
    sentence_start: bool


def _mixed_case(token: str) -> bool:
    return any(c.isupper() for c in token) and any(c.islower() for c in token)


def _is_acronym(ctx: TokenContext) -> bool:
    return (len(ctx.token) <= MAX_ACRONYM_LENGTH
            and all(c.isupper() or c.isdigit() or c == '_' for c in ctx.token))


def _is_proper_noun(ctx: TokenContext) -> bool:
    token = ctx.token
    if not token[0].isupper() or len(token) <= 2 or token in COMMON_CAPITALIZED:
        return False
    # Sentence-initial capitals are grammatical in prose
    if ctx.sentence_start and not ctx.is_code_context:
        return False
    return True


def _is_code_identifier(ctx: TokenContext) -> bool:
    token = ctx.token
    if not ctx.is_code_context:
        return False
    return ('_' in token
            or _mixed_case(token)
            or token.startswith(('get_', 'set_'))
            or token.endswith(('_t', '_ptr')))


def _is_technical_term(ctx: TokenContext) -> bool:
    return '-' in ctx.token and len(ctx.token) >= MIN_TECHNICAL_TERM_LENGTH


CLASSIFICATION_RULES = (
    (WordCategory.ACRONYM, _is_acronym),
    (WordCategory.PROPER_NOUN, _is_proper_noun),
    (WordCategory.CODE_IDENTIFIER, _is_code_identifier),
    (WordCategory.TECHNICAL_TERM, _is_technical_term),
)


def classify(token: str, is_code_context: bool = False,
             sentence_start: bool = False) -> WordCategory:
    """Category of token; Normal when no rule matches."""
    if not token:
        return WordCategory.NORMAL
    ctx = TokenContext(token, is_code_context, sentence_start)
    for category, rule in CLASSIFICATION_RULES:
        if rule(ctx):
            return category
    return WordCategory.NORMAL


def looks_like_code_identifier(token: str) -> bool:
    """
    Shape test used by dictionary lookups in code context.

    Independent of classify(): an inner underscore, mixed case that is not
    all-caps, or a common accessor prefix / type-ish suffix.
    """
    if not token:
        return False
    if '_' in token.strip('_'):
        return True
    if _mixed_case(token) and not token.isupper():
        return True
    return token.startswith(CODE_PREFIXES) or token.endswith(CODE_SUFFIXES)
