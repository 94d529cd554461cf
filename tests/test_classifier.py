"""
Tests for Word Classifier
=========================
Rule priority and the standalone code-identifier shape test.
"""

import pytest

from spellcore.classifier import classify, looks_like_code_identifier, CLASSIFICATION_RULES
from spellcore.models import WordCategory


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize("token", ["API", "HTTP2", "MAX_ID", "GPU"])
    def test_acronyms(self, token):
        assert classify(token) == WordCategory.ACRONYM

    def test_acronym_beats_proper_noun(self):
        # starts with a capital and is longer than 2, but all caps wins
        assert classify("NASA") == WordCategory.ACRONYM

    def test_long_all_caps_is_proper_noun(self):
        assert classify("ABCDEFGH") == WordCategory.PROPER_NOUN

    def test_proper_noun(self):
        assert classify("London") == WordCategory.PROPER_NOUN

    @pytest.mark.parametrize("token", ["The", "And", "For"])
    def test_common_capitalized_words(self, token):
        assert classify(token) == WordCategory.NORMAL

    def test_sentence_start_is_not_proper_noun(self):
        assert classify("Teh", sentence_start=True) == WordCategory.NORMAL
        assert classify("Teh") == WordCategory.PROPER_NOUN

    def test_code_identifier_only_in_code(self):
        assert classify("get_value_t", is_code_context=True) == WordCategory.CODE_IDENTIFIER
        assert classify("camelCase", is_code_context=True) == WordCategory.CODE_IDENTIFIER
        assert classify("camelCase") == WordCategory.NORMAL

    def test_capitalized_identifier_in_code_is_proper_noun(self):
        assert classify("HttpClient", is_code_context=True) == WordCategory.PROPER_NOUN

    def test_technical_term(self):
        assert classify("state-of-the-art") == WordCategory.TECHNICAL_TERM
        assert classify("re-do") == WordCategory.NORMAL

    def test_normal(self):
        assert classify("word") == WordCategory.NORMAL
        assert classify("") == WordCategory.NORMAL

    def test_rule_table_order(self):
        order = [category for category, _ in CLASSIFICATION_RULES]
        assert order == [WordCategory.ACRONYM, WordCategory.PROPER_NOUN,
                         WordCategory.CODE_IDENTIFIER, WordCategory.TECHNICAL_TERM]


class TestLooksLikeCodeIdentifier:
    """Tests for looks_like_code_identifier()."""

    @pytest.mark.parametrize("token", [
        "snake_case", "camelCase", "getName", "is_valid", "RequestHandler",
        "size_t", "node_ptr", "UserService",
    ])
    def test_identifiers(self, token):
        assert looks_like_code_identifier(token)

    @pytest.mark.parametrize("token", ["word", "WORD", "_private", "__init__", "HTTP2", ""])
    def test_non_identifiers(self, token):
        assert not looks_like_code_identifier(token)
