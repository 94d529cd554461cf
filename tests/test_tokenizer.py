"""
Tests for Tokenizer
===================
Pattern selection, offsets and the code-detection heuristics.
"""

import pytest

from spellcore.language import ENGLISH, CHINESE, FRENCH
from spellcore.tokenizer import (
    Tokenizer, Token, is_code_file, is_likely_code, starts_sentence,
)


def texts(tokenizer, line):
    return [t.text for t in tokenizer.tokenize(line)]


class TestProsePattern:
    """Tests for prose tokenization."""

    def test_offsets(self):
        tokens = list(Tokenizer.for_context(ENGLISH).tokenize("Hello big world"))
        assert tokens[0] == Token("Hello", 0, 5)
        assert tokens[2] == Token("world", 10, 15)

    def test_embedded_apostrophes_and_hyphens(self):
        tokenizer = Tokenizer.for_context(ENGLISH)
        assert texts(tokenizer, "don't re-enter 'quoted'") == ["don't", "re-enter", "quoted"]

    def test_short_tokens_dropped(self):
        tokenizer = Tokenizer.for_context(ENGLISH)
        assert texts(tokenizer, "a I to be") == ["to", "be"]

    def test_digits_split_words(self):
        tokenizer = Tokenizer.for_context(ENGLISH)
        assert texts(tokenizer, "abc 123 de4") == ["abc"]

    def test_unicode_letters(self):
        tokenizer = Tokenizer.for_context(FRENCH)
        assert texts(tokenizer, "été déjà") == ["été", "déjà"]

    def test_restartable(self):
        tokenizer = Tokenizer.for_context(ENGLISH)
        line = "one two three"
        assert list(tokenizer.tokenize(line)) == list(tokenizer.tokenize(line))


class TestCodePattern:
    """Tests for code tokenization."""

    def test_identifiers_kept_whole(self):
        tokenizer = Tokenizer.for_context(ENGLISH, is_code=True)
        assert texts(tokenizer, "let get_value_t = 1;") == ["let", "get_value_t"]

    def test_minimum_three_characters(self):
        tokenizer = Tokenizer.for_context(ENGLISH, is_code=True)
        assert texts(tokenizer, "fn go(x) { ok }") == []

    def test_leading_underscore(self):
        tokenizer = Tokenizer.for_context(ENGLISH, is_code=True)
        assert texts(tokenizer, "self._private = None") == ["self", "_private", "None"]


class TestCjkPattern:
    """Tests for CJK tokenization."""

    def test_han_runs_and_latin(self):
        tokenizer = Tokenizer.for_context(CHINESE)
        assert texts(tokenizer, "我们 use 中文字") == ["我们", "use", "中文字"]

    def test_single_han_dropped(self):
        tokenizer = Tokenizer.for_context(CHINESE)
        assert texts(tokenizer, "我 是") == []


class TestCodeDetection:
    """Tests for is_code_file and is_likely_code."""

    @pytest.mark.parametrize("name", ["main.rs", "app.PY", "x.tsx", "deploy.yaml"])
    def test_code_extensions(self, name):
        assert is_code_file(name)

    @pytest.mark.parametrize("name", ["README.md", "paper.tex", "notes.txt", "Makefile", None, ""])
    def test_non_code(self, name):
        assert not is_code_file(name)

    def test_likely_code(self):
        text = "fn main() {\n    let x = 1;\n    println!(\"{}\", x);\n}\n"
        assert is_likely_code(text)

    def test_prose_is_not_code(self):
        text = "Dear team,\nThe meeting is moved.\nSee you then.\n"
        assert not is_likely_code(text)

    def test_needs_three_lines(self):
        assert not is_likely_code("let a = 1;\nlet b = 2;")

    def test_comment_semicolon_ignored(self):
        text = "// first; note\n// second; note\nplain words\n"
        assert not is_likely_code(text)


class TestSentenceStart:
    """Tests for starts_sentence."""

    def test_first_token(self):
        assert starts_sentence("Teh fox", 0)

    def test_after_period(self):
        line = "It ended. Then more"
        assert starts_sentence(line, line.index("Then"))

    def test_mid_sentence(self):
        line = "I met Alice today"
        assert not starts_sentence(line, line.index("Alice"))
