"""
Tests for Confidence Scorer
===========================
"""

import pytest

from spellcore.models import WordCategory
from spellcore.scorer import calculate_confidence, CATEGORY_WEIGHTS


class TestCalculateConfidence:
    """Tests for calculate_confidence()."""

    def test_correct_is_one(self):
        for category in WordCategory:
            assert calculate_confidence("anything", category, True) == 1.0

    @pytest.mark.parametrize("category,expected", [
        (WordCategory.NORMAL, 0.6),
        (WordCategory.CODE_IDENTIFIER, 0.15),
        (WordCategory.ACRONYM, 0.2),
        (WordCategory.PROPER_NOUN, 0.3),
        (WordCategory.TECHNICAL_TERM, 0.4),
    ])
    def test_category_weights(self, category, expected):
        assert calculate_confidence("qwxz", category, False) == pytest.approx(expected)

    def test_short_word(self):
        assert calculate_confidence("qx", WordCategory.NORMAL, False) == pytest.approx(0.18)

    def test_long_word(self):
        word = "q" * 21
        assert calculate_confidence(word, WordCategory.NORMAL, False) == pytest.approx(0.42)

    def test_compound_bonus(self):
        assert calculate_confidence("qw-xz", WordCategory.NORMAL, False) == pytest.approx(0.66)

    def test_typo_pattern_bonus(self):
        assert calculate_confidence("recieve", WordCategory.NORMAL, False) == pytest.approx(0.78)

    def test_all_bonuses_clamped(self):
        value = calculate_confidence("ie_tion", WordCategory.NORMAL, False)
        assert value == pytest.approx(0.6 * 1.1 * 1.3)
        assert 0.0 <= value <= 1.0

    def test_deterministic_and_bounded(self):
        words = ["a", "zz", "teh", "recieve", "state-of-the-art", "x" * 30, "snake_case_t"]
        for word in words:
            for category in CATEGORY_WEIGHTS:
                first = calculate_confidence(word, category, False)
                assert first == calculate_confidence(word, category, False)
                assert 0.0 <= first <= 1.0
