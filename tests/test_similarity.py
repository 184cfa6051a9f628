"""Test text similarity"""

import pytest

from chart_matcher.matching.similarity import clean_text, levenshtein, similarity


class TestCleanText:
    """Test lower-casing and stop-word removal"""

    def test_lowercases(self):
        assert clean_text("GOTYE") == "gotye"

    def test_removes_whole_word_stop_words(self):
        assert clean_text("Somebody That I Used to Know") == "somebody that i used  know"

    def test_keeps_stop_words_inside_words(self):
        """'an' in 'another' and 'or' in 'world' are not whole words"""
        assert clean_text("Another World") == "another world"

    def test_strips_outer_whitespace(self):
        assert clean_text("  The Beatles  ") == "beatles"

    def test_only_stop_words(self):
        assert clean_text("The And Of") == ""


class TestLevenshtein:
    """Test edit distance"""

    def test_classic_example(self):
        assert levenshtein("kitten", "sitting") == 3

    def test_identical_is_zero(self):
        assert levenshtein("gotye", "gotye") == 0

    def test_empty_string(self):
        assert levenshtein("", "abc") == 3
        assert levenshtein("abc", "") == 3

    def test_case_sensitive(self):
        assert levenshtein("a", "A") == 1

    @pytest.mark.parametrize("a,b,c", [
        ("kitten", "sitting", "mitten"),
        ("song", "band", "bond"),
        ("", "abc", "abd"),
    ])
    def test_triangle_inequality(self, a, b, c):
        assert levenshtein(a, c) <= levenshtein(a, b) + levenshtein(b, c)


class TestSimilarity:
    """Test normalized similarity"""

    def test_identical_strings(self):
        assert similarity("Call Me Maybe", "Call Me Maybe") == 1.0

    def test_ignores_case(self):
        assert similarity("Somebody That I Used to Know", "SOMEBODY THAT I USED TO KNOW") == 1.0

    def test_ignores_stop_words(self):
        assert similarity("The Beatles", "Beatles") == 1.0

    def test_both_empty(self):
        assert similarity("", "") == 1.0

    def test_both_only_stop_words(self):
        assert similarity("the", "and") == 1.0

    def test_completely_different(self):
        assert similarity("abc", "xyz") == 0.0

    def test_partial(self):
        assert similarity("kitten", "sitting") == pytest.approx(4 / 7)

    def test_very_different_lengths_never_negative(self):
        assert similarity("abcdef", "x") == 0.0

    @pytest.mark.parametrize("a,b", [
        ("kitten", "sitting"),
        ("Gotye", "Gotye feat. Kimbra"),
        ("The Killers", "Killers, The"),
        ("", "Song"),
    ])
    def test_symmetric(self, a, b):
        assert similarity(a, b) == similarity(b, a)

    def test_in_unit_range(self):
        value = similarity("Somebody That I Used to Know", "Somebody That I Used To Know - Karaoke Version")
        assert 0.0 <= value <= 1.0
