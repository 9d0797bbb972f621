"""Tests for wildcard matching"""

import pytest

from textdump.matcher import matches, matches_any


class TestMatches:
    """Tests for matches function"""

    def test_empty_pattern_matches_empty_text(self):
        assert matches("", "")

    def test_empty_pattern_rejects_text(self):
        assert not matches("a", "")

    @pytest.mark.parametrize("text", ["", "a", "anything", "dir/file.txt"])
    def test_star_matches_everything(self, text):
        """A lone '*' matches any input, including the empty string"""
        assert matches(text, "*")

    def test_repeated_stars_match_empty(self):
        assert matches("", "***")

    def test_question_mark_needs_one_char(self):
        assert matches("a", "?")
        assert not matches("", "?")
        assert not matches("ab", "?")

    def test_question_mark_in_middle(self):
        assert matches("abc", "a?c")
        assert not matches("abc", "a?d")

    def test_whole_string_only(self):
        assert matches("abc.txt", "*.txt")
        assert not matches("abc.txtx", "*.txt")
        assert not matches("build", "buil")
        assert not matches("rebuild", "build")

    def test_case_sensitive(self):
        assert not matches("README.MD", "*.md")
        assert matches("README.md", "*.md")

    def test_star_crosses_slashes(self):
        """'*' has no notion of path segments"""
        assert matches("src/pkg/mod.py", "*.py")
        assert matches("src/pkg/mod.py", "src*")

    def test_other_metacharacters_are_literal(self):
        assert matches("[ab]", "[ab]")
        assert not matches("a", "[ab]")
        assert matches("**", "**")

    def test_star_and_question_combined(self):
        assert matches("abcde", "a*?e")
        assert matches("ae", "a*e")
        assert not matches("ae", "a?*?e")

    def test_trailing_literal_after_star(self):
        assert matches("aaab", "*ab")
        assert not matches("aaba", "*ab")


class TestMatchesAny:
    """Tests for matches_any function"""

    def test_no_patterns(self):
        assert not matches_any("a.txt", ())

    def test_any_pattern_suffices(self):
        assert matches_any("a.bin", ["node_modules", "*.bin"])

    def test_order_does_not_matter(self):
        pats = ["*.log", "build", "?.txt"]
        for name in ("x.log", "build", "a.txt", "keep.py"):
            assert matches_any(name, pats) == matches_any(name, list(reversed(pats)))

    def test_short_circuits_on_first_hit(self):
        """Patterns after the first hit are never consulted"""

        def gen():
            yield "*.txt"
            raise AssertionError("consumed past first match")

        assert matches_any("a.txt", gen())
