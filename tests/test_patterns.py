"""Tests for texmcp.patterns: well-known equation lookup."""

import pytest

from texmcp.patterns import KNOWN_PATTERNS, KnownPattern, PatternMatch, match_pattern

ALL_TRIGGERS = [(p, t) for p in KNOWN_PATTERNS for t in p.triggers]


class TestTable:
    def test_ten_patterns(self):
        assert len(KNOWN_PATTERNS) == 10

    def test_every_pattern_has_triggers_and_latex(self):
        for p in KNOWN_PATTERNS:
            assert p.triggers
            assert p.latex
            assert p.explanation

    def test_triggers_are_lowercase(self):
        for p, t in ALL_TRIGGERS:
            assert t == t.lower()


class TestMatch:
    @pytest.mark.parametrize("pattern,trigger", ALL_TRIGGERS)
    def test_trigger_matches_inside_text(self, pattern, trigger):
        hit = match_pattern(f"Please give me the {trigger.upper()} in LaTeX, thanks")
        assert hit is not None
        # First match wins, so an earlier pattern may claim an overlapping phrase.
        first = next(p for p in KNOWN_PATTERNS if any(tr in trigger for tr in p.triggers))
        assert hit.latex == first.latex

    def test_quadratic(self):
        hit = match_pattern("Quadratic Formula")
        assert hit == PatternMatch(
            latex=r"x = \frac{-b \pm \sqrt{b^2 - 4ac}}{2a}",
            explanation=KNOWN_PATTERNS[0].explanation,
            components=KNOWN_PATTERNS[0].components,
        )

    def test_euler_apostrophe(self):
        hit = match_pattern("what is euler's identity?")
        assert hit is not None
        assert hit.latex == r"e^{i\pi} + 1 = 0"

    def test_no_match(self):
        assert match_pattern("the area of a circle") is None

    def test_empty_description(self):
        assert match_pattern("") is None

    def test_first_match_wins(self):
        hit = match_pattern("taylor series of the quadratic formula")
        assert hit is not None
        assert hit.latex == KNOWN_PATTERNS[0].latex

    def test_custom_table(self):
        table = (KnownPattern(triggers=("golden ratio",), latex=r"\phi", explanation="phi"),)
        assert match_pattern("The Golden Ratio", table=table).latex == r"\phi"
        assert match_pattern("quadratic formula", table=table) is None
