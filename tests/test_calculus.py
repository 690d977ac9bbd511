"""Tests for texmcp.calculus: derivative and integral shortcuts."""

from texmcp.calculus import differentiate, integrate, match_calculus


class TestDifferentiate:
    def test_power_rule(self):
        assert differentiate("f(x) = x^3").latex == "3x^{2}"

    def test_square(self):
        assert differentiate("f(x) = x^2").latex == "2x"

    def test_first_power(self):
        assert differentiate("f(x) = x^1").latex == "1"

    def test_table(self):
        assert differentiate("f(x) = sin(x)").latex == "cos(x)"
        assert differentiate("f(x) = ln(x)").latex == "\\frac{1}{x}"

    def test_symbolic_fallback(self):
        out = differentiate("f(x) = tan(x)")
        assert out.latex == "\\frac{d}{dx}[tan(x)]"
        assert "Symbolic" in out.explanation

    def test_unparseable(self):
        assert differentiate("g = 3").latex == "\\frac{d}{dx}[?]"


class TestIntegrate:
    def test_power_rule(self):
        assert integrate("f(x) = x^2").latex == "\\frac{x^{3}}{3} + C"

    def test_table(self):
        assert integrate("f(x) = 1/x").latex == "ln|x| + C"

    def test_symbolic_fallback(self):
        assert integrate("f(x) = tan(x)").latex == "\\int{tan(x)}\\,dx"


class TestMatch:
    def test_derivative_request(self):
        hit = match_calculus("Derivative of f(x) = x^4")
        assert hit is not None
        assert hit.latex == "4x^{3}"

    def test_with_respect_to(self):
        hit = match_calculus("integrate f(x) = cos(x) with respect to x")
        assert hit is not None
        assert hit.latex == "sin(x) + C"

    def test_keyword_without_function(self):
        assert match_calculus("derivative of the position") is None

    def test_unrelated(self):
        assert match_calculus("quadratic formula") is None
