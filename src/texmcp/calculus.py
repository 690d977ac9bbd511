"""Tiny rule table for derivative and integral requests.

Handles descriptions like ``derivative of f(x) = x^3`` or ``integrate
f(x) = sin(x) with respect to x``. Only a handful of textbook rules are
known; any other expression comes back in symbolic form.
"""

from __future__ import annotations

import re

from texmcp.patterns import PatternMatch

_DERIVATIVE_RE = re.compile(r"(?:derivative of|differentiate) (f\(x\) = .+?)(?:with respect to|$)")
_INTEGRAL_RE = re.compile(r"(?:integral of|integrate) (f\(x\) = .+?)(?:with respect to|$)")
_FUNCTION_RE = re.compile(r"f\(x\) = (.+)")
_POWER_RE = re.compile(r"^x\^(\d+)$")

_DERIVATIVES = {
    "sin(x)": ("cos(x)", "The derivative of sin(x) is cos(x)"),
    "cos(x)": ("-sin(x)", "The derivative of cos(x) is -sin(x)"),
    "e^x": ("e^x", "The derivative of e^x is e^x"),
    "ln(x)": ("\\frac{1}{x}", "The derivative of ln(x) is 1/x"),
}

_INTEGRALS = {
    "sin(x)": ("-cos(x) + C", "The integral of sin(x) is -cos(x) + C"),
    "cos(x)": ("sin(x) + C", "The integral of cos(x) is sin(x) + C"),
    "e^x": ("e^x + C", "The integral of e^x is e^x + C"),
    "1/x": ("ln|x| + C", "The integral of 1/x is ln|x| + C"),
}


def differentiate(function_text: str) -> PatternMatch:
    """Differentiate ``f(x) = <expr>`` with the known rules."""
    m = _FUNCTION_RE.search(function_text)
    if not m:
        return PatternMatch(latex="\\frac{d}{dx}[?]", explanation="Could not parse function")

    expr = m.group(1).strip()
    power = _POWER_RE.match(expr)
    if power:
        n = int(power.group(1))
        if n == 1:
            latex = "1"
        elif n == 2:
            latex = "2x"
        else:
            latex = f"{n}x^{{{n - 1}}}"
        return PatternMatch(latex=latex, explanation="Using the power rule: d/dx(x^n) = n·x^(n-1)")
    if expr in _DERIVATIVES:
        latex, explanation = _DERIVATIVES[expr]
        return PatternMatch(latex=latex, explanation=explanation)
    return PatternMatch(
        latex=f"\\frac{{d}}{{dx}}[{expr}]",
        explanation="Symbolic representation of the derivative",
    )


def integrate(function_text: str) -> PatternMatch:
    """Integrate ``f(x) = <expr>`` with the known rules."""
    m = _FUNCTION_RE.search(function_text)
    if not m:
        return PatternMatch(latex="\\int{?}\\,dx", explanation="Could not parse function")

    expr = m.group(1).strip()
    power = _POWER_RE.match(expr)
    if power:
        k = int(power.group(1)) + 1
        return PatternMatch(
            latex=f"\\frac{{x^{{{k}}}}}{{{k}}} + C",
            explanation="Using the power rule: ∫x^n dx = x^(n+1)/(n+1) + C",
        )
    if expr in _INTEGRALS:
        latex, explanation = _INTEGRALS[expr]
        return PatternMatch(latex=latex, explanation=explanation)
    return PatternMatch(
        latex=f"\\int{{{expr}}}\\,dx",
        explanation="Symbolic representation of the integral",
    )


def match_calculus(description: str) -> PatternMatch | None:
    """Answer simple derivative/integral requests, or None."""
    lowered = description.lower()

    if "derivative" in lowered or "differentiate" in lowered:
        m = _DERIVATIVE_RE.search(lowered)
        if m:
            return differentiate(m.group(1))

    if "integral" in lowered or "integrate" in lowered:
        m = _INTEGRAL_RE.search(lowered)
        if m:
            return integrate(m.group(1))

    return None
