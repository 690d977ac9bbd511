"""Fast-path lookup of well-known equations.

A short static table maps trigger phrases to canonical LaTeX. Matching is
case-insensitive substring containment; table order decides ties, so a
description mentioning two known equations gets the one listed first.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class KnownPattern:
    """One well-known equation and the phrases that select it."""

    triggers: tuple[str, ...]
    latex: str
    explanation: str
    components: tuple[str, ...] = ()


@dataclass(frozen=True)
class PatternMatch:
    """Canonical result of a fast-path hit."""

    latex: str
    explanation: str
    components: tuple[str, ...] = ()


KNOWN_PATTERNS: tuple[KnownPattern, ...] = (
    KnownPattern(
        triggers=("quadratic formula", "quadratic equation solution"),
        latex=r"x = \frac{-b \pm \sqrt{b^2 - 4ac}}{2a}",
        explanation=(
            "The quadratic formula provides solutions to any quadratic equation "
            "ax² + bx + c = 0."
        ),
        components=("variable x", "coefficients a, b, c", "square root", "plus-minus operator"),
    ),
    KnownPattern(
        triggers=("pythagorean theorem", "right triangle relation"),
        latex=r"a^2 + b^2 = c^2",
        explanation="The Pythagorean theorem relates the sides of a right triangle.",
        components=("sides a and b", "hypotenuse c", "squared terms"),
    ),
    KnownPattern(
        triggers=("euler identity", "euler's formula", "euler's identity"),
        latex=r"e^{i\pi} + 1 = 0",
        explanation=(
            "Euler's identity connects five fundamental mathematical constants "
            "in a single formula."
        ),
        components=("euler's number e", "imaginary unit i", "pi constant", "exponential function"),
    ),
    KnownPattern(
        triggers=(
            "normal distribution",
            "gaussian distribution",
            "probability density function",
            "pdf normal",
        ),
        latex=(
            r"f(x | \mu, \sigma^2) = \frac{1}{\sqrt{2\pi\sigma^2}} "
            r"e^{-\frac{(x-\mu)^2}{2\sigma^2}}"
        ),
        explanation=(
            "The normal distribution probability density function describes the "
            "distribution of continuous data."
        ),
        components=("function notation", "mean μ", "variance σ²", "exponential function", "fraction"),
    ),
    KnownPattern(
        triggers=("maxwell equation", "gauss's law", "electric field divergence"),
        latex=r"\nabla \cdot \mathbf{E} = \frac{\rho}{\epsilon_0}",
        explanation=(
            "Gauss's law for electricity (one of Maxwell's equations) relates the "
            "electric field to charge density."
        ),
        components=(
            "nabla operator",
            "dot product",
            "electric field vector",
            "charge density",
            "vacuum permittivity",
        ),
    ),
    KnownPattern(
        triggers=("navier-stokes", "fluid dynamics equation"),
        latex=(
            r"\rho \left( \frac{\partial \vec{v}}{\partial t} + \vec{v} \cdot \nabla \vec{v} "
            r"\right) = -\nabla p + \nabla \cdot \mathbf{T} + \vec{f}"
        ),
        explanation="The Navier-Stokes equations describe the motion of fluid substances.",
        components=("density ρ", "velocity vector", "pressure gradient", "stress tensor", "body forces"),
    ),
    KnownPattern(
        triggers=("schrodinger equation", "quantum mechanics", "wave function equation"),
        latex=r"i\hbar\frac{\partial}{\partial t}\Psi(\mathbf{r},t) = \hat{H}\Psi(\mathbf{r},t)",
        explanation=(
            "The Schrödinger equation describes how the quantum state of a physical "
            "system changes over time."
        ),
        components=(
            "imaginary unit i",
            "reduced Planck constant",
            "wave function",
            "Hamiltonian operator",
        ),
    ),
    KnownPattern(
        triggers=("einstein field equations", "general relativity", "spacetime curvature"),
        latex=(
            r"R_{\mu\nu} - \frac{1}{2}Rg_{\mu\nu} + \Lambda g_{\mu\nu} = "
            r"\frac{8\pi G}{c^4}T_{\mu\nu}"
        ),
        explanation=(
            "Einstein's field equations describe the fundamental interaction of "
            "gravitation in general relativity."
        ),
        components=(
            "Ricci curvature tensor",
            "metric tensor",
            "cosmological constant",
            "stress-energy tensor",
        ),
    ),
    KnownPattern(
        triggers=("taylor series", "taylor expansion"),
        latex=(
            r"f(x) = f(a) + \frac{f'(a)}{1!}(x-a) + \frac{f''(a)}{2!}(x-a)^2 "
            r"+ \frac{f'''(a)}{3!}(x-a)^3 + \cdots"
        ),
        explanation=(
            "A Taylor series expands a function into an infinite sum of terms derived "
            "from the function's derivatives at a single point."
        ),
        components=("function values", "derivatives", "factorial notation", "power series"),
    ),
    KnownPattern(
        triggers=("fourier transform", "fourier analysis"),
        latex=r"\mathcal{F}[f(t)] = F(\omega) = \int_{-\infty}^{\infty} f(t) e^{-i\omega t} dt",
        explanation="The Fourier transform converts a function of time to a function of frequency.",
        components=(
            "integral",
            "function in time domain",
            "exponential term",
            "angular frequency",
        ),
    ),
)


def match_pattern(
    description: str,
    table: tuple[KnownPattern, ...] = KNOWN_PATTERNS,
) -> PatternMatch | None:
    """Return the first known equation whose trigger occurs in *description*.

    Args:
        description: Free-form natural-language request.
        table: Pattern table to scan, in priority order.

    Returns:
        The canonical result, or None when nothing matches.
    """
    lowered = description.lower()
    for pattern in table:
        if any(trigger in lowered for trigger in pattern.triggers):
            return PatternMatch(
                latex=pattern.latex,
                explanation=pattern.explanation,
                components=pattern.components,
            )
    return None
