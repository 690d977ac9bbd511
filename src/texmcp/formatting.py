"""Wrap raw LaTeX math in the requested environment.

Display math uses ``\\[ ... \\]`` when unnumbered and ``equation`` when
numbered. ``align``, ``gather`` and ``multline`` switch to their starred
variant when unnumbered. Inline math is always ``$...$``.

Unknown environment names fall back to ``equation*`` rather than failing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from texmcp import advisories

logger = logging.getLogger("texmcp")


class Environment(Enum):
    """Supported math environments."""

    INLINE = "inline"
    DISPLAY = "display"
    ALIGN = "align"
    GATHER = "gather"
    MULTLINE = "multline"


ENVIRONMENT_NAMES: tuple[str, ...] = tuple(e.value for e in Environment)

# Environments rendered as \begin{name}/\end{name}, starred when unnumbered.
_BLOCK_ENVS = {
    Environment.ALIGN: "align",
    Environment.GATHER: "gather",
    Environment.MULTLINE: "multline",
}


@dataclass(frozen=True)
class FormatSpec:
    """How to present an equation: environment name plus numbering."""

    environment: str = "display"
    numbered: bool = False


def _block(name: str, body: str) -> str:
    return f"\\begin{{{name}}}\n  {body}\n\\end{{{name}}}"


def format_equation(latex: str, spec: FormatSpec) -> str:
    """Wrap *latex* according to *spec*.

    Args:
        latex: Raw math body, without delimiters.
        spec: Environment and numbering choice.

    Returns:
        The wrapped LaTeX string. Never raises.
    """
    try:
        env = Environment(spec.environment)
    except ValueError:
        logger.debug("Unknown environment %r, using equation*", spec.environment)
        advisories.add(
            "format_fallback",
            f"Unknown format '{spec.environment}'; used equation*.",
            action=f"Use one of: {', '.join(ENVIRONMENT_NAMES)}.",
        )
        return _block("equation*", latex)

    if env is Environment.INLINE:
        return f"${latex}$"
    if env is Environment.DISPLAY:
        return _block("equation", latex) if spec.numbered else f"\\[\n  {latex}\n\\]"

    name = _BLOCK_ENVS[env]
    return _block(name if spec.numbered else f"{name}*", latex)
