"""Equation generation and validation entry points.

``generate_equation`` tries the fast paths first (known patterns, then the
calculus rules) and only then calls the model. Whatever answers is wrapped
by ``formatting.format_equation``. Model errors propagate unchanged, tagged
with ``stage = "generate"``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from texmcp import advisories, llm
from texmcp.calculus import match_calculus
from texmcp.errors import TexMCPError
from texmcp.formatting import FormatSpec, format_equation
from texmcp.lint import IssueKind, validate_latex
from texmcp.patterns import match_pattern
from texmcp.symbols import categorize_command, suggest
from texmcp.validate import validate_text

logger = logging.getLogger("texmcp")

# (description, context) -> GeneratedEquation
Generator = Callable[[str, str], llm.GeneratedEquation]


@dataclass
class EquationResult:
    """A generated, formatted equation."""

    latex: str
    preview: str
    explanation: str = ""
    components: list[str] = field(default_factory=list)
    source: str = "llm"  # pattern | calculus | llm

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "latex": self.latex,
            "preview": self.preview,
            "source": self.source,
        }
        if self.explanation:
            d["explanation"] = self.explanation
        if self.components:
            d["components"] = self.components
        return d


def generate_equation(
    description: str,
    spec: FormatSpec,
    context: str = "",
    generator: Generator | None = None,
) -> EquationResult:
    """Turn a natural-language description into formatted LaTeX.

    Args:
        description: What the equation should express.
        spec: Environment and numbering for the result.
        context: Optional free text passed to the model only.
        generator: Model collaborator; defaults to ``llm.generate_equation``.

    Raises:
        InvalidInput: Blank or oversized description.
        TexMCPError: Whatever the model collaborator raised, with ``stage``
            set to ``"generate"``.
    """
    validate_text(description, "description")

    hit = match_pattern(description)
    source = "pattern"
    if hit is None:
        hit = match_calculus(description)
        source = "calculus"

    if hit is not None:
        logger.debug("Fast path (%s) answered %r", source, description[:80])
        raw, explanation, components = hit.latex, hit.explanation, list(hit.components)
    else:
        gen = generator or llm.generate_equation
        try:
            generated = gen(description, context)
        except TexMCPError as exc:
            exc.stage = exc.stage or "generate"
            raise
        advisories.add("llm_fallback", "No built-in pattern matched; the model generated this.")
        raw, explanation, components = generated.latex, generated.explanation, []
        source = "llm"

        unknown = [i.command for i in validate_latex(raw) if i.kind is IssueKind.UNKNOWN_COMMAND]
        if unknown:
            names = ", ".join(f"\\{c}" for c in dict.fromkeys(unknown))
            advisories.add(
                "unknown_commands",
                f"Generated LaTeX uses commands outside the registry: {names}.",
                action="Run validate-latex-equation for suggestions.",
            )

    return EquationResult(
        latex=format_equation(raw, spec),
        preview=f"Preview: {raw}",
        explanation=explanation,
        components=components,
        source=source,
    )


def validate_equation(latex: str, with_suggestions: bool = True) -> list[dict[str, Any]]:
    """Lint *latex*, enriching unknown-command issues with suggestions.

    Returns:
        One dict per issue (see ``ValidationIssue.to_dict``). Unknown
        commands also carry ``category`` and, when requested,
        ``suggestions``.
    """
    out: list[dict[str, Any]] = []
    for issue in validate_latex(latex):
        d = issue.to_dict()
        if issue.kind is IssueKind.UNKNOWN_COMMAND:
            d["category"] = categorize_command(issue.command)
            if with_suggestions:
                d["suggestions"] = suggest(issue.command)
        out.append(d)
    return out
