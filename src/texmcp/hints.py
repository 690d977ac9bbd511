"""Self-describing response builder.

Every response includes contextual ``hints`` showing the LLM client which
tool call makes sense next. Accumulated advisories are merged in.
"""

from __future__ import annotations

import json
from typing import Any

from texmcp import advisories as _advisories

# Long LaTeX inside a hint is noise; the client already has the full text.
_MAX_HINT_ARG = 60


def _quote(value: str) -> str:
    """Render *value* as a short single-quoted tool argument."""
    if len(value) > _MAX_HINT_ARG:
        value = value[: _MAX_HINT_ARG - 3] + "..."
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def response(data: dict[str, Any], hints: dict[str, str] | None = None) -> str:
    """Build a JSON response with self-describing hints.

    Args:
        data: The response payload.
        hints: Optional contextual hints (next actions).

    Returns:
        JSON string with ``hints`` appended. Any accumulated advisories are
        drained and included automatically.
    """
    advs = _advisories.drain()
    if advs:
        data["advisories"] = advs
    data["hints"] = hints or {}
    return json.dumps(data, indent=2, ensure_ascii=False)


def error(message: str, hints: dict[str, str] | None = None, stage: str = "") -> str:
    """Build a JSON error response with hints.

    Args:
        message: The error message.
        hints: Optional hints for recovery.
        stage: Pipeline stage that failed, when known.

    Returns:
        JSON string with ``error`` key and hints.
    """
    data: dict[str, Any] = {"error": message}
    if stage:
        data["stage"] = stage
    return response(data, hints=hints)


def equation_hints(latex: str) -> dict[str, str]:
    """Hints after an equation was generated."""
    return {
        "validate": f"validate-latex-equation(latex={_quote(latex)})",
        "renumber": "generate-latex-equation(description='...', numbered=true)",
        "inline": "generate-latex-equation(description='...', format='inline')",
    }


def validation_hints(unknown: list[str]) -> dict[str, str]:
    """Hints after a validation pass."""
    if not unknown:
        return {"generate": "generate-latex-equation(description='...')"}
    first = unknown[0]
    return {
        "suggest": f"suggest-latex-command(command={_quote(first)})",
        "define": f"\\newcommand{{\\{first}}}{{...}} if the macro is project-specific",
    }


def suggestion_hints(command: str) -> dict[str, str]:
    """Hints after a command suggestion."""
    return {
        "validate": "validate-latex-equation(latex='...')",
        "more": f"suggest-latex-command(command={_quote(command)}, limit=10)",
    }


def document_hints(document_type: str) -> dict[str, str]:
    """Hints after a document skeleton was generated."""
    return {
        "equation": "generate-latex-equation(description='...', format='align')",
        "validate": "validate-latex-equation(latex='...')",
        "other_type": f"create-document-structure(description='...', document_type="
        f"'{'report' if document_type == 'article' else 'article'}')",
    }
