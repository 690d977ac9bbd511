"""Lexical checks for LaTeX fragments.

Counts braces and dollar signs, pairs ``\\begin``/``\\end`` tags, and
flags control sequences missing from the command registry. This is not a
parser: an empty result means nothing was detected, not that the input
compiles.

Environment pairing matches the i-th ``\\begin`` with the i-th ``\\end``
counted from the back, which assumes well-nested input. Sequential blocks
such as ``\\begin{a}..\\end{a}\\begin{b}..\\end{b}`` are reported as
mismatched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from texmcp.symbols import is_valid_command

_BEGIN_RE = re.compile(r"\\begin\{([^}]+)\}")
_END_RE = re.compile(r"\\end\{([^}]+)\}")
_COMMAND_RE = re.compile(r"\\([a-zA-Z]+)")


class IssueKind(Enum):
    """Classification of a lexical problem."""

    UNBALANCED_BRACES = "unbalanced_braces"
    UNBALANCED_DELIMITERS = "unbalanced_delimiters"
    MISMATCHED_ENVIRONMENT = "mismatched_environment"
    UNKNOWN_COMMAND = "unknown_command"


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found in a LaTeX fragment."""

    kind: IssueKind
    detail: str
    command: str = ""  # set for UNKNOWN_COMMAND only

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"kind": self.kind.value, "detail": self.detail}
        if self.command:
            d["command"] = self.command
        return d


def _check_braces(latex: str) -> list[ValidationIssue]:
    opening = latex.count("{")
    closing = latex.count("}")
    if opening == closing:
        return []
    return [
        ValidationIssue(
            IssueKind.UNBALANCED_BRACES,
            f"Unbalanced braces: {opening} opening and {closing} closing braces",
        )
    ]


def _check_dollars(latex: str) -> list[ValidationIssue]:
    dollars = latex.count("$")
    if dollars % 2 == 0:
        return []
    return [
        ValidationIssue(
            IssueKind.UNBALANCED_DELIMITERS,
            f"Unbalanced dollar signs for inline math ({dollars} found)",
        )
    ]


def _check_environments(latex: str) -> list[ValidationIssue]:
    begins = _BEGIN_RE.findall(latex)
    ends = _END_RE.findall(latex)

    if len(begins) != len(ends):
        return [
            ValidationIssue(
                IssueKind.MISMATCHED_ENVIRONMENT,
                f"Mismatched environment tags: {len(begins)} \\begin and "
                f"{len(ends)} \\end tags",
            )
        ]

    issues: list[ValidationIssue] = []
    for begin_name, end_name in zip(begins, reversed(ends)):
        if begin_name != end_name:
            issues.append(
                ValidationIssue(
                    IssueKind.MISMATCHED_ENVIRONMENT,
                    f"Mismatched environment: \\begin{{{begin_name}}} and \\end{{{end_name}}}",
                )
            )
    return issues


def _check_commands(latex: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for name in _COMMAND_RE.findall(latex):
        if not is_valid_command(name):
            issues.append(
                ValidationIssue(
                    IssueKind.UNKNOWN_COMMAND,
                    f"Potentially undefined control sequence: \\{name}",
                    command=name,
                )
            )
    return issues


def validate_latex(latex: str) -> list[ValidationIssue]:
    """Run every lexical check on *latex*.

    Args:
        latex: Any string; no exception is raised for odd input.

    Returns:
        Issues in check order (braces, dollars, environments, commands);
        unknown commands in order of appearance, repeats included.
    """
    return (
        _check_braces(latex)
        + _check_dollars(latex)
        + _check_environments(latex)
        + _check_commands(latex)
    )
