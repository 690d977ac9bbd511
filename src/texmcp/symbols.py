"""Known LaTeX math commands, categorisation, and correction suggestions.

The registry is a static ordered tuple. Order matters: ``suggest`` breaks
distance ties by registry position, so entries are kept in table order
(grouped by kind) rather than sorted.
"""

from __future__ import annotations

import re

from rapidfuzz.distance import Levenshtein

_GREEK = (
    "alpha", "beta", "gamma", "delta", "epsilon", "varepsilon", "zeta", "eta", "theta",
    "vartheta", "iota", "kappa", "lambda", "mu", "nu", "xi", "pi", "varpi", "rho",
    "varrho", "sigma", "varsigma", "tau", "upsilon", "phi", "varphi", "chi", "psi", "omega",
    "Gamma", "Delta", "Theta", "Lambda", "Xi", "Pi", "Sigma", "Upsilon", "Phi", "Psi",
    "Omega",
)

_RELATIONS_AND_OPERATORS = (
    "leq", "geq", "equiv", "neq", "sim", "approx", "cong", "propto", "prec", "succ",
    "preceq", "succeq", "ll", "gg", "subset", "supset", "subseteq", "supseteq", "in", "ni",
    "vdash", "dashv",
    "pm", "mp", "times", "div", "cdot", "ast", "star", "cap", "cup", "vee", "wedge",
    "oplus", "otimes", "circ", "bullet", "diamond", "Box", "triangleleft",
    "triangleright", "dagger", "ddagger",
)

_BIG_OPERATORS = (
    "sum", "prod", "int", "oint", "bigcap", "bigcup", "bigvee", "bigwedge", "bigoplus",
    "bigotimes",
)

_ARROWS = (
    "leftarrow", "Leftarrow", "rightarrow", "Rightarrow", "leftrightarrow",
    "Leftrightarrow", "mapsto", "hookleftarrow", "hookrightarrow", "uparrow", "Uparrow",
    "downarrow", "Downarrow", "updownarrow", "Updownarrow", "longleftarrow",
    "Longleftarrow", "longrightarrow", "Longrightarrow", "longleftrightarrow",
    "Longleftrightarrow",
)

_DELIMITERS = ("langle", "rangle", "lfloor", "rfloor", "lceil", "rceil", "lbrace", "rbrace")

_FORMATTING_AND_MISC = (
    "mathbf", "mathit", "mathsf", "mathrm", "mathcal", "mathbb", "mathfrak", "mathscr",
    "infty", "cdots", "ldots", "vdots", "ddots", "nabla", "partial", "emptyset", "exists",
    "forall", "neg", "triangle",
    "angle", "hbar", "imath", "jmath", "ell", "wp", "Re", "Im", "aleph", "beth", "gimel",
    "bot", "top",
    "arccos", "arcsin", "arctan", "arg", "cos", "cosh", "cot", "coth", "csc", "deg",
    "det", "dim", "exp", "gcd", "hom", "inf", "ker", "lg", "lim", "liminf", "limsup",
    "ln", "log", "max", "min", "Pr", "sec", "sin", "sinh", "sup", "tan", "tanh",
    "hat", "check", "breve", "acute", "grave", "tilde", "bar", "vec", "dot", "ddot",
    "frac", "sqrt", "overline", "underline", "overbrace", "underbrace", "widehat",
    "widetilde", "overleftarrow", "overrightarrow",
    "matrix", "pmatrix", "bmatrix", "Bmatrix", "vmatrix", "Vmatrix", "array",
    "begin", "end", "left", "right", "big", "Big", "bigg", "Bigg",
    "quad", "qquad", "hspace", "vspace", "thickspace", "medspace", "thinspace",
    "operatorname", "limits",
    "equation", "equation*", "align", "align*", "gather", "gather*", "multline",
    "multline*", "split", "cases", "aligned", "gathered",
    "text", "textbf", "textit", "textrm", "textsf", "texttt", "textsc",
    "newcommand", "renewcommand", "section", "subsection", "subsubsection",
    "mbox", "hfill", "vfill",
)

_UNITS = ("unit", "meter", "gram", "second", "ampere", "kelvin", "mole", "candela")

_SPECIAL = ("LaTeX", "TeX")

COMMANDS: tuple[str, ...] = tuple(
    dict.fromkeys(
        _GREEK
        + _RELATIONS_AND_OPERATORS
        + _BIG_OPERATORS
        + _ARROWS
        + _DELIMITERS
        + _FORMATTING_AND_MISC
        + _UNITS
        + _SPECIAL
    )
)
COMMAND_SET: frozenset[str] = frozenset(COMMANDS)

# Commands that introduce arbitrary new names are always accepted.
_DEFINERS = frozenset({"newcommand", "renewcommand"})

# Categories are diagnostic labels only; they never affect validity.
# Name lists match case-insensitively, so \Gamma is a Greek letter too.
_CATEGORY_NAMES: tuple[tuple[str, frozenset[str]], ...] = (
    ("Greek letter", frozenset(n.lower() for n in _GREEK)),
    (
        "Big operator",
        frozenset({"sum", "prod", "int", "oint", "bigcap", "bigcup", "bigvee", "bigwedge"}),
    ),
    (
        "Formatting",
        frozenset({"frac", "sqrt", "overline", "underline", "vec", "hat", "bar", "dot"}),
    ),
    ("Function", frozenset({"sin", "cos", "tan", "exp", "log", "ln", "lim"})),
)
_ARROW_RE = re.compile(r"arrow$|Rightarrow|Leftarrow|mapsto")
_RELATIONS = frozenset({"leq", "geq", "neq", "approx", "equiv", "cong", "sim"})
_FONT_STYLES = frozenset({"mathbf", "mathit", "mathcal", "mathfrak", "mathbb"})
_ENVIRONMENT_CMDS = frozenset({"begin", "end"})


def _base_name(cmd: str) -> str:
    """Command name without a leading backslash or trailing ``{...}`` group."""
    return cmd.lstrip("\\").split("{", 1)[0].strip()


def is_valid_command(cmd: str) -> bool:
    """True when *cmd* names a known command (case-sensitive).

    Accepts ``frac``, ``\\frac`` or ``frac{1}``. A run of several commands
    (``\\alpha\\beta``) is valid when every part is.
    """
    body = cmd[1:] if cmd.startswith("\\") else cmd
    if "\\" in body:
        return all(is_valid_command(part) for part in body.split("\\") if part)
    base = _base_name(body)
    if base in _DEFINERS:
        return True
    return base in COMMAND_SET


def categorize_command(cmd: str) -> str:
    """Human-readable category for diagnostics, ``Other`` when unrecognised."""
    base = _base_name(cmd)
    lowered = base.lower()
    for label, names in _CATEGORY_NAMES:
        if lowered in names:
            return label
    if _ARROW_RE.search(base):
        return "Arrow"
    if lowered in _RELATIONS:
        return "Relation"
    if lowered in _FONT_STYLES:
        return "Font style"
    if lowered in _ENVIRONMENT_CMDS:
        return "Environment"
    return "Other"


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert/delete/substitute costs."""
    return Levenshtein.distance(a, b)


def suggest(
    command: str,
    registry: tuple[str, ...] | list[str] = COMMANDS,
    limit: int = 5,
) -> list[str]:
    """Closest registry names to *command*, nearest first.

    Ties keep registry order (``sorted`` is stable). Returns the whole
    registry when it holds fewer than *limit* names.
    """
    name = command.lstrip("\\")
    ranked = sorted(registry, key=lambda cand: edit_distance(name, cand))
    return ranked[:limit]


def suggest_with_distance(
    command: str,
    registry: tuple[str, ...] | list[str] = COMMANDS,
    limit: int = 5,
) -> list[tuple[str, int]]:
    """Like :func:`suggest`, but pairs each name with its distance."""
    name = command.lstrip("\\")
    return [(cand, edit_distance(name, cand)) for cand in suggest(name, registry, limit)]
