"""Input validation for tool arguments.

Rejects empty, oversized, or malformed arguments before they reach the
pattern table or the model. LaTeX content itself is checked by
``texmcp.lint``, which reports rather than raises.
"""

from __future__ import annotations

import re

from texmcp.errors import InvalidInput, UnknownDocumentType

# Descriptions go into a model prompt; latex fragments into the linter.
MAX_TEXT_LENGTH = 20_000

MAX_SUGGESTIONS = 50

DOCUMENT_TYPES: tuple[str, ...] = ("article", "report", "book", "letter", "presentation", "thesis")

_COMMAND_NAME_RE = re.compile(r"^[a-zA-Z]+\*?$")


def validate_text(
    value: str,
    field: str,
    max_length: int = MAX_TEXT_LENGTH,
    allow_empty: bool = False,
) -> str:
    """Validate a free-text argument.

    Args:
        value: The text to validate.
        field: Name of the argument for error messages.
        max_length: Upper bound on length.
        allow_empty: Accept blank text (the linter has nothing to report).

    Returns:
        The text (unchanged) if valid.

    Raises:
        InvalidInput: If the text is blank, too long, or contains a NUL byte.
    """
    if not allow_empty and (not value or not value.strip()):
        raise InvalidInput(field, value, "must not be empty")
    if "\0" in value:
        raise InvalidInput(field, value[:20], "contains null byte")
    if len(value) > max_length:
        raise InvalidInput(field, value[:20] + "...", f"exceeds {max_length} characters")
    return value


def validate_command_name(name: str) -> str:
    """Validate a command name, returning it without its leading backslash.

    Raises:
        InvalidInput: If the name is not letters with an optional trailing ``*``.
    """
    bare = name.strip().lstrip("\\")
    if not bare:
        raise InvalidInput("command", name, "must not be empty")
    if not _COMMAND_NAME_RE.match(bare):
        raise InvalidInput("command", name, "must be letters only, e.g. 'frac' or '\\\\alpha'")
    return bare


def validate_document_type(value: str) -> str:
    """Validate and normalise (lower-case) a document type.

    Raises:
        UnknownDocumentType: If the type is not supported.
    """
    normalised = value.strip().lower()
    if normalised not in DOCUMENT_TYPES:
        raise UnknownDocumentType(value, DOCUMENT_TYPES)
    return normalised


def validate_limit(limit: int) -> int:
    """Validate a suggestion count (1..MAX_SUGGESTIONS)."""
    if not 1 <= limit <= MAX_SUGGESTIONS:
        raise InvalidInput("limit", str(limit), f"must be between 1 and {MAX_SUGGESTIONS}")
    return limit
