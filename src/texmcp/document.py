"""Document skeleton generation.

The model writes the document; this module validates the request and
lists the ``\\section`` titles the answer contains.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from texmcp import llm
from texmcp.errors import TexMCPError
from texmcp.validate import validate_document_type, validate_text

_SECTION_RE = re.compile(r"\\section\*?\{([^}]+)\}")

# (description, document_type, include_packages) -> LaTeX source
DocumentGenerator = Callable[[str, str, bool], str]


@dataclass
class DocumentResult:
    """Generated document source plus its top-level sections."""

    latex: str
    sections: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"latex": self.latex, "sections": self.sections}


def extract_sections(latex: str) -> list[str]:
    """Titles of ``\\section{...}`` and ``\\section*{...}`` in order."""
    return [title.strip() for title in _SECTION_RE.findall(latex)]


def create_document_structure(
    description: str,
    document_type: str = "article",
    include_packages: bool = True,
    generator: DocumentGenerator | None = None,
) -> DocumentResult:
    """Generate a document skeleton for *description*.

    Raises:
        InvalidInput / UnknownDocumentType: Bad arguments.
        TexMCPError: Model failure, with ``stage`` set to ``"generate"``.
    """
    validate_text(description, "description")
    doc_type = validate_document_type(document_type)

    gen = generator or llm.generate_document
    try:
        latex = gen(description, doc_type, include_packages)
    except TexMCPError as exc:
        exc.stage = exc.stage or "generate"
        raise
    return DocumentResult(latex=latex, sections=extract_sections(latex))
