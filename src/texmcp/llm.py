"""Anthropic Messages API client for equation and document generation.

Called only when no built-in pattern answers a request. Talks to the
Messages endpoint directly over httpx with retry-with-backoff. Failures
surface as ``APIError`` / ``LLMNotConfigured`` / ``GenerationFailed``;
retries happen in ``texmcp.http`` and nowhere else.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import httpx

from texmcp.config import ServerConfig
from texmcp.errors import APIError, GenerationFailed, LLMNotConfigured
from texmcp.http import post_with_retry

logger = logging.getLogger("texmcp")

SERVICE = "Anthropic API"
ANTHROPIC_VERSION = "2023-06-01"

EQUATION_SYSTEM = (
    "You are a LaTeX expert focused on mathematical and scientific equations. "
    "Strictly follow the requested output format."
)

EQUATION_PROMPT = """\
Convert the description below into a LaTeX equation.
Produce ONLY the raw LaTeX expression on the first line (no \\begin, no $),
then a blank line, then "Explanation: ..." in one sentence.

Description: {description}
{context}"""

DOCUMENT_SYSTEM = (
    "You are a LaTeX expert focused on document structure and organization. "
    "Provide complete, well-organized LaTeX document structures based on "
    "natural language descriptions."
)

DOCUMENT_PROMPT = """\
Create a complete LaTeX document structure for the description below.

Description: {description}
Document Type: {document_type}
Include Packages: {include_packages}

Include:
1. Document class and preamble
2. Appropriate sections and subsections
3. Basic placeholder content structure
{packages_line}
Return the complete LaTeX code in a single ```latex block."""

_FENCE_RE = re.compile(r"```(?:latex|tex)?[ \t]*\n(.*?)\n?```", re.DOTALL)
_EXPLANATION_RE = re.compile(r"explanation:\s*(.*)", re.IGNORECASE | re.DOTALL)
_DOLLAR_RE = re.compile(r"^\$+|\$+$")


@dataclass(frozen=True)
class GeneratedEquation:
    """Raw model answer for an equation request."""

    latex: str
    explanation: str


def _error_detail(resp: httpx.Response) -> str:
    """Best-effort error message from an API error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])[:200]
    return str(body)[:200]


def complete(
    prompt: str,
    system: str,
    *,
    config: ServerConfig | None = None,
    max_tokens: int | None = None,
    temperature: float = 0.2,
) -> str:
    """Send one user message and return the concatenated text reply.

    Raises:
        LLMNotConfigured: No API key.
        APIError: Non-200 answer or connection failure after retries.
        GenerationFailed: The reply carried no text.
    """
    config = config or ServerConfig()
    if not config.api_key:
        raise LLMNotConfigured()

    url = f"{config.api_url.rstrip('/')}/v1/messages"
    payload = {
        "model": config.model,
        "max_tokens": max_tokens or config.max_tokens,
        "temperature": temperature,
        "system": system,
        "messages": [{"role": "user", "content": prompt}],
    }
    headers = {
        "x-api-key": config.api_key,
        "anthropic-version": ANTHROPIC_VERSION,
        "content-type": "application/json",
    }

    logger.info("LLM request model=%s prompt=%d chars", config.model, len(prompt))
    try:
        resp = post_with_retry(url, json=payload, headers=headers, timeout=config.request_timeout)
    except (httpx.ConnectError, httpx.TimeoutException) as e:
        raise APIError(SERVICE, 0, type(e).__name__) from e

    if resp.status_code != 200:
        raise APIError(SERVICE, resp.status_code, _error_detail(resp))

    try:
        data = resp.json()
    except ValueError as e:
        raise GenerationFailed("model response was not JSON") from e

    blocks = data.get("content", []) if isinstance(data, dict) else []
    text = "".join(
        str(b.get("text", "")) for b in blocks if isinstance(b, dict) and b.get("type") == "text"
    )
    if not text.strip():
        raise GenerationFailed("model returned an empty reply")
    return text


def parse_equation_reply(text: str) -> GeneratedEquation:
    """Split a model reply into LaTeX body and explanation.

    A fenced ```latex block wins; otherwise the first non-blank line is the
    equation. Surrounding ``$`` and backticks are removed.

    Raises:
        GenerationFailed: No LaTeX could be found.
    """
    text = text.strip()
    fence = _FENCE_RE.search(text)
    if fence:
        latex = fence.group(1).strip()
        rest = (text[: fence.start()] + "\n" + text[fence.end() :]).strip()
    else:
        lines = [ln for ln in text.splitlines() if ln.strip()]
        latex = lines[0] if lines else ""
        rest = "\n".join(lines[1:])

    latex = latex.replace("```latex", "").replace("```", "").strip().strip("`")
    latex = _DOLLAR_RE.sub("", latex).strip()
    if not latex:
        raise GenerationFailed("model returned no LaTeX")

    m = _EXPLANATION_RE.search(rest)
    explanation = (m.group(1) if m else rest).strip()
    return GeneratedEquation(latex=latex, explanation=explanation)


def generate_equation(
    description: str,
    context: str = "",
    config: ServerConfig | None = None,
) -> GeneratedEquation:
    """Ask the model for the equation described in *description*."""
    prompt = EQUATION_PROMPT.format(
        description=description,
        context=f"Context: {context}\n" if context else "",
    )
    reply = complete(prompt, EQUATION_SYSTEM, config=config, temperature=0.1)
    return parse_equation_reply(reply)


def generate_document(
    description: str,
    document_type: str = "article",
    include_packages: bool = True,
    config: ServerConfig | None = None,
) -> str:
    """Ask the model for a full LaTeX document skeleton."""
    prompt = DOCUMENT_PROMPT.format(
        description=description,
        document_type=document_type,
        include_packages="Yes" if include_packages else "No",
        packages_line="4. Necessary packages for this type of document\n" if include_packages else "",
    )
    reply = complete(prompt, DOCUMENT_SYSTEM, config=config, max_tokens=2000, temperature=0.2)
    fence = _FENCE_RE.search(reply)
    return (fence.group(1) if fence else reply).strip()
