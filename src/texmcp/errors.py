"""Exception hierarchy for texmcp.

Every error message includes: what happened, why, and what to do next.
This allows LLM clients to understand failures and take corrective action.

Validation findings on LaTeX input are *not* errors; see ``texmcp.lint``.
"""


class TexMCPError(Exception):
    """Base class for all texmcp errors.

    ``stage`` names the pipeline step that failed (``match``, ``generate``
    or ``format``) when the caller annotated it; empty otherwise.
    """

    stage: str = ""


class ConfigError(TexMCPError):
    """Server configuration is missing or invalid."""

    def __init__(self, detail: str, hint: str = ""):
        msg = f"Configuration error: {detail}."
        if hint:
            msg += f" {hint}"
        super().__init__(msg)
        self.detail = detail
        self.hint = hint


class LLMNotConfigured(ConfigError):
    """No API key is available for the external model."""

    def __init__(self):
        super().__init__(
            "No API key configured for the equation/document model",
            hint=(
                "Set the ANTHROPIC_API_KEY environment variable, or add "
                "'api_key: ...' to the server config file. Well-known equations "
                "(quadratic formula, Euler's identity, ...) work without a key."
            ),
        )


class APIError(TexMCPError):
    """An external API returned an error after retries were exhausted."""

    def __init__(self, service: str, status_code: int, detail: str = ""):
        if status_code == 429:
            msg = (
                f"{service} rate-limited (HTTP 429) after retries. "
                f"Wait a minute and try again. {detail}"
            )
        elif status_code >= 500:
            msg = (
                f"{service} server error (HTTP {status_code}) after retries. "
                f"The service may be temporarily down. Try again later. {detail}"
            )
        elif status_code == 0:
            msg = (
                f"{service} unreachable (connection failure after retries). "
                f"Check your network connection and api_url. {detail}"
            )
        elif status_code in (401, 403):
            msg = (
                f"{service} rejected the credentials (HTTP {status_code}). "
                f"Check ANTHROPIC_API_KEY. {detail}"
            )
        else:
            msg = f"{service} returned HTTP {status_code}. {detail}"
        super().__init__(msg.strip())
        self.service = service
        self.status_code = status_code


class GenerationFailed(TexMCPError):
    """The model answered, but the answer could not be used."""

    def __init__(self, detail: str, stage: str = "generate"):
        super().__init__(
            f"Generation failed: {detail}. "
            f"Rephrase the description or add context, then try again."
        )
        self.detail = detail
        self.stage = stage


class InvalidInput(TexMCPError):
    """A tool argument is empty, oversized, or malformed."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(f"Rejected {field}={value!r}: {reason}.")
        self.field = field
        self.value = value
        self.reason = reason


class UnknownDocumentType(InvalidInput):
    """document_type is not one of the supported document classes."""

    def __init__(self, value: str, allowed: tuple[str, ...]):
        super().__init__(
            "document_type",
            value,
            f"expected one of {', '.join(allowed)}",
        )
        self.allowed = allowed
