"""texmcp MCP server: LaTeX equation generation, validation and suggestions.

Run with: texmcp [stdio|http] or python -m texmcp.server
stdio is the default transport; ``http`` serves streamable HTTP on /mcp
plus /health and /tools, behind CORS and a per-client rate limit.
"""

from __future__ import annotations

import argparse
import functools
import logging
import logging.handlers
import re
import sys
import time
import traceback
from pathlib import Path

from mcp.server.fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from texmcp import advisories, call_log, document, equation, llm
from texmcp import config as texmcp_config
from texmcp import hints as hints_mod
from texmcp import paths as texmcp_paths
from texmcp.errors import TexMCPError
from texmcp.formatting import ENVIRONMENT_NAMES, FormatSpec
from texmcp.ratelimit import RateLimitMiddleware, SlidingWindowLimiter
from texmcp.symbols import categorize_command, is_valid_command, suggest_with_distance
from texmcp.validate import (
    DOCUMENT_TYPES,
    validate_command_name,
    validate_limit,
    validate_text,
)

mcp_server = FastMCP("texmcp")

# ---------------------------------------------------------------------------
# Logging: stderr always, rotating file once a log directory is configured
# ---------------------------------------------------------------------------

logger = logging.getLogger("texmcp")
logger.setLevel(logging.DEBUG)

_stderr_handler = logging.StreamHandler(sys.stderr)
_stderr_handler.setLevel(logging.WARNING)
_stderr_handler.setFormatter(
    logging.Formatter(
        "%(asctime)s [%(process)d] %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"
    )
)
logger.addHandler(_stderr_handler)

_file_handler: logging.Handler | None = None


def _attach_file_log(log_dir: Path) -> None:
    """Attach a rotating file handler to <log_dir>/server.log (idempotent)."""
    global _file_handler
    if _file_handler is not None:
        return
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "server.log"
    fh = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(
        logging.Formatter("%(asctime)s [%(process)d] %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(fh)
    _file_handler = fh
    logger.info("texmcp server started, log attached to %s", log_path)


# ---------------------------------------------------------------------------
# Runtime configuration
# ---------------------------------------------------------------------------

_config: texmcp_config.ServerConfig | None = None


def get_config() -> texmcp_config.ServerConfig:
    """Active config; loaded from the environment on first use."""
    global _config
    if _config is None:
        _config = texmcp_config.load_config()
    return _config


def configure(cfg: texmcp_config.ServerConfig | None) -> None:
    """Install *cfg* (None forgets it) and apply its logging settings."""
    global _config
    _config = cfg
    if cfg is None:
        return
    _stderr_handler.setLevel(cfg.log_level.upper())
    if cfg.log_dir:
        _attach_file_log(Path(cfg.log_dir))
        call_log.set_logs_dir(Path(cfg.log_dir))


# ---------------------------------------------------------------------------
# Tool invocation logging: wraps every @mcp_server.tool() with timing,
# error classification, response-size capping and cancellation support.
#
# The sync tool body runs in a worker thread via anyio.to_thread so the
# event loop stays free to enforce the timeout. On timeout the thread is
# abandoned rather than joined; the cancellation token stops it at its next
# check_cancelled() call. Advisories left on a reused worker thread are
# discarded before each call.
# ---------------------------------------------------------------------------

_original_tool = mcp_server.tool

# Keeps responses under the 64 KB stdout pipe buffer on macOS.
_MAX_RESPONSE_BYTES = 48_000

# Model calls retry with backoff; three attempts at the default 60 s
# request timeout fit comfortably.
_TOOL_TIMEOUT = 240


def _cap_response(result: str, name: str) -> str:
    """Truncate an oversized tool response with a note."""
    if len(result) <= _MAX_RESPONSE_BYTES:
        return result
    logger.warning(
        "TOOL %s response truncated: %d -> %d bytes",
        name,
        len(result),
        _MAX_RESPONSE_BYTES,
    )
    return (
        result[:_MAX_RESPONSE_BYTES] + f"\n\n... (truncated from {len(result)} bytes; "
        "ask for a shorter document or fewer suggestions)"
    )


def _sanitize_exc(exc: Exception) -> str:
    """Strip filesystem paths and API keys from exception messages."""
    msg = str(exc)
    msg = re.sub(r"/(?:Users|home|root|tmp|var|opt|etc)/\S+", "<path>", msg)
    msg = re.sub(r"[A-Z]:\\[\w\\]+", "<path>", msg)
    msg = re.sub(r"sk-[\w-]+", "<key>", msg)
    return msg.strip()


def _logging_tool(**kwargs):
    """Drop-in replacement for ``mcp_server.tool()`` that adds invocation logging.

    The returned wrapper is **async**: it dispatches the (sync) tool function
    to a worker thread and enforces ``_TOOL_TIMEOUT``.
    """
    import anyio

    from texmcp.cancellation import Cancelled, clear_token, new_token

    decorator = _original_tool(**kwargs)

    def wrapper(fn):
        @functools.wraps(fn)
        async def logged(*args, **kw):
            name = kwargs.get("name") or fn.__name__
            logger.info("TOOL %s called", name)
            t0 = time.monotonic()
            token = new_token()

            def _run_in_thread():
                advisories.drain()
                return fn(*args, **kw)

            try:
                try:
                    with anyio.fail_after(_TOOL_TIMEOUT):
                        result = await anyio.to_thread.run_sync(
                            _run_in_thread, abandon_on_cancel=True
                        )
                except TimeoutError:
                    token.set()
                    dt = time.monotonic() - t0
                    call_log.log_call(name, kw, dt * 1000, status="timeout", error="timeout")
                    logger.error(
                        "TOOL %s timed out after %.0fs (limit %ds); cancellation token set",
                        name,
                        dt,
                        _TOOL_TIMEOUT,
                    )
                    raise TexMCPError(
                        f"Tool {name} timed out after {int(dt)}s. The operation was cancelled."
                    )

                dt = time.monotonic() - t0
                rsize = len(result) if isinstance(result, str) else 0
                logger.info("TOOL %s completed in %.2fs (%d bytes)", name, dt, rsize)
                call_log.log_call(name, kw, dt * 1000, status="ok")
                return _cap_response(result, name) if isinstance(result, str) else result
            except Cancelled:
                dt = time.monotonic() - t0
                call_log.log_call(name, kw, dt * 1000, status="cancelled", error="cancelled")
                logger.info("TOOL %s cancelled after %.2fs", name, dt)
                raise TexMCPError(f"Tool {name} was cancelled.")
            except TexMCPError as exc:
                dt = time.monotonic() - t0
                call_log.log_call(name, kw, dt * 1000, status="error", error=str(exc))
                logger.warning(
                    "TOOL %s failed (%s) after %.2fs: %s",
                    name,
                    type(exc).__name__,
                    dt,
                    exc,
                )
                raise
            except Exception as exc:
                dt = time.monotonic() - t0
                call_log.log_call(name, kw, dt * 1000, status="crash", error=str(exc))
                logger.error(
                    "TOOL %s crashed after %.2fs:\n%s",
                    name,
                    dt,
                    traceback.format_exc(),
                )
                raise TexMCPError(
                    f"Internal error in {name}: {type(exc).__name__}: {_sanitize_exc(exc)}."
                ) from exc
            finally:
                clear_token()

        return decorator(logged)

    return wrapper


mcp_server.tool = _logging_tool  # type: ignore[assignment]


# ---------------------------------------------------------------------------
# Routing helpers: one per tool, returning JSON built by hints
# ---------------------------------------------------------------------------


def _route_equation(
    description: str,
    format: str = "display",  # noqa: A002
    numbered: bool = False,
    context: str = "",
) -> str:
    cfg = get_config()
    spec = FormatSpec(environment=format.strip().lower(), numbered=bool(numbered))
    try:
        result = equation.generate_equation(
            description,
            spec,
            context=context,
            generator=lambda d, c: llm.generate_equation(d, c, config=cfg),
        )
    except TexMCPError as exc:
        return hints_mod.error(
            str(exc),
            hints={"retry": "generate-latex-equation(description='<rephrased>')"},
            stage=exc.stage,
        )
    return hints_mod.response(result.to_dict(), hints=hints_mod.equation_hints(result.latex))


def _route_validate(latex: str, suggestions: bool = True) -> str:
    try:
        validate_text(latex, "latex", allow_empty=True)
    except TexMCPError as exc:
        return hints_mod.error(str(exc), stage=exc.stage)
    issues = equation.validate_equation(latex, with_suggestions=suggestions)
    unknown = [i["command"] for i in issues if i["kind"] == "unknown_command"]
    data = {"valid": not issues, "issue_count": len(issues), "issues": issues}
    return hints_mod.response(data, hints=hints_mod.validation_hints(unknown))


def _route_suggest(command: str, limit: int = 5) -> str:
    try:
        bare = validate_command_name(command)
        validate_limit(limit)
    except TexMCPError as exc:
        return hints_mod.error(str(exc), stage=exc.stage)
    ranked = suggest_with_distance(bare, limit=limit)
    data = {
        "command": bare,
        "known": is_valid_command(bare),
        "category": categorize_command(bare),
        "suggestions": [
            {"name": name, "distance": dist, "category": categorize_command(name)}
            for name, dist in ranked
        ],
    }
    return hints_mod.response(data, hints=hints_mod.suggestion_hints(bare))


def _route_document(
    description: str,
    document_type: str = "article",
    include_packages: bool = True,
) -> str:
    cfg = get_config()
    try:
        result = document.create_document_structure(
            description,
            document_type=document_type,
            include_packages=include_packages,
            generator=lambda d, t, p: llm.generate_document(d, t, p, config=cfg),
        )
    except TexMCPError as exc:
        return hints_mod.error(
            str(exc),
            hints={"types": ", ".join(DOCUMENT_TYPES)},
            stage=exc.stage,
        )
    return hints_mod.response(
        result.to_dict(), hints=hints_mod.document_hints(document_type.strip().lower())
    )


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp_server.tool(name="generate-latex-equation")
def generate_latex_equation(
    description: str,
    format: str = "display",  # noqa: A002
    numbered: bool = False,
    context: str = "",
) -> str:
    """Convert a natural-language description into a formatted LaTeX equation.

    Well-known equations (quadratic formula, Maxwell's equations, ...) and
    simple derivatives/integrals are answered instantly; anything else goes
    to the model.

    Args:
        description: What the equation expresses, e.g. 'derivative of x^3'.
        format: inline | display | align | gather | multline.
        numbered: Use the numbered environment (ignored for inline).
        context: Optional extra context for the model.
    """
    return _route_equation(description, format=format, numbered=numbered, context=context)


@mcp_server.tool(name="validate-latex-equation")
def validate_latex_equation(latex: str, suggestions: bool = True) -> str:
    """Check LaTeX for unbalanced braces/$, mismatched environments, unknown commands.

    Args:
        latex: The LaTeX fragment to check.
        suggestions: Attach closest registry commands to unknown ones.
    """
    return _route_validate(latex, suggestions=suggestions)


@mcp_server.tool(name="suggest-latex-command")
def suggest_latex_command(command: str, limit: int = 5) -> str:
    """Closest known LaTeX commands by edit distance.

    Args:
        command: Command name, with or without the backslash.
        limit: How many suggestions (1-50).
    """
    return _route_suggest(command, limit=limit)


@mcp_server.tool(name="create-document-structure")
def create_document_structure(
    description: str,
    document_type: str = "article",
    include_packages: bool = True,
) -> str:
    """Generate a LaTeX document skeleton with preamble and sections.

    Args:
        description: What the document is about.
        document_type: article | report | book | letter | presentation | thesis.
        include_packages: Add the usual \\usepackage lines.
    """
    return _route_document(
        description, document_type=document_type, include_packages=include_packages
    )


# ---------------------------------------------------------------------------
# HTTP transport
# ---------------------------------------------------------------------------


@mcp_server.custom_route("/health", methods=["GET"])
async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


@mcp_server.custom_route("/tools", methods=["GET"])
async def list_tools(request: Request) -> JSONResponse:
    tools = await mcp_server.list_tools()
    return JSONResponse(
        {"tools": [t.model_dump(mode="json", exclude_none=True) for t in tools]}
    )


def build_http_app(cfg: texmcp_config.ServerConfig | None = None) -> Starlette:
    """Streamable-HTTP app with CORS and the per-client rate limit."""
    cfg = cfg or get_config()
    app = mcp_server.streamable_http_app()
    limiter = SlidingWindowLimiter(cfg.rate_limit_max, cfg.rate_limit_window_s)
    app.add_middleware(
        RateLimitMiddleware, limiter=limiter, max_request_bytes=cfg.max_request_bytes
    )
    # Added last so it wraps the limiter and 429s still carry CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Mcp-Session-Id"],
    )
    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="texmcp", description="LaTeX tools over MCP")
    parser.add_argument(
        "transport",
        nargs="?",
        choices=["stdio", "http"],
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    parser.add_argument("--host", help="Bind address for http (default from config)")
    parser.add_argument("--port", type=int, help="Port for http (default from config)")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"YAML config file (default: {texmcp_paths.default_config_path()})",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the texmcp MCP server."""
    args = _parse_args(argv)
    cfg = texmcp_config.load_config(args.config or texmcp_paths.default_config_path())
    if args.host:
        cfg.host = args.host
    if args.port is not None:
        cfg.port = args.port
    configure(cfg.validate())
    logger.info("Supported formats: %s", ", ".join(ENVIRONMENT_NAMES))

    try:
        if args.transport == "http":
            import uvicorn

            logger.info("Serving streamable HTTP on http://%s:%d/mcp", cfg.host, cfg.port)
            uvicorn.run(
                build_http_app(cfg),
                host=cfg.host,
                port=cfg.port,
                log_level=cfg.log_level.lower(),
            )
        else:
            mcp_server.run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("texmcp server stopped (keyboard interrupt)")
    except Exception:
        logger.critical("texmcp server crashed:\n%s", traceback.format_exc())
        raise


if __name__ == "__main__":
    main()
