"""MCP tool call logging.

Writes one JSONL file per server process under the logs directory
(``~/.texmcp/logs/`` unless configured otherwise). Per-PID files avoid
races between concurrent servers.
File naming: {start_datetime}_{pid}.jsonl
"""

from __future__ import annotations

import json
import os
from datetime import UTC, datetime
from pathlib import Path

from texmcp.paths import logs_dir as _default_logs_dir

# Session state, initialized on first log_call()
_logs_dir: Path | None = None
_session_file: Path | None = None

_MAX_PARAM_CHARS = 200
_MAX_ERROR_CHARS = 500


def set_logs_dir(path: Path | None) -> None:
    """Redirect call logs (None restores the default). Starts a new session file."""
    global _logs_dir, _session_file
    _logs_dir = path
    _session_file = None


def _dir() -> Path:
    return _logs_dir if _logs_dir is not None else _default_logs_dir()


def _init_session() -> Path:
    """Create the session log file with a metadata header line."""
    global _session_file
    d = _dir()
    d.mkdir(parents=True, exist_ok=True)
    now = datetime.now(UTC)
    pid = os.getpid()
    _session_file = d / f"{now.strftime('%Y%m%d_%H%M%S')}_{pid}.jsonl"
    meta = {
        "type": "session_start",
        "ts": now.strftime("%Y-%m-%dT%H:%M:%S"),
        "pid": pid,
    }
    _session_file.write_text(json.dumps(meta) + "\n", encoding="utf-8")
    return _session_file


def session_file() -> Path:
    """Current session log, created on first use."""
    if _session_file is None or not _session_file.parent.exists():
        return _init_session()
    return _session_file


def log_call(
    tool: str,
    params: dict,
    duration_ms: float,
    status: str = "ok",
    error: str = "",
) -> None:
    """Append one tool call record to the session JSONL file."""
    f = session_file()
    # Truncate large param values (whole documents) to keep the log readable
    short_params = {}
    for k, v in params.items():
        s = str(v)
        short_params[k] = s[:_MAX_PARAM_CHARS] + "…" if len(s) > _MAX_PARAM_CHARS else s
    entry = {
        "type": "call",
        "ts": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S"),
        "tool": tool,
        "params": short_params,
        "ms": round(duration_ms, 1),
        "status": status,
    }
    if error:
        entry["error"] = error[:_MAX_ERROR_CHARS]
    with open(f, "a", encoding="utf-8") as fp:
        fp.write(json.dumps(entry, ensure_ascii=False) + "\n")
