"""Server configuration: environment variables overlaid by an optional YAML file.

Precedence (lowest first): built-in defaults, environment variables, the
YAML config file. The file is optional; a missing file means "use the
environment". ``create_default()`` writes a commented starter file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from texmcp.errors import ConfigError

DEFAULT_MODEL = "claude-3-5-sonnet-20240620"
DEFAULT_API_URL = "https://api.anthropic.com"


def _default_cors() -> list[str]:
    raw = os.environ.get("TEXMCP_CORS_ORIGINS", "")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name}={raw!r} is not an integer") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name}={raw!r} is not a number") from None


@dataclass
class ServerConfig:
    """Runtime settings for the MCP server and the model client."""

    host: str = field(default_factory=lambda: os.environ.get("TEXMCP_HOST", "localhost"))
    port: int = field(default_factory=lambda: _env_int("TEXMCP_PORT", 3000))
    cors_origins: list[str] = field(default_factory=_default_cors)
    api_key: str = field(default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", ""))
    api_url: str = field(default_factory=lambda: os.environ.get("TEXMCP_API_URL", DEFAULT_API_URL))
    model: str = field(default_factory=lambda: os.environ.get("TEXMCP_MODEL", DEFAULT_MODEL))
    max_tokens: int = field(default_factory=lambda: _env_int("TEXMCP_MAX_TOKENS", 1000))
    request_timeout: float = field(
        default_factory=lambda: _env_float("TEXMCP_REQUEST_TIMEOUT", 60.0)
    )
    max_request_bytes: int = field(
        default_factory=lambda: _env_int("TEXMCP_MAX_REQUEST_BYTES", 50 * 1024 * 1024)
    )
    rate_limit_max: int = field(default_factory=lambda: _env_int("TEXMCP_RATE_LIMIT_MAX", 30))
    rate_limit_window_s: float = field(
        default_factory=lambda: _env_float("TEXMCP_RATE_LIMIT_WINDOW", 60.0)
    )
    log_level: str = field(default_factory=lambda: os.environ.get("TEXMCP_LOG_LEVEL", "WARNING"))
    log_dir: str = field(default_factory=lambda: os.environ.get("TEXMCP_LOG_DIR", ""))

    def validate(self) -> ServerConfig:
        """Check ranges; raises ConfigError. Returns self for chaining."""
        if not 0 < self.port < 65536:
            raise ConfigError(f"port {self.port} out of range", hint="Use 1-65535.")
        if self.rate_limit_max < 1:
            raise ConfigError("rate_limit_max must be at least 1")
        if self.rate_limit_window_s <= 0:
            raise ConfigError("rate_limit_window_s must be positive")
        if self.max_request_bytes < 1:
            raise ConfigError("max_request_bytes must be positive")
        if self.max_tokens < 1:
            raise ConfigError("max_tokens must be positive")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"unknown log_level {self.log_level!r}")
        return self


_DEFAULT_CONFIG = """\
# texmcp server configuration
# Every key is optional; environment variables supply the defaults
# (TEXMCP_HOST, TEXMCP_PORT, ANTHROPIC_API_KEY, TEXMCP_MODEL, ...).

# HTTP transport (ignored for stdio)
# host: localhost
# port: 3000
# cors_origins: ["*"]
# max_request_bytes: 52428800

# Sliding-window rate limit per client address
# rate_limit_max: 30
# rate_limit_window_s: 60

# Model used when no built-in pattern matches.
# Prefer ANTHROPIC_API_KEY in the environment over storing the key here.
# api_key: sk-...
# api_url: https://api.anthropic.com
# model: claude-3-5-sonnet-20240620
# max_tokens: 1000
# request_timeout: 60

# Logging: stderr level, and a directory for server.log (empty = off)
# log_level: WARNING
# log_dir: ""
"""


def create_default(path: Path) -> Path:
    """Write a starter config file if it doesn't exist. Returns the path."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_DEFAULT_CONFIG, encoding="utf-8")
    return path


def _coerce(name: str, value: Any, current: Any) -> Any:
    """Coerce a YAML value to the type of the field's current value."""
    try:
        if isinstance(current, int):
            return int(value)
        if isinstance(current, float):
            return float(value)
        if isinstance(current, list):
            if isinstance(value, str):
                return [v.strip() for v in value.split(",") if v.strip()]
            return [str(v) for v in value]
        return "" if value is None else str(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for '{name}': {value!r} ({e})") from e


def load_config(path: Path | None = None) -> ServerConfig:
    """Load and validate the server config.

    Args:
        path: Optional YAML file. Missing file → environment/defaults only.

    Raises:
        ConfigError: Invalid YAML, unknown keys, or out-of-range values.
    """
    cfg = ServerConfig()
    if path is None or not path.exists():
        return cfg.validate()

    raw = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    known = {f.name for f in fields(ServerConfig)}
    unknown = sorted(str(k) for k in data if k not in known)
    if unknown:
        raise ConfigError(
            f"Unknown key(s) in {path}: {', '.join(unknown)}",
            hint=f"Valid keys: {', '.join(sorted(known))}.",
        )

    for name, value in data.items():
        setattr(cfg, name, _coerce(name, value, getattr(cfg, name)))
    return cfg.validate()
