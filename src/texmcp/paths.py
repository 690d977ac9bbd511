"""Canonical directory names for texmcp.

Layout:
  ~/.texmcp/         home_dir()   default config file
  ~/.texmcp/logs/    logs_dir()   per-process call logs and server.log
"""

from __future__ import annotations

import os
from pathlib import Path

DOT_DIR = ".texmcp"


def home_dir() -> Path:
    """Return ~/.texmcp/, or $TEXMCP_HOME when set."""
    override = os.environ.get("TEXMCP_HOME")
    if override:
        return Path(override)
    return Path.home() / DOT_DIR


def logs_dir() -> Path:
    """Return the directory holding call logs and the rotating server log."""
    return home_dir() / "logs"


def default_config_path() -> Path:
    """Return ~/.texmcp/config.yaml."""
    return home_dir() / "config.yaml"
