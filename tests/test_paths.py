"""Tests for texmcp.paths."""

from pathlib import Path

from texmcp.paths import DOT_DIR, default_config_path, home_dir, logs_dir


def test_home_override(tmp_path, monkeypatch):
    monkeypatch.setenv("TEXMCP_HOME", str(tmp_path))
    assert home_dir() == tmp_path
    assert logs_dir() == tmp_path / "logs"
    assert default_config_path() == tmp_path / "config.yaml"


def test_home_default(monkeypatch):
    monkeypatch.delenv("TEXMCP_HOME", raising=False)
    assert home_dir() == Path.home() / DOT_DIR
