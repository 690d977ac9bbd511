"""Shared test fixtures for texmcp."""

from pathlib import Path

import pytest

from texmcp import advisories, call_log
from texmcp.config import ServerConfig
from texmcp.llm import GeneratedEquation


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    """Keep every test away from the real ~/.texmcp and the real API key."""
    monkeypatch.setenv("TEXMCP_HOME", str(tmp_path / "home"))
    for name in (
        "ANTHROPIC_API_KEY",
        "TEXMCP_HOST",
        "TEXMCP_PORT",
        "TEXMCP_CORS_ORIGINS",
        "TEXMCP_API_URL",
        "TEXMCP_MODEL",
        "TEXMCP_MAX_TOKENS",
        "TEXMCP_LOG_LEVEL",
        "TEXMCP_LOG_DIR",
        "TEXMCP_RATE_LIMIT_MAX",
        "TEXMCP_RATE_LIMIT_WINDOW",
    ):
        monkeypatch.delenv(name, raising=False)
    call_log.set_logs_dir(tmp_path / "logs")
    advisories.drain()
    yield
    advisories.drain()
    call_log.set_logs_dir(None)


@pytest.fixture
def keyed_config() -> ServerConfig:
    """Config with a dummy API key and a local API URL."""
    return ServerConfig(api_key="sk-test", api_url="https://api.test")


@pytest.fixture
def fake_generator():
    """Stand-in for the model: records calls, returns a fixed equation."""
    calls: list[tuple[str, str]] = []

    def gen(description: str, context: str) -> GeneratedEquation:
        calls.append((description, context))
        return GeneratedEquation(latex=r"\alpha + \beta", explanation="Sum of two angles.")

    gen.calls = calls  # type: ignore[attr-defined]
    return gen
