"""Cooperative cancellation for tool calls that wait on the network.

The async ``_logging_tool`` wrapper in ``texmcp.server`` installs a fresh
token (a ``threading.Event``) before each call and sets it when the call
times out. Sync code running in the worker thread checks it between
retries via :func:`check_cancelled`::

    from texmcp.cancellation import check_cancelled

    for attempt in range(max_retries + 1):
        check_cancelled("model request")
        ...
"""

from __future__ import annotations

import logging
import threading
from contextvars import ContextVar

logger = logging.getLogger("texmcp")


class Cancelled(Exception):
    """Raised by :func:`check_cancelled` when the current token is set."""


# Per-invocation token, set by the _logging_tool wrapper before dispatch.
_current_token: ContextVar[threading.Event | None] = ContextVar("_current_token", default=None)


def new_token() -> threading.Event:
    """Create a fresh cancellation token and install it as current."""
    token = threading.Event()
    _current_token.set(token)
    return token


def clear_token() -> None:
    """Remove the current token (cleanup after tool completes)."""
    _current_token.set(None)


def check_cancelled(context: str = "") -> None:
    """Raise :class:`Cancelled` if the current invocation has been cancelled.

    Args:
        context: Optional label for log messages (e.g. "model request").
    """
    token = _current_token.get()
    if token is not None and token.is_set():
        msg = f"Operation cancelled{f' during {context}' if context else ''}"
        logger.warning("CANCEL %s", msg)
        raise Cancelled(msg)


def is_cancelled() -> bool:
    """Check without raising."""
    token = _current_token.get()
    return token is not None and token.is_set()
