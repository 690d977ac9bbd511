"""Thread-local advisory accumulator.

Deep code can push non-fatal notes without raising or changing its return
value. The ``hints.response()`` builder drains the accumulator and merges
the notes into the JSON response under an ``"advisories"`` key.

Usage::

    from texmcp import advisories
    advisories.add("llm_fallback", "No known pattern matched; asked the model.")

Categories (by convention, not enforced):

- ``format_fallback``   unknown environment name, ``equation*`` used
- ``llm_fallback``      no fast-path match, the external model answered
- ``unknown_commands``  generated LaTeX uses commands outside the registry
"""

from __future__ import annotations

import threading

_thread_local = threading.local()


def _get_store() -> list[dict[str, str]]:
    if not hasattr(_thread_local, "advisories"):
        _thread_local.advisories = []
    return _thread_local.advisories


def add(category: str, message: str, action: str = "") -> None:
    """Push an advisory.  Called from anywhere in the call stack."""
    entry: dict[str, str] = {"category": category, "message": message}
    if action:
        entry["action"] = action
    _get_store().append(entry)


def drain() -> list[dict[str, str]]:
    """Pop all advisories (called by the response builder)."""
    store = _get_store()
    advs = store.copy()
    store.clear()
    return advs


def peek() -> list[dict[str, str]]:
    """Read advisories without draining (for tests)."""
    return list(_get_store())
