"""Tests for the cooperative cancellation mechanism."""

from __future__ import annotations

import threading

import pytest

from texmcp.cancellation import (
    Cancelled,
    check_cancelled,
    clear_token,
    is_cancelled,
    new_token,
)


class TestToken:
    """Basic token lifecycle."""

    def test_new_token_returns_event(self):
        token = new_token()
        assert isinstance(token, threading.Event)
        assert not token.is_set()
        clear_token()

    def test_check_cancelled_no_token(self):
        clear_token()
        check_cancelled()  # should not raise

    def test_check_cancelled_token_not_set(self):
        new_token()
        check_cancelled()
        clear_token()

    def test_check_cancelled_raises_when_set(self):
        token = new_token()
        token.set()
        with pytest.raises(Cancelled, match="cancelled"):
            check_cancelled()
        clear_token()

    def test_check_cancelled_includes_context(self):
        token = new_token()
        token.set()
        with pytest.raises(Cancelled, match="model request"):
            check_cancelled("model request attempt 2")
        clear_token()

    def test_is_cancelled(self):
        clear_token()
        assert not is_cancelled()
        token = new_token()
        assert not is_cancelled()
        token.set()
        assert is_cancelled()
        clear_token()
        assert not is_cancelled()


class TestThreading:
    def test_token_visible_from_worker_via_copied_context(self):
        """anyio.to_thread copies the context, so the worker sees the token."""
        import contextvars

        token = new_token()
        token.set()
        seen: list[bool] = []
        ctx = contextvars.copy_context()
        t = threading.Thread(target=lambda: seen.append(ctx.run(is_cancelled)))
        t.start()
        t.join()
        assert seen == [True]
        clear_token()
