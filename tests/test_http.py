"""Tests for texmcp.http retry logic.

All tests mock httpx and time.sleep to avoid real HTTP and delays.
"""

from unittest.mock import MagicMock, patch

import httpx as httpx_mod
import pytest

from texmcp.cancellation import Cancelled, clear_token, new_token
from texmcp.http import DEFAULT_TIMEOUT, post_with_retry


def _resp(status: int, headers: dict | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    return resp


class TestPostWithRetry:
    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_success_no_retry(self, mock_post, mock_sleep):
        mock_post.return_value = _resp(200)

        result = post_with_retry("https://example.com", json={"a": 1})
        assert result.status_code == 200
        assert mock_post.call_count == 1
        mock_sleep.assert_not_called()
        assert mock_post.call_args.kwargs["json"] == {"a": 1}
        assert mock_post.call_args.kwargs["timeout"] == DEFAULT_TIMEOUT

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_explicit_timeout_kept(self, mock_post, mock_sleep):
        mock_post.return_value = _resp(200)
        post_with_retry("https://example.com", timeout=5)
        assert mock_post.call_args.kwargs["timeout"] == 5

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_429_retries_then_succeeds(self, mock_post, mock_sleep):
        mock_post.side_effect = [_resp(429), _resp(429), _resp(200)]

        result = post_with_retry("https://example.com")
        assert result.status_code == 200
        assert mock_post.call_count == 3
        assert mock_sleep.call_count == 2

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_529_overloaded_retries(self, mock_post, mock_sleep):
        mock_post.side_effect = [_resp(529), _resp(200)]

        result = post_with_retry("https://example.com")
        assert result.status_code == 200
        assert mock_post.call_count == 2

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_exhausted_retries_returns_last(self, mock_post, mock_sleep):
        mock_post.return_value = _resp(429)

        result = post_with_retry("https://example.com", max_retries=2)
        assert result.status_code == 429
        assert mock_post.call_count == 3  # 1 initial + 2 retries

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_exponential_backoff(self, mock_post, mock_sleep):
        mock_post.return_value = _resp(503)

        post_with_retry("https://example.com", max_retries=3, backoff_base=1.0)
        waits = [c.args[0] for c in mock_sleep.call_args_list]
        assert waits == [1.0, 2.0, 4.0]

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_retry_after_header_respected(self, mock_post, mock_sleep):
        mock_post.side_effect = [_resp(429, {"retry-after": "7"}), _resp(200)]

        post_with_retry("https://example.com")
        mock_sleep.assert_called_once_with(7.0)

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_4xx_not_retried(self, mock_post, mock_sleep):
        mock_post.return_value = _resp(400)

        result = post_with_retry("https://example.com")
        assert result.status_code == 400
        assert mock_post.call_count == 1
        mock_sleep.assert_not_called()

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_connect_error_retries(self, mock_post, mock_sleep):
        mock_post.side_effect = [httpx_mod.ConnectError("refused"), _resp(200)]

        result = post_with_retry("https://example.com")
        assert result.status_code == 200
        assert mock_sleep.call_count == 1

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_timeout_exhausted_raises(self, mock_post, mock_sleep):
        mock_post.side_effect = httpx_mod.ReadTimeout("slow")

        with pytest.raises(httpx_mod.TimeoutException):
            post_with_retry("https://example.com", max_retries=1)
        assert mock_post.call_count == 2

    @patch("texmcp.http.time.sleep")
    @patch("texmcp.http.httpx.post")
    def test_cancelled_before_request(self, mock_post, mock_sleep):
        token = new_token()
        token.set()
        try:
            with pytest.raises(Cancelled):
                post_with_retry("https://example.com")
        finally:
            clear_token()
        mock_post.assert_not_called()
