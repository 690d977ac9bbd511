"""Tests for texmcp.ratelimit: sliding window limiter and ASGI middleware."""

from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from texmcp.ratelimit import RateLimitMiddleware, SlidingWindowLimiter, _client_key


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestLimiter:
    def test_allows_up_to_max(self):
        limiter = SlidingWindowLimiter(3, 60.0, clock=FakeClock())
        assert [limiter.allow("a") for _ in range(4)] == [True, True, True, False]

    def test_keys_independent(self):
        limiter = SlidingWindowLimiter(1, 60.0, clock=FakeClock())
        assert limiter.allow("a")
        assert limiter.allow("b")
        assert not limiter.allow("a")

    def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(2, 60.0, clock=clock)
        limiter.allow("a")
        clock.now += 30
        limiter.allow("a")
        clock.now += 30  # first hit is exactly one window old, so it expires
        assert limiter.allow("a")

    def test_rejected_requests_are_recorded(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(1, 60.0, clock=clock)
        assert limiter.allow("a")
        clock.now += 50
        assert not limiter.allow("a")
        clock.now += 20  # first hit expired, the rejected one has not
        assert not limiter.allow("a")

    def test_retry_after(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(1, 60.0, clock=clock)
        assert limiter.retry_after("a") == 0.0
        limiter.allow("a")
        clock.now += 45
        assert limiter.retry_after("a") == 15.0

    def test_idle_keys_dropped(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(5, 60.0, clock=clock)
        for i in range(10_000):
            limiter.allow(f"10.0.{i // 256}.{i % 256}")
        clock.now += 61
        assert limiter.allow("new")
        assert list(limiter._hits) == ["new"]

    def test_active_keys_survive_sweep(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(1, 60.0, clock=clock)
        limiter.allow("idle")
        clock.now += 30
        limiter.allow("busy")
        clock.now += 31
        limiter.allow("other")
        assert set(limiter._hits) == {"busy", "other"}
        assert not limiter.allow("busy")

    def test_retry_after_drops_expired_key(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(1, 60.0, clock=clock)
        limiter.allow("a")
        clock.now += 60
        assert limiter.retry_after("a") == 0.0
        assert "a" not in limiter._hits

    def test_reset(self):
        limiter = SlidingWindowLimiter(1, 60.0, clock=FakeClock())
        limiter.allow("a")
        limiter.reset()
        assert limiter.allow("a")


class TestClientKey:
    def test_peer_address(self):
        assert _client_key({"client": ("203.0.113.7", 51234)}) == "203.0.113.7"

    def test_missing_client(self):
        assert _client_key({"client": None}) == "unknown"
        assert _client_key({}) == "unknown"


def _app(limiter: SlidingWindowLimiter, max_bytes: int = 1_000) -> Starlette:
    async def echo(request):
        return PlainTextResponse("ok")

    app = Starlette(routes=[Route("/", echo, methods=["GET", "POST"])])
    app.add_middleware(RateLimitMiddleware, limiter=limiter, max_request_bytes=max_bytes)
    return app


class TestMiddleware:
    def test_passes_under_limit(self):
        client = TestClient(_app(SlidingWindowLimiter(2, 60.0)))
        assert client.get("/").text == "ok"

    def test_429_with_retry_after(self):
        client = TestClient(_app(SlidingWindowLimiter(2, 60.0, clock=FakeClock())))
        client.get("/")
        client.get("/")
        resp = client.get("/")
        assert resp.status_code == 429
        assert resp.json() == {"error": "Too many requests"}
        assert resp.headers["retry-after"] == "60"

    def test_413_over_size(self):
        client = TestClient(_app(SlidingWindowLimiter(10, 60.0), max_bytes=10))
        resp = client.post("/", content=b"x" * 11)
        assert resp.status_code == 413
        assert resp.json() == {"error": "Request entity too large"}

    def test_size_at_limit_ok(self):
        client = TestClient(_app(SlidingWindowLimiter(10, 60.0), max_bytes=10))
        assert client.post("/", content=b"x" * 10).status_code == 200
