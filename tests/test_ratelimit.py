import pytest

from legal_rag.ratelimit import FixedWindowRateLimiter, RateLimitExceeded


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_max_then_blocks():
    clock = Clock()
    limiter = FixedWindowRateLimiter(max_requests=30, window_seconds=900, clock=clock)
    for _ in range(30):
        limiter.hit("1.2.3.4")
    with pytest.raises(RateLimitExceeded) as exc:
        limiter.hit("1.2.3.4")
    assert exc.value.retry_after == 900


def test_window_resets():
    clock = Clock()
    limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.hit("a")
    clock.now += 30
    limiter.hit("a")
    with pytest.raises(RateLimitExceeded) as exc:
        limiter.hit("a")
    assert exc.value.retry_after == 30

    clock.now += 30
    limiter.hit("a")  # new window


def test_keys_are_independent():
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=Clock())
    limiter.hit("a")
    limiter.hit("b")
    with pytest.raises(RateLimitExceeded):
        limiter.hit("a")
