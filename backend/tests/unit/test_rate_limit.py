"""
Unit Tests: In-memory rate limiter

Test cases:
- Requests under the threshold pass, the next one is rejected
- Keys are counted independently
- Window expiry resets the counter
- RateLimit-* headers
"""

import pytest

from friday.ratelimit import RateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def test_allows_up_to_max_then_rejects(clock):
    limiter = RateLimiter(max_requests=3, window_seconds=60, clock=clock)

    decisions = [limiter.hit("a") for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert decisions[0].remaining == 2
    assert decisions[-1].remaining == 0


def test_keys_are_independent(clock):
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)

    assert limiter.hit("a").allowed
    assert limiter.hit("b").allowed
    assert not limiter.hit("a").allowed


def test_window_expiry_resets(clock):
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
    limiter.hit("a")
    assert not limiter.hit("a").allowed

    clock.now += 61
    assert limiter.hit("a").allowed


def test_reset_clears_all_keys(clock):
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
    limiter.hit("a")
    limiter.reset()
    assert limiter.hit("a").allowed


def test_headers(clock):
    limiter = RateLimiter(max_requests=5, window_seconds=900, clock=clock)
    clock_start = clock.now
    limiter.hit("a")
    clock.now = clock_start + 100

    headers = limiter.hit("a").headers()

    assert headers == {
        "RateLimit-Limit": "5",
        "RateLimit-Remaining": "3",
        "RateLimit-Reset": "800",
    }


def test_window_length_in_seconds():
    assert RateLimiter(max_requests=10, window_seconds=3600).window_length == 3600


def test_rejects_non_positive_configuration():
    with pytest.raises(ValueError):
        RateLimiter(max_requests=0, window_seconds=60)
