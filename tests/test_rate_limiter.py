import pytest
from fastapi import HTTPException

from quizplay.utils.rate_limiter import RateLimiter


def test_minute_window():
    limiter = RateLimiter(requests_per_minute=2, requests_per_hour=100)
    limiter.check("user:1", now=0)
    limiter.check("user:1", now=1)

    with pytest.raises(HTTPException) as exc:
        limiter.check("user:1", now=2)
    assert exc.value.status_code == 429
    assert exc.value.detail["retry_after"] == 60

    # other clients are unaffected, and the window slides
    limiter.check("user:2", now=2)
    limiter.check("user:1", now=61)


def test_hour_window():
    limiter = RateLimiter(requests_per_minute=100, requests_per_hour=3)
    for ts in (0, 100, 200):
        limiter.check("ip:1.2.3.4", now=ts)

    with pytest.raises(HTTPException) as exc:
        limiter.check("ip:1.2.3.4", now=300)
    assert exc.value.detail["retry_after"] == 3600

    limiter.check("ip:1.2.3.4", now=3601)


def test_idle_clients_are_forgotten():
    limiter = RateLimiter(requests_per_minute=10, requests_per_hour=100)
    for i in range(5000):
        limiter.check(f"user:{i}", now=0.0)
    assert len(limiter.history) == 5000

    limiter.check("user:0", now=7200.0)

    assert list(limiter.history) == ["user:0"]
    assert list(limiter.history["user:0"]) == [7200.0]


def test_active_clients_survive_sweep():
    limiter = RateLimiter(requests_per_minute=10, requests_per_hour=100)
    limiter.check("user:old", now=0.0)
    limiter.check("user:recent", now=3000.0)

    limiter.check("user:new", now=3700.0)

    assert set(limiter.history) == {"user:recent", "user:new"}
