"""
Tests for the outbound call rate limiter.
"""

import asyncio

import pytest

from quizbridge.utils.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        RateLimiter(0)


def test_first_call_does_not_wait():
    clock = FakeClock()
    limiter = RateLimiter(requests_per_minute=30, clock=clock, sleep=clock.sleep)
    assert asyncio.run(limiter.acquire()) == 0
    assert clock.sleeps == []


def test_spaces_consecutive_calls():
    clock = FakeClock()
    limiter = RateLimiter(requests_per_minute=30, clock=clock, sleep=clock.sleep)

    async def three_calls():
        for _ in range(3):
            await limiter.acquire()

    asyncio.run(three_calls())

    assert clock.sleeps == [2.0, 2.0]
    assert limiter.calls == 3
    assert limiter.total_wait == 4.0


def test_elapsed_time_counts_toward_interval():
    clock = FakeClock()
    limiter = RateLimiter(requests_per_minute=30, clock=clock, sleep=clock.sleep)

    async def calls():
        await limiter.acquire()
        clock.now += 1.5
        return await limiter.acquire()

    assert asyncio.run(calls()) == pytest.approx(0.5)
