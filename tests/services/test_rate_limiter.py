# tests/services/test_rate_limiter.py
"""Tests for the login rate limiter."""

from __future__ import annotations

import asyncio

import pytest

from dbright_site.services.rate_limiter import (
    LOCKOUT_SECONDS,
    MAX_ATTEMPTS,
    WINDOW_SECONDS,
    LoginRateLimiter,
    RateLimitSweeper,
)


def test_first_five_attempts_are_allowed(rate_limiter: LoginRateLimiter) -> None:
    remaining = [rate_limiter.check("client").remaining_attempts for _ in range(MAX_ATTEMPTS)]

    assert remaining == [4, 3, 2, 1, 0]


def test_sixth_attempt_in_window_locks_out(rate_limiter: LoginRateLimiter, fake_clock) -> None:
    for _ in range(MAX_ATTEMPTS):
        assert rate_limiter.check("client").allowed

    decision = rate_limiter.check("client")
    assert decision.allowed is False
    assert decision.retry_after == LOCKOUT_SECONDS
    assert decision.lockout_until == fake_clock.now + LOCKOUT_SECONDS


def test_lockout_reports_remaining_seconds_rounded_up(rate_limiter: LoginRateLimiter, fake_clock) -> None:
    for _ in range(MAX_ATTEMPTS + 1):
        rate_limiter.check("client")

    fake_clock.advance(100.4)
    decision = rate_limiter.check("client")
    assert decision.allowed is False
    assert decision.retry_after == LOCKOUT_SECONDS - 100


def test_lockout_expires_into_fresh_window(rate_limiter: LoginRateLimiter, fake_clock) -> None:
    for _ in range(MAX_ATTEMPTS + 1):
        rate_limiter.check("client")

    fake_clock.advance(LOCKOUT_SECONDS + 1)
    decision = rate_limiter.check("client")
    assert decision.allowed is True
    assert decision.remaining_attempts == MAX_ATTEMPTS - 1


def test_window_expiry_resets_count(rate_limiter: LoginRateLimiter, fake_clock) -> None:
    for _ in range(MAX_ATTEMPTS):
        rate_limiter.check("client")

    fake_clock.advance(WINDOW_SECONDS + 1)
    assert rate_limiter.check("client").remaining_attempts == MAX_ATTEMPTS - 1


def test_clients_are_counted_independently(rate_limiter: LoginRateLimiter) -> None:
    for _ in range(MAX_ATTEMPTS + 1):
        rate_limiter.check("attacker")

    assert rate_limiter.check("operator").allowed is True


def test_reset_forgets_client(rate_limiter: LoginRateLimiter) -> None:
    for _ in range(MAX_ATTEMPTS + 1):
        rate_limiter.check("client")

    rate_limiter.reset("client")
    assert rate_limiter.info("client").attempts == 0
    assert rate_limiter.check("client").allowed is True


def test_info_does_not_count_an_attempt(rate_limiter: LoginRateLimiter, fake_clock) -> None:
    rate_limiter.check("client")
    rate_limiter.info("client")
    assert rate_limiter.info("client").attempts == 1

    for _ in range(MAX_ATTEMPTS):
        rate_limiter.check("client")
    fake_clock.advance(10)
    info = rate_limiter.info("client")
    assert info.locked_out is True
    assert info.retry_after == LOCKOUT_SECONDS - 10


def test_sweep_drops_only_expired_entries(rate_limiter: LoginRateLimiter, fake_clock) -> None:
    rate_limiter.check("stale")
    for _ in range(MAX_ATTEMPTS + 1):
        rate_limiter.check("locked")
    fake_clock.advance(WINDOW_SECONDS + 1)
    rate_limiter.check("fresh")

    assert rate_limiter.sweep() == 1
    assert len(rate_limiter) == 2

    fake_clock.advance(LOCKOUT_SECONDS)
    assert rate_limiter.sweep() == 2
    assert len(rate_limiter) == 0


@pytest.mark.asyncio
async def test_sweeper_runs_periodically_and_stops() -> None:
    limiter = LoginRateLimiter(window_seconds=0)
    limiter.check("client")
    sweeper = RateLimitSweeper(limiter, interval_seconds=0.01)

    await sweeper.start()
    assert sweeper.running
    await asyncio.sleep(0.05)
    await sweeper.stop()

    assert not sweeper.running
    assert len(limiter) == 0
