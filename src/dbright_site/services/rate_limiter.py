"""In-memory rate limiting for admin login attempts.

State lives in the process that owns the limiter; it is not shared between
server instances. A horizontally scaled deployment needs a shared counter
store instead.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Final

logger = logging.getLogger(__name__)

MAX_ATTEMPTS: Final[int] = 5
WINDOW_SECONDS: Final[float] = 15 * 60
LOCKOUT_SECONDS: Final[float] = 30 * 60


@dataclass
class RateLimitEntry:
    """Attempt counter for one client identifier."""

    count: int
    first_attempt: float
    lockout_until: float | None = None


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate-limit check."""

    allowed: bool
    remaining_attempts: int | None = None
    lockout_until: float | None = None
    retry_after: int | None = None


@dataclass(frozen=True)
class RateLimitInfo:
    """Read-only view of a client's current limiter state."""

    attempts: int
    locked_out: bool
    retry_after: int | None = None


class LoginRateLimiter:
    """Per-client attempt counter with a fixed window and a lockout period."""

    def __init__(
        self,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        window_seconds: float = WINDOW_SECONDS,
        lockout_seconds: float = LOCKOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.lockout_seconds = lockout_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def check(self, client_id: str) -> RateLimitDecision:
        """Count one attempt for `client_id` and decide whether it may proceed.

        Must be called before credentials are evaluated.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(client_id)

            if entry is None:
                self._entries[client_id] = RateLimitEntry(count=1, first_attempt=now)
                return RateLimitDecision(True, remaining_attempts=self.max_attempts - 1)

            if entry.lockout_until is not None and entry.lockout_until > now:
                return RateLimitDecision(
                    False,
                    lockout_until=entry.lockout_until,
                    retry_after=math.ceil(entry.lockout_until - now),
                )

            if now - entry.first_attempt > self.window_seconds:
                self._entries[client_id] = RateLimitEntry(count=1, first_attempt=now)
                return RateLimitDecision(True, remaining_attempts=self.max_attempts - 1)

            entry.count += 1
            if entry.count > self.max_attempts:
                entry.lockout_until = now + self.lockout_seconds
                logger.warning("Login lockout engaged for client %s", client_id)
                return RateLimitDecision(
                    False,
                    lockout_until=entry.lockout_until,
                    retry_after=math.ceil(self.lockout_seconds),
                )

            return RateLimitDecision(True, remaining_attempts=self.max_attempts - entry.count)

    def reset(self, client_id: str) -> None:
        """Forget all attempts for `client_id`."""
        with self._lock:
            self._entries.pop(client_id, None)

    def info(self, client_id: str) -> RateLimitInfo:
        """Return attempts and lockout state without counting an attempt."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is None:
                return RateLimitInfo(attempts=0, locked_out=False)
            locked = entry.lockout_until is not None and entry.lockout_until > now
            retry_after = math.ceil(entry.lockout_until - now) if locked else None
            return RateLimitInfo(attempts=entry.count, locked_out=locked, retry_after=retry_after)

    def sweep(self) -> int:
        """Drop entries whose lockout has passed or whose window expired.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        with self._lock:
            expired = [
                key
                for key, entry in self._entries.items()
                if (entry.lockout_until is not None and entry.lockout_until < now)
                or (entry.lockout_until is None and now - entry.first_attempt > self.window_seconds)
            ]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Rate limiter sweep removed %d entries", len(expired))
        return len(expired)


class RateLimitSweeper:
    """Periodically calls `LoginRateLimiter.sweep` in the background."""

    def __init__(self, limiter: LoginRateLimiter, interval_seconds: float = 3600.0) -> None:
        self.limiter = limiter
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                self.limiter.sweep()
