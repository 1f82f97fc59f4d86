"""
Async token-bucket rate limiter with a FIFO wait queue.

NCBI E-utilities allow 3 requests/second without an API key and 10 with one
(https://www.ncbi.nlm.nih.gov/books/NBK25497/). One limiter instance should
be shared by every client that talks to E-utilities under the same identity,
so that the aggregate request rate stays below that ceiling no matter how
many logical requests are in flight.

Tokens are credited lazily: every call to ``wait_for_slot`` or
``check_limit`` computes the time elapsed since the last refill and credits
``floor(elapsed / interval * capacity)`` tokens. Waiters are handed tokens
strictly in arrival order. While anyone is waiting, a loop timer re-runs the
refill when the next token is due, so queued callers are released even if
no new caller arrives.
"""

import asyncio
import logging
import math
import time
from collections import deque
from collections.abc import Callable

from pydantic import BaseModel

from literature_scout.config import Settings
from literature_scout.exceptions import RateLimitTimeoutError

logger = logging.getLogger(__name__)


class RateLimiterStatus(BaseModel):
    """Point-in-time diagnostics for a rate limiter."""

    available_tokens: int
    capacity: int
    queue_length: int
    requests_per_second: float
    using_api_key: bool


class RateLimiter:
    """
    Token bucket holding ``capacity`` tokens, refilled every
    ``refill_interval`` seconds.

    Callers await ``wait_for_slot()`` before each outbound request. When the
    bucket is empty the caller is queued, not rejected. If ``max_wait`` is
    set, a caller queued for longer than that gets ``RateLimitTimeoutError``.
    """

    def __init__(
        self,
        capacity: int,
        refill_interval: float = 1.0,
        *,
        max_wait: float | None = 60.0,
        using_api_key: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if refill_interval <= 0:
            raise ValueError(f"refill_interval must be > 0, got {refill_interval}")

        self.capacity = capacity
        self.refill_interval = refill_interval
        self.max_wait = max_wait
        self.using_api_key = using_api_key
        self._clock = clock
        self._tokens = capacity
        self._last_refill = clock()
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._timer: asyncio.TimerHandle | None = None

        logger.debug(
            "Initialized rate limiter capacity=%d interval=%.3fs (%.2f req/s) api_key=%s",
            capacity,
            refill_interval,
            self.requests_per_second,
            using_api_key,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimiter":
        """Build the limiter for the API identity described by ``settings``."""
        capacity = (
            settings.requests_per_second_with_key
            if settings.has_api_key
            else settings.requests_per_second_without_key
        )
        return cls(
            capacity,
            settings.rate_limit_interval_seconds,
            max_wait=settings.rate_limit_max_wait_seconds,
            using_api_key=settings.has_api_key,
        )

    @property
    def requests_per_second(self) -> float:
        return self.capacity / self.refill_interval

    @property
    def available_tokens(self) -> int:
        return self._tokens

    @property
    def queue_length(self) -> int:
        return len(self._waiters)

    # -- Public API ----------------------------------------------------------

    async def wait_for_slot(self) -> None:
        """Resolve once a token has been granted to this caller."""
        self._refill()

        if self._tokens > 0:
            self._tokens -= 1
            return

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()
        self._waiters.append(waiter)
        self._schedule_refill(loop)
        logger.debug(
            "No tokens available, queued request (queue length=%d)",
            len(self._waiters),
        )

        start = self._clock()
        try:
            if self.max_wait is None:
                await waiter
            else:
                await asyncio.wait_for(waiter, self.max_wait)
        except asyncio.TimeoutError:
            self._discard(waiter)
            waited = self._clock() - start
            logger.warning(
                "Request timed out after %.1fs waiting for a rate limiter slot",
                waited,
            )
            raise RateLimitTimeoutError(waited, len(self._waiters)) from None
        except asyncio.CancelledError:
            self._discard(waiter)
            raise

    def check_limit(self) -> bool:
        """Return True if a token is available right now. Never consumes one."""
        self._refill()
        return self._tokens > 0

    def reset_counter(self) -> None:
        """Restore the bucket to full capacity and release queued callers."""
        self._tokens = self.capacity
        self._last_refill = self._clock()
        self._drain()
        logger.debug("Rate limiter reset, tokens restored to %d", self._tokens)

    def status(self) -> RateLimiterStatus:
        self._refill()
        return RateLimiterStatus(
            available_tokens=self._tokens,
            capacity=self.capacity,
            queue_length=len(self._waiters),
            requests_per_second=self.requests_per_second,
            using_api_key=self.using_api_key,
        )

    # -- Internals -----------------------------------------------------------

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        new_tokens = math.floor(elapsed / self.refill_interval * self.capacity)

        if new_tokens > 0:
            self._tokens = min(self.capacity, self._tokens + new_tokens)
            self._last_refill = now
            if self._waiters:
                logger.debug(
                    "Processing wait queue: tokens=%d queued=%d",
                    self._tokens,
                    len(self._waiters),
                )
            self._drain()

    def _drain(self) -> None:
        while self._tokens > 0 and self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                # Timed out or cancelled between scheduling and now
                continue
            self._tokens -= 1
            waiter.set_result(None)

    def _discard(self, waiter: asyncio.Future[None]) -> None:
        try:
            self._waiters.remove(waiter)
        except ValueError:
            pass

    def _schedule_refill(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._timer is not None:
            return
        per_token = self.refill_interval / self.capacity
        delay = max(0.0, per_token - (self._clock() - self._last_refill))
        self._timer = loop.call_later(delay, self._on_timer, loop)

    def _on_timer(self, loop: asyncio.AbstractEventLoop) -> None:
        self._timer = None
        self._refill()
        if self._waiters:
            self._schedule_refill(loop)

    def __repr__(self) -> str:
        return (
            f"RateLimiter(capacity={self.capacity}, "
            f"interval={self.refill_interval}s, tokens={self._tokens}, "
            f"queued={len(self._waiters)})"
        )
