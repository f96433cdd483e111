"""Token Bucket Rate Limiter.

Paces outbound sends (e.g. one Telegram message per subscriber) so a
fan-out does not trip the upstream's own flood control:
- Each send consumes a token
- Tokens refill at a constant rate
- Bursts allowed up to bucket capacity
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field

from ..config.constants import TELEGRAM_SEND_BURST, TELEGRAM_SEND_RATE


@dataclass
class RateLimiter:
    """Token bucket rate limiter.

    Usage:
        limiter = RateLimiter(rate=25.0, burst=25)

        await limiter.acquire()
        await client.send_message(chat_id, text)
    """

    # Configuration
    rate: float = TELEGRAM_SEND_RATE  # Tokens per second
    burst: int = TELEGRAM_SEND_BURST  # Maximum bucket capacity

    # State
    _tokens: float = field(init=False)
    _last_refill: float = field(init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise ValueError("rate must be positive")
        self._tokens = float(self.burst)
        self._last_refill = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        self._tokens = min(self.burst, self._tokens + (now - self._last_refill) * self.rate)
        self._last_refill = now

    async def acquire(self, tokens: int = 1) -> float:
        """Take `tokens` from the bucket, waiting for them if necessary.

        Returns:
            Seconds spent waiting (0 if tokens were available)
        """
        async with self._lock:
            self._refill()

            if self._tokens >= tokens:
                self._tokens -= tokens
                return 0.0

            wait_time = (tokens - self._tokens) / self.rate
            await asyncio.sleep(wait_time)
            self._refill()
            self._tokens = max(0.0, self._tokens - tokens)
            return wait_time

    @property
    def available_tokens(self) -> float:
        """Current number of available tokens (approximate)."""
        elapsed = time.monotonic() - self._last_refill
        return min(self.burst, self._tokens + elapsed * self.rate)
