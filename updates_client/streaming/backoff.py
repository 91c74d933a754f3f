"""
Reconnection backoff for the updates stream.

Delays grow exponentially with the retry attempt and are capped:
``delay = min(base ** attempt, max_delay)``. With the defaults this gives
2, 4, 8, 16 and 30 seconds for attempts 1 to 5, after which the client
gives up until the next explicit connect.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ReconnectPolicy:
    """Configuration for reconnect scheduling."""
    base: float = 2.0
    max_delay: float = 30.0
    max_attempts: int = 5

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ReconnectPolicy:
        """Build a policy from the ``updates.reconnect`` config section."""
        return cls(
            base=float(config["backoff_base"]),
            max_delay=float(config["max_delay"]),
            max_attempts=int(config["max_attempts"]),
        )

    def delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt`` (1-based)."""
        if attempt < 1:
            raise ValueError(f"Retry attempt must be >= 1, got {attempt}")
        # Cap before exponentiating large attempts
        if attempt > 64:
            return self.max_delay
        return min(self.base ** attempt, self.max_delay)

    def should_retry(self, attempts: int) -> bool:
        """Whether another retry may be scheduled after ``attempts`` retries."""
        return attempts < self.max_attempts


@dataclass
class RetryState:
    """Retry bookkeeping for one target URL."""
    attempts: int = 0

    def record_failure(self) -> int:
        """Count a new retry and return its 1-based attempt number."""
        self.attempts += 1
        return self.attempts

    def reset(self) -> None:
        self.attempts = 0
