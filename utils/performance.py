"""Timing and deadline utilities."""
from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Generator, Optional

from comparison.errors import ComparisonTimeoutError
from utils.logging import logger


@dataclass
class Timing:
    name: str
    duration: float
    metadata: dict = field(default_factory=dict)

    @property
    def milliseconds(self) -> float:
        return self.duration * 1000.0


@contextmanager
def track_time(name: str, **metadata) -> Generator[Timing, None, None]:
    """Context manager to track execution time."""
    timing = Timing(name=name, duration=0, metadata=metadata)
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing.duration = time.perf_counter() - start
        logger.debug("Timing: %s took %.3f seconds", name, timing.duration)


@dataclass(frozen=True)
class Deadline:
    """
    Absolute point on the monotonic clock after which work must stop.

    A deadline with ``expires_at=None`` never expires, so callers can thread
    one through unconditionally.
    """
    expires_at: Optional[float] = None

    @classmethod
    def after(cls, seconds: Optional[float]) -> "Deadline":
        if seconds is None:
            return cls()
        return cls(expires_at=time.monotonic() + seconds)

    def remaining(self) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at

    def check(self, stage: str) -> None:
        """Raise ComparisonTimeoutError if the deadline has passed."""
        if self.expired():
            logger.warning("Deadline exceeded during %s", stage)
            raise ComparisonTimeoutError(f"Comparison deadline exceeded during {stage}")
