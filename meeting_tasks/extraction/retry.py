"""Bounded exponential-backoff retry for whole extraction attempts."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from meeting_tasks.errors import ExtractionFailedError, NoTasksExtractedError

if TYPE_CHECKING:
    from meeting_tasks.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry limits: ``max_retries + 1`` attempts, delays of ``base_delay * 2**attempt``.

    No jitter and no circuit breaker. A sustained provider outage makes every
    call wait through all delays before failing.
    """

    max_retries: int = 2
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")

    @property
    def attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the failed *attempt* (0-based)."""
        return self.base_delay * 2**attempt

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_retries=settings.extraction_max_retries,
            base_delay=settings.retry_base_delay_seconds,
        )


def run_with_retries(
    operation: Callable[[], Sequence[T]],
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> list[T]:
    """Call *operation* until it returns a non-empty result or attempts run out.

    Args:
        operation: One complete extraction attempt.
        policy: Attempt limit and backoff schedule.
        sleep: Blocking sleep, injectable for tests.

    Returns:
        The first non-empty result.

    Raises:
        ExtractionFailedError: Every attempt failed; wraps the last failure.
    """
    attempt = 0
    while True:
        logger.info("Parsing attempt %d/%d", attempt + 1, policy.attempts)
        try:
            result = list(operation())
            if not result:
                raise NoTasksExtractedError("No tasks were extracted from the conversation")
            return result
        except Exception as exc:
            logger.warning("Attempt %d failed: %s", attempt + 1, exc)
            if attempt >= policy.max_retries:
                logger.error("Max retries reached, giving up")
                raise ExtractionFailedError(exc, policy.attempts) from exc

        delay = policy.delay_for(attempt)
        logger.info("Retrying in %.1fs...", delay)
        sleep(delay)
        attempt += 1
