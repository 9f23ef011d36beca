"""Tests for the extraction retry policy."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from meeting_tasks.config import Settings
from meeting_tasks.errors import (
    ExtractionFailedError,
    MalformedResponseError,
    ModelTimeoutError,
    NoTasksExtractedError,
)
from meeting_tasks.extraction.retry import RetryPolicy, run_with_retries


class TestRetryPolicy:
    def test_defaults(self) -> None:
        policy = RetryPolicy()
        assert policy.max_retries == 2
        assert policy.attempts == 3

    def test_exponential_delays(self) -> None:
        policy = RetryPolicy(base_delay=1.0)
        assert [policy.delay_for(n) for n in range(3)] == [1.0, 2.0, 4.0]

    @pytest.mark.parametrize(("max_retries", "base_delay"), [(-1, 1.0), (2, -0.5)])
    def test_negative_values_rejected(self, max_retries: int, base_delay: float) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=max_retries, base_delay=base_delay)

    def test_from_settings(self) -> None:
        settings = Settings(_env_file=None, extraction_max_retries=4, retry_base_delay_seconds=0.25)
        policy = RetryPolicy.from_settings(settings)
        assert policy == RetryPolicy(max_retries=4, base_delay=0.25)


# ---------------------------------------------------------------------------
# run_with_retries
# ---------------------------------------------------------------------------


class TestRunWithRetries:
    def test_first_attempt_succeeds(
        self, fake_sleep: Callable[[float], None], sleeps: list[float]
    ) -> None:
        operation = MagicMock(return_value=["a"])
        assert run_with_retries(operation, RetryPolicy(), fake_sleep) == ["a"]
        operation.assert_called_once()
        assert sleeps == []

    def test_recovers_after_two_failures(
        self, fake_sleep: Callable[[float], None], sleeps: list[float]
    ) -> None:
        operation = MagicMock(
            side_effect=[MalformedResponseError("bad"), ModelTimeoutError("slow"), ["task"]]
        )
        assert run_with_retries(operation, RetryPolicy(), fake_sleep) == ["task"]
        assert operation.call_count == 3
        assert sleeps == [1.0, 2.0]

    def test_exhaustion_wraps_last_failure(
        self, fake_sleep: Callable[[float], None], sleeps: list[float]
    ) -> None:
        operation = MagicMock(
            side_effect=[
                MalformedResponseError("first"),
                MalformedResponseError("second"),
                ModelTimeoutError("Request timed out"),
            ]
        )
        with pytest.raises(ExtractionFailedError) as exc_info:
            run_with_retries(operation, RetryPolicy(), fake_sleep)

        err = exc_info.value
        assert operation.call_count == 3
        assert err.attempts == 3
        assert err.category == "ModelTimeoutError"
        assert isinstance(err.cause, ModelTimeoutError)
        assert err.__cause__ is err.cause
        assert "Request timed out" in str(err)
        assert "after 3 attempt(s)" in str(err)
        # No sleep after the final attempt
        assert sleeps == [1.0, 2.0]

    def test_empty_result_counts_as_failure(
        self, fake_sleep: Callable[[float], None], sleeps: list[float]
    ) -> None:
        operation = MagicMock(side_effect=[[], ["x"]])
        assert run_with_retries(operation, RetryPolicy(), fake_sleep) == ["x"]
        assert sleeps == [1.0]

    def test_always_empty(self, fake_sleep: Callable[[float], None]) -> None:
        operation = MagicMock(return_value=[])
        with pytest.raises(ExtractionFailedError) as exc_info:
            run_with_retries(operation, RetryPolicy(), fake_sleep)
        assert isinstance(exc_info.value.cause, NoTasksExtractedError)

    def test_no_retries(self, fake_sleep: Callable[[float], None], sleeps: list[float]) -> None:
        operation = MagicMock(side_effect=RuntimeError("boom"))
        with pytest.raises(ExtractionFailedError) as exc_info:
            run_with_retries(operation, RetryPolicy(max_retries=0), fake_sleep)
        operation.assert_called_once()
        assert exc_info.value.attempts == 1
        assert exc_info.value.category == "RuntimeError"
        assert sleeps == []

    def test_custom_base_delay(
        self, fake_sleep: Callable[[float], None], sleeps: list[float]
    ) -> None:
        operation = MagicMock(side_effect=ValueError("nope"))
        with pytest.raises(ExtractionFailedError):
            run_with_retries(operation, RetryPolicy(max_retries=3, base_delay=0.5), fake_sleep)
        assert sleeps == [0.5, 1.0, 2.0]
