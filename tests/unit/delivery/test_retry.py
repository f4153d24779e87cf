"""
Module: test_retry.py
Description: Unit tests for the delivery retry policy.

Tests the backoff schedule, the tenacity wait strategy and the delivery
state machine, driving the retry controller with plain coroutines.
"""

import pytest
from tenacity import RetryCallState

from roastsim.delivery.errors import TransientDeliveryError
from roastsim.delivery.retry import (
    DeliveryTracker,
    backoff_seconds,
    build_retrying,
    wait_delivery_backoff,
)
from roastsim.models.delivery import AttemptOutcome, DeliveryState


class TestBackoffSchedule:
    """Backoff is 2**attempt * 0.5 seconds."""

    def test_backoff_sequence(self):
        assert [backoff_seconds(n) for n in range(1, 5)] == [1.0, 2.0, 4.0, 8.0]

    def test_custom_base(self):
        assert backoff_seconds(3, base_seconds=0.1) == pytest.approx(0.8)

    def test_wait_strategy_uses_attempt_number(self):
        wait = wait_delivery_backoff()
        state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})

        state.attempt_number = 1
        assert wait(state) == 1.0
        state.attempt_number = 2
        assert wait(state) == 2.0


class TestRetryController:
    """Retrying with the tracker hooks attached."""

    @pytest.mark.asyncio
    async def test_transient_failures_then_success(self, fake_sleep, sleeps):
        tracker = DeliveryTracker()
        calls = []

        async def flaky():
            calls.append(len(calls) + 1)
            if len(calls) < 3:
                raise TransientDeliveryError("boom", status_code=502)
            return "done"

        result = await build_retrying(3, tracker, sleep=fake_sleep)(flaky)
        tracker.succeeded(200)

        assert result == "done"
        assert calls == [1, 2, 3]
        assert sleeps == [1.0, 2.0]
        assert tracker.state == DeliveryState.SUCCEEDED
        assert tracker.total_backoff_seconds == 3.0
        assert [a.status_code for a in tracker.attempts] == [502, 502, 200]

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_last_error(self, fake_sleep, sleeps):
        tracker = DeliveryTracker()
        errors = [TransientDeliveryError(f"failure {n}") for n in (1, 2)]

        async def always_fails():
            raise errors.pop(0)

        with pytest.raises(TransientDeliveryError, match="failure 2"):
            await build_retrying(2, tracker, sleep=fake_sleep)(always_fails)
        tracker.failed()

        assert sleeps == [1.0]
        assert tracker.state == DeliveryState.FAILED
        assert [a.outcome for a in tracker.attempts] == [
            AttemptOutcome.TRANSIENT_FAILURE,
            AttemptOutcome.FATAL_FAILURE,
        ]
        assert tracker.history == [
            (DeliveryState.IDLE, 0),
            (DeliveryState.ATTEMPTING, 1),
            (DeliveryState.BACKOFF, 1),
            (DeliveryState.ATTEMPTING, 2),
            (DeliveryState.FAILED, 2),
        ]

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self, fake_sleep, sleeps):
        tracker = DeliveryTracker()
        calls = []

        async def broken():
            calls.append(1)
            raise KeyError("bug")

        with pytest.raises(KeyError):
            await build_retrying(3, tracker, sleep=fake_sleep)(broken)

        assert len(calls) == 1
        assert sleeps == []


class TestDeliveryTracker:
    """State machine bookkeeping."""

    def test_initial_state(self):
        tracker = DeliveryTracker()

        assert tracker.state == DeliveryState.IDLE
        assert tracker.attempt == 0
        assert tracker.attempts == []
        assert tracker.history == [(DeliveryState.IDLE, 0)]

    def test_failed_without_attempts(self):
        tracker = DeliveryTracker()
        tracker.failed()

        assert tracker.state == DeliveryState.FAILED
        assert tracker.attempts == []
