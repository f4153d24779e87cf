"""
Module: delivery/retry.py
Description: Retry policy for result delivery.

Builds the tenacity retry controller used by the delivery client and
tracks each delivery call as an explicit state machine:

    idle -> attempting(n) -> succeeded
                          -> backoff(n) -> attempting(n+1)
                          -> failed

The wait after attempt n is 2**n * 0.5 seconds (1s, 2s, 4s, ...). Waits go
through an injectable sleep coroutine, so the schedule can be checked
without a real clock.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Tuple

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_when_event_set,
)
from tenacity.wait import wait_base

from roastsim.delivery.errors import TransientDeliveryError
from roastsim.models.delivery import AttemptOutcome, DeliveryAttempt, DeliveryState
from roastsim.utils.logger import get_logger

logger = get_logger(__name__)

BACKOFF_BASE_SECONDS = 0.5
DEFAULT_MAX_ATTEMPTS = 3

StateListener = Callable[[DeliveryState, int], None]
SleepFn = Callable[[float], Awaitable[None]]


def backoff_seconds(attempt: int, base_seconds: float = BACKOFF_BASE_SECONDS) -> float:
    """
    Wait before the attempt following attempt number `attempt`.

    Example:
        >>> [backoff_seconds(n) for n in (1, 2, 3)]
        [1.0, 2.0, 4.0]
    """
    return (2 ** attempt) * base_seconds


class wait_delivery_backoff(wait_base):
    """Doubling wait keyed on the number of attempts made so far."""

    def __init__(self, base_seconds: float = BACKOFF_BASE_SECONDS):
        self.base_seconds = base_seconds

    def __call__(self, retry_state: RetryCallState) -> float:
        return backoff_seconds(retry_state.attempt_number, self.base_seconds)


class DeliveryTracker:
    """
    State of one delivery call.

    Fed by the tenacity hooks (before, after, before_sleep) and by the
    client on success or exhaustion. Keeps the attempt records returned
    to the caller and the full transition history.

    Attributes:
        state: Current DeliveryState
        attempt: Number of the current (or last) attempt, 0 when idle
        attempts: One DeliveryAttempt per network try, in order
        history: (state, attempt) for every transition, starting with idle
    """

    def __init__(self, listener: Optional[StateListener] = None):
        self.state = DeliveryState.IDLE
        self.attempt = 0
        self.attempts: List[DeliveryAttempt] = []
        self.history: List[Tuple[DeliveryState, int]] = [(DeliveryState.IDLE, 0)]
        self._listener = listener

    @property
    def total_backoff_seconds(self) -> float:
        return sum(record.backoff_seconds for record in self.attempts)

    def _transition(self, state: DeliveryState, attempt: int) -> None:
        self.state = state
        self.attempt = attempt
        self.history.append((state, attempt))

        if self._listener is None:
            return
        try:
            self._listener(state, attempt)
        except Exception as e:
            # Listener faults never affect the delivery itself
            logger.warning(
                "Delivery state listener failed",
                state=state.value,
                attempt=attempt,
                error=str(e),
                error_type=type(e).__name__
            )

    def _replace_last(self, **update) -> None:
        self.attempts[-1] = self.attempts[-1].model_copy(update=update)

    # tenacity hooks

    def before_attempt(self, retry_state: RetryCallState) -> None:
        self._transition(DeliveryState.ATTEMPTING, retry_state.attempt_number)

    def attempt_failed(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self.attempts.append(
            DeliveryAttempt(
                attempt=retry_state.attempt_number,
                outcome=AttemptOutcome.TRANSIENT_FAILURE,
                error=str(error) if error else None,
                status_code=getattr(error, 'status_code', None)
            )
        )
        logger.warning(
            "Result delivery attempt failed",
            attempt=retry_state.attempt_number,
            error=str(error) if error else None,
            status_code=getattr(error, 'status_code', None)
        )

    def before_backoff(self, retry_state: RetryCallState) -> None:
        wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
        self._replace_last(backoff_seconds=wait)
        logger.info(
            "Backing off before next delivery attempt",
            attempt=retry_state.attempt_number,
            backoff_seconds=wait
        )
        self._transition(DeliveryState.BACKOFF, retry_state.attempt_number)

    # terminal transitions

    def succeeded(self, status_code: int) -> None:
        self.attempts.append(
            DeliveryAttempt(
                attempt=self.attempt,
                outcome=AttemptOutcome.SUCCESS,
                status_code=status_code
            )
        )
        self._transition(DeliveryState.SUCCEEDED, self.attempt)

    def failed(self) -> None:
        if self.attempts:
            self._replace_last(outcome=AttemptOutcome.FATAL_FAILURE)
        self._transition(DeliveryState.FAILED, self.attempt)


def build_retrying(
    max_attempts: int,
    tracker: DeliveryTracker,
    base_seconds: float = BACKOFF_BASE_SECONDS,
    sleep: Optional[SleepFn] = None,
    cancel_event: Optional[asyncio.Event] = None
) -> AsyncRetrying:
    """
    Build the retry controller for one delivery call.

    Args:
        max_attempts: Total number of network attempts allowed
        tracker: State machine fed by the retry hooks
        base_seconds: Backoff unit (wait after attempt n is 2**n * base_seconds)
        sleep: Coroutine used for backoff waits (asyncio.sleep by default)
        cancel_event: When set, no further attempt starts after a failure

    Returns:
        Configured tenacity AsyncRetrying instance
    """
    stop = stop_after_attempt(max_attempts)
    if cancel_event is not None:
        stop = stop | stop_when_event_set(cancel_event)

    options = dict(
        stop=stop,
        wait=wait_delivery_backoff(base_seconds),
        retry=retry_if_exception_type(TransientDeliveryError),
        before=tracker.before_attempt,
        after=tracker.attempt_failed,
        before_sleep=tracker.before_backoff,
        reraise=True,
    )
    if sleep is not None:
        options['sleep'] = sleep

    return AsyncRetrying(**options)
