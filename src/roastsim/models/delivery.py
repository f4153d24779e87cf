"""
Module: delivery.py
Description: Records describing a result delivery.

Key Components:
- AttemptOutcome: Outcome of one network attempt
- DeliveryState: States of the delivery state machine
- DeliveryAttempt: Ephemeral record of one attempt
- Acknowledgement: Success confirmation from the callback endpoint
- DeliveryOutcome: User-facing result presented by the session runner

Dependencies: pydantic, enum, typing
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AttemptOutcome(str, Enum):
    """Outcome of a single delivery attempt."""

    SUCCESS = "success"
    TRANSIENT_FAILURE = "transient_failure"
    FATAL_FAILURE = "fatal_failure"


class DeliveryState(str, Enum):
    """
    States of one delivery call.

    idle -> attempting -> succeeded
    idle -> attempting -> backoff -> attempting -> ... -> failed
    """

    IDLE = "idle"
    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DeliveryAttempt(BaseModel):
    """
    One network try. Lives only for the duration of a delivery call.

    Attributes:
        attempt: 1-based attempt index
        outcome: success, transient or fatal failure
        error: Short description of the failure, if any
        status_code: HTTP status received, if any
        backoff_seconds: Wait scheduled before the next attempt (0 if none)
    """

    model_config = ConfigDict(frozen=True)

    attempt: int = Field(..., ge=1)
    outcome: AttemptOutcome
    error: Optional[str] = None
    status_code: Optional[int] = None
    backoff_seconds: float = Field(default=0.0, ge=0)


class Acknowledgement(BaseModel):
    """Success confirmation returned by the callback endpoint."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(default="OK", description="Acknowledgement text")
    status_code: int = Field(..., ge=200, le=299)
    attempts: List[DeliveryAttempt] = Field(default_factory=list)


class DeliveryOutcome(BaseModel):
    """
    Result of finishing a run, as shown to the learner.

    Exactly one of acknowledgement or error is set.
    """

    model_config = ConfigDict(frozen=True)

    delivered: bool
    message: str
    acknowledgement: Optional[Acknowledgement] = None
    error: Optional[str] = None
    attempts: int = Field(default=0, ge=0)
