"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains the data models of the simulator:
- SessionParameters: Training context from the launch URL
- ResultPayload: Versioned result record sent to the callback endpoint
- DeliveryAttempt, Acknowledgement, DeliveryOutcome: Delivery records

All models are exported here for convenient importing.
"""

from .delivery import (
    Acknowledgement,
    AttemptOutcome,
    DeliveryAttempt,
    DeliveryOutcome,
    DeliveryState,
)
from .result import (
    SCHEMA_VERSION,
    Artifact,
    Diagnostics,
    EventRecord,
    MetricRecord,
    ResultPayload,
    Summary,
    grade_for_score,
)
from .session import DEFAULT_MODE, SessionParameters

__all__ = [
    "Acknowledgement",
    "AttemptOutcome",
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DeliveryState",
    "SCHEMA_VERSION",
    "Artifact",
    "Diagnostics",
    "EventRecord",
    "MetricRecord",
    "ResultPayload",
    "Summary",
    "grade_for_score",
    "DEFAULT_MODE",
    "SessionParameters",
]
