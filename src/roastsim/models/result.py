"""
Module: result.py
Description: Result payload delivered to the callback endpoint.

Defines the versioned result schema sent at the end of a simulation run.
The payload is frozen and uses tuples for its sequences, so nothing
downstream of its construction can mutate or reorder it.

Key Components:
- ResultPayload: Complete result record (schema 1.0.0)
- Summary: Score, status and grade
- MetricRecord, EventRecord, Artifact, Diagnostics: payload parts
- grade_for_score(): Grade thresholds

Dependencies: pydantic, datetime, typing
"""

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_serializer,
    model_validator,
)

SCHEMA_VERSION = "1.0.0"
UNKNOWN_LEARNER = "learner-unknown"
UNKNOWN_RESOURCE = "resource-unknown"

GRADE_A_MIN = 85
GRADE_B_MIN = 70

Grade = Literal["A", "B", "C"]


def grade_for_score(score: int) -> Grade:
    """
    Derive the letter grade from a score.

    Example:
        >>> grade_for_score(85), grade_for_score(84), grade_for_score(69)
        ('A', 'B', 'C')
    """
    if score >= GRADE_A_MIN:
        return "A"
    if score >= GRADE_B_MIN:
        return "B"
    return "C"


def normalize_timestamp(value: datetime) -> datetime:
    """UTC, truncated to the millisecond precision of the wire format."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    return normalize_timestamp(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Summary(_Frozen):
    """Run summary: score, status and grade."""

    score: int = Field(..., ge=0, le=100)
    status: Literal["completed"] = "completed"
    grade: Grade

    @model_validator(mode='after')
    def check_grade(self) -> 'Summary':
        """The grade must follow from the score."""
        expected = grade_for_score(self.score)
        if self.grade != expected:
            raise ValueError(f"grade {self.grade} does not match score {self.score} (expected {expected})")
        return self

    @classmethod
    def from_score(cls, score: int) -> 'Summary':
        return cls(score=score, grade=grade_for_score(score))


class MetricRecord(_Frozen):
    """A named measurement of the run."""

    code: str = Field(..., min_length=1)
    label: str
    value: Union[int, float]
    unit: str


class EventRecord(_Frozen):
    """A timestamped event logged during the run."""

    ts: datetime
    code: str = Field(..., min_length=1)
    label: str
    meta: Optional[Dict[str, Any]] = None

    @field_validator('ts', mode='after')
    @classmethod
    def normalize_ts(cls, v: datetime) -> datetime:
        return normalize_timestamp(v)

    @field_serializer('ts')
    def serialize_ts(self, value: datetime) -> str:
        return format_timestamp(value)

    @model_serializer(mode='wrap')
    def drop_empty_meta(self, handler) -> Dict[str, Any]:
        """Events without meta carry no meta key on the wire."""
        data = handler(self)
        if data.get('meta') is None:
            data.pop('meta', None)
        return data


class Artifact(_Frozen):
    """A file attached to the result; url may be a data URI."""

    type: str
    label: str
    url: str


class Diagnostics(_Frozen):
    """Environment metadata of the simulator."""

    simulator_version: str
    engine: str
    user_agent: str


class ResultPayload(_Frozen):
    """
    Result record of a completed simulation run.

    Attributes:
        schema_version: Always "1.0.0"
        session_id, resource_id, learner_id, mode: Copied from session parameters
        started_at, ended_at: Run boundaries, started_at <= ended_at
        summary: Score, status and grade
        metrics: Measurements, in informational order
        events: Events in chronological insertion order
        competencies: Opaque competency records
        artifacts: Attached files
        raw_logs: Free-text diagnostic lines
        diagnostics: Environment metadata
    """

    schema_version: Literal["1.0.0"] = SCHEMA_VERSION
    session_id: str = Field(..., min_length=1)
    resource_id: str = UNKNOWN_RESOURCE
    learner_id: str = UNKNOWN_LEARNER
    mode: str = "learning"
    started_at: datetime
    ended_at: datetime
    summary: Summary
    metrics: Tuple[MetricRecord, ...] = ()
    events: Tuple[EventRecord, ...] = ()
    competencies: Tuple[Dict[str, Any], ...] = ()
    artifacts: Tuple[Artifact, ...] = ()
    raw_logs: Tuple[str, ...] = ()
    diagnostics: Diagnostics

    @field_validator('resource_id', 'learner_id', 'mode', mode='before')
    @classmethod
    def apply_defaults(cls, v: Any, info) -> Any:
        """Absent identifiers fall back to their sentinel values."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return {
                'resource_id': UNKNOWN_RESOURCE,
                'learner_id': UNKNOWN_LEARNER,
                'mode': "learning",
            }[info.field_name]
        return v

    @field_validator('started_at', 'ended_at', mode='after')
    @classmethod
    def normalize_run_window(cls, v: datetime) -> datetime:
        return normalize_timestamp(v)

    @model_validator(mode='after')
    def check_run_window(self) -> 'ResultPayload':
        if self.started_at > self.ended_at:
            raise ValueError("started_at must not be after ended_at")
        return self

    @field_serializer('started_at', 'ended_at')
    def serialize_run_window(self, value: datetime) -> str:
        return format_timestamp(value)

    def to_wire(self) -> Dict[str, Any]:
        """JSON-compatible dict in schema field order."""
        return self.model_dump(mode='json')
