"""
Module: payload.py
Description: Assemble the result payload at the end of a run.

Key Components:
- build_result_payload(): ResultPayload from session parameters and simulation state
- inline_artifact_url(): data URI carrying the run's events and metrics
- default_user_agent(): diagnostics user agent for this interpreter
"""

import base64
import json
import platform
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Sequence

from roastsim import __version__
from roastsim.models.result import (
    Artifact,
    Diagnostics,
    EventRecord,
    MetricRecord,
    ResultPayload,
    Summary,
)
from roastsim.models.session import SessionParameters
from roastsim.session.scoring import compute_score, round_half_up
from roastsim.session.simulation import RoastSimulation

ENGINE = "python-asyncio"
ARTIFACT_LABEL = "Session log (inline)"


def default_user_agent() -> str:
    return (
        f"roastsim/{__version__} "
        f"({platform.python_implementation()} {platform.python_version()}; {platform.system()})"
    )


def inline_artifact_url(events: Sequence[EventRecord], metrics: Sequence[MetricRecord]) -> str:
    """Base64 JSON data URI holding the events and metrics of the run."""
    document = {
        'events': [event.model_dump(mode='json') for event in events],
        'metrics': [metric.model_dump(mode='json') for metric in metrics],
    }
    encoded = base64.b64encode(
        json.dumps(document, ensure_ascii=False, separators=(',', ':')).encode('utf-8')
    ).decode('ascii')
    return f"data:application/json;base64,{encoded}"


def build_metrics(simulation: RoastSimulation) -> list:
    return [
        MetricRecord(code='TIME_TOTAL', label='Temps total', value=simulation.progress, unit='s'),
        MetricRecord(
            code='PEAK_TEMP',
            label='Température finale (C)',
            value=round_half_up(simulation.temperature),
            unit='°C'
        ),
    ]


def build_result_payload(
    params: SessionParameters,
    simulation: RoastSimulation,
    ended_at: datetime,
    simulator_version: str = "1.0.0",
    user_agent: Optional[str] = None,
    competencies: Iterable[Dict[str, Any]] = ()
) -> ResultPayload:
    """
    Build the result payload of a finished run.

    A run that never recorded a start time is assumed to have started
    `progress` seconds before ended_at.

    Args:
        params: Session parameters of the run
        simulation: Final simulation state
        ended_at: End of the run
        simulator_version: Reported in diagnostics
        user_agent: Reported in diagnostics (default_user_agent() if omitted)
        competencies: Opaque competency records

    Returns:
        Frozen ResultPayload

    Raises:
        pydantic.ValidationError: If the parameters cannot form a valid payload
    """
    started_at = simulation.started_at or ended_at - timedelta(seconds=simulation.progress)
    score = compute_score(simulation.target_seconds, simulation.progress, simulation.temperature)
    metrics = build_metrics(simulation)
    events = list(simulation.events)

    return ResultPayload(
        session_id=params.session_id,
        resource_id=params.resource_id,
        learner_id=params.learner_id,
        mode=params.mode,
        started_at=started_at,
        ended_at=ended_at,
        summary=Summary.from_score(score),
        metrics=metrics,
        events=events,
        competencies=list(competencies),
        artifacts=[
            Artifact(type='file', label=ARTIFACT_LABEL, url=inline_artifact_url(events, metrics))
        ],
        raw_logs=[f"Simulation générée localement. progress={simulation.progress}"],
        diagnostics=Diagnostics(
            simulator_version=simulator_version,
            engine=ENGINE,
            user_agent=user_agent or default_user_agent()
        )
    )
