"""
Module: conftest.py
Description: Shared pytest fixtures for roaster simulator tests.

Provides session parameters, result payloads, a recording sleep for
backoff schedules, a fixed clock, and a scripted httpx transport that
replays a sequence of responses and transport errors without network
access.
"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from roastsim.config.settings import Settings
from roastsim.models.result import (
    Artifact,
    Diagnostics,
    EventRecord,
    MetricRecord,
    ResultPayload,
    Summary,
)
from roastsim.models.session import SessionParameters

CALLBACK_URL = "https://cb.example/x"
API_KEY = "key123"
START = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


class ScriptedCallback:
    """
    httpx MockTransport handler replaying a script of steps.

    Each step is an httpx.Response or an exception to raise. The last
    step repeats once the script is used up. Every request is recorded.
    """

    def __init__(self, *steps):
        if not steps:
            steps = (httpx.Response(200, json={"message": "OK"}),)
        self.steps = list(steps)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]
        if isinstance(step, BaseException):
            raise step
        return httpx.Response(step.status_code, headers=step.headers, content=step.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FixedClock:
    """Clock advancing by one second per reading."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def test_settings():
    """
    Provide test configuration settings.

    Disables .env loading and makes the simulated clock tick without
    waiting.
    """
    return Settings(
        _env_file=None,
        log_level="DEBUG",
        tick_interval_seconds=0,
        default_target_seconds=5,
        session_store_backend="memory"
    )


@pytest.fixture
def sleeps():
    """Durations passed to the fake sleep, in call order."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Sleep coroutine that records the requested wait and returns at once."""
    async def _sleep(seconds):
        sleeps.append(seconds)
    return _sleep


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def session_params():
    """Complete launch parameters."""
    return SessionParameters(
        session_id="sess-001",
        learner_id="learner-42",
        resource_id="roast-101",
        api_key=API_KEY,
        callback_url=CALLBACK_URL,
        mode="learning"
    )


@pytest.fixture
def sample_payload():
    """A representative result payload."""
    return ResultPayload(
        session_id="sess-001",
        resource_id="roast-101",
        learner_id="learner-42",
        mode="learning",
        started_at=START,
        ended_at=START + timedelta(seconds=300),
        summary=Summary.from_score(88),
        metrics=[
            MetricRecord(code="TIME_TOTAL", label="Temps total", value=300, unit="s"),
            MetricRecord(code="PEAK_TEMP", label="Température finale (C)", value=203, unit="°C"),
        ],
        events=[
            EventRecord(ts=START, code="ACTION.START", label="Démarrage de la torréfaction"),
            EventRecord(
                ts=START + timedelta(seconds=42),
                code="ACTION.PRESS",
                label="Ajustement",
                meta={"temperature": 201}
            ),
        ],
        competencies=[{"code": "ROAST.TIMING", "level": 2}],
        artifacts=[Artifact(type="file", label="Session log (inline)", url="data:application/json;base64,e30=")],
        raw_logs=["Simulation générée localement. progress=300"],
        diagnostics=Diagnostics(simulator_version="1.0.0", engine="python-asyncio", user_agent="pytest")
    )
