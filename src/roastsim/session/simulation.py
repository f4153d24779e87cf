"""
Roast simulation state.

One tick is one simulated second. Each tick the roaster temperature
drifts by up to +/-2 degrees, clamped to the roaster's working range, and
now and then the operator adjusts it. The run ends when the target time
is reached or the learner stops it.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from roastsim.models.result import EventRecord
from roastsim.session.scoring import round_half_up

MIN_TEMPERATURE = 100.0
MAX_TEMPERATURE = 250.0
MAX_DRIFT_PER_TICK = 2.0
ADJUSTMENT_PROBABILITY = 0.1

EVENT_START = ("ACTION.START", "Démarrage de la torréfaction")
EVENT_ADJUST = ("ACTION.PRESS", "Ajustement")
EVENT_STOP = ("ACTION.STOP", "Arrêt manuel")


def clamp_temperature(value: float) -> float:
    return max(MIN_TEMPERATURE, min(MAX_TEMPERATURE, value))


@dataclass
class RoastSimulation:
    """Elapsed time, temperature and event log of one roast."""

    target_seconds: int = 300
    temperature: float = 200.0
    rng: random.Random = field(default_factory=random.Random)
    progress: int = 0
    running: bool = False
    started_at: Optional[datetime] = None
    events: List[EventRecord] = field(default_factory=list)

    def __post_init__(self):
        if self.target_seconds < 1:
            raise ValueError("target_seconds must be at least 1")
        self.temperature = clamp_temperature(self.temperature)

    def _log(self, now: datetime, code: str, label: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self.events.append(EventRecord(ts=now, code=code, label=label, meta=meta))

    def start(self, now: datetime) -> None:
        """Reset elapsed time and events, and start the roast."""
        self.progress = 0
        self.events = []
        self.started_at = now
        self.running = True
        self._log(now, *EVENT_START)

    def tick(self, now: datetime) -> bool:
        """
        Advance one simulated second.

        Returns:
            True while the roast is still running
        """
        if not self.running:
            return False

        self.progress += 1
        self.temperature = clamp_temperature(
            self.temperature + self.rng.uniform(-MAX_DRIFT_PER_TICK, MAX_DRIFT_PER_TICK)
        )
        if self.rng.random() < ADJUSTMENT_PROBABILITY:
            self._log(now, *EVENT_ADJUST, meta={'temperature': round_half_up(self.temperature)})

        if self.progress >= self.target_seconds:
            self.running = False
        return self.running

    def stop(self, now: datetime) -> bool:
        """Manual stop. Returns False if the roast was not running."""
        if not self.running:
            return False
        self.running = False
        self._log(now, *EVENT_STOP)
        return True
