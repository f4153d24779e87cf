"""
Module: runner.py
Description: Session runner driving one simulated roast.

Owns the simulation state and its repeating tick task, decides when the
run has ended, builds the result payload and hands it to the delivery
client. Delivery failures are turned into a DeliveryOutcome for display;
they never propagate out of the runner.

Key Components:
- SessionRunner: start, stop, finish and status of one run
- RunnerMessages: learner-facing status texts

Dependencies: asyncio, pydantic, delivery, storage, logger
"""

import asyncio
import random
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from roastsim.config.settings import Settings, settings as default_settings
from roastsim.delivery.errors import ConfigurationError, DeliveryError
from roastsim.delivery.push import ResultDeliveryClient
from roastsim.models.delivery import DeliveryOutcome, DeliveryState
from roastsim.models.session import SessionParameters
from roastsim.session.payload import build_result_payload
from roastsim.session.scheduler import RepeatingTask
from roastsim.session.simulation import RoastSimulation
from roastsim.storage.session_cache import SessionParamsCache
from roastsim.utils.logger import get_logger

logger = get_logger(__name__)


class RunnerMessages:
    STARTED = "Simulation démarrée"
    SENDING = "Envoi des résultats..."
    RETRYING = "Nouvel essai d'envoi ({attempt})..."
    SENT = "Résultats envoyés: {message}"
    FAILED = "Échec envoi résultats: {reason}"
    NOTHING_TO_SEND = "Aucun résultat à envoyer"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRunner:
    """
    Runs one roast for one session and delivers its result.

    A run is finished at most once: repeated or concurrent calls to
    finish() share the same delivery and outcome.

    Attributes:
        params: Session parameters, fixed for the run
        simulation: Simulation state
        message: Latest learner-facing status text
        outcome: Delivery outcome once the run is finished
    """

    def __init__(
        self,
        params: SessionParameters,
        delivery_client: Optional[ResultDeliveryClient] = None,
        cache: Optional[SessionParamsCache] = None,
        config: Optional[Settings] = None,
        target_seconds: Optional[int] = None,
        initial_temperature: Optional[float] = None,
        tick_interval_seconds: Optional[float] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow
    ):
        config = config or default_settings

        self.params = params
        self.config = config
        self.delivery_client = delivery_client or ResultDeliveryClient(
            timeout_seconds=config.delivery_timeout,
            backoff_base_seconds=config.backoff_base_seconds
        )
        self.cache = cache
        self.clock = clock
        self.simulation = RoastSimulation(
            target_seconds=target_seconds or config.default_target_seconds,
            temperature=initial_temperature if initial_temperature is not None else config.initial_temperature,
            rng=rng or random.Random()
        )
        interval = config.tick_interval_seconds if tick_interval_seconds is None else tick_interval_seconds
        self.ticker = RepeatingTask(self._tick, interval, name=f"roast-{params.session_id}")
        self.message = ""
        self.outcome: Optional[DeliveryOutcome] = None
        self._finish_task: Optional[asyncio.Task] = None
        self._finished = asyncio.Event()
        self._cancel_delivery = asyncio.Event()

        if self.cache is not None:
            self.cache.save(params)

    @property
    def running(self) -> bool:
        return self.simulation.running

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    def start(self) -> None:
        """
        Start the roast and its tick loop.

        Raises:
            ConfigurationError: If session_id, api_key or callback_url is missing
            RuntimeError: If this runner was already started
        """
        try:
            self.params.require_launch_fields()
        except ConfigurationError as e:
            self.message = f"Paramètres manquants: {e}"
            raise

        if self.simulation.started_at is not None or self._finish_task is not None:
            raise RuntimeError(f"session {self.params.session_id} was already started")

        self.simulation.start(self.clock())
        self.ticker.start()
        self.message = RunnerMessages.STARTED

        logger.info(
            "Simulation started",
            session_id=self.params.session_id,
            target_seconds=self.simulation.target_seconds,
            temperature=self.simulation.temperature
        )

    def stop(self) -> bool:
        """
        Stop the roast manually and schedule the result delivery.

        A roast stopped before the first simulated second sends nothing.

        Returns:
            False if the roast was not running
        """
        if not self.simulation.stop(self.clock()):
            return False

        self.ticker.cancel()
        logger.info("Simulation stopped manually", session_id=self.params.session_id, progress=self.simulation.progress)
        self._schedule_finish()
        return True

    def _tick(self) -> bool:
        still_running = self.simulation.tick(self.clock())
        if not still_running:
            logger.info(
                "Simulation reached target time",
                session_id=self.params.session_id,
                progress=self.simulation.progress
            )
            self._schedule_finish()
        return still_running

    def _schedule_finish(self) -> asyncio.Task:
        if self._finish_task is None:
            self._finish_task = asyncio.get_running_loop().create_task(self._finish_and_send())
        return self._finish_task

    async def finish(self) -> DeliveryOutcome:
        """
        End the run (if still running) and deliver its result once.

        Nothing is sent when no simulated time has elapsed.

        Returns:
            The delivery outcome, shared by every caller
        """
        if self.simulation.running:
            self.simulation.running = False
            self.ticker.cancel()
        return await asyncio.shield(self._schedule_finish())

    async def wait(self) -> DeliveryOutcome:
        """Wait until the run has finished and its result was handled."""
        await self._finished.wait()
        return self.outcome

    def cancel_delivery(self) -> None:
        """Stop retrying the delivery after the attempt in flight."""
        if not self._cancel_delivery.is_set():
            logger.info("Result delivery cancelled", session_id=self.params.session_id)
        self._cancel_delivery.set()

    def _on_delivery_state(self, state: DeliveryState, attempt: int) -> None:
        if state == DeliveryState.ATTEMPTING and attempt > 1:
            self.message = RunnerMessages.RETRYING.format(attempt=attempt)

    async def _finish_and_send(self) -> DeliveryOutcome:
        self.ticker.cancel()

        if self.simulation.progress == 0:
            logger.info("Run ended before any simulated time, result not sent", session_id=self.params.session_id)
            return self._complete(DeliveryOutcome(delivered=False, message=RunnerMessages.NOTHING_TO_SEND))

        self.message = RunnerMessages.SENDING

        try:
            payload = build_result_payload(
                self.params,
                self.simulation,
                self.clock(),
                simulator_version=self.config.simulator_version
            )
            ack = await self.delivery_client.deliver(
                self.params.callback_url,
                payload,
                self.params.api_key,
                max_attempts=self.config.delivery_max_attempts,
                listener=self._on_delivery_state,
                cancel_event=self._cancel_delivery
            )
            outcome = DeliveryOutcome(
                delivered=True,
                message=RunnerMessages.SENT.format(message=ack.message),
                acknowledgement=ack,
                attempts=len(ack.attempts)
            )
            logger.info(
                "Session result delivered",
                session_id=self.params.session_id,
                score=payload.summary.score,
                grade=payload.summary.grade,
                attempts=len(ack.attempts)
            )

        except (ConfigurationError, DeliveryError, ValidationError) as e:
            attempts = e.attempt_count if isinstance(e, DeliveryError) else 0
            outcome = DeliveryOutcome(
                delivered=False,
                message=RunnerMessages.FAILED.format(reason=e),
                error=str(e),
                attempts=attempts
            )
            logger.error(
                "Session result delivery failed",
                session_id=self.params.session_id,
                error=str(e),
                error_type=type(e).__name__,
                attempts=attempts
            )

        except Exception as e:
            outcome = DeliveryOutcome(
                delivered=False,
                message=RunnerMessages.FAILED.format(reason=e),
                error=str(e)
            )
            logger.error(
                "Unexpected error finishing session",
                session_id=self.params.session_id,
                error=str(e),
                error_type=type(e).__name__
            )

        return self._complete(outcome)

    def _complete(self, outcome: DeliveryOutcome) -> DeliveryOutcome:
        self.outcome = outcome
        self.message = outcome.message
        self._finished.set()
        return outcome

    def status(self) -> Dict[str, Any]:
        """Snapshot of the run for display; the API key stays masked."""
        return {
            'session': self.params.masked(),
            'running': self.simulation.running,
            'progress': self.simulation.progress,
            'target_seconds': self.simulation.target_seconds,
            'temperature': round(self.simulation.temperature, 1),
            'event_count': len(self.simulation.events),
            'message': self.message,
            'finished': self.finished,
            'outcome': self.outcome.model_dump(mode='json') if self.outcome else None,
        }
