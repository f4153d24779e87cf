"""
Module: sessions.py
Description: Session launch and control endpoints.

The hosting platform opens the simulator with the session parameters in
the query string; these endpoints start a run from them, report its
status, and stop or finish it.

Key Components:
- launch_session(): POST /sessions/launch
- get_session(): GET /sessions/{session_id}
- stop_session(): POST /sessions/{session_id}/stop
- finish_session(): POST /sessions/{session_id}/finish
- cancel_session_delivery(): POST /sessions/{session_id}/cancel
- SessionRegistry / get_registry(): in-process runners by session_id

Dependencies: FastAPI, typing, models, session, storage, config, utils
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi import status as status_codes

from roastsim.config.settings import Settings, settings
from roastsim.delivery.errors import ConfigurationError
from roastsim.delivery.push import ResultDeliveryClient
from roastsim.models.delivery import DeliveryOutcome
from roastsim.models.response import SessionStatusResponse
from roastsim.session.params import params_from_query
from roastsim.session.runner import SessionRunner
from roastsim.storage.session_cache import SessionParamsCache, build_store
from roastsim.utils.logger import get_logger

router = APIRouter(prefix="/sessions", tags=["sessions"])
logger = get_logger(__name__)

MAX_FINISHED_SESSIONS = 100


class SessionRegistry:
    """
    Runners of this process, keyed on session_id.

    Finished runners stay available for status queries until more than
    max_finished of them are held; the oldest are then dropped.
    """

    def __init__(
        self,
        cache: Optional[SessionParamsCache] = None,
        delivery_client: Optional[ResultDeliveryClient] = None,
        config: Optional[Settings] = None,
        max_finished: int = MAX_FINISHED_SESSIONS
    ):
        if max_finished < 0:
            raise ValueError("max_finished must not be negative")

        self.cache = cache
        self.delivery_client = delivery_client
        self.config = config or settings
        self.max_finished = max_finished
        self._runners: Dict[str, SessionRunner] = {}

    def __len__(self) -> int:
        return len(self._runners)

    def get(self, session_id: str) -> Optional[SessionRunner]:
        return self._runners.get(session_id)

    def ensure_available(self, session_id: str) -> None:
        """
        Raises:
            RuntimeError: If a run of this session has not finished yet
        """
        existing = self._runners.get(session_id)
        if existing is not None and not existing.finished:
            raise RuntimeError(f"session {session_id} is already running")

    def add(self, runner: SessionRunner) -> None:
        session_id = runner.params.session_id
        self.ensure_available(session_id)
        self._runners.pop(session_id, None)
        self._runners[session_id] = runner
        self._evict_finished()

    def _evict_finished(self) -> None:
        finished = [sid for sid, runner in self._runners.items() if runner.finished]
        for session_id in finished[:max(0, len(finished) - self.max_finished)]:
            del self._runners[session_id]
            logger.debug("Finished session evicted", session_id=session_id)


_registry: Optional[SessionRegistry] = None


def get_registry() -> SessionRegistry:
    """
    Dependency to get the session registry.

    Created on first use with the cache backend selected in settings.
    """
    global _registry
    if _registry is None:
        _registry = SessionRegistry(cache=SessionParamsCache(build_store(settings)))
    return _registry


def _get_runner(registry: SessionRegistry, session_id: str) -> SessionRunner:
    runner = registry.get(session_id)
    if runner is None:
        raise HTTPException(
            status_code=status_codes.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found"
        )
    return runner


@router.post("/launch", status_code=status_codes.HTTP_201_CREATED, response_model=SessionStatusResponse)
async def launch_session(
    request: Request,
    target_seconds: Optional[int] = None,
    registry: SessionRegistry = Depends(get_registry)
) -> SessionStatusResponse:
    """
    Start a roast from launch query parameters.

    Example:
        POST /sessions/launch?session_id=s-1&api_key=...&callback_url=https://cb.example/x

    Raises:
        HTTPException: 400 if launch parameters are missing
        HTTPException: 409 if the session is already running
    """
    params = params_from_query(dict(request.query_params))

    if target_seconds is not None and target_seconds < 1:
        raise HTTPException(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            detail="target_seconds must be at least 1"
        )

    try:
        params.require_launch_fields()
        registry.ensure_available(params.session_id)
        runner = SessionRunner(
            params,
            delivery_client=registry.delivery_client,
            cache=registry.cache,
            config=registry.config,
            target_seconds=target_seconds
        )
        registry.add(runner)
        runner.start()

    except ConfigurationError as e:
        logger.warning("Session launch rejected", error=str(e), session_id=params.session_id)
        raise HTTPException(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    except RuntimeError as e:
        raise HTTPException(
            status_code=status_codes.HTTP_409_CONFLICT,
            detail=str(e)
        )

    logger.info("Session launched", session_id=params.session_id, mode=params.mode)
    return SessionStatusResponse(**runner.status())


@router.get("/{session_id}", response_model=SessionStatusResponse)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry)
) -> SessionStatusResponse:
    """Current status of a session."""
    return SessionStatusResponse(**_get_runner(registry, session_id).status())


@router.post("/{session_id}/stop", response_model=SessionStatusResponse)
async def stop_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry)
) -> SessionStatusResponse:
    """
    Stop a running roast; its result is then delivered in the background.

    Raises:
        HTTPException: 404 if unknown, 409 if the roast is not running
    """
    runner = _get_runner(registry, session_id)
    if not runner.stop():
        raise HTTPException(
            status_code=status_codes.HTTP_409_CONFLICT,
            detail=f"Session {session_id} is not running"
        )
    return SessionStatusResponse(**runner.status())


@router.post("/{session_id}/finish", response_model=DeliveryOutcome)
async def finish_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry)
) -> DeliveryOutcome:
    """
    Finish a session now and wait for its delivery outcome.

    A failed delivery is reported in the body, not as an HTTP error.
    """
    return await _get_runner(registry, session_id).finish()


@router.post("/{session_id}/cancel", response_model=SessionStatusResponse)
async def cancel_session_delivery(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry)
) -> SessionStatusResponse:
    """
    Stop retrying the result delivery of a session.

    The attempt in flight, if any, still completes; no further attempt
    starts. Cancelling before the run finishes limits its delivery to a
    single attempt.

    Raises:
        HTTPException: 404 if unknown, 409 if the result was already handled
    """
    runner = _get_runner(registry, session_id)
    if runner.finished:
        raise HTTPException(
            status_code=status_codes.HTTP_409_CONFLICT,
            detail=f"Session {session_id} is already finished"
        )
    runner.cancel_delivery()
    return SessionStatusResponse(**runner.status())
