"""
Module: scheduler.py
Description: Repeating task with a cancellation handle.

Drives the simulated clock: the callback runs once per interval until it
returns False or the task is cancelled. The owner holds the handle; no
timer state lives at module level.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional

from roastsim.utils.logger import get_logger

logger = get_logger(__name__)


class RepeatingTask:
    """
    Periodic asyncio callback.

    Attributes:
        interval_seconds: Wait before each callback run
        name: Task name, used in logs
    """

    def __init__(
        self,
        callback: Callable[[], Any],
        interval_seconds: float,
        name: str = "repeating-task",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        if interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")

        self._callback = callback
        self.interval_seconds = interval_seconds
        self.name = name
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop."""
        if self.running:
            raise RuntimeError(f"{self.name} is already running")
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    def cancel(self) -> None:
        """Stop the loop. Safe to call more than once, or from the callback."""
        if self.running:
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until the loop has ended, by completion or cancellation."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise

    async def _run(self) -> None:
        while True:
            await self._sleep(self.interval_seconds)
            result = self._callback()
            if inspect.isawaitable(result):
                result = await result
            if result is False:
                logger.debug("Repeating task finished", name=self.name)
                return
