from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger


class FlushScheduler:
    """Decides when to flush: at the high-water mark, or after idle time.

    The idle timer is the only cancellable scheduled action. Every append
    below the threshold re-arms it; starting a cycle cancels it. Tasks
    spawned by the timer are tracked until they finish.
    """

    def __init__(
        self,
        high_water_mark: int,
        idle_timeout: Optional[float],
        on_idle: Callable[[], Awaitable[None]],
    ):
        self._high_water_mark = high_water_mark
        self._idle_timeout = idle_timeout
        self._on_idle = on_idle
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def idle_timeout(self) -> Optional[float]:
        return self._idle_timeout

    def threshold_reached(self, size: int) -> bool:
        return size >= self._high_water_mark

    def rearm(self) -> None:
        """Cancel any pending idle timer and start a fresh one (if configured)."""
        if self._idle_timeout is None:
            return
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._idle_timeout, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        logger.debug(f"Idle timeout ({self._idle_timeout}s) elapsed; flushing")
        task = asyncio.get_running_loop().create_task(self._on_idle())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def aclose(self) -> None:
        """Cancel the timer and wait for idle flushes already running."""
        self.cancel()
        # An error subscriber may end the writable from inside an idle flush
        running = [t for t in self._tasks if t is not asyncio.current_task()]
        if running:
            await asyncio.gather(*running, return_exceptions=True)
