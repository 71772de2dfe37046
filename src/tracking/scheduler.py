"""Fixed-period tick scheduler with non-overlapping execution.

A daemon thread fires the callback every ``interval_s``. A fire that arrives
while the previous tick is still running is skipped; while paused every fire is
a no-op. ``stop()`` waits for the running tick to finish.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TickScheduler:
    def __init__(self, callback: Callable[[], None], interval_s: float = 0.6):
        self._callback = callback
        self._interval_s = max(0.01, interval_s)
        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._paused = False
        self.fired = 0
        self.skipped = 0

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_paused(self) -> bool:
        return self._paused

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._paused = False
        self._thread = threading.Thread(target=self._run, name="tick-scheduler", daemon=True)
        self._thread.start()
        logger.info(f"Tick scheduler started ({self._interval_s * 1000:.0f} ms)")

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            logger.info("Tick scheduler stopped")

    def fire(self) -> bool:
        """Run one tick unless paused or a tick is already in progress."""
        self.fired += 1
        if self._paused:
            return False
        if not self._tick_lock.acquire(blocking=False):
            self.skipped += 1
            logger.debug("Previous tick still running; fire skipped")
            return False
        try:
            self._callback()
        except Exception as e:
            logger.error(f"Tick error: {e}", exc_info=True)
        finally:
            self._tick_lock.release()
        return True

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_s):
            self.fire()
