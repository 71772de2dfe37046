"""Screen capture — grabs full-monitor RGBA frames with mss.

mss handles are not safe to share across threads, so each calling thread gets
its own handle, created on first use.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import cv2
import mss
import mss.exception
import numpy as np

logger = logging.getLogger(__name__)


class ScreenCapture:
    """Frame source for the tracker: ``capture()`` returns an RGBA frame or None."""

    def __init__(self, monitor_index: int = 1):
        self._monitor_index = monitor_index
        self._local = threading.local()
        self._handles: list = []
        self._handles_lock = threading.Lock()

    @property
    def monitor_index(self) -> int:
        return self._monitor_index

    def set_monitor_index(self, monitor_index: int) -> None:
        self._monitor_index = monitor_index
        logger.info(f"Capture switched to monitor {monitor_index}")

    def stop(self) -> None:
        with self._handles_lock:
            handles, self._handles = self._handles, []
        for sct in handles:
            try:
                sct.close()
            except Exception as e:
                logger.debug(f"mss close failed: {e}")
        self._local = threading.local()

    def _sct(self):
        sct = getattr(self._local, "sct", None)
        if sct is None:
            sct = mss.mss()
            self._local.sct = sct
            with self._handles_lock:
                self._handles.append(sct)
        return sct

    def list_monitors(self) -> list[dict]:
        """Physical monitors (mss index 1..n), excluding the combined virtual screen."""
        return list(self._sct().monitors[1:])

    def _monitor(self) -> Optional[dict]:
        monitors = self._sct().monitors
        if len(monitors) < 2:
            return None
        idx = min(max(1, self._monitor_index), len(monitors) - 1)
        return monitors[idx]

    def capture(self) -> Optional[np.ndarray]:
        """Grab the whole selected monitor as an (H, W, 4) RGBA array."""
        try:
            monitor = self._monitor()
            if monitor is None:
                return None
            shot = self._sct().grab(monitor)
        except mss.exception.ScreenShotError as e:
            logger.warning(f"Screen capture failed: {e}")
            return None
        return cv2.cvtColor(np.asarray(shot), cv2.COLOR_BGRA2RGBA)
