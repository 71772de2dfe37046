"""Currency gain detector for the "+N" readout next to the money pouch.

The same rendered "+N" usually stays on screen for several ticks. A reading is
discarded while it matches the last credited signature and the cooldown started
by that credit has not expired.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from src.analysis.quantity_reader import QuantityReader
from src.models import GainDetectorState

logger = logging.getLogger(__name__)

COIN_KEY = "coins:pouch"
COIN_NAME = "Coins (Money Pouch)"


class GainDetector:
    def __init__(self, reader: Optional[QuantityReader], cooldown_s: float = 1.2):
        self._reader = reader
        self._cooldown_s = cooldown_s
        self.state = GainDetectorState()

    def reset(self) -> None:
        self.state = GainDetectorState()

    def read(self, crop: np.ndarray) -> Optional[int]:
        if self._reader is None or crop is None or crop.size == 0:
            return None
        return self._reader.read(crop)

    def accept(self, value: Optional[int], now: float) -> Optional[int]:
        """Return the amount to credit for this reading, or None."""
        if value is None or value <= 0:
            return None
        signature = f"+{value}"
        if signature == self.state.last_signature and now < self.state.cooldown_until:
            logger.debug(f"Gain {signature} still on screen; ignored")
            return None
        self.state.last_signature = signature
        self.state.cooldown_until = now + self._cooldown_s
        return value

    def process(self, crop: np.ndarray, now: float) -> Optional[int]:
        return self.accept(self.read(crop), now)
