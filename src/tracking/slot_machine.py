"""Per-slot debounce/confirmation state machine (EMPTY -> PENDING -> CONFIRMED).

A slot's confirmed identity or quantity only changes after ``confirm_frames``
consecutive agreeing observations. Emptiness is trusted on a single frame and an
occluded frame is treated as missing data.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.analysis.fingerprint import HAMMING_THRESHOLD, fingerprint_hex, same_item
from src.models import (
    ContentClass,
    SlotMemory,
    SlotObservation,
    SlotPhase,
    SlotTransition,
)

logger = logging.getLogger(__name__)


class SlotStateMachine:
    def __init__(
        self,
        index: int,
        hamming_threshold: int = HAMMING_THRESHOLD,
        confirm_frames: int = 2,
    ):
        self.index = index
        self._threshold = hamming_threshold
        self._confirm_frames = max(2, confirm_frames)
        self.memory = SlotMemory()

    @property
    def phase(self) -> SlotPhase:
        return self.memory.phase

    def reset(self) -> None:
        self.memory = SlotMemory()

    def seed(self, obs: SlotObservation) -> None:
        """Baseline capture: adopt what is on screen as confirmed, without debounce."""
        self.reset()
        if obs.content == ContentClass.CONTENT and obs.fingerprint is not None:
            self.memory.confirmed_fingerprint = obs.fingerprint
            self.memory.confirmed_quantity = obs.quantity
        elif obs.content == ContentClass.OCCLUDED:
            self.memory.unseeded = True

    def observe(self, obs: SlotObservation) -> Optional[SlotTransition]:
        mem = self.memory
        if obs.content == ContentClass.OCCLUDED:
            return None
        if obs.content == ContentClass.EMPTY or obs.fingerprint is None:
            if mem.confirmed_fingerprint is not None:
                logger.debug(f"Slot {self.index}: emptied")
            self.reset()
            return None

        fp = obs.fingerprint
        if mem.confirmed_fingerprint is not None and same_item(
            mem.confirmed_fingerprint, fp, self._threshold
        ):
            # Re-seeing the confirmed item breaks any pending identity streak
            mem.pending_fingerprint = None
            mem.pending_count = 0
            return self._observe_quantity(obs.quantity)

        if mem.pending_fingerprint is not None and same_item(
            mem.pending_fingerprint, fp, self._threshold
        ):
            mem.pending_count += 1
        else:
            mem.pending_fingerprint = fp
            mem.pending_count = 1
        if mem.pending_count < self._confirm_frames:
            return None
        return self._confirm_identity(mem.pending_fingerprint, obs.quantity)

    def _confirm_identity(self, fp: int, quantity: Optional[int]) -> SlotTransition:
        mem = self.memory
        transition = SlotTransition(
            index=self.index,
            fingerprint=fp,
            quantity=quantity,
            previous_fingerprint=mem.confirmed_fingerprint,
            previous_quantity=mem.confirmed_quantity,
            identity_changed=True,
            silent=mem.unseeded,
        )
        mem.confirmed_fingerprint = fp
        mem.confirmed_quantity = quantity
        mem.pending_fingerprint = None
        mem.pending_count = 0
        mem.pending_quantity = None
        mem.pending_quantity_count = 0
        mem.unseeded = False
        logger.debug(f"Slot {self.index}: confirmed {fingerprint_hex(fp)} x{quantity}")
        return transition

    def _observe_quantity(self, quantity: Optional[int]) -> Optional[SlotTransition]:
        mem = self.memory
        if quantity is None or quantity == mem.confirmed_quantity:
            mem.pending_quantity = None
            mem.pending_quantity_count = 0
            return None
        if quantity == mem.pending_quantity:
            mem.pending_quantity_count += 1
        else:
            mem.pending_quantity = quantity
            mem.pending_quantity_count = 1
        if mem.pending_quantity_count < self._confirm_frames:
            return None

        transition = SlotTransition(
            index=self.index,
            fingerprint=mem.confirmed_fingerprint,
            quantity=quantity,
            previous_fingerprint=mem.confirmed_fingerprint,
            previous_quantity=mem.confirmed_quantity,
            identity_changed=False,
        )
        mem.confirmed_quantity = quantity
        mem.pending_quantity = None
        mem.pending_quantity_count = 0
        logger.debug(
            f"Slot {self.index}: quantity {transition.previous_quantity} -> {quantity}"
        )
        return transition
