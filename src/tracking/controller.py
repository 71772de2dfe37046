"""Tracker controller — run state machine and per-tick orchestration.

IDLE -> RUNNING <-> PAUSED -> IDLE. Each tick captures one frame and evaluates all
28 slots plus the gain readout without holding the state lock, then commits slot
transitions and credits in one locked step, so a tick is applied completely or
not at all. A tick whose run was stopped, paused or recalibrated meanwhile is
dropped. The first
successful capture after start is the baseline: it seeds slot state and never
credits.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Optional

import numpy as np

from src.analysis import (
    SLOT_COUNT,
    IconCache,
    QuantityReader,
    RegionSlicer,
    classify_content,
    crop,
    fingerprint,
    fingerprint_hex,
)
from src.models import (
    AppState,
    ContentClass,
    LootEntry,
    Rect,
    RunState,
    Session,
    SlotMemory,
    SlotObservation,
    SlotPhase,
)
from src.tracking.gain_detector import COIN_KEY, COIN_NAME, GainDetector
from src.tracking.ledger import LootLedger
from src.tracking.scheduler import TickScheduler
from src.tracking.slot_machine import SlotStateMachine

logger = logging.getLogger(__name__)

# Assumed stack size when OCR is disabled
DEFAULT_QUANTITY = 1


def default_display_name(key: str) -> str:
    return f"Unidentified ({key[:6]})"


@dataclass
class _FrameReading:
    """Everything read from one frame, before any state is touched."""
    now: float
    observations: list[SlotObservation]
    icons: list[Optional[np.ndarray]]
    gain_value: Optional[int]


class TrackerController:
    """Owns the slot machines, ledger and gain detector for one tracker instance.

    ``frame_source`` needs a ``capture()`` method returning an RGBA frame or None.
    Passing ``quantity_reader=None`` (or ``ocr_enabled=False`` in settings) makes
    every occupied slot count as a stack of one.
    """

    def __init__(
        self,
        state: AppState,
        frame_source,
        quantity_reader: Optional[QuantityReader] = None,
        gain_reader: Optional[QuantityReader] = None,
        clock: Callable[[], float] = time.time,
        scheduler_factory: Callable[..., TickScheduler] = TickScheduler,
    ):
        self._state = state
        self._config = state.settings
        self._frame_source = frame_source
        self._quantity_reader = quantity_reader
        self._clock = clock
        self._scheduler_factory = scheduler_factory
        self._scheduler: Optional[TickScheduler] = None
        self._lock = threading.RLock()
        # Serializes whole ticks; held while reading a frame, unlike _lock
        self._tick_serial = threading.Lock()
        # Bumped whenever in-flight tick results would no longer apply
        self._generation = 0
        self._subscribers: list[Callable[[], None]] = []

        self._run_state = RunState.IDLE
        self._needs_baseline = False
        self._slots = self._new_slots()
        self._ledger = LootLedger()
        self._gain = GainDetector(gain_reader, cooldown_s=self._config.money_cooldown_ms / 1000.0)
        self._icons = IconCache()
        self._slicer: Optional[RegionSlicer] = (
            RegionSlicer(self._config.inventory_region) if self._config.inventory_region else None
        )
        self.last_tick_at: Optional[float] = None

    # --- Observers ---

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a no-payload update callback; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback()

    # --- Accessors ---

    @property
    def run_state(self) -> RunState:
        return self._run_state

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def slicer(self) -> Optional[RegionSlicer]:
        return self._slicer

    @property
    def active_session(self) -> Optional[Session]:
        return self._state.active_session

    @property
    def sessions(self) -> list[Session]:
        return list(self._state.sessions)

    def current_loot(self) -> list[LootEntry]:
        with self._lock:
            return self._ledger.entries()

    def slot_memories(self) -> list[SlotMemory]:
        with self._lock:
            return [replace(m.memory) for m in self._slots]

    def slot_phases(self) -> list[SlotPhase]:
        with self._lock:
            return [m.phase for m in self._slots]

    def icon_png(self, key: str) -> Optional[bytes]:
        return self._icons.png_for(key)

    def display_name(self, key: str) -> str:
        return self._state.icon_names.get(key) or default_display_name(key)

    # --- Calibration ---

    def set_inventory_region(self, rect: Optional[Rect]) -> bool:
        if not isinstance(rect, Rect) or not rect.is_valid:
            logger.warning(f"Rejected inventory region {rect}")
            return False
        with self._lock:
            self._config.inventory_region = rect
            self._slicer = RegionSlicer(rect)
            if self._run_state != RunState.IDLE:
                # Slot indices now map to different pixels; re-baseline
                self._slots = self._new_slots()
                self._needs_baseline = True
                self._generation += 1
        logger.info(f"Inventory region set to {rect}")
        self._notify()
        return True

    def set_money_region(self, rect: Optional[Rect]) -> bool:
        if not isinstance(rect, Rect) or not rect.is_valid:
            logger.warning(f"Rejected gain region {rect}")
            return False
        with self._lock:
            self._config.money_region = rect
            self._gain.reset()
            self._generation += 1
        logger.info(f"Gain region set to {rect}")
        self._notify()
        return True

    def rename_icon(self, key: str, name: str) -> None:
        """Assign a display name to a fingerprint; an empty name restores the default."""
        name = (name or "").strip()
        with self._lock:
            if name:
                self._state.icon_names[key] = name
            else:
                self._state.icon_names.pop(key, None)
            self._ledger.rename(key, self.display_name(key))
        self._notify()

    # --- Run control ---

    def start(self, label: str = "Unnamed") -> bool:
        with self._lock:
            if self._config.inventory_region is None:
                logger.warning("Cannot start: calibrate the inventory region first")
                return False
            if self._run_state != RunState.IDLE:
                logger.warning(f"Cannot start: tracker is {self._run_state.value}")
                return False
            self._slicer = RegionSlicer(self._config.inventory_region)
            self._slots = self._new_slots()
            self._ledger.clear()
            self._gain.reset()
            self._icons.clear()
            self._needs_baseline = True
            self._generation += 1

            session = Session(
                id=str(uuid.uuid4()),
                label=(label or "").strip() or "Unnamed",
                started_at=self._clock(),
            )
            self._state.active_session = session
            self._ledger.attach_session(session)
            self._run_state = RunState.RUNNING
        logger.info(f"Run '{session.label}' started")
        self._run_tick()

        with self._lock:
            if self._run_state == RunState.RUNNING and self._scheduler is None:
                self._scheduler = self._scheduler_factory(
                    self._scheduled_tick, self._config.tick_interval_ms / 1000.0
                )
                self._scheduler.start()
        self._notify()
        return True

    def pause(self) -> bool:
        with self._lock:
            if self._run_state != RunState.RUNNING:
                return False
            self._run_state = RunState.PAUSED
            if self._scheduler is not None:
                self._scheduler.pause()
        logger.info("Run paused")
        self._notify()
        return True

    def resume(self) -> bool:
        with self._lock:
            if self._run_state != RunState.PAUSED:
                return False
            self._run_state = RunState.RUNNING
            if self._scheduler is not None:
                self._scheduler.resume()
        logger.info("Run resumed")
        self._notify()
        return True

    def toggle_pause(self) -> bool:
        if self._run_state == RunState.PAUSED:
            return self.resume()
        return self.pause()

    def stop(self) -> Optional[Session]:
        """Seal the active run into history; returns it (None when idle)."""
        if not self._halt():
            return None
        with self._lock:
            session = self._state.active_session
            if session is not None:
                self._ledger.detach_session()
                session.ended_at = self._clock()
                session.loot = self._ledger.entries()
                self._state.sessions.insert(0, session)
                self._state.active_session = None
                logger.info(f"Run '{session.label}' stopped with {len(session.loot)} entries")
        self._notify()
        return session

    def reset(self) -> None:
        """Full manual wipe of ledger and slot state; run history is kept."""
        self._halt()
        with self._lock:
            self._ledger.detach_session()
            self._state.active_session = None
            self._ledger.clear()
            self._slots = self._new_slots()
            self._gain.reset()
            self._icons.clear()
            self._needs_baseline = False
        logger.info("Tracker reset")
        self._notify()

    def clear_history(self) -> None:
        """Forget all sessions and icon names, then reset."""
        with self._lock:
            self._state.sessions.clear()
            self._state.icon_names.clear()
        self.reset()

    def _halt(self) -> bool:
        with self._lock:
            was_active = self._run_state != RunState.IDLE
            self._run_state = RunState.IDLE
            self._generation += 1
            scheduler, self._scheduler = self._scheduler, None
        # Joined outside the lock: a tick in flight may be waiting on it
        if scheduler is not None:
            scheduler.stop()
        return was_active

    # --- Ticks ---

    def tick(self) -> bool:
        """Run one tick now.

        Returns False when not running, when no frame was available, or when the
        run was stopped, paused or recalibrated while the frame was being read.
        """
        ok = self._run_tick()
        self._notify()
        return ok

    def _scheduled_tick(self) -> None:
        self.tick()

    def _run_tick(self) -> bool:
        with self._tick_serial:
            with self._lock:
                if self._run_state != RunState.RUNNING or self._slicer is None:
                    return False
                generation = self._generation
                slicer = self._slicer
                money_region = None if self._needs_baseline else self._config.money_region

            # Capture and OCR run without the state lock so readers are never blocked on them
            reading = self._read_frame(slicer, money_region)
            if reading is None:
                return False

            with self._lock:
                if generation != self._generation or self._run_state != RunState.RUNNING:
                    logger.debug("Run changed during tick; results dropped")
                    return False
                self._commit(reading)
            return True

    def _read_frame(
        self, slicer: RegionSlicer, money_region: Optional[Rect]
    ) -> Optional[_FrameReading]:
        frame = self._frame_source.capture()
        if frame is None:
            logger.debug("Frame unavailable; tick skipped")
            return None
        now = self._clock()
        observations = []
        icons = []
        for i in range(SLOT_COUNT):
            obs, icon = self._observe_slot(frame, slicer, i)
            observations.append(obs)
            icons.append(icon)
        gain_value = None
        if money_region is not None:
            gain_value = self._gain.read(crop(frame, money_region))
        return _FrameReading(now, observations, icons, gain_value)

    def _commit(self, reading: _FrameReading) -> None:
        if self._needs_baseline:
            for machine, obs, icon in zip(self._slots, reading.observations, reading.icons):
                machine.seed(obs)
                if machine.phase == SlotPhase.CONFIRMED:
                    self._icons.remember(fingerprint_hex(obs.fingerprint), icon)
            self._needs_baseline = False
            occupied = sum(1 for m in self._slots if m.phase == SlotPhase.CONFIRMED)
            logger.info(f"Baseline captured: {occupied}/{SLOT_COUNT} slots occupied")
        else:
            for machine, obs, icon in zip(self._slots, reading.observations, reading.icons):
                transition = machine.observe(obs)
                if transition is None:
                    continue
                key = fingerprint_hex(transition.fingerprint)
                if transition.identity_changed:
                    self._icons.remember(key, icon)
                self._ledger.apply_transition(transition, self.display_name(key))
            amount = self._gain.accept(reading.gain_value, reading.now)
            if amount:
                self._ledger.credit(COIN_KEY, COIN_NAME, amount)
        self.last_tick_at = reading.now

    def _observe_slot(
        self, frame: np.ndarray, slicer: RegionSlicer, index: int
    ) -> tuple[SlotObservation, Optional[np.ndarray]]:
        icon = crop(frame, slicer.icon_rect(index))
        content = classify_content(icon)
        if content != ContentClass.CONTENT:
            return SlotObservation(content=content), None
        obs = SlotObservation(
            content=content,
            fingerprint=fingerprint(icon),
            quantity=self._read_quantity(crop(frame, slicer.text_rect(index))),
        )
        return obs, icon

    def _read_quantity(self, text_crop: np.ndarray) -> Optional[int]:
        if self._quantity_reader is None or not self._config.ocr_enabled:
            return DEFAULT_QUANTITY
        return self._quantity_reader.read(text_crop)

    def _new_slots(self) -> list[SlotStateMachine]:
        return [
            SlotStateMachine(
                i,
                hamming_threshold=self._config.hamming_threshold,
                confirm_frames=self._config.confirm_frames,
            )
            for i in range(SLOT_COUNT)
        ]
