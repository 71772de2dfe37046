from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ContentClass(Enum):
    """What an icon crop looks like on a single frame."""
    EMPTY = "empty"
    OCCLUDED = "occluded"
    CONTENT = "content"


class SlotPhase(Enum):
    EMPTY = "empty"
    PENDING = "pending"
    CONFIRMED = "confirmed"


@dataclass
class SlotObservation:
    """One tick's reading of a single inventory slot."""
    content: ContentClass
    fingerprint: Optional[int] = None
    quantity: Optional[int] = None  # None = unreadable


@dataclass
class SlotMemory:
    """Per-slot confirmed identity plus debounce counters."""
    confirmed_fingerprint: Optional[int] = None
    confirmed_quantity: Optional[int] = None
    pending_fingerprint: Optional[int] = None
    pending_count: int = 0
    pending_quantity: Optional[int] = None
    pending_quantity_count: int = 0
    # Baseline could not see this slot; its first confirmation is not credited
    unseeded: bool = False

    @property
    def phase(self) -> SlotPhase:
        if self.confirmed_fingerprint is not None:
            return SlotPhase.CONFIRMED
        if self.pending_fingerprint is not None:
            return SlotPhase.PENDING
        return SlotPhase.EMPTY


@dataclass
class SlotTransition:
    """A change to a slot's confirmed identity or quantity."""
    index: int
    fingerprint: int
    quantity: Optional[int]
    previous_fingerprint: Optional[int] = None
    previous_quantity: Optional[int] = None
    identity_changed: bool = True
    silent: bool = False  # seeded without credit (baseline or unseeded slot)
