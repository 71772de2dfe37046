from src.models.config import AppConfig, AppState
from src.models.loot import GainDetectorState, LootEntry, Rect, RunState, Session
from src.models.slot import (
    ContentClass,
    SlotMemory,
    SlotObservation,
    SlotPhase,
    SlotTransition,
)

__all__ = [
    "AppConfig",
    "AppState",
    "ContentClass",
    "GainDetectorState",
    "LootEntry",
    "Rect",
    "RunState",
    "Session",
    "SlotMemory",
    "SlotObservation",
    "SlotPhase",
    "SlotTransition",
]
