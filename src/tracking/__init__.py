from src.tracking.controller import TrackerController
from src.tracking.gain_detector import COIN_KEY, COIN_NAME, GainDetector
from src.tracking.ledger import LootLedger
from src.tracking.scheduler import TickScheduler
from src.tracking.slot_machine import SlotStateMachine

__all__ = [
    "COIN_KEY",
    "COIN_NAME",
    "GainDetector",
    "LootLedger",
    "SlotStateMachine",
    "TickScheduler",
    "TrackerController",
]
