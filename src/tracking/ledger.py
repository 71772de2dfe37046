"""Keyed loot ledger: cumulative credited quantity per item or currency."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from src.analysis.fingerprint import fingerprint_hex
from src.models import LootEntry, Session, SlotTransition

logger = logging.getLogger(__name__)

# Credited for a newly confirmed stack whose quantity could not be read
UNREADABLE_QUANTITY_CREDIT = 1


def credit_for_transition(transition: SlotTransition) -> int:
    """Units a confirmed slot transition is worth. Never negative."""
    if transition.silent:
        return 0
    if transition.identity_changed:
        if transition.quantity is None:
            return UNREADABLE_QUANTITY_CREDIT
        return max(0, transition.quantity)
    if transition.quantity is None or transition.previous_quantity is None:
        return 0
    return max(0, transition.quantity - transition.previous_quantity)


class LootLedger:
    """Entries are only ever increased; reads are re-sorted by quantity, descending."""

    def __init__(self) -> None:
        self._entries: dict[str, LootEntry] = {}
        self._session: Optional[Session] = None

    def attach_session(self, session: Optional[Session]) -> None:
        """Mirror every credit into ``session.loot`` until detached."""
        self._session = session
        self._mirror()

    def detach_session(self) -> None:
        self._session = None

    def credit(
        self, key: str, name: str, qty: int, icon_key: Optional[str] = None
    ) -> Optional[LootEntry]:
        if qty <= 0:
            return None
        entry = self._entries.get(key)
        if entry is None:
            entry = LootEntry(key=key, name=name, qty=0, icon_key=icon_key)
            self._entries[key] = entry
        entry.qty += qty
        logger.info(f"Loot +{qty} {name} (total {entry.qty})")
        self._mirror()
        return entry

    def apply_transition(self, transition: SlotTransition, name: str) -> int:
        """Credit a slot transition under its fingerprint key; returns units credited."""
        amount = credit_for_transition(transition)
        if amount > 0:
            key = fingerprint_hex(transition.fingerprint)
            self.credit(key, name, amount, icon_key=key)
        return amount

    def rename(self, key: str, name: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        entry.name = name
        self._mirror()
        return True

    def get(self, key: str) -> Optional[LootEntry]:
        entry = self._entries.get(key)
        return replace(entry) if entry is not None else None

    def entries(self) -> list[LootEntry]:
        """Snapshot copies, quantity descending; ties keep insertion order."""
        return sorted(
            (replace(e) for e in self._entries.values()), key=lambda e: e.qty, reverse=True
        )

    def clear(self) -> None:
        self._entries.clear()
        self._mirror()

    def __len__(self) -> int:
        return len(self._entries)

    def _mirror(self) -> None:
        if self._session is not None:
            self._session.loot = self.entries()
