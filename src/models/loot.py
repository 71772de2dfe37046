from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


def to_int(value: object, default: Optional[int]) -> Optional[int]:
    """Coerce a stored number; anything unusable yields ``default``."""
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def to_float(value: object, default: Optional[float]) -> Optional[float]:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class Rect:
    """Integer pixel rectangle in frame (monitor) coordinates."""
    x: int
    y: int
    w: int
    h: int

    @property
    def is_valid(self) -> bool:
        return self.w > 0 and self.h > 0

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    def clamp(self, width: int, height: int) -> Optional[Rect]:
        """Intersect with a width x height frame; None if nothing is left."""
        x1 = max(0, self.x)
        y1 = max(0, self.y)
        x2 = min(width, self.right)
        y2 = min(height, self.bottom)
        if x2 <= x1 or y2 <= y1:
            return None
        return Rect(x1, y1, x2 - x1, y2 - y1)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @classmethod
    def from_dict(cls, data: object) -> Optional[Rect]:
        """Parse a stored rect; missing or malformed data yields None."""
        if not isinstance(data, dict):
            return None
        try:
            rect = cls(int(data["x"]), int(data["y"]), int(data["w"]), int(data["h"]))
        except (KeyError, TypeError, ValueError, OverflowError):
            return None
        return rect if rect.is_valid else None


@dataclass
class LootEntry:
    """Cumulative quantity credited to one item (or currency) during a run."""
    key: str
    name: str
    qty: int = 0
    # Fingerprint hex for inventory items; currency has no icon
    icon_key: Optional[str] = None

    def to_dict(self) -> dict:
        return {"key": self.key, "name": self.name, "qty": self.qty, "iconSig": self.icon_key}

    @classmethod
    def from_dict(cls, data: object) -> Optional[LootEntry]:
        """Parse a stored entry; None when it has no usable key."""
        if not isinstance(data, dict) or not data.get("key"):
            return None
        icon_key = data.get("iconSig")
        return cls(
            key=str(data["key"]),
            name=str(data.get("name") or ""),
            qty=max(0, to_int(data.get("qty"), 0)),
            icon_key=icon_key if isinstance(icon_key, str) else None,
        )


@dataclass
class Session:
    """One tracked run; loot is the live mirror while active, the frozen snapshot once sealed."""
    id: str
    label: str
    started_at: float
    ended_at: Optional[float] = None
    loot: list[LootEntry] = field(default_factory=list)

    @property
    def is_sealed(self) -> bool:
        return self.ended_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "startedAt": self.started_at,
            "endedAt": self.ended_at,
            "loot": [e.to_dict() for e in self.loot],
        }

    @classmethod
    def from_dict(cls, data: object) -> Optional[Session]:
        """Parse a stored session field by field; None when it is not a mapping.

        Unreadable loot entries are dropped, the rest of the session is kept.
        """
        if not isinstance(data, dict):
            return None
        ended_at = data.get("endedAt")
        loot = data.get("loot")
        entries = [LootEntry.from_dict(e) for e in loot] if isinstance(loot, list) else []
        return cls(
            id=str(data.get("id") or ""),
            label=str(data.get("label") or ""),
            started_at=to_float(data.get("startedAt"), 0.0),
            ended_at=None if ended_at is None else to_float(ended_at, None),
            loot=[e for e in entries if e is not None],
        )


@dataclass
class GainDetectorState:
    last_signature: Optional[str] = None
    cooldown_until: float = 0.0
