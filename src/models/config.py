from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from src.models.loot import Rect, Session, to_int


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _flag(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _text(value: object, default: str) -> str:
    return value if isinstance(value, str) else default


@dataclass
class AppConfig:
    """Runtime configuration; persisted as the ``settings`` block of the app state."""
    monitor_index: int = 1
    inventory_region: Optional[Rect] = None
    money_region: Optional[Rect] = None
    tick_interval_ms: int = 600
    hamming_threshold: int = 8  # of 64 fingerprint bits
    confirm_frames: int = 2
    money_cooldown_ms: int = 1200
    ocr_enabled: bool = True
    # Path to the tesseract binary; empty = rely on PATH
    tesseract_cmd: str = ""
    overlay_enabled: bool = True
    overlay_border_color: str = "#00FF00"
    always_on_top: bool = False

    @classmethod
    def from_dict(cls, data: object) -> AppConfig:
        """Build from stored settings; each missing or malformed field falls back on its own."""
        if not isinstance(data, dict):
            data = {}
        detection = _section(data, "detection")
        overlay = _section(data, "overlay")
        display = _section(data, "display")
        return cls(
            monitor_index=to_int(data.get("monitor_index"), 1),
            inventory_region=Rect.from_dict(data.get("invRegion")),
            money_region=Rect.from_dict(data.get("moneyRegion")),
            tick_interval_ms=to_int(detection.get("tick_interval_ms"), 600),
            hamming_threshold=to_int(detection.get("hamming_threshold"), 8),
            confirm_frames=max(2, to_int(detection.get("confirm_frames"), 2)),
            money_cooldown_ms=to_int(detection.get("money_cooldown_ms"), 1200),
            ocr_enabled=_flag(detection.get("ocr_enabled"), True),
            tesseract_cmd=_text(detection.get("tesseract_cmd"), ""),
            overlay_enabled=_flag(overlay.get("enabled"), True),
            overlay_border_color=_text(overlay.get("border_color"), "#00FF00"),
            always_on_top=_flag(display.get("always_on_top"), False),
        )

    def to_dict(self) -> dict:
        """Serialize to dict for JSON (round-trip with from_dict)."""
        return {
            "monitor_index": self.monitor_index,
            "invRegion": self.inventory_region.to_dict() if self.inventory_region else None,
            "moneyRegion": self.money_region.to_dict() if self.money_region else None,
            "detection": {
                "tick_interval_ms": self.tick_interval_ms,
                "hamming_threshold": self.hamming_threshold,
                "confirm_frames": self.confirm_frames,
                "money_cooldown_ms": self.money_cooldown_ms,
                "ocr_enabled": self.ocr_enabled,
                "tesseract_cmd": self.tesseract_cmd,
            },
            "overlay": {
                "enabled": self.overlay_enabled,
                "border_color": self.overlay_border_color,
            },
            "display": {"always_on_top": self.always_on_top},
        }


@dataclass
class AppState:
    """Everything the tracker persists, plus the (never persisted) active session."""
    settings: AppConfig = field(default_factory=AppConfig)
    icon_names: dict[str, str] = field(default_factory=dict)
    sessions: list[Session] = field(default_factory=list)  # most recent first
    active_session: Optional[Session] = None

    @classmethod
    def from_dict(cls, data: object) -> AppState:
        """Tolerant load: a bad field or session is dropped, never the whole state."""
        if not isinstance(data, dict):
            data = {}
        names = _section(data, "iconNames")
        sessions = data.get("sessions")
        parsed = [Session.from_dict(s) for s in sessions] if isinstance(sessions, list) else []
        return cls(
            settings=AppConfig.from_dict(data.get("settings")),
            icon_names={str(k): v for k, v in names.items() if isinstance(v, str) and v},
            sessions=[s for s in parsed if s is not None],
        )

    def to_dict(self) -> dict:
        return {
            "settings": self.settings.to_dict(),
            "iconNames": dict(self.icon_names),
            "sessions": [s.to_dict() for s in self.sessions],
        }
