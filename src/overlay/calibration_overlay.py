"""Calibration overlay — a transparent, always-on-top window that draws the
inventory grid and the gain readout region on top of the game.

The overlay is click-through (input passes to windows beneath it).
Regions are set from the main window, not by dragging.
"""
from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QRect
from PyQt6.QtGui import QPainter, QColor, QPen
from PyQt6.QtWidgets import QWidget

from src.analysis import RegionSlicer
from src.models import Rect, SlotPhase

logger = logging.getLogger(__name__)

_PHASE_COLORS = {
    SlotPhase.EMPTY: "#666666",
    SlotPhase.PENDING: "#FFD84D",
    SlotPhase.CONFIRMED: "#35D07F",
}


class CalibrationOverlay(QWidget):
    """Shows the inventory region, per-slot icon sample rects and the gain region."""

    def __init__(self, monitor_geometry: QRect, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._inventory_region: Optional[Rect] = None
        self._money_region: Optional[Rect] = None
        self._slicer: Optional[RegionSlicer] = None
        self._slot_phases: list[SlotPhase] = []
        self._border_color = QColor("#00FF00")
        self._border_width = 2
        self._monitor_geometry = monitor_geometry

        self._setup_window()

    def _setup_window(self) -> None:
        """Configure the window to be transparent, frameless, always-on-top, click-through."""
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool  # Hides from taskbar
            | Qt.WindowType.WindowTransparentForInput  # Click-through
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating)
        self.setGeometry(self._monitor_geometry)

    def update_regions(self, inventory: Optional[Rect], money: Optional[Rect]) -> None:
        self._inventory_region = inventory
        self._money_region = money
        self._slicer = RegionSlicer(inventory) if inventory is not None else None
        self.update()

    def update_slot_phases(self, phases: list[SlotPhase]) -> None:
        self._slot_phases = list(phases)
        self.update()

    def update_monitor_geometry(self, monitor_geometry: QRect) -> None:
        """Move/resize overlay to fully cover the selected monitor."""
        self._monitor_geometry = monitor_geometry
        self.setGeometry(self._monitor_geometry)
        self.update()

    def update_border_color(self, color: str) -> None:
        self._border_color = QColor(color)
        self.update()

    @staticmethod
    def _qrect(rect: Rect) -> QRect:
        return QRect(rect.x, rect.y, rect.w, rect.h)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setBrush(Qt.BrushStyle.NoBrush)

        if self._inventory_region is not None and self._slicer is not None:
            painter.setPen(QPen(self._border_color, self._border_width))
            painter.drawRect(self._qrect(self._inventory_region))

            cell_pen = QPen(QColor("#444444"), 1)
            for idx, cell in enumerate(self._slicer.slot_rects()):
                painter.setPen(cell_pen)
                painter.drawRect(self._qrect(cell))
                phase = (
                    self._slot_phases[idx] if idx < len(self._slot_phases) else SlotPhase.EMPTY
                )
                painter.setPen(QPen(QColor(_PHASE_COLORS[phase]), 1))
                painter.drawRect(self._qrect(self._slicer.icon_rect(idx)))

            painter.setPen(QPen(QColor("#AAAAAA"), 1))
            painter.drawText(
                self._inventory_region.x + 4,
                self._inventory_region.y - 6
                if self._inventory_region.y > 14
                else self._inventory_region.y + 12,
                "Inventory: grey=empty yellow=pending green=confirmed",
            )

        if self._money_region is not None:
            painter.setPen(QPen(QColor("#00E5FF"), 2))
            painter.drawRect(self._qrect(self._money_region))

        painter.end()
