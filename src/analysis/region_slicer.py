"""Region slicer — divides the calibrated inventory rect into the 4x7 slot grid.

Each slot yields two sub-rects: an icon sampling rect (inset from the grid lines
and below the stack-number band) and a text rect over the upper-left corner where
stack quantities render. All rects are in frame coordinates.
"""

from __future__ import annotations

import logging

import numpy as np

from src.models import Rect

logger = logging.getLogger(__name__)

GRID_COLUMNS = 4
GRID_ROWS = 7
SLOT_COUNT = GRID_COLUMNS * GRID_ROWS

ICON_SIDE_INSET = 2
ICON_TOP_FRACTION = 0.22
TEXT_WIDTH_FRACTION = 0.72
TEXT_HEIGHT_FRACTION = 0.40


def crop(frame: np.ndarray, rect: Rect) -> np.ndarray:
    """Extract rect from frame, clamped to the frame edges.

    Returns an empty (0x0) array when the rect lies fully outside the frame.
    """
    if frame is None or frame.size == 0:
        return np.empty((0, 0, 4), dtype=np.uint8)
    h, w = frame.shape[:2]
    clamped = rect.clamp(w, h)
    if clamped is None:
        return np.empty((0, 0) + frame.shape[2:], dtype=frame.dtype)
    return frame[clamped.y : clamped.bottom, clamped.x : clamped.right]


class RegionSlicer:
    """Computes per-slot rects for a calibrated inventory region."""

    def __init__(self, region: Rect):
        self._region = region
        self._cell_w = max(1, region.w // GRID_COLUMNS)
        self._cell_h = max(1, region.h // GRID_ROWS)
        logger.debug(
            f"Slot layout: {SLOT_COUNT} slots, each {self._cell_w}x{self._cell_h}px "
            f"at ({region.x}, {region.y})"
        )

    @property
    def region(self) -> Rect:
        return self._region

    @property
    def cell_size(self) -> tuple[int, int]:
        return self._cell_w, self._cell_h

    def slot_rect(self, index: int) -> Rect:
        if not 0 <= index < SLOT_COUNT:
            raise IndexError(f"slot index {index} out of range")
        col = index % GRID_COLUMNS
        row = index // GRID_COLUMNS
        return Rect(
            self._region.x + col * self._cell_w,
            self._region.y + row * self._cell_h,
            self._cell_w,
            self._cell_h,
        )

    def icon_rect(self, index: int) -> Rect:
        cell = self.slot_rect(index)
        pad_top = int(cell.h * ICON_TOP_FRACTION)
        return Rect(
            cell.x + ICON_SIDE_INSET,
            cell.y + pad_top,
            max(1, cell.w - 2 * ICON_SIDE_INSET),
            max(1, cell.h - pad_top - ICON_SIDE_INSET),
        )

    def text_rect(self, index: int) -> Rect:
        cell = self.slot_rect(index)
        return Rect(
            cell.x + 1,
            cell.y + 1,
            max(1, int(cell.w * TEXT_WIDTH_FRACTION)),
            max(1, int(cell.h * TEXT_HEIGHT_FRACTION)),
        )

    def slot_rects(self) -> list[Rect]:
        return [self.slot_rect(i) for i in range(SLOT_COUNT)]

    def icon_rects(self) -> list[Rect]:
        return [self.icon_rect(i) for i in range(SLOT_COUNT)]
