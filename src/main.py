"""Loot Tracker — Main entry point.

Wires together: screen capture → tracker controller → UI + overlay → state store.
"""

from __future__ import annotations

import logging
import sys

from PyQt6.QtCore import QObject, QRect, pyqtSignal
from PyQt6.QtWidgets import QApplication

from src.analysis import TesseractGainReader, TesseractQuantityReader
from src.capture import ScreenCapture
from src.overlay import CalibrationOverlay
from src.storage import StateStore
from src.tracking import TrackerController
from src.ui import MainWindow

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class UpdateBridge(QObject):
    """Re-emits controller notifications (fired on the tick thread) on the GUI thread."""

    updated = pyqtSignal()

    def notify(self) -> None:
        self.updated.emit()


def monitor_rect_for_index(monitor_index: int, monitors: list[dict]) -> QRect:
    """Resolve a monitor index (1-based) to a QRect, with safe fallback."""
    if monitors:
        idx = min(max(1, monitor_index), len(monitors)) - 1
        m = monitors[idx]
        return QRect(m["left"], m["top"], m["width"], m["height"])
    return QRect(0, 0, 1920, 1080)


def main() -> None:
    store = StateStore()
    state = store.load()
    config = state.settings

    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    # --- Initialize components ---
    capture = ScreenCapture(monitor_index=config.monitor_index)
    quantity_reader = None
    gain_reader = None
    if config.ocr_enabled:
        quantity_reader = TesseractQuantityReader(config.tesseract_cmd)
        gain_reader = TesseractGainReader(config.tesseract_cmd)
    else:
        logger.info("OCR disabled; occupied slots count as single items")
    controller = TrackerController(state, capture, quantity_reader, gain_reader)

    def save_state() -> None:
        try:
            store.save(state)
        except OSError as e:
            logger.error(f"State save failed: {e}")

    # --- Main window ---
    window = MainWindow(controller)
    monitors = capture.list_monitors()
    window.populate_monitors(monitors)
    window.show()

    # --- Calibration overlay ---
    overlay = CalibrationOverlay(
        monitor_geometry=monitor_rect_for_index(config.monitor_index, monitors)
    )
    overlay.update_border_color(config.overlay_border_color)
    overlay.update_regions(config.inventory_region, config.money_region)
    if config.overlay_enabled:
        overlay.show()

    # --- Wire signals ---
    bridge = UpdateBridge()
    controller.subscribe(bridge.notify)
    bridge.updated.connect(window.refresh)
    bridge.updated.connect(lambda: overlay.update_slot_phases(controller.slot_phases()))

    window.state_changed.connect(save_state)
    window.regions_changed.connect(overlay.update_regions)
    window.overlay_visibility_changed.connect(
        lambda visible: overlay.show() if visible else overlay.hide()
    )

    def on_monitor_changed(monitor_index: int) -> None:
        capture.set_monitor_index(monitor_index)
        overlay.update_monitor_geometry(monitor_rect_for_index(monitor_index, monitors))

    window.monitor_changed.connect(on_monitor_changed)

    # --- Run ---
    exit_code = app.exec()

    # Cleanup: seal a run that is still going so it lands in history
    controller.stop()
    save_state()
    capture.stop()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
