"""Main application window.

Controls:
- Monitor selector and region overlay toggle
- Inventory / gain region calibration (x/y/width/height spinboxes)
- Run controls (label, start, pause, stop, reset, clear history)
- Current loot table (double-click a row to name the item)
- Session history
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QComboBox,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QInputDialog,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QStatusBar,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from src.models import LootEntry, Rect, RunState
from src.tracking import TrackerController

logger = logging.getLogger(__name__)

ICON_SIZE = 32


class _RegionEditor(QGroupBox):
    """x/y/width/height spinboxes plus an Apply button for one screen region."""

    applied = pyqtSignal(object)  # Rect

    def __init__(self, title: str, parent: Optional[QWidget] = None):
        super().__init__(title, parent)
        row = QHBoxLayout(self)
        row.setSpacing(4)
        self._spins: list[QSpinBox] = []
        self._rect: Optional[Rect] = None
        for label, max_val in (("X:", 8000), ("Y:", 4000), ("W:", 2000), ("H:", 2000)):
            spin = QSpinBox()
            spin.setRange(0, max_val)
            row.addWidget(QLabel(label))
            row.addWidget(spin)
            self._spins.append(spin)
        self._status = QLabel("not set")
        self._status.setStyleSheet("color: #888;")
        row.addWidget(self._status)
        btn = QPushButton("Apply")
        btn.clicked.connect(self._on_apply)
        row.addWidget(btn)

    def set_rect(self, rect: Optional[Rect]) -> None:
        # Unchanged: leave any in-progress edits alone
        if rect == self._rect:
            return
        self._rect = rect
        if rect is not None:
            for spin, value in zip(self._spins, (rect.x, rect.y, rect.w, rect.h)):
                spin.blockSignals(True)
                spin.setValue(value)
                spin.blockSignals(False)
        self._status.setText("set" if rect is not None else "not set")

    def _on_apply(self) -> None:
        x, y, w, h = (s.value() for s in self._spins)
        self.applied.emit(Rect(x, y, w, h))


class MainWindow(QMainWindow):
    """Primary control panel for the loot tracker."""

    # Emitted after any operation that changed persisted state
    state_changed = pyqtSignal()
    regions_changed = pyqtSignal(object, object)  # inventory Rect|None, money Rect|None
    monitor_changed = pyqtSignal(int)
    overlay_visibility_changed = pyqtSignal(bool)

    def __init__(self, controller: TrackerController, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._controller = controller
        self._config = controller.state.settings
        self._loot_keys: list[str] = []
        self.setWindowTitle("Loot Tracker")
        self.setMinimumSize(560, 640)
        if self._config.always_on_top:
            self.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, True)

        self._build_ui()
        self.setStatusBar(QStatusBar())
        self._connect_signals()
        self.refresh()

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        # --- Monitor selector ---
        monitor_row = QHBoxLayout()
        self._monitor_combo = QComboBox()
        self._monitor_combo.setMaximumWidth(180)
        monitor_row.addWidget(QLabel("Monitor:"))
        monitor_row.addWidget(self._monitor_combo)
        monitor_row.addStretch(1)
        self._check_overlay = QCheckBox("Show Region Overlay")
        self._check_overlay.setChecked(self._config.overlay_enabled)
        monitor_row.addWidget(self._check_overlay)
        layout.addLayout(monitor_row)

        # --- Regions ---
        self._inv_editor = _RegionEditor("Inventory Region (4 x 7 grid)")
        self._money_editor = _RegionEditor("Gain Region (+N text)")
        layout.addWidget(self._inv_editor)
        layout.addWidget(self._money_editor)

        # --- Run controls ---
        run_group = QGroupBox("Run")
        run_layout = QHBoxLayout(run_group)
        self._label_edit = QLineEdit()
        self._label_edit.setPlaceholderText("Session label")
        self._btn_start = QPushButton("Start")
        self._btn_pause = QPushButton("Pause")
        self._btn_stop = QPushButton("Stop")
        self._btn_reset = QPushButton("Reset")
        self._btn_clear = QPushButton("Clear All")
        run_layout.addWidget(self._label_edit, 1)
        for btn in (self._btn_start, self._btn_pause, self._btn_stop, self._btn_reset, self._btn_clear):
            run_layout.addWidget(btn)
        layout.addWidget(run_group)
        self._run_status = QLabel("Status: idle")
        layout.addWidget(self._run_status)

        # --- Loot ---
        loot_group = QGroupBox("Current Loot (double-click to name)")
        loot_layout = QVBoxLayout(loot_group)
        self._loot_table = QTableWidget(0, 3)
        self._loot_table.setHorizontalHeaderLabels(["", "Item", "Qty"])
        self._loot_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self._loot_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self._loot_table.verticalHeader().setVisible(False)
        header = self._loot_table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Fixed)
        header.resizeSection(0, ICON_SIZE + 10)
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        loot_layout.addWidget(self._loot_table)
        layout.addWidget(loot_group, 2)

        # --- History ---
        history_group = QGroupBox("Sessions")
        history_layout = QVBoxLayout(history_group)
        self._session_table = QTableWidget(0, 3)
        self._session_table.setHorizontalHeaderLabels(["Started", "Label", "Items"])
        self._session_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self._session_table.verticalHeader().setVisible(False)
        self._session_table.horizontalHeader().setSectionResizeMode(
            1, QHeaderView.ResizeMode.Stretch
        )
        history_layout.addWidget(self._session_table)
        layout.addWidget(history_group, 1)

    def _connect_signals(self) -> None:
        self._inv_editor.applied.connect(self._on_inventory_applied)
        self._money_editor.applied.connect(self._on_money_applied)
        self._btn_start.clicked.connect(self._on_start)
        self._btn_pause.clicked.connect(self._on_pause)
        self._btn_stop.clicked.connect(self._on_stop)
        self._btn_reset.clicked.connect(self._on_reset)
        self._btn_clear.clicked.connect(self._on_clear_all)
        self._loot_table.cellDoubleClicked.connect(self._on_loot_double_clicked)
        self._check_overlay.toggled.connect(self._on_overlay_toggled)
        self._monitor_combo.currentIndexChanged.connect(self._on_monitor_selected)

    # --- Actions ---

    def _on_inventory_applied(self, rect: Rect) -> None:
        if not self._controller.set_inventory_region(rect):
            self._flash("Inventory region needs a width and height above 0")
            return
        self.regions_changed.emit(self._config.inventory_region, self._config.money_region)
        self.state_changed.emit()

    def _on_money_applied(self, rect: Rect) -> None:
        if not self._controller.set_money_region(rect):
            self._flash("Gain region needs a width and height above 0")
            return
        self.regions_changed.emit(self._config.inventory_region, self._config.money_region)
        self.state_changed.emit()

    def _on_start(self) -> None:
        if not self._controller.start(self._label_edit.text()):
            QMessageBox.warning(self, "Cannot start", "Calibrate the inventory region first.")
            return
        self.state_changed.emit()

    def _on_pause(self) -> None:
        self._controller.toggle_pause()

    def _on_stop(self) -> None:
        if self._controller.stop() is not None:
            self.state_changed.emit()

    def _on_reset(self) -> None:
        self._controller.reset()
        self.state_changed.emit()

    def _on_clear_all(self) -> None:
        reply = QMessageBox.question(
            self,
            "Clear everything?",
            "Clear all saved sessions and item names?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        self._controller.clear_history()
        self.state_changed.emit()

    def _on_loot_double_clicked(self, row: int, _column: int) -> None:
        if row < 0 or row >= len(self._loot_keys):
            return
        key = self._loot_keys[row]
        if key not in {e.icon_key for e in self._controller.current_loot()}:
            return  # currency rows have no icon to name
        current = self._controller.state.icon_names.get(key, "")
        new_name, ok = QInputDialog.getText(self, "Name Item", "Item name:", text=current)
        if ok and new_name is not None:
            self._controller.rename_icon(key, new_name)
            self.state_changed.emit()

    def _on_overlay_toggled(self, checked: bool) -> None:
        self._config.overlay_enabled = checked
        self.overlay_visibility_changed.emit(checked)
        self.state_changed.emit()

    def _on_monitor_selected(self, combo_index: int) -> None:
        monitor_index = self._monitor_combo.itemData(combo_index)
        if monitor_index is None or monitor_index == self._config.monitor_index:
            return
        self._config.monitor_index = int(monitor_index)
        self.monitor_changed.emit(self._config.monitor_index)
        self.state_changed.emit()

    def _flash(self, message: str) -> None:
        self.statusBar().showMessage(message)
        QTimer.singleShot(3000, self.statusBar().clearMessage)

    # --- Rendering ---

    def populate_monitors(self, monitors: list[dict]) -> None:
        """Fill the monitor dropdown with available monitors."""
        self._monitor_combo.blockSignals(True)
        self._monitor_combo.clear()
        for i, m in enumerate(monitors):
            self._monitor_combo.addItem(f"Monitor {i + 1}: {m['width']}x{m['height']}", i + 1)
        idx = self._monitor_combo.findData(self._config.monitor_index)
        if idx >= 0:
            self._monitor_combo.setCurrentIndex(idx)
        self._monitor_combo.blockSignals(False)

    def refresh(self) -> None:
        """Re-read everything from the controller (connected to its update notifications)."""
        run_state = self._controller.run_state
        self._run_status.setText(f"Status: {run_state.value}")
        self._btn_start.setEnabled(run_state == RunState.IDLE)
        self._btn_pause.setEnabled(run_state != RunState.IDLE)
        self._btn_pause.setText("Resume" if run_state == RunState.PAUSED else "Pause")
        self._btn_stop.setEnabled(run_state != RunState.IDLE)
        self._inv_editor.set_rect(self._config.inventory_region)
        self._money_editor.set_rect(self._config.money_region)
        self._render_loot(self._controller.current_loot())
        self._render_sessions()

    def _render_loot(self, loot: list[LootEntry]) -> None:
        self._loot_keys = [e.key for e in loot]
        self._loot_table.setRowCount(len(loot))
        for row, entry in enumerate(loot):
            icon_label = QLabel()
            png = self._controller.icon_png(entry.icon_key) if entry.icon_key else None
            if png:
                pixmap = QPixmap()
                pixmap.loadFromData(png, "PNG")
                icon_label.setPixmap(
                    pixmap.scaled(
                        ICON_SIZE,
                        ICON_SIZE,
                        Qt.AspectRatioMode.KeepAspectRatio,
                        Qt.TransformationMode.FastTransformation,
                    )
                )
            self._loot_table.setCellWidget(row, 0, icon_label)
            self._loot_table.setItem(row, 1, QTableWidgetItem(entry.name))
            qty_item = QTableWidgetItem(f"{entry.qty:,}")
            qty_item.setTextAlignment(
                Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            )
            self._loot_table.setItem(row, 2, qty_item)
            self._loot_table.setRowHeight(row, ICON_SIZE + 4)

    def _render_sessions(self) -> None:
        sessions = self._controller.sessions
        self._session_table.setRowCount(len(sessions))
        for row, session in enumerate(sessions):
            started = datetime.fromtimestamp(session.started_at).strftime("%Y-%m-%d %H:%M")
            self._session_table.setItem(row, 0, QTableWidgetItem(started))
            self._session_table.setItem(row, 1, QTableWidgetItem(session.label))
            count = QTableWidgetItem(str(len(session.loot)))
            count.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
            self._session_table.setItem(row, 2, count)
