"""JSON persistence of the app state (settings, icon names, session history).

The active session is never written. Loading tolerates missing or malformed
fields one at a time; a file that cannot be parsed at all is moved aside to
``<name>.corrupt`` before defaults are used, so the next save cannot destroy it.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from src.models import AppState

logger = logging.getLogger(__name__)

STATE_PATH = Path(__file__).parent.parent.parent / "config" / "loot_tracker_state.json"


class StateStore:
    def __init__(self, path: Path = STATE_PATH):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppState:
        if not self._path.exists():
            logger.warning(f"State not found at {self._path}, using defaults")
            return AppState()
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read state from {self._path}: {e}; using defaults")
            self._set_aside()
            return AppState()
        if not isinstance(data, dict):
            logger.warning(f"State in {self._path} is not an object; using defaults")
            self._set_aside()
            return AppState()
        state = AppState.from_dict(data)
        logger.info(f"Loaded state from {self._path}")
        return state

    def _set_aside(self) -> None:
        target = self._path.with_name(self._path.name + ".corrupt")
        try:
            os.replace(self._path, target)
        except OSError as e:
            logger.error(f"Could not move unreadable state to {target}: {e}")
            return
        logger.warning(f"Unreadable state kept as {target}")

    def save(self, state: AppState) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2)
        os.replace(tmp, self._path)
        logger.debug(f"State saved to {self._path}")
