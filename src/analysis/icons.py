"""PNG cache of one icon crop per confirmed fingerprint (shown when naming items)."""

from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def encode_png(crop: np.ndarray) -> Optional[bytes]:
    """Encode an RGBA/RGB crop as PNG bytes; None if OpenCV refuses it."""
    if crop is None or crop.size == 0:
        return None
    if crop.ndim == 3 and crop.shape[2] == 4:
        bgr = cv2.cvtColor(crop, cv2.COLOR_RGBA2BGRA)
    elif crop.ndim == 3:
        bgr = cv2.cvtColor(crop, cv2.COLOR_RGB2BGR)
    else:
        bgr = crop
    ok, buf = cv2.imencode(".png", bgr)
    if not ok:
        return None
    return buf.tobytes()


class IconCache:
    def __init__(self) -> None:
        self._png: dict[str, bytes] = {}

    def remember(self, key: str, crop: np.ndarray) -> None:
        if key in self._png:
            return
        png = encode_png(crop)
        if png is None:
            logger.debug(f"Could not encode icon {key}")
            return
        self._png[key] = png

    def png_for(self, key: str) -> Optional[bytes]:
        return self._png.get(key)

    def clear(self) -> None:
        self._png.clear()
