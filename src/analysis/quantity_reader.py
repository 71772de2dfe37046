"""Best-effort OCR of stack quantities and "+N" gain text.

Readers return a positive int or None ("unknown"). Parsing tolerates grouping
separators and the K/M suffixes the game uses for large stacks; anything else
non-numeric or non-positive is rejected.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import cv2
import numpy as np
import pytesseract

logger = logging.getLogger(__name__)

_GROUPING = re.compile(r"[,.'\s\u00a0\u202f]")
_PLAIN = re.compile(r"^\d+$")
# Separators only group full thousands: "1,234" and "12 500", never "12.3"
_GROUPED = re.compile(r"^\d{1,3}(?:[,.'\s\u00a0\u202f]\d{3})+$")
_DECIMAL = re.compile(r"^(\d+)[.,](\d{1,3})$")
_SUFFIXED = re.compile(r"^(.*?)\s*([kKmM])$")
_GAIN = re.compile(r"\+\s*([0-9][0-9,.'\s\u00a0\u202f]*[kKmM]?)")
_SUFFIX = {"k": 1_000, "m": 1_000_000}


def parse_quantity(text: Optional[str]) -> Optional[int]:
    """Parse OCR text such as ``"1,234"``, ``"12 500"``, ``"10K"`` or ``"1.5M"``.

    A fractional part is only meaningful before a K/M suffix; a bare ``"12.3"``
    is unknown rather than read as 123.
    """
    if not text:
        return None
    body = text.strip()
    multiplier = 1
    suffixed = _SUFFIXED.match(body)
    if suffixed:
        body, multiplier = suffixed.group(1), _SUFFIX[suffixed.group(2).lower()]

    value = None
    decimal = _DECIMAL.match(body) if multiplier > 1 else None
    if decimal:
        whole, frac = decimal.groups()
        value = int(whole) * multiplier + int(frac) * multiplier // 10 ** len(frac)
    elif _PLAIN.match(body):
        value = int(body) * multiplier
    elif _GROUPED.match(body):
        value = int(_GROUPING.sub("", body)) * multiplier
    return value if value else None


def parse_gain(text: Optional[str]) -> Optional[int]:
    """Parse a ``"+N"`` gain readout; text without a leading plus is ignored."""
    if not text:
        return None
    match = _GAIN.search(text)
    if not match:
        return None
    return parse_quantity(match.group(1))


class QuantityReader:
    """Interface for stack-number readers."""

    def read(self, crop: np.ndarray) -> Optional[int]:
        raise NotImplementedError


class TesseractQuantityReader(QuantityReader):
    """Reads light stack numerals rendered over a darker icon."""

    SCALE = 3
    VALUE_THRESHOLD = 150
    CONFIG = "--psm 7 -c tessedit_char_whitelist=0123456789,.KMkm"

    def __init__(self, tesseract_cmd: str = ""):
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def preprocess(self, crop: np.ndarray) -> np.ndarray:
        """Upscale and binarize to dark text on white, as tesseract prefers."""
        rgb = crop[:, :, :3] if crop.ndim == 3 else crop
        value = rgb.max(axis=2) if rgb.ndim == 3 else rgb
        value = np.ascontiguousarray(value.astype(np.uint8))
        big = cv2.resize(
            value,
            (value.shape[1] * self.SCALE, value.shape[0] * self.SCALE),
            interpolation=cv2.INTER_CUBIC,
        )
        _, mask = cv2.threshold(big, self.VALUE_THRESHOLD, 255, cv2.THRESH_BINARY)
        return cv2.copyMakeBorder(
            255 - mask, 8, 8, 8, 8, cv2.BORDER_CONSTANT, value=255
        )

    def _ocr(self, image: np.ndarray) -> str:
        try:
            return pytesseract.image_to_string(image, config=self.CONFIG).strip()
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
            logger.debug(f"OCR failed: {e}")
            return ""

    def parse(self, text: str) -> Optional[int]:
        return parse_quantity(text)

    def read(self, crop: np.ndarray) -> Optional[int]:
        if crop is None or crop.size == 0:
            return None
        text = self._ocr(self.preprocess(crop))
        value = self.parse(text)
        logger.debug(f"OCR {text!r} -> {value}")
        return value


class TesseractGainReader(TesseractQuantityReader):
    """Reads the yellow "+N" currency gain text."""

    CONFIG = "--psm 7 -c tessedit_char_whitelist=+0123456789,.KMkm"
    # HSV bounds for the yellow gain text (OpenCV hue is 0-179)
    YELLOW_LOW = (18, 90, 120)
    YELLOW_HIGH = (40, 255, 255)

    def preprocess(self, crop: np.ndarray) -> np.ndarray:
        rgb = np.ascontiguousarray(crop[:, :, :3])
        hsv = cv2.cvtColor(rgb, cv2.COLOR_RGB2HSV)
        mask = cv2.inRange(hsv, np.array(self.YELLOW_LOW), np.array(self.YELLOW_HIGH))
        big = cv2.resize(
            mask,
            (mask.shape[1] * self.SCALE, mask.shape[0] * self.SCALE),
            interpolation=cv2.INTER_NEAREST,
        )
        return cv2.copyMakeBorder(255 - big, 8, 8, 8, 8, cv2.BORDER_CONSTANT, value=255)

    def parse(self, text: str) -> Optional[int]:
        return parse_gain(text)
