"""Icon fingerprinting — content classification, average hash and identity matching.

classify_content() decides from a coarse sample grid whether an icon crop is flat
background (EMPTY), a tooltip drawn over the slot (OCCLUDED: mostly near-black
with some near-white text pixels) or a real icon (CONTENT).

fingerprint() is a 64-bit average hash over the crop's interior: 8x8 luminance
grid, bit k set iff sample k >= the grid mean. Two fingerprints name the same item
when their Hamming distance is within HAMMING_THRESHOLD.
"""

from __future__ import annotations

import cv2
import numpy as np

from src.models import ContentClass

SAMPLE_GRID = 10
EMPTY_VARIANCE_MAX = 60.0
EMPTY_SATURATION_MAX = 18.0
DARK_LUMA = 35
BRIGHT_LUMA = 215
OCCLUDED_DARK_RATIO = 0.55
OCCLUDED_BRIGHT_RATIO = 0.04

HASH_SIZE = 8
HASH_BORDER_FRACTION = 0.25
HAMMING_THRESHOLD = 8


def _to_gray(crop: np.ndarray) -> np.ndarray:
    if crop.ndim == 2:
        return crop
    if crop.shape[2] == 4:
        return cv2.cvtColor(crop, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(crop, cv2.COLOR_RGB2GRAY)


def _sample_grid(crop: np.ndarray, size: int = SAMPLE_GRID) -> np.ndarray:
    """Pick a size x size grid of evenly spaced pixels (RGB, int16)."""
    h, w = crop.shape[:2]
    ys = np.linspace(0, h - 1, num=min(size, h)).astype(np.int32)
    xs = np.linspace(0, w - 1, num=min(size, w)).astype(np.int32)
    samples = crop[ys][:, xs]
    if samples.ndim == 2:
        samples = np.repeat(samples[:, :, None], 3, axis=2)
    return samples[:, :, :3].astype(np.int16)


def classify_content(crop: np.ndarray) -> ContentClass:
    if crop is None or crop.size == 0 or crop.shape[0] < 2 or crop.shape[1] < 2:
        return ContentClass.EMPTY
    rgb = _sample_grid(crop)
    r, g, b = rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2]
    luma = 0.299 * r + 0.587 * g + 0.114 * b
    saturation = rgb.max(axis=2) - rgb.min(axis=2)

    if float(np.var(luma)) < EMPTY_VARIANCE_MAX and float(np.mean(saturation)) < EMPTY_SATURATION_MAX:
        return ContentClass.EMPTY

    dark_ratio = float(np.mean(luma < DARK_LUMA))
    bright_ratio = float(np.mean(luma > BRIGHT_LUMA))
    if dark_ratio >= OCCLUDED_DARK_RATIO and bright_ratio >= OCCLUDED_BRIGHT_RATIO:
        return ContentClass.OCCLUDED
    return ContentClass.CONTENT


def fingerprint(crop: np.ndarray) -> int:
    """64-bit average hash of the crop interior (outer border dropped)."""
    if crop is None or crop.size == 0:
        raise ValueError("cannot fingerprint an empty crop")
    h, w = crop.shape[:2]
    by = int(h * HASH_BORDER_FRACTION)
    bx = int(w * HASH_BORDER_FRACTION)
    inner = crop[by : h - by, bx : w - bx]
    if inner.size == 0:
        inner = crop
    gray = _to_gray(np.ascontiguousarray(inner))
    small = cv2.resize(gray, (HASH_SIZE, HASH_SIZE), interpolation=cv2.INTER_AREA)
    values = small.astype(np.float32).flatten()
    bits = values >= float(values.mean())
    value = 0
    for k, bit in enumerate(bits):
        if bit:
            value |= 1 << k
    return value


def fingerprint_hex(value: int) -> str:
    return f"{value:016x}"


def parse_fingerprint(text: str) -> int:
    value = int(text, 16)
    if not 0 <= value < (1 << 64):
        raise ValueError(f"fingerprint out of range: {text!r}")
    return value


def hamming_distance(a: int, b: int) -> int:
    return bin(a ^ b).count("1")


def same_item(a: int, b: int, threshold: int = HAMMING_THRESHOLD) -> bool:
    return hamming_distance(a, b) <= threshold
