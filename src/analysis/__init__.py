from src.analysis.fingerprint import (
    classify_content,
    fingerprint,
    fingerprint_hex,
    hamming_distance,
    same_item,
)
from src.analysis.icons import IconCache
from src.analysis.quantity_reader import (
    QuantityReader,
    TesseractGainReader,
    TesseractQuantityReader,
)
from src.analysis.region_slicer import SLOT_COUNT, RegionSlicer, crop

__all__ = [
    "IconCache",
    "QuantityReader",
    "RegionSlicer",
    "SLOT_COUNT",
    "TesseractGainReader",
    "TesseractQuantityReader",
    "classify_content",
    "crop",
    "fingerprint",
    "fingerprint_hex",
    "hamming_distance",
    "same_item",
]
