import unittest

import numpy as np

from src.tracking.gain_detector import GainDetector


class ScriptedReader:
    def __init__(self, values):
        self._values = list(values)

    def read(self, crop):
        return self._values.pop(0)


class GainDetectorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.detector = GainDetector(reader=None, cooldown_s=1.2)

    def test_same_value_within_cooldown_counts_once(self) -> None:
        self.assertEqual(self.detector.accept(120, now=10.0), 120)
        self.assertIsNone(self.detector.accept(120, now=10.6))
        self.assertEqual(self.detector.state.last_signature, "+120")

    def test_same_value_after_cooldown_counts_again(self) -> None:
        self.detector.accept(120, now=10.0)
        self.assertEqual(self.detector.accept(120, now=11.3), 120)

    def test_different_value_within_cooldown_counts(self) -> None:
        self.detector.accept(120, now=10.0)
        self.assertEqual(self.detector.accept(45, now=10.6), 45)
        self.assertEqual(self.detector.state.cooldown_until, 10.6 + 1.2)

    def test_missing_or_non_positive_is_ignored(self) -> None:
        self.assertIsNone(self.detector.accept(None, now=1.0))
        self.assertIsNone(self.detector.accept(0, now=1.0))
        self.assertIsNone(self.detector.state.last_signature)

    def test_reset(self) -> None:
        self.detector.accept(120, now=10.0)
        self.detector.reset()
        self.assertEqual(self.detector.accept(120, now=10.1), 120)

    def test_process_reads_crop(self) -> None:
        detector = GainDetector(ScriptedReader([None, 900, 900]), cooldown_s=1.2)
        crop = np.zeros((8, 16, 4), dtype=np.uint8)
        self.assertIsNone(detector.process(crop, now=0.0))
        self.assertEqual(detector.process(crop, now=0.6), 900)
        self.assertIsNone(detector.process(crop, now=1.2))

    def test_without_reader_nothing_is_read(self) -> None:
        self.assertIsNone(self.detector.read(np.zeros((4, 4, 4), dtype=np.uint8)))


if __name__ == "__main__":
    unittest.main()
