import unittest

import numpy as np

from src.analysis.region_slicer import SLOT_COUNT, RegionSlicer, crop
from src.models import Rect


class RegionSlicerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.slicer = RegionSlicer(Rect(100, 50, 163, 290))  # cell 40 x 41

    def test_cell_size_floors(self) -> None:
        self.assertEqual(self.slicer.cell_size, (40, 41))

    def test_slot_rects_row_major(self) -> None:
        self.assertEqual(self.slicer.slot_rect(0), Rect(100, 50, 40, 41))
        self.assertEqual(self.slicer.slot_rect(3), Rect(220, 50, 40, 41))
        self.assertEqual(self.slicer.slot_rect(4), Rect(100, 91, 40, 41))
        self.assertEqual(self.slicer.slot_rect(27), Rect(220, 296, 40, 41))
        self.assertEqual(len(self.slicer.slot_rects()), SLOT_COUNT)

    def test_slot_index_out_of_range(self) -> None:
        with self.assertRaises(IndexError):
            self.slicer.slot_rect(28)

    def test_icon_rect_inside_cell_below_text_band(self) -> None:
        cell = self.slicer.slot_rect(5)
        icon = self.slicer.icon_rect(5)
        self.assertGreater(icon.x, cell.x)
        self.assertGreater(icon.y, cell.y)
        self.assertLess(icon.right, cell.right)
        self.assertLess(icon.bottom, cell.bottom)
        self.assertEqual(icon, Rect(cell.x + 2, cell.y + 9, 36, 30))

    def test_text_rect_upper_left(self) -> None:
        cell = self.slicer.slot_rect(0)
        self.assertEqual(self.slicer.text_rect(0), Rect(cell.x + 1, cell.y + 1, 28, 16))

    def test_tiny_region_keeps_positive_sizes(self) -> None:
        slicer = RegionSlicer(Rect(0, 0, 2, 3))
        for rect in slicer.slot_rects() + slicer.icon_rects():
            self.assertTrue(rect.is_valid)


class CropTests(unittest.TestCase):
    def setUp(self) -> None:
        self.frame = np.arange(10 * 8 * 4, dtype=np.uint8).reshape(10, 8, 4)

    def test_inside(self) -> None:
        out = crop(self.frame, Rect(2, 3, 4, 5))
        self.assertEqual(out.shape, (5, 4, 4))
        np.testing.assert_array_equal(out, self.frame[3:8, 2:6])

    def test_partially_outside_is_clamped(self) -> None:
        out = crop(self.frame, Rect(-3, 6, 6, 10))
        self.assertEqual(out.shape, (4, 3, 4))
        np.testing.assert_array_equal(out, self.frame[6:10, 0:3])

    def test_fully_outside_is_empty(self) -> None:
        self.assertEqual(crop(self.frame, Rect(50, 50, 5, 5)).size, 0)


if __name__ == "__main__":
    unittest.main()
