import unittest
from unittest import mock

import numpy as np
import pytesseract

from src.analysis.quantity_reader import (
    TesseractGainReader,
    TesseractQuantityReader,
    parse_gain,
    parse_quantity,
)


class ParseQuantityTests(unittest.TestCase):
    def test_plain_and_grouped_numbers(self) -> None:
        self.assertEqual(parse_quantity("7"), 7)
        self.assertEqual(parse_quantity("1,234"), 1234)
        self.assertEqual(parse_quantity("1.234.567"), 1234567)
        self.assertEqual(parse_quantity("12 500"), 12500)
        self.assertEqual(parse_quantity("12\u00a0500"), 12500)
        self.assertEqual(parse_quantity(" 42\n"), 42)

    def test_stack_suffixes(self) -> None:
        self.assertEqual(parse_quantity("10K"), 10_000)
        self.assertEqual(parse_quantity("2m"), 2_000_000)

    def test_decimal_before_suffix(self) -> None:
        self.assertEqual(parse_quantity("1.5K"), 1_500)
        self.assertEqual(parse_quantity("1,25k"), 1_250)
        self.assertEqual(parse_quantity("2.5M"), 2_500_000)
        self.assertEqual(parse_quantity("10 K"), 10_000)

    def test_fraction_without_suffix_is_unknown(self) -> None:
        for text in ("12.3", "1,5", "12.34", "1.2.3K", "1,23,456"):
            self.assertIsNone(parse_quantity(text), text)

    def test_rejects_non_numeric_and_non_positive(self) -> None:
        for text in (None, "", "abc", "12a", "0", "000", "-5", "K"):
            self.assertIsNone(parse_quantity(text), text)


class ParseGainTests(unittest.TestCase):
    def test_plus_values(self) -> None:
        self.assertEqual(parse_gain("+120"), 120)
        self.assertEqual(parse_gain("+ 1,500"), 1500)
        self.assertEqual(parse_gain("coins +900\n"), 900)
        self.assertEqual(parse_gain("+2.5M"), 2_500_000)
        self.assertIsNone(parse_gain("+12.3"))

    def test_requires_plus(self) -> None:
        self.assertIsNone(parse_gain("120"))
        self.assertIsNone(parse_gain("+"))
        self.assertIsNone(parse_gain(None))


class TesseractReaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.crop = np.zeros((12, 20, 4), dtype=np.uint8)
        self.crop[3:9, 4:16] = (255, 255, 0, 255)

    def test_preprocess_upscales_to_dark_text_on_white(self) -> None:
        image = TesseractQuantityReader().preprocess(self.crop)
        self.assertEqual(image.shape, (12 * 3 + 16, 20 * 3 + 16))
        self.assertEqual(image[0, 0], 255)
        self.assertEqual(image[8 + 5 * 3, 8 + 8 * 3], 0)

    def test_read_parses_ocr_text(self) -> None:
        with mock.patch.object(pytesseract, "image_to_string", return_value="1,234\n"):
            self.assertEqual(TesseractQuantityReader().read(self.crop), 1234)

    def test_ocr_failure_is_unknown(self) -> None:
        with mock.patch.object(
            pytesseract, "image_to_string", side_effect=pytesseract.TesseractNotFoundError()
        ):
            self.assertIsNone(TesseractQuantityReader().read(self.crop))

    def test_empty_crop_is_unknown(self) -> None:
        self.assertIsNone(TesseractQuantityReader().read(np.empty((0, 0, 4), dtype=np.uint8)))

    def test_gain_reader_needs_plus(self) -> None:
        reader = TesseractGainReader()
        with mock.patch.object(pytesseract, "image_to_string", return_value="+120"):
            self.assertEqual(reader.read(self.crop), 120)
        with mock.patch.object(pytesseract, "image_to_string", return_value="120"):
            self.assertIsNone(reader.read(self.crop))


if __name__ == "__main__":
    unittest.main()
