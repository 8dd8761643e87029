import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr

from PIL import Image

import main


class MainTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.image_path = os.path.join(self.tmp, "white.png")
        Image.new("RGB", (20, 10), (255, 255, 255)).save(self.image_path)
        self.out = os.path.join(self.tmp, "art.txt")

    def tearDown(self):
        self._tmp.cleanup()

    def _read_lines(self):
        with open(self.out, encoding="utf-8") as f:
            return f.read().splitlines()

    def test_no_arguments_prints_usage(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            self.assertEqual(main.main([]), 1)
        self.assertIn("usage:", stderr.getvalue())

    def test_proportional_conversion(self):
        code = main.main([self.image_path, "-o", self.out, "-r", "10", "-a", "1",
                          "-m", "proportional", "-c", " .#"])
        self.assertEqual(code, 0)
        self.assertEqual(self._read_lines(), ["#" * 10] * 5)

    def test_invert_flag(self):
        code = main.main([self.image_path, "-o", self.out, "-r", "10", "-a", "1",
                          "-m", "proportional", "-c", " .#", "-i"])
        self.assertEqual(code, 0)
        self.assertEqual(self._read_lines(), [" " * 10] * 5)

    def test_measured_conversion_uses_brightest_glyph_for_white(self):
        code = main.main([self.image_path, "-o", self.out, "-r", "8", "-c", " .#"])
        self.assertEqual(code, 0)
        lines = self._read_lines()
        self.assertEqual(len(lines), 2)  # 8x4 cells, 4 / 2.125 rounds to 2
        self.assertEqual(lines, ["#" * 8] * 2)

    def test_malformed_numbers_warn_and_use_defaults(self):
        with self.assertLogs(level="WARNING") as logs:
            code = main.main([self.image_path, "-o", self.out, "-r", "abc", "-a", "wide",
                              "-m", "proportional"])
        self.assertEqual(code, 0)
        self.assertTrue(any("max_res" in line for line in logs.output))
        self.assertTrue(any("Adjustment" in line for line in logs.output))
        lines = self._read_lines()
        # 20x10 fitted into 100 cells, height divided by 17/8
        self.assertEqual(len(lines), 24)
        self.assertTrue(all(len(line) == 100 for line in lines))

    def test_non_positive_values_fall_back(self):
        code = main.main([self.image_path, "-o", self.out, "-r", "0", "-a", "-2",
                          "-m", "proportional"])
        self.assertEqual(code, 0)
        self.assertEqual(len(self._read_lines()), 24)

    def test_non_finite_numbers_warn_and_use_defaults(self):
        for value in ("nan", "inf", "-inf"):
            with self.subTest(adjustment=value):
                with self.assertLogs(level="WARNING") as logs:
                    code = main.main([self.image_path, "-o", self.out, "-a", value,
                                      "-m", "proportional"])
                self.assertEqual(code, 0)
                self.assertTrue(any("Adjustment" in line for line in logs.output))
                self.assertEqual(len(self._read_lines()), 24)

    def test_char_set_starting_with_dash(self):
        code = main.main([self.image_path, "-o", self.out, "-r", "4", "-a", "1",
                          "-m", "proportional", "-c", "-=+"])
        self.assertEqual(code, 0)
        self.assertEqual(self._read_lines(), ["++++", "++++"])

    def test_attach_option_values(self):
        self.assertEqual(
            main.attach_option_values(["img.png", "-c", "-=+", "-i", "-a", "-2", "-o"]),
            ["img.png", "-c=-=+", "-i", "-a=-2", "-o"],
        )

    def test_unknown_flags_ignored(self):
        code = main.main([self.image_path, "-z", "-o", self.out, "-r", "4", "-a", "1",
                          "-m", "proportional", "-c", "ab"])
        self.assertEqual(code, 0)
        self.assertEqual(self._read_lines(), ["bbbb", "bbbb"])

    def test_missing_image_fails(self):
        with self.assertLogs(level="ERROR"):
            code = main.main([os.path.join(self.tmp, "missing.png"), "-o", self.out])
        self.assertEqual(code, 1)
        self.assertFalse(os.path.exists(self.out))

    def test_empty_filename_fails(self):
        with self.assertLogs(level="ERROR") as logs:
            code = main.main(["", "-o", self.out])
        self.assertEqual(code, 1)
        self.assertTrue(any("No filename" in line for line in logs.output))

    def test_unknown_selection_fails(self):
        with self.assertLogs(level="ERROR"):
            code = main.main([self.image_path, "-o", self.out, "-m", "magic"])
        self.assertEqual(code, 1)

    def test_write_ascii_one_line_per_row(self):
        main.write_ascii(["ab", "cd"], self.out)
        self.assertEqual(self._read_lines(), ["ab", "cd"])


if __name__ == "__main__":
    unittest.main()
