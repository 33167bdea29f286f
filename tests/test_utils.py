from __future__ import annotations

import unittest

import figma_docs  # noqa: F401  (sys.path)

from backend.tasks.utils import canonical_key, fmt_num, round_half_up, safe_file_key


class FmtNumTests(unittest.TestCase):
    def test_integral_floats_drop_decimals(self) -> None:
        self.assertEqual(fmt_num(20.0), "20")
        self.assertEqual(fmt_num(-3), "-3")

    def test_fractions_keep_shortest_form(self) -> None:
        self.assertEqual(fmt_num(20.5), "20.5")
        self.assertEqual(fmt_num(0.1), "0.1")

    def test_no_exponent_notation(self) -> None:
        self.assertEqual(fmt_num(1.52587890625e-05), "0.0000152587890625")
        self.assertEqual(fmt_num(-2.5e-07), "-0.00000025")


class HelperTests(unittest.TestCase):
    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(127.5), 128)
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.4999), 2)

    def test_canonical_key_ignores_field_order(self) -> None:
        self.assertEqual(canonical_key({"a": 1, "b": {"y": 2, "x": 1}}), canonical_key({"b": {"x": 1, "y": 2}, "a": 1}))

    def test_safe_file_key(self) -> None:
        self.assertEqual(safe_file_key("abc/../d"), "abc_.._d")
        self.assertEqual(safe_file_key(""), "_")


if __name__ == "__main__":
    unittest.main()
