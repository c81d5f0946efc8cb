import random
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from termstat_telemetry.rates import (
    base_to_micro,
    busy_fraction,
    bytes_to_gb,
    khz_to_ghz,
    kib_to_bytes,
    level,
    micro_to_base,
    wh_to_joules,
)


class LevelTests(unittest.TestCase):
    def test_endpoints(self):
        for count in (1, 3, 8):
            self.assertEqual(level(400000, 4000000, 400000, count), 0)
            self.assertEqual(level(400000, 4000000, 4000000, count), count - 1)

    def test_monotonic_inside_range(self):
        previous = 0
        for value in range(0, 1001):
            current = level(0, 1000, value, 8)
            self.assertGreaterEqual(current, previous)
            previous = current

    def test_clamped_outside_range(self):
        self.assertEqual(level(10, 20, -1e12, 3), 0)
        self.assertEqual(level(10, 20, 9.999, 3), 0)
        self.assertEqual(level(10, 20, 20.001, 3), 2)
        self.assertEqual(level(10, 20, 1e12, 3), 2)

    def test_even_partition(self):
        # [0, 3) split in three: 0..1, 1..2, 2..3
        self.assertEqual(level(0, 3, 0.99, 3), 0)
        self.assertEqual(level(0, 3, 1.0, 3), 1)
        self.assertEqual(level(0, 3, 2.5, 3), 2)

    def test_degenerate_range(self):
        self.assertEqual(level(5, 5, 4, 3), 0)
        self.assertEqual(level(5, 5, 5, 3), 2)
        self.assertEqual(level(5, 5, 6, 3), 2)

    def test_nan_maps_to_lowest(self):
        self.assertEqual(level(0, 1, float("nan"), 3), 0)

    def test_rejects_empty_glyph_range(self):
        with self.assertRaises(ValueError):
            level(0, 1, 0.5, 0)

    def test_random_values_always_in_range(self):
        rng = random.Random(7)
        for _ in range(2000):
            lo = rng.uniform(-1e6, 1e6)
            hi = lo + rng.uniform(0, 1e6)
            value = rng.uniform(-3e6, 3e6)
            self.assertIn(level(lo, hi, value, 8), range(8))


class BusyFractionTests(unittest.TestCase):
    def test_uses_actual_elapsed(self):
        self.assertAlmostEqual(busy_fraction(0.25, 1.0), 0.75)
        # Same idle delta over a longer real interval means a busier cpu.
        self.assertAlmostEqual(busy_fraction(0.25, 2.0), 0.875)

    def test_clamped(self):
        self.assertEqual(busy_fraction(1.5, 1.0), 0.0)
        self.assertEqual(busy_fraction(-0.1, 1.0), 1.0)

    def test_no_interval(self):
        self.assertIsNone(busy_fraction(0.1, None))
        self.assertIsNone(busy_fraction(0.1, 0.0))


class ConversionTests(unittest.TestCase):
    def test_micro_round_trip(self):
        rng = random.Random(11)
        samples = [0, 1, 999_999, 1_000_000, 10**9] + [rng.randint(0, 10**9) for _ in range(500)]
        for raw in samples:
            self.assertLessEqual(abs(base_to_micro(micro_to_base(raw)) - raw), 1)

    def test_fixed_scalars(self):
        self.assertEqual(micro_to_base(12_000_000), 12.0)
        self.assertEqual(wh_to_joules(50.0), 180000.0)
        self.assertAlmostEqual(khz_to_ghz(2_200_000), 2.2)
        self.assertEqual(kib_to_bytes(16384000), 16384000 * 1024)
        self.assertAlmostEqual(bytes_to_gb(16_777_216_000), 16.777216)


if __name__ == "__main__":
    unittest.main()
