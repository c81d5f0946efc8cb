import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from termstat_telemetry.errors import ParseFailure, ReadFailure, ResourceUnavailable
from termstat_telemetry.sources import DeltaCounter, PseudoFile, parse_float, parse_int, read_once


class PseudoFileTests(unittest.TestCase):
    def test_rereads_from_start_on_same_handle(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "scaling_cur_freq"
            path.write_text("1200000\n", encoding="ascii")
            with PseudoFile(path) as handle:
                self.assertEqual(handle.read(), "1200000\n")
                self.assertEqual(handle.read(), "1200000\n")
                # Rewrite in place, as the kernel does for a pseudo-file.
                with open(path, "r+", encoding="ascii") as f:
                    f.write("3400000\n")
                self.assertEqual(handle.read(), "3400000\n")

    def test_missing_file_is_resource_unavailable(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nope"
            with self.assertRaises(ResourceUnavailable) as ctx:
                PseudoFile(path).open()
            self.assertEqual(ctx.exception.source, str(path))
            self.assertIn(str(path), str(ctx.exception))

    def test_read_before_open(self):
        with self.assertRaises(ReadFailure):
            PseudoFile("/proc/uptime").read()

    def test_close_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "f"
            path.write_text("1", encoding="ascii")
            handle = PseudoFile(path).open()
            handle.close()
            handle.close()
            self.assertFalse(handle.is_open)


class ParseTests(unittest.TestCase):
    def test_parse_int_first_token(self):
        self.assertEqual(parse_int("4000000\n", "max"), 4000000)
        self.assertEqual(parse_float("12345.67 54321.00\n", "uptime"), 12345.67)

    def test_malformed_names_source(self):
        with self.assertRaises(ParseFailure) as ctx:
            parse_int("abc\n", "/sys/x/scaling_cur_freq")
        self.assertIn("/sys/x/scaling_cur_freq", str(ctx.exception))
        with self.assertRaises(ParseFailure):
            parse_float("   \n", "/proc/uptime")

    def test_read_once_optional(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(read_once(Path(tmp) / "missing", required=False))
            with self.assertRaises(ResourceUnavailable):
                read_once(Path(tmp) / "missing")


class DeltaCounterTests(unittest.TestCase):
    def test_reports_only_since_previous_take(self):
        values = iter([10.0, 12.5, 12.5, 20.0])
        counter = DeltaCounter(lambda: next(values))
        counter.prime()
        self.assertEqual(counter.take(), 2.5)
        self.assertEqual(counter.take(), 0.0)
        self.assertEqual(counter.take(), 7.5)

    def test_unprimed_first_take_is_zero(self):
        counter = DeltaCounter(lambda: 42.0)
        self.assertEqual(counter.take(), 0.0)

    def test_counter_going_backwards_counts_as_reset(self):
        values = iter([100.0, 3.0])
        counter = DeltaCounter(lambda: next(values))
        counter.prime()
        self.assertEqual(counter.take(), 3.0)


if __name__ == "__main__":
    unittest.main()
