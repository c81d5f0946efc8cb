import sys
import tempfile
import unittest
from datetime import timezone
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fake_tree import FakeCpuTimes, add_cpu, build_proc, write
from termstat_telemetry.clock import ClockReader
from termstat_telemetry.cpu import CpuFrequencyReader, CpuLoadReader, online_cpus, parse_cpu_list
from termstat_telemetry.errors import ParseFailure, ReadFailure, ResourceUnavailable
from termstat_telemetry.memory import MemoryReader, parse_meminfo
from termstat_telemetry.rates import derive_memory
from termstat_telemetry.uptime import UptimeReader


class ClockReaderTests(unittest.TestCase):
    def test_sample_uses_injected_clocks(self):
        reader = ClockReader(wall=lambda: 1_700_000_000.5, monotonic=lambda: 42.0, tai=lambda: 1_700_000_037.5)
        sample = reader.open().sample()
        self.assertEqual(sample.unix_s, 1_700_000_000.5)
        self.assertEqual(sample.tai_s, 1_700_000_037.5)
        self.assertEqual(sample.monotonic_s, 42.0)
        self.assertEqual(sample.utc.tzinfo, timezone.utc)
        self.assertEqual(sample.utc.year, 2023)
        self.assertIsNotNone(sample.local.tzinfo)


class UptimeReaderTests(unittest.TestCase):
    def test_rereads_current_value(self):
        with tempfile.TemporaryDirectory() as tmp:
            proc = build_proc(Path(tmp))
            with UptimeReader(proc) as reader:
                first = reader.sample()
                self.assertEqual(first.uptime_s, 12345.67)
                write(proc / "uptime", "12346.90 54322.00\n")
                self.assertEqual(reader.sample().uptime_s, 12346.9)

    def test_missing_uptime(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ResourceUnavailable):
                UptimeReader(Path(tmp)).open()

    def test_garbage(self):
        with tempfile.TemporaryDirectory() as tmp:
            proc = build_proc(Path(tmp), uptime="up a while\n")
            with UptimeReader(proc) as reader:
                with self.assertRaises(ParseFailure) as ctx:
                    reader.sample()
                self.assertIn("uptime", str(ctx.exception))


class MemoryReaderTests(unittest.TestCase):
    def test_parse_two_required_keys(self):
        sample = parse_meminfo("MemTotal:  16384000 kB\nMemAvailable: 8192000 kB\n")
        metrics = derive_memory(sample)
        self.assertEqual(metrics.total_bytes, 16384000 * 1024)
        self.assertEqual(metrics.available_bytes, 8192000 * 1024)
        self.assertEqual(metrics.used_bytes, metrics.total_bytes - metrics.available_bytes)
        self.assertAlmostEqual(metrics.percent, 50.0)
        self.assertAlmostEqual(metrics.total_gb, 16.777216)

    def test_reader_over_full_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            proc = build_proc(Path(tmp))
            with MemoryReader(proc) as reader:
                sample = reader.sample()
                self.assertEqual(sample.total_kb, 16384000)
                self.assertEqual(sample.available_kb, 8192000)

    def test_missing_key_names_it(self):
        with self.assertRaises(ParseFailure) as ctx:
            parse_meminfo("MemTotal: 100 kB\nMemFree: 50 kB\n", "/proc/meminfo")
        self.assertIn("MemAvailable", str(ctx.exception))

    def test_bad_value(self):
        with self.assertRaises(ParseFailure) as ctx:
            parse_meminfo("MemTotal: lots kB\nMemAvailable: 1 kB\n", "/proc/meminfo")
        self.assertIn("MemTotal", str(ctx.exception))


class CpuFrequencyReaderTests(unittest.TestCase):
    def test_bounds_read_once_current_reread(self):
        with tempfile.TemporaryDirectory() as tmp:
            sys_root = Path(tmp) / "sys"
            base0 = add_cpu(sys_root, 0, min_khz=800000, max_khz=3600000, cur_khz=1200000)
            add_cpu(sys_root, 1, cur_khz=4000000)
            with CpuFrequencyReader(sys_root, cpu_count=2) as reader:
                self.assertEqual([(b.min_khz, b.max_khz) for b in reader.bounds], [(800000, 3600000), (400000, 4000000)])
                self.assertEqual([s.current_khz for s in reader.sample()], [1200000, 4000000])

                write(base0 / "scaling_cur_freq", "3500000\n")
                write(base0 / "scaling_max_freq", "9999999\n")
                self.assertEqual(reader.sample()[0].current_khz, 3500000)
                self.assertEqual(reader.bounds[0].max_khz, 3600000)

    def test_missing_cpufreq_is_fatal_with_index(self):
        with tempfile.TemporaryDirectory() as tmp:
            sys_root = Path(tmp) / "sys"
            add_cpu(sys_root, 0)
            reader = CpuFrequencyReader(sys_root, cpu_count=2)
            with self.assertRaises(ResourceUnavailable) as ctx:
                reader.open()
            self.assertIn("cpu1", str(ctx.exception))

    def test_sample_before_open(self):
        with self.assertRaises(ReadFailure):
            CpuFrequencyReader("/nonexistent", cpu_count=1).sample()

    def test_skips_offline_cpus(self):
        with tempfile.TemporaryDirectory() as tmp:
            sys_root = Path(tmp) / "sys"
            write(sys_root / "devices" / "system" / "cpu" / "online", "0-1,3\n")
            for index in (0, 1, 3):
                add_cpu(sys_root, index, cur_khz=1000000 + index)
            with CpuFrequencyReader(sys_root) as reader:
                self.assertEqual([b.index for b in reader.bounds], [0, 1, 3])
                self.assertEqual([(s.index, s.current_khz) for s in reader.sample()], [(0, 1000000), (1, 1000001), (3, 1000003)])


class OnlineCpuTests(unittest.TestCase):
    def test_parse_cpu_list(self):
        self.assertEqual(parse_cpu_list("0-3,5,7-8\n", "online"), (0, 1, 2, 3, 5, 7, 8))
        self.assertEqual(parse_cpu_list("0\n", "online"), (0,))

    def test_parse_cpu_list_rejects_garbage(self):
        for text in ("", "a-b", "3-1"):
            with self.assertRaises(ParseFailure):
                parse_cpu_list(text, "online")

    def test_falls_back_to_cpu_count_without_sysfs_list(self):
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("termstat_telemetry.cpu.online_cpu_count", return_value=4):
                self.assertEqual(online_cpus(tmp), (0, 1, 2, 3))


class CpuLoadReaderTests(unittest.TestCase):
    def test_deltas_reset_between_samples(self):
        times = FakeCpuTimes([100.0, 200.0], [100.5, 200.0], [101.5, 201.0])
        reader = CpuLoadReader(cpu_times=times).open()
        self.assertEqual([s.idle_delta_s for s in reader.sample()], [0.5, 0.0])
        self.assertEqual([s.idle_delta_s for s in reader.sample()], [1.0, 1.0])

    def test_cpu_count_change(self):
        times = FakeCpuTimes([1.0, 1.0], [2.0])
        reader = CpuLoadReader(cpu_times=times).open()
        with self.assertRaises(ReadFailure):
            reader.sample()

    def test_no_cpus(self):
        with self.assertRaises(ResourceUnavailable):
            CpuLoadReader(cpu_times=lambda: []).open()

    def test_idle_rows_follow_online_indices(self):
        with tempfile.TemporaryDirectory() as tmp:
            write(Path(tmp) / "devices" / "system" / "cpu" / "online", "0-1,3\n")
            times = FakeCpuTimes([1.0, 2.0, 3.0], [1.5, 2.0, 3.25])
            with CpuLoadReader(cpu_times=times, sys_root=tmp) as reader:
                samples = reader.sample()
            self.assertEqual([(s.index, s.idle_delta_s) for s in samples], [(0, 0.5), (1, 0.0), (3, 0.25)])

    def test_row_count_must_match_online_cpus(self):
        with tempfile.TemporaryDirectory() as tmp:
            write(Path(tmp) / "devices" / "system" / "cpu" / "online", "0-3\n")
            with self.assertRaises(ResourceUnavailable):
                CpuLoadReader(cpu_times=FakeCpuTimes([1.0, 1.0]), sys_root=tmp).open()


if __name__ == "__main__":
    unittest.main()
