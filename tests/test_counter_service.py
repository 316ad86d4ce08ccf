import os
import shutil
import tempfile
import unittest
from models.telemetry_models import CpuCounters, MemInfo
from services.counter_service import (
    parse_cpu_line, read_cpu_counters, read_temperature, read_memory, read_uptime, parse_meminfo
)

PROC_STAT = """cpu  4705 356 584 3699 23 23 0 12 0 0
cpu0 1393 280 290 3468 23 23 0 3 0 0
cpu1 1004 76 294 77 0 0 0 3 0 0
intr 114930548 113199788 3 0 5 263 0 4 [... lots more numbers ...]
ctxt 1990473
btime 1062191376
"""

PROC_MEMINFO = """MemTotal:         949132 kB
MemFree:          101640 kB
MemAvailable:     512008 kB
Buffers:           35120 kB
Cached:           389780 kB
"""


class TestCounterService(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_file(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, 'w') as f:
            f.write(content)
        return path

    def test_parse_cpu_line(self):
        counters = parse_cpu_line("cpu  4705 356 584 3699 23 23 0 12 0 0")
        self.assertEqual(counters, CpuCounters(4705, 356, 584, 3699, 23, 23, 0, 12))

    def test_parse_cpu_line_without_steal(self):
        counters = parse_cpu_line("cpu  1 2 3 4 5 6 7")
        self.assertEqual(counters.softirq, 7)
        self.assertEqual(counters.steal, 0)

    def test_parse_cpu_line_too_short(self):
        self.assertIsNone(parse_cpu_line("cpu  1 2 3"))
        self.assertIsNone(parse_cpu_line("cpu  1 2 3 x 5 6 7 8"))
        self.assertIsNone(parse_cpu_line(""))

    def test_parse_cpu_line_rejects_per_core_line(self):
        self.assertIsNone(parse_cpu_line("cpu0 1393 280 290 3468 23 23 0 3 0 0"))

    def test_read_cpu_counters_uses_aggregate_line(self):
        path = self.write_file('stat', PROC_STAT)
        counters = read_cpu_counters(path)
        self.assertEqual(counters.user, 4705)
        self.assertEqual(counters.steal, 12)

    def test_read_cpu_counters_without_aggregate_line(self):
        path = self.write_file('stat', "cpu0 1 2 3 4 5 6 7 8\n")
        self.assertIsNone(read_cpu_counters(path))

    def test_read_cpu_counters_missing_file(self):
        self.assertIsNone(read_cpu_counters(os.path.join(self.temp_dir, 'missing')))

    def test_read_temperature(self):
        path = self.write_file('temp', "48312\n")
        self.assertAlmostEqual(read_temperature(path), 48.312)

    def test_read_temperature_unavailable(self):
        self.assertIsNone(read_temperature(os.path.join(self.temp_dir, 'missing')))
        path = self.write_file('temp', "not a number\n")
        self.assertIsNone(read_temperature(path))

    def test_read_memory(self):
        path = self.write_file('meminfo', PROC_MEMINFO)
        self.assertEqual(read_memory(path), MemInfo(total_kb=949132, free_kb=101640, available_kb=512008))

    def test_read_memory_missing_fields_default_to_zero(self):
        path = self.write_file('meminfo', "MemTotal:  1000 kB\nMemFree: garbage\n")
        self.assertEqual(read_memory(path), MemInfo(total_kb=1000, free_kb=0, available_kb=0))

    def test_read_memory_missing_file(self):
        self.assertEqual(read_memory(os.path.join(self.temp_dir, 'missing')), MemInfo())

    def test_parse_meminfo_prefix_match(self):
        # MemTotalSwap-like keys must not match MemTotal:
        info = parse_meminfo(["SwapTotal:  5 kB\n", "MemTotal:  7 kB\n"])
        self.assertEqual(info.total_kb, 7)

    def test_read_uptime(self):
        path = self.write_file('uptime', "350735.47 234388.90\n")
        self.assertAlmostEqual(read_uptime(path), 350735.47)

    def test_read_uptime_failure(self):
        self.assertEqual(read_uptime(os.path.join(self.temp_dir, 'missing')), 0.0)
        self.assertEqual(read_uptime(self.write_file('uptime', "")), 0.0)
        self.assertEqual(read_uptime(self.write_file('uptime2', "abc def")), 0.0)


if __name__ == '__main__':
    unittest.main()
