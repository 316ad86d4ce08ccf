import json
import os
import shutil
import signal
import tempfile
import unittest
from unittest.mock import patch
from models.telemetry_models import CpuCounters, MemInfo
from sysmon_worker import main_worker_entry, build_parser


@patch('services.emitter_service.read_uptime', return_value=100.0)
@patch('services.emitter_service.read_memory', return_value=MemInfo(total_kb=1000, free_kb=500, available_kb=600))
@patch('services.emitter_service.read_temperature', return_value=42.0)
@patch('services.emitter_service.read_cpu_counters', return_value=CpuCounters(user=10, idle=10))
class TestSysmonWorker(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.output = os.path.join(self.temp_dir, 'monitor.log')
        self.pid_file = os.path.join(self.temp_dir, 'sysmon.pid')
        self.log_file = os.path.join(self.temp_dir, 'sysmon.log')
        self.saved_handlers = {sig: signal.getsignal(sig) for sig in (signal.SIGTERM, signal.SIGINT)}

    def tearDown(self):
        for sig, handler in self.saved_handlers.items():
            signal.signal(sig, handler)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def args(self, *extra):
        return ['--output', self.output, '--pid-file', self.pid_file,
                '--log-file', self.log_file, '--interval', '0.01'] + list(extra)

    def test_writes_records_and_releases_pid_file(self, *mocks):
        status = main_worker_entry(self.args('--iterations', '2'))

        self.assertEqual(status, 0)
        with open(self.output, encoding='utf-8') as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertEqual(json.loads(lines[-1])['memory']['used_pct'], 40.0)
        self.assertFalse(os.path.exists(self.pid_file))

    def test_appends_to_existing_stream(self, *mocks):
        with open(self.output, 'w', encoding='utf-8') as f:
            f.write('{"timestamp":1.0}\n')

        main_worker_entry(self.args('--iterations', '1'))

        with open(self.output, encoding='utf-8') as f:
            self.assertEqual(len(f.read().splitlines()), 2)

    @patch('services.pid_service.psutil.pid_exists', return_value=True)
    def test_second_collector_refused(self, mock_pid_exists, *mocks):
        with open(self.pid_file, 'w') as f:
            f.write('424242')

        self.assertEqual(main_worker_entry(self.args('--iterations', '1')), 1)
        self.assertFalse(os.path.exists(self.output))

    def test_invalid_interval(self, *mocks):
        self.assertEqual(main_worker_entry(self.args('--interval', '0')), 1)

    def test_unwritable_output(self, *mocks):
        args = self.args('--iterations', '1')
        args[1] = os.path.join(self.temp_dir, 'missing-dir', 'monitor.log')
        self.assertEqual(main_worker_entry(args), 1)
        self.assertFalse(os.path.exists(self.pid_file))

    def test_parser_defaults(self, *mocks):
        args = build_parser().parse_args([])
        self.assertIsNone(args.iterations)
        self.assertFalse(args.no_pid_file)


if __name__ == '__main__':
    unittest.main()
