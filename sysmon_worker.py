#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
System telemetry collector
Samples /proc and /sys once per tick and appends one JSON record per line
Runs as a standalone process next to the dashboard server
"""

import sys
import signal
import os
import logging
import argparse
from typing import List, Optional

import config
from services.emitter_service import TelemetryEmitter, StreamWriteError
from services.pid_service import acquire_pid_file, release_pid_file

logger = logging.getLogger(__name__)

STDOUT_TARGET = '-'


def configure_logging(log_file: Optional[str]) -> None:
    """Log to stderr and optionally to a file, stdout may carry the stream"""
    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
            handlers.append(logging.FileHandler(log_file, mode='a'))
        except OSError as e:
            sys.stderr.write(f"Cannot open log file {log_file}: {e}\n")

    logging.basicConfig(
        level=logging.DEBUG if config.DEBUG else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='System telemetry collector')

    parser.add_argument('--output', default=config.TELEMETRY_FILE,
                        help=f'Telemetry stream to append to, "-" for stdout (default: {config.TELEMETRY_FILE})')
    parser.add_argument('--interval', type=float, default=config.TICK_INTERVAL_SECONDS,
                        help=f'Seconds between samples (default: {config.TICK_INTERVAL_SECONDS})')
    parser.add_argument('--pid-file', default=config.SYSMON_PID_FILE,
                        help=f'Pid file guarding against a second collector (default: {config.SYSMON_PID_FILE})')
    parser.add_argument('--no-pid-file', action='store_true', help='Do not write a pid file')
    parser.add_argument('--log-file', default=config.SYSMON_LOG_FILE,
                        help=f'Log file (default: {config.SYSMON_LOG_FILE})')
    parser.add_argument('--iterations', type=int, default=None,
                        help='Stop after this many samples (default: run forever)')
    return parser


def main_worker_entry(argv: Optional[List[str]] = None) -> int:
    """Collector entry point, returns the process exit status"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)

    if args.interval <= 0:
        logger.error(f"Invalid interval {args.interval}, must be greater than 0")
        return 1

    pid_file = None if args.no_pid_file else args.pid_file
    if pid_file:
        success, message = acquire_pid_file(pid_file)
        if not success:
            logger.error(message)
            return 1
        logger.info(message)

    to_stdout = args.output == STDOUT_TARGET
    try:
        stream = sys.stdout if to_stdout else open(args.output, 'a', encoding='utf-8')
    except OSError as e:
        logger.error(f"Cannot open telemetry stream {args.output}: {e}")
        if pid_file:
            release_pid_file(pid_file)
        return 1

    logger.info(f"Writing telemetry to {'stdout' if to_stdout else args.output}")
    emitter = TelemetryEmitter(stream, interval=args.interval)

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}, {emitter.records_written} records written")
        if pid_file:
            release_pid_file(pid_file)
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        emitter.run(args.iterations)
    except StreamWriteError as e:
        logger.error(f"{e}, stopping collector")
        return 1
    except KeyboardInterrupt:
        pass
    finally:
        if not to_stdout:
            try:
                stream.close()
            except OSError as e:
                logger.warning(f"Failed to close telemetry stream: {e}")
        if pid_file:
            release_pid_file(pid_file)

    logger.info(f"Collector stopped after {emitter.records_written} records")
    return 0


if __name__ == "__main__":
    sys.exit(main_worker_entry())
