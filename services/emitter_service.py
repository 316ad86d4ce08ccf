import json
import logging
import time
from typing import Callable, Optional, TextIO
from models.telemetry_models import CpuCounters, Snapshot, TelemetryRecord
from services.counter_service import read_cpu_counters, read_temperature, read_memory, read_uptime
from utils.usage_calculator import usage_pct, memory_used_pct
import config

logger = logging.getLogger(__name__)

# Reported when a value could not be measured this tick
UNAVAILABLE = -1.0


class StreamWriteError(Exception):
    """The telemetry stream can no longer be written to"""


def serialize_record(record: TelemetryRecord) -> str:
    """
    Serialize a record as one compact JSON line with a fixed field order.

    Args:
        record: Record to serialize

    Returns:
        str: JSON text terminated by a newline
    """
    payload = {
        "timestamp": round(record.timestamp, 6),
        "uptime_sec": round(record.uptime_sec, 2),
        "cpu": {
            "temp_c": round(record.cpu_temp_c, 2),
            "usage_pct": round(record.cpu_usage_pct, 1)
        },
        "memory": {
            "total_kb": int(record.mem_total_kb),
            "free_kb": int(record.mem_free_kb),
            "available_kb": int(record.mem_available_kb),
            "used_pct": round(record.mem_used_pct, 1)
        }
    }
    return json.dumps(payload, separators=(',', ':')) + '\n'


def append_record(stream: TextIO, line: str) -> None:
    """
    Append one serialized record to the stream as a single write.

    Raises:
        StreamWriteError: If the stream rejects the write
    """
    try:
        stream.write(line)
        stream.flush()
    except (OSError, ValueError) as e:
        raise StreamWriteError(f"Failed to write telemetry stream: {e}") from e


class TelemetryEmitter:
    """
    Samples the kernel counters once per tick and appends a record to the stream.
    Holds the previous tick's CPU counters and nothing else between ticks.
    """

    def __init__(self, stream: TextIO, interval: Optional[float] = None,
                 clock: Callable[[], float] = time.time,
                 sleep: Callable[[float], None] = time.sleep):
        self.stream = stream
        self.interval = interval if interval is not None else config.TICK_INTERVAL_SECONDS
        self.previous: Optional[CpuCounters] = None
        self.records_written = 0
        self._clock = clock
        self._sleep = sleep

    def prime(self) -> bool:
        """Take the initial CPU reading, returns False if /proc/stat is unreadable"""
        self.previous = read_cpu_counters()
        if self.previous is None:
            logger.warning("Initial CPU counter read failed, usage will be unavailable until it succeeds")
            return False
        return True

    def sample_usage(self) -> float:
        current = read_cpu_counters()
        if current is None:
            return UNAVAILABLE

        previous, self.previous = self.previous, current
        if previous is None:
            return UNAVAILABLE
        return usage_pct(previous, current)

    def take_snapshot(self) -> Snapshot:
        temp = read_temperature()
        memory = read_memory()
        return Snapshot(
            cpu_temp_c=temp if temp is not None else UNAVAILABLE,
            mem_total_kb=memory.total_kb,
            mem_free_kb=memory.free_kb,
            mem_available_kb=memory.available_kb,
            uptime_sec=read_uptime()
        )

    def build_record(self, snapshot: Snapshot, cpu_usage: float) -> TelemetryRecord:
        return TelemetryRecord(
            timestamp=self._clock(),
            uptime_sec=snapshot.uptime_sec,
            cpu_temp_c=snapshot.cpu_temp_c,
            cpu_usage_pct=cpu_usage,
            mem_total_kb=snapshot.mem_total_kb,
            mem_free_kb=snapshot.mem_free_kb,
            mem_available_kb=snapshot.mem_available_kb,
            mem_used_pct=memory_used_pct(snapshot.mem_total_kb, snapshot.mem_available_kb)
        )

    def tick(self) -> TelemetryRecord:
        """
        Run one sampling cycle and append its record.

        Returns:
            TelemetryRecord: The record that was written

        Raises:
            StreamWriteError: If the stream cannot be written
        """
        cpu_usage = self.sample_usage()
        snapshot = self.take_snapshot()
        record = self.build_record(snapshot, cpu_usage)

        append_record(self.stream, serialize_record(record))
        self.records_written += 1

        logger.debug(f"Tick {self.records_written}: CPU {cpu_usage:.1f}%, "
                     f"Temp {snapshot.cpu_temp_c:.2f}C, Memory {record.mem_used_pct:.1f}%")
        return record

    def run(self, iterations: Optional[int] = None) -> None:
        """
        Sleep, sample and append until the stream fails.

        Args:
            iterations: Stop after this many ticks, None runs forever

        Raises:
            StreamWriteError: Propagated from tick(), never retried
        """
        if self.previous is None:
            self.prime()

        logger.info(f"Collector started, interval {self.interval}s")
        while iterations is None or self.records_written < iterations:
            self._sleep(self.interval)
            self.tick()
