from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class CpuCounters:
    """Aggregate CPU time-in-state counters from /proc/stat, in kernel ticks since boot"""
    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0
    steal: int = 0


@dataclass(frozen=True)
class MemInfo:
    total_kb: int = 0
    free_kb: int = 0
    available_kb: int = 0


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time readings for one collector tick"""
    cpu_temp_c: float
    mem_total_kb: int
    mem_free_kb: int
    mem_available_kb: int
    uptime_sec: float


@dataclass(frozen=True)
class TelemetryRecord:
    """One line of the telemetry stream"""
    timestamp: float
    uptime_sec: float
    cpu_temp_c: float
    cpu_usage_pct: float
    mem_total_kb: int
    mem_free_kb: int
    mem_available_kb: int
    mem_used_pct: float

    def to_dict(self) -> Dict[str, Any]:
        # Key order is the on-disk field order
        return {
            "timestamp": self.timestamp,
            "uptime_sec": self.uptime_sec,
            "cpu": {
                "temp_c": self.cpu_temp_c,
                "usage_pct": self.cpu_usage_pct
            },
            "memory": {
                "total_kb": self.mem_total_kb,
                "free_kb": self.mem_free_kb,
                "available_kb": self.mem_available_kb,
                "used_pct": self.mem_used_pct
            }
        }


@dataclass(frozen=True)
class DashboardView:
    """Formatted values for a single dashboard response"""
    uptime: str
    cpu_usage: str
    cpu_width: str
    cpu_color: str
    mem_used: str
    mem_width: str
    mem_color: str
    temperature: str
    free_ram_mb: int
    total_ram_mb: int
