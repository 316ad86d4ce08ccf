import logging
from typing import Iterable, Optional
from models.telemetry_models import CpuCounters, MemInfo
import config

logger = logging.getLogger(__name__)

# user nice system idle iowait irq softirq are required, steal is optional
CPU_MANDATORY_FIELDS = 7

MEMINFO_KEYS = {
    'MemTotal:': 'total_kb',
    'MemFree:': 'free_kb',
    'MemAvailable:': 'available_kb'
}


def parse_cpu_line(line: str) -> Optional[CpuCounters]:
    """
    Parse the aggregate "cpu" line of /proc/stat.

    Args:
        line: A line such as "cpu  4705 356 584 3699 23 23 0 0 0 0"

    Returns:
        Optional[CpuCounters]: Parsed counters, None if the line is not the
        aggregate line or has too few numeric fields
    """
    parts = line.split()
    if not parts or parts[0] != 'cpu':
        return None

    values = []
    for token in parts[1:9]:
        try:
            values.append(int(token))
        except ValueError:
            break

    if len(values) < CPU_MANDATORY_FIELDS:
        logger.debug(f"Aggregate cpu line has only {len(values)} numeric fields")
        return None

    if len(values) < 8:
        values.append(0)

    return CpuCounters(*values)


def read_cpu_counters(path: Optional[str] = None) -> Optional[CpuCounters]:
    """
    Read the aggregate CPU counters from the kernel stat file.

    Args:
        path: Stat file path, defaults to config.PROC_STAT_PATH

    Returns:
        Optional[CpuCounters]: Counters, None if the file is unreadable or malformed
    """
    path = path or config.PROC_STAT_PATH
    try:
        with open(path, 'r') as f:
            for line in f:
                if line.startswith('cpu '):
                    return parse_cpu_line(line)
    except (OSError, IOError) as e:
        logger.warning(f"Failed to read {path}: {e}")
        return None

    logger.warning(f"No aggregate cpu line found in {path}")
    return None


def read_temperature(path: Optional[str] = None) -> Optional[float]:
    """
    Read the SoC temperature from a thermal zone.

    Args:
        path: Thermal zone file holding millidegrees Celsius

    Returns:
        Optional[float]: Temperature in degrees Celsius, None if unavailable
    """
    path = path or config.THERMAL_ZONE_PATH
    try:
        with open(path, 'r') as f:
            millidegrees = int(f.read().strip())
        return millidegrees / 1000.0
    except (OSError, IOError, ValueError) as e:
        logger.debug(f"Temperature unavailable from {path}: {e}")
        return None


def parse_meminfo(lines: Iterable[str]) -> MemInfo:
    """Extract MemTotal, MemFree and MemAvailable, missing or malformed values become 0"""
    values = {'total_kb': 0, 'free_kb': 0, 'available_kb': 0}

    for line in lines:
        for prefix, field_name in MEMINFO_KEYS.items():
            if line.startswith(prefix):
                parts = line[len(prefix):].split()
                try:
                    values[field_name] = int(parts[0])
                except (IndexError, ValueError):
                    logger.debug(f"Malformed meminfo line: {line.strip()}")
                break

    return MemInfo(**values)


def read_memory(path: Optional[str] = None) -> MemInfo:
    """
    Read memory totals from the meminfo file.

    Args:
        path: Meminfo file path, defaults to config.PROC_MEMINFO_PATH

    Returns:
        MemInfo: Memory totals in kB, zeros for anything that could not be read
    """
    path = path or config.PROC_MEMINFO_PATH
    try:
        with open(path, 'r') as f:
            return parse_meminfo(f)
    except (OSError, IOError) as e:
        logger.warning(f"Failed to read {path}: {e}")
        return MemInfo()


def read_uptime(path: Optional[str] = None) -> float:
    """Seconds since boot, 0.0 on any failure"""
    path = path or config.PROC_UPTIME_PATH
    try:
        with open(path, 'r') as f:
            return float(f.read().split()[0])
    except (OSError, IOError, ValueError, IndexError) as e:
        logger.debug(f"Uptime unavailable from {path}: {e}")
        return 0.0
