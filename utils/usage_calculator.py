import logging
from models.telemetry_models import CpuCounters

logger = logging.getLogger(__name__)


def idle_ticks(counters: CpuCounters) -> int:
    return counters.idle + counters.iowait


def total_ticks(counters: CpuCounters) -> int:
    busy = (counters.user + counters.nice + counters.system +
            counters.irq + counters.softirq + counters.steal)
    return idle_ticks(counters) + busy


def usage_pct(prev: CpuCounters, curr: CpuCounters) -> float:
    """
    Calculate the CPU busy percentage between two counter samples.

    Args:
        prev: Counters from the previous tick
        curr: Counters sampled after prev

    Returns:
        float: Busy percentage clamped to [0.0, 100.0], 0.0 when no ticks elapsed
    """
    total_delta = total_ticks(curr) - total_ticks(prev)
    idle_delta = idle_ticks(curr) - idle_ticks(prev)

    if total_delta == 0:
        return 0.0

    if total_delta < 0 or idle_delta < 0:
        # Counter reset or wraparound
        logger.warning(f"CPU counters went backwards (total_delta={total_delta}, idle_delta={idle_delta})")
        if total_delta < 0:
            return 0.0

    usage = (total_delta - idle_delta) / total_delta * 100.0
    return min(max(usage, 0.0), 100.0)


def memory_used_pct(total_kb: int, available_kb: int) -> float:
    """Share of memory not available to new allocations, 0.0 when the total is unknown"""
    if total_kb <= 0:
        return 0.0
    return (1.0 - available_kb / total_kb) * 100.0
