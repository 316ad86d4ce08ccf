import os

# Kernel pseudo-files read by the collector
PROC_STAT_PATH = os.environ.get("PROC_STAT_PATH", "/proc/stat")
PROC_MEMINFO_PATH = os.environ.get("PROC_MEMINFO_PATH", "/proc/meminfo")
PROC_UPTIME_PATH = os.environ.get("PROC_UPTIME_PATH", "/proc/uptime")
THERMAL_ZONE_PATH = os.environ.get("THERMAL_ZONE_PATH", "/sys/class/thermal/thermal_zone0/temp")

# Application configuration
DEBUG = os.environ.get("DEBUG", "False").lower() == "true"
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8080"))

_current_dir = os.path.dirname(os.path.abspath(__file__))

# Telemetry stream
TELEMETRY_FILE = os.environ.get("TELEMETRY_FILE", os.path.join(_current_dir, "monitor.log"))
"""
Append-only telemetry stream, one JSON record per line.
Written only by sysmon_worker.py, read by the dashboard.
"""

TICK_INTERVAL_SECONDS = float(os.environ.get("TICK_INTERVAL_SECONDS", "1.0"))
"""Collector sampling interval in seconds"""

READ_CHUNK_SIZE = int(os.environ.get("READ_CHUNK_SIZE", "1024"))
"""
Number of bytes read from the end of the stream per request.
Must be larger than one record (about 200 bytes) or no record is ever found.
"""

REFRESH_SECONDS = int(os.environ.get("REFRESH_SECONDS", "1"))
"""Dashboard self-refresh period"""

# Dashboard thresholds (percent)
CPU_ALERT_THRESHOLD = float(os.environ.get("CPU_ALERT_THRESHOLD", "80.0"))
MEM_ALERT_THRESHOLD = float(os.environ.get("MEM_ALERT_THRESHOLD", "80.0"))

# Collector process files
SYSMON_PID_FILE = os.environ.get("SYSMON_PID_FILE", "/tmp/sysmon/sysmon.pid")
SYSMON_LOG_FILE = os.environ.get("SYSMON_LOG_FILE", "/tmp/sysmon/sysmon_worker.log")

SYSMON_WORKER_SCRIPT_PATH = os.environ.get("SYSMON_WORKER_SCRIPT_PATH",
                                           os.path.join(_current_dir, "sysmon_worker.py"))


def validate_config():
    """Validate configuration values and log warnings for suspicious ones"""
    warnings = []

    if not (1 <= PORT <= 65535):
        warnings.append(f"PORT ({PORT}) must be between 1 and 65535")

    if TICK_INTERVAL_SECONDS <= 0:
        warnings.append(f"TICK_INTERVAL_SECONDS ({TICK_INTERVAL_SECONDS}) must be greater than 0")

    if READ_CHUNK_SIZE < 256:
        warnings.append(f"READ_CHUNK_SIZE ({READ_CHUNK_SIZE}) is smaller than a typical record")

    if REFRESH_SECONDS <= 0:
        warnings.append(f"REFRESH_SECONDS ({REFRESH_SECONDS}) must be greater than 0")

    telemetry_dir = os.path.dirname(os.path.abspath(TELEMETRY_FILE))
    if not os.path.isdir(telemetry_dir):
        warnings.append(f"Telemetry directory {telemetry_dir} does not exist")

    if warnings:
        import logging
        logger = logging.getLogger(__name__)
        for warning in warnings:
            logger.warning(f"Configuration warning: {warning}")

    return warnings


__all__ = [
    'PROC_STAT_PATH', 'PROC_MEMINFO_PATH', 'PROC_UPTIME_PATH', 'THERMAL_ZONE_PATH',
    'DEBUG', 'HOST', 'PORT', 'TELEMETRY_FILE', 'TICK_INTERVAL_SECONDS',
    'READ_CHUNK_SIZE', 'REFRESH_SECONDS', 'CPU_ALERT_THRESHOLD', 'MEM_ALERT_THRESHOLD',
    'SYSMON_PID_FILE', 'SYSMON_LOG_FILE', 'SYSMON_WORKER_SCRIPT_PATH', 'validate_config'
]
