import logging
from flask import render_template
from models.telemetry_models import DashboardView, TelemetryRecord
from services.emitter_service import UNAVAILABLE
import config

logger = logging.getLogger(__name__)

ALERT_COLOR = "#ff4444"
CPU_NORMAL_COLOR = "#00C851"
MEM_NORMAL_COLOR = "#33b5e5"

NO_DATA_MESSAGE = "No data available yet."
NOT_AVAILABLE = "N/A"


def format_uptime(seconds: float) -> str:
    """Format seconds as HH:MM:SS, hours keep counting past 24"""
    total = max(int(seconds), 0)
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def gauge_color(value: float, threshold: float, alert_color: str, normal_color: str) -> str:
    return alert_color if value > threshold else normal_color


def _percent_text(value: float) -> str:
    if value < 0:
        return NOT_AVAILABLE
    return f"{value:.1f}%"


def _gauge_width(value: float) -> str:
    return f"{min(max(value, 0.0), 100.0):.1f}"


def build_view(record: TelemetryRecord) -> DashboardView:
    """
    Map a telemetry record to display strings.

    Args:
        record: Latest record from the stream

    Returns:
        DashboardView: Formatted values, unavailable readings shown as N/A
    """
    if record.cpu_temp_c == UNAVAILABLE:
        temperature = NOT_AVAILABLE
    else:
        temperature = f"{record.cpu_temp_c:.1f}°C"

    return DashboardView(
        uptime=format_uptime(record.uptime_sec),
        cpu_usage=_percent_text(record.cpu_usage_pct),
        cpu_width=_gauge_width(record.cpu_usage_pct),
        cpu_color=gauge_color(record.cpu_usage_pct, config.CPU_ALERT_THRESHOLD,
                              ALERT_COLOR, CPU_NORMAL_COLOR),
        mem_used=_percent_text(record.mem_used_pct),
        mem_width=_gauge_width(record.mem_used_pct),
        mem_color=gauge_color(record.mem_used_pct, config.MEM_ALERT_THRESHOLD,
                              ALERT_COLOR, MEM_NORMAL_COLOR),
        temperature=temperature,
        free_ram_mb=int(record.mem_free_kb) // 1024,
        total_ram_mb=int(record.mem_total_kb) // 1024
    )


def render_dashboard(record: TelemetryRecord) -> str:
    """Render the full HTML dashboard, requires an application context"""
    view = build_view(record)
    return render_template('dashboard.html', view=view, refresh_seconds=config.REFRESH_SECONDS)


def render_no_data() -> str:
    return NO_DATA_MESSAGE
