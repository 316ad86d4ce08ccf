"""
Latest-record extraction from the telemetry stream.

The stream grows without bound, so only the last READ_CHUNK_SIZE bytes are read.
The first line of that chunk is usually cut by the read boundary and the last one
may still be in flight; both are handled by the candidate selection below.
"""

import json
import logging
import os
import re
from typing import Any, Dict, Iterator, Optional, Tuple, Union
from models.telemetry_models import TelemetryRecord
import config

logger = logging.getLogger(__name__)

# Every record starts with this, see emitter_service.serialize_record
RECORD_MARKER = '{"timestamp"'

_NUMBER = r'(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)'

# Field name on TelemetryRecord -> (section in the JSON object, key)
RECORD_FIELDS = {
    'timestamp': (None, 'timestamp'),
    'uptime_sec': (None, 'uptime_sec'),
    'cpu_temp_c': ('cpu', 'temp_c'),
    'cpu_usage_pct': ('cpu', 'usage_pct'),
    'mem_total_kb': ('memory', 'total_kb'),
    'mem_free_kb': ('memory', 'free_kb'),
    'mem_available_kb': ('memory', 'available_kb'),
    'mem_used_pct': ('memory', 'used_pct'),
}

INTEGER_FIELDS = {'mem_total_kb', 'mem_free_kb', 'mem_available_kb'}


def read_tail(path: Optional[str] = None, chunk_size: Optional[int] = None) -> Optional[bytes]:
    """
    Read the last chunk_size bytes of a file, or the whole file if it is smaller.

    Args:
        path: Telemetry stream path, defaults to config.TELEMETRY_FILE
        chunk_size: Number of bytes to read, defaults to config.READ_CHUNK_SIZE

    Returns:
        Optional[bytes]: Tail bytes, None if the file is absent, empty or unreadable
    """
    path = path or config.TELEMETRY_FILE
    chunk_size = chunk_size or config.READ_CHUNK_SIZE

    try:
        with open(path, 'rb') as f:
            f.seek(0, os.SEEK_END)
            file_size = f.tell()
            if file_size == 0:
                return None

            f.seek(max(file_size - chunk_size, 0))
            data = f.read(chunk_size)
    except FileNotFoundError:
        logger.debug(f"Telemetry stream {path} does not exist yet")
        return None
    except (OSError, IOError) as e:
        logger.warning(f"Failed to read telemetry stream {path}: {e}")
        return None

    return data or None


def iter_candidates(chunk: str) -> Iterator[Tuple[str, bool]]:
    """Yield (line, terminated) for each non-empty line of the chunk"""
    lines = chunk.split('\n')
    last_index = len(lines) - 1

    for index, line in enumerate(lines):
        line = line.rstrip('\r')
        if not line.strip():
            continue
        yield line, index < last_index


def is_record_shaped(line: str) -> bool:
    return RECORD_MARKER in line


def _record_text(line: str) -> str:
    # Start at the last marker, anything before it is a torn earlier write
    start = line.rfind(RECORD_MARKER)
    return line[start:] if start >= 0 else line


def _decode(line: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(_record_text(line))
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def select_latest_line(chunk: str) -> Optional[str]:
    """
    Pick the most recent complete record line in the chunk.

    A newline-terminated record-shaped line is complete. The unterminated final
    line is used only if it decodes as a whole JSON object, otherwise it is a
    write or read boundary cut and the previous complete line wins.
    """
    latest = None
    for line, terminated in iter_candidates(chunk):
        if not is_record_shaped(line):
            continue
        if terminated or _decode(line) is not None:
            latest = line
    return latest


def _number(value: Any, integer: bool) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0 if integer else 0.0
    return int(value) if integer else float(value)


def _scan_field(line: str, key: str) -> Optional[float]:
    match = re.search(r'"%s":\s*%s' % (re.escape(key), _NUMBER), line)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def parse_record_line(line: str) -> TelemetryRecord:
    """
    Build a record from one stream line.

    The line is decoded as JSON when possible. Otherwise every field is located
    by its "<key>": marker on its own. Missing or non-numeric fields are 0.
    """
    values = {}
    data = _decode(line)

    if data is not None:
        for field_name, (section, key) in RECORD_FIELDS.items():
            source = data.get(section, {}) if section else data
            raw = source.get(key) if isinstance(source, dict) else None
            values[field_name] = _number(raw, field_name in INTEGER_FIELDS)
    else:
        logger.debug("Record line is not valid JSON, scanning fields individually")
        text = _record_text(line)
        for field_name, (_, key) in RECORD_FIELDS.items():
            raw = _scan_field(text, key)
            values[field_name] = _number(raw, field_name in INTEGER_FIELDS)

    return TelemetryRecord(**values)


def extract_latest(stream_tail: Union[bytes, str, None]) -> Optional[TelemetryRecord]:
    """
    Recover the most recent record from the tail of the telemetry stream.

    Args:
        stream_tail: Last bytes of the stream

    Returns:
        Optional[TelemetryRecord]: Latest record, None if no record-shaped line exists
    """
    if not stream_tail:
        return None

    if isinstance(stream_tail, bytes):
        # The read boundary may split a multi-byte character
        stream_tail = stream_tail.decode('utf-8', errors='replace')

    line = select_latest_line(stream_tail)
    if line is None:
        return None

    return parse_record_line(line)


def get_latest_record(path: Optional[str] = None, chunk_size: Optional[int] = None) -> Optional[TelemetryRecord]:
    """Read the stream tail and extract the latest record, None means no data yet"""
    return extract_latest(read_tail(path, chunk_size))
