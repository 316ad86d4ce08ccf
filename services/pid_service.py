import os
import logging
import psutil
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def read_pid(pid_file: str) -> Optional[int]:
    """
    Read the pid stored in a pid file.

    Args:
        pid_file: Pid file path

    Returns:
        Optional[int]: Stored pid, None if the file is missing or malformed
    """
    path = Path(pid_file)
    if not path.exists():
        return None

    try:
        with open(path, 'r') as f:
            return int(f.read().strip())
    except (ValueError, IOError) as e:
        logger.warning(f"Failed to read pid file {path}: {e}")
        return None


def acquire_pid_file(pid_file: str) -> Tuple[bool, str]:
    """
    Claim the collector pid file so that only one collector writes the stream.

    Args:
        pid_file: Pid file path

    Returns:
        Tuple[bool, str]: (success, message)
    """
    path = Path(pid_file)
    current_pid = os.getpid()

    existing_pid = read_pid(pid_file)
    if existing_pid is not None and existing_pid != current_pid:
        if psutil.pid_exists(existing_pid):
            return False, f"Collector already running (PID: {existing_pid})"
        logger.info(f"Removing stale pid file {path} (PID: {existing_pid})")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            f.write(str(current_pid))
    except (OSError, IOError) as e:
        return False, f"Failed to write pid file {path}: {e}"

    return True, f"Pid file {path} written (PID: {current_pid})"


def release_pid_file(pid_file: str) -> None:
    """Remove the pid file if it still belongs to this process"""
    path = Path(pid_file)
    if read_pid(pid_file) != os.getpid():
        return

    try:
        path.unlink()
        logger.info(f"Removed pid file {path}")
    except OSError as e:
        logger.warning(f"Failed to remove pid file {path}: {e}")
