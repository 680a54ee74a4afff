"""Tagged console logging with an optional debug file."""
import datetime
import os
from typing import Optional
from . import config


def _timestamp() -> str:
    return datetime.datetime.now().isoformat(timespec='seconds')


def debug_log(message: str) -> None:
    """Write debug message to log file if debug mode is enabled."""
    if config.DEBUG_MODE:
        timestamp = datetime.datetime.now().isoformat(timespec='milliseconds')
        try:
            os.makedirs(os.path.dirname(config.DEBUG_LOG_PATH), exist_ok=True)
            with open(config.DEBUG_LOG_PATH, 'a') as f:
                f.write(f"[{timestamp}] {message}\n")
        except OSError as e:
            print(f"Debug log unavailable ({config.DEBUG_LOG_PATH}): {e}")


def log_debug(tag: str, message: str) -> None:
    print(f"[{_timestamp()}] {tag}: {message}")
    debug_log(f"{tag}: {message}")


def log_error(tag: str, message: str, exc: Optional[BaseException] = None) -> None:
    line = f"{tag}: {message}"
    if exc is not None:
        line += f" ({type(exc).__name__}: {exc})"
    print(f"[{_timestamp()}] {line}")
    debug_log(line)
