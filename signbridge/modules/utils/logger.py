"""
Structured logging with timing and confirmed-sign event logging.
"""

import os
import logging
import logging.handlers
import time
from functools import wraps


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3,
                  console_level=None):
    """Configure console and optional rotating file logging.

    The console follows ``level`` so that ``--log-level DEBUG`` on the
    replay CLI prints per-frame resolver decisions. Pass
    ``console_level="INFO"`` to keep the console terse while the file
    log still records DEBUG.
    """
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    log_level = _level(level)
    console_log_level = log_level if console_level is None else _level(console_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(log_level, console_log_level))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(console_log_level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


def _level(name) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


class SignLogger:
    """Records confirmed signs and keeps an in-memory history."""

    def __init__(self):
        self.logger = logging.getLogger("sign_events")
        self._history = []

    def log_sign(self, name, confidence, timestamp=None):
        """Log a confirmed sign.

        Args:
            name: Sign name
            confidence: Confidence percent (0-100)
            timestamp: Event time in seconds (defaults to now)
        """
        entry = {
            "timestamp": time.time() if timestamp is None else timestamp,
            "sign": name,
            "confidence": confidence,
        }
        self._history.append(entry)
        self.logger.info("Sign: %-12s | Confidence: %3d%% | t=%.2fs",
                         name, confidence, entry["timestamp"])

    def get_history(self, last_n=None):
        """Get recent confirmed signs."""
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def sentence(self) -> str:
        return " ".join(entry["sign"] for entry in self._history)

    @property
    def total_signs(self):
        return len(self._history)


def log_timing(func=None, *, warn_ms=None):
    """Decorator to log function execution time.

    Usable bare (``@log_timing``) or with a budget
    (``@log_timing(warn_ms=33.0)``); calls over the budget log a warning
    instead of a debug line.
    """
    if func is None:
        return lambda f: log_timing(f, warn_ms=warn_ms)

    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        if warn_ms is not None and elapsed > warn_ms:
            logger.warning("%s took %.2fms (budget %.0fms)", func.__name__, elapsed, warn_ms)
        else:
            logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
