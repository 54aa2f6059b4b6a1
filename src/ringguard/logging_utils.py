"""Logging helpers."""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from logging.handlers import RotatingFileHandler
from typing import List, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RecentLogBuffer(logging.Handler):
    """Keeps the last ``max_lines`` formatted records for status displays."""

    def __init__(self, max_lines: int = 300, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._lines: deque = deque(maxlen=max_lines)
        self._buffer_lock = threading.Lock()
        self.setFormatter(logging.Formatter("%(asctime)s %(message)s", datefmt="%H:%M:%S"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return
        with self._buffer_lock:
            self._lines.append(line)

    def lines(self) -> List[str]:
        with self._buffer_lock:
            return list(self._lines)

    def clear(self) -> None:
        with self._buffer_lock:
            self._lines.clear()


def setup_logging(
    log_dir: str = "logs",
    level: int = logging.INFO,
    buffer: Optional[RecentLogBuffer] = None,
) -> tuple[logging.Logger, str]:
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "ringguard.log")

    logger = logging.getLogger("ringguard")
    logger.setLevel(level)

    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        handler = RotatingFileHandler(log_path, maxBytes=2_000_000, backupCount=3)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    if buffer is not None and buffer not in logger.handlers:
        logger.addHandler(buffer)

    return logger, log_path


def read_log_tail(log_path: str, max_lines: int = 300) -> List[str]:
    """Last lines of the log file; survives process restarts."""
    if not os.path.exists(log_path):
        return []
    with open(log_path, "r", encoding="utf-8", errors="replace") as handle:
        return [line.rstrip("\n") for line in deque(handle, maxlen=max_lines)]


def mask_number(number: Optional[str]) -> str:
    """Mask a phone number to its last four digits for log lines."""
    digits = "".join(ch for ch in (number or "") if ch.isdigit())
    if not digits:
        return ""
    return f"***{digits[-4:]}" if len(digits) > 4 else "***"
