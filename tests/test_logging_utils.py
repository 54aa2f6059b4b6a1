import logging
from logging.handlers import RotatingFileHandler

import pytest

from ringguard.logging_utils import (
    RecentLogBuffer,
    mask_number,
    read_log_tail,
    setup_logging,
)


@pytest.fixture
def clean_logger():
    logger = logging.getLogger("ringguard")
    saved = list(logger.handlers)
    for handler in saved:
        logger.removeHandler(handler)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in saved:
        logger.addHandler(handler)


def test_buffer_keeps_only_recent_lines():
    buffer = RecentLogBuffer(max_lines=3)
    logger = logging.getLogger("ringguard.test.buffer")
    logger.propagate = False
    logger.setLevel(logging.INFO)
    logger.addHandler(buffer)
    try:
        for i in range(5):
            logger.info("line %d", i)
    finally:
        logger.removeHandler(buffer)
    lines = buffer.lines()
    assert len(lines) == 3
    assert lines[-1].endswith("line 4")
    buffer.clear()
    assert buffer.lines() == []


def test_setup_logging_writes_file(tmp_path, clean_logger):
    buffer = RecentLogBuffer()
    logger, path = setup_logging(str(tmp_path / "logs"), buffer=buffer)
    logger.info("Trusted caller detected")
    for handler in logger.handlers:
        handler.flush()

    assert sum(isinstance(h, RotatingFileHandler) for h in logger.handlers) == 1
    assert read_log_tail(path)[-1].endswith("Trusted caller detected")
    assert buffer.lines()[-1].endswith("Trusted caller detected")

    setup_logging(str(tmp_path / "logs"), buffer=buffer)
    assert sum(isinstance(h, RotatingFileHandler) for h in logger.handlers) == 1


def test_read_log_tail_missing_file(tmp_path):
    assert read_log_tail(str(tmp_path / "nope.log")) == []


def test_mask_number():
    assert mask_number("+1 (555) 000-1111") == "***1111"
    assert mask_number("123") == "***"
    assert mask_number("") == ""
    assert mask_number(None) == ""
