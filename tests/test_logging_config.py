from __future__ import annotations

import logging

import pytest

from pharmacy.logging_config import LOG_FORMAT, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    level = root.level
    engine_level = logging.getLogger("sqlalchemy.engine").level
    yield root
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(engine_level)


def test_log_file_receives_records(restore_logging, tmp_path):
    log_file = tmp_path / "pharmacy.log"

    setup_logging("DEBUG", str(log_file))
    logging.getLogger("pharmacy.test").debug("order %d placed", 7)
    for handler in restore_logging.handlers:
        handler.flush()

    assert restore_logging.level == logging.DEBUG
    assert any(isinstance(h, logging.FileHandler) for h in restore_logging.handlers)
    assert "order 7 placed" in log_file.read_text()


def test_stdout_only_without_log_file(restore_logging):
    setup_logging()

    assert restore_logging.level == logging.INFO
    assert not any(isinstance(h, logging.FileHandler) for h in restore_logging.handlers)
    assert all(h.formatter._fmt == LOG_FORMAT for h in restore_logging.handlers)
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
