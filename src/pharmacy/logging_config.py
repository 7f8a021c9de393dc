"""
Logging configuration for the pharmacy application.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where the records go and how they look.
"""

from __future__ import annotations

import logging
import sys
from typing import List

LOG_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """
    Configure the root logger once for the whole process.

    Records go to stdout and, when ``log_file`` is given, to that file too.
    SQLAlchemy's engine logger is kept at WARNING unless SQL echo is turned
    on through the engine itself.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
