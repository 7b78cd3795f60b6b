"""
Process-wide logging setup shared by the worker and the step runner.
"""

import sys
import json
import logging
from typing import Optional

import config


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name
        }
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure the root logger once: JSON lines on stdout, plus an optional file sink.

    Args:
        level: Log level name. Defaults to config.LOG_LEVEL.
        log_file: Path of the file sink. Defaults to config.LOG_FILE; empty disables it.
    """
    level = level or config.LOG_LEVEL
    if log_file is None:
        log_file = config.LOG_FILE

    formatter = JsonFormatter()

    # Get root logger and remove existing handlers to avoid duplication
    root_logger = logging.getLogger()
    for h in root_logger.handlers[:]:
        root_logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level.upper())
