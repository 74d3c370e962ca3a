"""
JSON-lines logging on top of the standard ``logging`` module.

Each record is written as one object: timestamp, level, message, then the
structured fields passed by the caller. Debug and info lines go to stdout,
warnings and errors to stderr.
"""
import json
import logging
import sys
from datetime import datetime, timezone

LOGGER_NAME = "qr_pdf"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JsonFormatter(logging.Formatter):

    def format(self, record):
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry = {
            "timestamp": timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "fields", None) or {})
        if record.exc_info:
            entry["stack"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level):
        super().__init__()
        self.max_level = max_level

    def filter(self, record):
        return record.levelno < self.max_level


class StructuredLogger:
    """Thin wrapper taking (level, message, fields) instead of %-style args."""

    def __init__(self, logger):
        self._logger = logger

    @property
    def logger(self):
        return self._logger

    def log(self, level, message, fields=None, exc_info=None):
        if isinstance(level, str):
            level = _LEVELS[level]
        self._logger.log(level, message, extra={"fields": dict(fields or {})}, exc_info=exc_info)

    def debug(self, message, **fields):
        self.log(logging.DEBUG, message, fields)

    def info(self, message, **fields):
        self.log(logging.INFO, message, fields)

    def warning(self, message, **fields):
        self.log(logging.WARNING, message, fields)

    def error(self, message, **fields):
        self.log(logging.ERROR, message, fields)


def build_logger(level="debug", name=LOGGER_NAME, stdout=None, stderr=None):
    """
    Configure the process-wide logger and return it wrapped.

    Calling this again replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_LEVELS[level])
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = JsonFormatter()

    out_handler = logging.StreamHandler(stdout or sys.stdout)
    out_handler.setFormatter(formatter)
    out_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    logger.addHandler(out_handler)

    err_handler = logging.StreamHandler(stderr or sys.stderr)
    err_handler.setFormatter(formatter)
    err_handler.setLevel(logging.WARNING)
    logger.addHandler(err_handler)

    return StructuredLogger(logger)
