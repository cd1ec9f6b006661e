"""
Structured logging for CampusCoffee

All modules log through children of the ``campuscoffee`` logger, which writes
one JSON object per line (or plain text when LOG_FORMAT=text) to stdout.
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

ROOT_LOGGER_NAME = "campuscoffee"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class PosLogFormatter(jsonlogger.JsonFormatter):
    """Emits timestamp, level and logger next to the message and extras."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Attach a stdout handler to logger ``name``, replacing any earlier one.

    Args:
        name: Logger name
        level: Level name; falls back to LOG_LEVEL, then INFO
        format_type: "json" or "text"; falls back to LOG_FORMAT, then json

    Returns:
        The configured logger
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = LOG_LEVELS.get(level_name, logging.INFO)
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    if format_type == "json":
        formatter = PosLogFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Return the logger for ``name``.

    Names under ``campuscoffee.`` get no handler of their own and propagate
    to the ``campuscoffee`` logger, which is set up on first use.
    """
    if name.startswith(ROOT_LOGGER_NAME + "."):
        if not logging.getLogger(ROOT_LOGGER_NAME).handlers:
            setup_logger(ROOT_LOGGER_NAME)
        return logging.getLogger(name)

    logger = logging.getLogger(name)
    return logger if logger.handlers else setup_logger(name)


class log_operation:
    """
    Logs the start and the outcome of a CLI command or service call.

    Exceptions are logged with their type and re-raised.

    Usage:
        with log_operation("upsert", logger=logger, pos_name="Café Central"):
            ...
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = {"operation": operation_name, **extra_fields}
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(f"Starting: {self.operation_name}", extra=self.extra_fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        extra = {
            **self.extra_fields,
            "duration_seconds": round(time.perf_counter() - self.start_time, 3),
        }
        if exc_type is None:
            self.logger.info(f"Completed: {self.operation_name}", extra={**extra, "status": "success"})
        else:
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra={**extra, "status": "error", "error_type": exc_type.__name__, "error_message": str(exc_val)},
            )
        return False
