"""Logging for compilation runs.

Records concerning one compilation target carry a ``target`` attribute
(see :func:`target_logger`); the console shows it as a prefix and the file
sink also records the worker thread, since generation and validation run
on ``polygen-generate-N`` / ``polygen-validate-N`` threads.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Tuple

_LOGGER_NAME = "polygen"

_CONSOLE_FORMAT = "[polygen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the polygen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class TargetLogger(logging.LoggerAdapter):
    """Attaches the compilation target id to every record it emits."""

    def __init__(self, logger: logging.Logger, target_id: str) -> None:
        super().__init__(logger, {"target": target_id})

    @property
    def target_id(self) -> str:
        return self.extra["target"]

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("target", self.target_id)
        kwargs["extra"] = extra
        return msg, kwargs


def target_logger(logger: logging.Logger, target_id: str) -> TargetLogger:
    return TargetLogger(logger, target_id)


class TargetFormatter(logging.Formatter):
    """Prefixes the message with ``<target>:`` when the record names one."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        target = getattr(record, "target", None)
        if not target:
            return super().formatMessage(record)
        original = record.message
        record.message = f"{target}: {original}"
        try:
            return super().formatMessage(record)
        finally:
            record.message = original


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the polygen logger with console output and an optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # The CLI may run several times in one process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(TargetFormatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        # The file keeps debug detail even when the console does not.
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(TargetFormatter(_FILE_FORMAT))
        logger.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    return logger


__all__ = ["TargetFormatter", "TargetLogger", "configure_logging", "get_logger", "target_logger"]
