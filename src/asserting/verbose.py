"""Debug logging for suite runs.

Every run gets its own logger that writes to ``debug.log`` and, in verbose
mode, to stderr. Records are tagged with the case and operation they came
from, so a line reads ``[timestamp] math/TestAddition: message``. Package
loggers such as ``asserting.web`` can be routed into the same handlers for
the duration of a run.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class ContextFormatter(logging.Formatter):
    """``[timestamp] case/operation: message``, dropping absent context."""

    def __init__(self) -> None:
        super().__init__(fmt="[%(asctime)s] %(context)s%(message)s", datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        parts = [getattr(record, key, None) for key in ("case", "operation")]
        context = "/".join(p for p in parts if p)
        record.context = f"{context}: " if context else ""
        return super().format(record)


class CaseLogger(logging.LoggerAdapter):
    """Adapter that stamps every record with the case being dispatched."""

    def __init__(self, logger: logging.Logger, case_name: str):
        super().__init__(logger, {"case": case_name})

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        # Per-call extra (the operation) is merged over the case.
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def setup_logger(
    debug_file: Path,
    verbose: bool = False,
    logger_name: str = "asserting_run",
    capture: Iterable[str] = (),
) -> logging.Logger:
    """
    Configure and return a logger for debug output.

    Always writes to debug_file. Optionally also writes to stderr if verbose=True.

    Args:
        debug_file: Path to debug log file (always created)
        verbose: If True, also log to stderr. If False, only log to file.
        logger_name: Name of the logger instance (allows multiple independent loggers)
        capture: Names of package loggers whose records should also reach
            these handlers until ``release_logger`` is called.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name)
    _close_handlers(logger)

    logger.disabled = False
    logger.setLevel(logging.DEBUG)
    formatter = ContextFormatter()

    debug_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(debug_file, mode="a")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if verbose:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG)
        stderr_handler.setFormatter(formatter)
        logger.addHandler(stderr_handler)

    for name in capture:
        captured = logging.getLogger(name)
        captured.setLevel(logging.DEBUG)
        for handler in logger.handlers:
            captured.addHandler(handler)

    return logger


def release_logger(logger: logging.Logger, capture: Iterable[str] = ()) -> None:
    """Detach the run's handlers from captured loggers and close them."""
    for name in capture:
        captured = logging.getLogger(name)
        for handler in logger.handlers:
            captured.removeHandler(handler)
        captured.setLevel(logging.NOTSET)
    _close_handlers(logger)


def _close_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
