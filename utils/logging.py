"""
Loguru setup for the Stock Signal Tracker.

Every sink writes to stderr or a file; stdout carries only the report.
"""

import sys
import time
from pathlib import Path
from typing import Optional

from loguru import logger

from config.settings import get_settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]} | {message}"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Replace loguru's default sink with the tracker's own.

    Level and file fall back to LOG_LEVEL / LOG_FILE from settings. The file
    sink rotates at 10 MB and keeps a week of history.
    """
    settings = get_settings()
    level = level or settings.log_level
    log_file = log_file or settings.log_file

    logger.remove()
    logger.configure(extra={"name": "tracker"})
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True, diagnose=False)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, format=FILE_FORMAT, level=level, rotation="10 MB", retention="7 days")

    logger.debug(f"Logging to stderr at {level}" + (f" and {log_file}" if log_file else ""))


def get_logger(name: str):
    """Logger tagged with the calling module's name."""
    return logger.bind(name=name)


class StepLogger:
    """
    Times a block and logs its outcome.

        with StepLogger("scan", symbols=4):
            ...
    """

    def __init__(self, step_name: str, **context):
        self.step_name = step_name
        self.logger = logger.bind(name=step_name, **context)
        self._started = 0.0

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.debug(f"{self.step_name} started")
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.info(f"{self.step_name} finished in {elapsed:.2f}s")
        elif issubclass(exc_type, Exception):
            self.logger.error(f"{self.step_name} failed after {elapsed:.2f}s: {exc_val}")
        return False


def log_api_call(
    service: str,
    endpoint: str,
    symbol: str,
    success: bool,
    duration_ms: float,
    error: Optional[str] = None,
) -> None:
    """Record one quote request; failures at WARNING, successes at DEBUG."""
    bound = logger.bind(name=service, endpoint=endpoint, symbol=symbol, duration_ms=round(duration_ms, 2))
    if success:
        bound.debug(f"{symbol} quotes in {duration_ms:.0f}ms")
    else:
        bound.warning(f"{symbol} quote request failed after {duration_ms:.0f}ms: {error}")
