# =============================================================================
# clineng_core/logging/config.py
# Logging setup for the workbench and its sync layer
# =============================================================================

import logging
import sys
import time
from pathlib import Path
from datetime import datetime
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_DIR = Path("logs")

# HTTP and file-watcher chatter drowns the sync messages at INFO
QUIET_LOGGERS = ("urllib3", "requests", "watchdog")


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_to_file: bool = True,
    log_filename: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure the root logger once per process.

    Args:
        level: A logging level or its name ("DEBUG", "info", ...); unknown
            names fall back to INFO
        log_to_file: Also write to a daily file
        log_filename: Defaults to clineng_YYYY-MM-DD.log
        log_dir: Defaults to ./logs
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        directory = Path(log_dir) if log_dir is not None else LOG_DIR
        directory.mkdir(parents=True, exist_ok=True)
        filename = log_filename or f"clineng_{datetime.now():%Y-%m-%d}.log"
        handlers.append(logging.FileHandler(directory / filename, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,  # Streamlit reruns the script; replace earlier handlers
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("clineng_core").info(f"Logging initialized at {logging.getLevelName(level)}")


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        from clineng_core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


class LogContext:
    """
    Times one operation and logs its start and outcome.

    A failure is logged as a one-line WARNING; the traceback belongs to
    whoever handles the exception. Exceptions always propagate.

    Usage:
        with LogContext(logger, "Registering equipment") as ctx:
            sync.add_equipment(fields)
        ctx.elapsed  # seconds
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time = None
        self.elapsed = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(f"{self.operation}... started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self.start_time

        if exc_type is None:
            self.logger.info(f"{self.operation}... completed ({self.elapsed:.2f}s)")
        else:
            self.logger.warning(f"{self.operation}... failed ({self.elapsed:.2f}s): {exc_val}")

        return False
