"""
Logging setup for clicktoplay.
"""

import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Dict, Optional

import colorama
from colorama import Fore, Style

colorama.just_fix_windows_console()


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for console output."""

    COLORS = {
        'DEBUG': 'CYAN',
        'INFO': 'GREEN',
        'WARNING': 'YELLOW',
        'ERROR': 'RED',
        'CRITICAL': 'RED',
    }

    def __init__(self, fmt=None, datefmt=None, style='%', use_colors=None):
        """Initialize the formatter.

        Args:
            fmt: Format string
            datefmt: Date format string
            style: Style of the format string
            use_colors: Force colors on or off, defaults to whether stdout is a tty
        """
        super().__init__(fmt, datefmt, style)
        if use_colors is None:
            use_colors = sys.stdout.isatty()
        self.use_colors = use_colors

    def format(self, record):
        if not self.use_colors:
            return super().format(record)

        orig_levelname = record.levelname
        color = getattr(Fore, self.COLORS.get(record.levelname, 'WHITE'), Fore.WHITE)
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = orig_levelname


class ContextFilter(logging.Filter):
    """Filter that adds context information to log records."""

    def __init__(self, context=None):
        super().__init__()
        self.context = context or {}

    def filter(self, record):
        for key, value in self.context.items():
            setattr(record, key, value)
        return True


class PerformanceTimer:
    """Times a block and logs its outcome.

    Success is logged at DEBUG, failure at ERROR with the exception message.
    The exception itself is never suppressed.
    """

    def __init__(self, logger: logging.Logger, operation_name: str):
        self.logger = logger
        self.operation_name = operation_name
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self) -> "PerformanceTimer":
        self.start_time = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.elapsed = time.monotonic() - self.start_time
        if exc_type:
            self.logger.error(f"{self.operation_name} failed after {self.elapsed:.3f}s: {exc_val}")
        else:
            self.logger.debug(f"{self.operation_name} passed in {self.elapsed:.3f}s")


def setup_logging(
    settings: "Settings",
    context: Optional[Dict[str, str]] = None
) -> logging.Logger:
    """Set up logging for clicktoplay.

    Args:
        settings: Application settings containing logging configuration
        context: Optional dictionary with context information to add to log records

    Returns:
        Root logger
    """
    log_file = settings.logging.file
    if isinstance(log_file, str):
        log_file = Path(log_file)

    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level = getattr(logging, settings.logging.level.value, logging.INFO)
    root_logger.setLevel(level)

    base_format = settings.logging.format
    file_formatter = logging.Formatter(base_format)

    env_format = f"[{settings.env.value}] {base_format}"
    console_formatter = ColoredFormatter(env_format)

    if context:
        root_logger.addFilter(ContextFilter(context))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=settings.logging.rotate_size,
            backupCount=settings.logging.backup_count
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger("clicktoplay").info(
        f"Logging initialized: level={settings.logging.level.value}, "
        f"environment={settings.env.value}"
    )

    return root_logger


def time_operation(logger: logging.Logger, operation_name: str) -> PerformanceTimer:
    """Time a scenario step or other unit of work, e.g. ``with time_operation(logger, "Step 1"):``."""
    return PerformanceTimer(logger, operation_name)
