"""
obsdisk logging utilities

Root logging configuration for the CLI and API entry points.
"""

import logging
import sys
from typing import Optional

# Default logging format
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers that are only useful when debugging obsdisk itself
NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def configure_logging(
    level: int = logging.INFO,
    format: str = DEFAULT_FORMAT,
    file_path: Optional[str] = None
) -> None:
    """
    Configure root logging for obsdisk entry points.

    Log lines go to stderr so that stdout carries only command output
    (volume listings, mount points).

    Args:
        level: Log level
        format: Log format string
        file_path: Optional file that receives the same log lines
    """
    formatter = logging.Formatter(format)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler (stderr)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Registry log file (if specified)
    if file_path:
        file_handler = logging.FileHandler(file_path)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # SQL echo only below INFO
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level < logging.INFO else logging.WARNING)
