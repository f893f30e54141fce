"""
Logging setup for the pdf_context package and its command line tool.

Records go to stderr so that text printed by `pdf-context` on stdout can be
piped without log noise. Library modules only call `logging.getLogger`;
handlers are attached here, once, by the CLI.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "pdf_context"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Attach handlers to the "pdf_context" logger.

    Calling it again replaces the handlers of a previous call.

    Args:
        level: Level for the logger and its handlers (default: INFO)
        log_file: Also append records to this file when given
        format_string: Record format, timestamped "name - level" by default

    Returns:
        The "pdf_context" logger
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    # Log to stderr so extracted text on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
