"""
Log output for state changes.

``LoggingSink`` writes every diff to the logger named by
``DiffSettings.logger_name``. ``setup_logging`` attaches console and file
handlers to that logger only, leaving the host's root configuration alone.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from statediff.services.settings import DiffSettings


class LogFormatter(logging.Formatter):
    """
    Formatter for multi-line state diffs.

    Every line after the first is indented to start under the first line's
    message, so a diff stays readable as one block. Console output is
    colored by level.
    """

    COLORS = {
        logging.DEBUG: '\033[36m',     # Cyan
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%H:%M:%S'
        )
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        first, *rest = formatted.split("\n")
        if rest:
            message_head = record.getMessage().split("\n", 1)[0]
            indent = " " * max(len(first) - len(message_head), 0)
            formatted = "\n".join([first] + [indent + line for line in rest])

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            if color:
                return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(
    settings: Optional[DiffSettings] = None,
    level: str = "DEBUG",
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Route state diffs to the console and optionally a file.

    Args:
        settings: Settings naming the diff logger; defaults to ``statediff``
        level: Log level string; unknown names fall back to DEBUG
        log_file: Optional file that receives a copy of every diff

    Returns:
        The configured diff logger
    """
    settings = settings or DiffSettings()
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.DEBUG

    logger = logging.getLogger(settings.logger_name)
    logger.setLevel(numeric_level)
    # Diffs are shown once, by these handlers.
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(LogFormatter(use_colors=False))
        logger.addHandler(file_handler)

    logging.getLogger('chardet').setLevel(logging.WARNING)

    logging.debug(f"LoggingSetup - {settings.logger_name} at {logging.getLevelName(numeric_level)}")
    return logger
