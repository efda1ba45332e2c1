"""
Logging configuration for keyframe-studio.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..settings import AppSettings

CONSOLE_FORMAT = "%(asctime)s : %(levelname)-8s : %(name)s : %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        formatted = super().format(record)
        if record.levelname in formatted:
            formatted = formatted.replace(
                record.levelname, f"{color}{record.levelname}{reset}", 1
            )
        return formatted


class CSVFormatter(logging.Formatter):
    """Semicolon separated, quote-escaped records for the log file."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, self.datefmt)
        level = record.levelname.ljust(8)
        elapsed = f"{int(record.relativeCreated)} ms"
        message = record.getMessage().replace('"', '""')
        return f'"{timestamp}";{level};"{elapsed}";"{record.name}";"{record.lineno}";"{message}"'


def setup_logging(settings: "AppSettings") -> None:
    """
    Setup application logging with console and file handlers.

    Args:
        settings: AppSettings instance for all logging configuration
    """
    config = settings.logging

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    logging.getLogger("keyframe_studio").setLevel(logging.DEBUG)

    # Clear any existing handlers
    root_logger.handlers.clear()

    if config.console_logging:
        formatter_class = ColoredFormatter if config.console_use_colors else logging.Formatter
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, config.console_log_level.upper(), logging.INFO))
        console_handler.setFormatter(formatter_class(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
        root_logger.addHandler(console_handler)

    log_path = None
    if config.file_logging:
        try:
            log_path = Path(config.log_file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(CSVFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
            root_logger.addHandler(file_handler)
        except OSError as e:
            log_path = None
            root_logger.warning(f"Could not setup file logging: {e}")

    logger = logging.getLogger(__name__)
    logger.info("Logging initialized")
    if config.console_logging:
        logger.debug(f"Console logging: {config.console_log_level} (colors: {config.console_use_colors})")
    if log_path is not None:
        logger.debug(f"File logging: DEBUG at {log_path.absolute()}")
