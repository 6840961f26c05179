"""
Structured Logging Configuration

One line per record: UTC timestamp, level, logger name, message and, when
the caller passes ``extra={"reference_id": ...}``, the screening reference
so every line about one PDF can be grepped together.

Patient identifiers (names, NHS numbers, emails) must never be logged.
"""
import logging
import sys
from typing import Optional
from datetime import datetime, timezone


class StructuredFormatter(logging.Formatter):
    """Single-line structured output, optionally ANSI-coloured by level."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        color = self.COLORS.get(record.levelname, "") if self.use_color else ""
        reset = self.COLORS['RESET'] if color else ""

        parts = [f"[{timestamp}]", f"{record.levelname:8}", f"[{record.name}]"]
        reference_id = getattr(record, "reference_id", None)
        if reference_id:
            parts.append(f"[ref={reference_id}]")
        parts.append(record.getMessage())

        line = f"{color}{' '.join(parts)}{reset}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure application-wide logging.

    Called once by the API entry point (and the demo); library modules only
    ask for loggers.

    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Optional file path; file output is never coloured
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter(use_color=False))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use ``get_logger(__name__)``."""
    return logging.getLogger(name)
