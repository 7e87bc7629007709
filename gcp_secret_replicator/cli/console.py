"""Console and log-file output for the CLI."""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "gcp_secret_replicator"
FILE_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BOLD = "\033[1m"
RESET = "\033[0m"


def use_color(stream=None) -> bool:
    stream = stream or sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(text: str, color: str, stream=None) -> str:
    """Wrap text in an ANSI color when the stream is a terminal."""
    if not use_color(stream):
        return text
    return f"{color}{text}{RESET}"


class ConsoleFormatter(logging.Formatter):
    """Message-only formatter, colored by level on terminals."""

    LEVEL_COLORS = {
        logging.ERROR: RED,
        logging.CRITICAL: RED,
        logging.WARNING: YELLOW,
    }

    def __init__(self, color: bool = False):
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if self.color and color:
            return f"{color}{message}{RESET}"
        return message


def log_file_name(source_project: str, destination_project: str, now: Optional[datetime] = None) -> str:
    """Per-run log file name, e.g. replicate-secrets_src_to_dst_20240101-120000.log."""
    timestamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"replicate-secrets_{source_project}_to_{destination_project}_{timestamp}.log"


def configure_logging(
    source_project: str,
    destination_project: str,
    log_dir: Optional[str] = ".",
    level: str = "INFO",
    stream=None,
) -> Optional[Path]:
    """
    Attach console and log-file handlers to the package logger.

    Args:
        source_project: Source project ID (used in the log file name)
        destination_project: Destination project ID (used in the log file name)
        log_dir: Directory for the run log, or None to disable the log file
        level: Logging level name
        stream: Console stream (defaults to stderr)

    Returns:
        Path to the log file, or None if no log file is written
    """
    stream = stream or sys.stderr
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(ConsoleFormatter(color=use_color(stream)))
    logger.addHandler(console_handler)

    if log_dir is None:
        return None

    directory = Path(log_dir).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / log_file_name(source_project, destination_project)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    logger.addHandler(file_handler)
    return log_path
