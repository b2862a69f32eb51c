import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'


class MainFormatter(logging.Formatter):
    """Formats launcher records, passing relayed server output through unchanged."""

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        # Lines relayed from the server log carry their own timestamps.
        if record.name.startswith('proc.'):
            return record.getMessage()
        return super().format(record)


def _make_handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(MainFormatter())
    return handler


def setup_logging(console_level: int = logging.INFO, log_file: Optional[Path] = None) -> None:
    """
    Configures the root logger with a stdout handler and, optionally, a file.
    Handlers from a previous call are closed and replaced.

    :param console_level: The level for console output, DEBUG with --verbose.
    :param log_file: Optional path receiving every record at DEBUG level.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(_make_handler(logging.StreamHandler(sys.stdout), console_level))

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            root_logger.addHandler(_make_handler(logging.FileHandler(log_file, encoding="utf-8"), logging.DEBUG))
        except OSError as e:
            root_logger.error(f"Cannot write the launcher log '{log_file}': {e}. Logging to the console only.")

    # Connection refusals while polling for readiness are expected.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
