"""Logging for the command-line drivers.

Results go to stdout through ``typer.echo``; everything logged here goes to
stderr, so ``marginal predict`` output stays clean enough to pipe.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import ConfigError, LoggingConfig

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_BYTES = 5_000_000
LOG_BACKUPS = 5

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ConsoleFormatter(logging.Formatter):
    """One-letter level marker, optionally coloured, before each message.

    With ``show_name`` the emitting module is appended, trimmed of the
    ``marginal.`` prefix, which is how ``-v`` tells learner and codec
    messages apart.
    """

    MARKERS: dict[int, tuple[str, str]] = {
        logging.DEBUG: ("D", "\x1b[36m"),
        logging.INFO: ("I", "\x1b[32m"),
        logging.WARNING: ("!", "\x1b[33m"),
        logging.ERROR: ("X", "\x1b[31m"),
        logging.CRITICAL: ("X", "\x1b[35m"),
    }
    RESET = "\x1b[0m"

    def __init__(self, use_color: bool, show_name: bool = False) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color
        self.show_name = show_name

    def format(self, record: logging.LogRecord) -> str:
        marker, color = self.MARKERS.get(record.levelno, ("?", "\x1b[37m"))
        if self.use_color:
            marker = f"{color}{marker}{self.RESET}"
        message = super().format(record)
        if self.show_name:
            source = record.name.removeprefix("marginal.")
            return f"{marker} [{source}] {message}"
        return f"{marker} {message}"


def configure_logging(logging_config: LoggingConfig, log_dir: Path | None = None) -> None:
    """Install the stderr handler, plus rotating run logs when ``log_dir`` is set.

    ``marginal.log`` records INFO and above; ``debug.log`` is added only when
    ``debug_file`` is enabled.
    """

    level = level_from_string(logging_config.level)
    handlers: list[logging.Handler] = [_console_handler(verbose=level <= logging.DEBUG)]

    if log_dir is not None:
        directory = log_dir.expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        files = [("marginal.log", logging.INFO)]
        if logging_config.debug_file:
            files.append(("debug.log", logging.DEBUG))
        handlers.extend(_file_handler(directory / name, file_level) for name, file_level in files)

    logging.basicConfig(level=level, handlers=handlers, force=True)


def level_from_string(level: str) -> int:
    try:
        return LEVELS[level.strip().upper()]
    except KeyError as exc:
        raise ConfigError(f"Unknown log level: {level}") from exc


def _console_handler(*, verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    use_color = bool(getattr(handler.stream, "isatty", lambda: False)())
    handler.setFormatter(ConsoleFormatter(use_color, show_name=verbose))
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = RotatingFileHandler(path, maxBytes=LOG_BYTES, backupCount=LOG_BACKUPS)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


__all__ = ["ConsoleFormatter", "configure_logging", "level_from_string"]
