from __future__ import annotations

import logging
from pathlib import Path

import pytest

from marginal.config import ConfigError, LoggingConfig
from marginal.logging import ConsoleFormatter, configure_logging, level_from_string


def test_configure_logging_writes_files(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"

    configure_logging(LoggingConfig(level="debug", debug_file=True), log_dir)
    logging.getLogger("marginal.test").info("hello from the test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello from the test" in (log_dir / "marginal.log").read_text(encoding="utf-8")
    assert (log_dir / "debug.log").exists()
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_console_only() -> None:
    configure_logging(LoggingConfig(level="warning"))

    assert logging.getLogger().level == logging.WARNING


def test_console_formatter_without_colour() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "trained %d", (3,), None)

    assert ConsoleFormatter(use_color=False).format(record) == "I trained 3"


def test_unknown_level_is_a_config_error() -> None:
    with pytest.raises(ConfigError):
        level_from_string("chatty")


def test_console_formatter_names_the_source_module() -> None:
    record = logging.LogRecord(
        "marginal.classifiers.arow", logging.DEBUG, __file__, 1, "Created %s", ("AROW",), None
    )

    formatted = ConsoleFormatter(use_color=False, show_name=True).format(record)

    assert formatted == "D [classifiers.arow] Created AROW"


def test_debug_level_console_shows_module_names() -> None:
    configure_logging(LoggingConfig(level="debug"))

    formatters = [
        handler.formatter
        for handler in logging.getLogger().handlers
        if isinstance(handler.formatter, ConsoleFormatter)
    ]
    assert [formatter.show_name for formatter in formatters] == [True]


def test_info_file_log_skips_debug_records(tmp_path: Path) -> None:
    configure_logging(LoggingConfig(level="debug"), tmp_path)
    logging.getLogger("marginal.test").debug("only on the console")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "only on the console" not in (tmp_path / "marginal.log").read_text(encoding="utf-8")
    assert not (tmp_path / "debug.log").exists()
