"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .classifiers.registry import classifier_class

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MARGINAL_CONFIG"
DEFAULT_ALGORITHM = "PA"
DEFAULT_LOG_LEVEL = "info"


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    debug_file: bool = False


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    algorithm: str = DEFAULT_ALGORITHM
    dimension: int | None = None
    params: dict[str, Any] = field(default_factory=dict)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    log_dir: Path | None = None


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML.

    Without an explicit path or ``$MARGINAL_CONFIG`` the defaults are used.
    """

    config_path = _resolve_config_path(path)
    if config_path is None:
        return Config()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw)


def _resolve_config_path(explicit: Path | str | None) -> Path | None:
    if explicit:
        return Path(explicit).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return None


def _parse_config(raw: dict[str, Any]) -> Config:
    unknown = set(raw) - {"algorithm", "dimension", "params", "logging", "log_dir"}
    if unknown:
        LOGGER.warning("Ignoring unknown configuration keys: %s", ", ".join(sorted(unknown)))
    return Config(
        algorithm=_parse_algorithm(raw.get("algorithm")),
        dimension=_parse_dimension(raw.get("dimension")),
        params=_parse_params(raw.get("params")),
        logging=_parse_logging(raw.get("logging")),
        log_dir=_parse_log_dir(raw.get("log_dir")),
    )


def _parse_algorithm(value: Any) -> str:
    if value is None:
        return DEFAULT_ALGORITHM
    try:
        return classifier_class(str(value)).name
    except KeyError as exc:
        raise ConfigError(str(exc.args[0])) from exc


def _parse_dimension(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError("dimension must be a positive integer.")
    return value


def _parse_params(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("params must be a mapping of hyperparameter name to value.")
    params: dict[str, Any] = {}
    for name, raw_value in value.items():
        if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
            raise ConfigError(f"params.{name} must be a number.")
        params[str(name)] = raw_value
    return params


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = str(value.get("level", DEFAULT_LOG_LEVEL)).lower()
    debug_file = bool(value.get("debug_file", False))
    return LoggingConfig(level=level, debug_file=debug_file)


def _parse_log_dir(value: Any) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError("log_dir must be a string path.")
    return Path(value).expanduser()


__all__ = [
    "CONFIG_ENV_VAR",
    "Config",
    "ConfigError",
    "LoggingConfig",
    "load_config",
]
