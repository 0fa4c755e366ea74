from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from marginal.config import CONFIG_ENV_VAR, Config, ConfigError, load_config


def _write_config(tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(textwrap.dedent(content), encoding="utf-8")
    return config_path


def test_load_config_success(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        f"""
        algorithm: nherd
        dimension: 12
        params:
          C: 0.5
          diagonal: 2
        logging:
          level: DEBUG
          debug_file: true
        log_dir: {tmp_path}/logs
        """,
    )

    config = load_config(config_path)

    assert config.algorithm == "NHERD"
    assert config.dimension == 12
    assert config.params == {"C": 0.5, "diagonal": 2}
    assert config.logging.level == "debug"
    assert config.logging.debug_file is True
    assert config.log_dir == tmp_path / "logs"


def test_load_config_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "algorithm: adagrad-rda\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))

    config = load_config()

    assert config.algorithm == "ADAGRAD_RDA"
    assert config.dimension is None


def test_defaults_without_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

    assert load_config() == Config()


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, ""))

    assert config.algorithm == "PA"
    assert config.params == {}


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "algorithm: perceptron\n",
        "dimension: 0\n",
        "dimension: twelve\n",
        "params: [1, 2]\n",
        "params:\n  C: high\n",
        "logging: verbose\n",
        "log_dir: 5\n",
        "algorithm: [unclosed\n",
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, content: str) -> None:
    with pytest.raises(ConfigError):
        load_config(_write_config(tmp_path, content))
