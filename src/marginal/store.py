"""Persistence helpers for learner state.

Every learner is stored as a self-describing JSON record::

    {"format": "marginal-model", "version": 1, "algorithm": "PA", "state": {...}}

Floats are written with Python's shortest round-trip representation, so the
restored vectors are bit-for-bit identical to the saved ones.
"""

from __future__ import annotations

import json
import logging
import math
import uuid
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from .classifiers.base import BinaryClassifier

LOGGER = logging.getLogger(__name__)

MODEL_FORMAT = "marginal-model"
MODEL_VERSION = 1


class ModelFormatError(ValueError):
    """Raised when a model file is missing fields or is not a model record."""


def write_model(path: Path | str, algorithm: str, state: Mapping[str, Any]) -> Path:
    """Atomically persist ``state`` for ``algorithm`` to ``path``."""

    target = Path(path).expanduser()
    payload = {
        "format": MODEL_FORMAT,
        "version": MODEL_VERSION,
        "algorithm": algorithm,
        "state": {key: _encode(value) for key, value in state.items()},
    }

    def _write(tmp_path: Path) -> None:
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, allow_nan=False)
            handle.write("\n")

    _atomic_write(target, _write)
    LOGGER.debug("Saved %s model to %s", algorithm, target)
    return target


def read_model(path: Path | str, *, algorithm: str | None = None) -> tuple[str, dict[str, Any]]:
    """Load a model record, returning ``(algorithm, state)``.

    When ``algorithm`` is given the record must have been written by that
    learner.
    """

    source = Path(path).expanduser()
    with source.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ModelFormatError(f"{source} is not a valid model file: {exc}") from exc

    if not isinstance(payload, dict) or payload.get("format") != MODEL_FORMAT:
        raise ModelFormatError(f"{source} is not a marginal model file.")
    version = payload.get("version")
    if version != MODEL_VERSION:
        raise ModelFormatError(f"Unsupported model version {version!r} in {source}.")
    stored = payload.get("algorithm")
    if not isinstance(stored, str):
        raise ModelFormatError(f"{source} does not name its algorithm.")
    if algorithm is not None and stored != algorithm:
        raise ModelFormatError(
            f"{source} holds a {stored} model, cannot load it into {algorithm}."
        )
    state = payload.get("state")
    if not isinstance(state, dict):
        raise ModelFormatError(f"{source} has no state mapping.")
    LOGGER.debug("Read %s model from %s", stored, source)
    return stored, state


def load_classifier(path: Path | str) -> BinaryClassifier:
    """Instantiate the learner recorded in ``path`` and restore its state."""

    from .classifiers.registry import classifier_class

    algorithm, _state = read_model(path)
    try:
        cls = classifier_class(algorithm)
    except KeyError as exc:
        raise ModelFormatError(f"Unknown algorithm {algorithm!r} in {path}.") from exc
    classifier = cls.from_file(path)
    LOGGER.info("Loaded %s model from %s", algorithm, path)
    return classifier


def read_dimension(state: Mapping[str, Any]) -> int:
    dimension = read_int(state, "dimension")
    if dimension <= 0:
        raise ModelFormatError(f"dimension must be > 0, got {dimension}")
    return dimension


def read_int(state: Mapping[str, Any], key: str) -> int:
    value = _require(state, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ModelFormatError(f"Field '{key}' must be an integer.")
    return value


def read_count(state: Mapping[str, Any], key: str) -> int:
    count = read_int(state, key)
    if count < 0:
        raise ModelFormatError(f"Field '{key}' must be >= 0, got {count}.")
    return count


def read_float(state: Mapping[str, Any], key: str) -> float:
    value = _require(state, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ModelFormatError(f"Field '{key}' must be a number.")
    if isinstance(value, float) and not math.isfinite(value):
        raise ModelFormatError(f"Field '{key}' must be finite, got {value!r}.")
    return float(value)


def read_vector(state: Mapping[str, Any], key: str, dimension: int) -> np.ndarray:
    return read_matrix(state, key, (dimension,))


def read_matrix(state: Mapping[str, Any], key: str, shape: tuple[int, ...]) -> np.ndarray:
    value = _require(state, key)
    try:
        array = np.array(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ModelFormatError(f"Field '{key}' must hold numbers.") from exc
    if array.shape != shape:
        raise ModelFormatError(f"Field '{key}' has shape {array.shape}, expected {shape}.")
    if not np.isfinite(array).all():
        raise ModelFormatError(f"Field '{key}' holds NaN or infinite values.")
    return array


def _require(state: Mapping[str, Any], key: str) -> Any:
    try:
        return state[key]
    except KeyError as exc:
        raise ModelFormatError(f"Model record is missing field '{key}'.") from exc


def _encode(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Cannot persist non-finite value {value!r}")
    return value


def _atomic_write(target: Path, writer: Callable[[Path], None]) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_name = f".{target.name}.{uuid.uuid4().hex}.tmp"
    tmp_path = target.with_name(tmp_name)
    try:
        writer(tmp_path)
        tmp_path.replace(target)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


__all__ = [
    "MODEL_FORMAT",
    "MODEL_VERSION",
    "ModelFormatError",
    "load_classifier",
    "read_count",
    "read_dimension",
    "read_float",
    "read_int",
    "read_matrix",
    "read_model",
    "read_vector",
    "write_model",
]
