"""Numeric helpers shared by the online learners."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Union

import numpy as np

FeatureLike = Union[np.ndarray, Sequence[float]]


class InvalidParameterError(ValueError):
    """Raised when a learner is constructed with an invalid hyperparameter."""


def as_feature(feature: FeatureLike, dimension: int) -> np.ndarray:
    """Return ``feature`` as a 1-D float64 array of length ``dimension``."""

    vector = np.asarray(feature, dtype=np.float64)
    if vector.ndim != 1 or vector.shape[0] != dimension:
        raise ValueError(
            f"feature must be a 1-D vector of length {dimension}, got shape {vector.shape}"
        )
    return vector


def check_binary_label(label: int) -> int:
    value = int(label)
    if value not in (-1, 1):
        raise ValueError(f"binary label must be -1 or +1, got {label!r}")
    return value


def hinge_loss(margin: float) -> float:
    """Hinge loss for an already label-scaled margin."""

    return max(0.0, 1.0 - margin)


def sign_of(score: float) -> int:
    """Decision rule shared by every binary learner; zero resolves to +1."""

    return 1 if score >= 0.0 else -1


def require_dimension(dimension: int) -> int:
    value = int(dimension)
    if value <= 0:
        raise InvalidParameterError(f"dimension must be > 0, got {dimension!r}")
    return value


def require_positive(name: str, value: float) -> float:
    number = float(value)
    if not math.isfinite(number) or number <= 0.0:
        raise InvalidParameterError(f"{name} must be > 0, got {value!r}")
    return number


def squared_norm(feature: np.ndarray) -> float:
    return float(np.dot(feature, feature))


__all__ = [
    "FeatureLike",
    "InvalidParameterError",
    "as_feature",
    "check_binary_label",
    "hinge_loss",
    "require_dimension",
    "require_positive",
    "sign_of",
    "squared_norm",
]
