"""Normal Herding (NHERD) with selectable diagonal covariance updates."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import IntEnum
from typing import Any

import numpy as np

from ..store import read_dimension, read_float, read_int, read_vector
from .confidence_weighted import ConfidenceWeightedLearner
from .numeric import InvalidParameterError, require_dimension, require_positive

LOGGER = logging.getLogger(__name__)

# (covariances, confidence, feature) -> new covariances
CovarianceRule = Callable[[np.ndarray, float, np.ndarray], np.ndarray]


class CovarianceMode(IntEnum):
    """Diagonal approximation used when contracting the covariance."""

    FULL = 0
    EXACT = 1
    PROJECT = 2
    DROP = 3


def covariance_mode(value: int | CovarianceMode) -> CovarianceMode:
    try:
        return CovarianceMode(int(value))
    except ValueError as exc:
        raise InvalidParameterError(
            f"NHERD diagonal must be one of {[mode.value for mode in CovarianceMode]}, "
            f"got {value!r}"
        ) from exc


def covariance_rule(mode: CovarianceMode, C: float) -> CovarianceRule:
    if mode is CovarianceMode.EXACT:

        def _exact(sigma: np.ndarray, confidence: float, x: np.ndarray) -> np.ndarray:
            return sigma / np.square(1.0 + C * x * x * sigma)

        return _exact

    if mode is CovarianceMode.PROJECT:

        def _project(sigma: np.ndarray, confidence: float, x: np.ndarray) -> np.ndarray:
            return 1.0 / (1.0 / sigma + (2.0 * C + C * C * confidence) * x * x)

        return _project

    # FULL and DROP share the same diagonal of the full-covariance update.
    def _full(sigma: np.ndarray, confidence: float, x: np.ndarray) -> np.ndarray:
        scale = (C * C * confidence + 2.0 * C) / (1.0 + C * confidence) ** 2
        return sigma - np.square(sigma * x) * scale

    return _full


class NHERD(ConfidenceWeightedLearner):
    """Herds the weight distribution towards the half-space of each mistake."""

    name = "NHERD"

    def __init__(
        self,
        dimension: int,
        C: float = 1.0,
        diagonal: int | CovarianceMode = CovarianceMode.FULL,
    ) -> None:
        self._configure(
            require_dimension(dimension),
            require_positive("C", C),
            covariance_mode(diagonal),
        )
        self._reset()
        LOGGER.debug("Created %r", self)

    @property
    def C(self) -> float:
        return self._C

    @property
    def diagonal(self) -> CovarianceMode:
        return self._diagonal

    def _apply(self, vector: np.ndarray, label: int, margin: float, confidence: float) -> bool:
        if margin >= 1.0:
            return False
        alpha = max(0.0, 1.0 - margin) / (confidence + 1.0 / self._C)
        self._means = self._means + alpha * label * self._covariances * vector
        updated = self._compute_covariance(self._covariances, confidence, vector)
        # Rounding in 1 / (1 / sigma) must never grow an entry.
        self._covariances = np.minimum(updated, self._covariances)
        return True

    def hyperparameters(self) -> dict[str, Any]:
        return {"C": self._C, "diagonal": int(self._diagonal)}

    def _configure(self, dimension: int, C: float, diagonal: CovarianceMode) -> None:
        self._dimension = dimension
        self._C = C
        self._diagonal = diagonal
        self._compute_covariance = covariance_rule(diagonal, C)

    def _state(self) -> dict[str, Any]:
        return {
            "covariances": self._covariances,
            "means": self._means,
            "dimension": self._dimension,
            "C": self._C,
            "diagonal": int(self._diagonal),
        }

    def _restore(self, state: Mapping[str, Any]) -> None:
        dimension = read_dimension(state)
        covariances = self._read_covariances(state, dimension)
        means = read_vector(state, "means", dimension)
        C = require_positive("C", read_float(state, "C"))
        diagonal = covariance_mode(read_int(state, "diagonal"))
        self._configure(dimension, C, diagonal)
        self._covariances = covariances
        self._means = means


__all__ = ["CovarianceMode", "NHERD", "covariance_mode", "covariance_rule"]
