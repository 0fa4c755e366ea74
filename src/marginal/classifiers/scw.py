"""Soft Confidence-Weighted learning (SCW-I)."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

import numpy as np
from scipy.stats import norm

from ..store import read_dimension, read_float, read_vector
from .confidence_weighted import ConfidenceWeightedLearner
from .numeric import InvalidParameterError, require_dimension, require_positive

LOGGER = logging.getLogger(__name__)


def require_probability(eta: float) -> float:
    value = float(eta)
    if not 0.5 < value < 1.0:
        raise InvalidParameterError(f"eta must lie in (0.5, 1), got {eta!r}")
    return value


class SCW(ConfidenceWeightedLearner):
    """SCW-I: confidence-weighted updates with an ``C``-bounded step.

    ``eta`` is the probability with which each seen example should be
    classified correctly under the current weight distribution.
    """

    name = "SCW"

    def __init__(self, dimension: int, C: float = 1.0, eta: float = 0.95) -> None:
        self._configure(
            require_dimension(dimension),
            require_positive("C", C),
            require_probability(eta),
        )
        self._reset()
        LOGGER.debug("Created %r", self)

    @property
    def C(self) -> float:
        return self._C

    @property
    def eta(self) -> float:
        return self._eta

    def _apply(self, vector: np.ndarray, label: int, margin: float, confidence: float) -> bool:
        phi = self._phi
        if confidence <= 0.0 or phi * math.sqrt(confidence) - margin <= 0.0:
            return False

        psi = 1.0 + phi * phi / 2.0
        zeta = 1.0 + phi * phi
        root = math.sqrt(margin * margin * phi**4 / 4.0 + confidence * phi * phi * zeta)
        alpha = min(self._C, max(0.0, (-margin * psi + root) / (confidence * zeta)))
        if alpha <= 0.0:
            return False

        scaled = alpha * confidence * phi
        u = 0.25 * (-scaled + math.sqrt(scaled * scaled + 4.0 * confidence)) ** 2
        beta = alpha * phi / (math.sqrt(u) + scaled)

        self._means = self._means + alpha * label * self._covariances * vector
        self._shrink(vector, beta)
        return True

    def hyperparameters(self) -> dict[str, Any]:
        return {"C": self._C, "eta": self._eta}

    def _configure(self, dimension: int, C: float, eta: float) -> None:
        self._dimension = dimension
        self._C = C
        self._eta = eta
        self._phi = float(norm.ppf(eta))

    def _state(self) -> dict[str, Any]:
        return {
            "means": self._means,
            "covariances": self._covariances,
            "dimension": self._dimension,
            "C": self._C,
            "eta": self._eta,
        }

    def _restore(self, state: Mapping[str, Any]) -> None:
        dimension = read_dimension(state)
        means = read_vector(state, "means", dimension)
        covariances = self._read_covariances(state, dimension)
        C = require_positive("C", read_float(state, "C"))
        eta = require_probability(read_float(state, "eta"))
        self._configure(dimension, C, eta)
        self._means = means
        self._covariances = covariances


__all__ = ["SCW"]
