"""Adaptive Regularization of Weight vectors (AROW)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import numpy as np

from ..store import read_dimension, read_float, read_vector
from .confidence_weighted import ConfidenceWeightedLearner
from .numeric import require_dimension, require_positive

LOGGER = logging.getLogger(__name__)


class AROW(ConfidenceWeightedLearner):
    """Confidence-weighted learner regularised by ``r``.

    Larger ``r`` makes each update more conservative.
    """

    name = "AROW"

    def __init__(self, dimension: int, r: float = 1.0) -> None:
        self._dimension = require_dimension(dimension)
        self._r = require_positive("r", r)
        self._reset()
        LOGGER.debug("Created %r", self)

    @property
    def r(self) -> float:
        return self._r

    def _apply(self, vector: np.ndarray, label: int, margin: float, confidence: float) -> bool:
        if margin >= 1.0:
            return False
        beta = 1.0 / (confidence + self._r)
        alpha = (1.0 - margin) * beta
        self._means = self._means + alpha * label * self._covariances * vector
        self._shrink(vector, beta)
        return True

    def hyperparameters(self) -> dict[str, Any]:
        return {"r": self._r}

    def _state(self) -> dict[str, Any]:
        return {
            "means": self._means,
            "covariances": self._covariances,
            "dimension": self._dimension,
            "r": self._r,
        }

    def _restore(self, state: Mapping[str, Any]) -> None:
        dimension = read_dimension(state)
        means = read_vector(state, "means", dimension)
        covariances = self._read_covariances(state, dimension)
        r = require_positive("r", read_float(state, "r"))
        self._dimension = dimension
        self._r = r
        self._means = means
        self._covariances = covariances


__all__ = ["AROW"]
