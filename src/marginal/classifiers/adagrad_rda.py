"""AdaGrad with Regularized Dual Averaging on the hinge loss."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import numpy as np

from ..store import ModelFormatError, read_count, read_dimension, read_float, read_vector
from .base import LinearLearner
from .numeric import (
    FeatureLike,
    as_feature,
    check_binary_label,
    hinge_loss,
    require_dimension,
    require_positive,
)

LOGGER = logging.getLogger(__name__)


class AdaGradRDA(LinearLearner):
    """L1-regularised dual averaging with per-feature AdaGrad step sizes.

    Weights are recomputed from the accumulated gradients on every update;
    any feature whose average gradient stays within ``lambda`` is pinned to
    exactly zero, which keeps the model sparse.
    """

    name = "ADAGRAD_RDA"

    def __init__(self, dimension: int, eta: float = 1.0, lambda_: float = 1e-4) -> None:
        self._dimension = require_dimension(dimension)
        self._eta = require_positive("eta", eta)
        self._lambda = require_positive("lambda", lambda_)
        self._timestep = 0
        self._w = np.zeros(self._dimension, dtype=np.float64)
        self._h = np.zeros(self._dimension, dtype=np.float64)
        self._g = np.zeros(self._dimension, dtype=np.float64)
        LOGGER.debug("Created %r", self)

    @property
    def eta(self) -> float:
        return self._eta

    @property
    def lambda_(self) -> float:
        return self._lambda

    @property
    def timestep(self) -> int:
        return self._timestep

    @property
    def gradient_sum(self) -> np.ndarray:
        return self._g.copy()

    @property
    def squared_gradient_sum(self) -> np.ndarray:
        return self._h.copy()

    def update(self, feature: FeatureLike, label: int) -> bool:
        vector = as_feature(feature, self._dimension)
        label = check_binary_label(label)
        if hinge_loss(label * float(np.dot(self._w, vector))) <= 0.0:
            return False

        self._timestep += 1
        gradient = -label * vector
        self._g += gradient
        self._h += gradient * gradient

        t = self._timestep
        average = np.abs(self._g) / t
        active = average > self._lambda
        sign = np.where(self._g >= 0.0, 1.0, -1.0)
        weight = np.zeros(self._dimension, dtype=np.float64)
        # active implies h > 0, since |g| > 0 needs a non-zero gradient
        rate = self._eta / np.sqrt(self._h[active])
        weight[active] = -sign[active] * rate * t * (average[active] - self._lambda)
        self._w = weight
        return True

    def hyperparameters(self) -> dict[str, Any]:
        return {"eta": self._eta, "lambda": self._lambda}

    def _decision_vector(self) -> np.ndarray:
        return self._w

    def _state(self) -> dict[str, Any]:
        return {
            "w": self._w,
            "h": self._h,
            "g": self._g,
            "dimension": self._dimension,
            "eta": self._eta,
            "lambda": self._lambda,
            "timestep": self._timestep,
        }

    def _restore(self, state: Mapping[str, Any]) -> None:
        dimension = read_dimension(state)
        w = read_vector(state, "w", dimension)
        h = read_vector(state, "h", dimension)
        if (h < 0.0).any():
            raise ModelFormatError("Field 'h' must be non-negative.")
        g = read_vector(state, "g", dimension)
        eta = require_positive("eta", read_float(state, "eta"))
        lambda_ = require_positive("lambda", read_float(state, "lambda"))
        timestep = read_count(state, "timestep")
        self._dimension = dimension
        self._eta = eta
        self._lambda = lambda_
        self._timestep = timestep
        self._w = w
        self._h = h
        self._g = g


__all__ = ["AdaGradRDA"]
