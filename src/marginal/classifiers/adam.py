"""Adam applied online to the hinge loss."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

import numpy as np

from ..store import ModelFormatError, read_count, read_dimension, read_vector
from .base import LinearLearner
from .numeric import FeatureLike, as_feature, check_binary_label, hinge_loss, require_dimension

LOGGER = logging.getLogger(__name__)

ALPHA = 0.001
BETA1 = 0.9
BETA2 = 0.999
EPSILON = 1e-8
# beta1 is decayed by this factor per step
BETA1_DECAY = 0.99999999


class Adam(LinearLearner):
    """Adam steps on examples with positive hinge loss; others are skipped."""

    name = "ADAM"

    def __init__(self, dimension: int) -> None:
        self._dimension = require_dimension(dimension)
        self._timestep = 0
        self._w = np.zeros(self._dimension, dtype=np.float64)
        self._m = np.zeros(self._dimension, dtype=np.float64)
        self._v = np.zeros(self._dimension, dtype=np.float64)
        LOGGER.debug("Created %r", self)

    @property
    def timestep(self) -> int:
        return self._timestep

    def update(self, feature: FeatureLike, label: int) -> bool:
        vector = as_feature(feature, self._dimension)
        label = check_binary_label(label)
        if hinge_loss(label * float(np.dot(self._w, vector))) <= 0.0:
            return False

        gradient = -label * vector
        beta1_t = BETA1 * math.pow(BETA1_DECAY, self._timestep)
        self._timestep += 1
        t = self._timestep

        self._m = beta1_t * self._m + (1.0 - beta1_t) * gradient
        self._v = BETA2 * self._v + (1.0 - BETA2) * gradient * gradient
        m_hat = self._m / (1.0 - BETA1**t)
        v_hat = self._v / (1.0 - BETA2**t)
        self._w = self._w - ALPHA * m_hat / (np.sqrt(v_hat) + EPSILON)
        return True

    def _decision_vector(self) -> np.ndarray:
        return self._w

    def _state(self) -> dict[str, Any]:
        return {
            "w": self._w,
            "m": self._m,
            "v": self._v,
            "dimension": self._dimension,
            "timestep": self._timestep,
        }

    def _restore(self, state: Mapping[str, Any]) -> None:
        dimension = read_dimension(state)
        w = read_vector(state, "w", dimension)
        m = read_vector(state, "m", dimension)
        v = read_vector(state, "v", dimension)
        if (v < 0.0).any():
            raise ModelFormatError("Field 'v' must be non-negative.")
        timestep = read_count(state, "timestep")
        self._dimension = dimension
        self._timestep = timestep
        self._w = w
        self._m = m
        self._v = v


__all__ = ["Adam"]
