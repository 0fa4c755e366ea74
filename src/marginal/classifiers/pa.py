"""Passive-Aggressive online learners (PA, PA-I and PA-II)."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import IntEnum
from typing import Any

import numpy as np

from ..store import read_dimension, read_float, read_int, read_vector
from .base import LinearLearner
from .numeric import (
    FeatureLike,
    InvalidParameterError,
    as_feature,
    check_binary_label,
    hinge_loss,
    require_dimension,
    require_positive,
    squared_norm,
)

LOGGER = logging.getLogger(__name__)

TauPolicy = Callable[[float, float], float]


class PAMode(IntEnum):
    """Aggressiveness policy used to size each correction."""

    PA = 0
    PA_I = 1
    PA_II = 2


def pa_mode(value: int | PAMode) -> PAMode:
    try:
        return PAMode(int(value))
    except ValueError as exc:
        raise InvalidParameterError(
            f"PA select must be one of {[mode.value for mode in PAMode]}, got {value!r}"
        ) from exc


def tau_policy(mode: PAMode, C: float) -> TauPolicy:
    """Return ``tau(loss, squared_norm)`` for the given mode.

    Zero norms fall back to 0 for PA and to ``C`` for PA-I.
    """

    if mode is PAMode.PA:

        def _pa(loss: float, norm: float) -> float:
            return 0.0 if norm == 0.0 else loss / norm

        return _pa

    if mode is PAMode.PA_I:

        def _pa_i(loss: float, norm: float) -> float:
            return C if norm == 0.0 else min(C, loss / norm)

        return _pa_i

    smoothing = 1.0 / (2.0 * C)

    def _pa_ii(loss: float, norm: float) -> float:
        return loss / (norm + smoothing)

    return _pa_ii


class PassiveAggressive(LinearLearner):
    """Hinge-loss learner that moves just far enough to fix each mistake."""

    name = "PA"

    def __init__(self, dimension: int, C: float = 1.0, select: int | PAMode = PAMode.PA_II) -> None:
        self._configure(
            require_dimension(dimension),
            require_positive("C", C),
            pa_mode(select),
        )
        self._weight = np.zeros(self._dimension, dtype=np.float64)
        LOGGER.debug("Created %r", self)

    @property
    def C(self) -> float:
        return self._C

    @property
    def mode(self) -> PAMode:
        return self._mode

    def update(self, feature: FeatureLike, label: int) -> bool:
        vector = as_feature(feature, self._dimension)
        label = check_binary_label(label)
        loss = hinge_loss(label * float(np.dot(self._weight, vector)))
        if loss <= 0.0:
            return False
        tau = self._tau(loss, squared_norm(vector))
        self._weight += tau * label * vector
        return True

    def step_size(self, feature: FeatureLike, label: int) -> float:
        """Return the ``tau`` the next update would apply, without applying it."""

        vector = as_feature(feature, self._dimension)
        label = check_binary_label(label)
        loss = hinge_loss(label * float(np.dot(self._weight, vector)))
        if loss <= 0.0:
            return 0.0
        return self._tau(loss, squared_norm(vector))

    def hyperparameters(self) -> dict[str, Any]:
        return {"C": self._C, "select": int(self._mode)}

    def _configure(self, dimension: int, C: float, mode: PAMode) -> None:
        self._dimension = dimension
        self._C = C
        self._mode = mode
        self._tau = tau_policy(mode, C)

    def _decision_vector(self) -> np.ndarray:
        return self._weight

    def _state(self) -> dict[str, Any]:
        return {
            "weight": self._weight,
            "dimension": self._dimension,
            "C": self._C,
            "select": int(self._mode),
        }

    def _restore(self, state: Mapping[str, Any]) -> None:
        dimension = read_dimension(state)
        weight = read_vector(state, "weight", dimension)
        C = require_positive("C", read_float(state, "C"))
        mode = pa_mode(read_int(state, "select"))
        self._configure(dimension, C, mode)
        self._weight = weight


__all__ = ["PAMode", "PassiveAggressive", "pa_mode", "tau_policy"]
