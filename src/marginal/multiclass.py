"""Multiclass Passive-Aggressive (MPA) built from one weight vector per class."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import numpy as np

from .classifiers.numeric import (
    FeatureLike,
    InvalidParameterError,
    as_feature,
    hinge_loss,
    require_dimension,
    require_positive,
    squared_norm,
)
from .classifiers.pa import PAMode, pa_mode, tau_policy
from .store import read_dimension, read_float, read_int, read_matrix, read_model, write_model

LOGGER = logging.getLogger(__name__)


class MulticlassPA:
    """Scores every class with its own weight vector and predicts the argmax.

    A mistake, or a win by less than a unit margin, moves the true class
    towards the example and the strongest rival away from it.
    """

    name = "MPA"

    def __init__(
        self,
        dimension: int,
        n_class: int,
        C: float = 1.0,
        select: int | PAMode = PAMode.PA_II,
    ) -> None:
        self._configure(
            require_dimension(dimension),
            _require_classes(n_class),
            require_positive("C", C),
            pa_mode(select),
        )
        self._weights = np.zeros((self._n_class, self._dimension), dtype=np.float64)
        LOGGER.debug(
            "Created MPA with %d classes over %d features (C=%s, mode=%s)",
            self._n_class,
            self._dimension,
            self._C,
            self._mode.name,
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def n_class(self) -> int:
        return self._n_class

    @property
    def C(self) -> float:
        return self._C

    @property
    def mode(self) -> PAMode:
        return self._mode

    @property
    def weights(self) -> np.ndarray:
        return self._weights.copy()

    def scores(self, feature: FeatureLike) -> np.ndarray:
        vector = as_feature(feature, self._dimension)
        return self._weights @ vector

    def predict(self, feature: FeatureLike) -> int:
        # np.argmax returns the first maximum, so ties go to the lowest index.
        return int(np.argmax(self.scores(feature)))

    def update(self, feature: FeatureLike, label: int) -> bool:
        vector = as_feature(feature, self._dimension)
        label = self._check_label(label)
        scores = self._weights @ vector

        rivals = scores.copy()
        rivals[label] = -np.inf
        rival = int(np.argmax(rivals))

        loss = hinge_loss(float(scores[label] - scores[rival]))
        if loss <= 0.0:
            return False
        # The joint feature (x for the true class, -x for the rival) has
        # twice the squared norm of x.
        tau = self._tau(loss, 2.0 * squared_norm(vector))
        self._weights[label] += tau * vector
        self._weights[rival] -= tau * vector
        return True

    def save(self, path: Path | str) -> None:
        write_model(
            path,
            self.name,
            {
                "weights": self._weights,
                "dimension": self._dimension,
                "n_class": self._n_class,
                "C": self._C,
                "select": int(self._mode),
            },
        )

    def load(self, path: Path | str) -> None:
        _algorithm, state = read_model(path, algorithm=self.name)
        self._restore(state)

    @classmethod
    def from_file(cls, path: Path | str) -> MulticlassPA:
        instance = cls.__new__(cls)
        instance.load(path)
        return instance

    def _check_label(self, label: int) -> int:
        value = int(label)
        if not 0 <= value < self._n_class:
            raise ValueError(f"class label must lie in [0, {self._n_class}), got {label!r}")
        return value

    def _configure(self, dimension: int, n_class: int, C: float, mode: PAMode) -> None:
        self._dimension = dimension
        self._n_class = n_class
        self._C = C
        self._mode = mode
        self._tau = tau_policy(mode, C)

    def _restore(self, state: Mapping[str, Any]) -> None:
        dimension = read_dimension(state)
        n_class = _require_classes(read_int(state, "n_class"))
        weights = read_matrix(state, "weights", (n_class, dimension))
        C = require_positive("C", read_float(state, "C"))
        mode = pa_mode(read_int(state, "select"))
        self._configure(dimension, n_class, C, mode)
        self._weights = weights

    def __repr__(self) -> str:
        return (
            f"MulticlassPA(dimension={self._dimension}, n_class={self._n_class}, "
            f"C={self._C!r}, select={int(self._mode)})"
        )


def _require_classes(n_class: int) -> int:
    value = int(n_class)
    if value < 2:
        raise InvalidParameterError(f"n_class must be >= 2, got {n_class!r}")
    return value


__all__ = ["MulticlassPA"]
