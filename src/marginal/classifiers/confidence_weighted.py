"""Shared state for learners that keep a diagonal covariance estimate."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from typing import Any

import numpy as np

from ..store import ModelFormatError, read_vector
from .base import LinearLearner
from .numeric import FeatureLike, as_feature, check_binary_label


class ConfidenceWeightedLearner(LinearLearner):
    """Gaussian weight model with mean ``mu`` and diagonal covariance ``sigma``.

    Covariances start at one and only ever shrink, so the confidence in a
    feature's weight grows with the evidence seen for it.
    """

    _means: np.ndarray
    _covariances: np.ndarray

    def _reset(self) -> None:
        self._means = np.zeros(self._dimension, dtype=np.float64)
        self._covariances = np.ones(self._dimension, dtype=np.float64)

    @property
    def means(self) -> np.ndarray:
        return self._means.copy()

    @property
    def covariances(self) -> np.ndarray:
        return self._covariances.copy()

    def update(self, feature: FeatureLike, label: int) -> bool:
        vector = as_feature(feature, self._dimension)
        label = check_binary_label(label)
        margin = label * float(np.dot(self._means, vector))
        confidence = float(np.dot(self._covariances, vector * vector))
        return self._apply(vector, label, margin, confidence)

    @abstractmethod
    def _apply(self, vector: np.ndarray, label: int, margin: float, confidence: float) -> bool:
        """Apply the learner's step for one example; return True when it changed."""

    def _shrink(self, vector: np.ndarray, beta: float) -> None:
        # sigma_i -= beta * (sigma_i * x_i) ** 2, the diagonal of sigma x x^T sigma
        scaled = self._covariances * vector
        self._covariances = self._covariances - beta * scaled * scaled

    @staticmethod
    def _read_covariances(state: Mapping[str, Any], dimension: int) -> np.ndarray:
        covariances = read_vector(state, "covariances", dimension)
        if (covariances <= 0.0).any() or (covariances > 1.0).any():
            raise ModelFormatError("Field 'covariances' must lie in (0, 1].")
        return covariances

    def _decision_vector(self) -> np.ndarray:
        return self._means


__all__ = ["ConfidenceWeightedLearner"]
