"""Binary classifier protocol definitions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, TypeVar, runtime_checkable

import numpy as np

from ..store import read_model, write_model
from .numeric import FeatureLike, InvalidParameterError, as_feature, sign_of

LearnerT = TypeVar("LearnerT", bound="LinearLearner")


@runtime_checkable
class BinaryClassifier(Protocol):
    """Common interface shared by all online binary classifiers."""

    name: str

    def update(self, feature: FeatureLike, label: int) -> bool:
        """Learn from a single example; return True when the model changed."""

    def predict(self, feature: FeatureLike) -> int:
        """Return +1 or -1 for the given feature vector."""

    def save(self, path: Path) -> None:
        """Persist the full learner state to the given path."""

    def load(self, path: Path) -> None:
        """Restore the full learner state, hyperparameters included."""


class LinearLearner(ABC):
    """Shared plumbing for learners that decide by the sign of ``w . x``.

    Subclasses provide ``_decision_vector`` plus a ``_state``/``_restore``
    pair describing their persisted fields.
    """

    name: str = ""
    _dimension: int

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def weight(self) -> np.ndarray:
        return self._decision_vector().copy()

    def margin(self, feature: FeatureLike) -> float:
        vector = as_feature(feature, self._dimension)
        return float(np.dot(self._decision_vector(), vector))

    def predict(self, feature: FeatureLike) -> int:
        return sign_of(self.margin(feature))

    def save(self, path: Path | str) -> None:
        write_model(path, self.name, self._state())

    def load(self, path: Path | str) -> None:
        _algorithm, state = read_model(path, algorithm=self.name)
        self._restore(state)

    @classmethod
    def from_file(cls: type[LearnerT], path: Path | str) -> LearnerT:
        instance = cls.__new__(cls)
        instance.load(path)
        return instance

    def hyperparameters(self) -> dict[str, Any]:
        """Return the construction parameters, excluding ``dimension``."""

        return {}

    @abstractmethod
    def _decision_vector(self) -> np.ndarray:
        """Return the weight vector whose sign against ``x`` decides the class."""

    @abstractmethod
    def _state(self) -> dict[str, Any]:
        """Return the persisted fields, keyed by their record names."""

    @abstractmethod
    def _restore(self, state: Mapping[str, Any]) -> None:
        """Validate every field in ``state`` before assigning any of it."""

    def __repr__(self) -> str:
        params = ", ".join(f"{key}={value!r}" for key, value in self.hyperparameters().items())
        prefix = f"dimension={self._dimension}"
        return f"{type(self).__name__}({prefix}{', ' + params if params else ''})"


__all__ = ["BinaryClassifier", "InvalidParameterError", "LinearLearner"]
