"""Lookup table mapping algorithm identifiers to learner classes."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Mapping
from typing import Any

from .adagrad_rda import AdaGradRDA
from .adam import Adam
from .arow import AROW
from .base import LinearLearner
from .nherd import NHERD
from .numeric import InvalidParameterError
from .pa import PassiveAggressive
from .scw import SCW

ALGORITHMS: OrderedDict[str, type[LinearLearner]] = OrderedDict(
    (cls.name, cls) for cls in (PassiveAggressive, AROW, NHERD, SCW, AdaGradRDA, Adam)
)

# Model-file and config spellings that differ from the constructor keywords.
_PARAM_ALIASES: dict[str, str] = {"lambda": "lambda_"}


def algorithm_names() -> list[str]:
    return list(ALGORITHMS)


def classifier_class(algorithm: str) -> type[LinearLearner]:
    """Resolve ``algorithm`` (case-insensitive, ``-`` or ``_``) to its class."""

    key = str(algorithm).strip().upper().replace("-", "_")
    try:
        return ALGORITHMS[key]
    except KeyError as exc:
        raise KeyError(
            f"Unknown algorithm '{algorithm}'. Choose one of: {', '.join(ALGORITHMS)}."
        ) from exc


def create_classifier(
    algorithm: str,
    dimension: int,
    params: Mapping[str, Any] | None = None,
) -> LinearLearner:
    """Build a fresh learner for ``algorithm`` with the given hyperparameters."""

    cls = classifier_class(algorithm)
    kwargs = {_PARAM_ALIASES.get(key, key): value for key, value in (params or {}).items()}
    try:
        return cls(dimension, **kwargs)
    except TypeError as exc:
        raise InvalidParameterError(f"Invalid parameters for {cls.name}: {exc}") from exc


__all__ = ["ALGORITHMS", "algorithm_names", "classifier_class", "create_classifier"]
