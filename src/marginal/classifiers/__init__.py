"""Online binary classifier implementations and infrastructure."""

from .adagrad_rda import AdaGradRDA
from .adam import Adam
from .arow import AROW
from .base import BinaryClassifier, InvalidParameterError, LinearLearner
from .nherd import NHERD, CovarianceMode
from .pa import PAMode, PassiveAggressive
from .registry import ALGORITHMS, classifier_class, create_classifier
from .scw import SCW

__all__ = [
    "ALGORITHMS",
    "AROW",
    "AdaGradRDA",
    "Adam",
    "BinaryClassifier",
    "CovarianceMode",
    "InvalidParameterError",
    "LinearLearner",
    "NHERD",
    "PAMode",
    "PassiveAggressive",
    "SCW",
    "classifier_class",
    "create_classifier",
]
