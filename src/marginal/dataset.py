"""Reading labelled examples from svmlight / libsvm text files."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from pathlib import Path

import numpy as np
from sklearn.datasets import load_svmlight_file

LOGGER = logging.getLogger(__name__)


def read_examples(
    path: Path | str,
    dimension: int,
    *,
    zero_based: bool = False,
) -> Iterator[tuple[int, np.ndarray]]:
    """Yield ``(label, feature)`` pairs with dense float64 features.

    Feature indices are 1-based unless ``zero_based`` is set. A feature index
    beyond ``dimension`` raises ``ValueError``.
    """

    source = Path(path).expanduser()
    if source.stat().st_size == 0:
        LOGGER.warning("Dataset %s is empty", source)
        return
    matrix, labels = load_svmlight_file(
        str(source),
        n_features=dimension,
        dtype=np.float64,
        zero_based=zero_based,
    )
    LOGGER.debug("Read %d example(s) from %s", matrix.shape[0], source)
    for index, label in enumerate(labels):
        yield int(label), matrix[index].toarray().ravel()


def parse_line(line: str, dimension: int, *, zero_based: bool = False) -> tuple[int, np.ndarray]:
    """Parse a single ``label index:value ...`` record."""

    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        raise ValueError("line does not contain an example")
    matrix, labels = load_svmlight_file(
        io.BytesIO(stripped.encode("utf-8")),
        n_features=dimension,
        dtype=np.float64,
        zero_based=zero_based,
    )
    return int(labels[0]), matrix[0].toarray().ravel()


def binary_label(label: int) -> int:
    """Map positive labels to +1 and everything else (0, -1) to -1."""

    return 1 if label > 0 else -1


__all__ = ["binary_label", "parse_line", "read_examples"]
