from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from marginal.dataset import binary_label, parse_line, read_examples


def test_read_examples_produces_dense_vectors(tmp_path: Path) -> None:
    path = tmp_path / "train.svm"
    path.write_text("+1 1:0.5 3:1.0\n-1 2:2.0\n", encoding="utf-8")

    examples = list(read_examples(path, 4))

    assert [label for label, _ in examples] == [1, -1]
    np.testing.assert_array_equal(examples[0][1], [0.5, 0.0, 1.0, 0.0])
    np.testing.assert_array_equal(examples[1][1], [0.0, 2.0, 0.0, 0.0])
    assert examples[0][1].dtype == np.float64


def test_read_examples_zero_based(tmp_path: Path) -> None:
    path = tmp_path / "train.svm"
    path.write_text("2 0:1.5 2:-1\n", encoding="utf-8")

    [(label, feature)] = list(read_examples(path, 3, zero_based=True))

    assert label == 2
    np.testing.assert_array_equal(feature, [1.5, 0.0, -1.0])


def test_read_examples_rejects_index_beyond_dimension(tmp_path: Path) -> None:
    path = tmp_path / "train.svm"
    path.write_text("1 5:1.0\n", encoding="utf-8")

    with pytest.raises(ValueError):
        list(read_examples(path, 3))


def test_empty_file_yields_nothing(tmp_path: Path) -> None:
    path = tmp_path / "empty.svm"
    path.write_text("", encoding="utf-8")

    assert list(read_examples(path, 3)) == []


def test_parse_line() -> None:
    label, feature = parse_line("-1 2:0.25 3:4", 3)

    assert label == -1
    np.testing.assert_array_equal(feature, [0.0, 0.25, 4.0])


def test_parse_line_rejects_blank() -> None:
    with pytest.raises(ValueError):
        parse_line("   ", 3)


@pytest.mark.parametrize(("raw", "expected"), [(1, 1), (3, 1), (0, -1), (-1, -1)])
def test_binary_label(raw: int, expected: int) -> None:
    assert binary_label(raw) == expected
