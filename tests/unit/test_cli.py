from __future__ import annotations

from pathlib import Path

import numpy as np
from typer.testing import CliRunner

from marginal.cli import app
from marginal.classifiers.arow import AROW
from marginal.multiclass import MulticlassPA
from marginal.store import load_classifier

runner = CliRunner()


def _write_binary_dataset(path: Path, *, seed: int = 0, count: int = 120) -> None:
    rng = np.random.default_rng(seed)
    lines = []
    for _ in range(count):
        x = rng.normal(size=3)
        if abs(x[0] - x[2]) < 0.3:
            continue
        label = "+1" if x[0] - x[2] > 0 else "-1"
        pairs = " ".join(f"{index + 1}:{value:.6f}" for index, value in enumerate(x))
        lines.append(f"{label} {pairs}")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _write_config(tmp_path: Path, content: str) -> Path:
    config = tmp_path / "config.yaml"
    config.write_text(content, encoding="utf-8")
    return config


def test_train_then_test_and_predict(tmp_path: Path) -> None:
    data = tmp_path / "train.svm"
    _write_binary_dataset(data)
    model = tmp_path / "model.json"

    result = runner.invoke(
        app,
        ["train", str(data), "--model", str(model), "--algorithm", "arow", "--dim", "3",
         "--param", "r=0.5"],
    )

    assert result.exit_code == 0, result.output
    assert "Algorithm: AROW" in result.stdout
    assert "Updates:" in result.stdout
    learner = load_classifier(model)
    assert isinstance(learner, AROW)
    assert learner.r == 0.5

    tested = runner.invoke(app, ["test", str(data), "--model", str(model)])
    assert tested.exit_code == 0, tested.output
    assert "Accuracy = " in tested.stdout

    predicted = runner.invoke(app, ["predict", str(data), "--model", str(model)])
    assert predicted.exit_code == 0, predicted.output
    values = [line for line in predicted.stdout.splitlines() if line in {"1", "-1"}]
    examples = data.read_text(encoding="utf-8").splitlines()
    assert len(values) == len(examples)


def test_train_uses_config_defaults(tmp_path: Path) -> None:
    data = tmp_path / "train.svm"
    _write_binary_dataset(data, seed=3)
    config = _write_config(
        tmp_path,
        "algorithm: adagrad_rda\ndimension: 3\nparams:\n  eta: 0.5\n  lambda: 0.001\n",
    )
    model = tmp_path / "rda.json"

    result = runner.invoke(app, ["-c", str(config), "train", str(data), "-m", str(model)])

    assert result.exit_code == 0, result.output
    learner = load_classifier(model)
    assert learner.name == "ADAGRAD_RDA"
    assert learner.hyperparameters() == {"eta": 0.5, "lambda": 0.001}


def test_train_algorithm_override_ignores_other_algorithms_params(tmp_path: Path) -> None:
    data = tmp_path / "train.svm"
    _write_binary_dataset(data, seed=5)
    config = _write_config(
        tmp_path, "algorithm: pa\ndimension: 3\nparams:\n  C: 1\n  select: 2\n"
    )
    model = tmp_path / "arow.json"

    result = runner.invoke(
        app, ["-c", str(config), "train", str(data), "-m", str(model), "-a", "arow"]
    )

    assert result.exit_code == 0, result.output
    learner = load_classifier(model)
    assert isinstance(learner, AROW)
    assert learner.r == 1.0


def test_train_same_algorithm_override_keeps_config_params(tmp_path: Path) -> None:
    data = tmp_path / "train.svm"
    _write_binary_dataset(data, seed=6)
    config = _write_config(
        tmp_path, "algorithm: PA\ndimension: 3\nparams:\n  C: 0.25\n  select: 1\n"
    )
    model = tmp_path / "pa.json"

    result = runner.invoke(
        app, ["-c", str(config), "train", str(data), "-m", str(model), "-a", "pa"]
    )

    assert result.exit_code == 0, result.output
    assert load_classifier(model).hyperparameters() == {"C": 0.25, "select": 1}


def test_train_resume_continues_existing_model(tmp_path: Path) -> None:
    data = tmp_path / "train.svm"
    _write_binary_dataset(data, seed=4)
    model = tmp_path / "adam.json"
    first = runner.invoke(app, ["train", str(data), "-m", str(model), "-a", "adam", "-d", "3"])
    assert first.exit_code == 0, first.output
    steps = load_classifier(model).timestep

    second = runner.invoke(app, ["train", str(data), "-m", str(model), "--resume"])

    assert second.exit_code == 0, second.output
    assert load_classifier(model).timestep > steps


def test_train_without_dimension_fails(tmp_path: Path) -> None:
    data = tmp_path / "train.svm"
    _write_binary_dataset(data)

    result = runner.invoke(app, ["train", str(data), "-m", str(tmp_path / "m.json")])

    assert result.exit_code == 1
    assert not (tmp_path / "m.json").exists()


def test_train_rejects_unknown_algorithm(tmp_path: Path) -> None:
    data = tmp_path / "train.svm"
    _write_binary_dataset(data)

    result = runner.invoke(
        app, ["train", str(data), "-m", str(tmp_path / "m.json"), "-a", "perceptron", "-d", "3"]
    )

    assert result.exit_code == 1


def test_train_rejects_invalid_hyperparameter(tmp_path: Path) -> None:
    data = tmp_path / "train.svm"
    _write_binary_dataset(data)

    result = runner.invoke(
        app, ["train", str(data), "-m", str(tmp_path / "m.json"), "-d", "3", "-p", "C=-1"]
    )

    assert result.exit_code == 1


def test_test_reports_missing_model(tmp_path: Path) -> None:
    data = tmp_path / "test.svm"
    _write_binary_dataset(data)

    result = runner.invoke(app, ["test", str(data), "-m", str(tmp_path / "absent.json")])

    assert result.exit_code == 1


def test_info_lists_hyperparameters(tmp_path: Path) -> None:
    model = tmp_path / "arow.json"
    AROW(4, r=0.25).save(model)

    result = runner.invoke(app, ["info", "--model", str(model)])

    assert result.exit_code == 0, result.output
    assert "Algorithm: AROW" in result.stdout
    assert "dimension: 4" in result.stdout
    assert "r: 0.25" in result.stdout
    assert "means" not in result.stdout


def test_multiclass_reports_accuracy_and_saves(tmp_path: Path) -> None:
    rows = ["0 1:1.0", "1 2:1.0", "2 3:1.0"] * 10
    train = tmp_path / "train.svm"
    train.write_text("\n".join(rows) + "\n", encoding="utf-8")
    model = tmp_path / "mpa.json"

    result = runner.invoke(
        app,
        ["multiclass", "--train", str(train), "--test", str(train), "--dim", "3",
         "--classes", "3", "--model", str(model)],
    )

    assert result.exit_code == 0, result.output
    assert "Accuracy = 100.00% (30/30)" in result.stdout
    restored = MulticlassPA.from_file(model)
    assert restored.n_class == 3
    assert restored.predict([0.0, 0.0, 1.0]) == 2
