"""Marginal command-line interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from . import __version__
from .classifiers.base import LinearLearner
from .classifiers.numeric import InvalidParameterError
from .classifiers.registry import algorithm_names, classifier_class, create_classifier
from .config import Config, ConfigError, load_config
from .dataset import binary_label, read_examples
from .logging import configure_logging
from .multiclass import MulticlassPA
from .store import ModelFormatError, load_classifier, read_model

app = typer.Typer(help="Online margin-based learners: train, evaluate and inspect models.")
LOGGER = logging.getLogger(__name__)

_USER_ERRORS = (ConfigError, InvalidParameterError, ModelFormatError, OSError, KeyError, ValueError)


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config: Config


@dataclass
class RunSummary:
    """Counts gathered while streaming a dataset through a learner."""

    examples: int = 0
    correct: int = 0
    updates: int = 0

    @property
    def accuracy(self) -> float:
        return 100.0 * self.correct / self.examples if self.examples else 0.0

    def describe(self) -> str:
        return f"Accuracy = {self.accuracy:.2f}% ({self.correct}/{self.examples})"


@app.callback()
def _marginal(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to a YAML config (env MARGINAL_CONFIG).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Enable debug logging."),
    ] = False,
) -> None:
    """Capture global CLI options and configure logging."""

    try:
        loaded = load_config(config)
    except ConfigError as exc:
        _fail(exc)
    if verbose:
        loaded = replace(loaded, logging=replace(loaded.logging, level="debug"))
    try:
        configure_logging(loaded.logging, loaded.log_dir)
    except ConfigError as exc:
        _fail(exc)
    ctx.obj = CLIState(config=loaded)


@app.command()
def train(
    ctx: typer.Context,
    data: Annotated[Path, typer.Argument(..., help="Training examples in svmlight format.")],
    model: Annotated[Path, typer.Option("-m", "--model", help="Where to save the model.")],
    algorithm: Annotated[
        str | None,
        typer.Option("-a", "--algorithm", help=f"One of: {', '.join(algorithm_names())}."),
    ] = None,
    dim: Annotated[
        int | None,
        typer.Option("-d", "--dim", help="Feature dimension (overrides config)."),
    ] = None,
    param: Annotated[
        list[str] | None,
        typer.Option("-p", "--param", help="Hyperparameter as NAME=VALUE; repeatable."),
    ] = None,
    resume: Annotated[
        bool,
        typer.Option("--resume", help="Continue training an existing model file."),
    ] = False,
    zero_based: Annotated[
        bool,
        typer.Option("--zero-based", help="Feature indices in DATA start at 0."),
    ] = False,
) -> None:
    """Stream a dataset through a binary learner and save the result."""

    config = _state(ctx).config
    try:
        if resume and model.exists():
            learner = load_classifier(model)
            LOGGER.info("Resuming %r from %s", learner, model)
        else:
            dimension = dim if dim is not None else config.dimension
            if dimension is None:
                raise ConfigError("Feature dimension is required (--dim or config 'dimension').")
            chosen = algorithm or config.algorithm
            params = _config_params(config, chosen)
            params.update(_parse_params(param or []))
            learner = create_classifier(chosen, dimension, params)
            LOGGER.info("Training %r", learner)

        summary = _stream(learner, data, zero_based=zero_based, train=True)
        learner.save(model)
    except _USER_ERRORS as exc:
        _fail(exc)

    typer.echo(f"Algorithm: {learner.name}")
    typer.echo(f"Examples: {summary.examples}")
    typer.echo(f"Updates: {summary.updates}")
    typer.echo(f"Online {summary.describe()}")
    typer.echo(f"Model: {model}")


@app.command()
def test(
    ctx: typer.Context,
    data: Annotated[Path, typer.Argument(..., help="Evaluation examples in svmlight format.")],
    model: Annotated[Path, typer.Option("-m", "--model", help="Trained model file.")],
    zero_based: Annotated[
        bool,
        typer.Option("--zero-based", help="Feature indices in DATA start at 0."),
    ] = False,
) -> None:
    """Report the accuracy of a saved binary model."""

    _state(ctx)
    try:
        learner = load_classifier(model)
        summary = _stream(learner, data, zero_based=zero_based, train=False)
    except _USER_ERRORS as exc:
        _fail(exc)
    typer.echo(summary.describe())


@app.command()
def predict(
    ctx: typer.Context,
    data: Annotated[Path, typer.Argument(..., help="Examples in svmlight format.")],
    model: Annotated[Path, typer.Option("-m", "--model", help="Trained model file.")],
    zero_based: Annotated[
        bool,
        typer.Option("--zero-based", help="Feature indices in DATA start at 0."),
    ] = False,
) -> None:
    """Print one predicted label per example."""

    _state(ctx)
    try:
        learner = load_classifier(model)
        for _label, feature in read_examples(data, learner.dimension, zero_based=zero_based):
            typer.echo(str(learner.predict(feature)))
    except _USER_ERRORS as exc:
        _fail(exc)


@app.command()
def multiclass(
    ctx: typer.Context,
    train_path: Annotated[Path, typer.Option("--train", help="Training examples.")],
    test_path: Annotated[Path, typer.Option("--test", help="Evaluation examples.")],
    dim: Annotated[int, typer.Option("-d", "--dim", help="Feature dimension.")],
    classes: Annotated[int, typer.Option("-k", "--classes", help="Number of classes.")],
    c: Annotated[float, typer.Option("--c", help="Aggressiveness bound C.")] = 0.5,
    select: Annotated[int, typer.Option("--select", help="0:PA 1:PA-I 2:PA-II")] = 2,
    model: Annotated[
        Path | None,
        typer.Option("-m", "--model", help="Optionally save the trained model."),
    ] = None,
    zero_based: Annotated[
        bool,
        typer.Option("--zero-based", help="Feature indices start at 0."),
    ] = False,
) -> None:
    """Train and evaluate a multiclass Passive-Aggressive model."""

    _state(ctx)
    try:
        mpa = MulticlassPA(dim, classes, C=c, select=select)
        typer.echo("training...")
        updates = 0
        for label, feature in read_examples(train_path, dim, zero_based=zero_based):
            updates += mpa.update(feature, label)
        LOGGER.info("Applied %d update(s)", updates)

        typer.echo("predicting...")
        summary = RunSummary()
        for label, feature in read_examples(test_path, dim, zero_based=zero_based):
            summary.examples += 1
            summary.correct += mpa.predict(feature) == label
        if model is not None:
            mpa.save(model)
    except _USER_ERRORS as exc:
        _fail(exc)
    typer.echo(summary.describe())


@app.command()
def info(
    ctx: typer.Context,
    model: Annotated[Path, typer.Option("-m", "--model", help="Model file to inspect.")],
) -> None:
    """Show the algorithm, dimension and hyperparameters stored in a model."""

    _state(ctx)
    try:
        algorithm, state = read_model(model)
    except _USER_ERRORS as exc:
        _fail(exc)
    typer.echo(f"Version: {__version__}")
    typer.echo(f"Model: {model}")
    typer.echo(f"Algorithm: {algorithm}")
    for key, value in state.items():
        if isinstance(value, list):
            continue
        typer.echo(f"  {key}: {value}")


def _config_params(config: Config, algorithm: str) -> dict[str, Any]:
    # config.params belong to config.algorithm
    if classifier_class(algorithm) is not classifier_class(config.algorithm):
        if config.params:
            LOGGER.info("Ignoring config params written for %s", config.algorithm)
        return {}
    return dict(config.params)


def _stream(learner: LinearLearner, data: Path, *, zero_based: bool, train: bool) -> RunSummary:
    summary = RunSummary()
    for label, feature in read_examples(data, learner.dimension, zero_based=zero_based):
        target = binary_label(label)
        summary.examples += 1
        summary.correct += learner.predict(feature) == target
        if train:
            summary.updates += learner.update(feature, target)
    LOGGER.info(
        "%s: %d example(s), %d update(s), %s",
        learner.name,
        summary.examples,
        summary.updates,
        summary.describe(),
    )
    return summary


def _parse_params(values: list[str]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for entry in values:
        name, sep, raw = entry.partition("=")
        if not sep or not name.strip():
            raise ConfigError(f"Invalid --param '{entry}', expected NAME=VALUE.")
        try:
            value: Any = int(raw)
        except ValueError:
            try:
                value = float(raw)
            except ValueError as exc:
                raise ConfigError(f"--param {name} must be a number, got '{raw}'.") from exc
        params[name.strip()] = value
    return params


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover - typer always runs callback
        raise RuntimeError("CLI state is not initialised")
    return state


def _fail(exc: Exception) -> NoReturn:
    message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
    typer.secho(str(message), fg=typer.colors.RED, err=True)
    raise typer.Exit(1) from exc


__all__ = ["app"]
