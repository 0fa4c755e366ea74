"""Marginal module entrypoint for `python -m marginal`."""

from __future__ import annotations

from .cli import app


def main() -> None:
    app(prog_name="marginal")


if __name__ == "__main__":  # pragma: no cover - module execution guard
    main()
