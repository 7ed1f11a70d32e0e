# qbell/__main__.py
from __future__ import annotations

from typing import List, Optional

import typer

from qbell.backends import BACKEND_NAMES, make_backend
from qbell.errors import ConfigurationError
from qbell.experiments import run_catalog
from qbell.logging_config import setup_logging
from qbell.report import render_catalog, render_plain, render_table
from qbell.settings import get_settings

# Initialize logging once
setup_logging()

app = typer.Typer(help="Bell-state experiment harness")


@app.command()
def run(
    trials: Optional[int] = typer.Option(None, help="Trials per experiment and label (default: settings.TRIALS)"),
    seed: Optional[int] = typer.Option(None, help="Root seed (default: settings.SEED)"),
    backend: Optional[str] = typer.Option(None, help=f"Backend: {', '.join(BACKEND_NAMES)}"),
    workers: Optional[int] = typer.Option(None, help="Thread partitions per run (default: settings.WORKERS)"),
    experiment: Optional[List[str]] = typer.Option(None, "--experiment", "-e", help="Experiment to run; repeatable"),
    table: bool = typer.Option(False, "--table/--plain", help="Print a table instead of report lines"),
):
    """
    Run the experiments from both initial labels and print the counts.
    Reads defaults from settings; CLI options override for this run.
    """
    settings = get_settings()

    try:
        chosen = make_backend(
            backend or settings.BACKEND,
            drift_tolerance=settings.DRIFT_TOLERANCE,
            fatal_tolerance=settings.FATAL_DRIFT_TOLERANCE,
        )
        kwargs = {}
        if experiment:
            kwargs["names"] = experiment
        results = run_catalog(
            trials if trials is not None else settings.TRIALS,
            seed=seed if seed is not None else settings.SEED,
            backend=chosen,
            workers=workers if workers is not None else settings.WORKERS,
            **kwargs,
        )
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc))

    if table:
        render_table(results)
    else:
        render_plain(results)


@app.command("list")
def list_experiments():
    """List the experiment catalog."""
    render_catalog()


if __name__ == "__main__":
    app()
