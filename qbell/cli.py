# qbell/cli.py
from qbell.__main__ import app as _typer_app
from qbell.logging_config import setup_logging


def main():
    """Console script entrypoint for the qbell CLI."""
    setup_logging()
    _typer_app()
