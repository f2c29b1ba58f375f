# src/podtrigger/cli/main.py
"""
Top-level `podtrigger` command: wires logging and registers the
evaluate/spec/version commands.
"""

import logging

import typer

from .. import __version__
from ..core.config import config
from . import evaluate

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)

app = typer.Typer(
    name="podtrigger",
    help="Decide whether a workload is active from the cpu/memory usage of its pods.",
    add_completion=False,
)


def _print_version(show: bool):
    if show:
        typer.echo(f"podtrigger version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    show_version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show the version and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
):
    """Resource-based activation for autoscaling triggers."""
    if verbose:
        logging.getLogger("podtrigger").setLevel(logging.DEBUG)


@app.command()
def version():
    """Show the version of podtrigger."""
    _print_version(True)


app.command(name="evaluate")(evaluate.evaluate)
app.command(name="spec")(evaluate.spec)


if __name__ == "__main__":
    app()
