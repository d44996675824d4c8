"""CLI entry point for pi-menu. Uses Click for argument parsing.

Reads candidates from stdin, shows the menu on the controlling terminal and
prints the chosen line to stdout. Exits 0 when something was accepted and 1
when the menu was cancelled or could not run.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from pi.menu import __version__
from pi.menu.app import run_menu
from pi.menu.candidates import CandidateLoadError, load_candidates
from pi.menu.config import load_config
from pi.menu.terminal import TtyTerminal

logger = logging.getLogger(__name__)

LOG_LEVELS = ["debug", "info", "warning", "error"]


def _run(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


def _configure_logging(level: str, log_file: str | None) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=log_file,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-b", "--bottom", is_flag=True, help="Put the input line below the list")
@click.option("-i", "--ignore-case", is_flag=True, help="Match case-insensitively")
@click.option(
    "-l",
    "--lines",
    type=click.IntRange(min=0),
    default=None,
    help="List candidates vertically, N lines at a time",
)
@click.option(
    "-w",
    "--width",
    type=click.IntRange(min=1),
    default=None,
    help="Menu width in cells (default: terminal width)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default="warning",
    show_default=True,
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write logs here")
@click.version_option(__version__, "-v", "--version", prog_name="pi-menu")
def main(bottom, ignore_case, lines, width, log_level, log_file):
    """Select one line of stdin interactively and print it."""
    _configure_logging(log_level, log_file)

    try:
        candidates = load_candidates(click.get_binary_stream("stdin"))
    except CandidateLoadError as e:
        click.echo(f"pi-menu: {e}", err=True)
        sys.exit(1)

    # Unset flags leave the settings file in charge
    config = load_config(
        {
            "bottom": bottom or None,
            "ignoreCase": ignore_case or None,
            "lines": lines,
            "width": width,
        }
    )
    config.lines = min(config.lines, len(candidates))

    terminal = TtyTerminal()
    try:
        terminal.open()
    except OSError as e:
        click.echo(f"pi-menu: cannot open terminal: {e}", err=True)
        sys.exit(1)

    try:
        session = _run(run_menu(candidates, config, terminal))
    finally:
        terminal.stop()

    if session.status == "accepted" and session.output is not None:
        click.echo(session.output)
        sys.exit(0)
    sys.exit(1)


if __name__ == "__main__":
    main()
