"""wasstep CLI entry point.

This module provides the main Typer application and entry point for the
`wasstep` CLI.

Usage:
    wasstep run [options]       - Run a wsadmin build step
    wasstep check [options]     - Validate settings and step configuration
    wasstep version [options]   - Show version information
"""

import logging

import typer

from wasstep.cli.commands import check, run, version

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="wasstep",
    help="wasstep CLI - Run wsadmin as a build step",
    no_args_is_help=True,
)

app.command(name="run")(run.run_command)
app.command(name="check")(check.check_command)
app.command(name="version")(version.version_command)


def main() -> None:
    """Main entry point for the CLI."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    app()


if __name__ == "__main__":
    main()
