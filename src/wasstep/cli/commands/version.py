"""Version command for the wasstep CLI.

``wasstep version --verbose`` lists the runtime requirements declared in the
installed package metadata together with the version found for each one, so
the output follows pyproject.toml without a list to keep in sync.
"""

import re
import sys
from importlib import metadata
from typing import Annotated

import typer

DISTRIBUTION = "wasstep"

# Requirement name: everything before a version specifier, extra or marker
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def get_version(distribution: str = DISTRIBUTION) -> str:
    """Return the installed version of a distribution, or 'unknown'."""
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return "unknown"


def runtime_requirements(distribution: str = DISTRIBUTION) -> list[str]:
    """Return the names of the runtime requirements of a distribution.

    Requirements only pulled in by an extra (``; extra == "test"``) are
    left out.

    Args:
        distribution: Installed distribution to inspect.

    Returns:
        Requirement names in declaration order; empty if not installed.
    """
    try:
        requirements = metadata.requires(distribution) or []
    except metadata.PackageNotFoundError:
        return []

    names: list[str] = []
    for requirement in requirements:
        _, _, marker = requirement.partition(";")
        if "extra" in marker:
            continue
        match = _REQUIREMENT_NAME.match(requirement)
        if match:
            names.append(match.group(1))
    return names


def version_command(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Also show the interpreter and the installed requirements",
        ),
    ] = False,
) -> None:
    """Show wasstep version information."""
    if not verbose:
        typer.echo(f"{DISTRIBUTION} {get_version()}")
        return

    typer.echo(f"{DISTRIBUTION} {get_version()} on Python {sys.version.split()[0]}")
    typer.echo(f"Interpreter: {sys.executable}")

    requirements = runtime_requirements()
    if not requirements:
        typer.echo("Requirements: package metadata not available")
        return

    typer.echo("Requirements:")
    for name in requirements:
        typer.echo(f"  {name} {get_version(name)}")
