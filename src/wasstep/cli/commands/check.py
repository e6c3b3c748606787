"""Check command for the wasstep CLI.

This module provides the `wasstep check` command that validates the settings
file (and optionally a step configuration) with the same field checks a
configuration form would run.

Checks performed:
    1. Settings file exists and is valid
    2. Each installation folder holds a wsadmin launcher
    3. Each server has a name, a resolvable host, a valid port, credentials
       and a configured installation
    4. The step targets a configured server and sets commands or a script
"""

from pathlib import Path
from typing import Annotated

import typer
import yaml

from wasstep.config import load_settings, load_step_config
from wasstep.registry import ServerRegistry
from wasstep.validation import (
    FormValidation,
    ValidationKind,
    check_settings,
    check_step_config,
)

_PREFIXES = {
    ValidationKind.OK: "[OK]",
    ValidationKind.WARNING: "[WARNING]",
    ValidationKind.ERROR: "[ERROR]",
}


def check_command(
    settings: Annotated[
        Path,
        typer.Option(
            "--settings",
            "-c",
            help="Path to settings.yml",
        ),
    ] = Path("./settings.yml"),
    step: Annotated[
        Path | None,
        typer.Option(
            "--step",
            "-s",
            help="Path to a step configuration to check as well",
        ),
    ] = None,
) -> None:
    """Validate installations, servers and optionally a build step.

    Warnings do not change the exit code; any error exits with 1.
    """
    try:
        loaded = load_settings(settings)
        config = load_step_config(step) if step is not None else None
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        typer.echo(f"[ERROR] {e}")
        raise typer.Exit(1) from None

    results = check_settings(loaded.installations, loaded.servers)
    if config is not None:
        results.extend(check_step_config(config, ServerRegistry(loaded.servers)))

    _display_results(results)

    if any(result.kind == ValidationKind.ERROR for _, result in results):
        raise typer.Exit(1)


def _display_results(results: list[tuple[str, FormValidation]]) -> None:
    """Display validation results in a human-readable format.

    Args:
        results: ``(field, result)`` pairs to display.
    """
    if not results:
        typer.echo(f"{_PREFIXES[ValidationKind.OK]} No problem found")

    for field_name, result in results:
        typer.echo(f"{_PREFIXES[result.kind]} {field_name}: {result.message}")

    warnings = sum(1 for _, result in results if result.kind == ValidationKind.WARNING)
    errors = sum(1 for _, result in results if result.kind == ValidationKind.ERROR)

    typer.echo()
    typer.echo(f"Summary: {warnings} warnings, {errors} errors")
