"""Run command for the wasstep CLI.

This module provides the `wasstep run` command that executes one build step
the way a build orchestrator would: settings are loaded and saved into fresh
registries, a VariableContext is built from the command-line bindings, and
the step is performed on the local node.
"""

import asyncio
import sys
from pathlib import Path
from typing import Annotated

import typer
import yaml

from wasstep.config import apply_settings, load_settings, load_step_config
from wasstep.errors import StepError
from wasstep.listener import BuildListener
from wasstep.locks import LockFacility, NullLockFacility, YamlLockFacility
from wasstep.node import LocalNode
from wasstep.registry import InstallationRegistry, ServerRegistry
from wasstep.step import BuildContext, BuildStep
from wasstep.variables import VariableContext

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def parse_pairs(values: list[str] | None, option: str) -> dict[str, str]:
    """Parse repeated NAME=VALUE options.

    Args:
        values: Raw option values.
        option: Option name, for error messages.

    Returns:
        Mapping of names to values; a later duplicate wins.

    Raises:
        typer.BadParameter: If a value has no '=' or an empty name.
    """
    pairs: dict[str, str] = {}
    for value in values or []:
        name, separator, content = value.partition("=")
        if not separator or not name:
            raise typer.BadParameter(f"expected NAME=VALUE, got '{value}'", param_hint=option)
        pairs[name] = content
    return pairs


def parse_bool(value: str, option: str) -> bool:
    """Parse a boolean option value."""
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise typer.BadParameter(f"expected a boolean, got '{value}'", param_hint=option)


def run_command(
    step: Annotated[
        Path,
        typer.Option(
            "--step",
            "-s",
            help="Path to the step configuration (YAML)",
        ),
    ],
    settings: Annotated[
        Path,
        typer.Option(
            "--settings",
            "-c",
            help="Path to settings.yml (installations and servers)",
        ),
    ] = Path("./settings.yml"),
    workspace: Annotated[
        Path,
        typer.Option(
            "--workspace",
            "-w",
            help="Job workspace; relative files are resolved against it",
        ),
    ] = Path("."),
    param: Annotated[
        list[str] | None,
        typer.Option("--param", "-p", help="Build parameter NAME=VALUE"),
    ] = None,
    bool_param: Annotated[
        list[str] | None,
        typer.Option("--bool-param", "-b", help="Boolean build parameter NAME=true|false"),
    ] = None,
    var: Annotated[
        list[str] | None,
        typer.Option("--var", help="Build variable NAME=VALUE"),
    ] = None,
    env: Annotated[
        list[str] | None,
        typer.Option("--env", "-e", help="Environment variable NAME=VALUE"),
    ] = None,
    tool_location: Annotated[
        list[str] | None,
        typer.Option(
            "--tool-location",
            help="Node-specific installation home INSTALLATION=PATH",
        ),
    ] = None,
    locks: Annotated[
        Path | None,
        typer.Option("--locks", help="YAML file holding the named locks"),
    ] = None,
) -> None:
    """Run a wsadmin build step.

    Exits with 0 when the step succeeds or is skipped, 1 otherwise.

    Examples:
        wasstep run -s deploy.yml -w ./workspace
        wasstep run -s deploy.yml -b DEPLOY=true -e WAS_HOME=/opt/IBM/WebSphere
    """
    parameters: dict[str, str | bool] = dict(parse_pairs(param, "--param"))
    for name, value in parse_pairs(bool_param, "--bool-param").items():
        parameters[name] = parse_bool(value, "--bool-param")

    variables = VariableContext.from_process(
        parameters=parameters,
        variables=parse_pairs(var, "--var"),
        env_overrides=parse_pairs(env, "--env"),
    )
    node = LocalNode(tool_locations=parse_pairs(tool_location, "--tool-location"))
    lock_facility: LockFacility = (
        YamlLockFacility(locks) if locks is not None else NullLockFacility()
    )

    installations = InstallationRegistry()
    servers = ServerRegistry()
    try:
        apply_settings(load_settings(settings), installations, servers, lock_facility)
        config = load_step_config(step)
    except (FileNotFoundError, ValueError, yaml.YAMLError, StepError) as e:
        # pydantic.ValidationError is a ValueError
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if not workspace.is_dir():
        typer.echo(f"Error: workspace not found: {workspace}", err=True)
        raise typer.Exit(1)

    listener = BuildListener(sys.stdout)
    build = BuildContext(workspace=workspace.absolute(), variables=variables, node=node)
    result = asyncio.run(BuildStep(config, servers, installations).perform(build, listener))

    listener.info(f"Finished: {result.status.value.upper()}")
    if not result.success:
        raise typer.Exit(1)
