"""Field-level validation of installations, servers and build steps.

Each ``check_*`` function validates one configuration field and returns a
FormValidation: OK, WARNING (accepted but suspicious) or ERROR (rejected).
They back the ``wasstep check`` command and can be called by any host UI.

``check_settings`` and ``check_step_config`` run every relevant check and
return ``(field, FormValidation)`` pairs.
"""

from __future__ import annotations

import os
import socket
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from wasstep.installation import wsadmin_binary
from wasstep.models import (
    PREFERRED_PORT_RANGE,
    ConnType,
    InstallationRecord,
    ServerRecord,
    StepConfig,
)
from wasstep.registry import ServerRegistry
from wasstep.variables import expand_macros


class ValidationKind(str, Enum):
    """Severity of a validation result."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class FormValidation:
    """Result of a field validation.

    Attributes:
        kind: Severity of the result.
        message: Explanation (empty for OK).
    """

    kind: ValidationKind
    message: str = ""

    @classmethod
    def ok(cls) -> FormValidation:
        return cls(ValidationKind.OK)

    @classmethod
    def warning(cls, message: str) -> FormValidation:
        return cls(ValidationKind.WARNING, message)

    @classmethod
    def error(cls, message: str) -> FormValidation:
        return cls(ValidationKind.ERROR, message)


# =============================================================================
# Installation checks
# =============================================================================


def check_home(value: str | Path | None, is_windows: bool | None = None) -> FormValidation:
    """Check that an installation folder holds a wsadmin launcher.

    The launcher is looked for in ``bin/`` (full installation) and at the
    root of the folder (thin client); an error is reported only when neither
    layout holds it.

    Args:
        value: The installation folder.
        is_windows: OS family to check for (defaults to the current one).
    """
    if value is None or str(value) == "":
        return FormValidation.error("The installation folder must be set")

    home = Path(value)
    if not home.is_dir():
        return FormValidation.error(f"{home} is not a folder")

    if is_windows is None:
        is_windows = os.name == "nt"
    binary = wsadmin_binary(is_windows)

    if not (home / "bin" / binary).exists() and not (home / binary).exists():
        return FormValidation.error(
            f"{home} is neither an application server installation folder nor "
            f"an administration thin client folder"
        )

    return FormValidation.ok()


# =============================================================================
# Server checks
# =============================================================================


def check_name(value: str | None) -> FormValidation:
    """Check that a server name is set."""
    if not value:
        return FormValidation.error("The name must be set")
    return FormValidation.ok()


def check_conn_type(value: str | None) -> FormValidation:
    """Check that a connection type is one wsadmin supports."""
    if value is None:
        return FormValidation.error("The connection type must be set")
    if value not in {c.value for c in ConnType}:
        return FormValidation.error(f"{value} is not a valid connection type")
    return FormValidation.ok()


def check_host(
    value: str | None,
    resolve: Callable[[str], str] = socket.gethostbyname,
) -> FormValidation:
    """Check that a host is set and resolves.

    Args:
        value: Host name or address.
        resolve: Name resolution function.
    """
    if not value:
        return FormValidation.error("The host must be set")
    try:
        resolve(value)
    except OSError:
        return FormValidation.error(f"{value} is not a valid host")
    return FormValidation.ok()


def check_port(value: str | int | None) -> FormValidation:
    """Check an administration port.

    Ports outside [0, 65535] are errors; ports outside the registered range
    [1024, 49151] are accepted with a warning.
    """
    if value is None or value == "":
        return FormValidation.error("The port must be set")

    try:
        port = int(value)
    except (TypeError, ValueError):
        return FormValidation.error("The port must be an integer between 0 and 65535")

    if port < 0 or port > 65535:
        return FormValidation.error("The port must be an integer between 0 and 65535")

    low, high = PREFERRED_PORT_RANGE
    if port < low or port > high:
        return FormValidation.warning(
            f"{port} is not a preferred value: ports should be in [{low}, {high}]"
        )

    return FormValidation.ok()


def check_user(value: str | None) -> FormValidation:
    """Warn when no user is set."""
    if not value:
        return FormValidation.warning("The user must be set if security is enabled")
    return FormValidation.ok()


def check_password(value: str | None) -> FormValidation:
    """Warn when no password is set."""
    if not value:
        return FormValidation.warning("The password must be set if security is enabled")
    return FormValidation.ok()


# =============================================================================
# Build step checks
# =============================================================================


def check_step_config(
    config: StepConfig,
    servers: ServerRegistry,
) -> list[tuple[str, FormValidation]]:
    """Validate a build step configuration.

    Args:
        config: The step configuration.
        servers: Configured servers.

    Returns:
        ``(field, result)`` pairs for every non-OK result.
    """
    results: list[tuple[str, FormValidation]] = []

    if not config.server_name:
        results.append(("server_name", FormValidation.error("No server has been selected")))
    elif config.server_name not in servers:
        results.append(
            (
                "server_name",
                FormValidation.error(f"Server {config.server_name} is not configured"),
            )
        )

    if not config.commands and not config.script_file:
        results.append(
            (
                "commands",
                FormValidation.error("Neither commands nor a script file have been set"),
            )
        )

    return results


def check_settings(
    installations: Iterable[InstallationRecord],
    servers: Iterable[ServerRecord],
    resolve_host: Callable[[str], str] = socket.gethostbyname,
) -> list[tuple[str, FormValidation]]:
    """Validate every installation and server.

    Args:
        installations: InstallationRecord values.
        servers: ServerRecord values.
        resolve_host: Name resolution function used by check_host.

    Returns:
        ``(field, result)`` pairs for every non-OK result; fields are
        prefixed with the record name (e.g. ``server[dmgr].port``).
    """
    results: list[tuple[str, FormValidation]] = []
    installations = list(installations)
    installation_names = {installation.name for installation in installations}

    for installation in installations:
        result = check_home(expand_macros(installation.home, os.environ.get))
        if result.kind != ValidationKind.OK:
            results.append((f"installation[{installation.name}].home", result))

    for server in servers:
        prefix = f"server[{server.name}]"
        checks = {
            "name": check_name(server.name),
            "host": check_host(server.host, resolve_host),
            "port": check_port(server.port),
            "user": check_user(server.user),
            "password": check_password(server.password.get_secret_value()),
        }
        if not server.installation_name:
            checks["installation_name"] = FormValidation.error("No installation has been set")
        elif server.installation_name not in installation_names:
            checks["installation_name"] = FormValidation.error(
                f"Installation {server.installation_name} is not configured"
            )
        for field_name, result in checks.items():
            if result.kind != ValidationKind.OK:
                results.append((f"{prefix}.{field_name}", result))

    return results
