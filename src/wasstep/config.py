"""Settings models and loading utilities.

This module provides the Pydantic model of the global settings (installations
and servers) and helpers to load settings and step configurations from YAML
files.

Models:
    - Settings: Root model of the global settings file

Functions:
    - migrate_legacy_keys: Rename keys written by older versions
    - load_settings: Load and validate settings from a YAML file
    - load_step_config: Load and validate a step configuration from a YAML file
    - apply_settings: Save settings into the registries (configuration save)

``${VAR}`` references are kept as-is at load time: installation homes and
step fields are expanded per build, against that build's variables.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field

from wasstep.locks import LockFacility, NullLockFacility, ensure_server_locks
from wasstep.models import InstallationRecord, ServerRecord, StepConfig
from wasstep.registry import InstallationRegistry, ServerRegistry

logger = structlog.get_logger()


class Settings(BaseModel):
    """Root settings model.

    Attributes:
        version: Settings schema version.
        installations: Configured wsadmin installations.
        servers: Configured application servers.
        create_locks: Whether to create one lock per server on save.
    """

    version: str = "1"
    installations: list[InstallationRecord] = Field(default_factory=list)
    servers: list[ServerRecord] = Field(default_factory=list)
    create_locks: bool = True


# Keys used by older settings files, mapped to their current name
LEGACY_SETTINGS_KEYS: dict[str, str] = {
    "wasinstall": "installations",
    "wasserver": "servers",
    "createLocks": "create_locks",
}

LEGACY_SERVER_KEYS: dict[str, str] = {
    "wasInstallationName": "installation_name",
    "conntype": "conn_type",
}

LEGACY_STEP_KEYS: dict[str, str] = {
    "additionalClasspath": "additional_classpath",
    "appendTrace": "append_trace",
    "javaOptions": "java_options",
    "jobId": "job_id",
    "profileScriptFiles": "profile_script_files",
    "propertiesFiles": "properties_files",
    "runIf": "run_if",
    "scriptFile": "script_file",
    "scriptParameters": "script_parameters",
    "traceFile": "trace_file",
    "wasServerName": "server_name",
}


def migrate_legacy_keys(data: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    """Rename legacy keys of a mapping.

    A key already present under its current name wins over its legacy form.

    Args:
        data: Raw data read from a settings file.
        mapping: Legacy key to current key.

    Returns:
        New dictionary using current key names only.
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        new_key = mapping.get(key, key)
        if new_key != key and new_key in data:
            continue
        result[new_key] = value
    return result


def _migrate_settings(data: dict[str, Any]) -> dict[str, Any]:
    data = migrate_legacy_keys(data, LEGACY_SETTINGS_KEYS)
    servers = data.get("servers") or []
    data["servers"] = [
        migrate_legacy_keys(server, LEGACY_SERVER_KEYS) if isinstance(server, dict) else server
        for server in servers
    ]
    return data


def _read_yaml(path: str | Path, kind: str) -> dict[str, Any]:
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"{kind} file not found: {path}")

    with path.open() as f:
        data = yaml.safe_load(f)

    # Handle empty file
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ValueError(f"{kind} file must contain a mapping: {path}")

    return data


def load_settings(path: str | Path) -> Settings:
    """Load and validate settings from a YAML file.

    Legacy keys are migrated before validation.

    Args:
        path: Path to the settings file.

    Returns:
        Validated Settings instance.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        yaml.YAMLError: If the file contains invalid YAML.
        ValueError: If the top level is not a mapping.
        pydantic.ValidationError: If the settings are invalid.

    Example:
        >>> settings = load_settings("settings.yml")
        >>> settings.servers[0].conn_type
        ConnType.SOAP
    """
    data = _read_yaml(path, "Settings")
    settings = Settings.model_validate(_migrate_settings(data))
    logger.debug(
        "settings_loaded",
        path=str(path),
        installations=len(settings.installations),
        servers=len(settings.servers),
    )
    return settings


def load_step_config(path: str | Path) -> StepConfig:
    """Load and validate a build step configuration from a YAML file.

    Args:
        path: Path to the step file.

    Returns:
        Validated StepConfig instance.

    Raises:
        FileNotFoundError: If the step file does not exist.
        yaml.YAMLError: If the file contains invalid YAML.
        ValueError: If the top level is not a mapping.
        pydantic.ValidationError: If the configuration is invalid.
    """
    data = _read_yaml(path, "Step")
    return StepConfig.model_validate(migrate_legacy_keys(data, LEGACY_STEP_KEYS))


def apply_settings(
    settings: Settings,
    installations: InstallationRegistry,
    servers: ServerRegistry,
    lock_facility: LockFacility | None = None,
) -> None:
    """Save settings into the registries.

    This is the configuration save of the host: it must not run concurrently
    with itself. Builds may keep reading the registries meanwhile.

    Args:
        settings: The validated settings.
        installations: Registry receiving the installations.
        servers: Registry receiving the servers.
        lock_facility: Lock facility of the host (absent if None).

    Raises:
        StepError: If two installations or two servers share a name.
    """
    for server in settings.servers:
        if not server.is_preferred_port:
            logger.warning("server_port_not_preferred", server=server.name, port=server.port)

    # Validate both tables before touching either registry
    new_installations = InstallationRegistry(settings.installations)
    new_servers = ServerRegistry(settings.servers)

    installations.replace(new_installations.snapshot())
    servers.replace(new_servers.snapshot())

    logger.info(
        "settings_applied",
        installations=len(installations),
        servers=len(servers),
    )

    if settings.create_locks:
        ensure_server_locks(lock_facility or NullLockFacility(), servers.snapshot())
