"""Configuration models for the wsadmin build step.

This module provides immutable Pydantic models for the three records the
build step reads at execution time:

Models:
    - Language: Scripting languages accepted by wsadmin
    - ConnType: Connection types accepted by wsadmin
    - InstallationRecord: A wsadmin installation (full server or thin client)
    - ServerRecord: An application server reachable through an installation
    - StepConfig: The configuration of one build step

Secrets (server and step-level passwords) are held as ``pydantic.SecretStr``
so that their clear value never shows up in ``str()``, ``repr()`` or a model
dump.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

# Ports outside this range are accepted but reported as non-preferred
PREFERRED_PORT_RANGE: tuple[int, int] = (1024, 49151)


class Language(str, Enum):
    """Scripting languages supported by wsadmin."""

    JYTHON = "Jython"
    JACL = "Jacl"


class ConnType(str, Enum):
    """Connection types supported by wsadmin.

    IPC is not offered. SOAP is the preferred connection type
    and the fallback for unknown values.
    """

    SOAP = "SOAP"
    RMI = "RMI"
    JSR160RMI = "JSR160RMI"


def _strip(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


class InstallationRecord(BaseModel):
    """A wsadmin installation.

    Attributes:
        name: Unique name of the installation.
        home: Installation folder. Any trailing slash or backslash is removed.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    home: str

    @field_validator("home", mode="before")
    @classmethod
    def remove_trailing_separator(cls, v: Any) -> Any:
        """Remove the '/' or '\\' character that may end the home path."""
        if isinstance(v, str):
            v = v.removesuffix("/").removesuffix("\\")
        return v


class ServerRecord(BaseModel):
    """An application server administered through wsadmin.

    Connection settings live at the server level so that build steps can
    target a server without ever seeing its password.

    Attributes:
        installation_name: Name of the InstallationRecord whose wsadmin is used.
        name: Unique name of the server.
        conn_type: Connection type (unknown values fall back to SOAP).
        host: Host name or address of the server.
        port: Administration port, within [0, 65535].
        user: User name used when security is enabled.
        password: Password used when security is enabled.
    """

    model_config = ConfigDict(frozen=True)

    installation_name: str | None = None
    name: str
    conn_type: ConnType = ConnType.SOAP
    host: str = ""
    port: int = Field(default=8879, ge=0, le=65535)
    user: str = ""
    password: SecretStr = Field(default_factory=lambda: SecretStr(""))

    @field_validator("conn_type", mode="before")
    @classmethod
    def default_conn_type(cls, v: Any) -> Any:
        """Fall back to SOAP for a missing or unknown connection type.

        We may get here when the settings file was edited by hand.
        """
        if isinstance(v, ConnType):
            return v
        if v not in {c.value for c in ConnType}:
            return ConnType.SOAP
        return v

    @field_validator("user", mode="before")
    @classmethod
    def strip_user(cls, v: Any) -> Any:
        """Normalize a missing user to an empty string."""
        return _strip(v)

    @field_validator("password", mode="before")
    @classmethod
    def default_password(cls, v: Any) -> Any:
        """Normalize a missing password to an empty secret."""
        return "" if v is None else v

    @property
    def is_preferred_port(self) -> bool:
        """Whether the port lies in the preferred (registered) range."""
        low, high = PREFERRED_PORT_RANGE
        return low <= self.port <= high


class StepConfig(BaseModel):
    """Configuration of a wsadmin build step.

    Each field maps to a wsadmin command-line option, except ``run_if`` (the
    conditional gate), ``server_name`` (the target ServerRecord) and the
    ``user``/``password`` overrides of the server-level credentials.

    When ``commands`` is not empty it takes precedence over ``script_file``.

    Attributes:
        additional_classpath: -wsadmin_classpath option.
        append_trace: -appendtrace option.
        commands: -c options, one per line.
        java_options: -javaoption options, whitespace separated.
        job_id: -jobid option.
        language: -lang option (unknown values fall back to Jython).
        profile_script_files: -profile options, whitespace separated.
        properties_files: -p options, whitespace separated.
        run_if: Name of the parameter/variable that decides if the step runs.
        script_file: -f option, relative to the workspace.
        script_parameters: Parameters appended after the script file.
        trace_file: -tracefile option, relative to the workspace.
        server_name: Name of the ServerRecord to target.
        user: Overrides the server-level user.
        password: Overrides the server-level password.
    """

    model_config = ConfigDict(frozen=True)

    additional_classpath: str = ""
    append_trace: bool = False
    commands: str = ""
    java_options: str = ""
    job_id: str = ""
    language: Language = Language.JYTHON
    profile_script_files: str = ""
    properties_files: str = ""
    run_if: str = ""
    script_file: str = ""
    script_parameters: str = ""
    trace_file: str = ""
    server_name: str | None = None
    user: str = ""
    password: SecretStr = Field(default_factory=lambda: SecretStr(""))

    @field_validator(
        "additional_classpath",
        "commands",
        "java_options",
        "job_id",
        "profile_script_files",
        "properties_files",
        "run_if",
        "script_file",
        "script_parameters",
        "trace_file",
        "user",
        mode="before",
    )
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        """Trim text fields; a missing value becomes an empty string."""
        return _strip(v)

    @field_validator("language", mode="before")
    @classmethod
    def default_language(cls, v: Any) -> Any:
        """Fall back to Jython for a missing or unknown language."""
        if isinstance(v, Language):
            return v
        if v not in {lang.value for lang in Language}:
            return Language.JYTHON
        return v

    @field_validator("password", mode="before")
    @classmethod
    def default_password(cls, v: Any) -> Any:
        """Normalize a missing password to an empty secret."""
        return "" if v is None else v

    @property
    def uses_commands(self) -> bool:
        """Whether inline commands take precedence over the script file."""
        return bool(self.commands)
