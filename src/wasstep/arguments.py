"""Building the wsadmin command line.

This module turns a StepConfig, the ServerRecord it targets and the build
variables into the ordered argument list wsadmin expects:

    wsadmin -conntype ... -host ... -port ... [-user ... [-password ...]]
            -lang ... (-c ...)* | -f ... [-p ...]* [-profile ...]*
            [-javaoption ...]* [-wsadmin_classpath ...] [-jobid ...]
            [-tracefile ...] [-appendtrace true] [script parameters...]

Classes:
    - ArgumentList: Ordered arguments, some of them masked
    - ArgumentBuilder: Maps the step configuration to an ArgumentList

Functions:
    - split_arguments: Whitespace splitting that honors quotes, not backslashes

See the wsadmin command-line reference for the meaning of each option.
"""

from __future__ import annotations

import re
import shlex
from pathlib import Path

from wasstep.errors import StepError, StepErrorCode
from wasstep.listener import MASK, BuildListener
from wasstep.models import ServerRecord, StepConfig
from wasstep.variables import VariableContext

# Separators between inline commands
_COMMAND_SEPARATORS = re.compile(r"[\n\r\f]+")

# Whitespace collapsed before tokenizing script parameters
_PARAMETER_WHITESPACE = re.compile(r"[\t\r\n]+")


def split_arguments(text: str) -> list[str]:
    """Split a text into arguments on whitespace.

    Single and double quotes group words. Backslashes are kept literally so
    that Windows paths such as ``C:\\was\\logs`` survive, and ``#`` does not
    start a comment.

    Raises:
        ValueError: If the text contains unbalanced quotes.
    """
    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace_split = True
    lexer.escape = ""
    lexer.commenters = ""
    return list(lexer)


class ArgumentList:
    """Ordered list of command-line arguments.

    Masked arguments are passed to the process in clear text but rendered as
    ``********`` by ``to_masked_list()`` and ``to_masked_string()``.

    Example:
        args = ArgumentList().add("-user", "admin").add("-password")
        args.add_masked("s3cret")
        args.to_masked_string()  # "-user admin -password ********"
    """

    def __init__(self) -> None:
        self._args: list[str] = []
        self._masked: list[bool] = []

    def add(self, *values: str) -> ArgumentList:
        """Append arguments in clear text."""
        for value in values:
            self._args.append(str(value))
            self._masked.append(False)
        return self

    def add_masked(self, value: str) -> ArgumentList:
        """Append an argument that must never be logged."""
        self._args.append(value)
        self._masked.append(True)
        return self

    def add_tokenized(self, text: str) -> ArgumentList:
        """Split ``text`` with split_arguments() and append each token.

        Raises:
            ValueError: If the text contains unbalanced quotes.
        """
        return self.add(*split_arguments(text))

    def to_list(self) -> list[str]:
        """Return the arguments to launch the process with."""
        return list(self._args)

    def to_masked_list(self) -> list[str]:
        """Return the arguments with masked entries replaced."""
        return [
            MASK if masked else arg
            for arg, masked in zip(self._args, self._masked, strict=True)
        ]

    def to_masked_string(self) -> str:
        """Return a printable, shell-quoted, masked command line."""
        return " ".join(
            MASK if masked else shlex.quote(arg)
            for arg, masked in zip(self._args, self._masked, strict=True)
        )

    def __len__(self) -> int:
        return len(self._args)

    def __repr__(self) -> str:
        return f"ArgumentList({self.to_masked_list()!r})"


def _tokenize(text: str, field_name: str) -> list[str]:
    try:
        return split_arguments(text)
    except ValueError as e:
        raise StepError(
            code=StepErrorCode.CONFIG_INVALID,
            message=f"Invalid {field_name}: {e}",
            cause=e,
        ) from e


class ArgumentBuilder:
    """Maps a build step configuration to the wsadmin argument list.

    Problems with optional resources (properties files, profile scripts) are
    written to the job log as warnings and the entry is skipped; every other
    problem raises a StepError.
    """

    def __init__(self, listener: BuildListener) -> None:
        """Initialize the builder.

        Args:
            listener: Job log; also receives the passwords to mask.
        """
        self._listener = listener

    def build(
        self,
        config: StepConfig,
        server: ServerRecord,
        executable: str,
        context: VariableContext,
        workspace: Path,
    ) -> ArgumentList:
        """Build the command line.

        Args:
            config: The step configuration.
            server: The targeted server.
            executable: Path of the wsadmin launcher.
            context: Variables used for ${VAR} expansion.
            workspace: Root of the job workspace; relative files resolve here.

        Returns:
            The argument list, executable first.

        Raises:
            StepError: SCRIPT_FILE_NOT_FOUND, NO_COMMAND_NOR_SCRIPT_FILE or
                CONFIG_INVALID (unbalanced quotes in a tokenized field).
        """
        workspace = Path(workspace).absolute()
        args = ArgumentList().add(executable)

        args.add("-conntype", server.conn_type.value)
        args.add("-host", server.host)
        args.add("-port", str(server.port))

        self._add_credentials(args, config, server, context)

        args.add("-lang", config.language.value.lower())

        self._add_commands_or_script(args, config, context, workspace)

        for path in self._existing_files(
            config.properties_files, context, workspace, "properties file"
        ):
            args.add("-p", str(path))

        for path in self._existing_files(
            config.profile_script_files, context, workspace, "profile script file"
        ):
            args.add("-profile", str(path))

        if config.java_options:
            for option in _tokenize(context.expand(config.java_options), "Java options"):
                args.add("-javaoption", option)

        if config.additional_classpath:
            args.add("-wsadmin_classpath", config.additional_classpath)

        if config.job_id:
            args.add("-jobid", context.expand(config.job_id))

        if config.trace_file:
            args.add("-tracefile", str(workspace / context.expand(config.trace_file)))

        if config.append_trace:
            args.add("-appendtrace", "true")

        # Appended whenever a script file is configured, even behind commands
        if config.script_file and config.script_parameters:
            parameters = _PARAMETER_WHITESPACE.sub(
                " ", context.expand(config.script_parameters)
            )
            args.add(*_tokenize(parameters, "script parameters"))

        return args

    def _add_credentials(
        self,
        args: ArgumentList,
        config: StepConfig,
        server: ServerRecord,
        context: VariableContext,
    ) -> None:
        """Add -user/-password, step-level credentials taking precedence."""
        user = ""
        password = ""
        if config.user:
            raw_password = config.password.get_secret_value()
            self._listener.add_mask(raw_password)
            user = context.expand(config.user)
            password = context.expand(raw_password)
            self._listener.info(f"Using user {user} defined at the build step level")
        elif server.user:
            user = server.user
            password = server.password.get_secret_value()
            self._listener.info(f"Using user {user} defined at the server level")

        if not user:
            return

        args.add("-user", user)
        if password:
            self._listener.add_mask(password)
            args.add("-password")
            args.add_masked(password)

    def _add_commands_or_script(
        self,
        args: ArgumentList,
        config: StepConfig,
        context: VariableContext,
        workspace: Path,
    ) -> None:
        """Add -c options or the -f option."""
        if config.commands:
            commands = [
                line
                for line in _COMMAND_SEPARATORS.split(context.expand(config.commands))
                if line.strip()
            ]
            if commands:
                for command in commands:
                    args.add("-c", command)
                return

        elif config.script_file:
            script_path = workspace / context.expand(config.script_file)
            if not script_path.exists():
                raise StepError(
                    code=StepErrorCode.SCRIPT_FILE_NOT_FOUND,
                    message=f"Script file {script_path} not found",
                    server_name=config.server_name,
                )
            args.add("-f", str(script_path))
            return

        raise StepError(
            code=StepErrorCode.NO_COMMAND_NOR_SCRIPT_FILE,
            message="Neither commands nor a script file have been set",
            server_name=config.server_name,
        )

    def _existing_files(
        self,
        files: str,
        context: VariableContext,
        workspace: Path,
        description: str,
    ) -> list[Path]:
        """Resolve a whitespace-separated file list, skipping missing files."""
        if not files:
            return []

        existing: list[Path] = []
        for name in _tokenize(context.expand(files), f"{description}s"):
            path = workspace / name
            if path.exists():
                existing.append(path)
            else:
                self._listener.warning(f"The {description} {path} was not found, ignoring it")
        return existing
