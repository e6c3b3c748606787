"""The wsadmin build step.

``BuildStep.perform`` runs the whole execution of one step:

    1. the conditional gate may skip the step (reported as a success)
    2. the targeted server and its installation's wsadmin are resolved
    3. the command line is built from the step configuration
    4. wsadmin is run and its exit code mapped to success or failure

Configuration problems abort the step before any process is launched. They
are written to the job log as fatal errors and returned as a failed
StepResult carrying the error code; nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog

from wasstep.arguments import ArgumentBuilder
from wasstep.errors import StepError, StepErrorCode
from wasstep.gate import GateDecision, evaluate_condition
from wasstep.installation import InstallationResolver
from wasstep.listener import BuildListener
from wasstep.models import ServerRecord, StepConfig
from wasstep.node import LocalNode, Node
from wasstep.registry import InstallationRegistry, ServerRegistry
from wasstep.runner import ProcessRunner
from wasstep.variables import VariableContext

logger = structlog.get_logger()


class StepStatus(str, Enum):
    """Final status of a build step execution."""

    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass
class BuildContext:
    """What the host provides for one build.

    Attributes:
        workspace: Root of the job workspace.
        variables: Parameters, build variables and environment of the build.
        node: Node the step runs on.
    """

    workspace: Path
    variables: VariableContext = field(default_factory=VariableContext)
    node: Node = field(default_factory=LocalNode)


@dataclass
class StepResult:
    """Result of a build step execution.

    Attributes:
        status: SUCCESS, FAILURE or SKIPPED.
        exit_code: Exit code of wsadmin, if it was run.
        error_code: Error code of a configuration or execution error.
        error: Error message, if the step failed.
    """

    status: StepStatus
    exit_code: int | None = None
    error_code: StepErrorCode | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Whether the build may go on (a skipped step does not fail it)."""
        return self.status != StepStatus.FAILURE


class BuildStep:
    """Runs wsadmin as a build step.

    Example:
        step = BuildStep(config, servers, installations)
        result = await step.perform(BuildContext(workspace=Path(".")), listener)
        if not result.success:
            ...
    """

    def __init__(
        self,
        config: StepConfig,
        servers: ServerRegistry,
        installations: InstallationRegistry,
        runner: ProcessRunner | None = None,
    ) -> None:
        """Initialize the step.

        Args:
            config: Configuration of this step.
            servers: Registry of configured servers.
            installations: Registry of configured installations.
            runner: Process runner (injectable for tests).
        """
        self.config = config
        self._servers = servers
        self._resolver = InstallationResolver(installations)
        self._runner = runner if runner is not None else ProcessRunner()

    @property
    def server(self) -> ServerRecord | None:
        """The server targeted by this step, or None if none is configured."""
        return self._servers.get(self.config.server_name)

    async def perform(self, build: BuildContext, listener: BuildListener) -> StepResult:
        """Execute the step.

        Args:
            build: Workspace, variables and node of the build.
            listener: Job log.

        Returns:
            StepResult with the outcome.
        """
        decision = evaluate_condition(self.config.run_if, build.variables, listener)
        if decision == GateDecision.SKIP:
            logger.info("step_skipped", run_if=self.config.run_if)
            return StepResult(status=StepStatus.SKIPPED)

        try:
            server = self._require_server()
            executable = self._resolver.resolve_for_server(server, build.node, build.variables)
            arguments = ArgumentBuilder(listener).build(
                self.config,
                server,
                executable,
                build.variables,
                build.workspace,
            )
        except StepError as e:
            listener.fatal_error(e.message)
            logger.error("step_configuration_error", code=e.code.value, error=e.message)
            return StepResult(status=StepStatus.FAILURE, error_code=e.code, error=e.message)

        run = await self._runner.run(
            arguments,
            build.variables.process_env(),
            listener,
            cwd=build.workspace,
        )

        if run.exit_code is None:
            return StepResult(
                status=StepStatus.FAILURE,
                error_code=StepErrorCode.EXECUTION_FAILED,
                error=run.error,
            )

        return StepResult(
            status=StepStatus.SUCCESS if run.success else StepStatus.FAILURE,
            exit_code=run.exit_code,
            error=run.error,
        )

    def _require_server(self) -> ServerRecord:
        server = self.server
        if server is None:
            raise StepError(
                code=StepErrorCode.NO_SERVER,
                message=(
                    "No server has been selected"
                    if not self.config.server_name
                    else f"Server {self.config.server_name} is not configured"
                ),
            )
        return server
