"""wasstep: run the wsadmin administrative scripting client as a build step.

Core Components:
    - models: Configuration records (InstallationRecord, ServerRecord, StepConfig)
    - registry: Configured installations and servers (InstallationRegistry, ServerRegistry)
    - gate: Conditional gate deciding whether a step runs
    - installation: Resolution of the wsadmin executable on a node
    - arguments: wsadmin command line building with password masking
    - runner: Process launching and exit code mapping
    - step: The build step itself (BuildStep)
    - locks: Optional per-server lock creation
"""

from wasstep.errors import StepError, StepErrorCode
from wasstep.listener import BuildListener
from wasstep.models import (
    ConnType,
    InstallationRecord,
    Language,
    ServerRecord,
    StepConfig,
)
from wasstep.registry import InstallationRegistry, ServerRegistry
from wasstep.step import BuildContext, BuildStep, StepResult, StepStatus
from wasstep.variables import VariableContext

__all__ = [
    "BuildContext",
    "BuildListener",
    "BuildStep",
    "ConnType",
    "InstallationRecord",
    "InstallationRegistry",
    "Language",
    "ServerRecord",
    "ServerRegistry",
    "StepConfig",
    "StepError",
    "StepErrorCode",
    "StepResult",
    "StepStatus",
    "VariableContext",
]
