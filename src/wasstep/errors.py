"""Build step error types and error codes.

This module defines the error hierarchy for the wsadmin build step, providing
specific error codes for the different ways a step execution can abort.

Classes:
    - StepErrorCode: Enum of error codes for categorizing step errors
    - StepError: Base exception for all step-related errors
"""

from enum import Enum


class StepErrorCode(str, Enum):
    """Error codes for build step operations.

    Every code is terminal for the current step execution: the step is
    reported as failed and must be fixed by reconfiguration.
    """

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"
    NO_SERVER = "NO_SERVER"
    NO_INSTALLATION = "NO_INSTALLATION"
    EXECUTABLE_NOT_FOUND = "EXECUTABLE_NOT_FOUND"
    NO_COMMAND_NOR_SCRIPT_FILE = "NO_COMMAND_NOR_SCRIPT_FILE"
    SCRIPT_FILE_NOT_FOUND = "SCRIPT_FILE_NOT_FOUND"

    # Runtime errors
    EXECUTION_FAILED = "EXECUTION_FAILED"


class StepError(Exception):
    """Base exception for build step errors.

    Attributes:
        code: The error code categorizing this error.
        message: Human-readable error message.
        server_name: Name of the server the step targets (if known).
        cause: The underlying exception that caused this error (if any).

    Example:
        raise StepError(
            code=StepErrorCode.NO_INSTALLATION,
            message="No installation set for server 'dmgr'",
            server_name="dmgr",
        )
    """

    def __init__(
        self,
        code: StepErrorCode,
        message: str,
        server_name: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the step error.

        Args:
            code: The error code for this error.
            message: Human-readable error message.
            server_name: Name of the target server (optional).
            cause: The underlying exception (optional).
        """
        self.code = code
        self.message = message
        self.server_name = server_name
        self.cause = cause

        full_message = f"[{code.value}] {message}"
        if server_name:
            full_message = f"[{server_name}] {full_message}"

        super().__init__(full_message)
