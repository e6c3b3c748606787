"""Launching wsadmin and mapping its outcome.

The process is started with stderr merged into stdout; each output line is
streamed to the job log as soon as it is read, whatever its length. The step
succeeds if and only if the exit code is 0. A process that cannot be started
or whose output cannot be read is a fatal error; a process left running by
an interrupted read is killed. Nothing is ever retried.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import structlog

from wasstep.arguments import ArgumentList
from wasstep.listener import BuildListener

logger = structlog.get_logger()

# Output is read in chunks of this size; lines may be longer
READ_CHUNK_SIZE = 64 * 1024


@dataclass
class RunResult:
    """Result of a process run.

    Attributes:
        success: Whether the process ran and exited with code 0.
        exit_code: The exit code, or None if the process could not start.
        duration_seconds: Wall-clock duration of the run.
        error: Error message if the process failed or could not be run.
    """

    success: bool
    exit_code: int | None = None
    duration_seconds: float = 0.0
    error: str | None = None


async def stream_lines(stream: asyncio.StreamReader, listener: BuildListener) -> None:
    """Forward every line of a stream to the job log.

    Lines are split on the raw bytes, so a line of any length is forwarded
    whole and a multi-byte character is never cut in two.

    Args:
        stream: Output of the child process.
        listener: Job log receiving the lines.
    """
    pending = bytearray()
    while chunk := await stream.read(READ_CHUNK_SIZE):
        pending.extend(chunk)
        *lines, rest = pending.split(b"\n")
        for line in lines:
            listener.info(line.decode("utf-8", errors="replace"))
        pending = bytearray(rest)

    if pending:
        listener.info(pending.decode("utf-8", errors="replace"))


class ProcessRunner:
    """Runs an ArgumentList as a child process."""

    async def run(
        self,
        arguments: ArgumentList,
        env: Mapping[str, str],
        listener: BuildListener,
        cwd: str | Path | None = None,
    ) -> RunResult:
        """Run the command and wait for it to finish.

        Args:
            arguments: Command line; masked entries are never printed.
            env: Complete environment of the child process.
            listener: Job log receiving the command line and the output.
            cwd: Working directory of the child process.

        Returns:
            RunResult with the outcome.
        """
        cmd = arguments.to_list()
        listener.info(f"$ {arguments.to_masked_string()}")

        start_time = time.time()
        process: asyncio.subprocess.Process | None = None
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=str(cwd) if cwd is not None else None,
                env=dict(env),
            )

            if process.stdout is not None:
                await stream_lines(process.stdout, listener)

            exit_code = await process.wait()

        except OSError as e:
            error = f"Failed to execute {cmd[0]}: {e}"
            listener.fatal_error(error)
            listener.fatal_error("Execution of wsadmin failed")
            logger.error("wsadmin_execution_failed", executable=cmd[0], error=str(e))
            return RunResult(
                success=False,
                duration_seconds=round(time.time() - start_time, 2),
                error=error,
            )

        finally:
            # Streaming was interrupted: kill and reap the child
            if process is not None and process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        duration = round(time.time() - start_time, 2)
        logger.info("wsadmin_finished", exit_code=exit_code, duration_seconds=duration)

        return RunResult(
            success=exit_code == 0,
            exit_code=exit_code,
            duration_seconds=duration,
            error=None if exit_code == 0 else f"wsadmin failed with exit code {exit_code}",
        )
