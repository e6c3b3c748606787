"""Job console for a build step.

``BuildListener`` is the only sink allowed to receive text derived from
secrets: every line written through it is passed through its mask set first,
so a registered secret value is rendered as ``********`` wherever it appears,
including in the output of the launched process.
"""

from __future__ import annotations

import sys
from typing import TextIO

MASK = "********"


class BuildListener:
    """Masking-aware line writer for the job log.

    Attributes:
        stream: The text stream the job log is written to.

    Example:
        listener = BuildListener(io.StringIO())
        listener.add_mask("s3cret")
        listener.info("password is s3cret")  # "password is ********"
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the listener.

        Args:
            stream: Destination stream (defaults to sys.stdout).
        """
        self.stream = stream if stream is not None else sys.stdout
        self._masks: set[str] = set()

    def add_mask(self, secret: str) -> None:
        """Register a value that must never be written in clear text."""
        if secret:
            self._masks.add(secret)

    def mask(self, text: str) -> str:
        """Return ``text`` with every registered secret replaced."""
        # Longest first, so a secret containing another one is fully masked
        for secret in sorted(self._masks, key=len, reverse=True):
            text = text.replace(secret, MASK)
        return text

    def info(self, message: str) -> None:
        """Write a plain line."""
        self._write(message)

    def warning(self, message: str) -> None:
        """Write a warning line; processing continues."""
        self._write(f"WARNING: {message}")

    def error(self, message: str) -> None:
        """Write an error line for a non-fatal problem."""
        self._write(f"ERROR: {message}")

    def fatal_error(self, message: str) -> None:
        """Write an error line for a problem that aborts the step."""
        self._write(f"FATAL: {message}")

    def _write(self, line: str) -> None:
        self.stream.write(self.mask(line.rstrip("\r\n")) + "\n")
        self.stream.flush()
