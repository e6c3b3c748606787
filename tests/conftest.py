"""Shared fixtures for the wasstep tests."""

import io
import os
import stat
from pathlib import Path

import pytest

from wasstep.listener import BuildListener
from wasstep.node import Node


class FakeNode(Node):
    """Node whose filesystem is a set of paths."""

    def __init__(
        self,
        paths: set[str] | None = None,
        windows: bool = False,
        tool_locations: dict[str, str] | None = None,
    ) -> None:
        super().__init__(tool_locations)
        self.paths = paths or set()
        self.windows = windows
        self.probed: list[str] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def is_windows(self) -> bool:
        return self.windows

    def exists(self, path: str) -> bool:
        self.probed.append(path)
        return path in self.paths


@pytest.fixture
def output() -> io.StringIO:
    """Stream capturing the job log."""
    return io.StringIO()


@pytest.fixture
def listener(output: io.StringIO) -> BuildListener:
    """Listener writing to the captured stream."""
    return BuildListener(output)


def make_wsadmin(directory: Path, script: str = "exit 0") -> Path:
    """Create an executable wsadmin.sh in a directory."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "wsadmin.sh"
    path.write_text(f"#!/bin/sh\n{script}\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


skip_on_windows = pytest.mark.skipif(os.name == "nt", reason="requires a POSIX shell")
