"""Worker node abstraction.

A build step runs on a node: the controller itself or a remote agent. The
resolver only needs three things from it: its OS family (to pick the
wsadmin launcher name), per-node tool locations (an installation may live at
a different path on each node) and a way to probe its filesystem.

Classes:
    - Node: Abstract base class for worker nodes
    - LocalNode: The machine this process runs on
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path


class Node(ABC):
    """Node a build step is executed on.

    Subclasses MUST implement:
        - name: Identifier of the node
        - is_windows: Whether the node runs Windows
        - exists(): Probe a path on the node's filesystem

    Implementations for remote machines may block on network calls in
    ``tool_location`` and ``exists``; no timeout is applied here.
    """

    def __init__(self, tool_locations: Mapping[str, str] | None = None) -> None:
        """Initialize with node-specific tool locations.

        Args:
            tool_locations: Maps installation names to their home on this node.
        """
        self._tool_locations = dict(tool_locations or {})

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the node name."""
        ...

    @property
    @abstractmethod
    def is_windows(self) -> bool:
        """Return True if the node runs Windows."""
        ...

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if ``path`` exists on the node."""
        ...

    def tool_location(self, installation_name: str) -> str | None:
        """Return the node-specific home of an installation, if declared."""
        return self._tool_locations.get(installation_name)

    def join(self, *parts: str) -> str:
        """Join path parts with the node's separator."""
        separator = "\\" if self.is_windows else "/"
        return separator.join(part for part in parts if part)


class LocalNode(Node):
    """The node this process runs on."""

    def __init__(
        self,
        name: str = "built-in",
        tool_locations: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(tool_locations)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_windows(self) -> bool:
        return os.name == "nt"

    def exists(self, path: str) -> bool:
        return Path(path).exists()
