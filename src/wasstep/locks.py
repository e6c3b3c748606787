"""Optional lock facility integration.

Builds targeting the same server should not run wsadmin concurrently. When a
named-lock facility is available, one lock per configured server (named
after the server) is ensured to exist so jobs can serialize on it.

The facility is a capability injected by the bootstrap: ``NullLockFacility``
stands for its absence, in which case lock creation is skipped with a
warning.

Classes:
    - LockFacility: Abstract capability interface
    - NullLockFacility: No facility available
    - YamlLockFacility: Lock names persisted in a YAML file

Functions:
    - ensure_server_locks: Create the missing per-server locks
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

import structlog
import yaml

from wasstep.models import ServerRecord

logger = structlog.get_logger()


class LockFacility(ABC):
    """Named-lock facility of the host."""

    @abstractmethod
    def present(self) -> bool:
        """Return True if the facility is available."""
        ...

    @abstractmethod
    def lock_names(self) -> list[str]:
        """Return the names of the existing locks."""
        ...

    @abstractmethod
    def add_locks(self, names: list[str]) -> None:
        """Create locks with the given names."""
        ...


class NullLockFacility(LockFacility):
    """Stands for a host without lock facility."""

    def present(self) -> bool:
        return False

    def lock_names(self) -> list[str]:
        return []

    def add_locks(self, names: list[str]) -> None:
        return None


class YamlLockFacility(LockFacility):
    """Lock names stored as a YAML list under a ``locks`` key.

    Example file:
        locks:
          - dmgr-prod
          - dmgr-test
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def present(self) -> bool:
        return True

    def lock_names(self) -> list[str]:
        if not self.path.exists():
            return []
        with self.path.open() as f:
            data = yaml.safe_load(f) or {}
        return [str(name) for name in data.get("locks") or []]

    def add_locks(self, names: list[str]) -> None:
        locks = self.lock_names() + list(names)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w") as f:
            yaml.safe_dump({"locks": locks}, f, default_flow_style=False)


def ensure_server_locks(
    facility: LockFacility,
    servers: Iterable[ServerRecord],
) -> list[str]:
    """Ensure each server has a lock with the same name.

    Never raises: an absent facility or a facility failure is logged as a
    warning.

    Args:
        facility: The lock facility of the host.
        servers: The configured servers.

    Returns:
        Names of the locks created.
    """
    if not facility.present():
        logger.warning(
            "lock_facility_absent",
            message="Can't automatically add locks for each server",
        )
        return []

    try:
        existing = set(facility.lock_names())
        missing = [server.name for server in servers if server.name not in existing]
        if missing:
            facility.add_locks(missing)
    except Exception as e:
        logger.warning("lock_creation_failed", error=str(e))
        return []

    for name in missing:
        logger.info("lock_added", server=name)
    return missing
