"""Registries of configured installations and servers.

This module provides the lookup tables the build step reads at execution
time. They are created by the process bootstrap and passed explicitly to
whoever needs them.

Classes:
    - InstallationRegistry: Configured wsadmin installations by name
    - ServerRegistry: Configured application servers by name

Both registries are read concurrently by builds. Their content changes only
through ``replace()``, which is called when the configuration is saved;
readers always get immutable snapshots.
"""

import threading
from collections.abc import Iterable
from typing import Generic, TypeVar

import structlog

from wasstep.errors import StepError, StepErrorCode
from wasstep.models import InstallationRecord, ServerRecord

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", InstallationRecord, ServerRecord)


class _NamedRegistry(Generic[RecordT]):
    """Thread-safe, name-keyed table of immutable records."""

    kind = "record"

    def __init__(self, records: Iterable[RecordT] = ()) -> None:
        self._records: dict[str, RecordT] = {}
        self._lock = threading.Lock()
        self.replace(records)

    def replace(self, records: Iterable[RecordT]) -> None:
        """Replace the whole content of the registry.

        Args:
            records: The new records.

        Raises:
            StepError: If two records share the same name. The registry is
                left unchanged in that case.
        """
        new_records: dict[str, RecordT] = {}
        for record in records:
            if record.name in new_records:
                raise StepError(
                    code=StepErrorCode.CONFIG_INVALID,
                    message=f"Duplicate {self.kind} name: {record.name}",
                )
            new_records[record.name] = record

        with self._lock:
            self._records = new_records

        logger.debug(f"{self.kind}s_replaced", count=len(new_records))

    def get(self, name: str | None) -> RecordT | None:
        """Look up a record by name.

        Returns:
            The record, or None if the name is empty or unknown.
        """
        if not name:
            return None
        return self._records.get(name)

    def snapshot(self) -> tuple[RecordT, ...]:
        """Return a snapshot of all records, in configuration order."""
        with self._lock:
            return tuple(self._records.values())

    def names(self) -> list[str]:
        """Return the names of all records."""
        return [record.name for record in self.snapshot()]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, name: object) -> bool:
        return name in self._records


class InstallationRegistry(_NamedRegistry[InstallationRecord]):
    """Configured wsadmin installations.

    Example:
        installations = InstallationRegistry(
            [InstallationRecord(name="was85", home="/opt/IBM/WebSphere/AppServer")]
        )
        installations.get("was85").home
    """

    kind = "installation"


class ServerRegistry(_NamedRegistry[ServerRecord]):
    """Configured application servers."""

    kind = "server"
