"""Locating the wsadmin executable of an installation on a node.

Resolution happens in two explicit translation stages followed by a probe:

    1. translate_for_node: use the node-specific home if the node declares one
    2. translate_for_environment: expand ${VAR} references in the home
    3. find_executable: look for the launcher, first in ``{home}/bin`` (full
       application server installation), then in ``{home}`` (administration
       thin client)

Both translations return new InstallationRecord values; registry records
are never modified.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from wasstep.errors import StepError, StepErrorCode
from wasstep.models import InstallationRecord, ServerRecord
from wasstep.node import Node
from wasstep.registry import InstallationRegistry
from wasstep.variables import VariableContext, expand_macros

logger = structlog.get_logger()

WSADMIN_BAT = "wsadmin.bat"
WSADMIN_SH = "wsadmin.sh"


def wsadmin_binary(is_windows: bool) -> str:
    """Return the name of the wsadmin launcher for an OS family."""
    return WSADMIN_BAT if is_windows else WSADMIN_SH


def translate_for_node(installation: InstallationRecord, node: Node) -> InstallationRecord:
    """Adapt an installation to a node.

    Args:
        installation: The configured installation.
        node: The node the step runs on.

    Returns:
        A new record whose home is the node-specific location when the node
        declares one, the configured home otherwise.
    """
    home = node.tool_location(installation.name)
    if home is None:
        home = installation.home
    return InstallationRecord(name=installation.name, home=home)


def translate_for_environment(
    installation: InstallationRecord,
    env: Mapping[str, str],
) -> InstallationRecord:
    """Expand ${VAR} references in an installation home.

    Args:
        installation: The (node-translated) installation.
        env: The build environment.

    Returns:
        A new record with the expanded home. Unknown variables are kept.
    """
    return InstallationRecord(
        name=installation.name,
        home=expand_macros(installation.home, env.get),
    )


def wsadmin_candidates(home: str, is_windows: bool, join) -> list[str]:
    """Return the candidate launcher paths for a home, in probing order.

    Args:
        home: Installation home.
        is_windows: Whether the target node runs Windows.
        join: Path join function of the target node.

    Returns:
        ``[{home}/bin/{launcher}, {home}/{launcher}]``
    """
    binary = wsadmin_binary(is_windows)
    return [join(home, "bin", binary), join(home, binary)]


def find_executable(installation: InstallationRecord, node: Node) -> str | None:
    """Return the path of the wsadmin launcher on a node.

    Args:
        installation: The translated installation.
        node: The node whose filesystem is probed.

    Returns:
        The first candidate path that exists, or None.
    """
    for candidate in wsadmin_candidates(installation.home, node.is_windows, node.join):
        if node.exists(candidate):
            return candidate
    return None


class InstallationResolver:
    """Resolves the wsadmin executable to launch for a build.

    Example:
        resolver = InstallationResolver(installations)
        executable = resolver.resolve_for_server(server, LocalNode(), context)
    """

    def __init__(self, installations: InstallationRegistry) -> None:
        """Initialize the resolver.

        Args:
            installations: Registry of configured installations.
        """
        self._installations = installations

    def resolve(
        self,
        installation_name: str | None,
        node: Node,
        context: VariableContext,
        server_name: str | None = None,
    ) -> str:
        """Resolve an installation to the wsadmin path on a node.

        Args:
            installation_name: Name of the installation to use.
            node: Node the step runs on.
            context: Variables of the build; the environment expands the home.
            server_name: Server the installation is resolved for (for errors).

        Returns:
            Path to the wsadmin launcher on the node.

        Raises:
            StepError: NO_INSTALLATION if the name is empty or unknown,
                EXECUTABLE_NOT_FOUND if neither layout holds the launcher.
        """
        installation = self._installations.get(installation_name)
        if installation is None:
            raise StepError(
                code=StepErrorCode.NO_INSTALLATION,
                message=(
                    f"No installation set for server {server_name}"
                    if not installation_name
                    else f"Installation {installation_name} is not configured"
                ),
                server_name=server_name,
            )

        installation = translate_for_node(installation, node)
        installation = translate_for_environment(installation, context.env)

        executable = find_executable(installation, node)
        if executable is None:
            raise StepError(
                code=StepErrorCode.EXECUTABLE_NOT_FOUND,
                message=(
                    f"Unable to find the wsadmin executable of installation "
                    f"{installation.name} (home: {installation.home}) on node {node.name}"
                ),
                server_name=server_name,
            )

        logger.debug(
            "wsadmin_resolved",
            installation=installation.name,
            node=node.name,
            executable=executable,
        )
        return executable

    def resolve_for_server(
        self,
        server: ServerRecord,
        node: Node,
        context: VariableContext,
    ) -> str:
        """Resolve the wsadmin path of the installation assigned to a server."""
        return self.resolve(server.installation_name, node, context, server_name=server.name)
