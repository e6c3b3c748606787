"""Tests for wsadmin executable resolution.

Tests cover:
    - Launcher name per OS family
    - Node and environment translations
    - Probing order (full installation, then thin client)
    - Resolution errors
"""

from pathlib import Path

import pytest
from conftest import FakeNode, make_wsadmin

from wasstep.errors import StepError, StepErrorCode
from wasstep.installation import (
    InstallationResolver,
    find_executable,
    translate_for_environment,
    translate_for_node,
    wsadmin_binary,
    wsadmin_candidates,
)
from wasstep.models import InstallationRecord, ServerRecord
from wasstep.node import LocalNode
from wasstep.registry import InstallationRegistry
from wasstep.variables import VariableContext


class TestTranslations:
    """Tests for the node and environment translations."""

    def test_binary_name(self) -> None:
        """Verify the launcher name depends on the OS family."""
        assert wsadmin_binary(is_windows=True) == "wsadmin.bat"
        assert wsadmin_binary(is_windows=False) == "wsadmin.sh"

    def test_node_tool_location_wins(self) -> None:
        """Verify the node-specific home replaces the configured one."""
        installation = InstallationRecord(name="was", home="/opt/was")
        node = FakeNode(tool_locations={"was": "/nodes/was"})

        translated = translate_for_node(installation, node)

        assert translated.home == "/nodes/was"
        assert installation.home == "/opt/was"

    def test_node_without_tool_location_keeps_home(self) -> None:
        """Verify the configured home is kept without a node location."""
        installation = InstallationRecord(name="was", home="/opt/was")

        assert translate_for_node(installation, FakeNode()).home == "/opt/was"

    def test_environment_expansion(self) -> None:
        """Verify ${VAR} references in the home are expanded."""
        installation = InstallationRecord(name="was", home="${WAS_ROOT}/AppServer")

        translated = translate_for_environment(installation, {"WAS_ROOT": "/opt/IBM"})

        assert translated.home == "/opt/IBM/AppServer"

    def test_candidates_order(self) -> None:
        """Verify bin/ is probed before the home root."""
        candidates = wsadmin_candidates("/opt/was", False, FakeNode().join)

        assert candidates == ["/opt/was/bin/wsadmin.sh", "/opt/was/wsadmin.sh"]

    def test_windows_candidates(self) -> None:
        """Verify Windows nodes look for wsadmin.bat with backslashes."""
        node = FakeNode(windows=True)

        candidates = wsadmin_candidates("C:\\IBM\\was", node.is_windows, node.join)

        assert candidates == ["C:\\IBM\\was\\bin\\wsadmin.bat", "C:\\IBM\\was\\wsadmin.bat"]


class TestFindExecutable:
    """Tests for find_executable."""

    def test_full_installation_layout(self) -> None:
        """Verify the bin/ launcher is found first."""
        node = FakeNode(paths={"/opt/was/bin/wsadmin.sh", "/opt/was/wsadmin.sh"})

        found = find_executable(InstallationRecord(name="was", home="/opt/was"), node)

        assert found == "/opt/was/bin/wsadmin.sh"

    def test_thin_client_layout(self) -> None:
        """Verify the root launcher is found when bin/ has none."""
        node = FakeNode(paths={"/opt/thin/wsadmin.sh"})

        found = find_executable(InstallationRecord(name="thin", home="/opt/thin"), node)

        assert found == "/opt/thin/wsadmin.sh"
        assert node.probed == ["/opt/thin/bin/wsadmin.sh", "/opt/thin/wsadmin.sh"]

    def test_nothing_found(self) -> None:
        """Verify None is returned when neither layout holds the launcher."""
        assert find_executable(InstallationRecord(name="x", home="/x"), FakeNode()) is None


class TestInstallationResolver:
    """Tests for InstallationResolver."""

    def test_resolve_on_local_node(self, tmp_path: Path) -> None:
        """Verify resolution against a real full-installation folder."""
        launcher = make_wsadmin(tmp_path / "was" / "bin")
        registry = InstallationRegistry(
            [InstallationRecord(name="was", home=str(tmp_path / "was"))]
        )
        node = FakeNode(paths={str(launcher)})

        executable = InstallationResolver(registry).resolve("was", node, VariableContext())

        assert executable == str(launcher)

    def test_resolve_thin_client_on_local_node(self, tmp_path: Path) -> None:
        """Verify resolution against a real thin-client folder."""
        launcher = make_wsadmin(tmp_path / "thin")
        registry = InstallationRegistry(
            [InstallationRecord(name="thin", home=str(tmp_path / "thin"))]
        )
        node = LocalNode()
        if node.is_windows:
            pytest.skip("requires a POSIX node")

        executable = InstallationResolver(registry).resolve("thin", node, VariableContext())

        assert executable == str(launcher)

    def test_resolve_uses_node_then_environment(self) -> None:
        """Verify the node location is translated before the environment."""
        registry = InstallationRegistry([InstallationRecord(name="was", home="/opt/was")])
        node = FakeNode(
            paths={"/mnt/agent1/bin/wsadmin.sh"},
            tool_locations={"was": "${AGENT_ROOT}"},
        )
        context = VariableContext(env={"AGENT_ROOT": "/mnt/agent1"})

        executable = InstallationResolver(registry).resolve("was", node, context)

        assert executable == "/mnt/agent1/bin/wsadmin.sh"

    def test_resolve_is_idempotent(self) -> None:
        """Verify resolving twice gives the same path and leaves the registry intact."""
        installation = InstallationRecord(name="was", home="${ROOT}")
        registry = InstallationRegistry([installation])
        node = FakeNode(paths={"/r/bin/wsadmin.sh"})
        context = VariableContext(env={"ROOT": "/r"})
        resolver = InstallationResolver(registry)

        first = resolver.resolve("was", node, context)
        second = resolver.resolve("was", node, context)

        assert first == second == "/r/bin/wsadmin.sh"
        assert registry.get("was").home == "${ROOT}"

    def test_missing_installation_name(self) -> None:
        """Verify a server without installation fails with NO_INSTALLATION."""
        resolver = InstallationResolver(InstallationRegistry())
        server = ServerRecord(name="dmgr")

        with pytest.raises(StepError) as exc_info:
            resolver.resolve_for_server(server, FakeNode(), VariableContext())

        assert exc_info.value.code == StepErrorCode.NO_INSTALLATION
        assert exc_info.value.server_name == "dmgr"
        assert "No installation set for server dmgr" in str(exc_info.value)

    def test_unknown_installation_name(self) -> None:
        """Verify an unknown installation fails with NO_INSTALLATION."""
        resolver = InstallationResolver(InstallationRegistry())

        with pytest.raises(StepError) as exc_info:
            resolver.resolve("was", FakeNode(), VariableContext())

        assert exc_info.value.code == StepErrorCode.NO_INSTALLATION
        assert "Installation was is not configured" in exc_info.value.message

    def test_executable_not_found(self) -> None:
        """Verify an installation without launcher fails with EXECUTABLE_NOT_FOUND."""
        registry = InstallationRegistry([InstallationRecord(name="was", home="/opt/was")])

        with pytest.raises(StepError) as exc_info:
            InstallationResolver(registry).resolve("was", FakeNode(), VariableContext())

        assert exc_info.value.code == StepErrorCode.EXECUTABLE_NOT_FOUND
        assert "/opt/was" in exc_info.value.message
