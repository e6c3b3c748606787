"""Tests for field validation."""

import socket
from pathlib import Path

import pytest
from conftest import make_wsadmin

from wasstep.models import InstallationRecord, ServerRecord, StepConfig
from wasstep.registry import ServerRegistry
from wasstep.validation import (
    ValidationKind,
    check_conn_type,
    check_home,
    check_host,
    check_name,
    check_password,
    check_port,
    check_settings,
    check_step_config,
    check_user,
)


def resolve_any(host: str) -> str:
    return "127.0.0.1"


def resolve_none(host: str) -> str:
    raise socket.gaierror("unknown host")


class TestCheckHome:
    """Tests for check_home."""

    def test_empty(self) -> None:
        """Verify an empty folder is an error."""
        assert check_home("").kind == ValidationKind.ERROR
        assert check_home(None).kind == ValidationKind.ERROR

    def test_not_a_folder(self, tmp_path: Path) -> None:
        """Verify a missing folder is an error."""
        assert check_home(tmp_path / "missing").kind == ValidationKind.ERROR

    def test_full_installation(self, tmp_path: Path) -> None:
        """Verify a folder with bin/wsadmin.sh is accepted."""
        make_wsadmin(tmp_path / "bin")

        assert check_home(tmp_path, is_windows=False).kind == ValidationKind.OK

    def test_thin_client(self, tmp_path: Path) -> None:
        """Verify a folder with wsadmin.sh at its root is accepted."""
        make_wsadmin(tmp_path)

        assert check_home(tmp_path, is_windows=False).kind == ValidationKind.OK

    def test_neither_layout(self, tmp_path: Path) -> None:
        """Verify a folder without launcher is an error."""
        result = check_home(tmp_path, is_windows=False)

        assert result.kind == ValidationKind.ERROR
        assert "thin client" in result.message

    def test_windows_launcher(self, tmp_path: Path) -> None:
        """Verify Windows folders are checked for wsadmin.bat."""
        make_wsadmin(tmp_path / "bin")

        assert check_home(tmp_path, is_windows=True).kind == ValidationKind.ERROR


class TestServerChecks:
    """Tests for the server field checks."""

    @pytest.mark.parametrize(
        ("port", "kind"),
        [
            (8879, ValidationKind.OK),
            ("8879", ValidationKind.OK),
            (22, ValidationKind.WARNING),
            (49152, ValidationKind.WARNING),
            (70000, ValidationKind.ERROR),
            (-1, ValidationKind.ERROR),
            ("abc", ValidationKind.ERROR),
            ("", ValidationKind.ERROR),
            (None, ValidationKind.ERROR),
        ],
    )
    def test_check_port(self, port: object, kind: ValidationKind) -> None:
        """Verify port bounds and preferred range."""
        assert check_port(port).kind == kind

    def test_non_preferred_port_message(self) -> None:
        """Verify the warning names the port."""
        assert check_port(22).message.startswith("22 is not a preferred value")

    def test_check_host(self) -> None:
        """Verify the host must be set and resolve."""
        assert check_host("", resolve_any).kind == ValidationKind.ERROR
        assert check_host("dmgr", resolve_any).kind == ValidationKind.OK
        assert check_host("nowhere.invalid", resolve_none).kind == ValidationKind.ERROR

    def test_check_name(self) -> None:
        """Verify the name must be set."""
        assert check_name("").kind == ValidationKind.ERROR
        assert check_name("dmgr").kind == ValidationKind.OK

    def test_check_conn_type(self) -> None:
        """Verify only supported connection types are accepted."""
        assert check_conn_type("SOAP").kind == ValidationKind.OK
        assert check_conn_type("IPC").kind == ValidationKind.ERROR
        assert check_conn_type(None).kind == ValidationKind.ERROR

    def test_credentials_are_warnings(self) -> None:
        """Verify missing credentials are only warnings."""
        assert check_user("").kind == ValidationKind.WARNING
        assert check_password("").kind == ValidationKind.WARNING
        assert check_user("admin").kind == ValidationKind.OK


class TestCheckStepConfig:
    """Tests for check_step_config."""

    def test_valid_step(self) -> None:
        """Verify a complete step has no problem."""
        servers = ServerRegistry([ServerRecord(name="dmgr")])

        assert check_step_config(StepConfig(server_name="dmgr", commands="x"), servers) == []

    def test_missing_server_and_commands(self) -> None:
        """Verify both problems are reported."""
        results = check_step_config(StepConfig(), ServerRegistry())

        assert [field for field, _ in results] == ["server_name", "commands"]
        assert all(result.kind == ValidationKind.ERROR for _, result in results)

    def test_unknown_server(self) -> None:
        """Verify an unknown server is reported."""
        results = check_step_config(
            StepConfig(server_name="gone", script_file="a.py"), ServerRegistry()
        )

        assert results[0][1].message == "Server gone is not configured"


class TestCheckSettings:
    """Tests for check_settings."""

    def test_valid_settings(self, tmp_path: Path) -> None:
        """Verify consistent settings produce no result."""
        make_wsadmin(tmp_path / "bin")
        (tmp_path / "bin" / "wsadmin.bat").write_text("")
        installations = [InstallationRecord(name="was", home=str(tmp_path))]
        servers = [
            ServerRecord(
                name="dmgr",
                installation_name="was",
                host="dmgr",
                user="admin",
                password="pw",
            )
        ]

        assert check_settings(installations, servers, resolve_any) == []

    def test_problems_are_prefixed(self, tmp_path: Path) -> None:
        """Verify results are labelled with the record name."""
        installations = [InstallationRecord(name="was", home=str(tmp_path / "missing"))]
        servers = [ServerRecord(name="dmgr", installation_name="other", host="h", port=22)]

        results = dict(check_settings(installations, servers, resolve_any))

        assert results["installation[was].home"].kind == ValidationKind.ERROR
        assert results["server[dmgr].port"].kind == ValidationKind.WARNING
        assert results["server[dmgr].user"].kind == ValidationKind.WARNING
        assert results["server[dmgr].installation_name"].kind == ValidationKind.ERROR
        assert "server[dmgr].host" not in results
