"""Tests for the explorer error hierarchy."""

from __future__ import annotations

import pytest

from winccoa_explorer.errors import (
    ConfigError,
    ConfigNotFoundError,
    ErrorCodes,
    ExplorerError,
    ProjectNotFoundError,
    RegistryReadError,
    VersionQueryError,
    VersionQueryTimeoutError,
)


class TestExplorerError:
    def test_str_format(self) -> None:
        error = ExplorerError(code="SOME_CODE", message="Something failed")
        assert str(error) == "[SOME_CODE] Something failed"

    def test_defaults(self) -> None:
        error = ExplorerError(code="X", message="m")
        assert error.details == {}
        assert error.cause is None
        assert error.timestamp

    def test_cause_kept(self) -> None:
        cause = OSError("boom")
        error = ExplorerError(code="X", message="m", cause=cause)
        assert error.cause is cause


class TestSubclasses:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (ConfigNotFoundError(config_path="/x.yaml"), ErrorCodes.CONFIG_NOT_FOUND),
            (ConfigError("bad"), ErrorCodes.CONFIG_INVALID),
            (RegistryReadError(registry_path="/etc/opt/pvss/pvssInst.conf", reason="denied"), ErrorCodes.REGISTRY_READ_ERROR),
            (VersionQueryError("failed"), ErrorCodes.VERSION_QUERY_FAILED),
            (VersionQueryTimeoutError(executable="pmon", timeout_ms=10), ErrorCodes.VERSION_QUERY_TIMEOUT),
            (ProjectNotFoundError(installation_dir="/p/x"), ErrorCodes.PROJECT_NOT_FOUND),
        ],
    )
    def test_codes(self, error: ExplorerError, code: str) -> None:
        assert isinstance(error, ExplorerError)
        assert error.code == code

    def test_registry_read_error_details(self) -> None:
        error = RegistryReadError(registry_path="/etc/opt/pvss/pvssInst.conf", reason="Permission denied")
        assert error.registry_path == "/etc/opt/pvss/pvssInst.conf"
        assert "Permission denied" in error.message

    def test_timeout_error_details(self) -> None:
        error = VersionQueryTimeoutError(executable="/opt/WinCC_OA/3.20/bin/WCCILpmon", timeout_ms=10000)
        assert error.timeout_ms == 10000
        assert "10000ms" in str(error)

    def test_project_not_found_details(self) -> None:
        error = ProjectNotFoundError(installation_dir="/p/Acme")
        assert error.details == {"installation_dir": "/p/Acme"}
