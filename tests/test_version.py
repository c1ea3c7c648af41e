"""Tests for pmon version output parsing and the async version query."""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from winccoa_explorer.errors import VersionQueryError, VersionQueryTimeoutError
from winccoa_explorer.version import parse_version_output, pmon_executable, query_version_info

FULL_OUTPUT = (
    "WCCILpmon    (1), 2025.11.03 15:15:01.846: 3.20.5 platform Windows AMD64 "
    "linked at Mar  2 2025 09:51:08 (faf9f4332a)\n"
)

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="uses a POSIX shell script")


def _script(directory: Path, body: str) -> str:
    path = directory / "WCCILpmon"
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


# === parse_version_output() ===


class TestParseVersionOutput:
    def test_full_output(self) -> None:
        info = parse_version_output(FULL_OUTPUT, "/opt/WinCC_OA/3.20/bin/WCCILpmon")
        assert info.version == "3.20.5"
        assert info.platform == "Windows"
        assert info.architecture == "AMD64"
        assert info.build_date == "Mar  2 2025 09:51:08"
        assert info.commit_hash == "faf9f4332a"
        assert info.executable_path == "/opt/WinCC_OA/3.20/bin/WCCILpmon"
        assert info.raw_output == FULL_OUTPUT

    def test_partial_output(self) -> None:
        """Platform without link information: build fields are not available."""
        info = parse_version_output("3.19 platform Linux x86_64\n", "pmon")
        assert (info.version, info.platform, info.architecture) == ("3.19", "Linux", "x86_64")
        assert info.build_date == "Not available"
        assert info.commit_hash == "Not available"

    def test_platform_without_architecture(self) -> None:
        info = parse_version_output("3.19 platform Linux", "pmon")
        assert info.platform == "Linux"
        assert info.architecture == "Unknown"

    def test_version_only(self) -> None:
        info = parse_version_output("WinCC OA version 3.18.2", "pmon")
        assert info.version == "3.18.2"
        assert info.platform == "Unknown"
        assert info.commit_hash == "Unknown"

    @pytest.mark.parametrize("output", ["", "   \n", "no version here"])
    def test_unparseable(self, output: str) -> None:
        info = parse_version_output(output, "pmon")
        assert info.version == "Unknown"
        assert info.build_date == "Unknown"
        assert info.raw_output == output


# === pmon_executable() ===


class TestPmonExecutable:
    def test_windows_name(self) -> None:
        assert pmon_executable("C:/Siemens/WinCC_OA/3.20", platform="win32").endswith("WCCILpmon.exe")

    def test_unix_name(self) -> None:
        path = pmon_executable("/opt/WinCC_OA/3.20", platform="linux")
        assert Path(path).parts[-2:] == ("bin", "WCCILpmon")


# === query_version_info() ===


@posix_only
class TestQueryVersionInfo:
    @pytest.mark.asyncio
    async def test_parses_process_output(self, tmp_path: Path) -> None:
        executable = _script(tmp_path, f"echo '{FULL_OUTPUT.strip()}'")
        info = await query_version_info(executable)
        assert info.version == "3.20.5"
        assert info.commit_hash == "faf9f4332a"
        assert info.executable_path == executable

    @pytest.mark.asyncio
    async def test_stderr_output_is_parsed(self, tmp_path: Path) -> None:
        executable = _script(tmp_path, "echo '3.19 platform Linux x86_64' >&2")
        info = await query_version_info(executable)
        assert info.version == "3.19"

    @pytest.mark.asyncio
    async def test_nonzero_exit_with_output_still_parsed(self, tmp_path: Path) -> None:
        executable = _script(tmp_path, "echo '3.19 platform Linux x86_64'; exit 1")
        info = await query_version_info(executable)
        assert info.version == "3.19"

    @pytest.mark.asyncio
    async def test_nonzero_exit_without_output(self, tmp_path: Path) -> None:
        executable = _script(tmp_path, "echo 'license missing' >&2; exit 2")
        with pytest.raises(VersionQueryError) as exc_info:
            await query_version_info(executable)
        assert "license missing" in exc_info.value.message
        assert exc_info.value.details["executable"] == executable

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path: Path) -> None:
        with pytest.raises(VersionQueryError):
            await query_version_info(str(tmp_path / "bin" / "WCCILpmon"))

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path: Path) -> None:
        executable = _script(tmp_path, "exec sleep 5")
        with pytest.raises(VersionQueryTimeoutError) as exc_info:
            await query_version_info(executable, timeout_ms=200)
        assert exc_info.value.timeout_ms == 200
