"""Detailed version information from a WinCC OA installation's pmon binary.

``WCCILpmon -version`` prints a line such as::

    WCCILpmon    (1), 2025.11.03 15:15:01.846: 3.20.5 platform Windows AMD64 linked at Mar  2 2025 09:51:08 (faf9f4332a)

The query is the only suspending operation in the package: it runs the
binary as a child process and awaits it with a timeout.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import sys
from dataclasses import dataclass

from winccoa_explorer.errors import VersionQueryError, VersionQueryTimeoutError

logger = logging.getLogger(__name__)

__all__ = ["DetailedVersionInfo", "parse_version_output", "pmon_executable", "query_version_info"]

DEFAULT_TIMEOUT_MS = 10000

_FULL_PATTERN = re.compile(
    r"WCCILpmon.*?(\d{4})\.(\d{2})\.(\d{2})\s+(\d{2}):(\d{2}):(\d{2})\.(\d{3}):\s*"
    r"(\d+\.\d+(?:\.\d+)?(?:\.\d+)?)\s+platform\s+(\w+(?:\s+\w+)*)\s+linked\s+at\s+(.+?)\s+\(([a-f0-9]+)\)",
    re.IGNORECASE,
)
_PARTIAL_PATTERN = re.compile(r"(\d+\.\d+(?:\.\d+)?(?:\.\d+)?)\s+platform\s+(\w+(?:[ \t]+\w+)*)", re.IGNORECASE)
_VERSION_ONLY_PATTERN = re.compile(r"(\d+\.\d+(?:\.\d+)?(?:\.\d+)?)")


@dataclass(frozen=True)
class DetailedVersionInfo:
    """Parsed ``-version`` output of an installation."""

    version: str
    platform: str
    architecture: str
    build_date: str
    commit_hash: str
    executable_path: str
    raw_output: str


def _split_platform(platform_and_arch: str) -> tuple[str, str]:
    parts = platform_and_arch.split()
    platform = parts[0] if parts else "Unknown"
    architecture = " ".join(parts[1:]) if len(parts) > 1 else "Unknown"
    return platform, architecture


def parse_version_output(output: str, executable_path: str) -> DetailedVersionInfo:
    """Parse ``-version`` output; fields that cannot be found are "Unknown"."""
    unknown = DetailedVersionInfo(
        version="Unknown",
        platform="Unknown",
        architecture="Unknown",
        build_date="Unknown",
        commit_hash="Unknown",
        executable_path=executable_path,
        raw_output=output,
    )
    if not output or not output.strip():
        return unknown

    match = _FULL_PATTERN.search(output)
    if match:
        platform, architecture = _split_platform(match.group(9))
        return DetailedVersionInfo(
            version=match.group(8),
            platform=platform,
            architecture=architecture,
            build_date=match.group(10).strip(),
            commit_hash=match.group(11),
            executable_path=executable_path,
            raw_output=output,
        )

    match = _PARTIAL_PATTERN.search(output)
    if match:
        platform, architecture = _split_platform(match.group(2))
        return DetailedVersionInfo(
            version=match.group(1),
            platform=platform,
            architecture=architecture,
            build_date="Not available",
            commit_hash="Not available",
            executable_path=executable_path,
            raw_output=output,
        )

    match = _VERSION_ONLY_PATTERN.search(output)
    if match:
        return DetailedVersionInfo(
            version=match.group(1),
            platform="Unknown",
            architecture="Unknown",
            build_date="Unknown",
            commit_hash="Unknown",
            executable_path=executable_path,
            raw_output=output,
        )
    return unknown


def pmon_executable(installation_dir: str, platform: str | None = None) -> str:
    """Path of the pmon binary inside an installation directory."""
    platform = platform or sys.platform
    name = "WCCILpmon.exe" if platform.startswith("win") else "WCCILpmon"
    return os.path.join(installation_dir, "bin", name)


async def query_version_info(executable: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> DetailedVersionInfo:
    """Run ``<executable> -version`` and parse its output.

    Raises:
        VersionQueryError: If the process cannot be started, or exits
            non-zero without printing anything.
        VersionQueryTimeoutError: If it does not finish within ``timeout_ms``.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            "-version",
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise VersionQueryError(f"Failed to execute {executable}: {e}", executable=executable, cause=e) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_ms / 1000.0)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise VersionQueryTimeoutError(executable=executable, timeout_ms=timeout_ms)

    out = stdout.decode(errors="replace")
    err = stderr.decode(errors="replace")
    if process.returncode != 0 and not out.strip():
        raise VersionQueryError(
            f"{executable} exited with code {process.returncode}: {err.strip() or 'No error details available'}",
            executable=executable,
        )

    logger.debug("%s -version exited with code %s", executable, process.returncode)
    return parse_version_output(out + err, executable)
