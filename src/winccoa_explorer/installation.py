"""Platform-specific lookup of WinCC OA installations, memoized per process.

Each platform supplies a backend; :class:`PathResolver` only orchestrates
caching and ordering. Lookups are never repeated for the lifetime of a
resolver's :class:`InstallationCache`, even if installations change on disk.
A fresh resolver (or cache) is the only way to observe such changes.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import Protocol

logger = logging.getLogger(__name__)

__all__ = [
    "InstallationBackend",
    "UnixInstallationBackend",
    "WindowsInstallationBackend",
    "InstallationCache",
    "PathResolver",
    "default_backend",
    "order_versions",
    "version_sort_key",
]

DEFAULT_UNIX_BASE_DIR = "/opt/WinCC_OA"
WINDOWS_REGISTRY_KEY = r"Software\ETM\WinCC_OA"

_VERSION_DIR = re.compile(r"^\d+\.\d+")
_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


def version_sort_key(version: str) -> int:
    """Return ``major*10000 + minor*100 + patch`` for a dotted version.

    Up to four components are read; only the first three take part in the
    key. Components without leading digits count as zero.
    """
    parts = version.split(".")[:4]
    numbers: list[int] = []
    for part in parts:
        match = _LEADING_DIGITS.match(part)
        numbers.append(int(match.group(1)) if match else 0)
    numbers.extend([0, 0, 0])
    return numbers[0] * 10000 + numbers[1] * 100 + numbers[2]


def order_versions(versions: list[str]) -> list[str]:
    """Sort versions highest first; equal keys keep their input order."""
    return sorted(versions, key=version_sort_key, reverse=True)


class InstallationBackend(Protocol):
    """Platform lookup used by :class:`PathResolver`."""

    def lookup(self, version: str) -> str | None:
        """Return the installation directory of ``version``, or None."""
        ...

    def enumerate_versions(self) -> list[str]:
        """Return every installed version, in any order."""
        ...


class UnixInstallationBackend:
    """Installations live in ``<base_dir>/<version>``."""

    def __init__(self, base_dir: str = DEFAULT_UNIX_BASE_DIR) -> None:
        self.base_dir = base_dir

    def lookup(self, version: str) -> str | None:
        path = os.path.join(self.base_dir, version)
        return path if os.path.isdir(path) else None

    def enumerate_versions(self) -> list[str]:
        try:
            with os.scandir(self.base_dir) as it:
                return [
                    entry.name
                    for entry in it
                    if _VERSION_DIR.match(entry.name) and entry.is_dir()
                ]
        except OSError as e:
            logger.debug("Cannot list installations in %s: %s", self.base_dir, e)
            return []


class WindowsInstallationBackend:
    """Installations are recorded under ``HKLM\\Software\\ETM\\WinCC_OA``."""

    def __init__(self, key_path: str = WINDOWS_REGISTRY_KEY) -> None:
        self.key_path = key_path

    def lookup(self, version: str) -> str | None:
        import winreg

        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, f"{self.key_path}\\{version}") as key:
                value, _ = winreg.QueryValueEx(key, "INSTALLDIR")
        except OSError as e:
            logger.debug("No registry entry for WinCC OA %s: %s", version, e)
            return None

        path = str(value).strip()
        return path if path and os.path.exists(path) else None

    def enumerate_versions(self) -> list[str]:
        import winreg

        versions: list[str] = []
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, self.key_path) as key:
                index = 0
                while True:
                    try:
                        name = winreg.EnumKey(key, index)
                    except OSError:
                        break
                    if re.fullmatch(r"\d+\.\d+(?:\.\d+)?", name):
                        versions.append(name)
                    index += 1
        except OSError as e:
            logger.debug("Cannot open registry key %s: %s", self.key_path, e)
        return versions


def default_backend(platform: str | None = None, base_dir: str = DEFAULT_UNIX_BASE_DIR) -> InstallationBackend:
    platform = platform or sys.platform
    if platform.startswith("win"):
        return WindowsInstallationBackend()
    return UnixInstallationBackend(base_dir=base_dir)


class InstallationCache:
    """Version -> installation directory map plus one cached version list.

    Negative lookups are stored as ``None`` and are cache hits like any other.
    """

    def __init__(self) -> None:
        self._paths: dict[str, str | None] = {}
        self._versions: list[str] | None = None

    def __contains__(self, version: str) -> bool:
        return version in self._paths

    def get(self, version: str) -> str | None:
        return self._paths[version]

    def store(self, version: str, path: str | None) -> None:
        self._paths[version] = path

    @property
    def versions(self) -> list[str] | None:
        return self._versions

    @versions.setter
    def versions(self, versions: list[str]) -> None:
        self._versions = versions


class PathResolver:
    """Cache-backed resolution of installation directories and versions."""

    def __init__(
        self,
        backend: InstallationBackend | None = None,
        cache: InstallationCache | None = None,
    ) -> None:
        self.backend = backend if backend is not None else default_backend()
        self.cache = cache if cache is not None else InstallationCache()

    def resolve(self, version: str) -> str | None:
        """Return the installation directory for ``version`` or None."""
        if version in self.cache:
            return self.cache.get(version)
        path = self.backend.lookup(version)
        self.cache.store(version, path)
        if path is None:
            logger.debug("WinCC OA %s is not installed", version)
        return path

    def list_versions(self) -> list[str]:
        """Return installed versions, highest first, enumerated at most once."""
        cached = self.cache.versions
        if cached is not None:
            return list(cached)
        versions = order_versions(self.backend.enumerate_versions())
        self.cache.versions = versions
        logger.debug("Installed WinCC OA versions: %s", ", ".join(versions) or "none")
        return list(versions)

    def installation_roots(self) -> list[tuple[str, str]]:
        """Return ``(version, directory)`` for every resolvable version."""
        roots: list[tuple[str, str]] = []
        for version in self.list_versions():
            path = self.resolve(version)
            if path is not None:
                roots.append((version, path))
        return roots
