"""Parser for the pvssInst.conf project registry.

The registry is an ini-like text file::

    [Software\\ETM\\PVSS II\\3.20]
    currentProject = "DemoApp"
    LastUsedProjectDir = "C:/WinCC_OA_Proj"

    [Software\\ETM\\PVSS II\\Configs\\DemoApp]
    InstallationDir = "C:/WinCC_OA_Proj/DemoApp"
    InstallationDate = "2024.11.05 10:12:44"
    notRunnable = 0

Sections with an ``InstallationDir`` become project records, version sections
with a ``currentProject`` name become version pointers. Nothing in the file
is fatal except failing to read it at all.
"""

from __future__ import annotations

import logging
import ntpath
import os
import re
import sys
from typing import Iterator

from winccoa_explorer.errors import RegistryReadError
from winccoa_explorer.registry.types import ProjectRecord, RegistryParseResult, VersionPointer

logger = logging.getLogger(__name__)

__all__ = [
    "WINDOWS_REGISTRY_PATH",
    "UNIX_REGISTRY_PATH",
    "default_registry_path",
    "iter_sections",
    "parse_registry_text",
    "resolve_pointer_dirs",
    "load_registry",
]

WINDOWS_REGISTRY_PATH = "C:\\ProgramData\\Siemens\\WinCC_OA\\pvssInst.conf"
UNIX_REGISTRY_PATH = "/etc/opt/pvss/pvssInst.conf"

_VERSION_SECTION_PATTERNS = (
    re.compile(r"Software\\[^\\]*\\PVSS II\\(\d{1,2}\.\d{1,2}(?:\.\d{1,2})?)\s*$", re.IGNORECASE),
    re.compile(r"PVSS[^I]*II[^0-9]*(\d{1,2}\.\d{1,2}(?:\.\d{1,2})?)\s*$", re.IGNORECASE),
    re.compile(r"[\\/](\d{1,2}\.\d{1,2}(?:\.\d{1,2})?)\s*$"),
)

_KEY_INSTALLATION_DIR = "installationdir"
_KEY_INSTALLATION_DATE = "installationdate"
_KEY_NOT_RUNNABLE = "notrunnable"
_KEY_COMPANY = "company"
_KEY_CURRENT_PROJECT = "currentproject"
_KEY_LAST_USED_DIR = "lastusedprojectdir"

_FLAG_VALUES = frozenset({"true", "false", "1", "0"})


def default_registry_path(platform: str | None = None) -> str:
    """Return the platform-specific location of pvssInst.conf."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return WINDOWS_REGISTRY_PATH
    return UNIX_REGISTRY_PATH


def _unquote(value: str) -> str:
    return value.strip().strip("\"'").strip()


def _parse_bool(value: str) -> bool:
    return value.lower() == "true" or value == "1"


def _section_version(section_name: str) -> str | None:
    for pattern in _VERSION_SECTION_PATTERNS:
        match = pattern.search(section_name)
        if match:
            return match.group(1)
    return None


def iter_sections(text: str) -> Iterator[tuple[str, dict[str, str]]]:
    """Yield ``(section_name, keys)`` pairs in file order.

    Keys are lower-cased and values unquoted; the last duplicate key wins.
    Lines without ``=`` and anything before the first section are ignored.
    """
    name: str | None = None
    keys: dict[str, str] = {}

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#;":
            continue
        if line.startswith("[") and line.endswith("]"):
            if name is not None:
                yield name, keys
            name = line[1:-1].strip()
            keys = {}
        elif name is not None and "=" in line:
            key, _, value = line.partition("=")
            key = key.strip().lower()
            if key:
                keys[key] = _unquote(value)

    if name is not None:
        yield name, keys


def _record_from_section(keys: dict[str, str]) -> ProjectRecord:
    installation_dir = keys[_KEY_INSTALLATION_DIR]
    name = ntpath.basename(installation_dir.rstrip("\\/")) or "Unknown"
    company = keys.get(_KEY_COMPANY) or None
    return ProjectRecord(
        name=name,
        installation_dir=installation_dir,
        installation_date=keys.get(_KEY_INSTALLATION_DATE) or "Unknown",
        runnable=not _parse_bool(keys.get(_KEY_NOT_RUNNABLE, "")),
        company=company,
        current=_parse_bool(keys.get(_KEY_CURRENT_PROJECT, "")),
    )


def parse_registry_text(text: str) -> RegistryParseResult:
    """Parse registry text into project records and version pointers.

    Pure function: no filesystem access. Sections without an installation
    directory contribute no record.
    """
    result = RegistryParseResult()

    for section_name, keys in iter_sections(text):
        installation_dir = keys.get(_KEY_INSTALLATION_DIR)
        if installation_dir:
            result.projects.append(_record_from_section(keys))

        version = _section_version(section_name)
        project_name = keys.get(_KEY_CURRENT_PROJECT)
        # In a project section a boolean currentProject is the record's flag, not a name.
        if installation_dir and project_name and project_name.lower() in _FLAG_VALUES:
            project_name = None
        if version and project_name:
            result.pointers.append(
                VersionPointer(
                    version=version,
                    project_name=project_name,
                    last_used_dir=keys.get(_KEY_LAST_USED_DIR) or None,
                )
            )

    logger.debug(
        "Parsed registry: %d project sections, %d version pointers",
        len(result.projects),
        len(result.pointers),
    )
    return result


def resolve_pointer_dirs(pointers: list[VersionPointer]) -> list[VersionPointer]:
    """Fill in ``installation_dir`` where ``last_used_dir/project_name`` exists.

    Pointers whose join does not exist stay path-less and are matched by
    name and version only.
    """
    for pointer in pointers:
        if not pointer.last_used_dir:
            continue
        candidate = os.path.join(pointer.last_used_dir, pointer.project_name)
        if os.path.exists(candidate):
            pointer.installation_dir = candidate
        else:
            logger.debug(
                "Current project '%s' for %s not found at %s",
                pointer.project_name,
                pointer.version,
                candidate,
            )
    return pointers


def load_registry(registry_path: str) -> RegistryParseResult:
    """Read and parse the registry file, resolving pointer directories.

    A missing file yields an empty result.

    Raises:
        RegistryReadError: If the file exists but cannot be read.
    """
    try:
        with open(registry_path, encoding="utf-8", errors="replace") as f:
            text = f.read()
    except FileNotFoundError:
        logger.warning("Project registry not found: %s", registry_path)
        return RegistryParseResult()
    except OSError as e:
        logger.error("Cannot read project registry %s: %s", registry_path, e)
        raise RegistryReadError(registry_path=registry_path, reason=str(e), cause=e) from e

    result = parse_registry_text(text)
    resolve_pointer_dirs(result.pointers)
    return result
