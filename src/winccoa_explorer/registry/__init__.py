"""Project registry parsing and unregistered project discovery.

Usage::

    from winccoa_explorer.registry import load_registry, scan_unregistered_projects

    registry = load_registry("/etc/opt/pvss/pvssInst.conf")
    known = {p.key for p in registry.projects}
    orphans = scan_unregistered_projects(["/home/me/projects"], known)
"""

from __future__ import annotations

from winccoa_explorer.registry.parser import (
    default_registry_path,
    iter_sections,
    load_registry,
    parse_registry_text,
    resolve_pointer_dirs,
)
from winccoa_explorer.registry.project_config import is_project_dir, read_project_version
from winccoa_explorer.registry.scanner import scan_unregistered_projects
from winccoa_explorer.registry.types import (
    ProjectRecord,
    RegistryParseResult,
    RunningStatus,
    VersionPointer,
    normalize_path,
)

__all__ = [
    "ProjectRecord",
    "RegistryParseResult",
    "RunningStatus",
    "VersionPointer",
    "default_registry_path",
    "is_project_dir",
    "iter_sections",
    "load_registry",
    "normalize_path",
    "parse_registry_text",
    "read_project_version",
    "resolve_pointer_dirs",
    "scan_unregistered_projects",
]
