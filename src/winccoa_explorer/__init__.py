"""winccoa_explorer - Discovery and categorization of installed WinCC OA projects."""

from __future__ import annotations

# Core
from winccoa_explorer.explorer import ProjectExplorer, StatusProbe

# Registry
from winccoa_explorer.registry import (
    ProjectRecord,
    RunningStatus,
    VersionPointer,
    load_registry,
    parse_registry_text,
    scan_unregistered_projects,
)

# Installations
from winccoa_explorer.installation import InstallationCache, PathResolver, order_versions

# Categories
from winccoa_explorer.categories import CategoryKind, CategoryNode, categorize, filter_categories

# Config
from winccoa_explorer.config import Config

# Errors
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

# Version query
from winccoa_explorer.version import DetailedVersionInfo, query_version_info

__version__ = "0.1.0"

__all__ = [
    # Core
    "ProjectExplorer",
    "StatusProbe",
    # Registry
    "ProjectRecord",
    "RunningStatus",
    "VersionPointer",
    "load_registry",
    "parse_registry_text",
    "scan_unregistered_projects",
    # Installations
    "InstallationCache",
    "PathResolver",
    "order_versions",
    # Categories
    "CategoryKind",
    "CategoryNode",
    "categorize",
    "filter_categories",
    # Config
    "Config",
    # Errors
    "ErrorCodes",
    "ExplorerError",
    "ConfigError",
    "ConfigNotFoundError",
    "ProjectNotFoundError",
    "RegistryReadError",
    "VersionQueryError",
    "VersionQueryTimeoutError",
    # Version query
    "DetailedVersionInfo",
    "query_version_info",
]
