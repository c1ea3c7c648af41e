"""Registry types: ProjectRecord, VersionPointer, RunningStatus."""

from __future__ import annotations

import enum
import posixpath
from dataclasses import dataclass, field

__all__ = [
    "ProjectRecord",
    "VersionPointer",
    "RunningStatus",
    "RegistryParseResult",
    "normalize_path",
]


def normalize_path(path: str) -> str:
    """Return the identity key for an installation directory.

    Case-insensitive and separator-insensitive: ``C:\\Proj\\Acme\\`` and
    ``c:/proj/acme`` map to the same key.
    """
    unified = path.strip().replace("\\", "/")
    if not unified:
        return ""
    return posixpath.normpath(unified).lower()


class RunningStatus(str, enum.Enum):
    """Runtime state of a project as last reported by the status probe."""

    UNKNOWN = "unknown"
    RUNNING = "running"
    NOT_RUNNING = "not-running"
    NOT_RUNNABLE = "not-runnable"
    SYSTEM_PROJECT = "system-project"


@dataclass
class ProjectRecord:
    """In-memory representation of one project.

    Attributes:
        name: Display name (base name of the installation directory).
        installation_dir: Absolute installation directory.
        installation_date: Best-effort installation date string.
        runnable: Whether the project can be started.
        company: Optional company that created the project.
        version: Resolved platform version, if known.
        current: Whether this is the current project of its version.
        unregistered: Found on disk but absent from the registry.
        running_status: Last known runtime state.
    """

    name: str
    installation_dir: str
    installation_date: str = "Unknown"
    runnable: bool = True
    company: str | None = None
    version: str | None = None
    current: bool = False
    unregistered: bool = False
    running_status: RunningStatus = RunningStatus.UNKNOWN

    @property
    def key(self) -> str:
        """Normalized installation directory used as identity key."""
        return normalize_path(self.installation_dir)

    @property
    def is_system(self) -> bool:
        """A platform system installation is named after its own version."""
        return self.version is not None and self.name == self.version


@dataclass
class VersionPointer:
    """The current project declared by a version-scoped registry section."""

    version: str
    project_name: str
    last_used_dir: str | None = None
    installation_dir: str | None = None


@dataclass
class RegistryParseResult:
    """Everything recovered from one registry text."""

    projects: list[ProjectRecord] = field(default_factory=list)
    pointers: list[VersionPointer] = field(default_factory=list)
