"""Project explorer: registry + discovery + categorization behind one facade."""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from winccoa_explorer.categories import (
    CategoryNode,
    can_unregister,
    categorize,
    count_projects,
    filter_categories,
)
from winccoa_explorer.errors import ProjectNotFoundError, RegistryReadError, VersionQueryError
from winccoa_explorer.installation import DEFAULT_UNIX_BASE_DIR, PathResolver, default_backend
from winccoa_explorer.registry.parser import default_registry_path, load_registry
from winccoa_explorer.registry.project_config import is_project_dir, read_project_version
from winccoa_explorer.registry.scanner import scan_unregistered_projects
from winccoa_explorer.registry.types import (
    ProjectRecord,
    RegistryParseResult,
    RunningStatus,
    VersionPointer,
    normalize_path,
)
from winccoa_explorer.version import DetailedVersionInfo, pmon_executable, query_version_info

if TYPE_CHECKING:
    from winccoa_explorer.config import Config

logger = logging.getLogger(__name__)

__all__ = ["ProjectExplorer", "StatusProbe"]

StatusProbe = Callable[[ProjectRecord], Awaitable[RunningStatus]]


def _initial_status(record: ProjectRecord) -> RunningStatus:
    if record.is_system:
        return RunningStatus.SYSTEM_PROJECT
    if not record.runnable:
        return RunningStatus.NOT_RUNNABLE
    return RunningStatus.UNKNOWN


class ProjectExplorer:
    """Discovers, categorizes and filters the installed WinCC OA projects.

    Every :meth:`refresh` rebuilds records and categories from scratch; only
    the resolver's installation cache outlives a refresh.
    """

    def __init__(
        self,
        config: Config | None = None,
        registry_path: str | None = None,
        search_roots: Callable[[], list[str]] | list[str] | None = None,
        resolver: PathResolver | None = None,
    ) -> None:
        """Initialize the explorer.

        Args:
            config: Optional Config for registry location, discovery limits
                and query timeouts.
            registry_path: Registry file; overrides ``registry.path``.
            search_roots: Directories scanned for unregistered projects, or a
                callable returning them at refresh time (the host's open
                folders).
            resolver: Installation resolver; one is built from config if omitted.
        """
        self._config = config
        self._registry_path = registry_path or self._config_get("registry.path") or default_registry_path()
        self._search_roots = search_roots

        if resolver is None:
            base_dir = self._config_get("installation.base_dir", DEFAULT_UNIX_BASE_DIR)
            resolver = PathResolver(backend=default_backend(base_dir=base_dir))
        self.resolver = resolver

        self._projects: list[ProjectRecord] = []
        self._by_key: dict[str, ProjectRecord] = {}
        self._categories: list[CategoryNode] = []
        self._filtered: list[CategoryNode] = []
        self._filter = ""
        self._lock = threading.Lock()
        self._generation = 0
        self._committed_generation = 0

    def _config_get(self, key: str, default: Any = None) -> Any:
        if self._config is None:
            return default
        return self._config.get(key, default)

    @property
    def registry_path(self) -> str:
        return self._registry_path

    @property
    def current_filter(self) -> str:
        return self._filter

    @property
    def categories(self) -> list[CategoryNode]:
        """The unfiltered category tree of the last refresh."""
        return self._categories

    # ----- Refresh -----

    def refresh(self) -> list[CategoryNode]:
        """Rebuild the project set and category tree.

        Returns:
            The visible categories (filtered if a filter is active).

        Raises:
            RegistryReadError: If the registry exists but cannot be read. The
                explorer is left with no projects and no categories.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation

        try:
            registry = load_registry(self._registry_path)
        except RegistryReadError:
            self._commit(generation, [], [])
            raise

        projects = self._registered_projects(registry)
        registered = {p.key for p in projects}
        max_depth = self._config_get("discovery.max_depth", 3)
        projects.extend(
            scan_unregistered_projects(
                self._roots(),
                registered,
                max_depth=max_depth,
                follow_symlinks=self._config_get("discovery.follow_symlinks", False),
                extra_skip_dirs=self._config_get("discovery.extra_skip_dirs", []),
            )
        )

        for project in projects:
            project.running_status = _initial_status(project)

        categories = categorize(projects, self.resolver.installation_roots())
        self._commit(generation, projects, categories)
        logger.info(
            "WinCC OA projects loaded: %d total, %d categories",
            len(projects),
            len(categories),
        )
        return self.visible_categories()

    def _commit(self, generation: int, projects: list[ProjectRecord], categories: list[CategoryNode]) -> None:
        with self._lock:
            if generation < self._committed_generation:
                logger.debug(
                    "Discarding refresh %d, refresh %d already committed",
                    generation,
                    self._committed_generation,
                )
                return
            self._committed_generation = generation
            self._projects = projects
            self._by_key = {p.key: p for p in projects}
            self._categories = categories
            self._filtered = filter_categories(categories, self._filter) if self._filter else []

    def _roots(self) -> list[str]:
        roots = self._search_roots
        if callable(roots):
            roots = roots()
        return list(roots or [])

    def _registered_projects(self, registry: RegistryParseResult) -> list[ProjectRecord]:
        pointer_keys = {(p.project_name, p.version) for p in registry.pointers}
        projects: list[ProjectRecord] = []
        by_key: dict[str, ProjectRecord] = {}

        for record in registry.projects:
            if record.key in by_key:
                logger.debug("Duplicate registry entry for %s, keeping the first", record.installation_dir)
                continue
            record.runnable = record.runnable and is_project_dir(record.installation_dir)
            if record.runnable:
                record.version = read_project_version(record.installation_dir)
            record.current = record.current or (record.name, record.version or "unknown") in pointer_keys
            projects.append(record)
            by_key[record.key] = record

        for pointer in registry.pointers:
            self._apply_pointer(pointer, projects, by_key)
        return projects

    def _apply_pointer(
        self,
        pointer: VersionPointer,
        projects: list[ProjectRecord],
        by_key: dict[str, ProjectRecord],
    ) -> None:
        if any(p.name == pointer.project_name and p.version == pointer.version for p in projects):
            return
        if not pointer.installation_dir or not os.path.exists(pointer.installation_dir):
            return

        existing = by_key.get(normalize_path(pointer.installation_dir))
        if existing is not None:
            existing.current = True
            return

        runnable = is_project_dir(pointer.installation_dir)
        version = read_project_version(pointer.installation_dir) if runnable else None
        record = ProjectRecord(
            name=pointer.project_name,
            installation_dir=pointer.installation_dir,
            installation_date="Unknown",
            runnable=runnable,
            version=version or pointer.version,
            current=True,
        )
        projects.append(record)
        by_key[record.key] = record

    # ----- Filtering -----

    def set_filter(self, text: str) -> list[CategoryNode]:
        """Apply a search filter; an empty filter restores the full tree."""
        self._filter = text.strip().lower()
        if not self._filter:
            self._filtered = []
            return self._categories
        self._filtered = filter_categories(self._categories, self._filter)
        logger.debug(
            "Filter '%s' shows %d of %d projects",
            self._filter,
            count_projects(self._filtered),
            len(self._projects),
        )
        return self._filtered

    def visible_categories(self) -> list[CategoryNode]:
        return self._filtered if self._filter else self._categories

    def filtered_count(self) -> int:
        return count_projects(self.visible_categories())

    # ----- Lookup -----

    def get_projects(self) -> list[ProjectRecord]:
        return list(self._projects)

    def get_project(self, installation_dir: str, strict: bool = False) -> ProjectRecord | None:
        """Look up a record by installation directory (case/separator-insensitive).

        Raises:
            ProjectNotFoundError: If ``strict`` and no record matches.
        """
        record = self._by_key.get(normalize_path(installation_dir))
        if record is None and strict:
            raise ProjectNotFoundError(installation_dir=installation_dir)
        return record

    def can_unregister(self, record: ProjectRecord) -> tuple[bool, str | None]:
        return can_unregister(record, self.resolver.installation_roots())

    def protected_keys(self) -> set[str]:
        """Keys of the records that may not be unregistered, for the display adapter."""
        roots = self.resolver.installation_roots()
        return {p.key for p in self._projects if not can_unregister(p, roots)[0]}

    # ----- External collaborators -----

    async def update_running_statuses(self, probe: StatusProbe) -> None:
        """Ask ``probe`` for the state of every runnable, non-system project.

        A probe failure leaves that project's status ``UNKNOWN``.
        """
        for project in list(self._projects):
            if not project.runnable or project.is_system:
                continue
            try:
                project.running_status = await probe(project)
            except Exception as e:
                logger.error("Status check failed for project '%s': %s", project.name, e)
                project.running_status = RunningStatus.UNKNOWN

    async def detailed_version(self, record: ProjectRecord) -> DetailedVersionInfo:
        """Query the pmon binary of a system installation for its version.

        Raises:
            VersionQueryError: If the record is not a system installation or
                the query fails.
            VersionQueryTimeoutError: If the query times out.
        """
        if not record.is_system:
            raise VersionQueryError("Version information is only available for WinCC OA system installations")
        installation_dir = self.resolver.resolve(record.version) or record.installation_dir
        executable = pmon_executable(installation_dir)
        timeout_ms = self._config_get("version_query.timeout_ms", 10000)
        return await query_version_info(executable, timeout_ms=timeout_ms)
