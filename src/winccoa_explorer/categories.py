"""Partitioning of project records into a category tree, and text filtering.

Category order is fixed: Current, Runnable, System, Delivered Sub-Projects,
User Sub-Projects, Unregistered. Each record lands in exactly one category;
the first matching rule wins, with unregistered records checked first.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

from winccoa_explorer.registry.project_config import read_project_version
from winccoa_explorer.registry.types import ProjectRecord, normalize_path

logger = logging.getLogger(__name__)

__all__ = [
    "CategoryKind",
    "CategoryNode",
    "UNKNOWN_VERSION",
    "sort_projects",
    "categorize",
    "filter_categories",
    "project_matches",
    "resolve_project_version",
    "is_delivered_subproject",
    "can_unregister",
    "count_projects",
]

UNKNOWN_VERSION = "Unknown"

_INSTALL_PATH_VERSION = re.compile(r"WinCC_OA[\\/](\d+\.\d+(?:\.\d+)?(?:\.\d+)?)", re.IGNORECASE)
_NAME_VERSION = re.compile(r"(\d+\.\d+(?:\.\d+)?(?:\.\d+)?)")


class CategoryKind(str, enum.Enum):
    CURRENT = "current"
    RUNNABLE = "runnable"
    SYSTEM = "system"
    SUBPROJECTS = "subprojects"
    NOT_REGISTERED = "notregistered"
    VERSION = "version"


@dataclass
class CategoryNode:
    """One node of the category tree.

    Only ``SUBPROJECTS`` nodes have children, one ``VERSION`` node per
    version group. ``VERSION`` nodes are always leaves.
    """

    label: str
    kind: CategoryKind
    projects: list[ProjectRecord] = field(default_factory=list)
    children: list[CategoryNode] = field(default_factory=list)
    version: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        if self.kind is CategoryKind.VERSION and self.children:
            raise ValueError("version categories cannot have children")

    def is_empty(self) -> bool:
        return not self.projects and not self.children


def _rank(record: ProjectRecord) -> int:
    if record.current:
        return 0
    if record.runnable and not record.is_system:
        return 1
    if record.is_system:
        return 2
    return 3


def sort_projects(projects: list[ProjectRecord]) -> list[ProjectRecord]:
    """Current first, then runnable, then system, then the rest; by name within."""
    return sorted(projects, key=lambda p: (_rank(p), p.name.casefold(), p.name))


def _is_under(path_key: str, root_key: str) -> bool:
    return bool(root_key) and path_key.startswith(root_key.rstrip("/") + "/")


def is_delivered_subproject(record: ProjectRecord, roots: list[tuple[str, str]]) -> bool:
    """True when the record lives beneath a resolved installation directory."""
    key = record.key
    return any(_is_under(key, normalize_path(path)) for _, path in roots)


def resolve_project_version(record: ProjectRecord, roots: list[tuple[str, str]]) -> str | None:
    """Best-effort version of a sub-project.

    Tried in order: the record's own version, ``proj_version`` from its config
    file, the installation root it lives under, a ``WinCC_OA/<version>`` path
    segment, a version number in its name.
    """
    if record.version:
        return record.version

    version = read_project_version(record.installation_dir)
    if version:
        return version

    key = record.key
    for root_version, path in roots:
        if _is_under(key, normalize_path(path)):
            return root_version

    match = _INSTALL_PATH_VERSION.search(record.installation_dir)
    if match:
        return match.group(1)

    match = _NAME_VERSION.search(record.name)
    if match:
        return match.group(1)
    return None


def can_unregister(record: ProjectRecord, roots: list[tuple[str, str]]) -> tuple[bool, str | None]:
    """Whether a record may be removed from the registry, with the reason if not."""
    if record.is_system:
        return False, "Cannot unregister WinCC OA system installations"
    if not record.runnable and is_delivered_subproject(record, roots):
        return False, "Cannot unregister WinCC OA delivered sub-projects"
    return True, None


def _subprojects_node(
    label: str,
    description: str,
    projects: list[ProjectRecord],
    roots: list[tuple[str, str]],
) -> CategoryNode:
    groups: dict[str, list[ProjectRecord]] = {}
    for project in projects:
        version = resolve_project_version(project, roots) or UNKNOWN_VERSION
        groups.setdefault(version, []).append(project)

    children = [
        CategoryNode(label=version, kind=CategoryKind.VERSION, projects=groups[version], version=version)
        for version in sorted(groups)
    ]
    return CategoryNode(label=label, kind=CategoryKind.SUBPROJECTS, children=children, description=description)


def categorize(projects: list[ProjectRecord], roots: list[tuple[str, str]] | None = None) -> list[CategoryNode]:
    """Build the top-level category list for a merged project set.

    Args:
        projects: Registry, pointer and discovery records, deduplicated.
        roots: ``(version, directory)`` pairs of resolved installations,
            used to tell delivered sub-projects from user sub-projects.

    Returns:
        Category nodes in display order. The Runnable category is always
        present; every other category only when it has content.
    """
    roots = roots or []
    current: list[ProjectRecord] = []
    runnable: list[ProjectRecord] = []
    system: list[ProjectRecord] = []
    delivered: list[ProjectRecord] = []
    user: list[ProjectRecord] = []
    unregistered: list[ProjectRecord] = []

    for project in sort_projects(projects):
        if project.unregistered:
            unregistered.append(project)
        elif project.current:
            current.append(project)
        elif project.runnable and not project.is_system:
            runnable.append(project)
        elif project.is_system:
            system.append(project)
        elif is_delivered_subproject(project, roots):
            delivered.append(project)
        else:
            user.append(project)

    categories: list[CategoryNode] = []
    if current:
        categories.append(CategoryNode(label="Current", kind=CategoryKind.CURRENT, projects=current))
    categories.append(CategoryNode(label="Runnable", kind=CategoryKind.RUNNABLE, projects=runnable))
    if system:
        categories.append(CategoryNode(label="System", kind=CategoryKind.SYSTEM, projects=system))
    if delivered:
        categories.append(
            _subprojects_node("Delivered Sub-Projects", "Delivered by WinCC OA installation", delivered, roots)
        )
    if user:
        categories.append(_subprojects_node("User Sub-Projects", "Manually registered sub-projects", user, roots))
    if unregistered:
        categories.append(
            CategoryNode(
                label="Unregistered",
                kind=CategoryKind.NOT_REGISTERED,
                projects=unregistered,
                description="Found projects that are not registered in pvssInst.conf",
            )
        )

    logger.debug(
        "Categorized %d projects into %d categories (%d current)",
        len(projects),
        len(categories),
        len(current),
    )
    return categories


def project_matches(record: ProjectRecord, term: str) -> bool:
    """Case-insensitive substring match on name, directory, version and company."""
    term = term.lower()
    fields = (record.name, record.installation_dir, record.version or "", record.company or "")
    return any(term in value.lower() for value in fields)


def _filter_node(node: CategoryNode, term: str) -> CategoryNode | None:
    projects = [p for p in node.projects if project_matches(p, term)]
    children = [c for c in (_filter_node(child, term) for child in node.children) if c is not None]
    if not projects and not children:
        return None
    return CategoryNode(
        label=node.label,
        kind=node.kind,
        projects=projects,
        children=children,
        version=node.version,
        description=node.description,
    )


def filter_categories(categories: list[CategoryNode], term: str) -> list[CategoryNode]:
    """Return a pruned copy of ``categories`` keeping only matching records.

    Empty categories are dropped, the Runnable category included. The input
    tree is not modified.
    """
    term = term.strip().lower()
    if not term:
        return categories
    return [c for c in (_filter_node(node, term) for node in categories) if c is not None]


def count_projects(categories: list[CategoryNode]) -> int:
    return sum(len(node.projects) + count_projects(node.children) for node in categories)
