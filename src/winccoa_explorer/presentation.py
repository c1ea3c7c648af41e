"""Display adapter turning category nodes and records into tree-item views.

The core types stay UI-free; a host tree widget consumes
:class:`TreeItemView` objects and looks records up again through
``ProjectExplorer.get_project(view.project_key)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from winccoa_explorer.categories import CategoryKind, CategoryNode, count_projects
from winccoa_explorer.registry.types import ProjectRecord, RunningStatus

__all__ = ["TreeItemView", "render_category", "render_project", "render_tree", "filter_summary"]

_CATEGORY_TITLES = {
    CategoryKind.CURRENT: "Current Project(s)",
    CategoryKind.RUNNABLE: "Runnable Projects",
    CategoryKind.SYSTEM: "WinCC OA Versions",
    CategoryKind.NOT_REGISTERED: "Unregistered Projects",
}

_CATEGORY_ICONS = {
    CategoryKind.CURRENT: "star-full",
    CategoryKind.RUNNABLE: "rocket",
    CategoryKind.SYSTEM: "gear",
    CategoryKind.SUBPROJECTS: "library",
    CategoryKind.VERSION: "tag",
    CategoryKind.NOT_REGISTERED: "warning",
}

_STATUS_CONTEXT = {
    RunningStatus.RUNNING: "winccOAProjectRunnableRunning",
    RunningStatus.NOT_RUNNING: "winccOAProjectRunnableStopped",
}

_STATUS_ICONS = {
    RunningStatus.RUNNING: "play-circle",
    RunningStatus.NOT_RUNNING: "stop-circle",
}


@dataclass
class TreeItemView:
    label: str
    description: str
    tooltip: str
    icon: str
    context_value: str
    children: list[TreeItemView] = field(default_factory=list)
    project_key: str | None = None


def _category_title(node: CategoryNode) -> str:
    if node.kind is CategoryKind.VERSION:
        return f"Version {node.label}"
    return _CATEGORY_TITLES.get(node.kind, node.label)


def render_category(node: CategoryNode, protected: set[str] | None = None) -> TreeItemView:
    """Render a category with its sub-categories first, then its projects."""
    if node.children:
        total = count_projects(node.children)
        description = f"({len(node.children)} versions, {total} projects)"
    else:
        description = f"({len(node.projects)})"

    if node.kind is CategoryKind.VERSION:
        tooltip = f"WinCC OA {node.version}: {len(node.projects)} sub-project(s)"
    elif node.description:
        tooltip = f"{node.description}\n{count_projects([node])} project(s)"
    else:
        tooltip = f"{count_projects([node])} project(s)"

    children = [render_category(child, protected) for child in node.children]
    children.extend(render_project(p, protected) for p in node.projects)
    return TreeItemView(
        label=_category_title(node),
        description=description,
        tooltip=tooltip,
        icon=_CATEGORY_ICONS.get(node.kind, "folder"),
        context_value="projectVersionCategory" if node.version else "projectCategory",
        children=children,
    )


def _project_type(record: ProjectRecord) -> str:
    if record.unregistered:
        return "Unregistered WinCC OA Project"
    if record.is_system:
        return "WinCC OA System Installation"
    if record.runnable:
        return "WinCC OA Project"
    return "WinCC OA Extension/Plugin"


def render_project(record: ProjectRecord, protected: set[str] | None = None) -> TreeItemView:
    """Render one record.

    Args:
        record: The project to render.
        protected: Keys of records that may not be unregistered.
    """
    is_protected = protected is not None and record.key in protected

    if record.is_system:
        context_value = "winccOASystemProject"
    elif record.unregistered:
        context_value = "winccOAProjectUnregistered"
    elif is_protected:
        context_value = "winccOAProjectProtected"
    elif record.runnable:
        context_value = _STATUS_CONTEXT.get(record.running_status, "winccOAProjectRunnable")
    else:
        context_value = "winccOAProject"

    labels: list[str] = []
    if record.unregistered:
        labels.append("Unregistered")
    elif is_protected:
        labels.append("Protected")
    elif record.current:
        labels.append("Current")
    if record.version:
        labels.append(f"v{record.version}")
    if record.is_system:
        labels.append("System")
    elif record.runnable:
        labels.append("Project")
    else:
        labels.append("Extension")

    lines = [
        f"Name: {record.name}",
        f"Location: {record.installation_dir}",
        f"Created: {record.installation_date}",
        f"Type: {_project_type(record)}",
    ]
    if record.version:
        lines.append(f"Version: {record.version}")
    if record.company:
        lines.append(f"Company: {record.company}")
    if record.unregistered:
        lines.insert(0, "NOT REGISTERED IN PVSS CONFIGURATION")
    elif is_protected:
        lines.insert(0, "PROTECTED FROM UNREGISTRATION")
    elif record.current:
        lines.insert(0, "*** CURRENT PROJECT ***")

    if record.unregistered:
        icon = "warning"
    elif record.current:
        icon = "star-full"
    elif record.is_system:
        icon = "gear"
    elif record.runnable:
        icon = _STATUS_ICONS.get(record.running_status, "server-process")
    else:
        icon = "extensions"

    return TreeItemView(
        label=record.name,
        description=" • ".join(labels),
        tooltip="\n".join(lines),
        icon=icon,
        context_value=context_value,
        project_key=record.key,
    )


def render_tree(categories: list[CategoryNode], protected: set[str] | None = None) -> list[TreeItemView]:
    return [render_category(node, protected) for node in categories]


def filter_summary(filter_text: str, shown: int, total: int) -> str:
    if not filter_text:
        return "Filter cleared - Showing all projects"
    return f'Filter: "{filter_text}" - Showing {shown} of {total} projects'
