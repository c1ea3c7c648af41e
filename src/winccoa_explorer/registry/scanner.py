"""Directory scanner for discovering unregistered projects."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from typing import Iterable

from winccoa_explorer.registry.project_config import is_project_dir, read_project_version
from winccoa_explorer.registry.types import ProjectRecord, normalize_path

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_MAX_DEPTH", "SKIP_DIR_NAMES", "scan_unregistered_projects", "should_skip_dir"]

DEFAULT_MAX_DEPTH = 3

SKIP_DIR_NAMES = frozenset(
    {
        # version control
        ".git",
        ".svn",
        ".hg",
        # node
        "node_modules",
        ".npm",
        # build output
        "bin",
        "obj",
        "build",
        "dist",
        "out",
        # temp, cache, logs
        "temp",
        "tmp",
        ".tmp",
        "cache",
        ".cache",
        "logs",
        "log",
        "__pycache__",
        ".pytest_cache",
        # IDEs
        ".vs",
        ".vscode",
        ".idea",
        # OS trash
        "$Recycle.Bin",
        "System Volume Information",
        ".Trash",
        ".Trashes",
    }
)


def should_skip_dir(name: str, extra_skip: Iterable[str] = ()) -> bool:
    return name.startswith(".") or name in SKIP_DIR_NAMES or name in extra_skip


def _creation_date(path: str) -> str:
    try:
        st = os.stat(path)
    except OSError:
        return date.today().isoformat()
    # st_ctime is the inode change time on Linux, only an approximation of creation.
    created = getattr(st, "st_birthtime", None) or st.st_ctime
    return datetime.fromtimestamp(created).date().isoformat()


def _unregistered_record(path: str) -> ProjectRecord:
    return ProjectRecord(
        name=os.path.basename(path.rstrip("\\/")),
        installation_dir=path,
        installation_date=_creation_date(path),
        runnable=True,
        version=read_project_version(path),
        unregistered=True,
    )


def scan_unregistered_projects(
    roots: list[str],
    registered: set[str],
    max_depth: int = DEFAULT_MAX_DEPTH,
    follow_symlinks: bool = False,
    extra_skip_dirs: Iterable[str] = (),
) -> list[ProjectRecord]:
    """Walk ``roots`` for project directories missing from ``registered``.

    Args:
        roots: Absolute directories to search (the host's open folders).
        registered: Normalized installation directories already known.
        max_depth: Deepest directory level visited below each root.
        follow_symlinks: Descend into symlinked directories (cycle-guarded).
        extra_skip_dirs: Additional directory names never descended into.

    Returns:
        One unregistered ProjectRecord per project directory found. Project
        directories are leaves: nothing beneath them is visited.
    """
    if not roots:
        logger.info("No search roots supplied, skipping unregistered project scan")
        return []

    extra_skip = frozenset(extra_skip_dirs)
    results: list[ProjectRecord] = []
    seen: set[str] = set()

    for root in roots:
        if not os.path.isdir(root):
            logger.warning("Search root does not exist, skipping: %s", root)
            continue

        visited_real_paths: set[str] = set()
        stack: list[tuple[str, int]] = [(root, 0)]

        while stack:
            dir_path, depth = stack.pop()
            real_path = os.path.realpath(dir_path)
            if real_path in visited_real_paths:
                continue
            visited_real_paths.add(real_path)

            if is_project_dir(dir_path):
                key = normalize_path(dir_path)
                if key not in registered and key not in seen:
                    seen.add(key)
                    record = _unregistered_record(dir_path)
                    logger.info("Found unregistered project: %s at %s", record.name, dir_path)
                    results.append(record)
                continue

            if depth >= max_depth:
                continue

            try:
                with os.scandir(dir_path) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                logger.debug("Skipping directory %s: %s", dir_path, e)
                continue

            children: list[str] = []
            for entry in entries:
                if should_skip_dir(entry.name, extra_skip):
                    continue
                try:
                    if not entry.is_dir(follow_symlinks=follow_symlinks):
                        continue
                    is_symlink = entry.is_symlink()
                except OSError as e:
                    logger.debug("Skipping %s: %s", entry.path, e)
                    continue

                if is_symlink:
                    real = os.path.realpath(entry.path)
                    if real in visited_real_paths:
                        logger.warning("Symlink cycle detected at %s -> %s, skipping", entry.path, real)
                        continue
                children.append(entry.path)

            stack.extend((child, depth + 1) for child in reversed(children))

    logger.info("Found %d unregistered projects in %d search roots", len(results), len(roots))
    return results
