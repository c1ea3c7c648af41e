"""Project marker detection and the project's own config file."""

from __future__ import annotations

import logging
import os

from winccoa_explorer.registry.parser import iter_sections

logger = logging.getLogger(__name__)

__all__ = ["MARKER_PATH", "marker_path", "is_project_dir", "read_project_version"]

MARKER_PATH = os.path.join("config", "config")


def marker_path(directory: str) -> str:
    return os.path.join(directory, MARKER_PATH)


def is_project_dir(directory: str) -> bool:
    """A directory is a project when its ``config/config`` file exists."""
    return os.path.exists(marker_path(directory))


def read_project_version(directory: str) -> str | None:
    """Return ``proj_version`` from the ``[general]`` section, or None."""
    path = marker_path(directory)
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            text = f.read()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.error("Error reading project config %s: %s", path, e)
        return None

    for section_name, keys in iter_sections(text):
        if section_name.lower() == "general" and keys.get("proj_version"):
            return keys["proj_version"]
    return None
