"""Shared pytest fixtures for the explorer test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from winccoa_explorer.installation import InstallationCache, PathResolver


class FakeBackend:
    """In-memory installation backend that counts its lookups."""

    def __init__(self, installations: dict[str, str] | None = None) -> None:
        self.installations = dict(installations or {})
        self.lookups: list[str] = []
        self.enumerations = 0

    def lookup(self, version: str) -> str | None:
        self.lookups.append(version)
        return self.installations.get(version)

    def enumerate_versions(self) -> list[str]:
        self.enumerations += 1
        return list(self.installations)


def _write_project(directory: Path, version: str | None = None) -> Path:
    config_dir = directory / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    lines = ["[general]"]
    if version is not None:
        lines.append(f'proj_version = "{version}"')
    (config_dir / "config").write_text("\n".join(lines) + "\n")
    return directory


@pytest.fixture
def make_project() -> Callable[..., Path]:
    """Return a helper that turns a directory into a project (writes config/config)."""
    return _write_project


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def resolver(fake_backend: FakeBackend) -> PathResolver:
    """A resolver with no installations and its own cache."""
    return PathResolver(backend=fake_backend, cache=InstallationCache())


@pytest.fixture
def backend_factory() -> type[FakeBackend]:
    """Return the FakeBackend class for tests that need preset installations."""
    return FakeBackend
