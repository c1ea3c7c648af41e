"""Tests for installation lookup: order_versions(), PathResolver, backends."""

from __future__ import annotations

from pathlib import Path

import pytest

from winccoa_explorer.installation import (
    InstallationCache,
    PathResolver,
    UnixInstallationBackend,
    WindowsInstallationBackend,
    default_backend,
    order_versions,
    version_sort_key,
)


# === Version ordering ===


class TestOrderVersions:
    def test_numeric_not_lexicographic(self) -> None:
        """3.10 sorts above 3.9."""
        assert order_versions(["3.9", "3.10", "3.2"]) == ["3.10", "3.9", "3.2"]

    def test_patch_component(self) -> None:
        assert order_versions(["3.20", "3.20.5", "3.21"]) == ["3.21", "3.20.5", "3.20"]

    def test_fourth_component_ignored_and_stable(self) -> None:
        """Equal keys keep their input order."""
        assert order_versions(["3.20.1.1", "3.20.1.9", "3.20.1"]) == ["3.20.1.1", "3.20.1.9", "3.20.1"]

    def test_sort_key(self) -> None:
        assert version_sort_key("3.20.5") == 32005
        assert version_sort_key("3") == 30000
        assert version_sort_key("3.x") == 30000

    def test_empty(self) -> None:
        assert order_versions([]) == []


# === PathResolver caching ===


class TestPathResolverCache:
    def test_resolve_hits_backend_once(self, backend_factory) -> None:
        """A second resolve() is served from the cache."""
        backend = backend_factory({"3.20": "/opt/WinCC_OA/3.20"})
        resolver = PathResolver(backend=backend)
        assert resolver.resolve("3.20") == "/opt/WinCC_OA/3.20"
        assert resolver.resolve("3.20") == "/opt/WinCC_OA/3.20"
        assert backend.lookups == ["3.20"]

    def test_negative_result_cached(self, backend_factory) -> None:
        """Not-found results are cached like positive ones."""
        backend = backend_factory()
        resolver = PathResolver(backend=backend)
        assert resolver.resolve("3.20") is None
        assert resolver.resolve("3.20") is None
        assert backend.lookups == ["3.20"]

    def test_list_versions_enumerates_once(self, backend_factory) -> None:
        """list_versions() ignores later changes to the installations."""
        backend = backend_factory({"3.19": "/a", "3.21": "/b"})
        resolver = PathResolver(backend=backend)
        assert resolver.list_versions() == ["3.21", "3.19"]
        backend.installations["3.22"] = "/c"
        assert resolver.list_versions() == ["3.21", "3.19"]
        assert backend.enumerations == 1

    def test_list_versions_returns_copy(self, backend_factory) -> None:
        resolver = PathResolver(backend=backend_factory({"3.19": "/a"}))
        resolver.list_versions().append("9.9")
        assert resolver.list_versions() == ["3.19"]

    def test_independent_caches(self, backend_factory) -> None:
        """Separate resolvers do not share state."""
        backend = backend_factory({"3.20": "/a"})
        PathResolver(backend=backend).resolve("3.20")
        PathResolver(backend=backend).resolve("3.20")
        assert backend.lookups == ["3.20", "3.20"]

    def test_shared_cache(self, backend_factory) -> None:
        """Resolvers given the same cache share results."""
        backend = backend_factory({"3.20": "/a"})
        cache = InstallationCache()
        PathResolver(backend=backend, cache=cache).resolve("3.20")
        PathResolver(backend=backend, cache=cache).resolve("3.20")
        assert backend.lookups == ["3.20"]
        assert "3.20" in cache

    def test_installation_roots(self, backend_factory) -> None:
        backend = backend_factory({"3.19": "/a", "3.21": "/b"})
        assert PathResolver(backend=backend).installation_roots() == [("3.21", "/b"), ("3.19", "/a")]


# === Backends ===


class TestUnixBackend:
    def test_lookup(self, tmp_path: Path) -> None:
        (tmp_path / "3.20").mkdir()
        backend = UnixInstallationBackend(str(tmp_path))
        assert backend.lookup("3.20") == str(tmp_path / "3.20")
        assert backend.lookup("3.21") is None

    def test_enumerate_versions(self, tmp_path: Path) -> None:
        """Only directories whose name starts with a dotted version count."""
        for name in ("3.19", "3.21", "docs"):
            (tmp_path / name).mkdir()
        (tmp_path / "3.22").write_text("not a dir")
        assert sorted(UnixInstallationBackend(str(tmp_path)).enumerate_versions()) == ["3.19", "3.21"]

    def test_missing_base_dir(self, tmp_path: Path) -> None:
        assert UnixInstallationBackend(str(tmp_path / "none")).enumerate_versions() == []


class TestDefaultBackend:
    def test_windows(self) -> None:
        assert isinstance(default_backend("win32"), WindowsInstallationBackend)

    def test_unix(self) -> None:
        backend = default_backend("linux", base_dir="/srv/oa")
        assert isinstance(backend, UnixInstallationBackend)
        assert backend.base_dir == "/srv/oa"

    def test_default_resolver_backend(self) -> None:
        assert PathResolver().backend is not None


@pytest.mark.skipif("sys.platform != 'win32'")
class TestWindowsBackend:
    def test_unknown_version(self) -> None:
        assert WindowsInstallationBackend().lookup("0.0") is None
