"""Tests for the public package surface."""

from __future__ import annotations

import winccoa_explorer


class TestPublicAPI:
    def test_all_names_importable(self) -> None:
        for name in winccoa_explorer.__all__:
            assert hasattr(winccoa_explorer, name), name

    def test_core_exports(self) -> None:
        from winccoa_explorer import Config, ProjectExplorer, categorize, filter_categories

        assert ProjectExplorer is winccoa_explorer.explorer.ProjectExplorer
        assert Config is winccoa_explorer.config.Config
        assert callable(categorize)
        assert callable(filter_categories)

    def test_version(self) -> None:
        assert winccoa_explorer.__version__ == "0.1.0"
