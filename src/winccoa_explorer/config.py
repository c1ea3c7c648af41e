"""Configuration loading and validation."""

from __future__ import annotations

import os
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from winccoa_explorer.errors import ConfigError, ConfigNotFoundError

__all__ = ["Config", "DEFAULTS"]

DEFAULTS: dict[str, Any] = {
    "registry": {"path": None},
    "discovery": {"max_depth": 3, "follow_symlinks": False, "extra_skip_dirs": []},
    "installation": {"base_dir": "/opt/WinCC_OA"},
    "version_query": {"timeout_ms": 10000},
}


class _RegistrySection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str | None = None


class _DiscoverySection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_depth: int = Field(default=3, ge=0)
    follow_symlinks: bool = False
    extra_skip_dirs: list[str] = Field(default_factory=list)


class _InstallationSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_dir: str = "/opt/WinCC_OA"


class _VersionQuerySection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_ms: int = Field(default=10000, gt=0)


class _ConfigSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    registry: _RegistrySection = Field(default_factory=_RegistrySection)
    discovery: _DiscoverySection = Field(default_factory=_DiscoverySection)
    installation: _InstallationSection = Field(default_factory=_InstallationSection)
    version_query: _VersionQuerySection = Field(default_factory=_VersionQuerySection)


class Config:
    """Configuration accessor with dot-path key support.

    Missing keys fall back to :data:`DEFAULTS` before the caller's default.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}

    @classmethod
    def load(cls, yaml_path: str) -> Config:
        """Load configuration from a YAML file.

        Raises:
            ConfigNotFoundError: If the file does not exist.
            ConfigError: If the YAML is invalid or does not match the schema.
        """
        if not os.path.isfile(yaml_path):
            raise ConfigNotFoundError(config_path=yaml_path)

        with open(yaml_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {yaml_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

        try:
            validated = _ConfigSchema.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {yaml_path}: {e}", cause=e) from e

        return cls(validated.model_dump())

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-path key."""
        for source in (self._data, DEFAULTS):
            value = _lookup(source, key)
            if value is not None:
                return value
        return default


def _lookup(data: dict[str, Any], key: str) -> Any:
    current: Any = data
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None
    return current
