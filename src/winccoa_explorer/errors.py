"""Error hierarchy for the WinCC OA project explorer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "ExplorerError",
    "ConfigNotFoundError",
    "ConfigError",
    "RegistryReadError",
    "VersionQueryError",
    "VersionQueryTimeoutError",
    "ProjectNotFoundError",
    "ErrorCodes",
]


class ExplorerError(Exception):
    """Base error for all explorer errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigNotFoundError(ExplorerError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class ConfigError(ExplorerError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="CONFIG_INVALID", message=message, **kwargs)


class RegistryReadError(ExplorerError):
    """Raised when the registry file exists but cannot be read."""

    def __init__(self, registry_path: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            code="REGISTRY_READ_ERROR",
            message=f"Cannot read project registry {registry_path}: {reason}",
            details={"registry_path": registry_path, "reason": reason},
            **kwargs,
        )

    @property
    def registry_path(self) -> str:
        """The registry file that could not be read."""
        return self.details["registry_path"]


class VersionQueryError(ExplorerError):
    """Raised when the external version query fails."""

    def __init__(self, message: str, executable: str | None = None, **kwargs: Any) -> None:
        super().__init__(
            code="VERSION_QUERY_FAILED",
            message=message,
            details={"executable": executable},
            **kwargs,
        )


class VersionQueryTimeoutError(ExplorerError):
    """Raised when the external version query exceeds its timeout."""

    def __init__(self, executable: str, timeout_ms: int, **kwargs: Any) -> None:
        super().__init__(
            code="VERSION_QUERY_TIMEOUT",
            message=f"Version query via {executable} timed out after {timeout_ms}ms",
            details={"executable": executable, "timeout_ms": timeout_ms},
            **kwargs,
        )

    @property
    def timeout_ms(self) -> int:
        """The timeout value in milliseconds."""
        return self.details["timeout_ms"]


class ProjectNotFoundError(ExplorerError):
    """Raised when no project is known for an installation directory."""

    def __init__(self, installation_dir: str, **kwargs: Any) -> None:
        super().__init__(
            code="PROJECT_NOT_FOUND",
            message=f"No project registered or discovered at: {installation_dir}",
            details={"installation_dir": installation_dir},
            **kwargs,
        )


class ErrorCodes:
    """All explorer error codes as constants."""

    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    REGISTRY_READ_ERROR = "REGISTRY_READ_ERROR"
    VERSION_QUERY_FAILED = "VERSION_QUERY_FAILED"
    VERSION_QUERY_TIMEOUT = "VERSION_QUERY_TIMEOUT"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
