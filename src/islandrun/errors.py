"""Exception hierarchy shared across the runner."""

from __future__ import annotations

from typing import Optional


class IslandRunError(RuntimeError):
    """Base class for errors raised by the runner itself (never by the world)."""


class ConfigurationError(IslandRunError):
    """Raised when a timing, stage table or runner configuration is invalid."""


class TraceValidationError(IslandRunError):
    """Raised when a trace payload fails schema validation."""

    def __init__(self, message: str, *, errors: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


__all__ = ["IslandRunError", "ConfigurationError", "TraceValidationError"]
