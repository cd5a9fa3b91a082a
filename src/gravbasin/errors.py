# src/gravbasin/errors.py
from __future__ import annotations

__all__ = [
    "GravbasinError",
    "ConfigError",
]

class GravbasinError(Exception):
    """Base error for the gravbasin package."""


class ConfigError(GravbasinError):
    """Raised when a render configuration file is missing, malformed or invalid."""
    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
