"""Exceptions raised by the builtins databases."""

from __future__ import annotations


class BuiltinsError(Exception):
    """Base class for builtins database failures."""


class SourceUnavailableError(BuiltinsError, OSError):
    """A declaration file could not be opened or fully read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"couldn't read declaration file {path}: {reason}")
        self.path = path
        self.reason = reason


class ResourceExhaustedError(BuiltinsError, MemoryError):
    """An arena ran out of room while copying parsed data."""
