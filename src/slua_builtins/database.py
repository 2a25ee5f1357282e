"""Name-indexed databases for parsed constants and overlay types."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from slua_builtins.arena import Arena
from slua_builtins.parsing import ConstantParser, OverlayParser
from slua_builtins.types import Constant, OverlayType

logger = logging.getLogger(__name__)


class ConstantDatabase:
    """Owns the constants parsed from one builtins declaration file."""

    def __init__(self, arena_limit: int | None = None) -> None:
        """Initialize an empty database.

        Args:
            arena_limit: Byte limit for the arena backing each parse, or None.
        """
        self.arena_limit = arena_limit
        self.arena = Arena(arena_limit)
        self._constants: dict[str, Constant] = {}
        self._parser = ConstantParser()

    def parse(self, source: str | bytes) -> int:
        """Replace the database content with the constants in source.

        The new content is built in a fresh arena; the previous content is
        only released once the parse has succeeded.

        Returns:
            Number of constants now in the database.

        Raises:
            ResourceExhaustedError: If the arena limit is reached.
        """
        arena = Arena(self.arena_limit)
        try:
            constants = self._parser.parse(source, arena)
        except MemoryError:
            arena.release()
            raise

        self.arena.release()
        self.arena = arena
        self._constants = constants
        logger.info("Parsed %d constants (%d bytes)", len(constants), arena.used)
        return len(constants)

    def get(self, name: str) -> Constant | None:
        """Look up a constant by name."""
        return self._constants.get(name)

    def items(self) -> Iterator[tuple[str, Constant]]:
        return iter(self._constants.items())

    def names(self) -> list[str]:
        """List all constant names."""
        return list(self._constants)

    def __contains__(self, name: object) -> bool:
        return name in self._constants

    def __len__(self) -> int:
        return len(self._constants)

    def close(self) -> None:
        """Drop all constants and release the arena."""
        self._constants = {}
        self.arena.release()

    def __enter__(self) -> ConstantDatabase:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class OverlayDatabase:
    """Owns the type tags parsed from one SLua declaration file."""

    def __init__(self, arena_limit: int | None = None) -> None:
        self.arena_limit = arena_limit
        self.arena = Arena(arena_limit)
        self._types: dict[str, OverlayType] = {}
        self._parser = OverlayParser()

    def parse(self, source: str | bytes) -> int:
        """Replace the database content with the declarations in source."""
        arena = Arena(self.arena_limit)
        try:
            types = self._parser.parse(source, arena)
        except MemoryError:
            arena.release()
            raise

        self.arena.release()
        self.arena = arena
        self._types = types
        logger.info("Parsed %d type declarations", len(types))
        return len(types)

    def get(self, name: str) -> OverlayType | None:
        """Look up the declared type of a name.

        Returns None when the name has no declaration; a declaration with an
        unrecognized label returns OverlayType.UNKNOWN.
        """
        return self._types.get(name)

    def items(self) -> Iterator[tuple[str, OverlayType]]:
        return iter(self._types.items())

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def close(self) -> None:
        """Drop all declarations and release the arena."""
        self._types = {}
        self.arena.release()

    def __enter__(self) -> OverlayDatabase:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
