"""Bulk-release storage region for parsed names, strings and payloads."""

from __future__ import annotations

from typing import Any, TypeVar

from slua_builtins.errors import ResourceExhaustedError

T = TypeVar("T")

# Accounted size of one float32 component
COMPONENT_SIZE = 4


class Arena:
    """Owns every object copied into one database instance.

    Objects are never freed individually: `release()` drops all of them at
    once. An optional byte limit makes allocation failure observable; the
    byte count of a string is its UTF-8 length.
    """

    def __init__(self, limit: int | None = None) -> None:
        """Initialize an empty arena.

        Args:
            limit: Maximum number of bytes the arena may hold, or None for
                no limit.
        """
        self.limit = limit
        self._blocks: list[Any] = []
        self._used = 0

    @property
    def used(self) -> int:
        """Return the number of bytes currently accounted to this arena."""
        return self._used

    def __len__(self) -> int:
        return len(self._blocks)

    def _reserve(self, size: int) -> None:
        if self.limit is not None and self._used + size > self.limit:
            raise ResourceExhaustedError(
                f"arena limit of {self.limit} bytes exceeded "
                f"({self._used} used, {size} requested)"
            )
        self._used += size

    def alloc(self, obj: T, size: int) -> T:
        """Account `size` bytes for obj and keep it alive until release."""
        self._reserve(size)
        self._blocks.append(obj)
        return obj

    def copy_str(self, text: str) -> str:
        """Copy a string into the arena."""
        return self.alloc(text, len(text.encode("utf-8", "surrogatepass")))

    def copy_components(self, components: T) -> T:
        """Copy a tuple of float32 components into the arena."""
        return self.alloc(components, COMPONENT_SIZE * len(components))  # type: ignore[arg-type]

    def release(self) -> None:
        """Release everything the arena holds in one step."""
        self._blocks.clear()
        self._used = 0

    def __enter__(self) -> Arena:
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()
