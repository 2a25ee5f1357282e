"""Parser for SLua type declaration files (slua_default.d.luau format).

Only plain global declarations are modeled:

    -- comment
    declare NULL_KEY: uuid
    declare ZERO_ROTATION: quaternion

Function signatures, extern type blocks and table-typed declarations are
skipped.
"""

from __future__ import annotations

import logging

from slua_builtins.arena import Arena
from slua_builtins.parsing.constant_parser import BLANKS, split_lines
from slua_builtins.types import OverlayEntry, OverlayType

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "--"
DECLARE_PREFIX = "declare "

# Markers of declarations that are not simple `NAME: type` globals
EXCLUDED_MARKERS = ("function", "extern", "(", "{")


def is_valid_name(name: str) -> bool:
    """Check that a declared name is made of ASCII letters, digits and '_'."""
    return all((ch.isascii() and ch.isalnum()) or ch == "_" for ch in name)


class OverlayParser:
    """Parser for `declare NAME: type` lines."""

    def parse_line(self, line: str, arena: Arena) -> OverlayEntry | None:
        """Parse a single declaration line.

        Returns:
            The overlay entry, or None when the line declares nothing this
            overlay models. Unrecognized type labels produce an entry tagged
            OverlayType.UNKNOWN.
        """
        trimmed = line.strip(BLANKS)
        if not trimmed or trimmed.startswith(COMMENT_PREFIX):
            return None
        if not trimmed.startswith(DECLARE_PREFIX):
            return None
        if any(marker in trimmed for marker in EXCLUDED_MARKERS):
            return None

        name, colon, label = trimmed[len(DECLARE_PREFIX) :].partition(":")
        if not colon:
            return None
        name = name.strip(BLANKS)
        label = label.strip(BLANKS)
        if not name or not label or not is_valid_name(name):
            logger.debug("Skipping malformed declaration: %r", trimmed)
            return None

        overlay_type = OverlayType.from_label(label)
        if overlay_type == OverlayType.UNKNOWN:
            logger.debug("Recording %s with unrecognized type '%s'", name, label)
        return OverlayEntry(name=arena.copy_str(name), type=overlay_type)

    def parse(self, source: str | bytes, arena: Arena) -> dict[str, OverlayType]:
        """Parse a whole declaration file into a name -> type table."""
        types: dict[str, OverlayType] = {}
        for line in split_lines(source):
            entry = self.parse_line(line, arena)
            if entry is not None:
                types[entry.name] = entry.type
        return types
