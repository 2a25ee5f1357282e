"""Parser for LSL constant declaration files (builtins.txt format).

The format is one declaration per line:

    // comment
    const integer ACTIVE = 0x2
    const float PI = 3.14159265
    const string EOF = "\\n\\n\\n"
    const key NULL_KEY = "00000000-0000-0000-0000-000000000000"
    const vector ZERO_VECTOR = <0.0, 0.0, 0.0>
    const rotation ZERO_ROTATION = <0.0, 0.0, 0.0, 1.0>

The text is machine-generated and may contain syntax this parser does not
know about, so a malformed line is skipped rather than rejected. Only arena
exhaustion aborts a parse.
"""

from __future__ import annotations

import logging
import re

from slua_builtins.arena import Arena
from slua_builtins.parsing.literal_parser import LiteralParser
from slua_builtins.types import (
    CONSTANT_TYPE_KEYWORDS,
    INT32_MAX,
    INT32_MIN,
    Constant,
    ConstantKind,
    Quaternion,
    Vector,
    is_uuid,
    to_float32,
)

logger = logging.getLogger(__name__)

LINE_SPLIT = re.compile(r"[\r\n]")
LINE_SPLIT_BYTES = re.compile(rb"[\r\n]")
BLANKS = " \t"
COMMENT_PREFIX = "//"

# Booleans are provided to the VM by other means
SKIPPED_NAMES = frozenset({"TRUE", "FALSE"})

_DECIMAL = re.compile(r"[+-]?[0-9]+")
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")
_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
}


def split_lines(source: str | bytes) -> list[str]:
    """Split declaration text into lines on CR, LF or CRLF.

    Bytes are decoded one line at a time; a line that is not valid UTF-8
    is dropped like any other malformed line.
    """
    if isinstance(source, str):
        return LINE_SPLIT.split(source)
    lines: list[str] = []
    for raw in LINE_SPLIT_BYTES.split(source):
        try:
            lines.append(raw.decode("utf-8"))
        except UnicodeDecodeError:
            logger.debug("Skipping line that is not UTF-8: %r", raw)
    return lines


def parse_integer(text: str) -> int | None:
    """Parse a signed 32-bit decimal or 0x-prefixed hex integer."""
    if _DECIMAL.fullmatch(text):
        value = int(text, 10)
    elif len(text) > 2 and text.startswith("0x") and _HEX_DIGITS.fullmatch(text[2:]):
        value = int(text[2:], 16)
    else:
        return None
    if not INT32_MIN <= value <= INT32_MAX:
        return None
    return value


def parse_float(text: str) -> float | None:
    """Parse a float literal and round it to float32."""
    if not _FLOAT.fullmatch(text):
        return None
    return to_float32(float(text))


def unquote(text: str) -> str | None:
    """Strip the surrounding quotes from a string literal and decode escapes.

    Recognized escapes are \\n, \\t, \\r, \\\\ and \\"; any other escaped
    character stands for itself. A trailing lone backslash is kept.
    """
    if len(text) < 2 or text[0] != '"' or text[-1] != '"':
        return None
    content = text[1:-1]
    result: list[str] = []
    i = 0
    while i < len(content):
        ch = content[i]
        if ch == "\\" and i + 1 < len(content):
            i += 1
            ch = _ESCAPES.get(content[i], content[i])
        result.append(ch)
        i += 1
    return "".join(result)


class ConstantParser:
    """Parser for `const <type> NAME = value` declarations."""

    def __init__(self) -> None:
        self.literals = LiteralParser()

    def parse_value(
        self, kind: ConstantKind, text: str, arena: Arena
    ) -> tuple[ConstantKind, object] | None:
        """Parse a value literal for a declared kind.

        Returns:
            The (possibly promoted) kind and its payload, or None if the
            literal does not match the grammar for that kind.
        """
        if kind == ConstantKind.INTEGER:
            number = parse_integer(text)
            return None if number is None else (kind, number)
        elif kind == ConstantKind.FLOAT:
            real = parse_float(text)
            return None if real is None else (kind, real)
        elif kind.is_text:
            content = unquote(text)
            if content is None:
                return None
            if kind == ConstantKind.STRING and is_uuid(content):
                kind = ConstantKind.KEY
            return kind, arena.copy_str(content)
        elif kind in (ConstantKind.VECTOR, ConstantKind.QUATERNION):
            try:
                components = self.literals.parse(text)
            except SyntaxError:
                return None
            if kind == ConstantKind.VECTOR:
                if len(components) != 3:
                    return None
                return kind, arena.copy_components(Vector(*components))
            if len(components) != 4:
                return None
            return kind, arena.copy_components(Quaternion(*components))
        return None

    def parse_line(self, line: str, arena: Arena) -> Constant | None:
        """Parse a single declaration line.

        Returns:
            The parsed constant, or None when the line should be skipped
            (blank, comment, unknown type, malformed value, TRUE/FALSE).

        Raises:
            ResourceExhaustedError: If the arena cannot hold the copied data.
        """
        trimmed = line.strip(BLANKS)
        if not trimmed or trimmed.startswith(COMMENT_PREFIX):
            return None

        parts = [part for part in re.split(r"[ \t]+", trimmed) if part]
        if len(parts) < 4 or parts[0] != "const" or parts[3] != "=":
            logger.debug("Skipping non-declaration line: %r", trimmed)
            return None

        type_str, name = parts[1], parts[2]
        if name in SKIPPED_NAMES:
            return None

        kind = CONSTANT_TYPE_KEYWORDS.get(type_str)
        if kind is None:
            logger.debug("Skipping %s: unsupported type '%s'", name, type_str)
            return None

        value_str = trimmed[trimmed.index("=") + 1 :].strip(BLANKS)
        parsed = self.parse_value(kind, value_str, arena)
        if parsed is None:
            logger.debug("Skipping %s: malformed %s value %r", name, type_str, value_str)
            return None

        kind, payload = parsed
        return Constant(name=arena.copy_str(name), kind=kind, value=payload)

    def parse(self, source: str | bytes, arena: Arena) -> dict[str, Constant]:
        """Parse a whole declaration file.

        Later definitions of a name replace earlier ones.
        """
        constants: dict[str, Constant] = {}
        for line in split_lines(source):
            constant = self.parse_line(line, arena)
            if constant is not None:
                constants[constant.name] = constant
        return constants
