"""Value and type definitions for the builtins databases."""

from __future__ import annotations

import math
import string
import struct
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from slua_builtins.vm import VM


class ConstantKind(Enum):
    """Kinds of value an LSL constant can hold."""

    NULL = "null"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    KEY = "key"
    VECTOR = "vector"
    QUATERNION = "quaternion"
    LIST = "list"  # Recorded but never produced by the parser
    ERROR = "error"

    @property
    def is_numeric(self) -> bool:
        return self in (ConstantKind.INTEGER, ConstantKind.FLOAT)

    @property
    def is_text(self) -> bool:
        return self in (ConstantKind.STRING, ConstantKind.KEY)


# Type keywords accepted in `const <type> NAME = value` declarations
CONSTANT_TYPE_KEYWORDS: dict[str, ConstantKind] = {
    "integer": ConstantKind.INTEGER,
    "float": ConstantKind.FLOAT,
    "string": ConstantKind.STRING,
    "key": ConstantKind.KEY,
    "vector": ConstantKind.VECTOR,
    "rotation": ConstantKind.QUATERNION,
}


class OverlayType(Enum):
    """SLua types a constant can be declared with in the overlay."""

    NUMBER = "number"
    STRING = "string"
    UUID = "uuid"
    VECTOR = "vector"
    QUATERNION = "quaternion"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: str) -> OverlayType:
        """Map a declared type label to its tag; unrecognized labels are UNKNOWN."""
        return OVERLAY_TYPE_LABELS.get(label, cls.UNKNOWN)


OVERLAY_TYPE_LABELS: dict[str, OverlayType] = {
    "number": OverlayType.NUMBER,
    "string": OverlayType.STRING,
    "uuid": OverlayType.UUID,
    "vector": OverlayType.VECTOR,
    "quaternion": OverlayType.QUATERNION,
    "rotation": OverlayType.QUATERNION,
}


INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# Canonical UUID text: 8-4-4-4-12 hex digits
UUID_LENGTH = 36
UUID_DASH_POSITIONS = (8, 13, 18, 23)
_HEX_DIGITS = frozenset(string.hexdigits)


def is_uuid(text: str) -> bool:
    """Check whether text has the canonical UUID shape."""
    if len(text) != UUID_LENGTH:
        return False
    for i, ch in enumerate(text):
        if i in UUID_DASH_POSITIONS:
            if ch != "-":
                return False
        elif ch not in _HEX_DIGITS:
            return False
    return True


def to_float32(value: float) -> float:
    """Round a Python float to the nearest 32-bit IEEE 754 value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


class Vector(NamedTuple):
    """Three-component float32 vector."""

    x: float
    y: float
    z: float


class Quaternion(NamedTuple):
    """Four-component float32 rotation; `s` is the scalar part."""

    x: float
    y: float
    z: float
    s: float


@dataclass(frozen=True)
class Constant:
    """A named constant parsed from a builtins declaration file.

    The payload type depends on the kind:
      integer    -> int (signed 32-bit)
      float      -> float (rounded to float32)
      string/key -> str
      vector     -> Vector
      quaternion -> Quaternion
      others     -> None
    """

    name: str
    kind: ConstantKind
    value: Any = None


@dataclass(frozen=True)
class OverlayEntry:
    """A `declare NAME: type` line from the SLua type overlay."""

    name: str
    type: OverlayType


class PublishKind(Enum):
    """VM representations a constant can be published as."""

    NUMBER = "number"
    STRING = "string"
    UUID = "uuid"
    VECTOR = "vector"
    QUATERNION = "quaternion"
    NIL = "nil"


@dataclass(frozen=True)
class GlobalValue:
    """The VM representation chosen for one constant.

    Vectors carry 3 or 4 components; quaternions always carry (x, y, z, s).
    """

    kind: PublishKind
    value: Any = None

    def push(self, vm: VM) -> None:
        """Push this value onto the VM stack."""
        if self.kind == PublishKind.NUMBER:
            vm.push_number(self.value)
        elif self.kind == PublishKind.STRING:
            vm.push_string(self.value)
        elif self.kind == PublishKind.UUID:
            vm.push_uuid(self.value)
        elif self.kind == PublishKind.VECTOR:
            vm.push_vector(*self.value)
        elif self.kind == PublishKind.QUATERNION:
            vm.push_quaternion(*self.value)
        else:
            vm.push_nil()
