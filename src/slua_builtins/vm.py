"""The VM capability consumed when publishing constants as globals."""

from __future__ import annotations

from typing import Protocol

from slua_builtins.types import GlobalValue, PublishKind


class VM(Protocol):
    """Stack-based global binding interface of the scripting VM.

    Each push places one value on the stack; `set_global` pops it and
    binds it under the given name.
    """

    def push_number(self, value: float) -> None: ...

    def push_string(self, text: str) -> None: ...

    def push_uuid(self, text: str) -> None: ...

    def push_vector(self, x: float, y: float, z: float, w: float | None = None) -> None: ...

    def push_quaternion(self, x: float, y: float, z: float, s: float) -> None: ...

    def push_nil(self) -> None: ...

    def set_global(self, name: str) -> None: ...


class GlobalTable:
    """In-memory VM recording published globals as GlobalValues."""

    def __init__(self) -> None:
        self.globals: dict[str, GlobalValue] = {}
        self._stack: list[GlobalValue] = []

    def push_number(self, value: float) -> None:
        self._stack.append(GlobalValue(PublishKind.NUMBER, float(value)))

    def push_string(self, text: str) -> None:
        self._stack.append(GlobalValue(PublishKind.STRING, text))

    def push_uuid(self, text: str) -> None:
        self._stack.append(GlobalValue(PublishKind.UUID, text))

    def push_vector(self, x: float, y: float, z: float, w: float | None = None) -> None:
        components = (x, y, z) if w is None else (x, y, z, w)
        self._stack.append(GlobalValue(PublishKind.VECTOR, components))

    def push_quaternion(self, x: float, y: float, z: float, s: float) -> None:
        self._stack.append(GlobalValue(PublishKind.QUATERNION, (x, y, z, s)))

    def push_nil(self) -> None:
        self._stack.append(GlobalValue(PublishKind.NIL))

    def set_global(self, name: str) -> None:
        if not self._stack:
            raise IndexError("set_global with an empty stack")
        self.globals[name] = self._stack.pop()

    @property
    def stack_depth(self) -> int:
        return len(self._stack)

    def get(self, name: str) -> GlobalValue | None:
        return self.globals.get(name)

    def __len__(self) -> int:
        return len(self.globals)
