"""Merged constant/overlay database with typed publication.

A constant is published by its native LSL kind unless the overlay declares
an SLua type for it and the constant's kind can be coerced to that type:

    overlay type   accepted kinds       published as
    ------------   ------------------   ------------
    uuid           key, string          uuid
    quaternion     quaternion           quaternion
    vector         vector               vector
    number         integer, float       number
    string         string, key          string
    unknown        (none)               native kind

When the kinds do not match, the native kind is used instead.
"""

from __future__ import annotations

import logging

from slua_builtins.arena import Arena
from slua_builtins.database import ConstantDatabase, OverlayDatabase
from slua_builtins.errors import ResourceExhaustedError
from slua_builtins.types import (
    Constant,
    ConstantKind,
    GlobalValue,
    OverlayType,
    PublishKind,
)
from slua_builtins.vm import VM

logger = logging.getLogger(__name__)

VECTOR_SIZES = (3, 4)

# Overlay type -> (constant kinds it can be coerced from, resulting publish kind)
COERCIONS: dict[OverlayType, tuple[frozenset[ConstantKind], PublishKind]] = {
    OverlayType.UUID: (
        frozenset({ConstantKind.KEY, ConstantKind.STRING}),
        PublishKind.UUID,
    ),
    OverlayType.QUATERNION: (
        frozenset({ConstantKind.QUATERNION}),
        PublishKind.QUATERNION,
    ),
    OverlayType.VECTOR: (
        frozenset({ConstantKind.VECTOR}),
        PublishKind.VECTOR,
    ),
    OverlayType.NUMBER: (
        frozenset({ConstantKind.INTEGER, ConstantKind.FLOAT}),
        PublishKind.NUMBER,
    ),
    OverlayType.STRING: (
        frozenset({ConstantKind.STRING, ConstantKind.KEY}),
        PublishKind.STRING,
    ),
}


class MergedBuiltinsDatabase:
    """Combines LSL constant values with SLua overlay types.

    Neither database is copied; the merged view only references them.
    """

    def __init__(
        self,
        constants: ConstantDatabase,
        overlay: OverlayDatabase,
        vector_size: int = 3,
        name_limit: int | None = None,
    ) -> None:
        """Initialize the merged view.

        Args:
            constants: Database holding constant values.
            overlay: Database holding SLua type declarations.
            vector_size: Number of components of the VM's native vector
                type (3 or 4).
            name_limit: Byte limit for the transient name copy made when
                binding each global, or None for no limit.
        """
        if vector_size not in VECTOR_SIZES:
            raise ValueError(f"vector_size must be 3 or 4, got {vector_size}")
        self.constants = constants
        self.overlay = overlay
        self.vector_size = vector_size
        self.name_limit = name_limit

    def get_constant(self, name: str) -> Constant | None:
        """Look up a constant by name."""
        return self.constants.get(name)

    def get_overlay_type(self, name: str) -> OverlayType | None:
        """Look up the SLua type declared for a name."""
        return self.overlay.get(name)

    def native_value(self, constant: Constant) -> GlobalValue:
        """Return the representation of a constant by its own kind."""
        kind = constant.kind
        if kind.is_numeric:
            return GlobalValue(PublishKind.NUMBER, float(constant.value))
        if kind.is_text:
            return GlobalValue(PublishKind.STRING, constant.value)
        if kind == ConstantKind.VECTOR:
            return GlobalValue(PublishKind.VECTOR, tuple(constant.value))
        if kind == ConstantKind.QUATERNION:
            # 3-wide VMs cannot hold the scalar part; it is dropped
            components = tuple(constant.value)[: self.vector_size]
            return GlobalValue(PublishKind.VECTOR, components)
        return GlobalValue(PublishKind.NIL)

    def coerce(self, constant: Constant, overlay_type: OverlayType) -> GlobalValue | None:
        """Convert a constant to its declared SLua type.

        Returns:
            The coerced representation, or None if the constant's kind
            cannot be coerced to overlay_type.
        """
        coercion = COERCIONS.get(overlay_type)
        if coercion is None:
            return None
        accepted, publish_kind = coercion
        if constant.kind not in accepted:
            return None

        if publish_kind == PublishKind.NUMBER:
            return GlobalValue(publish_kind, float(constant.value))
        if publish_kind in (PublishKind.VECTOR, PublishKind.QUATERNION):
            return GlobalValue(publish_kind, tuple(constant.value))
        return GlobalValue(publish_kind, constant.value)

    def resolve_constant(self, constant: Constant) -> GlobalValue:
        """Choose the VM representation for a constant."""
        overlay_type = self.overlay.get(constant.name)
        if overlay_type is not None:
            value = self.coerce(constant, overlay_type)
            if value is not None:
                return value
            logger.debug(
                "%s: %s constant cannot be published as %s, using native kind",
                constant.name,
                constant.kind.value,
                overlay_type.value,
            )
        return self.native_value(constant)

    def resolve(self, name: str) -> GlobalValue | None:
        """Return the representation a named constant publishes as."""
        constant = self.constants.get(name)
        if constant is None:
            return None
        return self.resolve_constant(constant)

    def publish_all_globals(self, vm: VM) -> int:
        """Bind every constant as a global on the VM.

        A binding whose name cannot be copied is skipped; the others are
        still published.

        Returns:
            Number of globals bound.
        """
        published = 0
        for name, constant in self.constants.items():
            value = self.resolve_constant(constant)
            with Arena(self.name_limit) as scratch:
                try:
                    global_name = scratch.copy_str(name)
                except ResourceExhaustedError as e:
                    logger.warning("Skipping global %s: %s", name, e)
                    continue
                value.push(vm)
                vm.set_global(global_name)
            published += 1
        return published
