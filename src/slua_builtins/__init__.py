"""SLua Builtins - LSL constant values with SLua types for an embedded VM."""

from slua_builtins.arena import Arena
from slua_builtins.config import BuiltinsConfig, Dialect
from slua_builtins.context import (
    BuiltinsContext,
    current_context,
    deinit_builtins,
    init_builtins,
    lookup_constant,
    lookup_overlay_type,
    set_constant_globals,
)
from slua_builtins.database import ConstantDatabase, OverlayDatabase
from slua_builtins.errors import (
    BuiltinsError,
    ResourceExhaustedError,
    SourceUnavailableError,
)
from slua_builtins.parsing import ConstantParser, OverlayParser
from slua_builtins.resolver import MergedBuiltinsDatabase
from slua_builtins.types import (
    Constant,
    ConstantKind,
    GlobalValue,
    OverlayEntry,
    OverlayType,
    PublishKind,
    Quaternion,
    Vector,
)
from slua_builtins.vm import VM, GlobalTable

__all__ = [
    # Main API
    "BuiltinsContext",
    "BuiltinsConfig",
    "Dialect",
    "MergedBuiltinsDatabase",
    # Per-thread slot
    "current_context",
    "init_builtins",
    "deinit_builtins",
    "lookup_constant",
    "lookup_overlay_type",
    "set_constant_globals",
    # Databases and parsers
    "Arena",
    "ConstantDatabase",
    "OverlayDatabase",
    "ConstantParser",
    "OverlayParser",
    # Values
    "Constant",
    "ConstantKind",
    "OverlayEntry",
    "OverlayType",
    "GlobalValue",
    "PublishKind",
    "Vector",
    "Quaternion",
    # VM
    "VM",
    "GlobalTable",
    # Errors
    "BuiltinsError",
    "SourceUnavailableError",
    "ResourceExhaustedError",
]

__version__ = "0.1.0"
