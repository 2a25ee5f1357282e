"""Lifecycle of the builtins database owned by one VM.

A BuiltinsContext is the handle a VM bootstrap holds: it is initialized
once (or re-initialized), queried by the compiler for constant folding,
used to publish globals, and torn down with the VM.

For callers that prefer an implicit slot, the module-level functions keep
one context per thread. A context is never shared between threads, so no
locking is involved.
"""

from __future__ import annotations

import logging
import threading
from importlib import resources
from pathlib import Path
from typing import Any

from slua_builtins.config import BuiltinsConfig, Dialect
from slua_builtins.database import ConstantDatabase, OverlayDatabase
from slua_builtins.errors import BuiltinsError, SourceUnavailableError
from slua_builtins.resolver import MergedBuiltinsDatabase
from slua_builtins.types import Constant, GlobalValue, OverlayType
from slua_builtins.vm import VM

logger = logging.getLogger(__name__)

BUILTINS_RESOURCE = "builtins.txt"
DEFS_RESOURCE = "slua_default.d.luau"


def embedded_source(resource: str) -> str:
    """Return the text of a declaration file shipped with the package."""
    return (resources.files("slua_builtins") / "data" / resource).read_text(encoding="utf-8")


def read_source(path: Path, max_bytes: int) -> str:
    """Read a declaration file supplied by the caller.

    Raises:
        SourceUnavailableError: If the file cannot be opened or read, is
            larger than max_bytes, or is not UTF-8 text.
    """
    try:
        with open(path, "rb") as f:
            data = f.read(max_bytes + 1)
    except OSError as e:
        logger.error("couldn't open declaration file: %s", path)
        raise SourceUnavailableError(str(path), e.strerror or str(e)) from e

    if len(data) > max_bytes:
        logger.error("declaration file too large: %s", path)
        raise SourceUnavailableError(str(path), f"file exceeds {max_bytes} bytes")

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.error("declaration file is not UTF-8: %s", path)
        raise SourceUnavailableError(str(path), "not valid UTF-8") from e


def load_source(path: Path | None, resource: str, max_bytes: int) -> str:
    """Read path if given, otherwise the embedded resource."""
    if path is None:
        return embedded_source(resource)
    return read_source(path, max_bytes)


class BuiltinsContext:
    """Owns at most one merged builtins database."""

    def __init__(self, config: BuiltinsConfig | None = None) -> None:
        self.config = config if config is not None else BuiltinsConfig()
        self._database: MergedBuiltinsDatabase | None = None

    @property
    def database(self) -> MergedBuiltinsDatabase | None:
        return self._database

    @property
    def is_initialized(self) -> bool:
        return self._database is not None

    def initialize(
        self,
        builtins_path: Path | str | None = None,
        defs_path: Path | str | None = None,
    ) -> MergedBuiltinsDatabase:
        """Load constants and overlay types and install the merged database.

        Any existing database is torn down first, so a failure leaves the
        context empty.

        Args:
            builtins_path: Constant declaration file; defaults to the
                configured path, then the embedded file.
            defs_path: SLua type declaration file; defaults to the
                configured path, then the embedded file. Not read in LSL
                mode.

        Raises:
            SourceUnavailableError: If a supplied file cannot be read.
            ResourceExhaustedError: If parsing exceeds the arena limit.
        """
        self.teardown()
        config = self.config.with_paths(builtins_path, defs_path)

        constants = ConstantDatabase(config.arena_limit)
        overlay = OverlayDatabase(config.arena_limit)
        try:
            constant_source = load_source(
                config.builtins_path, BUILTINS_RESOURCE, config.max_source_bytes
            )
            overlay_source = None
            if config.dialect == Dialect.SLUA:
                overlay_source = load_source(
                    config.defs_path, DEFS_RESOURCE, config.max_source_bytes
                )

            constants.parse(constant_source)
            if overlay_source is not None:
                overlay.parse(overlay_source)
        except BuiltinsError:
            constants.close()
            overlay.close()
            raise

        self._database = MergedBuiltinsDatabase(
            constants,
            overlay,
            vector_size=config.vector_size,
            name_limit=config.name_limit,
        )
        logger.info(
            "Initialized %s builtins: %d constants, %d type declarations",
            config.dialect.value,
            len(constants),
            len(overlay),
        )
        return self._database

    def teardown(self) -> None:
        """Release the current database, if any."""
        if self._database is None:
            return
        self._database.constants.close()
        self._database.overlay.close()
        self._database = None

    def lookup_constant(self, name: str) -> Constant | None:
        """Look up a constant value, e.g. for compile-time folding."""
        if self._database is None:
            return None
        return self._database.get_constant(name)

    def lookup_overlay_type(self, name: str) -> OverlayType | None:
        """Look up the SLua type declared for a name."""
        if self._database is None:
            return None
        return self._database.get_overlay_type(name)

    def resolve(self, name: str) -> GlobalValue | None:
        """Return the representation a constant would be published as."""
        if self._database is None:
            return None
        return self._database.resolve(name)

    def publish_all_globals(self, vm: VM) -> int:
        """Bind every constant as a VM global; returns the number bound."""
        if self._database is None:
            return 0
        return self._database.publish_all_globals(vm)

    def __enter__(self) -> BuiltinsContext:
        return self

    def __exit__(self, *args: Any) -> None:
        self.teardown()


_slot = threading.local()


def current_context() -> BuiltinsContext:
    """Return this thread's context, creating an empty one if needed."""
    context = getattr(_slot, "context", None)
    if context is None:
        context = BuiltinsContext()
        _slot.context = context
    return context


def init_builtins(
    builtins_path: Path | str | None = None,
    defs_path: Path | str | None = None,
    config: BuiltinsConfig | None = None,
) -> MergedBuiltinsDatabase:
    """Initialize this thread's builtins, replacing any previous ones.

    Without an explicit config, settings are read from the environment.

    Raises:
        ValueError: If the environment holds an invalid setting.
    """
    if config is None:
        config = BuiltinsConfig.from_env()
    context = current_context()
    context.teardown()
    context.config = config
    return context.initialize(builtins_path, defs_path)


def deinit_builtins() -> None:
    """Tear down this thread's builtins."""
    context = getattr(_slot, "context", None)
    if context is not None:
        context.teardown()


def lookup_constant(name: str) -> Constant | None:
    return current_context().lookup_constant(name)


def lookup_overlay_type(name: str) -> OverlayType | None:
    return current_context().lookup_overlay_type(name)


def set_constant_globals(vm: VM) -> int:
    """Publish this thread's builtins as globals on vm."""
    return current_context().publish_all_globals(vm)
