"""Configuration for loading builtins into a VM."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Mapping

# Environment variables read by BuiltinsConfig.from_env()
ENV_BUILTINS_FILE = "SLUA_BUILTINS_FILE"
ENV_DEFS_FILE = "SLUA_DEFS_FILE"
ENV_DIALECT = "SLUA_DIALECT"
ENV_VECTOR_SIZE = "LUA_VECTOR_SIZE"

DEFAULT_VECTOR_SIZE = 3
DEFAULT_MAX_SOURCE_BYTES = 10 * 1024 * 1024


class Dialect(Enum):
    """Scripting dialect the VM runs."""

    LSL = "lsl"  # values only, published by native kind
    SLUA = "slua"  # values typed through the overlay


@dataclass(frozen=True)
class BuiltinsConfig:
    """Settings for one builtins context.

    Paths left as None fall back to the declaration files embedded in the
    package.
    """

    builtins_path: Path | None = None
    defs_path: Path | None = None
    dialect: Dialect = Dialect.SLUA
    vector_size: int = DEFAULT_VECTOR_SIZE
    max_source_bytes: int = DEFAULT_MAX_SOURCE_BYTES
    arena_limit: int | None = None
    name_limit: int | None = None

    def __post_init__(self) -> None:
        if self.vector_size not in (3, 4):
            raise ValueError(f"vector_size must be 3 or 4, got {self.vector_size}")
        if self.max_source_bytes <= 0:
            raise ValueError("max_source_bytes must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuiltinsConfig:
        """Build a config from environment variables.

        Unset variables keep their defaults.
        """
        if environ is None:
            environ = os.environ

        builtins_path = environ.get(ENV_BUILTINS_FILE)
        defs_path = environ.get(ENV_DEFS_FILE)
        dialect = environ.get(ENV_DIALECT)
        vector_size = environ.get(ENV_VECTOR_SIZE)

        try:
            return cls(
                builtins_path=Path(builtins_path) if builtins_path else None,
                defs_path=Path(defs_path) if defs_path else None,
                dialect=Dialect(dialect.lower()) if dialect else Dialect.SLUA,
                vector_size=int(vector_size) if vector_size else DEFAULT_VECTOR_SIZE,
            )
        except ValueError as e:
            raise ValueError(f"Invalid builtins environment configuration: {e}") from e

    def with_paths(
        self, builtins_path: Path | str | None, defs_path: Path | str | None
    ) -> BuiltinsConfig:
        """Return a copy with the given paths overriding the configured ones."""
        return replace(
            self,
            builtins_path=Path(builtins_path) if builtins_path else self.builtins_path,
            defs_path=Path(defs_path) if defs_path else self.defs_path,
        )
