"""Tests for the builtins lifecycle: initialize, lookup, publish, teardown."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

import slua_builtins
import slua_builtins.context as context_module
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
from slua_builtins.errors import ResourceExhaustedError, SourceUnavailableError
from slua_builtins.types import ConstantKind, OverlayType, PublishKind, Quaternion, Vector
from slua_builtins.vm import GlobalTable


@pytest.fixture
def decl_files(tmp_path: Path):
    """Write a small pair of declaration files and return their paths."""

    def write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return write


@pytest.fixture
def thread_slot(monkeypatch):
    """Give each test a fresh per-thread slot and a clean environment."""
    for name in ("SLUA_BUILTINS_FILE", "SLUA_DEFS_FILE", "SLUA_DIALECT", "LUA_VECTOR_SIZE"):
        monkeypatch.delenv(name, raising=False)
    deinit_builtins()
    context_module._slot.context = None
    yield
    deinit_builtins()
    context_module._slot.context = None


class TestInitialize:
    """Tests for BuiltinsContext.initialize."""

    def test_embedded_defaults(self):
        with BuiltinsContext() as context:
            database = context.initialize()
            assert len(database.constants) > 100
            assert len(database.overlay) > 100

            pi = context.lookup_constant("PI")
            assert pi.kind == ConstantKind.FLOAT
            assert pi.value == pytest.approx(3.14159265, rel=1e-4)
            assert context.lookup_constant("DEG_TO_RAD").value == pytest.approx(
                0.017453293, rel=1e-4
            )
            assert context.lookup_constant("ZERO_VECTOR").value == Vector(0.0, 0.0, 0.0)
            assert context.lookup_constant("ZERO_ROTATION").value == Quaternion(
                0.0, 0.0, 0.0, 1.0
            )
            assert context.lookup_constant("NULL_KEY").value == (
                "00000000-0000-0000-0000-000000000000"
            )
            assert context.lookup_constant("EOF").value == "\n\n\n"
            assert context.lookup_constant("ACTIVE").value == 0x2
            assert context.lookup_constant("AGENT").value == 0x1
            assert context.lookup_constant("JSON_ARRAY").value == "﷒"
            assert context.lookup_constant("TRUE") is None
            assert context.lookup_constant("FALSE") is None

    def test_embedded_overlay_types(self):
        with BuiltinsContext() as context:
            context.initialize()
            assert context.lookup_overlay_type("NULL_KEY") == OverlayType.UUID
            assert context.lookup_overlay_type("TEXTURE_BLANK") == OverlayType.UUID
            assert context.lookup_overlay_type("IMG_USE_BAKED_HEAD") == OverlayType.UUID
            assert context.lookup_overlay_type("ACTIVE") == OverlayType.NUMBER
            assert context.lookup_overlay_type("PI") == OverlayType.NUMBER
            assert context.lookup_overlay_type("EOF") == OverlayType.STRING
            assert context.lookup_overlay_type("JSON_ARRAY") == OverlayType.STRING
            assert context.lookup_overlay_type("ZERO_VECTOR") == OverlayType.VECTOR
            assert context.lookup_overlay_type("ZERO_ROTATION") == OverlayType.QUATERNION
            assert context.lookup_overlay_type("TRUE") == OverlayType.UNKNOWN
            assert context.lookup_overlay_type("touuid") is None
            assert context.lookup_overlay_type("ll") is None

    def test_files(self, decl_files):
        builtins = decl_files("builtins.txt", 'const key NULL_KEY = "00000000-0000-0000-0000-000000000000"\n')
        defs = decl_files("defs.d.luau", "declare NULL_KEY: uuid\n")
        with BuiltinsContext() as context:
            context.initialize(builtins, defs)
            assert context.lookup_constant("NULL_KEY").kind == ConstantKind.KEY
            assert context.lookup_overlay_type("NULL_KEY") == OverlayType.UUID
            assert context.lookup_constant("PI") is None

    def test_string_paths(self, decl_files):
        builtins = decl_files("builtins.txt", "const integer A = 1\n")
        with BuiltinsContext() as context:
            context.initialize(str(builtins))
            assert context.lookup_constant("A").value == 1
            # Overlay still comes from the embedded file
            assert context.lookup_overlay_type("NULL_KEY") == OverlayType.UUID

    def test_configured_paths(self, decl_files):
        builtins = decl_files("builtins.txt", "const integer CONFIGURED = 1\n")
        context = BuiltinsContext(BuiltinsConfig(builtins_path=builtins))
        context.initialize()
        assert context.lookup_constant("CONFIGURED").value == 1
        context.teardown()

    def test_reinitialize_replaces_content(self, decl_files):
        first = decl_files("a.txt", "const integer FROM_A = 1\nconst integer SHARED = 1\n")
        second = decl_files("b.txt", "const integer FROM_B = 2\nconst integer SHARED = 2\n")
        with BuiltinsContext() as context:
            context.initialize(first)
            context.initialize(second)
            assert context.lookup_constant("FROM_A") is None
            assert context.lookup_constant("FROM_B").value == 2
            assert context.lookup_constant("SHARED").value == 2

    def test_missing_file(self, tmp_path):
        context = BuiltinsContext()
        with pytest.raises(SourceUnavailableError) as excinfo:
            context.initialize(tmp_path / "missing.txt")
        assert "missing.txt" in str(excinfo.value)
        assert isinstance(excinfo.value, OSError)
        assert not context.is_initialized

    def test_missing_overlay_file(self, decl_files, tmp_path):
        builtins = decl_files("builtins.txt", "const integer A = 1\n")
        context = BuiltinsContext()
        with pytest.raises(SourceUnavailableError):
            context.initialize(builtins, tmp_path / "missing.d.luau")
        assert not context.is_initialized

    def test_failed_reinitialize_leaves_context_empty(self, decl_files, tmp_path):
        builtins = decl_files("builtins.txt", "const integer A = 1\n")
        context = BuiltinsContext()
        context.initialize(builtins)
        with pytest.raises(SourceUnavailableError):
            context.initialize(tmp_path / "missing.txt")
        assert not context.is_initialized
        assert context.lookup_constant("A") is None

    def test_directory_is_unavailable(self, tmp_path):
        with pytest.raises(SourceUnavailableError):
            BuiltinsContext().initialize(tmp_path)

    def test_file_too_large(self, decl_files):
        builtins = decl_files("big.txt", "const integer A = 1\n" * 10)
        context = BuiltinsContext(BuiltinsConfig(max_source_bytes=32))
        with pytest.raises(SourceUnavailableError) as excinfo:
            context.initialize(builtins)
        assert "32 bytes" in str(excinfo.value)

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "latin1.txt"
        path.write_bytes(b'const string S = "\xff"\n')
        with pytest.raises(SourceUnavailableError):
            BuiltinsContext().initialize(path)

    def test_crlf_file(self, tmp_path):
        path = tmp_path / "crlf.txt"
        path.write_bytes(b"const integer A = 1\r\nconst integer B = 2\r\n")
        with BuiltinsContext() as context:
            context.initialize(path)
            assert context.lookup_constant("B").value == 2

    def test_arena_exhaustion(self):
        context = BuiltinsContext(BuiltinsConfig(arena_limit=64))
        with pytest.raises(ResourceExhaustedError):
            context.initialize()
        assert not context.is_initialized


class TestTeardown:
    """Tests for teardown and uninitialized behavior."""

    def test_uninitialized_lookups(self):
        context = BuiltinsContext()
        assert not context.is_initialized
        assert context.lookup_constant("PI") is None
        assert context.lookup_overlay_type("PI") is None
        assert context.resolve("PI") is None
        assert context.publish_all_globals(GlobalTable()) == 0

    def test_teardown_idempotent(self):
        context = BuiltinsContext()
        context.initialize()
        database = context.database
        context.teardown()
        context.teardown()
        assert not context.is_initialized
        assert context.lookup_constant("PI") is None
        assert len(database.constants) == 0
        assert database.constants.arena.used == 0
        assert database.overlay.arena.used == 0

    def test_teardown_without_initialize(self):
        BuiltinsContext().teardown()


class TestPublish:
    """Tests for publishing through a context."""

    def test_slua_publication(self):
        with BuiltinsContext() as context:
            context.initialize()
            vm = GlobalTable()
            count = context.publish_all_globals(vm)
            assert count == len(context.database.constants)
            assert vm.get("NULL_KEY").kind == PublishKind.UUID
            assert vm.get("TEXTURE_BLANK").kind == PublishKind.UUID
            assert vm.get("ZERO_ROTATION").kind == PublishKind.QUATERNION
            assert vm.get("EOF").kind == PublishKind.STRING
            assert vm.get("ACTIVE").value == 2.0
            assert "TRUE" not in vm.globals

    def test_lsl_dialect_ignores_overlay(self):
        config = BuiltinsConfig(dialect=Dialect.LSL)
        with BuiltinsContext(config) as context:
            context.initialize()
            assert len(context.database.overlay) == 0
            assert context.lookup_overlay_type("NULL_KEY") is None
            vm = GlobalTable()
            context.publish_all_globals(vm)
            assert vm.get("NULL_KEY").kind == PublishKind.STRING
            assert vm.get("ZERO_ROTATION").kind == PublishKind.VECTOR
            assert len(vm.get("ZERO_ROTATION").value) == 3

    def test_lsl_dialect_4_wide(self):
        config = BuiltinsConfig(dialect=Dialect.LSL, vector_size=4)
        with BuiltinsContext(config) as context:
            context.initialize()
            assert context.resolve("ZERO_ROTATION").value == (0.0, 0.0, 0.0, 1.0)

    def test_lsl_dialect_does_not_read_overlay(self, decl_files, tmp_path):
        builtins = decl_files("builtins.txt", "const integer A = 1\n")
        config = BuiltinsConfig(dialect=Dialect.LSL)
        with BuiltinsContext(config) as context:
            context.initialize(builtins, tmp_path / "missing.d.luau")
            assert context.lookup_constant("A").value == 1


class TestThreadSlot:
    """Tests for the per-thread module-level functions."""

    def test_init_lookup_publish(self, thread_slot):
        init_builtins()
        assert lookup_constant("ACTIVE").value == 2
        assert lookup_overlay_type("NULL_KEY") == OverlayType.UUID
        vm = GlobalTable()
        assert set_constant_globals(vm) > 100
        deinit_builtins()
        assert lookup_constant("ACTIVE") is None
        deinit_builtins()

    def test_init_with_config(self, thread_slot):
        init_builtins(config=BuiltinsConfig(dialect=Dialect.LSL))
        assert current_context().config.dialect == Dialect.LSL
        assert lookup_overlay_type("NULL_KEY") is None

    def test_lookup_ignores_invalid_environment(self, thread_slot, monkeypatch):
        monkeypatch.setenv("LUA_VECTOR_SIZE", "9")
        monkeypatch.setenv("SLUA_DIALECT", "python")
        assert lookup_constant("PI") is None
        assert lookup_overlay_type("NULL_KEY") is None
        assert set_constant_globals(GlobalTable()) == 0
        with pytest.raises(ValueError, match="Invalid builtins environment"):
            init_builtins()
        assert lookup_constant("PI") is None

    def test_init_reads_environment(self, thread_slot, monkeypatch):
        monkeypatch.setenv("SLUA_DIALECT", "lsl")
        monkeypatch.setenv("LUA_VECTOR_SIZE", "4")
        init_builtins()
        assert current_context().config.dialect == Dialect.LSL
        assert lookup_overlay_type("NULL_KEY") is None
        assert current_context().resolve("ZERO_ROTATION").value == (0.0, 0.0, 0.0, 1.0)

    def test_slots_are_per_thread(self, thread_slot):
        init_builtins()
        seen = {}

        def worker():
            seen["before"] = lookup_constant("ACTIVE")
            seen["context"] = current_context()

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert seen["before"] is None
        assert seen["context"] is not current_context()
        assert lookup_constant("ACTIVE").value == 2

    def test_package_exports(self, thread_slot):
        slua_builtins.init_builtins()
        assert slua_builtins.lookup_constant("NULL_KEY").kind == slua_builtins.ConstantKind.KEY
