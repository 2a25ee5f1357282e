"""Command line tool for inspecting builtins declaration files."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from slua_builtins.config import BuiltinsConfig, Dialect
from slua_builtins.context import BuiltinsContext
from slua_builtins.errors import BuiltinsError
from slua_builtins.types import Constant, GlobalValue, PublishKind
from slua_builtins.vm import GlobalTable


def format_components(components: tuple[float, ...]) -> str:
    return "<" + ", ".join(f"{c:.6g}" for c in components) + ">"


def format_value(value: GlobalValue) -> str:
    """Format a published value for display."""
    if value.kind == PublishKind.NIL:
        return "nil"
    if value.kind in (PublishKind.VECTOR, PublishKind.QUATERNION):
        return format_components(value.value)
    if value.kind == PublishKind.NUMBER:
        return f"{value.value:.9g}"
    return repr(value.value)


def format_constant(constant: Constant) -> str:
    if isinstance(constant.value, tuple):
        return format_components(constant.value)
    return repr(constant.value)


def run_lookup(context: BuiltinsContext, names: list[str]) -> int:
    """Print each named constant with its native kind and published form."""
    status = 0
    for name in names:
        constant = context.lookup_constant(name)
        published = context.resolve(name)
        if constant is None or published is None:
            print(f"{name}: not found", file=sys.stderr)
            status = 1
            continue
        overlay_type = context.lookup_overlay_type(name)
        declared = overlay_type.value if overlay_type is not None else "-"
        print(
            f"{name}: {constant.kind.value} {format_constant(constant)}"
            f" (declared {declared}, published as {published.kind.value}"
            f" {format_value(published)})"
        )
    return status


def run_dump(context: BuiltinsContext) -> int:
    """Publish every constant into an in-memory VM and print the globals."""
    vm = GlobalTable()
    context.publish_all_globals(vm)
    for name in sorted(vm.globals):
        value = vm.globals[name]
        print(f"{name}\t{value.kind.value}\t{format_value(value)}")
    return 0


def run_stats(context: BuiltinsContext) -> int:
    database = context.database
    if database is None:
        print("Error: builtins are not initialized", file=sys.stderr)
        return 1
    kinds: dict[str, int] = {}
    for _, constant in database.constants.items():
        kinds[constant.kind.value] = kinds.get(constant.kind.value, 0) + 1
    print(f"constants: {len(database.constants)}")
    for kind in sorted(kinds):
        print(f"  {kind}: {kinds[kind]}")
    print(f"type declarations: {len(database.overlay)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Inspect LSL/SLua builtin constant declarations"
    )
    arg_parser.add_argument(
        "--builtins",
        type=Path,
        default=None,
        help="Constant declaration file (default: embedded builtins.txt)",
    )
    arg_parser.add_argument(
        "--defs",
        type=Path,
        default=None,
        help="SLua type declaration file (default: embedded slua_default.d.luau)",
    )
    arg_parser.add_argument(
        "--dialect",
        choices=[d.value for d in Dialect],
        default=None,
        help="Publish values for this dialect (default: slua)",
    )
    arg_parser.add_argument(
        "--vector-size",
        type=int,
        choices=[3, 4],
        default=None,
        help="Number of components in the VM's vector type",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log parsing details to stderr",
    )
    subparsers = arg_parser.add_subparsers(dest="command", required=True)
    lookup_parser = subparsers.add_parser("lookup", help="Show named constants")
    lookup_parser.add_argument("names", nargs="+", help="Constant names")
    subparsers.add_parser("dump", help="Print every published global")
    subparsers.add_parser("stats", help="Summarize the loaded databases")

    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = BuiltinsConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    overrides = {}
    if args.dialect is not None:
        overrides["dialect"] = Dialect(args.dialect)
    if args.vector_size is not None:
        overrides["vector_size"] = args.vector_size
    if overrides:
        config = replace(config, **overrides)

    with BuiltinsContext(config) as context:
        try:
            context.initialize(args.builtins, args.defs)
        except BuiltinsError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        if args.command == "lookup":
            return run_lookup(context, args.names)
        elif args.command == "dump":
            return run_dump(context)
        else:
            return run_stats(context)


if __name__ == "__main__":
    sys.exit(main())
