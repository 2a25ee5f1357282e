"""Parsing module for the constant and type overlay declaration formats."""

from slua_builtins.parsing.constant_parser import ConstantParser
from slua_builtins.parsing.literal_parser import LiteralParser
from slua_builtins.parsing.overlay_parser import OverlayParser

__all__ = [
    "ConstantParser",
    "LiteralParser",
    "OverlayParser",
]
