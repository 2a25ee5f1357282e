"""Parser for `<a, b, c>` vector and `<a, b, c, d>` rotation literals."""

from __future__ import annotations

from typing import Any

import ply.yacc as yacc

from slua_builtins.parsing.literal_lexer import LiteralLexer


class LiteralParser:
    """Parser turning a geometric literal into its float32 components.

    The parser accepts any number of components; callers decide which
    counts are valid for the declared type.
    """

    tokens = LiteralLexer.tokens

    def __init__(self) -> None:
        self.lexer = LiteralLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_literal(self, p: yacc.YaccProduction) -> None:
        """literal : LANGLE component_list RANGLE"""
        p[0] = tuple(p[2])

    def p_component_list_single(self, p: yacc.YaccProduction) -> None:
        """component_list : NUMBER"""
        p[0] = [p[1]]

    def p_component_list_multiple(self, p: yacc.YaccProduction) -> None:
        """component_list : component_list COMMA NUMBER"""
        p[0] = p[1]
        p[0].append(p[3])

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> tuple[float, ...]:
        """Parse a literal and return its components.

        Raises:
            SyntaxError: If the text is not a well-formed `<...>` literal.
        """
        if self.parser is None:
            self.build(debug=False, write_tables=False)
        return self.parser.parse(data, lexer=self.lexer.lexer)
