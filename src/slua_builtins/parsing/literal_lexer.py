"""Lexer for `<a, b, c>` vector and rotation literals."""

import ply.lex as lex

from slua_builtins.types import to_float32


class LiteralLexer:
    """Lexer for tokenizing geometric literal values."""

    # Token list
    tokens = [
        "NUMBER",
        "LANGLE",
        "RANGLE",
        "COMMA",
    ]

    # Simple tokens
    t_LANGLE = r"<"
    t_RANGLE = r">"
    t_COMMA = r","

    # Components are separated by spaces and tabs only
    t_ignore = " \t"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[iI][nN][fF](?:[iI][nN][iI][tT][yY])?|[nN][aA][nN])"
        t.value = to_float32(float(t.value))
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
