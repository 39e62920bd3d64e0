"""Token definitions for the lexer.

This module defines the `TokenType` enum for all token kinds recognized by
the lexer, the `Position`/`Span` source-location values, and the frozen
`Token` dataclass. Tokens are the atomic units produced by the lexer and
consumed by the parser; they are never mutated after the lexer emits them.

The `TokenType` set is a stable contract: alternative front ends and tooling
(highlighters, formatters) are expected to rely on the member names.
"""

from __future__ import annotations
from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    # Keywords
    FUNC = auto()
    IMPORT = auto()
    RETURN = auto()
    LET = auto()  # every configured declaration keyword lexes to LET

    # Names
    IDENTIFIER = auto()
    TYPE_NAME = auto()  # primitive type names, resolved at lex time

    # Literals
    INTEGER = auto()
    DECIMAL = auto()
    STRING = auto()
    CHAR = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    SEMICOLON = auto()

    # Declaration / assignment operators
    DECLARE_ASSIGN = auto()
    COLON = auto()
    ASSIGN = auto()
    PLUS_ASSIGN = auto()
    MINUS_ASSIGN = auto()
    STAR_ASSIGN = auto()
    SLASH_ASSIGN = auto()
    PERCENT_ASSIGN = auto()

    # Arithmetic operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()

    # Special
    EOF = auto()
    ERROR = auto()

    def __str__(self) -> str:
        return self.name


# Human readable spelling used in diagnostics ("expected ',' or ')'").
TOKEN_SPELLINGS = {
    TokenType.FUNC: "'func'",
    TokenType.IMPORT: "'import'",
    TokenType.RETURN: "'return'",
    TokenType.LET: "declaration keyword",
    TokenType.IDENTIFIER: "identifier",
    TokenType.TYPE_NAME: "type name",
    TokenType.INTEGER: "integer literal",
    TokenType.DECIMAL: "decimal literal",
    TokenType.STRING: "string literal",
    TokenType.CHAR: "character literal",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.LBRACE: "'{'",
    TokenType.RBRACE: "'}'",
    TokenType.LBRACKET: "'['",
    TokenType.RBRACKET: "']'",
    TokenType.COMMA: "','",
    TokenType.SEMICOLON: "';'",
    TokenType.DECLARE_ASSIGN: "':='",
    TokenType.COLON: "':'",
    TokenType.ASSIGN: "'='",
    TokenType.PLUS_ASSIGN: "'+='",
    TokenType.MINUS_ASSIGN: "'-='",
    TokenType.STAR_ASSIGN: "'*='",
    TokenType.SLASH_ASSIGN: "'/='",
    TokenType.PERCENT_ASSIGN: "'%='",
    TokenType.PLUS: "'+'",
    TokenType.MINUS: "'-'",
    TokenType.STAR: "'*'",
    TokenType.SLASH: "'/'",
    TokenType.PERCENT: "'%'",
    TokenType.EOF: "end of input",
    TokenType.ERROR: "invalid token",
}


# Operator table for longest-match scanning. Keyed by the first character;
# candidates are listed longest first so `:=` wins over `:`.
OPERATORS = {
    ":": ((":=", TokenType.DECLARE_ASSIGN), (":", TokenType.COLON)),
    "=": (("=", TokenType.ASSIGN),),
    "+": (("+=", TokenType.PLUS_ASSIGN), ("+", TokenType.PLUS)),
    "-": (("-=", TokenType.MINUS_ASSIGN), ("-", TokenType.MINUS)),
    "*": (("*=", TokenType.STAR_ASSIGN), ("*", TokenType.STAR)),
    "/": (("/=", TokenType.SLASH_ASSIGN), ("/", TokenType.SLASH)),
    "%": (("%=", TokenType.PERCENT_ASSIGN), ("%", TokenType.PERCENT)),
    ";": ((";", TokenType.SEMICOLON),),
    ",": ((",", TokenType.COMMA),),
    "(": (("(", TokenType.LPAREN),),
    ")": ((")", TokenType.RPAREN),),
    "{": (("{", TokenType.LBRACE),),
    "}": (("}", TokenType.RBRACE),),
    "[": (("[", TokenType.LBRACKET),),
    "]": (("]", TokenType.RBRACKET),),
}


# Reserved words other than the (configurable) declaration keywords.
KEYWORDS = {
    "func": TokenType.FUNC,
    "import": TokenType.IMPORT,
    "return": TokenType.RETURN,
}


ASSIGNMENT_OPERATORS = frozenset(
    {
        TokenType.ASSIGN,
        TokenType.PLUS_ASSIGN,
        TokenType.MINUS_ASSIGN,
        TokenType.STAR_ASSIGN,
        TokenType.SLASH_ASSIGN,
        TokenType.PERCENT_ASSIGN,
    }
)


@dataclass(frozen=True)
class Position:
    offset: int = 0
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Span:
    """Half-open source range `[start.offset, end.offset)`."""

    start: Position = Position()
    end: Position = Position()

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"

    def __len__(self) -> int:
        return self.end.offset - self.start.offset

    def to(self, other: Span) -> Span:
        """Return the span covering `self` through `other`."""
        return Span(self.start, other.end)

    def slice(self, source: str) -> str:
        return source[self.start.offset : self.end.offset]


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    span: Span = Span()
    value: Any = None

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.lexeme!r})"

    @property
    def line(self) -> int:
        return self.span.start.line

    @property
    def column(self) -> int:
        return self.span.start.column

    def describe(self) -> str:
        if self.type == TokenType.EOF:
            return TOKEN_SPELLINGS[TokenType.EOF]
        return f"{TOKEN_SPELLINGS[self.type]} {self.lexeme!r}"
