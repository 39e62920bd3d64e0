"""Structured diagnostics for the lexer and parser.

Every problem the front end finds is recorded as a `Diagnostic`: a closed
`DiagnosticKind`, the source `Span`, and for syntax errors the set of token
types that would have been accepted plus the token actually found. Messages
are derived from the kind; rendering (`format_diagnostic`) is a convenience
for the command-line driver, not part of the contract.

`LexError` and `ParseError` subclass `SyntaxError` and carry the full list of
diagnostics collected in one pass.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Sequence

from tokens import TOKEN_SPELLINGS, Span, Token, TokenType

if TYPE_CHECKING:
    from ast_nodes import ProgramNode


class DiagnosticKind(Enum):
    # Lexical
    ILLEGAL_CHARACTER = ("lex", "illegal character")
    UNTERMINATED_STRING = ("lex", "unterminated string literal")
    UNTERMINATED_CHAR = ("lex", "unterminated character literal")
    MALFORMED_CHAR_LITERAL = (
        "lex",
        "character literal must contain exactly one character",
    )
    INVALID_ESCAPE = ("lex", "invalid escape sequence")
    UNTERMINATED_BLOCK_COMMENT = ("lex", "unterminated block comment")

    # Syntactic
    UNEXPECTED_TOKEN = ("parse", "unexpected token")
    UNEXPECTED_EOF = ("parse", "unexpected end of input")
    MALFORMED_PARAMETER_LIST = ("parse", "malformed parameter list")
    MALFORMED_ARGUMENT_LIST = ("parse", "malformed argument list")
    MISSING_RETURN_TYPE = ("parse", "missing return type")

    def __init__(self, phase: str, summary: str) -> None:
        self.phase = phase
        self.summary = summary

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    span: Span
    expected: FrozenSet[TokenType] = frozenset()
    actual: Optional[Token] = None
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        parts = [self.kind.summary]
        if self.detail:
            parts.append(self.detail)
        if self.expected:
            names = sorted(TOKEN_SPELLINGS[t] for t in self.expected)
            parts.append("expected " + " or ".join(names))
        if self.actual is not None:
            parts.append(f"found {self.actual.describe()}")
        return ", ".join(parts)

    def __str__(self) -> str:
        return f"{self.span.start}: {self.message}"


def format_diagnostic(diagnostic: Diagnostic, filename: str = "<input>") -> str:
    """Render a diagnostic as `file:line:col: error[kind]: message`."""
    start = diagnostic.span.start
    return (
        f"{filename}:{start.line}:{start.column}: "
        f"error[{diagnostic.kind}]: {diagnostic.message}"
    )


class FrontendError(SyntaxError):
    """Base class for errors carrying one or more diagnostics."""

    def __init__(self, diagnostics: Sequence[Diagnostic]) -> None:
        self.diagnostics: List[Diagnostic] = list(diagnostics)
        first = self.diagnostics[0] if self.diagnostics else None
        msg = str(first) if first else "front-end error"
        if len(self.diagnostics) > 1:
            msg += f" (and {len(self.diagnostics) - 1} more)"
        super().__init__(msg)
        if first is not None:
            self.lineno = first.span.start.line
            self.offset = first.span.start.column


class LexError(FrontendError):
    def __init__(
        self, diagnostics: Sequence[Diagnostic], tokens: Optional[List[Token]] = None
    ) -> None:
        super().__init__(diagnostics)
        self.tokens = tokens or []


class ParseError(FrontendError):
    """Raised by `Parser.parse`; `program` is the best-effort partial AST."""

    def __init__(
        self,
        diagnostics: Sequence[Diagnostic],
        program: Optional[ProgramNode] = None,
    ) -> None:
        super().__init__(diagnostics)
        self.program = program
