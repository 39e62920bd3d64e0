"""
Lexer for the language.

Overview:
- This module implements a small hand-written lexical analyzer (scanner) that
    transforms an input source string into a list of `Token` objects defined
    in `tokens.py`, terminated by a single `EOF` token.
- It recognizes keywords (`func`, `import`, `return` and the configured
    declaration keywords), primitive type names, identifiers, integer and
    decimal literals, string and character literals with escapes, operators
    and punctuation. Whitespace, `//` line comments and `/* */` block
    comments are skipped.

Examples:
    Input:  "func main() := { let a := 5; };"
    Tokens: [FUNC, IDENTIFIER('main'), LPAREN, RPAREN, DECLARE_ASSIGN, LBRACE,
             LET, IDENTIFIER('a'), DECLARE_ASSIGN, INTEGER(5), SEMICOLON,
             RBRACE, SEMICOLON, EOF]

Implementation notes:
- The lexer is a stateful scanner using `self.pos` and `self.current_char`;
    it only ever moves forward.
- Operators are matched against `tokens.OPERATORS`, longest candidate first,
    so `:=` is never split into `:` `=`. Emitted tokens are never revisited.
- Identifiers are scanned in full and then looked up in the keyword table
    (maximal munch), so `letter` is an identifier, not `let` + `ter`.
- Lexical errors produce an `ERROR` token plus a `Diagnostic` and scanning
    resumes at the next whitespace or line boundary, so a single pass reports
    every error. With `fail_fast` configured the scan stops at the first one.
- Every loop iteration consumes at least one character, so scanning is
    linear in the input length even for unterminated constructs.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterator, List, Optional

from config import DEFAULT_CONFIG, FrontendConfig
from diagnostics import Diagnostic, DiagnosticKind, LexError
from primitives import PrimitiveType
from tokens import KEYWORDS, OPERATORS, Position, Span, Token, TokenType

logger = logging.getLogger(__name__)


ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
}


def _is_digit(ch: Optional[str]) -> bool:
    return ch is not None and "0" <= ch <= "9"


def _is_ident_start(ch: Optional[str]) -> bool:
    return ch is not None and (ch.isalpha() or ch == "_")


def _is_ident_char(ch: Optional[str]) -> bool:
    return ch is not None and (ch.isalnum() or ch == "_")


class Lexer:
    def __init__(self, text: str, config: Optional[FrontendConfig] = None):
        self.text = text
        self.config = config or DEFAULT_CONFIG
        self.pos = 0
        self.line = 1
        self.column = 1
        self.current_char = self.text[self.pos] if self.text else None
        self.diagnostics: List[Diagnostic] = []

        self.keywords: Dict[str, TokenType] = dict(KEYWORDS)
        for word in self.config.declaration_keywords:
            self.keywords[word] = TokenType.LET

    def advance(self) -> None:
        """Advance to next character."""
        # Newlines reset the column and increment the line number.
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        self.pos += 1
        if self.pos < len(self.text):
            self.current_char = self.text[self.pos]
        else:
            self.current_char = None

    def peek_char(self) -> Optional[str]:
        """Look at next character without consuming it."""
        next_pos = self.pos + 1
        if next_pos < len(self.text):
            return self.text[next_pos]
        return None

    def mark(self) -> Position:
        return Position(self.pos, self.line, self.column)

    def make_token(self, token_type: TokenType, start: Position, value=None) -> Token:
        span = Span(start, self.mark())
        return Token(token_type, span.slice(self.text), span, value)

    def error(
        self,
        kind: DiagnosticKind,
        start: Position,
        detail: Optional[str] = None,
        end: Optional[Position] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(kind, Span(start, end or self.mark()), detail=detail)
        self.diagnostics.append(diagnostic)
        logger.debug("lexical error at %s: %s", start, diagnostic.message)
        return diagnostic

    def error_token(self, start: Position) -> Token:
        return self.make_token(TokenType.ERROR, start)

    def skip_whitespace(self) -> None:
        """Skip whitespace characters."""
        while self.current_char is not None and self.current_char.isspace():
            self.advance()

    def skip_line_comment(self) -> None:
        """Skip single-line comments (// ...)."""
        while self.current_char is not None and self.current_char != "\n":
            self.advance()

    def skip_block_comment(self) -> Optional[Token]:
        """Skip a block comment (/* ... */). Block comments do not nest.

        Returns an ERROR token if the input ends before the closing `*/`.
        """
        start = self.mark()
        self.advance()
        self.advance()

        while self.current_char is not None:
            if self.current_char == "*" and self.peek_char() == "/":
                self.advance()
                self.advance()
                return None
            self.advance()

        self.error(DiagnosticKind.UNTERMINATED_BLOCK_COMMENT, start)
        return self.error_token(start)

    def skip_to_boundary(self) -> None:
        """Resynchronize after an illegal character: skip to whitespace or EOF."""
        while self.current_char is not None and not self.current_char.isspace():
            self.advance()

    def number(self) -> Token:
        """Parse an integer (`1_000`) or decimal (`3.25`) literal."""
        start = self.mark()

        # Underscore separators are allowed after the first digit.
        while _is_digit(self.current_char) or self.current_char == "_":
            self.advance()

        if self.current_char == "." and _is_digit(self.peek_char()):
            self.advance()
            while _is_digit(self.current_char) or self.current_char == "_":
                self.advance()
            # No float semantics yet: the value is kept as source text.
            lexeme = self.text[start.offset : self.pos]
            return self.make_token(TokenType.DECIMAL, start, lexeme)

        lexeme = self.text[start.offset : self.pos]
        return self.make_token(TokenType.INTEGER, start, int(lexeme.replace("_", "")))

    def identifier(self) -> Token:
        """Parse an identifier, keyword or primitive type name."""
        start = self.mark()

        # First character must be a letter or underscore.
        self.advance()
        while _is_ident_char(self.current_char):
            self.advance()

        name = self.text[start.offset : self.pos]
        if name in self.keywords:
            return self.make_token(self.keywords[name], start)

        primitive = PrimitiveType.from_name(name)
        if primitive is not None:
            return self.make_token(TokenType.TYPE_NAME, start, primitive)

        return self.make_token(TokenType.IDENTIFIER, start, name)

    def escape(self, chars: List[str], bad: List[Diagnostic]) -> None:
        """Consume a backslash escape, appending the decoded character.

        Invalid escapes are recorded in `bad` rather than reported right away
        so the enclosing literal can still be scanned to its closing quote.
        """
        start = self.mark()
        self.advance()  # backslash
        ch = self.current_char
        if ch is None or ch == "\n":
            return
        self.advance()
        if ch in ESCAPES:
            chars.append(ESCAPES[ch])
        else:
            bad.append(
                Diagnostic(
                    DiagnosticKind.INVALID_ESCAPE,
                    Span(start, self.mark()),
                    detail=f"'\\{ch}'",
                )
            )

    def string(self) -> Token:
        """Parse a double-quoted string literal."""
        start = self.mark()
        self.advance()  # opening quote
        chars: List[str] = []
        bad: List[Diagnostic] = []

        while True:
            ch = self.current_char
            if ch is None or ch == "\n":
                # Resume at the line boundary; the newline is left for
                # skip_whitespace.
                self.error(DiagnosticKind.UNTERMINATED_STRING, start)
                return self.error_token(start)
            if ch == '"':
                self.advance()
                break
            if ch == "\\":
                if self.peek_char() == "\n":
                    # Line continuation: drop the backslash and the newline.
                    self.advance()
                    self.advance()
                    continue
                self.escape(chars, bad)
                continue
            chars.append(ch)
            self.advance()

        if bad:
            self.diagnostics.extend(bad)
            return self.error_token(start)
        return self.make_token(TokenType.STRING, start, "".join(chars))

    def char(self) -> Token:
        """Parse a single-quoted character literal."""
        start = self.mark()
        self.advance()  # opening quote
        chars: List[str] = []
        bad: List[Diagnostic] = []

        while True:
            ch = self.current_char
            if ch is None or ch == "\n":
                self.error(DiagnosticKind.UNTERMINATED_CHAR, start)
                return self.error_token(start)
            if ch == "'":
                self.advance()
                break
            if ch == "\\":
                self.escape(chars, bad)
                continue
            chars.append(ch)
            self.advance()

        if bad:
            self.diagnostics.extend(bad)
            return self.error_token(start)
        if len(chars) != 1:
            self.error(DiagnosticKind.MALFORMED_CHAR_LITERAL, start)
            return self.error_token(start)
        return self.make_token(TokenType.CHAR, start, chars[0])

    def operator(self) -> Optional[Token]:
        """Longest-match lookup of an operator or punctuation token."""
        candidates = OPERATORS.get(self.current_char)
        if candidates is None:
            return None

        start = self.mark()
        for lexeme, token_type in candidates:
            if self.text.startswith(lexeme, self.pos):
                for _ in lexeme:
                    self.advance()
                return self.make_token(token_type, start)
        return None

    def get_next_token(self) -> Token:
        """Lexical analyzer that returns tokens one at a time."""
        while self.current_char is not None:
            if self.current_char.isspace():
                self.skip_whitespace()
                continue

            if self.current_char == "/" and self.peek_char() == "/":
                self.skip_line_comment()
                continue

            if self.current_char == "/" and self.peek_char() == "*":
                unterminated = self.skip_block_comment()
                if unterminated is not None:
                    return unterminated
                continue

            if _is_digit(self.current_char):
                return self.number()

            if _is_ident_start(self.current_char):
                return self.identifier()

            if self.current_char == '"':
                return self.string()

            if self.current_char == "'":
                return self.char()

            token = self.operator()
            if token is not None:
                return token

            # If we reach here, the character is not recognized.
            start = self.mark()
            bad_char = self.current_char
            self.advance()
            self.error(
                DiagnosticKind.ILLEGAL_CHARACTER, start, detail=repr(bad_char)
            )
            self.skip_to_boundary()
            return self.error_token(start)

        return self.make_token(TokenType.EOF, self.mark())

    def iter_tokens(self) -> Iterator[Token]:
        """Yield tokens one at a time, ending with the EOF token."""
        while True:
            token = self.get_next_token()
            if token.type == TokenType.ERROR and self.config.fail_fast:
                yield token
                yield self.make_token(TokenType.EOF, self.mark())
                return
            yield token
            if token.type == TokenType.EOF:
                return

    def tokenize(self) -> List[Token]:
        """Return all tokens from the input string.

        Lexical errors do not raise here; they appear as ERROR tokens and are
        listed in `self.diagnostics`.
        """
        tokens = list(self.iter_tokens())
        logger.debug(
            "lexed %d tokens with %d error(s)", len(tokens), len(self.diagnostics)
        )
        return tokens


def tokenize(source: str, config: Optional[FrontendConfig] = None) -> List[Token]:
    """Tokenize `source`, raising `LexError` with every diagnostic on failure."""
    lexer = Lexer(source, config)
    tokens = lexer.tokenize()
    if lexer.diagnostics:
        raise LexError(lexer.diagnostics, tokens)
    return tokens
