"""
Parser for the language.

Overview and approach:
- This parser is a hand-written, single-pass recursive-descent parser. Each
    nonterminal is a `parse_*` method that looks at the current token (plus at
    most one token of lookahead) to pick a production, consumes the tokens it
    matched, and builds the corresponding AST node from `ast_nodes.py`.

Grammar:
    Program      := (ImportDecl | FunctionDecl)*
    ImportDecl   := "import" String ";"
    FunctionDecl := "func" Ident "(" Params? ")" (":" Type)? (":=" | "=") Block ";"
    Params       := Param ("," Param)*
    Param        := Ident ":" Type
    Block        := "{" Statement* "}"
    Statement    := VarDecl | Assign | Return | Expr ";"
    VarDecl      := DeclKeyword? Ident (":" Type)? (":=" | "=") Expr ";"
    Assign       := Ident ("=" | "+=" | "-=" | "*=" | "/=" | "%=") Expr ";"
    Return       := "return" Expr? ";"
    Expr         := Term (BinaryOp Term)*
    Term         := Ident | Literal | Ident "(" Args? ")" | "(" Expr ")"

Key points:
- Expression parsing uses precedence climbing over `self.precedence`; adding
    an operator tier is a change to that table only. All binary operators are
    left-associative.
- Only the entry function (`main` by default) may omit its return type;
    elsewhere the omission is reported but the declaration is still built.
- Error recovery is panic mode. A failing statement is skipped up to the
    next `;` at the same nesting depth (or the `}` closing the block); a
    failing declaration is skipped up to the next top-level `;` or the next
    `func`/`import`. Every error is recorded in `self.diagnostics`, so one
    call reports all independent syntax errors.
- `ERROR` tokens from the lexer are dropped on entry; the lexer has already
    reported them.
"""

from __future__ import annotations
import logging
from typing import Dict, FrozenSet, Iterable, List, Optional

from ast_nodes import *
from config import DEFAULT_CONFIG, FrontendConfig
from diagnostics import Diagnostic, DiagnosticKind, ParseError
from primitives import LiteralKind
from tokens import ASSIGNMENT_OPERATORS, Span, Token, TokenType

logger = logging.getLogger(__name__)


LITERAL_KINDS: Dict[TokenType, LiteralKind] = {
    TokenType.INTEGER: LiteralKind.INTEGER,
    TokenType.DECIMAL: LiteralKind.DECIMAL,
    TokenType.STRING: LiteralKind.STRING,
    TokenType.CHAR: LiteralKind.CHAR,
}

TERM_START: FrozenSet[TokenType] = frozenset(
    {TokenType.IDENTIFIER, TokenType.LPAREN, *LITERAL_KINDS}
)

BINDERS: FrozenSet[TokenType] = frozenset({TokenType.DECLARE_ASSIGN, TokenType.ASSIGN})


class Parser:
    def __init__(self, tokens: List[Token], config: Optional[FrontendConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.tokens = [t for t in tokens if t.type != TokenType.ERROR]
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            end = self.tokens[-1].span.end if self.tokens else Span().end
            self.tokens.append(Token(TokenType.EOF, "", Span(end, end)))
        self.pos = 0
        self.current = self.tokens[0]
        self.previous = self.current
        self.diagnostics: List[Diagnostic] = []
        self.halted = False

        # Operator precedence table (higher = tighter binding)
        self.precedence: Dict[TokenType, int] = {
            TokenType.PLUS: 1,
            TokenType.MINUS: 1,
            TokenType.STAR: 2,
            TokenType.SLASH: 2,
            TokenType.PERCENT: 2,
        }

    def peek(self, offset: int = 1) -> Token:
        """Return a token ahead of the current one without consuming it."""
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        """Consume the current token and return it."""
        token = self.current
        self.previous = token
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        self.current = self.tokens[self.pos]
        return token

    def error(
        self,
        expected: Iterable[TokenType] = (),
        kind: DiagnosticKind = DiagnosticKind.UNEXPECTED_TOKEN,
    ) -> ParseError:
        """Build (not raise) a syntax error at the current token."""
        token = self.current
        if token.type == TokenType.EOF and kind == DiagnosticKind.UNEXPECTED_TOKEN:
            kind = DiagnosticKind.UNEXPECTED_EOF
        return ParseError([Diagnostic(kind, token.span, frozenset(expected), token)])

    def expect(self, *expected_types: TokenType) -> Token:
        """Expect and consume a token of one of the given types."""
        if self.current.type in expected_types:
            return self.advance()
        raise self.error(expected_types)

    def match(self, token_type: TokenType) -> Optional[Token]:
        """Consume the current token if it has the given type."""
        if self.current.type == token_type:
            return self.advance()
        return None

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        logger.debug("syntax error at %s: %s", diagnostic.span.start, diagnostic.message)
        if self.config.fail_fast:
            self.halted = True

    def span_from(self, start: Token) -> Span:
        return start.span.to(self.previous.span)

    # Recovery

    def synchronize_statement(self) -> None:
        """Skip to just after the next `;`, or to the `}` closing this block."""
        depth = 0
        while self.current.type != TokenType.EOF:
            match self.current.type:
                case TokenType.LBRACE:
                    depth += 1
                case TokenType.RBRACE:
                    if depth == 0:
                        return
                    depth -= 1
                case TokenType.SEMICOLON if depth == 0:
                    self.advance()
                    return
            self.advance()

    def synchronize_declaration(self) -> None:
        """Skip to just after the next top-level `;`, or to the next declaration."""
        depth = 0
        while self.current.type != TokenType.EOF:
            match self.current.type:
                case TokenType.FUNC | TokenType.IMPORT if depth == 0:
                    return
                case TokenType.LBRACE:
                    depth += 1
                case TokenType.RBRACE:
                    depth = max(depth - 1, 0)
                case TokenType.SEMICOLON if depth == 0:
                    self.advance()
                    logger.debug("resynchronized at %s", self.previous.span.end)
                    return
            self.advance()

    # Types

    def parse_type_ref(self) -> TypeRefNode:
        """Parse a primitive type name: u16, u32, i16, i32, f32, f64, bool, char, string."""
        token = self.expect(TokenType.TYPE_NAME)
        return TypeRefNode(name=token.value, span=token.span)

    # Expressions

    def parse_primary(self) -> ASTNode:
        """Parse primary expressions (literals, identifiers, calls, parenthesized)."""
        token = self.current

        match token.type:
            case TokenType.INTEGER | TokenType.DECIMAL | TokenType.STRING | TokenType.CHAR:
                self.advance()
                return LiteralNode(
                    literal_kind=LITERAL_KINDS[token.type],
                    lexeme=token.lexeme,
                    value=token.value,
                    span=token.span,
                )

            case TokenType.IDENTIFIER:
                if self.peek().type == TokenType.LPAREN:
                    return self.parse_call()
                self.advance()
                return IdentifierNode(name=token.lexeme, span=token.span)

            case TokenType.LPAREN:
                self.advance()
                expr = self.parse_expression()
                self.expect(TokenType.RPAREN)
                return expr

            case _:
                raise self.error(TERM_START)

    def parse_call(self) -> CallExprNode:
        """Parse a call: ident '(' (expr (',' expr)*)? ')'"""
        name = self.expect(TokenType.IDENTIFIER)
        callee = IdentifierNode(name=name.lexeme, span=name.span)
        self.expect(TokenType.LPAREN)
        args: List[ASTNode] = []

        if self.current.type != TokenType.RPAREN:
            while True:
                args.append(self.parse_expression())
                if self.match(TokenType.COMMA):
                    if self.current.type == TokenType.RPAREN:
                        raise self.error(
                            TERM_START, DiagnosticKind.MALFORMED_ARGUMENT_LIST
                        )
                    continue
                if self.current.type != TokenType.RPAREN:
                    raise self.error({TokenType.COMMA, TokenType.RPAREN})
                break

        self.expect(TokenType.RPAREN)
        return CallExprNode(callee=callee, arguments=args, span=self.span_from(name))

    def parse_binary_expression(
        self, left: ASTNode, min_precedence: int = 1
    ) -> ASTNode:
        """Parse binary expressions using precedence climbing."""
        while True:
            precedence = self.precedence.get(self.current.type)
            if precedence is None or precedence < min_precedence:
                break

            operator = self.advance()
            # Parse right operand with higher precedence (left-associative)
            right = self.parse_binary_expression(self.parse_primary(), precedence + 1)
            left = BinaryExprNode(
                left=left,
                operator=operator.lexeme,
                right=right,
                span=left.span.to(right.span),
            )

        return left

    def parse_expression(self) -> ASTNode:
        """Parse an expression."""
        return self.parse_binary_expression(self.parse_primary())

    # Statements

    def parse_block(self) -> BlockNode:
        """Parse a block of statements: { statement* }"""
        start = self.expect(TokenType.LBRACE)
        statements: List[ASTNode] = []

        while (
            self.current.type not in (TokenType.RBRACE, TokenType.EOF)
            and not self.halted
        ):
            try:
                statements.append(self.parse_statement())
            except ParseError as e:
                for diagnostic in e.diagnostics:
                    self.report(diagnostic)
                if self.halted:
                    break
                self.synchronize_statement()

        if not self.halted:
            self.expect(TokenType.RBRACE)
        return BlockNode(statements=statements, span=self.span_from(start))

    def parse_variable_declaration(self) -> VarDeclNode:
        """Parse variable declaration: keyword? ident (':' type)? (':=' | '=') expr ;"""
        start = self.current
        keyword = self.match(TokenType.LET)
        name = self.expect(TokenType.IDENTIFIER)

        type_ref = None
        if self.match(TokenType.COLON):
            # `x : = 1` is the spaced form of `x := 1`.
            if not self.match(TokenType.ASSIGN):
                type_ref = self.parse_type_ref()
                self.expect(*BINDERS)
        elif self.current.type in BINDERS:
            self.advance()
        else:
            raise self.error({TokenType.COLON, *BINDERS})

        initializer = self.parse_expression()
        self.expect(TokenType.SEMICOLON)
        return VarDeclNode(
            name=name.lexeme,
            type_ref=type_ref,
            initializer=initializer,
            keyword=keyword.lexeme if keyword else None,
            span=self.span_from(start),
        )

    def parse_assignment(self) -> AssignStmtNode:
        """Parse assignment: ident ('=' | '+=' | ...) expr ;"""
        name = self.expect(TokenType.IDENTIFIER)
        operator = self.expect(*ASSIGNMENT_OPERATORS)
        value = self.parse_expression()
        self.expect(TokenType.SEMICOLON)
        return AssignStmtNode(
            target=IdentifierNode(name=name.lexeme, span=name.span),
            operator=operator.lexeme,
            value=value,
            span=self.span_from(name),
        )

    def parse_return_statement(self) -> ReturnStmtNode:
        """Parse return statement: return expr? ;"""
        start = self.expect(TokenType.RETURN)
        expr = None
        if self.current.type != TokenType.SEMICOLON:
            expr = self.parse_expression()
        self.expect(TokenType.SEMICOLON)
        return ReturnStmtNode(expression=expr, span=self.span_from(start))

    def parse_statement(self) -> ASTNode:
        """Parse a statement."""
        match self.current.type, self.peek().type:
            case TokenType.LET, _:
                return self.parse_variable_declaration()

            case TokenType.IDENTIFIER, TokenType.COLON | TokenType.DECLARE_ASSIGN:
                return self.parse_variable_declaration()

            case TokenType.IDENTIFIER, next_type if next_type in ASSIGNMENT_OPERATORS:
                return self.parse_assignment()

            case TokenType.RETURN, _:
                return self.parse_return_statement()

            case _:
                start = self.current
                expr = self.parse_expression()
                self.expect(TokenType.SEMICOLON)
                return ExprStmtNode(expression=expr, span=self.span_from(start))

    # Declarations

    def parse_parameter(self) -> ParameterNode:
        """Parse parameter: ident ':' type"""
        name = self.expect(TokenType.IDENTIFIER)
        self.expect(TokenType.COLON)
        type_ref = self.parse_type_ref()
        return ParameterNode(
            name=name.lexeme, type_ref=type_ref, span=self.span_from(name)
        )

    def parse_parameters(self) -> List[ParameterNode]:
        """Parse '(' (param (',' param)*)? ')'"""
        self.expect(TokenType.LPAREN)
        params: List[ParameterNode] = []

        if self.current.type != TokenType.RPAREN:
            while True:
                params.append(self.parse_parameter())
                if self.match(TokenType.COMMA):
                    if self.current.type == TokenType.RPAREN:
                        raise self.error(
                            {TokenType.IDENTIFIER},
                            DiagnosticKind.MALFORMED_PARAMETER_LIST,
                        )
                    continue
                if self.current.type != TokenType.RPAREN:
                    raise self.error({TokenType.COMMA, TokenType.RPAREN})
                break

        self.expect(TokenType.RPAREN)
        return params

    def parse_function_declaration(self) -> FunctionDeclNode:
        """Parse function: 'func' ident '(' params ')' (':' type)? (':=' | '=') block ';'"""
        start = self.expect(TokenType.FUNC)
        name = self.expect(TokenType.IDENTIFIER)
        params = self.parse_parameters()

        return_type = None
        if self.match(TokenType.COLON):
            # `func f() : = {...}` is the spaced form of `:=`.
            if not self.match(TokenType.ASSIGN):
                return_type = self.parse_type_ref()
                self.expect(*BINDERS)
        elif self.current.type in BINDERS:
            self.advance()
        else:
            raise self.error({TokenType.COLON, *BINDERS})

        if return_type is None and name.lexeme != self.config.entry_function:
            self.report(
                Diagnostic(
                    DiagnosticKind.MISSING_RETURN_TYPE,
                    name.span,
                    frozenset({TokenType.COLON}),
                    detail=f"function '{name.lexeme}'",
                )
            )

        body = self.parse_block()
        if not self.halted:
            self.expect(TokenType.SEMICOLON)
        return FunctionDeclNode(
            name=name.lexeme,
            params=params,
            return_type=return_type,
            body=body,
            span=self.span_from(start),
        )

    def parse_import(self) -> ImportDeclNode:
        """Parse import: 'import' string ';'"""
        start = self.expect(TokenType.IMPORT)
        path = self.expect(TokenType.STRING)
        self.expect(TokenType.SEMICOLON)
        return ImportDeclNode(path=path.value, span=self.span_from(start))

    def parse_declaration(self) -> ASTNode:
        match self.current.type:
            case TokenType.FUNC:
                return self.parse_function_declaration()
            case TokenType.IMPORT:
                return self.parse_import()
            case _:
                raise self.error({TokenType.FUNC, TokenType.IMPORT})

    def parse_program(self) -> ProgramNode:
        """Parse a complete program, collecting diagnostics instead of raising."""
        first = self.current
        declarations: List[ASTNode] = []

        while self.current.type != TokenType.EOF and not self.halted:
            before = self.pos
            try:
                declarations.append(self.parse_declaration())
            except ParseError as e:
                for diagnostic in e.diagnostics:
                    self.report(diagnostic)
                if self.halted:
                    break
                self.synchronize_declaration()
                if self.pos == before:
                    self.advance()

        logger.debug(
            "parsed %d declaration(s) with %d error(s)",
            len(declarations),
            len(self.diagnostics),
        )
        return ProgramNode(
            declarations=declarations, span=first.span.to(self.current.span)
        )

    def parse(self) -> ProgramNode:
        """Parse the token list, raising `ParseError` if any syntax error was found."""
        program = self.parse_program()
        if self.diagnostics:
            raise ParseError(self.diagnostics, program)
        return program


def parse(tokens: List[Token], config: Optional[FrontendConfig] = None) -> ProgramNode:
    """Parse `tokens` into a `ProgramNode`, raising `ParseError` on failure."""
    return Parser(tokens, config).parse()
