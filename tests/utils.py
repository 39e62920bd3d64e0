from lexer import Lexer
from parser import Parser


def lex(text: str, config=None):
    """Return a list of tokens (including ERROR tokens) for the given source text."""
    return Lexer(text, config).tokenize()


def lex_with_diagnostics(text: str, config=None):
    lexer = Lexer(text, config)
    tokens = lexer.tokenize()
    return tokens, lexer.diagnostics


def types_of(tokens):
    return [t.type for t in tokens]


def parse_text(text: str, config=None):
    """Convenience: lex+parse a source text into an AST, raising on errors."""
    return Parser(Lexer(text, config).tokenize(), config).parse()


def parse_with_diagnostics(text: str, config=None):
    """Lex+parse without raising; returns (program, parser diagnostics)."""
    parser = Parser(Lexer(text, config).tokenize(), config)
    program = parser.parse_program()
    return program, parser.diagnostics


def body_of(program, index: int = 0):
    """Statements of the `index`-th function declared in `program`."""
    return program.functions[index].body.statements
