import pytest

from ast_nodes import *
from config import FrontendConfig
from diagnostics import DiagnosticKind, ParseError
from main import lex, parse_tokens
from primitives import LiteralKind, PrimitiveType
from tests.utils import body_of, parse_text, parse_with_diagnostics
from tokens import TokenType


def test_empty_program_has_no_declarations():
    ast = parse_tokens(lex(""))
    assert isinstance(ast, ProgramNode)
    assert ast.declarations == []


def test_empty_entry_function():
    ast = parse_text("func main() := { };")
    assert len(ast.declarations) == 1
    fn = ast.declarations[0]
    assert isinstance(fn, FunctionDeclNode)
    assert fn.name == "main"
    assert fn.params == []
    assert fn.return_type is None
    assert fn.effective_return_type == PrimitiveType.I32
    assert isinstance(fn.body, BlockNode)
    assert fn.body.statements == []


@pytest.mark.parametrize("binder", [":=", "=", ": ="])
def test_entry_function_body_binders(binder):
    ast = parse_text(f"func main() {binder} {{ }};")
    fn = ast.functions[0]
    assert fn.return_type is None
    assert fn.body.statements == []


def test_empty_program_span_has_a_location():
    program, diagnostics = parse_with_diagnostics("")
    assert diagnostics == []
    assert len(program.span) == 0
    assert (program.line, program.column) == (1, 1)


def test_missing_binder_lists_both_spellings():
    _, diagnostics = parse_with_diagnostics("func main() := { let a 5; };")
    assert diagnostics[0].expected == frozenset(
        {TokenType.COLON, TokenType.DECLARE_ASSIGN, TokenType.ASSIGN}
    )


def test_import_and_call():
    ast = parse_text('import "std.print"; func main() := { print(1); };')
    assert [d.type for d in ast.declarations] == [NodeType.IMPORT_DECL, NodeType.FUNC_DECL]

    imp = ast.declarations[0]
    assert isinstance(imp, ImportDeclNode)
    assert imp.path == "std.print"

    stmts = body_of(ast)
    assert len(stmts) == 1
    assert isinstance(stmts[0], ExprStmtNode)
    call = stmts[0].expression
    assert isinstance(call, CallExprNode)
    assert call.callee.name == "print"
    assert len(call.arguments) == 1
    arg = call.arguments[0]
    assert isinstance(arg, LiteralNode)
    assert arg.literal_kind == LiteralKind.INTEGER
    assert arg.lexeme == "1"
    assert arg.value == 1


def test_untyped_variable_declaration():
    ast = parse_text("func main() := { let a := 5; };")
    (decl,) = body_of(ast)
    assert isinstance(decl, VarDeclNode)
    assert decl.name == "a"
    assert decl.keyword == "let"
    assert decl.type_ref is None
    assert not decl.is_typed
    assert isinstance(decl.initializer, LiteralNode)
    assert decl.initializer.literal_kind == LiteralKind.INTEGER
    assert decl.initializer.lexeme == "5"
    assert decl.initializer.default_type == PrimitiveType.U32


@pytest.mark.parametrize(
    "stmt",
    [
        "let a := 5;",
        "var a := 5;",
        "a := 5;",
        "a : = 5;",
        "let a : = 5;",
        "let a = 5;",
        "var a = 5;",
    ],
)
def test_declaration_spellings_are_equivalent(stmt):
    (decl,) = body_of(parse_text(f"func main() := {{ {stmt} }};"))
    assert isinstance(decl, VarDeclNode)
    assert decl.name == "a"
    assert decl.type_ref is None
    assert decl.initializer.value == 5


@pytest.mark.parametrize("binder", ["=", ":="])
def test_typed_variable_declaration(binder):
    (decl,) = body_of(parse_text(f"func main() := {{ let x : u16 {binder} 10; }};"))
    assert isinstance(decl.type_ref, TypeRefNode)
    assert decl.type_ref.name == PrimitiveType.U16
    assert decl.is_typed


def test_decimal_literal_records_lexical_class():
    (decl,) = body_of(parse_text("func main() := { let f := 2.5; };"))
    assert decl.initializer.literal_kind == LiteralKind.DECIMAL
    assert decl.initializer.default_type == PrimitiveType.F32


def test_string_and_char_initializers():
    s, c = body_of(parse_text("func main() := { let s := \"hi\"; let c := 'x'; };"))
    assert s.initializer.literal_kind == LiteralKind.STRING
    assert s.initializer.value == "hi"
    assert s.initializer.lexeme == '"hi"'
    assert c.initializer.literal_kind == LiteralKind.CHAR
    assert c.initializer.value == "x"


def test_function_with_params_and_return_type():
    ast = parse_text("func add(a : u32, b : u32) : u32 = { return a + b; };")
    fn = ast.declarations[0]
    assert fn.name == "add"
    assert [p.name for p in fn.params] == ["a", "b"]
    assert [p.type_ref.name for p in fn.params] == [PrimitiveType.U32, PrimitiveType.U32]
    assert fn.return_type.name == PrimitiveType.U32

    (ret,) = fn.body.statements
    assert isinstance(ret, ReturnStmtNode)
    assert isinstance(ret.expression, BinaryExprNode)
    assert ret.expression.operator == "+"
    assert ret.expression.left.name == "a"
    assert ret.expression.right.name == "b"


def test_return_type_accepts_declare_assign_binder():
    fn = parse_text("func f() : bool := { return; };").declarations[0]
    assert fn.return_type.name == PrimitiveType.BOOL
    assert fn.body.statements[0].expression is None


def test_additive_expressions_are_left_associative():
    (stmt,) = body_of(parse_text("func main() := { a - b + c; };"))
    expr = stmt.expression
    assert expr.operator == "+"
    assert expr.left.operator == "-"
    assert expr.left.left.name == "a"
    assert expr.right.name == "c"


def test_multiplicative_operators_bind_tighter():
    (stmt,) = body_of(parse_text("func main() := { a + b * c % d; };"))
    expr = stmt.expression
    assert expr.operator == "+"
    assert expr.left.name == "a"
    assert expr.right.operator == "%"
    assert expr.right.left.operator == "*"


def test_parentheses_override_precedence():
    (stmt,) = body_of(parse_text("func main() := { (a + b) * c; };"))
    expr = stmt.expression
    assert expr.operator == "*"
    assert expr.left.operator == "+"


def test_precedence_table_drives_new_operators():
    from lexer import Lexer
    from parser import Parser

    parser = Parser(Lexer("func main() := { a + b - c; };").tokenize())
    parser.precedence[TokenType.MINUS] = 2
    program = parser.parse()
    expr = program.functions[0].body.statements[0].expression
    assert expr.operator == "+"
    assert expr.right.operator == "-"


def test_nested_calls_and_arguments():
    (stmt,) = body_of(parse_text("func main() := { f(g(1), x + 2, \"s\"); };"))
    call = stmt.expression
    assert call.callee.name == "f"
    assert len(call.arguments) == 3
    assert isinstance(call.arguments[0], CallExprNode)
    assert call.arguments[0].callee.name == "g"
    assert isinstance(call.arguments[1], BinaryExprNode)
    assert call.arguments[2].literal_kind == LiteralKind.STRING


def test_call_with_no_arguments():
    (stmt,) = body_of(parse_text("func main() := { tick(); };"))
    assert stmt.expression.arguments == []


@pytest.mark.parametrize("op", ["=", "+=", "-=", "*=", "/=", "%="])
def test_assignment_statements(op):
    (stmt,) = body_of(parse_text(f"func main() := {{ x {op} x + 1; }};"))
    assert isinstance(stmt, AssignStmtNode)
    assert stmt.target.name == "x"
    assert stmt.operator == op
    assert isinstance(stmt.value, BinaryExprNode)


def test_last_statement_may_be_bare_expression():
    stmts = body_of(parse_text("func main() := { let a := 1; a + 1; };"))
    assert isinstance(stmts[-1], ExprStmtNode)


def test_declarations_keep_textual_order():
    ast = parse_text(
        'func b() : u32 = { return 1; }; import "x"; func main() := { }; import "y";'
    )
    assert [getattr(d, "name", None) or d.path for d in ast.declarations] == [
        "b",
        "x",
        "main",
        "y",
    ]
    assert [f.name for f in ast.functions] == ["b", "main"]
    assert [i.path for i in ast.imports] == ["x", "y"]


def test_missing_comma_in_parameters_reports_and_recovers():
    src = (
        "func bar(a : u32 b : u32) : u32 = { return a + b; };\n"
        "func main() := { };"
    )
    program, diagnostics = parse_with_diagnostics(src)
    assert len(diagnostics) == 1
    d = diagnostics[0]
    assert d.kind == DiagnosticKind.UNEXPECTED_TOKEN
    assert d.actual.lexeme == "b"
    assert d.expected == frozenset({TokenType.COMMA, TokenType.RPAREN})
    assert (d.span.start.line, d.span.start.column) == (1, 18)
    # parsing resumed after the `;` closing the broken declaration
    assert [f.name for f in program.functions] == ["main"]


def test_parse_raises_with_partial_program():
    src = "func bar(a : u32 b : u32) : u32 = { return a + b; }; func main() := { };"
    with pytest.raises(ParseError) as excinfo:
        parse_text(src)
    err = excinfo.value
    assert isinstance(err, SyntaxError)
    assert len(err.diagnostics) == 1
    assert err.program is not None
    assert [f.name for f in err.program.functions] == ["main"]


def test_multiple_independent_errors_are_reported():
    src = """
    func main() := {
        let a := ;
        let b := 2;
        print(1 2);
        return b;
    };
    func broken( := { };
    func ok() : u32 = { return 1; };
    """
    program, diagnostics = parse_with_diagnostics(src)
    assert len(diagnostics) == 3
    assert [d.span.start.line for d in diagnostics] == [3, 5, 8]
    main = program.functions[0]
    assert [type(s).__name__ for s in main.body.statements] == [
        "VarDeclNode",
        "ReturnStmtNode",
    ]
    assert [f.name for f in program.functions] == ["main", "ok"]


def test_trailing_comma_in_parameters():
    _, diagnostics = parse_with_diagnostics("func f(a : u32,) : u32 = { };")
    assert diagnostics[0].kind == DiagnosticKind.MALFORMED_PARAMETER_LIST
    assert diagnostics[0].actual.type == TokenType.RPAREN


def test_trailing_comma_in_arguments():
    _, diagnostics = parse_with_diagnostics("func main() := { f(1,); };")
    assert [d.kind for d in diagnostics] == [DiagnosticKind.MALFORMED_ARGUMENT_LIST]


def test_missing_return_type_outside_entry_function():
    program, diagnostics = parse_with_diagnostics("func helper() := { };")
    assert [d.kind for d in diagnostics] == [DiagnosticKind.MISSING_RETURN_TYPE]
    assert diagnostics[0].span.start.column == 6
    # the declaration is still built
    assert program.functions[0].name == "helper"


def test_entry_function_name_is_configurable():
    config = FrontendConfig(entry_function="start")
    program, diagnostics = parse_with_diagnostics("func start() := { };", config)
    assert diagnostics == []
    _, diagnostics = parse_with_diagnostics("func main() := { };", config)
    assert [d.kind for d in diagnostics] == [DiagnosticKind.MISSING_RETURN_TYPE]


def test_unexpected_end_of_input():
    _, diagnostics = parse_with_diagnostics("func main() := {")
    assert [d.kind for d in diagnostics] == [DiagnosticKind.UNEXPECTED_EOF]
    assert diagnostics[0].actual.type == TokenType.EOF


def test_missing_semicolon_after_function_body():
    _, diagnostics = parse_with_diagnostics("func main() := { }")
    assert [d.kind for d in diagnostics] == [DiagnosticKind.UNEXPECTED_EOF]
    assert diagnostics[0].expected == frozenset({TokenType.SEMICOLON})


def test_unknown_type_name_is_a_syntax_error():
    _, diagnostics = parse_with_diagnostics("func f(a : u64) : u32 = { };")
    assert diagnostics[0].actual.lexeme == "u64"
    assert diagnostics[0].expected == frozenset({TokenType.TYPE_NAME})


def test_stray_top_level_statement():
    program, diagnostics = parse_with_diagnostics("let x := 1; func main() := { };")
    assert len(diagnostics) == 1
    assert diagnostics[0].expected == frozenset({TokenType.FUNC, TokenType.IMPORT})
    assert [f.name for f in program.functions] == ["main"]


def test_unary_minus_is_not_in_the_grammar():
    _, diagnostics = parse_with_diagnostics("func main() := { let a := -1; };")
    assert diagnostics[0].actual.type == TokenType.MINUS


def test_lexical_errors_are_skipped_by_parser():
    # the lexer reports `@`; the parser does not report it a second time
    program, diagnostics = parse_with_diagnostics("func main() := { @ };")
    assert diagnostics == []
    assert program.functions[0].name == "main"


def test_fail_fast_stops_after_first_error():
    config = FrontendConfig(fail_fast=True)
    src = "func f(a b) : u32 = { }; func g(c d) : u32 = { };"
    program, diagnostics = parse_with_diagnostics(src, config)
    assert len(diagnostics) == 1
    assert program.declarations == []
