import io
import json

import pytest

from diagnostics import DiagnosticKind, LexError
from main import lex, main, parse_source, process_program


def test_parse_source_collects_lexical_and_syntax_errors():
    tokens, program, diagnostics = parse_source(
        "func main() := { let s := \"oops\n; };\nfunc f(a) : u32 = { };"
    )
    kinds = [d.kind for d in diagnostics]
    assert kinds[0] == DiagnosticKind.UNTERMINATED_STRING
    assert DiagnosticKind.UNEXPECTED_TOKEN in kinds
    assert tokens[-1].lexeme == ""
    assert program.functions[0].name == "main"


def test_lex_raises_on_lexical_error():
    with pytest.raises(LexError):
        lex("/* never closed")


def test_process_program_success_prints_ast():
    out, err = io.StringIO(), io.StringIO()
    status = process_program("func main() := { };", out=out, err=err, print_tokens=True)
    assert status == 0
    assert err.getvalue() == ""
    assert "Tokens (9):" in out.getvalue()
    assert "FunctionDecl(main" in out.getvalue()


def test_process_program_reports_diagnostics():
    out, err = io.StringIO(), io.StringIO()
    status = process_program("func f() := { };", filename="f.wad", out=out, err=err)
    assert status == 1
    assert err.getvalue().startswith("f.wad:1:6: error[missing_return_type]")
    assert "AST:" not in out.getvalue()


def test_main_reads_file_and_dumps_json(tmp_path, capsys):
    src = tmp_path / "prog.wad"
    src.write_text('import "std.print";\nfunc main() := { print(1); };\n', encoding="utf-8")
    dump = tmp_path / "ast.json"

    status = main(["--file", str(src), "--no-ast", "--dump-ast", str(dump)])

    assert status == 0
    data = json.loads(dump.read_text(encoding="utf-8"))
    assert [d["node_type"] for d in data["declarations"]] == ["ImportDecl", "FunctionDecl"]
    assert "Wrote AST JSON" in capsys.readouterr().out


def test_main_inline_source_and_surface(capsys):
    status = main(["--no-ast", "--surface", "func main() := { let a:=1+2; };"])
    assert status == 0
    assert "let a := 1 + 2;" in capsys.readouterr().out


def test_main_custom_declaration_keyword(capsys):
    status = main(["--no-ast", "--decl-keyword", "const", "func main() := { const a := 1; };"])
    assert status == 0


def test_main_rejects_reserved_declaration_keyword(capsys):
    status = main(["--decl-keyword", "func", "func main() := { };"])
    assert status == 2
    assert "Invalid configuration" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    status = main(["--file", str(tmp_path / "missing.wad")])
    assert status == 1
    assert "Failed to read file" in capsys.readouterr().err


def test_main_reports_errors_with_nonzero_status(capsys):
    status = main(["func main() := { @ };"])
    assert status == 1
    assert "illegal_character" in capsys.readouterr().err
