"""Pretty-printer for the AST.

Provides `PrettyPrinter.print_ast(node, indent, prefix)` which renders an
AST into a readable multi-line tree, and `PrettyPrinter.print_surface(node)`
which renders it back into source syntax. The tree printer is intended for
debugging, tests and development; the surface printer produces text the
parser accepts, with canonical spacing and explicit parentheses around
nested binary expressions.

Examples:
    PrettyPrinter.print_ast(program_node)
    PrettyPrinter.print_surface(program_node)
"""

from __future__ import annotations
from typing import List

from ast_nodes import *
from primitives import LiteralKind

ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
    "\\": "\\\\",
}


def _quote(text: str, quote: str) -> str:
    body = "".join(
        ESCAPES.get(c, "\\" + c if c == quote else c) for c in text
    )
    return f"{quote}{body}{quote}"


class PrettyPrinter:
    @staticmethod
    def print_ast(node: ASTNode, indent: int = 0, prefix: str = "") -> str:
        """Pretty print AST and return as string."""
        lines = []
        indent_str = " " * indent

        if not isinstance(node, ASTNode):
            lines.append(f"{indent_str}{prefix}{node}")
            return "\n".join(lines)

        match node:
            case LiteralNode(literal_kind=kind, lexeme=lexeme):
                lines.append(f"{indent_str}{prefix}Literal({kind}, {lexeme})")

            case IdentifierNode(name=n):
                lines.append(f"{indent_str}{prefix}Identifier({n})")

            case TypeRefNode(name=t):
                lines.append(f"{indent_str}{prefix}TypeRef({t})")

            case BinaryExprNode(left=left, operator=op, right=right):
                lines.append(f"{indent_str}{prefix}BinaryExpr({op})")
                lines.append(PrettyPrinter.print_ast(left, indent + 2, "left: "))
                lines.append(PrettyPrinter.print_ast(right, indent + 2, "right: "))

            case CallExprNode(callee=callee, arguments=args):
                lines.append(f"{indent_str}{prefix}CallExpr({callee.name})")
                for i, arg in enumerate(args):
                    lines.append(PrettyPrinter.print_ast(arg, indent + 4, f"arg[{i}]: "))

            case ImportDeclNode(path=path):
                lines.append(f"{indent_str}{prefix}ImportDecl({path!r})")

            case FunctionDeclNode(name=name, params=params, body=body):
                args = ", ".join(f"{p.name}: {p.type_ref.name}" for p in params)
                ret = node.return_type.name if node.return_type else "<default>"
                lines.append(
                    f"{indent_str}{prefix}FunctionDecl({name} -> {ret}, params=[{args}])"
                )
                lines.append(PrettyPrinter.print_ast(body, indent + 4, "body: "))

            case ParameterNode(name=name, type_ref=tref):
                lines.append(f"{indent_str}{prefix}Parameter({name}: {tref.name})")

            case ReturnStmtNode(expression=expr):
                lines.append(f"{indent_str}{prefix}Return")
                if expr:
                    lines.append(PrettyPrinter.print_ast(expr, indent + 2, "expr: "))

            case AssignStmtNode(target=target, operator=op, value=value):
                lines.append(f"{indent_str}{prefix}Assign({target.name} {op})")
                lines.append(PrettyPrinter.print_ast(value, indent + 2, "value: "))

            case ExprStmtNode(expression=expr):
                lines.append(f"{indent_str}{prefix}ExpressionStatement")
                lines.append(PrettyPrinter.print_ast(expr, indent + 2))

            case BlockNode(statements=stmts):
                lines.append(f"{indent_str}{prefix}Block")
                for i, stmt in enumerate(stmts):
                    lines.append(PrettyPrinter.print_ast(stmt, indent + 4, f"stmt[{i}]: "))

            case VarDeclNode(name=vname, type_ref=tref, initializer=init):
                vtype = tref.name if tref else "untyped"
                lines.append(f"{indent_str}{prefix}VarDecl({vname}: {vtype})")
                lines.append(PrettyPrinter.print_ast(init, indent + 2, "init: "))

            case ProgramNode(declarations=decls):
                lines.append(f"{indent_str}{prefix}Program")
                for i, decl in enumerate(decls):
                    lines.append(PrettyPrinter.print_ast(decl, indent + 4, f"decl[{i}]: "))

            case _:
                lines.append(f"{indent_str}{prefix}Unknown node type: {type(node)}")

        return "\n".join(line for line in lines if line)

    @staticmethod
    def print_surface(node: ASTNode, indent: int = 0) -> str:
        """Return source text for `node` that parses back to the same tree."""
        if node is None:
            return ""

        pad = "    " * indent

        def _p(n: ASTNode) -> str:
            return PrettyPrinter.print_surface(n)

        def _operand(n: ASTNode) -> str:
            if isinstance(n, BinaryExprNode):
                return f"({_p(n)})"
            return _p(n)

        match node:
            case LiteralNode(literal_kind=LiteralKind.STRING, value=v):
                return _quote(v, '"')
            case LiteralNode(literal_kind=LiteralKind.CHAR, value=v):
                return _quote(v, "'")
            case LiteralNode(lexeme=lexeme):
                return lexeme
            case IdentifierNode(name=n):
                return n
            case TypeRefNode(name=t):
                return str(t)
            case BinaryExprNode(left=l, operator=op, right=r):
                return f"{_operand(l)} {op} {_operand(r)}"
            case CallExprNode(callee=callee, arguments=args):
                return f"{callee.name}({', '.join(_p(a) for a in args)})"
            case ExprStmtNode(expression=expr):
                return f"{pad}{_p(expr)};"
            case ReturnStmtNode(expression=expr):
                if expr:
                    return f"{pad}return {_p(expr)};"
                return f"{pad}return;"
            case AssignStmtNode(target=target, operator=op, value=value):
                return f"{pad}{target.name} {op} {_p(value)};"
            case VarDeclNode(name=vn, type_ref=tref, initializer=init, keyword=kw):
                head = f"{kw} {vn}" if kw else vn
                if tref is not None:
                    return f"{pad}{head} : {tref.name} = {_p(init)};"
                return f"{pad}{head} := {_p(init)};"
            case BlockNode(statements=stmts):
                if not stmts:
                    return "{ }"
                body: List[str] = [
                    PrettyPrinter.print_surface(s, indent + 1) for s in stmts
                ]
                return "{\n" + "\n".join(body) + f"\n{pad}}}"
            case ParameterNode(name=name, type_ref=tref):
                return f"{name} : {tref.name}"
            case FunctionDeclNode(name=fn, params=params, return_type=ret, body=body):
                args = ", ".join(_p(p) for p in params)
                binder = f" : {ret.name} =" if ret is not None else " :="
                return (
                    f"{pad}func {fn}({args}){binder} "
                    f"{PrettyPrinter.print_surface(body, indent)};"
                )
            case ImportDeclNode(path=path):
                return pad + "import " + _quote(path, '"') + ";"
            case ProgramNode(declarations=decls):
                return "\n".join(PrettyPrinter.print_surface(d, indent) for d in decls)
            case _:
                s = PrettyPrinter.print_ast(node)
                return " ".join(line.strip() for line in s.splitlines())
