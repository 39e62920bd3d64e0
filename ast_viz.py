"""Graphviz visualization helpers for the AST.

Provides `render_ast_dot(program)` which returns a `graphviz.Digraph` object
(not rendered). Optionally `write_and_render` can write the file to disk.

Layout: every AST node becomes one graph node labelled with its kind and key
fields (names, operators, literal text); edges run from parent to child in
source order and are labelled with the child's role (`body`, `arg[0]`, ...).
Top-level declarations are grouped into one cluster per declaration. Node
spans are shown in a smaller font when `include_spans` is set.
"""

import itertools
import html

from ast_nodes import *
from graphviz import Digraph


def _label(node: ASTNode) -> str:
    match node:
        case LiteralNode(literal_kind=kind, lexeme=lexeme):
            return f"Literal {kind}\n{lexeme}"
        case IdentifierNode(name=name):
            return f"Identifier\n{name}"
        case TypeRefNode(name=t):
            return f"TypeRef\n{t}"
        case BinaryExprNode(operator=op):
            return f"BinaryExpr\n{op}"
        case CallExprNode(callee=callee):
            return f"CallExpr\n{callee.name}"
        case VarDeclNode(name=name, keyword=kw):
            return f"VarDecl\n{kw + ' ' if kw else ''}{name}"
        case AssignStmtNode(operator=op):
            return f"AssignStmt\n{op}"
        case ParameterNode(name=name):
            return f"Parameter\n{name}"
        case FunctionDeclNode(name=name):
            return f"FunctionDecl\n{name} -> {node.effective_return_type}"
        case ImportDeclNode(path=path):
            return f"ImportDecl\n{path}"
        case ReturnStmtNode():
            return "ReturnStmt"
        case ExprStmtNode():
            return "ExprStmt"
        case BlockNode():
            return "Block"
        case ProgramNode():
            return "Program"
        case _:
            return type(node).__name__


def _node_html(node: ASTNode, include_spans: bool) -> str:
    title, _, detail = _label(node).partition("\n")
    rows = f"<TR><TD><B>{html.escape(title)}</B></TD></TR>"
    if detail:
        rows += f'<TR><TD><FONT POINT-SIZE="10">{html.escape(detail)}</FONT></TD></TR>'
    if include_spans and node.span is not None:
        rows += (
            f'<TR><TD><FONT POINT-SIZE="8">{html.escape(str(node.span))}</FONT></TD></TR>'
        )
    return f'<<TABLE BORDER="0" CELLBORDER="1" CELLSPACING="0">{rows}</TABLE>>'


def render_ast_dot(program: ProgramNode, include_spans: bool = False) -> Digraph:
    """Return a graphviz.Digraph for the given AST.

    The caller may call `dot.source` to inspect the dot text, or call
    `dot.render(filename, format=...)` to write files (requires Graphviz installed).
    """
    dot = Digraph(format="svg")
    dot.attr("graph", rankdir="TB")
    counter = itertools.count()

    def emit(graph: Digraph, node: ASTNode) -> str:
        node_id = f"n{next(counter)}"
        graph.node(node_id, label=_node_html(node, include_spans), shape="plaintext")
        for role, child in iter_child_roles(node):
            child_id = emit(graph, child)
            graph.edge(node_id, child_id, label=role)
        return node_id

    root_id = f"n{next(counter)}"
    dot.node(root_id, label=_node_html(program, include_spans), shape="plaintext")
    for i, decl in enumerate(program.declarations):
        name = getattr(decl, "name", None) or f"import_{i}"
        with dot.subgraph(name=f"cluster_{i}") as c:
            c.attr(label=f"{decl.type}: {name}", style="rounded")
            decl_id = emit(c, decl)
        dot.edge(root_id, decl_id, label=f"decl[{i}]")

    return dot


def write_and_render(
    program: ProgramNode,
    out_path: str,
    fmt: str = "svg",
    include_spans: bool = False,
) -> str:
    """Write and render the AST to the given path (without extension).

    Example: write_and_render(ast, 'out/ast', fmt='png') will create out/ast.png
    (requires Graphviz). Returns the path of the rendered file."""
    dot = render_ast_dot(program, include_spans=include_spans)
    dot.format = fmt
    # Note: render will append extension automatically
    return dot.render(out_path, cleanup=True)
