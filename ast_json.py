"""Convert AST nodes into JSON-serializable structures.

This module provides `ast_to_json(node)` which returns a nested structure
of dicts/lists/primitives describing the AST node, and `span_to_json` for
source locations. Every node carries its span so downstream tooling (editor
diagnostics, external type checkers) can map results back to the source.
"""

from typing import Any, Dict, Optional

from ast_nodes import *
from diagnostics import Diagnostic
from tokens import Span


def span_to_json(span: Optional[Span]) -> Any:
    if span is None:
        return None
    return {
        "start": {
            "offset": span.start.offset,
            "line": span.start.line,
            "column": span.start.column,
        },
        "end": {
            "offset": span.end.offset,
            "line": span.end.line,
            "column": span.end.column,
        },
    }


def ast_to_json(node: Optional[ASTNode]) -> Any:
    if node is None:
        return None

    data: Dict[str, Any]
    match node:
        case LiteralNode():
            data = {
                "node_type": "Literal",
                "literal_kind": str(node.literal_kind),
                "lexeme": node.lexeme,
                "value": node.value,
            }
        case IdentifierNode():
            data = {"node_type": "Identifier", "name": node.name}
        case TypeRefNode():
            data = {"node_type": "TypeRef", "name": str(node.name)}
        case BinaryExprNode():
            data = {
                "node_type": "BinaryExpr",
                "operator": node.operator,
                "left": ast_to_json(node.left),
                "right": ast_to_json(node.right),
            }
        case CallExprNode():
            data = {
                "node_type": "CallExpr",
                "callee": ast_to_json(node.callee),
                "arguments": [ast_to_json(a) for a in node.arguments],
            }
        case ExprStmtNode():
            data = {"node_type": "ExprStmt", "expression": ast_to_json(node.expression)}
        case VarDeclNode():
            data = {
                "node_type": "VarDecl",
                "name": node.name,
                "keyword": node.keyword,
                "type_ref": ast_to_json(node.type_ref),
                "initializer": ast_to_json(node.initializer),
            }
        case AssignStmtNode():
            data = {
                "node_type": "AssignStmt",
                "target": ast_to_json(node.target),
                "operator": node.operator,
                "value": ast_to_json(node.value),
            }
        case ReturnStmtNode():
            data = {"node_type": "ReturnStmt", "expression": ast_to_json(node.expression)}
        case BlockNode():
            data = {
                "node_type": "Block",
                "statements": [ast_to_json(s) for s in node.statements],
            }
        case ParameterNode():
            data = {
                "node_type": "Parameter",
                "name": node.name,
                "type_ref": ast_to_json(node.type_ref),
            }
        case FunctionDeclNode():
            data = {
                "node_type": "FunctionDecl",
                "name": node.name,
                "params": [ast_to_json(p) for p in node.params],
                "return_type": ast_to_json(node.return_type),
                "effective_return_type": str(node.effective_return_type),
                "body": ast_to_json(node.body),
            }
        case ImportDeclNode():
            data = {"node_type": "ImportDecl", "path": node.path}
        case ProgramNode():
            data = {
                "node_type": "Program",
                "declarations": [ast_to_json(d) for d in node.declarations],
            }
        case _:
            raise TypeError(f"cannot serialize {type(node).__name__}")

    data["span"] = span_to_json(node.span)
    return data


def diagnostic_to_json(diagnostic: Diagnostic) -> Dict[str, Any]:
    return {
        "kind": str(diagnostic.kind),
        "phase": diagnostic.kind.phase,
        "message": diagnostic.message,
        "span": span_to_json(diagnostic.span),
        "expected": sorted(t.name for t in diagnostic.expected),
        "actual": diagnostic.actual.lexeme if diagnostic.actual else None,
    }
