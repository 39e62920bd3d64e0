"""AST node definitions for the language.

This module defines the concrete AST node dataclasses produced by the parser
and handed to later compiler phases (type checking, code generation). Each
node is a dataclass carrying the relevant information (names, operators,
child nodes, types). The `NodeType` enum identifies node kinds and is used by
the pretty-printer and the JSON/Graphviz exporters.

Conventions:
- All AST node dataclasses inherit from `ASTNode`, which records the node
    kind (`NodeType`) and the source `Span` of the construct. Spans are frozen
    values; later passes read them for diagnostics but never replace them.
- The tree has strict ownership: every node has exactly one parent and no
    node is shared. `iter_children` walks direct children in source order;
    `iter_child_roles` pairs each child with the slot it fills.
- Types are purely syntactic. A `TypeRef` names one of the closed set of
    `PrimitiveType`s; untyped declarations keep `type_ref=None` and the
    initializer's `Literal.literal_kind` drives default-type inference.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List, Optional, Tuple, Union

from primitives import (
    ENTRY_RETURN_TYPE,
    LiteralKind,
    PrimitiveType,
    default_type_for,
)
from tokens import Span


class NodeType(Enum):
    PROGRAM = auto()
    IMPORT_DECL = auto()
    FUNC_DECL = auto()
    PARAMETER = auto()
    TYPE_REF = auto()
    BLOCK = auto()
    VAR_DECL = auto()
    ASSIGN_STMT = auto()
    RETURN_STMT = auto()
    EXPR_STMT = auto()
    LITERAL = auto()
    IDENTIFIER = auto()
    BINARY_EXPR = auto()
    CALL_EXPR = auto()

    def __str__(self) -> str:
        return self.name


# Base AST Node
@dataclass
class ASTNode:
    type: NodeType
    span: Optional[Span] = None

    @property
    def line(self) -> int:
        return self.span.start.line if self.span is not None else 0

    @property
    def column(self) -> int:
        return self.span.start.column if self.span is not None else 0


@dataclass
class TypeRefNode(ASTNode):
    type: NodeType = NodeType.TYPE_REF
    name: PrimitiveType = PrimitiveType.I32


# Expression Nodes
@dataclass
class LiteralNode(ASTNode):
    type: NodeType = NodeType.LITERAL
    literal_kind: LiteralKind = LiteralKind.INTEGER
    lexeme: str = ""
    value: Union[int, str, None] = None

    @property
    def default_type(self) -> PrimitiveType:
        return default_type_for(self.literal_kind)


@dataclass
class IdentifierNode(ASTNode):
    type: NodeType = NodeType.IDENTIFIER
    name: str = ""


@dataclass
class BinaryExprNode(ASTNode):
    type: NodeType = NodeType.BINARY_EXPR
    left: ASTNode = field(default_factory=lambda: LiteralNode())
    operator: str = ""
    right: ASTNode = field(default_factory=lambda: LiteralNode())


@dataclass
class CallExprNode(ASTNode):
    type: NodeType = NodeType.CALL_EXPR
    callee: IdentifierNode = field(default_factory=lambda: IdentifierNode())
    arguments: List[ASTNode] = field(default_factory=list)


# Statement Nodes
@dataclass
class VarDeclNode(ASTNode):
    type: NodeType = NodeType.VAR_DECL
    name: str = ""
    type_ref: Optional[TypeRefNode] = None
    initializer: ASTNode = field(default_factory=lambda: LiteralNode())
    # Spelling of the declaration keyword, or None when it was omitted.
    keyword: Optional[str] = None

    @property
    def is_typed(self) -> bool:
        return self.type_ref is not None


@dataclass
class AssignStmtNode(ASTNode):
    type: NodeType = NodeType.ASSIGN_STMT
    target: IdentifierNode = field(default_factory=lambda: IdentifierNode())
    operator: str = "="
    value: ASTNode = field(default_factory=lambda: LiteralNode())


@dataclass
class ReturnStmtNode(ASTNode):
    type: NodeType = NodeType.RETURN_STMT
    expression: Optional[ASTNode] = None


@dataclass
class ExprStmtNode(ASTNode):
    type: NodeType = NodeType.EXPR_STMT
    expression: ASTNode = field(default_factory=lambda: LiteralNode())


@dataclass
class BlockNode(ASTNode):
    type: NodeType = NodeType.BLOCK
    statements: List[ASTNode] = field(default_factory=list)


# Declaration Nodes
@dataclass
class ParameterNode(ASTNode):
    type: NodeType = NodeType.PARAMETER
    name: str = ""
    type_ref: TypeRefNode = field(default_factory=lambda: TypeRefNode())


@dataclass
class FunctionDeclNode(ASTNode):
    type: NodeType = NodeType.FUNC_DECL
    name: str = ""
    params: List[ParameterNode] = field(default_factory=list)
    return_type: Optional[TypeRefNode] = None
    body: BlockNode = field(default_factory=lambda: BlockNode())

    @property
    def effective_return_type(self) -> PrimitiveType:
        """Declared return type, or the entry function's implicit default."""
        if self.return_type is not None:
            return self.return_type.name
        return ENTRY_RETURN_TYPE


@dataclass
class ImportDeclNode(ASTNode):
    type: NodeType = NodeType.IMPORT_DECL
    path: str = ""


# Program Node
@dataclass
class ProgramNode(ASTNode):
    type: NodeType = NodeType.PROGRAM
    declarations: List[ASTNode] = field(default_factory=list)

    @property
    def imports(self) -> List[ImportDeclNode]:
        return [d for d in self.declarations if isinstance(d, ImportDeclNode)]

    @property
    def functions(self) -> List[FunctionDeclNode]:
        return [d for d in self.declarations if isinstance(d, FunctionDeclNode)]


def iter_child_roles(node: ASTNode) -> Iterator[Tuple[str, ASTNode]]:
    """Yield `(role, child)` pairs for the direct children of `node` in source order.

    Roles name the slot a child fills (`body`, `init`, `arg[0]`, ...); the
    Graphviz exporter uses them as edge labels.
    """
    match node:
        case ProgramNode(declarations=decls):
            for i, d in enumerate(decls):
                yield f"decl[{i}]", d
        case FunctionDeclNode(params=params, return_type=ret, body=body):
            for i, p in enumerate(params):
                yield f"param[{i}]", p
            if ret is not None:
                yield "returns", ret
            yield "body", body
        case ParameterNode(type_ref=tref):
            yield "type", tref
        case BlockNode(statements=stmts):
            for i, s in enumerate(stmts):
                yield f"stmt[{i}]", s
        case VarDeclNode(type_ref=tref, initializer=init):
            if tref is not None:
                yield "type", tref
            yield "init", init
        case AssignStmtNode(target=target, value=value):
            yield "target", target
            yield "value", value
        case ReturnStmtNode(expression=expr):
            if expr is not None:
                yield "expr", expr
        case ExprStmtNode(expression=expr):
            yield "expr", expr
        case BinaryExprNode(left=left, right=right):
            yield "left", left
            yield "right", right
        case CallExprNode(callee=callee, arguments=args):
            yield "callee", callee
            for i, a in enumerate(args):
                yield f"arg[{i}]", a
        case _:
            return


def iter_children(node: ASTNode) -> Iterator[ASTNode]:
    """Yield the direct children of `node` in source order."""
    for _, child in iter_child_roles(node):
        yield child


def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Pre-order traversal of the subtree rooted at `node`."""
    yield node
    for child in iter_children(node):
        yield from walk(child)
