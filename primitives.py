"""Primitive types and literal classes.

The language has a closed set of primitive types and no user-defined types.
`PrimitiveType` enumerates them, keyed by their source spelling.
`LiteralKind` records the lexical class of a literal so that later passes can
pick a default type for an untyped declaration by table lookup instead of
re-reading the literal's text.
"""

from __future__ import annotations
from enum import Enum, auto
from typing import Dict, Optional


class PrimitiveType(Enum):
    U16 = "u16"
    U32 = "u32"
    I16 = "i16"
    I32 = "i32"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    CHAR = "char"
    STRING = "string"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> Optional[PrimitiveType]:
        return _BY_NAME.get(name)


_BY_NAME: Dict[str, PrimitiveType] = {t.value: t for t in PrimitiveType}


class LiteralKind(Enum):
    INTEGER = auto()
    DECIMAL = auto()
    STRING = auto()
    CHAR = auto()

    def __str__(self) -> str:
        return self.name.lower()


DEFAULT_TYPES: Dict[LiteralKind, PrimitiveType] = {
    LiteralKind.INTEGER: PrimitiveType.U32,
    LiteralKind.DECIMAL: PrimitiveType.F32,
    LiteralKind.STRING: PrimitiveType.STRING,
    LiteralKind.CHAR: PrimitiveType.CHAR,
}

# Implicit return type of the entry function, which may omit its annotation.
ENTRY_RETURN_TYPE = PrimitiveType.I32


def default_type_for(kind: LiteralKind) -> PrimitiveType:
    """Default type of an untyped declaration initialised with a `kind` literal."""
    return DEFAULT_TYPES[kind]
