#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


# ==========================
# AST definitions
# ==========================


@dataclass
class Span:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class Node:
    span: Optional[Span] = field(default=None, repr=False, compare=False, kw_only=True)


# --- types ---

class TypeExpr(Node):
    pass


@dataclass
class PathSegment(Node):
    name: str  # e.g. "Vec", "u8", "MyType"
    args: List[TypeExpr] = field(default_factory=list)  # <A, B>
    # Fn(A, B) -> R style arguments; parsed so they can be rejected with a location
    paren_args: Optional[List[TypeExpr]] = None


@dataclass
class TypePath(TypeExpr):
    segments: List[PathSegment]
    is_global: bool = False  # leading ::


@dataclass
class RefType(TypeExpr):
    inner: TypeExpr
    is_mut: bool = False
    lifetime: Optional[str] = None


@dataclass
class PtrType(TypeExpr):
    inner: TypeExpr
    is_mut: bool = False


@dataclass
class TupleType(TypeExpr):
    elems: List[TypeExpr]


@dataclass
class ArrayType(TypeExpr):
    elem: TypeExpr
    length: Optional[str] = None  # None for a slice [T]


@dataclass
class FnType(TypeExpr):
    params: List[TypeExpr]
    result: Optional[TypeExpr] = None


@dataclass
class TraitObjectType(TypeExpr):
    keyword: str  # "dyn" or "impl"
    bounds: List[TypePath]  # lifetime bounds are dropped


# --- declarations ---

class VariantStyle(Enum):
    UNIT = "unit"       # Name
    TUPLE = "tuple"     # Name(A, B)
    RECORD = "record"   # Name { a: A, b: B }


@dataclass
class FieldDecl(Node):
    type: TypeExpr
    name: Optional[str] = None  # only record-style fields are named


@dataclass
class VariantDecl(Node):
    name: str
    style: VariantStyle
    fields: List[FieldDecl]


@dataclass
class SumTypeDecl(Node):
    name: str
    variants: List[VariantDecl]


@dataclass
class SourceFile(Node):
    decls: List[SumTypeDecl]
    filename: Optional[str] = field(default=None, repr=False, compare=False, kw_only=True)


# --- source rendering (used in diagnostics) ---

def format_type_expr(t: Optional[TypeExpr]) -> str:
    """Render a type expression back to source syntax."""
    if t is None:
        return "<none>"
    if isinstance(t, TypePath):
        parts = []
        for seg in t.segments:
            text = seg.name
            if seg.args:
                text += "<" + ", ".join(format_type_expr(a) for a in seg.args) + ">"
            if seg.paren_args is not None:
                text += "(" + ", ".join(format_type_expr(a) for a in seg.paren_args) + ")"
            parts.append(text)
        return ("::" if t.is_global else "") + "::".join(parts)
    if isinstance(t, RefType):
        lifetime = f"{t.lifetime} " if t.lifetime else ""
        return f"&{lifetime}{'mut ' if t.is_mut else ''}{format_type_expr(t.inner)}"
    if isinstance(t, PtrType):
        return f"*{'mut' if t.is_mut else 'const'} {format_type_expr(t.inner)}"
    if isinstance(t, TupleType):
        if len(t.elems) == 1:
            return f"({format_type_expr(t.elems[0])},)"
        return "(" + ", ".join(format_type_expr(e) for e in t.elems) + ")"
    if isinstance(t, ArrayType):
        if t.length is None:
            return f"[{format_type_expr(t.elem)}]"
        return f"[{format_type_expr(t.elem)}; {t.length}]"
    if isinstance(t, FnType):
        params = ", ".join(format_type_expr(p) for p in t.params)
        result = f" -> {format_type_expr(t.result)}" if t.result is not None else ""
        return f"fn({params}){result}"
    if isinstance(t, TraitObjectType):
        return f"{t.keyword} " + " + ".join(format_type_expr(b) for b in t.bounds)
    return repr(t)
