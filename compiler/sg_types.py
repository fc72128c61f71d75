#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sg_ast import Node, TypeExpr, TypePath, PathSegment, TraitObjectType, FieldDecl, format_type_expr
from sg_names import IdentName

# Fixed-width scalars, provided as aliases by the runtime header <cppust/types.hpp>
PRIMITIVE_TYPES = (
    "u8", "u16", "u32", "u64", "i8", "i16", "i32", "i64", "f32", "f64", "usize", "isize",
)

# Source aggregate -> (C++ type, destructor name)
AGGREGATE_TYPES: Dict[str, Tuple[str, str]] = {
    "Vec": ("std::vector", "~vector"),
    "String": ("std::string", "~basic_string"),
}

TUPLE_TYPE = "std::tuple"
TUPLE_DESTRUCTOR = "~tuple"


@dataclass
class LoweringError(Exception):
    """A declaration that cannot be represented as a C++ tagged union."""
    message: str
    node: Optional[Node] = None


@dataclass(frozen=True)
class MappedType:
    cpp_type: str
    # Expression that, appended to `storage.`, destroys a value of cpp_type in place
    destroy_expr: str


def _is_builtin(name: str) -> bool:
    return name in PRIMITIVE_TYPES or name in AGGREGATE_TYPES


def _map_segment_name(name: str) -> str:
    if name in AGGREGATE_TYPES:
        return AGGREGATE_TYPES[name][0]
    if name in PRIMITIVE_TYPES:
        return f"::cppust::{name}"
    return IdentName.from_str(name).to_class_name()


def _destroy_expr_for(name: str) -> str:
    if name in AGGREGATE_TYPES:
        return AGGREGATE_TYPES[name][1]
    if name in PRIMITIVE_TYPES:
        return f"cppust::{name}::~{name}"
    return "~" + IdentName.from_str(name).to_class_name()


def _render_args(segment: PathSegment) -> str:
    if not segment.args:
        return ""
    return "<" + ", ".join(map_type(arg).cpp_type for arg in segment.args) + ">"


def _check_segment(segment: PathSegment) -> None:
    if segment.paren_args is not None:
        raise LoweringError(f"[TYP-0020] invalid type path segment '{segment.name}(...)'", segment)


def _map_path(path: TypePath) -> MappedType:
    for segment in path.segments:
        _check_segment(segment)

    last = path.segments[-1]
    rendered_last = _map_segment_name(last.name) + _render_args(last)
    destroy_expr = _destroy_expr_for(last.name)
    if _is_builtin(last.name):
        # builtins carry their own namespace; source qualifiers are dropped
        return MappedType(rendered_last, destroy_expr)

    qualifiers = [seg.name + _render_args(seg) for seg in path.segments[:-1]]
    cpp_type = "::".join(qualifiers + [rendered_last])
    if path.is_global:
        cpp_type = "::" + cpp_type
    return MappedType(cpp_type, destroy_expr)


def map_type(ty: TypeExpr) -> MappedType:
    """
    Map a source field type to its C++ spelling and in-place destructor.

    Only paths are representable; the destructor is chosen from the last path
    segment alone, since an aggregate's destructor releases its elements.
    """
    if isinstance(ty, TypePath):
        return _map_path(ty)
    if isinstance(ty, TraitObjectType):
        # Fn-trait sugar is reported as such even behind `dyn`
        for bound in ty.bounds:
            for segment in bound.segments:
                _check_segment(segment)
    raise LoweringError(f"[TYP-0010] unknown type '{format_type_expr(ty)}'", ty)


def map_payload(fields: List[FieldDecl]) -> Optional[MappedType]:
    """Payload of a tuple-style variant: None, the single field, or a std::tuple."""
    if not fields:
        return None
    if len(fields) == 1:
        return map_type(fields[0].type)
    elems = [map_type(f.type).cpp_type for f in fields]
    return MappedType(f"{TUPLE_TYPE}<{', '.join(elems)}>", TUPLE_DESTRUCTOR)
