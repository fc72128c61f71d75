"""
Sum type to tagged union lowering.

Each variant of a `SumTypeDecl` is turned into the C++ fragments that manage
its slot of the raw union storage: the labelled constructor, the placement
construct/destroy arms, same-tag assignment arms, equality, the `is_` predicate,
the accessor quartet and the debug-format arm. The emitters only arrange these
fragments into translation units; they never decide anything per variant.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Sequence

from sg_ast import SumTypeDecl, VariantDecl, VariantStyle
from sg_internal_error import InternalGeneratorError
from sg_names import IdentName
from sg_types import LoweringError, MappedType, map_type, map_payload


class PayloadKind(Enum):
    EMPTY = auto()  # unit variant, or tuple variant without fields
    SINGLE = auto()  # exactly one field, stored as-is
    MULTIPLE = auto()  # two or more fields, stored as std::tuple


@dataclass
class MethodFragment:
    """A member function: declared in the class body, defined out of line."""
    return_type: str
    name: str
    params: str = ""
    body: List[str] = field(default_factory=list)
    is_const: bool = False
    is_static: bool = False

    def declaration(self) -> str:
        static = "static " if self.is_static else ""
        const = " const" if self.is_const else ""
        return f"{static}{self.return_type} {self.name}({self.params}){const};"

    def definition_header(self, class_name: str) -> str:
        const = " const" if self.is_const else ""
        return f"{self.return_type} {class_name}::{self.name}({self.params}){const} {{"


@dataclass
class SwitchArm:
    """One `case _Tag::X:` of a dispatch switch; body excludes the case label."""
    tag_name: str
    body: List[str]


@dataclass
class LoweredVariant:
    name: str  # as declared
    tag_name: str  # _Tag enumerator, PascalCase
    member_name: str  # snake_case, prefix of the accessors
    kind: PayloadKind
    payload: Optional[MappedType]
    param_types: List[str]

    labelled_ctor: MethodFragment
    predicate: MethodFragment
    accessors: List[MethodFragment]

    init_copy_arm: Optional[SwitchArm]
    init_move_arm: Optional[SwitchArm]
    destroy_arm: Optional[SwitchArm]
    assign_copy_arm: Optional[SwitchArm]
    assign_move_arm: Optional[SwitchArm]
    equality_arm: Optional[SwitchArm]

    fmt_arm: List[str]

    @property
    def storage_name(self) -> str:
        return f"{self.member_name}_val"

    @property
    def is_empty(self) -> bool:
        return self.kind is PayloadKind.EMPTY

    def storage_decl(self) -> str:
        if self.payload is None:
            raise InternalGeneratorError(
                f"[ICE-0010] storage slot requested for empty variant '{self.name}'")
        return f"{self.payload.cpp_type} {self.storage_name};"


@dataclass
class LoweredSumType:
    name: str  # as declared
    class_name: str
    file_name: str
    namespace: List[str]
    variants: List[LoweredVariant]
    decl: SumTypeDecl

    @property
    def qualified_name(self) -> str:
        return "::" + "::".join(self.namespace + [self.class_name])

    @property
    def tags(self) -> List[str]:
        return [v.tag_name for v in self.variants]

    def payload_variants(self) -> List[LoweredVariant]:
        return [v for v in self.variants if not v.is_empty]


def _payload_kind(variant: VariantDecl) -> PayloadKind:
    if variant.style is VariantStyle.RECORD:
        raise LoweringError(
            f"[LOW-0010] variant '{variant.name}' has named fields; only unit and tuple variants are supported",
            variant)
    if not variant.fields:
        return PayloadKind.EMPTY
    if len(variant.fields) == 1:
        return PayloadKind.SINGLE
    return PayloadKind.MULTIPLE


def _labelled_ctor(class_name: str, tag: str, storage: str, payload: Optional[MappedType],
                   param_types: List[str]) -> MethodFragment:
    if payload is None:
        return MethodFragment(class_name, tag, body=[f"return {class_name}(_Tag::{tag});"], is_static=True)
    params = ", ".join(f"const {t}& v{i}" for i, t in enumerate(param_types))
    args = ", ".join(f"v{i}" for i in range(len(param_types)))
    return MethodFragment(
        class_name, tag, params,
        body=[
            f"{class_name} output(_Tag::{tag});",
            f"new (&output.union_.{storage}) {payload.cpp_type}({args});",
            "return output;",
        ],
        is_static=True,
    )


def _accessors(tag: str, member: str, storage: str, value_type: str) -> List[MethodFragment]:
    check_assert = f"assert(tag_ == _Tag::{tag});"
    check_throw = [
        f"if (tag_ != _Tag::{tag}) {{",
        f"    throw std::runtime_error(\"requires {tag}\");",
        "}",
    ]
    check_null = [
        f"if (tag_ != _Tag::{tag}) {{",
        "    return nullptr;",
        "}",
    ]
    accessors: List[MethodFragment] = []
    for is_const in (True, False):
        prefix = "const " if is_const else ""
        accessors.append(MethodFragment(f"{prefix}{value_type}&", f"{member}_ref_uncheck",
                                        body=[check_assert, f"return union_.{storage};"], is_const=is_const))
    for is_const in (True, False):
        prefix = "const " if is_const else ""
        accessors.append(MethodFragment(f"{prefix}{value_type}&", f"{member}_ref",
                                        body=check_throw + [f"return union_.{storage};"], is_const=is_const))
    for is_const in (True, False):
        prefix = "const " if is_const else ""
        accessors.append(MethodFragment(f"{prefix}{value_type}*", f"{member}_ptr",
                                        body=check_null + [f"return &union_.{storage};"], is_const=is_const))
    return accessors


def _fmt_arm(tag: str, member: str, kind: PayloadKind) -> List[str]:
    if kind is PayloadKind.EMPTY:
        return [
            f"if (value.is_{member}()) {{",
            f"    return os << \"{tag}\";",
            "}",
        ]
    if kind is PayloadKind.SINGLE:
        shown = f"\"{tag}(\" << as_debug(*p) << \")\""
    else:
        # the tuple formatter supplies the parentheses
        shown = f"\"{tag}\" << as_debug(*p)"
    return [
        f"if (const auto* p = value.{member}_ptr()) {{",
        f"    return os << {shown};",
        "}",
    ]


def lower_variant(class_name: str, variant: VariantDecl) -> LoweredVariant:
    kind = _payload_kind(variant)
    ident = IdentName.from_str(variant.name)
    tag = ident.to_enum_variant_name()
    member = ident.to_public_member_name()
    storage = f"{member}_val"

    if tag == class_name:
        raise LoweringError(
            f"[LOW-0020] variant '{variant.name}' has the same name as its type '{class_name}'", variant)

    param_types = [map_type(f.type).cpp_type for f in variant.fields]
    payload = map_payload(variant.fields)

    labelled_ctor = _labelled_ctor(class_name, tag, storage, payload, param_types)
    predicate = MethodFragment("bool", f"is_{member}", body=[f"return tag_ == _Tag::{tag};"], is_const=True)

    if payload is None:
        return LoweredVariant(
            variant.name, tag, member, kind, None, [],
            labelled_ctor, predicate, [],
            None, None, None, None, None, None,
            _fmt_arm(tag, member, kind),
        )

    p = payload.cpp_type
    return LoweredVariant(
        variant.name, tag, member, kind, payload, param_types,
        labelled_ctor, predicate, _accessors(tag, member, storage, p),
        init_copy_arm=SwitchArm(tag, [f"new (&union_.{storage}) {p}(union_val.{storage});"]),
        init_move_arm=SwitchArm(tag, [f"new (&union_.{storage}) {p}(std::move(union_val.{storage}));"]),
        destroy_arm=SwitchArm(tag, [f"union_.{storage}.{payload.destroy_expr}();"]),
        assign_copy_arm=SwitchArm(tag, [f"union_.{storage} = rhs.union_.{storage};"]),
        assign_move_arm=SwitchArm(tag, [f"union_.{storage} = std::move(rhs.union_.{storage});"]),
        equality_arm=SwitchArm(tag, [f"return union_.{storage} == rhs.union_.{storage};"]),
        fmt_arm=_fmt_arm(tag, member, kind),
    )


def lower_sum_type(decl: SumTypeDecl, namespace: Sequence[str] = ()) -> LoweredSumType:
    """
    Lower a whole declaration; the first unrepresentable variant or field
    raises `LoweringError` and nothing is produced for the declaration.
    """
    ident = IdentName.from_str(decl.name)
    class_name = ident.to_class_name()
    variants = [lower_variant(class_name, v) for v in decl.variants]
    return LoweredSumType(decl.name, class_name, ident.to_file_name(), list(namespace), variants, decl)
