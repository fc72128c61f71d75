"""
C++ Code Emitter

Arranges the per-variant fragments of a `LoweredSumType` into the four
translation units of a generated type. Knows C++ layout, not lowering rules:
every per-variant decision has already been made by the lowering engine.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import List, NoReturn, Optional

from sg_context import GeneratorContext
from sg_internal_error import InternalGeneratorError, ICELocation
from sg_lowering import LoweredSumType, LoweredVariant, MethodFragment, SwitchArm

# Tag value of an object holding no payload, reachable only when a payload
# move throws during assignment. It is outside the enumerators, so `_Tag`
# still lists exactly the variants; `enum class` fixes the underlying type to int.
VALUELESS_TAG = "static_cast<_Tag>(-1)"


@dataclass
class CppCodeBuilder:
    """
    Helper for building C++ code with indentation tracking.
    """
    lines: List[str] = field(default_factory=list)
    indent_level: int = 0
    indent_str: str = "    "  # 4 spaces

    def indent(self) -> None:
        self.indent_level += 1

    def dedent(self) -> None:
        assert self.indent_level > 0, "dedent below zero"
        self.indent_level -= 1

    def emit(self, line: str = "") -> None:
        """Emit a line with current indentation."""
        if line:
            self.lines.append(self.indent_str * self.indent_level + line)
        else:
            self.lines.append("")

    def emit_all(self, lines: List[str]) -> None:
        for line in lines:
            self.emit(line)

    def to_string(self) -> str:
        return "\n".join(self.lines) + "\n"


def include_path(namespace: List[str], file_name: str) -> str:
    """Path of the skeleton header as seen from an include directory."""
    return "/".join(namespace + [f"{file_name}.hpp"])


@dataclass
class CppEmitter:
    """
    Emits C++ text for one lowered sum type.

    Files:
    - `<t>.inc.hpp`: class body, included inside `class T { ... };`
    - `<t>.hpp`: hand-editable skeleton, written once
    - `<t>.fmt.hpp`: `cppust::debug<T>` specialization
    - `<t>.gen.cpp`: out-of-line definitions of everything in `<t>.inc.hpp`
    """
    context: GeneratorContext = field(default_factory=GeneratorContext.default)
    filename: Optional[str] = None

    def ice(self, message: str, lowered: Optional[LoweredSumType] = None) -> NoReturn:
        """Raise an internal generator error located at the declaration."""
        if lowered is None:
            raise InternalGeneratorError(message, ICELocation(filename=self.filename, span=None))
        raise InternalGeneratorError(message, ICELocation.at(self.filename, lowered.decl, lowered.name))

    def _arm(self, lowered: LoweredSumType, variant: LoweredVariant, name: str) -> SwitchArm:
        arm = getattr(variant, name)
        if arm is None:
            self.ice(f"[ICE-0020] variant '{variant.name}' with payload has no {name}", lowered)
        return arm

    # ============================================================================
    # Shared pieces
    # ============================================================================

    def _emit_banner(self, out: CppCodeBuilder, edit_instead: str) -> None:
        out.emit(f"// THIS FILE IS GENERATED AND MANAGED BY {self.context.generator_name}, DO NOT CHANGE")
        out.emit(f"// PLEASE CHANGE {edit_instead} INSTEAD")
        out.emit()

    @staticmethod
    def _emit_namespace_open(out: CppCodeBuilder, namespace: List[str]) -> None:
        if namespace:
            out.emit(" ".join(f"namespace {ns} {{" for ns in namespace))
            out.emit()

    @staticmethod
    def _emit_namespace_close(out: CppCodeBuilder, namespace: List[str]) -> None:
        if namespace:
            out.emit()
            out.emit(" ".join("}" for _ in namespace))

    def _emit_switch(self, out: CppCodeBuilder, subject: str, arms: List[SwitchArm], *, breaks: bool) -> None:
        out.emit(f"switch ({subject}) {{")
        for arm in arms:
            out.emit(f"case _Tag::{arm.tag_name}:")
            out.indent()
            out.emit_all(arm.body)
            if breaks:
                out.emit("break;")
            out.dedent()
        out.emit("default:")
        out.indent()
        out.emit("break;")
        out.dedent()
        out.emit("}")

    def _emit_definition(self, out: CppCodeBuilder, class_name: str, method: MethodFragment) -> None:
        out.emit(method.definition_header(class_name))
        out.indent()
        out.emit_all(method.body)
        out.dedent()
        out.emit("}")
        out.emit()

    # ============================================================================
    # <t>.inc.hpp
    # ============================================================================

    def emit_inc_header(self, lowered: LoweredSumType) -> str:
        out = CppCodeBuilder()
        t = lowered.class_name
        self._emit_banner(out, f"{lowered.file_name}.hpp")
        out.emit(f"// class body of {t}, included from {lowered.file_name}.hpp")
        out.emit()

        out.emit("private:")
        out.indent()
        out.emit("enum class _Tag {")
        out.indent()
        for tag in lowered.tags:
            out.emit(f"{tag},")
        out.dedent()
        out.emit("};")
        out.emit()
        out.emit("union _Union {")
        out.indent()
        for variant in lowered.payload_variants():
            out.emit(variant.storage_decl())
        if lowered.payload_variants():
            out.emit()
        out.emit("_Union() {}")
        out.emit("~_Union() {}")
        out.dedent()
        out.emit("};")
        out.dedent()
        out.emit()

        out.emit("public:")
        out.indent()
        out.emit(f"{t}(const {t}& rhs); // copy constructor")
        out.emit(f"{t}({t}&& rhs); // move constructor")
        out.emit(f"~{t}();")
        out.emit()
        out.emit(f"{t}& operator=(const {t}& rhs);")
        out.emit(f"{t}& operator=({t}&& rhs);")
        out.emit(f"bool operator==(const {t}& rhs) const;")
        out.emit(f"bool operator!=(const {t}& rhs) const;")
        out.emit()
        out.emit("bool valueless_by_exception() const;")
        out.emit()
        out.emit("// enum constructors")
        for variant in lowered.variants:
            out.emit(variant.labelled_ctor.declaration())
        out.emit()
        out.emit("// accessors")
        for variant in lowered.variants:
            out.emit(variant.predicate.declaration())
            for accessor in variant.accessors:
                out.emit(accessor.declaration())
        out.dedent()
        out.emit()

        out.emit("private:")
        out.indent()
        out.emit("_Union union_;")
        out.emit("_Tag tag_;")
        out.emit()
        out.emit(f"{t}(_Tag tag);")
        out.emit(f"{t}(_Tag tag, const _Union& union_val);")
        out.emit(f"{t}(_Tag tag, _Union&& union_val);")
        out.emit()
        out.emit("void tagged_init_(_Tag tag, const _Union& union_val);")
        out.emit("void tagged_init_(_Tag tag, _Union&& union_val);")
        out.emit("void deinit_union_();")
        out.dedent()
        return out.to_string()

    # ============================================================================
    # <t>.hpp
    # ============================================================================

    def emit_skeleton_header(self, lowered: LoweredSumType) -> str:
        out = CppCodeBuilder()
        f = lowered.file_name
        out.emit(f"// Created by {self.context.generator_name}. This file is written once and then left alone:")
        out.emit(f"// add your own members to {lowered.class_name} below.")
        out.emit("#pragma once")
        out.emit()
        out.emit("#include <cppust/cppust.hpp>")
        out.emit()
        self._emit_namespace_open(out, lowered.namespace)
        out.emit(f"class {lowered.class_name} {{")
        out.emit(f"#include \"{f}.inc.hpp\"")
        out.emit()
        out.emit("public:")
        out.indent()
        out.emit("// user-defined members")
        out.dedent()
        out.emit("};")
        self._emit_namespace_close(out, lowered.namespace)
        if self.context.emit_fmt_header:
            out.emit()
            out.emit(f"#include \"{f}.fmt.hpp\"")
        return out.to_string()

    # ============================================================================
    # <t>.fmt.hpp
    # ============================================================================

    def emit_fmt_header(self, lowered: LoweredSumType) -> str:
        out = CppCodeBuilder()
        q = lowered.qualified_name
        self._emit_banner(out, f"{lowered.file_name}.hpp")
        out.emit("#pragma once")
        out.emit()
        out.emit("#include <ostream>")
        out.emit()
        out.emit("#include <cppust/fmt.hpp>")
        out.emit()
        out.emit("namespace cppust {")
        out.emit()
        out.emit("template <>")
        out.emit(f"struct debug<{q}> {{")
        out.indent()
        out.emit(f"static std::ostream& fmt(const {q}& value, std::ostream& os) {{")
        out.indent()
        for variant in lowered.variants:
            out.emit_all(variant.fmt_arm)
        out.emit("return os;")
        out.dedent()
        out.emit("}")
        out.dedent()
        out.emit("};")
        out.emit()
        out.emit("} // namespace cppust")
        return out.to_string()

    # ============================================================================
    # <t>.gen.cpp
    # ============================================================================

    def emit_impl_source(self, lowered: LoweredSumType) -> str:
        out = CppCodeBuilder()
        t = lowered.class_name
        self._emit_banner(out, f"{lowered.file_name}.cpp")
        out.emit("#include <cassert>")
        out.emit("#include <new>")
        out.emit("#include <stdexcept>")
        out.emit("#include <utility>")
        out.emit()
        out.emit(f"#include \"{include_path(lowered.namespace, lowered.file_name)}\"")
        out.emit()
        self._emit_namespace_open(out, lowered.namespace)

        self._emit_constructors(out, t)
        self._emit_destructor(out, t)
        self._emit_operators(out, lowered)

        out.emit("// enum constructors")
        for variant in lowered.variants:
            self._emit_definition(out, t, variant.labelled_ctor)

        out.emit("// accessors")
        for variant in lowered.variants:
            self._emit_definition(out, t, variant.predicate)
            for accessor in variant.accessors:
                self._emit_definition(out, t, accessor)

        self._emit_private_methods(out, lowered)
        self._emit_namespace_close(out, lowered.namespace)
        return out.to_string()

    def _emit_constructors(self, out: CppCodeBuilder, t: str) -> None:
        out.emit("// public constructors")
        out.emit(f"{t}::{t}(const {t}& rhs): {t}(rhs.tag_, rhs.union_) {{ }} // copy constructor")
        out.emit(f"{t}::{t}({t}&& rhs): {t}(rhs.tag_, std::move(rhs.union_)) {{ }} // move constructor")
        out.emit()
        out.emit("// private constructors")
        out.emit(f"{t}::{t}(_Tag tag): tag_(tag) {{ }}")
        out.emit()
        out.emit(f"{t}::{t}(_Tag tag, const _Union& union_val): tag_(tag) {{")
        out.emit("    tagged_init_(tag, union_val);")
        out.emit("}")
        out.emit()
        out.emit(f"{t}::{t}(_Tag tag, _Union&& union_val): tag_(tag) {{")
        out.emit("    tagged_init_(tag, std::move(union_val));")
        out.emit("}")
        out.emit()

    def _emit_destructor(self, out: CppCodeBuilder, t: str) -> None:
        out.emit("// destructor")
        out.emit(f"{t}::~{t}() {{")
        out.emit("    deinit_union_();")
        out.emit("}")
        out.emit()

    def _emit_assignment(self, out: CppCodeBuilder, lowered: LoweredSumType, *, move: bool) -> None:
        t = lowered.class_name
        if move:
            out.emit(f"{t}& {t}::operator=({t}&& rhs) {{ // move")
            arm_name = "assign_move_arm"
        else:
            out.emit(f"{t}& {t}::operator=(const {t}& rhs) {{ // assign")
            arm_name = "assign_copy_arm"
        arms = [self._arm(lowered, v, arm_name) for v in lowered.payload_variants()]
        out.indent()
        out.emit("if (this == &rhs) { return *this; }")
        out.emit()
        out.emit("if (tag_ == rhs.tag_) {")
        out.indent()
        self._emit_switch(out, "tag_", arms, breaks=True)
        out.dedent()
        out.emit("} else {")
        out.indent()
        if move:
            # a throwing payload move leaves the object valueless, never half-built
            out.emit("deinit_union_();")
            out.emit(f"tag_ = {VALUELESS_TAG};")
            out.emit("tagged_init_(rhs.tag_, std::move(rhs.union_));")
            out.emit("tag_ = rhs.tag_;")
        else:
            # copy first, so a throwing payload copy leaves *this untouched
            out.emit(f"{t} tmp(rhs);")
            out.emit("return *this = std::move(tmp);")
        out.dedent()
        out.emit("}")
        out.emit("return *this;")
        out.dedent()
        out.emit("}")
        out.emit()

    def _emit_operators(self, out: CppCodeBuilder, lowered: LoweredSumType) -> None:
        t = lowered.class_name
        out.emit("// operators")
        self._emit_assignment(out, lowered, move=False)
        self._emit_assignment(out, lowered, move=True)

        arms = [self._arm(lowered, v, "equality_arm") for v in lowered.payload_variants()]
        out.emit(f"bool {t}::operator==(const {t}& rhs) const {{ // equal")
        out.indent()
        out.emit("if (this == &rhs) { return true; }")
        out.emit("if (tag_ != rhs.tag_) { return false; }")
        self._emit_switch(out, "tag_", arms, breaks=False)
        out.emit("return true;")
        out.dedent()
        out.emit("}")
        out.emit()
        out.emit(f"bool {t}::operator!=(const {t}& rhs) const {{ // not equal")
        out.emit("    return !(*this == rhs);")
        out.emit("}")
        out.emit()
        out.emit(f"bool {t}::valueless_by_exception() const {{")
        out.emit(f"    return tag_ == {VALUELESS_TAG};")
        out.emit("}")
        out.emit()

    def _emit_private_methods(self, out: CppCodeBuilder, lowered: LoweredSumType) -> None:
        t = lowered.class_name
        payload_variants = lowered.payload_variants()
        out.emit("// private methods")

        out.emit(f"void {t}::tagged_init_(_Tag tag, const _Union& union_val) {{")
        out.indent()
        self._emit_switch(out, "tag", [self._arm(lowered, v, "init_copy_arm") for v in payload_variants],
                          breaks=True)
        out.dedent()
        out.emit("}")
        out.emit()

        out.emit(f"void {t}::tagged_init_(_Tag tag, _Union&& union_val) {{")
        out.indent()
        self._emit_switch(out, "tag", [self._arm(lowered, v, "init_move_arm") for v in payload_variants],
                          breaks=True)
        out.dedent()
        out.emit("}")
        out.emit()

        out.emit(f"void {t}::deinit_union_() {{")
        out.indent()
        self._emit_switch(out, "tag_", [self._arm(lowered, v, "destroy_arm") for v in payload_variants],
                          breaks=True)
        out.dedent()
        out.emit("}")
