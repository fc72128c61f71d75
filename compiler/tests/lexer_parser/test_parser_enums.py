#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from conftest import parse_source
from sg_ast import (
    FnType, PathSegment, RefType, TraitObjectType, TupleType, TypePath, VariantStyle, format_type_expr)
from sg_parser import ParseError, Parser


def test_parse_unit_tuple_and_record_variants():
    source = parse_source("""
        enum Message {
            Quit,
            Write(String),
            Move { x: i32, y: i32 },
            Pair(u16, u16),
        }
    """)

    assert len(source.decls) == 1
    decl = source.decls[0]
    assert decl.name == "Message"
    assert [v.name for v in decl.variants] == ["Quit", "Write", "Move", "Pair"]
    assert [v.style for v in decl.variants] == [
        VariantStyle.UNIT, VariantStyle.TUPLE, VariantStyle.RECORD, VariantStyle.TUPLE,
    ]
    assert [f.name for f in decl.variants[2].fields] == ["x", "y"]
    assert [format_type_expr(f.type) for f in decl.variants[3].fields] == ["u16", "u16"]


def test_trailing_commas_and_empty_bodies():
    source = parse_source("""
        enum A { X, Y(u8,), }
        enum B {}
        enum C { Z() }
    """)

    assert [d.name for d in source.decls] == ["A", "B", "C"]
    assert len(source.decls[0].variants[1].fields) == 1
    assert source.decls[1].variants == []
    assert source.decls[2].variants[0].style is VariantStyle.TUPLE
    assert source.decls[2].variants[0].fields == []


def test_other_items_are_skipped():
    source = parse_source("""
        #![allow(dead_code)]
        use std::collections::{HashMap, HashSet};

        const LIMIT: usize = 4;

        struct Point { x: f64, y: f64 }
        struct Pair(u8, u8);

        impl Point {
            fn norm(&self) -> f64 { (self.x * self.x + self.y * self.y).sqrt() }
        }

        macro_rules! noop { () => {}; }

        /// A shape.
        #[derive(Debug, Clone)]
        pub(crate) enum Shape {
            #[allow(unused)]
            Circle(f64),
            Empty,
        }

        fn main() { let s = Shape::Empty; }
    """)

    assert [d.name for d in source.decls] == ["Shape"]
    assert [v.name for v in source.decls[0].variants] == ["Circle", "Empty"]


def test_enums_are_kept_in_source_order():
    source = parse_source("""
        enum First { A }
        fn between() {}
        pub enum Second { B }
    """)

    assert [d.name for d in source.decls] == ["First", "Second"]


def test_spans_cover_declarations():
    source = parse_source("enum E {\n    A(u8),\n}\n")

    decl = source.decls[0]
    assert (decl.span.start_line, decl.span.start_column) == (1, 1)
    assert decl.span.end_line == 3
    variant = decl.variants[0]
    assert (variant.span.start_line, variant.span.start_column) == (2, 5)
    assert source.filename == "test.rs"


def test_type_syntax():
    source = parse_source("""
        enum T {
            A(&'a mut Point),
            B((u8, String)),
            C(fn(u8) -> bool),
            D(::core::option::Option<Box<Node>>),
            E(Vec::<u8>),
            F((u8)),
        }
    """)
    types = [v.fields[0].type for v in source.decls[0].variants]

    assert isinstance(types[0], RefType) and types[0].is_mut and types[0].lifetime == "'a"
    assert isinstance(types[1], TupleType) and len(types[1].elems) == 2
    assert isinstance(types[2], FnType) and format_type_expr(types[2].result) == "bool"
    assert isinstance(types[3], TypePath) and types[3].is_global
    assert [s.name for s in types[3].segments] == ["core", "option", "Option"]
    assert format_type_expr(types[4]) == "Vec<u8>"
    assert format_type_expr(types[5]) == "u8"


def test_fn_trait_syntax_is_recorded_on_the_segment():
    ty = Parser.from_source("Box<Fn(u8) -> u16>").parse_standalone_type()

    inner = ty.segments[0].args[0]
    assert isinstance(inner.segments[0], PathSegment)
    assert [format_type_expr(t) for t in inner.segments[0].paren_args] == ["u8", "u16"]


def test_trait_object_bounds_skip_lifetimes():
    ty = Parser.from_source("Box<dyn Fn(u8) -> u16 + Send + 'static>").parse_standalone_type()

    inner = ty.segments[0].args[0]
    assert isinstance(inner, TraitObjectType)
    assert inner.keyword == "dyn"
    assert [b.segments[-1].name for b in inner.bounds] == ["Fn", "Send"]
    assert format_type_expr(inner) == "dyn Fn(u8, u16) + Send"


def test_impl_trait_in_field_position():
    ty = Parser.from_source("impl ::std::fmt::Display").parse_standalone_type()

    assert isinstance(ty, TraitObjectType)
    assert ty.keyword == "impl"
    assert ty.bounds[0].is_global


def test_dyn_without_bound_is_a_plain_path():
    source = parse_source("enum E { A(dyn), B(Vec<dyn>) }")

    assert [format_type_expr(v.fields[0].type) for v in source.decls[0].variants] == ["dyn", "Vec<dyn>"]


@pytest.mark.parametrize(
    "src, code",
    [
        ("}", "PAR-0020"),
        ("fn f() {", "PAR-0021"),
        ("fn f() { ) }", "PAR-0022"),
        ("# fn f() {}", "PAR-0030"),
        ("enum { A }", "PAR-0061"),
        ("enum E;", "PAR-0062"),
        ("enum E { 1 }", "PAR-0063"),
        ("enum E { A { 1: u8 } }", "PAR-0064"),
        ("enum E { A { x u8 } }", "PAR-0065"),
        ("enum E { A(u8 u8) }", "PAR-0066"),
        ("enum E { A { x: u8 y: u8 } }", "PAR-0067"),
        ("enum E { A B }", "PAR-0068"),
        ("enum E<T> { A(T) }", "PAR-0069"),
        ("enum E { A = 1 }", "PAR-0070"),
        ("enum E { A(=) }", "PAR-0400"),
        ("enum E { A(foo::) }", "PAR-0401"),
        ("enum E { A(Vec<u8 u8>) }", "PAR-0403"),
        ("enum E { A(*u8) }", "PAR-0410"),
        ("enum E { A((u8 u8)) }", "PAR-0411"),
        ("enum E { A([u8;]) }", "PAR-0412"),
        ("enum E { A([u8 u8]) }", "PAR-0413"),
        ("enum E { A(fn u8) }", "PAR-0414"),
        ("enum E { A(fn(u8 u8)) }", "PAR-0415"),
        ("enum E { A(Box<dyn Send + >) }", "PAR-0416"),
    ],
)
def test_parse_errors(src, code):
    with pytest.raises(ParseError) as exc:
        parse_source(src)

    assert exc.value.message.startswith(f"[{code}]")
    assert exc.value.token is not None
    assert exc.value.filename == "test.rs"


def test_standalone_type_rejects_trailing_tokens():
    with pytest.raises(ParseError) as exc:
        Parser.from_source("u8 u16").parse_standalone_type()

    assert "[PAR-0400]" in exc.value.message
