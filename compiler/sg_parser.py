#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import List, Optional

from sg_ast import (
    Span, TypeExpr, PathSegment, TypePath, RefType, PtrType, TupleType, ArrayType, FnType, TraitObjectType,
    VariantStyle, FieldDecl, VariantDecl, SumTypeDecl, SourceFile)
from sg_lexer import TokenKind, Token, Lexer


# ==========================
# Parser
# ==========================

@dataclass
class ParseError(Exception):
    message: str
    token: Optional[Token] = None
    filename: Optional[str] = None


_OPENERS = {TokenKind.LBRACE: TokenKind.RBRACE, TokenKind.LPAREN: TokenKind.RPAREN,
            TokenKind.LBRACKET: TokenKind.RBRACKET}
_CLOSERS = set(_OPENERS.values())


class Parser:
    """
    Reads Rust source just far enough to collect top-level `enum` items.

    Every other item (functions, structs, impls, macros, ...) is skipped token by
    token, balancing delimiters, without being interpreted.
    """

    def __init__(self, tokens: List[Token], filename: Optional[str] = None) -> None:
        self.tokens = tokens
        self.index = 0
        self.filename = filename

    @classmethod
    def from_source(cls, source: str) -> "Parser":
        lexer = Lexer.from_source(source)
        tokens = lexer.tokenize()
        return cls(tokens)

    # --- token utilities ---

    def _peek(self, offset: int = 0) -> Token:
        pos = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[pos]

    def _last(self) -> Token:
        return self.tokens[self.index - 1 if self.index > 0 else 0]

    def _at_end(self) -> bool:
        return self._peek().kind is TokenKind.EOF

    def _advance(self) -> Token:
        tok = self._peek()
        if not self._at_end():
            self.index += 1
        return tok

    def _check(self, kind: TokenKind) -> bool:
        return self._peek().kind is kind

    def _match(self, *kinds: TokenKind) -> bool:
        if self._peek().kind in kinds:
            self._advance()
            return True
        return False

    def _expect(self, kind: TokenKind, msg: str) -> Token:
        if not self._check(kind):
            raise ParseError(f"{msg}, got {self._peek()} instead", self._peek(), self.filename)
        return self._advance()

    def _span_start(self) -> Span:
        here = self._peek()
        return Span(here.line, here.column, here.line, here.column)

    def _extend_span(self, start: Span) -> Span:
        here = self._last()
        return Span(
            start.start_line,
            start.start_column,
            here.line,
            here.column + len(here.text),
        )

    def _skip_balanced(self, open_tok: Token) -> None:
        # open_tok has already been consumed; stop after its matching closer
        stack = [_OPENERS[open_tok.kind]]
        while stack:
            tok = self._peek()
            if tok.kind is TokenKind.EOF:
                raise ParseError(f"[PAR-0021] unexpected end of file, unclosed {open_tok}", open_tok, self.filename)
            self._advance()
            if tok.kind in _OPENERS:
                stack.append(_OPENERS[tok.kind])
            elif tok.kind in _CLOSERS:
                if tok.kind is not stack[-1]:
                    raise ParseError(f"[PAR-0022] mismatched closing delimiter {tok}", tok, self.filename)
                stack.pop()

    # --- entry point ---

    def parse_file(self, filename: Optional[str] = None) -> SourceFile:
        if filename is not None:
            self.filename = filename

        start = self._span_start()
        decls: List[SumTypeDecl] = []
        while not self._at_end():
            decl = self._parse_item()
            if decl is not None:
                decls.append(decl)

        return SourceFile(decls, span=self._extend_span(start), filename=self.filename)

    def parse_standalone_type(self) -> TypeExpr:
        """Parse a single type expression that must span the whole input."""
        ty = self._parse_type()
        if not self._at_end():
            raise ParseError(f"[PAR-0400] unexpected {self._peek()} after type", self._peek(), self.filename)
        return ty

    # --- items ---

    def _skip_attributes(self) -> None:
        # #[...] and #![...]
        while self._check(TokenKind.HASH):
            self._advance()
            self._match(TokenKind.BANG)
            open_tok = self._expect(TokenKind.LBRACKET, "[PAR-0030] expected '[' after '#'")
            self._skip_balanced(open_tok)

    def _skip_visibility(self) -> None:
        # pub, pub(crate), pub(super), pub(in path)
        if self._match(TokenKind.PUB) and self._check(TokenKind.LPAREN):
            self._skip_balanced(self._advance())

    def _parse_item(self) -> Optional[SumTypeDecl]:
        self._skip_attributes()
        if self._at_end():
            return None
        start = self._span_start()
        self._skip_visibility()
        if self._check(TokenKind.ENUM):
            return self._parse_enum(start)
        self._skip_item()
        return None

    def _skip_item(self) -> None:
        # An item ends at ';' outside any delimiter, or at a '}' that closes its outermost block.
        first = self._peek()
        if first.kind in _CLOSERS:
            raise ParseError(f"[PAR-0020] unexpected {first} at top level", first, self.filename)
        while True:
            tok = self._peek()
            if tok.kind is TokenKind.EOF:
                raise ParseError(f"[PAR-0021] unexpected end of file in item starting at {first}", first,
                                 self.filename)
            if tok.kind is TokenKind.SEMI:
                self._advance()
                return
            if tok.kind in _CLOSERS:
                raise ParseError(f"[PAR-0022] mismatched closing delimiter {tok}", tok, self.filename)
            self._advance()
            if tok.kind in _OPENERS:
                self._skip_balanced(tok)
                if tok.kind is TokenKind.LBRACE:
                    return

    def _parse_enum(self, start: Span) -> SumTypeDecl:
        self._advance()  # enum
        name_tok = self._expect(TokenKind.IDENT, "[PAR-0061] expected enum name")
        if self._check(TokenKind.LT):
            raise ParseError(f"[PAR-0069] generic enum '{name_tok.text}' is not supported", self._peek(),
                             self.filename)
        self._expect(TokenKind.LBRACE, "[PAR-0062] expected '{' after enum name")
        variants: List[VariantDecl] = []
        while True:
            self._skip_attributes()
            if self._check(TokenKind.RBRACE):
                break
            variants.append(self._parse_variant())
            if not self._match(TokenKind.COMMA):
                break
        self._expect(TokenKind.RBRACE, "[PAR-0068] expected ',' or '}' after variant")
        return SumTypeDecl(name_tok.text, variants, span=self._extend_span(start))

    def _parse_variant(self) -> VariantDecl:
        start = self._span_start()
        name_tok = self._expect(TokenKind.IDENT, "[PAR-0063] expected variant name")
        fields: List[FieldDecl] = []
        style = VariantStyle.UNIT
        if self._match(TokenKind.LPAREN):
            style = VariantStyle.TUPLE
            while not self._check(TokenKind.RPAREN):
                self._skip_attributes()
                self._skip_visibility()
                field_start = self._span_start()
                field_type = self._parse_type()
                fields.append(FieldDecl(field_type, span=self._extend_span(field_start)))
                if not self._match(TokenKind.COMMA):
                    break
            self._expect(TokenKind.RPAREN, "[PAR-0066] expected ')' after variant fields")
        elif self._match(TokenKind.LBRACE):
            style = VariantStyle.RECORD
            while True:
                self._skip_attributes()
                if self._check(TokenKind.RBRACE):
                    break
                self._skip_visibility()
                field_start = self._span_start()
                field_name = self._expect(TokenKind.IDENT, "[PAR-0064] expected field name")
                self._expect(TokenKind.COLON, "[PAR-0065] expected ':' after field name")
                field_type = self._parse_type()
                fields.append(FieldDecl(field_type, field_name.text, span=self._extend_span(field_start)))
                if not self._match(TokenKind.COMMA):
                    break
            self._expect(TokenKind.RBRACE, "[PAR-0067] expected '}' after variant fields")
        if self._check(TokenKind.EQ):
            raise ParseError(f"[PAR-0070] explicit discriminant on variant '{name_tok.text}' is not supported",
                             self._peek(), self.filename)
        return VariantDecl(name_tok.text, style, fields, span=self._extend_span(start))

    # --- types ---

    def _parse_type(self) -> TypeExpr:
        start = self._span_start()

        if self._match(TokenKind.AMP):
            lifetime = None
            if self._check(TokenKind.LIFETIME):
                lifetime = self._advance().text
            is_mut = self._match(TokenKind.MUT)
            inner = self._parse_type()
            return RefType(inner, is_mut, lifetime, span=self._extend_span(start))

        if self._match(TokenKind.STAR):
            if self._match(TokenKind.MUT):
                is_mut = True
            elif self._match(TokenKind.CONST):
                is_mut = False
            else:
                raise ParseError(f"[PAR-0410] expected 'const' or 'mut' after '*', got {self._peek()} instead",
                                 self._peek(), self.filename)
            inner = self._parse_type()
            return PtrType(inner, is_mut, span=self._extend_span(start))

        if self._match(TokenKind.LPAREN):
            elems: List[TypeExpr] = []
            trailing_comma = False
            while not self._check(TokenKind.RPAREN):
                elems.append(self._parse_type())
                trailing_comma = self._match(TokenKind.COMMA)
                if not trailing_comma:
                    break
            self._expect(TokenKind.RPAREN, "[PAR-0411] expected ')' after tuple type")
            if len(elems) == 1 and not trailing_comma:
                # (T) is just a parenthesized T
                return elems[0]
            return TupleType(elems, span=self._extend_span(start))

        if self._match(TokenKind.LBRACKET):
            elem = self._parse_type()
            length = None
            if self._match(TokenKind.SEMI):
                parts: List[str] = []
                while not self._check(TokenKind.RBRACKET):
                    if self._at_end():
                        break
                    parts.append(self._advance().text)
                if not parts:
                    raise ParseError("[PAR-0412] expected array length after ';'", self._peek(), self.filename)
                length = "".join(parts)
            self._expect(TokenKind.RBRACKET, "[PAR-0413] expected ']' after array type")
            return ArrayType(elem, length, span=self._extend_span(start))

        if self._match(TokenKind.FN):
            self._expect(TokenKind.LPAREN, "[PAR-0414] expected '(' after 'fn'")
            params = self._parse_paren_type_list()
            result = self._parse_type() if self._match(TokenKind.ARROW) else None
            return FnType(params, result, span=self._extend_span(start))

        if self._is_trait_object_start():
            keyword = self._advance().text
            return TraitObjectType(keyword, self._parse_trait_bounds(), span=self._extend_span(start))

        if self._check(TokenKind.IDENT) or self._check(TokenKind.DOUBLE_COLON):
            return self._parse_type_path(start)

        raise ParseError(f"[PAR-0400] expected type, got {self._peek()} instead", self._peek(), self.filename)

    def _is_trait_object_start(self) -> bool:
        # `dyn` and `impl` are contextual: only a following bound makes them keywords
        tok = self._peek()
        if tok.kind is not TokenKind.IDENT or tok.text not in ("dyn", "impl"):
            return False
        return self._peek(1).kind in (TokenKind.IDENT, TokenKind.DOUBLE_COLON, TokenKind.LIFETIME)

    def _parse_trait_bounds(self) -> List[TypePath]:
        bounds: List[TypePath] = []
        while True:
            if not self._match(TokenKind.LIFETIME):
                if not (self._check(TokenKind.IDENT) or self._check(TokenKind.DOUBLE_COLON)):
                    raise ParseError(f"[PAR-0416] expected trait bound, got {self._peek()} instead",
                                     self._peek(), self.filename)
                bounds.append(self._parse_type_path(self._span_start()))
            if not (self._check(TokenKind.PUNCT) and self._peek().text == "+"):
                return bounds
            self._advance()

    def _parse_paren_type_list(self) -> List[TypeExpr]:
        # '(' already consumed
        types: List[TypeExpr] = []
        while not self._check(TokenKind.RPAREN):
            types.append(self._parse_type())
            if not self._match(TokenKind.COMMA):
                break
        self._expect(TokenKind.RPAREN, "[PAR-0415] expected ')' after parameter types")
        return types

    def _parse_type_path(self, start: Span) -> TypePath:
        is_global = self._match(TokenKind.DOUBLE_COLON)
        segments: List[PathSegment] = []
        while True:
            seg_start = self._span_start()
            name_tok = self._expect(TokenKind.IDENT, "[PAR-0401] expected identifier in type path")
            segment = PathSegment(name_tok.text)
            if self._match(TokenKind.LT):
                segment.args = self._parse_generic_args()
            elif self._match(TokenKind.LPAREN):
                segment.paren_args = self._parse_paren_type_list()
                if self._match(TokenKind.ARROW):
                    segment.paren_args.append(self._parse_type())
            segment.span = self._extend_span(seg_start)
            segments.append(segment)
            if not self._match(TokenKind.DOUBLE_COLON):
                break
            # turbofish in type position: Vec::<u8>
            if self._match(TokenKind.LT):
                segment.args = self._parse_generic_args()
                segment.span = self._extend_span(seg_start)
                if not self._match(TokenKind.DOUBLE_COLON):
                    break
        return TypePath(segments, is_global, span=self._extend_span(start))

    def _parse_generic_args(self) -> List[TypeExpr]:
        # '<' already consumed; lifetime arguments carry no type and are dropped
        args: List[TypeExpr] = []
        while not self._check(TokenKind.GT):
            if not self._match(TokenKind.LIFETIME):
                args.append(self._parse_type())
            if not self._match(TokenKind.COMMA):
                break
        self._expect(TokenKind.GT, "[PAR-0403] expected '>' after type arguments")
        return args
