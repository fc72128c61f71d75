#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


# ==========================
# Tokens and lexer
# ==========================

class TokenKind(Enum):
    # Special
    EOF = auto()

    IDENT = auto()  # identifier, e.g. Shape, u32, etc.
    INT = auto()  # numeric literal, e.g. 42, 0xff, 1_000u64, etc.
    CHAR = auto()  # char / byte literal, e.g. 'a', b'\n', etc.
    STRING = auto()  # string literal, e.g. "hello", r#"raw"#, etc.
    LIFETIME = auto()  # 'a, 'static

    # Keywords
    ENUM = auto()
    PUB = auto()
    FN = auto()
    MUT = auto()
    CONST = auto()

    # Punctuation used by items and types
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    LT = auto()  # <
    GT = auto()  # >
    COMMA = auto()  # ,
    SEMI = auto()  # ;
    COLON = auto()  # :
    DOUBLE_COLON = auto()  # ::
    EQ = auto()  # =
    ARROW = auto()  # ->
    AMP = auto()  # &
    STAR = auto()  # *
    HASH = auto()  # #
    BANG = auto()  # !
    DOT = auto()  # .

    # Any other Rust punctuation; only ever skipped
    PUNCT = auto()


KEYWORDS = {
    "enum": TokenKind.ENUM,
    "pub": TokenKind.PUB,
    "fn": TokenKind.FN,
    "mut": TokenKind.MUT,
    "const": TokenKind.CONST,
}

SINGLE_CHAR_TOKENS = {
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMI,
    "=": TokenKind.EQ,
    "&": TokenKind.AMP,
    "*": TokenKind.STAR,
    "#": TokenKind.HASH,
    "!": TokenKind.BANG,
    ".": TokenKind.DOT,
}

# '>' is never fused ('>>', '>=') so that nested generic argument lists close one at a time.
OTHER_PUNCTUATION = "+-/%^|~?@$"


@dataclass
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"{self.text!r}" if self.kind != TokenKind.EOF else "end-of-file"


@dataclass
class LexerError(Exception):
    message: str
    filename: str
    line: int
    column: int


def _is_ident_start(c: str) -> bool:
    return c.isalpha() or c == "_"


def _is_ident_char(c: str) -> bool:
    return c.isalnum() or c == "_"


class Lexer:
    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.length = len(source)
        self.index = 0
        self.line = 1
        self.column = 1

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        return cls(source)

    # --- low-level char utilities ---

    def _at_end(self) -> bool:
        return self.index >= self.length

    def _peek(self, offset: int = 0) -> str:
        if self.index + offset >= self.length:
            return "\0"
        return self.source[self.index + offset]

    def _advance(self) -> str:
        c = self._peek()
        if not self._at_end():
            self.index += 1
            if c == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return c

    # --- main API ---

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            tok = self._next_token()
            tokens.append(tok)
            if tok.kind is TokenKind.EOF:
                break
        return tokens

    def _next_token(self) -> Token:
        self._skip_ws_and_comments()
        start_line, start_col = self.line, self.column

        if self._at_end():
            return Token(TokenKind.EOF, "", start_line, start_col)

        c = self._peek()

        # raw strings r"..." / r#"..."# and byte strings b"..." / br"..." / b'x'
        if c in ("r", "b"):
            prefixed = self._try_read_prefixed_literal(start_line, start_col)
            if prefixed is not None:
                return prefixed

        c = self._advance()

        # identifiers / keywords
        if _is_ident_start(c):
            ident = [c]
            while _is_ident_char(self._peek()):
                ident.append(self._advance())
            text = "".join(ident)
            return Token(KEYWORDS.get(text, TokenKind.IDENT), text, start_line, start_col)

        # numbers: digits, radix prefixes, '_' separators and type suffixes
        if c.isdigit():
            digits = [c]
            while _is_ident_char(self._peek()):
                digits.append(self._advance())
            return Token(TokenKind.INT, "".join(digits), start_line, start_col)

        if c == '"':
            text = self._read_string_literal(start_line, start_col)
            return Token(TokenKind.STRING, text, start_line, start_col)

        if c == "'":
            return self._read_quote(start_line, start_col)

        if c == ":":
            if self._peek() == ":":
                self._advance()
                return Token(TokenKind.DOUBLE_COLON, "::", start_line, start_col)
            return Token(TokenKind.COLON, c, start_line, start_col)

        if c == "-" and self._peek() == ">":
            self._advance()
            return Token(TokenKind.ARROW, "->", start_line, start_col)

        kind = SINGLE_CHAR_TOKENS.get(c)
        if kind is not None:
            return Token(kind, c, start_line, start_col)

        if c in OTHER_PUNCTUATION:
            return Token(TokenKind.PUNCT, c, start_line, start_col)

        raise LexerError(f"[LEX-0040] unexpected character {c!r} at {start_line}:{start_col}", self.filename, start_line,
                         start_col)

    def _try_read_prefixed_literal(self, start_line: int, start_col: int) -> Token | None:
        offset = 0
        if self._peek(offset) == "b":
            offset += 1
            if self._peek(offset) == "'":
                self._advance()  # 'b'
                self._advance()  # opening '
                tok = self._read_quote(start_line, start_col)
                if tok.kind is not TokenKind.CHAR:
                    raise LexerError("[LEX-0020] unterminated char literal", self.filename, start_line, start_col)
                return Token(TokenKind.CHAR, "b" + tok.text, start_line, start_col)
            if self._peek(offset) == '"':
                self._advance()  # 'b'
                self._advance()  # opening "
                text = self._read_string_literal(start_line, start_col)
                return Token(TokenKind.STRING, text, start_line, start_col)
        if self._peek(offset) == "r":
            offset += 1
            hashes = 0
            while self._peek(offset + hashes) == "#":
                hashes += 1
            if self._peek(offset + hashes) == '"':
                for _ in range(offset + hashes + 1):
                    self._advance()
                text = self._read_raw_string(hashes, start_line, start_col)
                return Token(TokenKind.STRING, text, start_line, start_col)
        return None

    def _read_quote(self, start_line: int, start_col: int) -> Token:
        # 'x' and '\n' are char literals; 'a not followed by a quote is a lifetime
        ch = self._peek()
        if ch == "\\":
            chars = [self._advance(), self._advance()]
            while self._peek() not in ("'", "\n", "\0"):
                chars.append(self._advance())
            if self._peek() != "'":
                raise LexerError("[LEX-0020] unterminated char literal", self.filename, self.line, self.column)
            self._advance()
            return Token(TokenKind.CHAR, "".join(chars), start_line, start_col)
        if ch not in ("\0", "\n") and self._peek(1) == "'":
            self._advance()
            self._advance()
            return Token(TokenKind.CHAR, ch, start_line, start_col)
        if _is_ident_start(ch):
            name = []
            while _is_ident_char(self._peek()):
                name.append(self._advance())
            return Token(TokenKind.LIFETIME, "'" + "".join(name), start_line, start_col)
        raise LexerError("[LEX-0020] unterminated char literal", self.filename, self.line, self.column)

    def _read_string_literal(self, start_line: int, start_col: int) -> str:
        # Rust string literals may span lines; content is never interpreted
        chars: List[str] = []
        while True:
            ch = self._peek()
            if ch == "\0" and self._at_end():
                raise LexerError("[LEX-0010] unterminated string literal", self.filename, start_line, start_col)
            if ch == "\\":
                chars.append(self._advance())
                if not self._at_end():
                    chars.append(self._advance())
                continue
            if ch == '"':
                self._advance()
                break
            chars.append(self._advance())
        return "".join(chars)

    def _read_raw_string(self, hashes: int, start_line: int, start_col: int) -> str:
        chars: List[str] = []
        terminator = '"' + "#" * hashes
        while True:
            if self._at_end():
                raise LexerError("[LEX-0010] unterminated string literal", self.filename, start_line, start_col)
            if self.source.startswith(terminator, self.index):
                for _ in range(len(terminator)):
                    self._advance()
                break
            chars.append(self._advance())
        return "".join(chars)

    def _skip_ws_and_comments(self) -> None:
        while True:
            c = self._peek()
            if c in (" ", "\t", "\r", "\n"):
                self._advance()
                continue
            if c == "/" and self._peek(1) == "/":
                # line comment (also covers /// doc comments)
                while self._peek() not in ("\n", "\0"):
                    self._advance()
                continue
            if c == "/" and self._peek(1) == "*":
                # block comment, nestable
                start_line, start_col = self.line, self.column
                self._advance()  # '/'
                self._advance()  # '*'
                depth = 1
                while depth > 0:
                    if self._at_end():
                        raise LexerError("[LEX-0070] unterminated block comment", self.filename, start_line,
                                         start_col)
                    if self._peek() == "/" and self._peek(1) == "*":
                        self._advance()
                        self._advance()
                        depth += 1
                    elif self._peek() == "*" and self._peek(1) == "/":
                        self._advance()
                        self._advance()
                        depth -= 1
                    else:
                        self._advance()
                continue
            break
