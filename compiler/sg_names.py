"""
Identifier analysis.

Splits an identifier written in any casing style (`USBDriver`, `usb_driver`,
`camelCase123`) into case-tagged tokens, and renders those tokens in the
naming conventions used by generated C++ code.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Iterable, List, Tuple


class CaseTag(Enum):
    ALL_LOWER = auto()  # usb, driver2
    ALL_UPPER = auto()  # USB, USB2
    CAPITAL_FIRST = auto()  # Driver, Case123


class NamingConvention(Enum):
    PASCAL_CASE = auto()
    SNAKE_CASE = auto()


class SegmentState(Enum):
    WAITING = auto()  # between tokens
    FIRST_UPPER = auto()  # read exactly one uppercase letter
    ALL_UPPER = auto()  # uppercase run (digits allowed)
    ALL_LOWER = auto()  # lowercase/digit run
    CAPITAL_FIRST = auto()  # uppercase letter followed by one lowercase letter


class _Segmenter:
    """Single left-to-right scan, one character of lookback, no backtracking."""

    def __init__(self) -> None:
        self.tokens: List[str] = []
        self.part: List[str] = []
        self.state = SegmentState.WAITING
        self._transitions: Dict[SegmentState, Callable[[str], SegmentState]] = {
            SegmentState.WAITING: self._on_waiting,
            SegmentState.FIRST_UPPER: self._on_first_upper,
            SegmentState.ALL_UPPER: self._on_all_upper,
            SegmentState.ALL_LOWER: self._on_word_tail,
            SegmentState.CAPITAL_FIRST: self._on_word_tail,
        }

    def feed(self, c: str) -> None:
        self.state = self._transitions[self.state](c)

    def finish(self) -> List[str]:
        self._flush()
        return self.tokens

    def _flush(self) -> None:
        if self.part:
            self.tokens.append("".join(self.part))
            self.part = []

    def _start(self, c: str) -> SegmentState:
        self.part.append(c)
        return SegmentState.FIRST_UPPER if c.isupper() else SegmentState.ALL_LOWER

    def _on_waiting(self, c: str) -> SegmentState:
        if c == "_":
            return SegmentState.WAITING
        return self._start(c)

    def _on_first_upper(self, c: str) -> SegmentState:
        if c == "_":
            self._flush()
            return SegmentState.WAITING
        self.part.append(c)
        if c.isupper():
            return SegmentState.ALL_UPPER
        return SegmentState.CAPITAL_FIRST

    def _on_all_upper(self, c: str) -> SegmentState:
        if c == "_":
            self._flush()
            return SegmentState.WAITING
        if not c.islower():
            self.part.append(c)
            return SegmentState.ALL_UPPER
        last = self.part[-1]
        if not last.isupper():
            # USB2driver: no uppercase letter to carry into the next word
            self._flush()
            self.part.append(c)
            return SegmentState.ALL_LOWER
        # USBDriver: the last uppercase letter starts the next word
        self.part.pop()
        self._flush()
        self.part.extend((last, c))
        return SegmentState.FIRST_UPPER

    def _on_word_tail(self, c: str) -> SegmentState:
        if c == "_":
            self._flush()
            return SegmentState.WAITING
        if c.isupper():
            self._flush()
            self.part.append(c)
            return SegmentState.FIRST_UPPER
        self.part.append(c)
        return SegmentState.ALL_LOWER


def segment(identifier: str) -> List[str]:
    """Split an identifier on underscores and casing boundaries."""
    segmenter = _Segmenter()
    for c in identifier:
        segmenter.feed(c)
    return segmenter.finish()


def classify(token: str) -> CaseTag:
    has_upper = any(c.isupper() for c in token)
    has_lower = any(c.islower() for c in token)
    if has_upper and not has_lower:
        return CaseTag.ALL_UPPER
    if has_upper:
        return CaseTag.CAPITAL_FIRST
    return CaseTag.ALL_LOWER


@dataclass(frozen=True)
class IdentPart:
    text: str
    tag: CaseTag

    def to_capital_first(self) -> str:
        if self.tag is CaseTag.ALL_LOWER:
            return self.text[:1].upper() + self.text[1:]
        return self.text

    def to_all_lower_case(self) -> str:
        if self.tag is CaseTag.ALL_LOWER:
            return self.text
        return self.text.lower()


def render(parts: Iterable[IdentPart], convention: NamingConvention) -> str:
    if convention is NamingConvention.PASCAL_CASE:
        return "".join(p.to_capital_first() for p in parts)
    return "_".join(p.to_all_lower_case() for p in parts)


@dataclass(frozen=True)
class IdentName:
    """A normalized identifier; rendering is pure and never re-splits tokens."""
    parts: Tuple[IdentPart, ...]

    @staticmethod
    def from_str(identifier: str) -> "IdentName":
        return IdentName(tuple(IdentPart(tok, classify(tok)) for tok in segment(identifier)))

    def render(self, convention: NamingConvention) -> str:
        return render(self.parts, convention)

    def to_class_name(self) -> str:
        return self.render(NamingConvention.PASCAL_CASE)

    def to_file_name(self) -> str:
        return self.render(NamingConvention.SNAKE_CASE)

    def to_enum_variant_name(self) -> str:
        return self.render(NamingConvention.PASCAL_CASE)

    def to_public_member_name(self) -> str:
        return self.render(NamingConvention.SNAKE_CASE)
