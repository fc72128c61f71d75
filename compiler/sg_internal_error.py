"""
Internal generator errors: a bug in sumgen itself, never a problem with the
input. Unsupported input is reported as a `Diagnostic`; these are raised when
lowered fragments contradict each other and abort the whole run.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from sg_ast import Node, Span

# Reported for messages raised without their own `[ICE-NNNN]` code
UNCODED_ICE = "ICE-9999"

_ICE_CODE = re.compile(r"\[(ICE-\d{4})\]")


@dataclass(frozen=True)
class ICELocation:
    filename: Optional[str]
    span: Optional[Span]
    decl_name: Optional[str] = None  # sum type being generated

    @staticmethod
    def at(filename: Optional[str], node: Optional[Node], decl_name: Optional[str] = None) -> ICELocation:
        return ICELocation(filename, node.span if node is not None else None, decl_name)

    def prefix(self) -> str:
        """`file:line:col: `, `file: ` or nothing, depending on what is known."""
        if not self.filename:
            return ""
        if self.span is None:
            return f"{self.filename}: "
        return f"{self.filename}:{self.span.start_line}:{self.span.start_column}: "


class InternalGeneratorError(RuntimeError):
    def __init__(self, message: str, loc: ICELocation | None = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    @property
    def code(self) -> str:
        match = _ICE_CODE.search(self.message)
        return match.group(1) if match else UNCODED_ICE

    def format(self) -> str:
        body = self.message if _ICE_CODE.search(self.message) else f"[{UNCODED_ICE}] {self.message}"
        if self.loc is None:
            return f"internal generator error: {body}"
        if self.loc.decl_name:
            body += f" (while generating '{self.loc.decl_name}')"
        return f"{self.loc.prefix()}internal generator error: {body}"
