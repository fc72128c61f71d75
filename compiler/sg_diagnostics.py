#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sg_ast import Node
from sg_lexer import Token


DIAGNOSTIC_CODE_FAMILIES = {
    "LEX": [
        "LEX-0010",
        "LEX-0020",
        "LEX-0040",
        "LEX-0070",
    ],
    "PAR": [
        "PAR-0020",
        "PAR-0021",
        "PAR-0022",
        "PAR-0030",
        "PAR-0061",
        "PAR-0062",
        "PAR-0063",
        "PAR-0064",
        "PAR-0065",
        "PAR-0066",
        "PAR-0067",
        "PAR-0068",
        "PAR-0069",
        "PAR-0070",
        "PAR-0400",
        "PAR-0401",
        "PAR-0403",
        "PAR-0410",
        "PAR-0411",
        "PAR-0412",
        "PAR-0413",
        "PAR-0414",
        "PAR-0415",
        "PAR-0416",
    ],
    "TYP": [
        "TYP-0010",
        "TYP-0020",
    ],
    "LOW": [
        "LOW-0010",
        "LOW-0020",
        "LOW-0030",  # warning
    ],
    "DRV": [
        "DRV-0010",
        "DRV-0020",
        "DRV-0030",
        "DRV-0040",  # warning
    ],
    "SGC": [
        "SGC-0010",
    ],
    # ICE codes are internal generator errors raised as exceptions,
    # not user-facing diagnostics; they are excluded from this registry.
}


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    decl_name: Optional[str] = None  # enclosing sum type, when known
    filename: Optional[str] = None  # file path

    # Primary location (start of the span)
    line: Optional[int] = None
    column: Optional[int] = None

    # Optional end of span (exclusive)
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    # Return the one-line header; snippets will be printed at the call site
    def format(self) -> str:
        loc = ""
        if self.filename is not None:
            loc += f"{os.path.abspath(str(self.filename))}"
        if self.line is not None:
            loc += f":{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
            if self.decl_name is not None:
                loc += f"({self.decl_name})"
        if loc:
            loc += ": "
        return f"{loc}{self.kind}: {self.message}"

    @property
    def code(self) -> Optional[str]:
        """The `XXX-NNNN` code carried in the message, if any."""
        if self.message.startswith("[") and "]" in self.message:
            return self.message[1:self.message.index("]")]
        return None


def diag_from_node(
        kind: str,
        message: str,
        *,
        filename: Optional[str],
        node: Optional[Node],
        decl_name: Optional[str] = None,
) -> Diagnostic:
    line = column = end_line = end_column = None
    if node is not None and node.span is not None:
        s = node.span
        line = s.start_line
        column = s.start_column
        end_line = s.end_line
        end_column = s.end_column
    return Diagnostic(
        kind=kind,
        message=message,
        decl_name=decl_name,
        filename=filename,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
    )


def diag_from_token(
        kind: str,
        message: str,
        *,
        filename: Optional[str],
        token: Optional[Token],
) -> Diagnostic:
    line = column = None
    if token is not None:
        line = token.line
        column = token.column
    return Diagnostic(
        kind=kind,
        message=message,
        filename=filename,
        line=line,
        column=column,
    )


def render_snippet(diag: Diagnostic, source_lines: Sequence[str]) -> List[str]:
    """
    Source excerpt for a located diagnostic, rustc style: the offending line
    under a gutter sized to its line number, then a caret row under the span.

    A span that runs past its first line is underlined to the end of that line
    and marked with `...`. Tabs before the span are repeated in the caret row
    so the carets stay under the right characters.
    """
    if diag.line is None or not 1 <= diag.line <= len(source_lines):
        return []

    src_line = source_lines[diag.line - 1]
    number = str(diag.line)
    gutter = " " * len(number)
    lines = [f"{gutter} |", f"{number} | {src_line}"]
    if diag.column is None:
        return lines

    start = min(max(1, diag.column), len(src_line) + 1)
    continues = diag.end_line is not None and diag.end_line > diag.line
    if continues:
        end = len(src_line) + 1
    elif diag.end_line == diag.line and diag.end_column is not None:
        end = diag.end_column
    else:
        end = start

    pad = "".join(c if c == "\t" else " " for c in src_line[:start - 1])
    carets = "^" * max(1, end - start)
    lines.append(f"{gutter} | {pad}{carets}{'...' if continues else ''}")
    return lines
