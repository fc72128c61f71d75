#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from sg_ast import SourceFile
from sg_context import GeneratorContext
from sg_cpp_emitter import CppEmitter
from sg_diagnostics import Diagnostic, diag_from_node, diag_from_token
from sg_lexer import LexerError, Lexer
from sg_logger import log_info, log_debug, log_stage, log_warning
from sg_lowering import LoweredSumType, lower_sum_type
from sg_output import OutputLayout
from sg_parser import Parser, ParseError
from sg_types import LoweringError


@dataclass
class GeneratedUnit:
    """All generated text for one sum type; nothing is on disk yet."""
    decl_name: str
    class_name: str
    file_name: str
    inc_header: str
    skeleton_header: str
    fmt_header: Optional[str]
    impl_source: str


@dataclass
class GenerationResult:
    source: Optional[SourceFile] = None
    units: List[GeneratedUnit] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)

    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.diagnostics)


@dataclass
class WriteReport:
    result: GenerationResult
    written: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)

    def has_errors(self) -> bool:
        return self.result.has_errors()


class SumGenDriver:
    """
    Pipeline:
      - read file
      - tokenize
      - parse
      - lower and emit every sum type, in memory
      - write, only if nothing above failed

    Entry points:
      - analyze(path): everything but writing.
      - analyze_source(text): same, for text that is not on disk.
      - generate(path, layout): analyze, then write under layout.
    """

    def __init__(self, context: GeneratorContext | None = None):
        self.context = context or GeneratorContext.default()

    # --- Public API ---

    def analyze(self, path: str | Path, namespace: Sequence[str] = ()) -> GenerationResult:
        path = Path(path)
        log_stage(self.context, "Reading", str(path))
        if not path.exists():
            return GenerationResult(diagnostics=[
                Diagnostic(kind="error", message=f"[DRV-0010] input file not found: {path}")
            ])
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return GenerationResult(diagnostics=[
                Diagnostic(kind="error", message=f"[DRV-0020] cannot read input file: {e}", filename=str(path))
            ])
        return self.analyze_source(text, str(path), namespace)

    def analyze_source(self, text: str, filename: str = "<input>",
                       namespace: Sequence[str] = ()) -> GenerationResult:
        result = GenerationResult()
        try:
            source = self._parse_source(text, filename)
        except LexerError as e:
            result.diagnostics.append(
                Diagnostic(
                    kind="error",
                    message=e.message,
                    filename=e.filename,
                    line=e.line,
                    column=e.column,
                )
            )
            return result
        except ParseError as e:
            result.diagnostics.append(
                diag_from_token(
                    kind="error",
                    message=e.message,
                    token=e.token,
                    filename=e.filename,
                )
            )
            return result

        result.source = source
        if not source.decls:
            result.diagnostics.append(
                Diagnostic(kind="warning", message="[DRV-0040] no enum declarations found, nothing to generate",
                           filename=filename)
            )
            return result

        for decl in source.decls:
            log_stage(self.context, "Lowering", decl.name)
            try:
                lowered = lower_sum_type(decl, namespace)
            except LoweringError as e:
                result.diagnostics.append(
                    diag_from_node("error", e.message, filename=filename, node=e.node, decl_name=decl.name)
                )
                continue
            if not decl.variants:
                result.diagnostics.append(
                    diag_from_node("warning",
                                   f"[LOW-0030] enum '{decl.name}' has no variants; its class cannot be constructed",
                                   filename=filename, node=decl, decl_name=decl.name)
                )
            result.units.append(self._emit(lowered, filename))

        errors = len([d for d in result.diagnostics if d.kind == "error"])
        log_info(self.context, f"Analysis complete: {len(result.units)} unit(s), {errors} error(s)")
        return result

    def generate(self, path: str | Path, layout: OutputLayout) -> WriteReport:
        """
        Analyze `path` and write every unit under `layout`.

        Nothing is written when any declaration in the file failed. The skeleton
        header is left alone when it already exists, unless the context forces it;
        the other files are always overwritten.
        """
        result = self.analyze(path, layout.namespace)
        report = WriteReport(result)
        if result.has_errors():
            log_info(self.context, "Errors found, no files written")
            return report

        log_stage(self.context, "Writing", str(layout.header_subdir))
        try:
            layout.ensure_dirs()
            for unit in result.units:
                self._write_unit(unit, layout, report)
        except OSError as e:
            result.diagnostics.append(
                Diagnostic(kind="error", message=f"[DRV-0030] cannot write output: {e}",
                           filename=getattr(e, "filename", None))
            )
        return report

    # --- Internal helpers ---

    def _parse_source(self, text: str, filename: str) -> SourceFile:
        log_debug(self.context, f"Lexing {filename}")
        lexer = Lexer(text, filename=filename)
        tokens = lexer.tokenize()
        log_debug(self.context, f"Lexed {len(tokens)} token(s) from {filename}")

        log_debug(self.context, f"Parsing {filename}")
        parser = Parser(tokens)
        source = parser.parse_file(filename=filename)
        log_debug(self.context, f"Found {len(source.decls)} enum(s) in {filename}")
        return source

    def _emit(self, lowered: LoweredSumType, filename: str) -> GeneratedUnit:
        log_debug(self.context, f"Emitting {lowered.class_name} ({len(lowered.variants)} variant(s))")
        emitter = CppEmitter(self.context, filename)
        return GeneratedUnit(
            decl_name=lowered.name,
            class_name=lowered.class_name,
            file_name=lowered.file_name,
            inc_header=emitter.emit_inc_header(lowered),
            skeleton_header=emitter.emit_skeleton_header(lowered),
            fmt_header=emitter.emit_fmt_header(lowered) if self.context.emit_fmt_header else None,
            impl_source=emitter.emit_impl_source(lowered),
        )

    def _write(self, path: Path, text: str, report: WriteReport) -> None:
        log_info(self.context, f"Generating {path}...")
        path.write_text(text, encoding="utf-8")
        report.written.append(path)

    def _write_unit(self, unit: GeneratedUnit, layout: OutputLayout, report: WriteReport) -> None:
        skeleton = layout.skeleton_path(unit.file_name)
        if skeleton.exists() and not self.context.force_skeleton:
            log_info(self.context, f"Skipping {skeleton}...")
            report.skipped.append(skeleton)
        else:
            self._write(skeleton, unit.skeleton_header, report)

        self._write(layout.inc_path(unit.file_name), unit.inc_header, report)
        if unit.fmt_header is not None:
            self._write(layout.fmt_path(unit.file_name), unit.fmt_header, report)
        elif layout.fmt_path(unit.file_name).exists():
            log_warning(self.context, f"Leaving stale {layout.fmt_path(unit.file_name)} in place")
        self._write(layout.impl_path(unit.file_name), unit.impl_source, report)
