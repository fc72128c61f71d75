#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
import os
from pathlib import Path
from typing import Dict, List, Optional

from sg_ast_printer import format_source_file
from sg_context import GeneratorContext, LogLevel
from sg_diagnostics import Diagnostic, render_snippet
from sg_driver import GenerationResult, GeneratedUnit, SumGenDriver
from sg_internal_error import InternalGeneratorError
from sg_lexer import LexerError, TokenKind, Lexer
from sg_logger import log_info, log_error
from sg_output import OutputLayout, parse_namespace

ENV_HEADER_DIR = "SUMGEN_HEADER_DIR"
ENV_SOURCE_DIR = "SUMGEN_SOURCE_DIR"
ENV_NAMESPACE = "SUMGEN_NAMESPACE"


def _load_file_lines(path: str, cache: Dict[str, List[str]]) -> List[str]:
    if path not in cache:
        text = Path(path).read_text(encoding="utf-8")
        cache[path] = text.splitlines()
    return cache[path]


def print_diagnostics(result: GenerationResult, context: GeneratorContext) -> None:
    file_cache: Dict[str, List[str]] = {}

    for diag in result.diagnostics:
        report_diagnostic(diag, file_cache, context)


def report_diagnostic(diag: Diagnostic, file_cache: Dict[str, List[str]],
                      context: Optional[GeneratorContext] = None) -> None:
    log_error(context, diag.format())
    if not diag.filename or diag.line is None:
        return
    try:
        lines = _load_file_lines(diag.filename, file_cache)
    except (OSError, UnicodeDecodeError):
        # unreadable source: the header alone still locates the problem
        return
    for line in render_snippet(diag, lines):
        log_error(context, line)


def build_generator_context(args: argparse.Namespace) -> GeneratorContext:
    """Build a GeneratorContext from command-line arguments."""
    verbosity = getattr(args, 'verbosity', 0)
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity >= 1:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.ERROR

    return GeneratorContext(
        emit_fmt_header=not getattr(args, 'no_fmt', False),
        force_skeleton=getattr(args, 'force_skeleton', False),
        log_rich_format=getattr(args, 'log', False),
        log_level=log_level,
    )


def _resolve_namespace(args: argparse.Namespace) -> List[str]:
    return parse_namespace(args.namespace or os.getenv(ENV_NAMESPACE))


def _run_analysis(args: argparse.Namespace):
    """Run the pipeline without writing, returning (result, context, exit_code)."""
    context = build_generator_context(args)
    driver = SumGenDriver(context)
    result = driver.analyze(args.input, _resolve_namespace(args))
    print_diagnostics(result, context)
    exit_code = 1 if result.has_errors() else 0
    return result, context, exit_code


def cmd_gen(args: argparse.Namespace) -> int:
    """Generate C++ files for every enum in the input."""
    context = build_generator_context(args)
    header_dir = args.header_dir or os.getenv(ENV_HEADER_DIR)
    source_dir = args.source_dir or os.getenv(ENV_SOURCE_DIR)
    if not header_dir:
        log_error(context, f"error: [SGC-0010] no header directory: pass -I/--header-dir or set ${ENV_HEADER_DIR}")
        return 1
    if not source_dir:
        log_error(context, f"error: [SGC-0010] no source directory: pass -O/--source-dir or set ${ENV_SOURCE_DIR}")
        return 1

    layout = OutputLayout(Path(header_dir), Path(source_dir), _resolve_namespace(args))
    log_info(context, f"Header directory: '{layout.header_subdir}'")
    log_info(context, f"Source directory: '{layout.source_subdir}'")

    driver = SumGenDriver(context)
    try:
        report = driver.generate(args.input, layout)
    except InternalGeneratorError as e:
        log_error(context, e.format())
        return 1

    print_diagnostics(report.result, context)
    if report.has_errors():
        return 1
    log_info(context, f"Wrote {len(report.written)} file(s), skipped {len(report.skipped)}")
    return 0


_PARTS = {
    "hpp": ("skeleton_header", "{}.hpp"),
    "inc": ("inc_header", "{}.inc.hpp"),
    "fmt": ("fmt_header", "{}.fmt.hpp"),
    "cpp": ("impl_source", "{}.gen.cpp"),
}


def _show_unit(unit: GeneratedUnit, part: str) -> None:
    names = list(_PARTS) if part == "all" else [part]
    for name in names:
        attr, pattern = _PARTS[name]
        text = getattr(unit, attr)
        if text is None:
            continue
        if part == "all":
            print(f"// ===== {pattern.format(unit.file_name)} =====")
        print(text, end="")


def cmd_show(args: argparse.Namespace) -> int:
    """Print generated text to stdout without touching the filesystem."""
    try:
        result, _, exit_code = _run_analysis(args)
    except InternalGeneratorError as e:
        log_error(build_generator_context(args), e.format())
        return 1
    if exit_code != 0:
        return exit_code
    for unit in result.units:
        _show_unit(unit, args.part)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    try:
        _, _, exit_code = _run_analysis(args)
    except InternalGeneratorError as e:
        log_error(build_generator_context(args), e.format())
        return 1
    return exit_code


def cmd_ast(args: argparse.Namespace) -> int:
    """Pretty-print the enums found in the input."""
    try:
        result, _, _ = _run_analysis(args)
    except InternalGeneratorError as e:
        log_error(build_generator_context(args), e.format())
        return 1
    if result.source is None:
        return 1
    print(format_source_file(result.source))
    return 0


def cmd_tok(args: argparse.Namespace) -> int:
    """Dump lexer tokens."""
    context = build_generator_context(args)
    path = Path(args.input)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log_error(context, f"error: [DRV-0020] cannot read {path}: {e}")
        return 1

    try:
        tokens = Lexer(text, filename=str(path)).tokenize()
    except LexerError as e:
        diag = Diagnostic(kind="error", message=e.message, filename=e.filename, line=e.line, column=e.column)
        report_diagnostic(diag, {}, context)
        return 1

    for tok in tokens:
        if not args.include_eof and tok.kind is TokenKind.EOF:
            continue
        # Format: file:line:col: KIND  'text'
        print(
            f"{path}:{tok.line}:{tok.column}:\t"
            f"{tok.kind.name:<12} {tok.text!r}"
        )
    return 0


def _add_input_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Rust source file containing enum declarations")


def _add_namespace_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--namespace", "-n",
        help=f"C++ namespace of the generated classes, e.g. 'acme::geo' (default: ${ENV_NAMESPACE})",
    )


def _add_fmt_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-fmt",
        action="store_true",
        help="Do not generate the <name>.fmt.hpp debug-format header",
    )


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="sumgen", description="Generate C++ tagged unions from Rust enums")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")

    ###########################
    # gen command
    ###########################
    p_gen = subparsers.add_parser("gen", help="Generate C++ files", aliases=["generate"])
    p_gen.add_argument("--header-dir", "-I", help=f"Root directory for headers (default: ${ENV_HEADER_DIR})")
    p_gen.add_argument("--source-dir", "-O", help=f"Root directory for sources (default: ${ENV_SOURCE_DIR})")
    _add_namespace_arg(p_gen)
    p_gen.add_argument("--force-skeleton", action="store_true",
                       help="Overwrite the hand-editable <name>.hpp even if it exists")
    _add_fmt_arg(p_gen)
    _add_input_arg(p_gen)
    p_gen.set_defaults(func=cmd_gen)

    ###########################
    # show command
    ###########################
    p_show = subparsers.add_parser("show", help="Print generated C++ to stdout")
    _add_namespace_arg(p_show)
    p_show.add_argument("--part", "-p", choices=["inc", "hpp", "fmt", "cpp", "all"], default="all",
                        help="Which generated file to print (default: all)")
    _add_fmt_arg(p_show)
    _add_input_arg(p_show)
    p_show.set_defaults(func=cmd_show)

    ###########################
    # check command
    ###########################
    p_check = subparsers.add_parser("check", help="Parse and lower without writing")
    _add_namespace_arg(p_check)
    _add_input_arg(p_check)
    p_check.set_defaults(func=cmd_check)

    ###########################
    # tok command
    ###########################
    p_tok = subparsers.add_parser("tok", help="Dump lexer tokens", aliases=["tokens"])
    p_tok.add_argument("--include-eof", "-E", action="store_true",
                       help="Include the EOF token in the output")
    _add_input_arg(p_tok)
    p_tok.set_defaults(func=cmd_tok)

    ###########################
    # ast command
    ###########################
    p_ast = subparsers.add_parser("ast", help="Pretty-print the parsed enums")
    _add_namespace_arg(p_ast)
    _add_input_arg(p_ast)
    p_ast.set_defaults(func=cmd_ast)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
