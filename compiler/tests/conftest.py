#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path
from textwrap import dedent

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sg_context import GeneratorContext
from sg_driver import SumGenDriver
from sg_lowering import lower_sum_type
from sg_output import OutputLayout
from sg_parser import Parser

CXX = shutil.which("g++") or shutil.which("clang++")

requires_cxx = pytest.mark.skipif(CXX is None, reason="no C++ compiler available")


@pytest.fixture
def repo_root() -> Path:
    return PROJECT_ROOT.parent


@pytest.fixture
def runtime_dir(repo_root: Path) -> Path:
    return repo_root / "runtime"


@pytest.fixture
def temp_project(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def write_rs_file(temp_project: Path):
    def _write(name: str, content: str) -> Path:
        file_path = temp_project / f"{name}.rs"
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(dedent(content))
        return file_path

    return _write


def parse_source(src: str):
    return Parser.from_source(dedent(src)).parse_file(filename="test.rs")


@pytest.fixture
def lower_single():
    """Parse source holding exactly one enum and lower it.

    Usage:
        def test_something(lower_single):
            lowered = lower_single('''
                enum Shape { Empty, Circle(f64) }
            ''', namespace=["geo"])
            assert lowered.tags == ["Empty", "Circle"]
    """

    def _lower(src: str, namespace=()):
        source = parse_source(src)
        assert len(source.decls) == 1
        return lower_sum_type(source.decls[0], namespace)

    return _lower


@pytest.fixture
def generate_single():
    """Run the whole in-memory pipeline on source text.

    Returns (unit, diagnostics); unit is None if the pipeline reported errors.
    """

    def _generate(src: str, namespace=(), context: GeneratorContext | None = None):
        driver = SumGenDriver(context)
        result = driver.analyze_source(dedent(src), "test.rs", namespace)
        if result.has_errors():
            return None, result.diagnostics
        assert len(result.units) == 1
        return result.units[0], result.diagnostics

    return _generate


@pytest.fixture
def layout(temp_project: Path) -> OutputLayout:
    return OutputLayout(temp_project / "include", temp_project / "src", ["acme", "geo"])


@pytest.fixture
def compile_and_run(runtime_dir: Path):
    """Write the generated files of a layout plus a main.cpp, build them and run the result."""

    def _compile_and_run(layout: OutputLayout, main_cpp: str, work_dir: Path) -> tuple[bool, str, str]:
        main_file = work_dir / "main.cpp"
        exe_file = work_dir / "main"
        main_file.write_text(dedent(main_cpp))

        sources = sorted(str(p) for p in layout.source_subdir.glob("*.gen.cpp"))
        result = subprocess.run(
            [
                CXX,
                "-std=c++14",
                "-Wall",
                "-Wextra",
                "-I",
                str(runtime_dir),
                "-I",
                str(layout.header_dir),
                str(main_file),
                *sources,
                "-o",
                str(exe_file),
            ],
            capture_output=True,
            text=True,
            timeout=120,
        )

        if result.returncode != 0:
            return False, "", result.stderr

        result = subprocess.run(
            [str(exe_file)],
            capture_output=True,
            text=True,
            timeout=10,
        )

        return result.returncode == 0, result.stdout, result.stderr

    return _compile_and_run


def has_error_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given code ("LOW-0010" or "[LOW-0010]")."""
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)
