#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


def parse_namespace(text: Optional[str]) -> List[str]:
    """
    Split a C++ namespace like 'acme::geo' into its components.

    A leading '::' and empty input are accepted; both mean no extra components.
    """
    if not text:
        return []
    return [part for part in text.split("::") if part]


@dataclass
class OutputLayout:
    """
    Where generated files go.

    - headers: header_dir/<ns>/...            (e.g. include/acme/geo/shape.hpp)
    - sources: source_dir/<ns without root>/  (e.g. src/geo/shape.gen.cpp)

    The first namespace component names the project whose sources are already
    rooted at source_dir, so it is not repeated below it.
    """
    header_dir: Path
    source_dir: Path
    namespace: List[str] = field(default_factory=list)

    @staticmethod
    def from_strings(header_dir: str | Path, source_dir: str | Path, namespace: Optional[str]) -> "OutputLayout":
        return OutputLayout(Path(header_dir), Path(source_dir), parse_namespace(namespace))

    @property
    def header_subdir(self) -> Path:
        return self.header_dir.joinpath(*self.namespace)

    @property
    def source_subdir(self) -> Path:
        return self.source_dir.joinpath(*self.namespace[1:])

    def skeleton_path(self, file_name: str) -> Path:
        return self.header_subdir / f"{file_name}.hpp"

    def inc_path(self, file_name: str) -> Path:
        return self.header_subdir / f"{file_name}.inc.hpp"

    def fmt_path(self, file_name: str) -> Path:
        return self.header_subdir / f"{file_name}.fmt.hpp"

    def impl_path(self, file_name: str) -> Path:
        return self.source_subdir / f"{file_name}.gen.cpp"

    def ensure_dirs(self) -> None:
        self.header_subdir.mkdir(parents=True, exist_ok=True)
        self.source_subdir.mkdir(parents=True, exist_ok=True)
