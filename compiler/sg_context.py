"""
Generator context for cross-cutting options.

This module defines the GeneratorContext dataclass which holds options that
affect more than one stage of generation (logging, which artifacts to emit,
how existing hand-edited files are treated).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Hierarchical logging levels for the generator."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


@dataclass
class GeneratorContext:
    """
    Holds cross-cutting generator options.

    Attributes:
        generator_name:     Name written into the banner of generated files.
        emit_fmt_header:    If True, write the `<name>.fmt.hpp` debug-format header.
        force_skeleton:     If True, overwrite an existing hand-editable `<name>.hpp`.
        log_rich_format:    If True, emit logs in rich format: may include log level, timestamps, etc.
        log_level:          Current logging level.
    """
    generator_name: str = "sumgen"
    emit_fmt_header: bool = True
    force_skeleton: bool = False
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'GeneratorContext':
        """Create a GeneratorContext with default settings."""
        return GeneratorContext(log_level=LogLevel.WARNING)
