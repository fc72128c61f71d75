"""
Logging utilities for the generator.

This module provides logging functions that respect the GeneratorContext
logging level and format.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from sg_context import GeneratorContext, LogLevel

_LEVEL_NAMES = {
    LogLevel.ERROR: "ERROR",
    LogLevel.WARNING: "WARNING",
    LogLevel.INFO: "INFO",
    LogLevel.DEBUG: "DEBUG",
}


def log(context: Optional[GeneratorContext], log_level: LogLevel, message: str) -> None:
    """
    Log a message if the context's logging level admits it.

    Args:
        context:    The generator context containing the logging level.
        log_level:  The level of the message to log.
        message:    The message to log.
    """
    if context is None:
        print("No context provided for logging.", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        return
    if context.log_level < log_level:
        return
    prefix = ""
    if context.log_rich_format and log_level in _LEVEL_NAMES:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        prefix = f"{timestamp} [{_LEVEL_NAMES[log_level]}] "
    print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: Optional[GeneratorContext], message: str) -> None:
    """Log an error-level message."""
    log(context, LogLevel.ERROR, message)


def log_warning(context: Optional[GeneratorContext], message: str) -> None:
    """Log a warning-level message."""
    log(context, LogLevel.WARNING, message)


def log_info(context: Optional[GeneratorContext], message: str) -> None:
    """Log an info-level message."""
    log(context, LogLevel.INFO, message)


def log_debug(context: Optional[GeneratorContext], message: str) -> None:
    """Log a debug-level message."""
    log(context, LogLevel.DEBUG, message)


def log_stage(context: Optional[GeneratorContext], stage: str, subject: Optional[str] = None) -> None:
    """
    Log the start of a generation stage.

    Args:
        context: The generator context containing logging flags.
        stage: The name of the stage (e.g., "Parsing", "Lowering").
        subject: Optional file or declaration being processed.
    """
    if subject:
        log(context, LogLevel.INFO, f"{stage} '{subject}'")
    else:
        log(context, LogLevel.INFO, f"{stage}...")
