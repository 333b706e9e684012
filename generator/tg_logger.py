"""
Logging utilities for the scope generator.

This module provides logging functions that respect the GenerationContext
log level and format flags, plus helpers that report build stages (with
their elapsed time) and per-file diagnostics.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from tg_context import GenerationContext, LogLevel
from tg_diagnostics import Diagnostic

_PREFIXES = {
    LogLevel.ERROR: "[ERROR] ",
    LogLevel.WARNING: "[WARN] ",
    LogLevel.INFO: "[INFO] ",
    LogLevel.DEBUG: "[DEBUG] ",
}


def log(context: GenerationContext, log_level: LogLevel, message: str) -> None:
    """
    Log a message if the context's logging level admits it.

    Args:
        context:    The generation context containing the logging level.
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
    if context.log_rich_format:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        prefix = f"{timestamp} {_PREFIXES.get(log_level, '')}"
    print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: GenerationContext, message: str) -> None:
    """Log a message at ERROR level."""
    log(context, LogLevel.ERROR, message)


def log_warning(context: GenerationContext, message: str) -> None:
    """
    Log a message at WARNING level.

    Warnings report input that was ignored or defaulted (a multi-valued
    annotation, an unknown declaration category); generation goes on.
    """
    log(context, LogLevel.WARNING, message)


def log_info(context: GenerationContext, message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: GenerationContext, message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_stage(context: GenerationContext, stage: str, filename: Optional[str] = None) -> None:
    """
    Log the start of a scope building stage.

    Args:
        context:  The generation context containing logging flags.
        stage:    The name of the stage (e.g., "Installing names").
        filename: Optional IDL file being processed.
    """
    if filename:
        log(context, LogLevel.INFO, f"{stage} for '{filename}'")
    else:
        log(context, LogLevel.INFO, f"{stage}...")


@contextmanager
def timed_stage(context: GenerationContext, stage: str, filename: Optional[str] = None) -> Iterator[None]:
    """
    Log the start of a stage at INFO and, once the block completes, its
    elapsed time at DEBUG. Nothing is logged on completion if the block raises.
    """
    log_stage(context, stage, filename)
    start = time.perf_counter()
    yield
    elapsed_ms = (time.perf_counter() - start) * 1000
    where = f" for '{filename}'" if filename else ""
    log_debug(context, f"{stage}{where} done in {elapsed_ms:.1f} ms")


def log_diagnostic(context: GenerationContext, diag: Diagnostic) -> None:
    """
    Log a diagnostic at the level matching its kind.

    Args:
        context: The generation context containing the logging level.
        diag:    An "error" or "warning" diagnostic of one IDL file.
    """
    level = LogLevel.WARNING if diag.kind == "warning" else LogLevel.ERROR
    log(context, level, diag.format())
