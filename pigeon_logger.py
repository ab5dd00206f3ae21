"""
Logging utilities for the Pigeon interpreter.

This module provides logging functions that respect the InterpreterContext
log level and format flags.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from pigeon_context import InterpreterContext, LogLevel


def log(context: Optional[InterpreterContext], log_level: LogLevel, message: str) -> None:
    """
    Log a message if the context's logging level admits it.

    Args:
        context:    The interpreter context containing the logging level.
        log_level:  The level of the message to log.
        message:    The message to log.
    """
    if context is None:
        print("No context provided for logging.", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        return
    prefix = ""
    if context.log_rich_format:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        prefix = {
            LogLevel.ERROR: f"{timestamp} [ERROR] ",
            LogLevel.WARNING: f"{timestamp} [WARNING] ",
            LogLevel.INFO: f"{timestamp} [INFO] ",
            LogLevel.DEBUG: f"{timestamp} [DEBUG] ",
        }.get(log_level, "")
    if context.log_level >= log_level:
        print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: InterpreterContext, message: str) -> None:
    """
    Log an error-level message if logging level is ERROR or higher.

    Args:
        context: The interpreter context containing the logging level.
        message: The message to log.
    """
    log(context, LogLevel.ERROR, message)


def log_info(context: InterpreterContext, message: str) -> None:
    """Log an info-level message if logging level is INFO or higher."""
    log(context, LogLevel.INFO, message)


def log_debug(context: InterpreterContext, message: str) -> None:
    """Log a debug-level message if logging level is DEBUG."""
    log(context, LogLevel.DEBUG, message)


def log_stage(context: InterpreterContext, stage: str, detail: Optional[str] = None) -> None:
    """
    Log the start of an interpretation stage.

    Args:
        context: The interpreter context containing logging flags.
        stage: The name of the stage (e.g., "Lexing", "Analyzing").
        detail: Optional subject of the stage, such as a file name.
    """
    if detail:
        log(context, LogLevel.INFO, f"{stage} '{detail}'")
    else:
        log(context, LogLevel.INFO, f"{stage}...")
