"""
Interpreter context for cross-cutting options.

This module defines the InterpreterContext dataclass which holds options
that affect multiple stages of interpretation (logging, diagnostics, etc.).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Hierarchical logging levels for the Pigeon interpreter."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages (default)
    INFO = 10       # Pipeline stage messages
    DEBUG = 30      # Detailed diagnostic information


@dataclass
class InterpreterContext:
    """
    Holds cross-cutting options that affect multiple interpretation stages.

    Attributes:
        log_rich_format:    If True, emit logs in rich format: timestamp and log level prefix.
        log_level:          Current logging level.
    """
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'InterpreterContext':
        """Create an InterpreterContext with default settings."""
        return InterpreterContext(log_level=LogLevel.WARNING)
