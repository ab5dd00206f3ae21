#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

# pigeon_internal_error.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pigeon_ast import Span


@dataclass(frozen=True)
class ICELocation:
    filename: Optional[str]
    span: Optional[Span]


class InternalInterpreterError(RuntimeError):
    """
    ICE = interpreter bug / violated pipeline invariant.
    Not for user mistakes (those are Diagnostics).
    """

    def __init__(self, message: str, loc: ICELocation | None = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    def format(self) -> str:
        message = self.message
        if not "[ICE-" in message:
            message = f"[ICE-9999] {message}"
        if self.loc and self.loc.filename:
            if self.loc.span is not None:
                return f"{self.loc.filename}:{self.loc.span.start_line}:{self.loc.span.start_column}: internal interpreter error: {message}"
            return f"{self.loc.filename}: internal interpreter error: {message}"
        return f"internal interpreter error: {message}"


class IllegalUsageError(RuntimeError):
    """
    The host used the interpreter API out of order, e.g. evaluated a program
    that still has diagnostics.
    """
    pass


class EvaluationError(RuntimeError):
    """
    A run-time failure of a well-typed program (division by zero, exhausted stack).
    """

    def __init__(self, message: str, span: Optional[Span] = None):
        super().__init__(message)
        self.message = message
        self.span = span

    def format(self) -> str:
        if self.span is not None:
            return f"{self.span.start_line}:{self.span.start_column}: runtime error: {self.message}"
        return f"runtime error: {self.message}"
