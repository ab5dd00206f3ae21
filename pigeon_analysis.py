#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pigeon_ast import Expr, Program
from pigeon_context import InterpreterContext
from pigeon_diagnostics import Diagnostic
from pigeon_internal_error import InternalInterpreterError, ICELocation
from pigeon_scopes import GlobalScope
from pigeon_types import PigeonType


@dataclass
class AnalysisResult:
    """
    Front-end result for one interpreted unit.

    Contains:
      - the parsed program (None after a syntax error)
      - the interpreter context
      - the Global Scope, holding natives and pre-declared functions
      - expression types
      - diagnostics accumulated from all passes
    """
    program: Optional[Program] = None
    context: InterpreterContext = field(default_factory=InterpreterContext.default)
    global_scope: GlobalScope = field(default_factory=GlobalScope)

    # Expression types keyed by id(expr_node); written by the analyzer only
    expr_types: Dict[int, PigeonType] = field(default_factory=dict)

    diagnostics: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return len(self.diagnostics) > 0

    def type_of(self, expr: Expr) -> PigeonType:
        """Recorded type of `expr`; missing entries are an analyzer bug."""
        typ = self.expr_types.get(id(expr))
        if typ is None:
            filename = self.program.filename if self.program is not None else None
            raise InternalInterpreterError(
                f"[ICE-0001] no type recorded for {type(expr).__name__}",
                ICELocation(filename, expr.span),
            )
        return typ
