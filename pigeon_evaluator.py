"""
Tree-walking evaluator.

Runs a program that passed analysis. Statements report how they finished
through a Completion; expressions produce tagged Values. Each call gets its
own FunctionScope frame, so a callee never sees its caller's locals.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pigeon_analysis import AnalysisResult
from pigeon_ast import (
    Stmt, Block, VarDecl, AssignStmt, CallStmt, IfStmt, WhileStmt, DoWhileStmt, ForStmt, ReturnStmt,
    BreakStmt, ContinueStmt, Expr, IntLiteral, FloatLiteral, StringLiteral, BoolLiteral, VarRef, ParenExpr,
    UnaryOp, BinaryOp, TernaryOp, CallExpr, Span)
from pigeon_internal_error import (
    EvaluationError, IllegalUsageError, InternalInterpreterError, ICELocation)
from pigeon_logger import log_debug
from pigeon_scopes import FunctionScope
from pigeon_symbols import Function
from pigeon_types import (
    PigeonType, RELATIONAL_OPERATORS, EQUALITY_OPERATORS, LOGICAL_OPERATORS, accepts, binary_result, unary_result,
    format_type)
from pigeon_values import (
    Value, VOID, int_value, float_value, bool_value, string_value, make_value, format_value, wrap_int)


class CompletionKind(Enum):
    NORMAL = "normal"
    BREAK = "break"
    CONTINUE = "continue"
    RETURN = "return"


@dataclass(frozen=True)
class Completion:
    """How a statement finished; `value` is set only for RETURN."""
    kind: CompletionKind
    value: Optional[Value] = None

    @staticmethod
    def returning(value: Value) -> "Completion":
        return Completion(CompletionKind.RETURN, value)


NORMAL = Completion(CompletionKind.NORMAL)
BREAK = Completion(CompletionKind.BREAK)
CONTINUE = Completion(CompletionKind.CONTINUE)


# --- integer and float arithmetic with Pigeon semantics ---

def _int_div(a: int, b: int, span: Optional[Span]) -> int:
    """Integer division truncating toward zero."""
    if b == 0:
        raise EvaluationError("[RUN-0010] integer division by zero", span)
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _int_mod(a: int, b: int, span: Optional[Span]) -> int:
    """Remainder with the sign of the dividend."""
    if b == 0:
        raise EvaluationError("[RUN-0010] integer modulo by zero", span)
    return a - b * _int_div(a, b, span)


def _float_div(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


class Evaluator:
    """Executes an analyzed program against its Global Scope."""

    def __init__(self, analysis: AnalysisResult) -> None:
        if analysis.program is None:
            raise IllegalUsageError("cannot evaluate: no program was parsed")
        if analysis.has_errors():
            raise IllegalUsageError(
                f"cannot evaluate a program with {len(analysis.diagnostics)} error(s)")
        self.analysis = analysis
        self.program = analysis.program
        self.global_scope = analysis.global_scope
        self.filename = self.program.filename
        self._frames: List[FunctionScope] = []

    @property
    def _frame(self) -> FunctionScope:
        return self._frames[-1]

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Execute the top-level statements in source order."""
        self._frames.append(FunctionScope(self.global_scope))
        try:
            for stmt in self.program.statements:
                self._exec_stmt(stmt)
        except RecursionError:
            raise EvaluationError("[RUN-0020] call stack exhausted (recursion too deep)") from None
        finally:
            self._frames.pop().close()
        log_debug(self.analysis.context,
                  f"Evaluation finished, {self.global_scope.arena.live_count} live scope(s)")

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _exec_block(self, block: Block, *, push_new_scope: bool = True) -> Completion:
        if push_new_scope:
            self._frame.enter()
        try:
            for stmt in block.stmts:
                completion = self._exec_stmt(stmt)
                if completion.kind is not CompletionKind.NORMAL:
                    return completion
            return NORMAL
        finally:
            if push_new_scope:
                self._frame.exit()

    def _exec_stmt(self, stmt: Stmt) -> Completion:
        if isinstance(stmt, Block):
            return self._exec_block(stmt)

        if isinstance(stmt, VarDecl):
            value = self._eval_expr(stmt.value)
            self._frame.declare(value.type, stmt.name, value, read_only=stmt.is_const)
            return NORMAL

        if isinstance(stmt, AssignStmt):
            self._exec_assign(stmt)
            return NORMAL

        if isinstance(stmt, CallStmt):
            self._eval_expr(stmt.call)
            return NORMAL

        if isinstance(stmt, IfStmt):
            if self._eval_bool(stmt.cond):
                return self._exec_block(stmt.then_block)
            if stmt.else_block is not None:
                return self._exec_block(stmt.else_block)
            return NORMAL

        if isinstance(stmt, WhileStmt):
            while self._eval_bool(stmt.cond):
                completion = self._exec_block(stmt.body)
                if completion.kind is CompletionKind.BREAK:
                    break
                if completion.kind is CompletionKind.RETURN:
                    return completion
            return NORMAL

        if isinstance(stmt, DoWhileStmt):
            while True:
                completion = self._exec_block(stmt.body)
                if completion.kind is CompletionKind.BREAK:
                    break
                if completion.kind is CompletionKind.RETURN:
                    return completion
                if not self._eval_bool(stmt.cond):
                    break
            return NORMAL

        if isinstance(stmt, ForStmt):
            return self._exec_for(stmt)

        if isinstance(stmt, BreakStmt):
            return BREAK

        if isinstance(stmt, ContinueStmt):
            return CONTINUE

        if isinstance(stmt, ReturnStmt):
            if stmt.value is None:
                return Completion.returning(VOID)
            return Completion.returning(self._eval_expr(stmt.value))

        raise InternalInterpreterError(f"[ICE-0030] unexpected statement {type(stmt).__name__}",
                                       ICELocation(self.filename, stmt.span))

    def _exec_assign(self, stmt: AssignStmt) -> None:
        value = self._eval_expr(stmt.value)
        if stmt.op != "=":
            value = self._apply_binary(stmt.op[:-1], self._frame.lookup(stmt.name), value, stmt.span)
        self._frame.assign(stmt.name, value)

    def _exec_for(self, stmt: ForStmt) -> Completion:
        """
        Counted loop. Every iteration runs in a fresh scope holding the
        counter and the body's declarations; the bound is re-evaluated in
        that scope before each test.
        """
        step = 1 if stmt.is_ascending else -1
        counter = self._expect(self._eval_expr(stmt.start), PigeonType.INT, stmt.start.span)

        frame = self._frame
        frame.enter()
        try:
            while True:
                frame.declare(PigeonType.INT, stmt.counter, int_value(counter))
                bound = self._expect(self._eval_expr(stmt.bound), PigeonType.INT, stmt.bound.span)
                if (counter > bound) if stmt.is_ascending else (counter < bound):
                    return NORMAL
                completion = self._exec_block(stmt.body, push_new_scope=False)
                if completion.kind is CompletionKind.BREAK:
                    return NORMAL
                if completion.kind is CompletionKind.RETURN:
                    return completion
                counter = wrap_int(counter + step)
                frame.exit()
                frame.enter()
        finally:
            frame.exit()

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _expect(self, value: Value, typ: PigeonType, span: Optional[Span]) -> object:
        """Payload of `value`, which must carry the tag `typ`."""
        if value.type is not typ:
            raise EvaluationError(
                f"[RUN-0040] expected a value of type '{format_type(typ)}', got '{format_type(value.type)}'", span)
        return value.data

    def _eval_bool(self, expr: Expr) -> bool:
        return self._expect(self._eval_expr(expr), PigeonType.BOOL, expr.span)

    def _eval_expr(self, expr: Expr) -> Value:
        if isinstance(expr, IntLiteral):
            return int_value(expr.value)
        if isinstance(expr, FloatLiteral):
            return float_value(expr.value)
        if isinstance(expr, StringLiteral):
            return string_value(expr.value)
        if isinstance(expr, BoolLiteral):
            return bool_value(expr.value)
        if isinstance(expr, VarRef):
            return self._frame.lookup(expr.name)
        if isinstance(expr, ParenExpr):
            return self._eval_expr(expr.inner)
        if isinstance(expr, UnaryOp):
            return self._eval_unary(expr)
        if isinstance(expr, BinaryOp):
            left = self._eval_expr(expr.left)
            right = self._eval_expr(expr.right)
            return self._apply_binary(expr.op, left, right, expr.span)
        if isinstance(expr, TernaryOp):
            # Both branches are evaluated, then one is selected.
            cond = self._eval_bool(expr.cond)
            then_value = self._eval_expr(expr.then_expr)
            else_value = self._eval_expr(expr.else_expr)
            return then_value if cond else else_value
        if isinstance(expr, CallExpr):
            return self._eval_call(expr)
        raise InternalInterpreterError(f"[ICE-0031] unexpected expression {type(expr).__name__}",
                                       ICELocation(self.filename, expr.span))

    def _eval_unary(self, expr: UnaryOp) -> Value:
        operand = self._eval_expr(expr.operand)
        if expr.op == "!":
            return bool_value(not self._expect(operand, PigeonType.BOOL, expr.span))
        if unary_result(expr.op, operand.type) is None:
            raise EvaluationError(
                f"[RUN-0040] operator '{expr.op}' cannot be applied to '{format_type(operand.type)}'", expr.span)
        n = -operand.data if expr.op == "-" else operand.data
        return int_value(n) if operand.type is PigeonType.INT else float_value(n)

    def _apply_binary(self, op: str, left: Value, right: Value, span: Optional[Span]) -> Value:
        """Apply a binary operator, choosing its meaning from the operands' tags."""
        if op in EQUALITY_OPERATORS:
            equal = left.type is right.type and left.data == right.data
            return bool_value(equal if op == "==" else not equal)

        result_ty = binary_result(op, left.type, right.type)
        if result_ty is None:
            raise EvaluationError(
                f"[RUN-0040] operator '{op}' cannot be applied to "
                f"'{format_type(left.type)}' and '{format_type(right.type)}'", span)

        if op in LOGICAL_OPERATORS:
            # Both operands are always evaluated.
            return bool_value((left.data and right.data) if op == "&&" else (left.data or right.data))

        if op in RELATIONAL_OPERATORS:
            if left.type is PigeonType.INT and right.type is PigeonType.INT:
                a, b = left.data, right.data
            else:
                a, b = left.as_float(), right.as_float()
            return bool_value({"<": a < b, ">": a > b, "<=": a <= b, ">=": a >= b}[op])

        if op == "%":
            return int_value(_int_mod(left.data, right.data, span))

        if result_ty is PigeonType.STRING:
            return string_value(format_value(left) + format_value(right))
        if result_ty is PigeonType.INT:
            a, b = left.data, right.data
            if op == "/":
                return int_value(_int_div(a, b, span))
            return int_value({"+": a + b, "-": a - b, "*": a * b}[op])
        x, y = left.as_float(), right.as_float()
        if op == "/":
            return float_value(_float_div(x, y))
        return float_value({"+": x + y, "-": x - y, "*": x * y}[op])

    def _eval_call(self, expr: CallExpr) -> Value:
        func = self.global_scope.lookup_function(expr.name)
        if func is None:
            raise InternalInterpreterError(f"[ICE-0040] call to undeclared function '{expr.name}'",
                                           ICELocation(self.filename, expr.span))
        args = [self._eval_expr(arg) for arg in expr.args]
        if func.is_native:
            return self._call_native(func, args, expr)
        return self._call_user(func, args, expr)

    def _call_native(self, func: Function, args: List[Value], expr: CallExpr) -> Value:
        for param, arg, arg_expr in zip(func.params, args, expr.args):
            if not accepts(param.type, arg.type):
                raise EvaluationError(
                    f"[RUN-0040] native function '{func.name}' expects '{format_type(param.type)}', "
                    f"got '{format_type(arg.type)}'", arg_expr.span)
        result = func.body(args)
        try:
            return make_value(func.return_type, result)
        except TypeError as e:
            raise IllegalUsageError(f"native function '{func.name}' returned a bad result: {e}") from e

    def _call_user(self, func: Function, args: List[Value], expr: CallExpr) -> Value:
        frame = FunctionScope(self.global_scope)
        for param, arg in zip(func.params, args):
            frame.declare(param.type, param.name, arg)

        self._frames.append(frame)
        try:
            completion = self._exec_block(func.body)
        finally:
            self._frames.pop().close()

        if completion.kind is CompletionKind.RETURN:
            return completion.value
        if completion.kind is CompletionKind.NORMAL and func.return_type is PigeonType.VOID:
            return VOID
        raise InternalInterpreterError(
            f"[ICE-0041] function '{func.name}' finished with '{completion.kind.value}'",
            ICELocation(self.filename, expr.span))
