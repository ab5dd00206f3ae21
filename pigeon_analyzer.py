#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pigeon_analysis import AnalysisResult
from pigeon_ast import (
    Node, Stmt, Block, FuncDecl, VarDecl, AssignStmt, CallStmt, IfStmt, WhileStmt, DoWhileStmt, ForStmt,
    ReturnStmt, BreakStmt, ContinueStmt, Expr, IntLiteral, FloatLiteral, StringLiteral, BoolLiteral, VarRef,
    ParenExpr, UnaryOp, BinaryOp, TernaryOp, CallExpr)
from pigeon_declarator import function_from_decl
from pigeon_diagnostics import DiagnosticKind, diag_from_node
from pigeon_internal_error import InternalInterpreterError, ICELocation
from pigeon_logger import log_debug
from pigeon_scopes import FunctionScope, ScopeError, DuplicateDeclarationError
from pigeon_symbols import Function, Variable
from pigeon_types import (
    PigeonType, ARITHMETIC_OPERATORS, RELATIONAL_OPERATORS, EQUALITY_OPERATORS, LOGICAL_OPERATORS,
    accepts, binary_result, unary_result, format_type)


# Semantic analysis for Pigeon


@dataclass
class SemanticAnalyzer:
    """Scope and type checker for a pre-declared Pigeon program.

    Implements:
      - Scoping: one frame for top-level statements and a fresh frame per
        function body, with block scopes mirroring the evaluator exactly
      - Expression typing: literals, variables, operators, ternaries, calls
      - Statement checking: declarations, assignments, conditions, loops,
        break/continue placement, returns
      - Return path checking for non-void functions
      - Error recovery: unknown operand types suppress follow-up errors

    Populates `analysis.expr_types[id(expr)]` and appends diagnostics to `analysis.diagnostics`.
    """
    analysis: AnalysisResult

    def __post_init__(self) -> None:
        if self.analysis.program is None:
            raise ValueError("SemanticAnalyzer requires a parsed program")

        self.program = self.analysis.program
        self.global_scope = self.analysis.global_scope
        self.diagnostics = self.analysis.diagnostics
        self.expr_types = self.analysis.expr_types
        self.filename = self.program.filename

        self._frame: Optional[FunctionScope] = None
        self._current_func: Optional[Function] = None
        self._loop_depth: int = 0  # depth of loops allowing 'break'/'continue'

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def check(self) -> None:
        """Check every top-level item in source order."""
        self._frame = FunctionScope(self.global_scope)
        program_frame = self._frame
        try:
            for item in self.program.items:
                if isinstance(item, FuncDecl):
                    self._check_function(item)
                else:
                    self._check_stmt(item)
        finally:
            program_frame.close()
            self._frame = None
        log_debug(self.analysis.context,
                  f"Analyzed {len(self.program.items)} top-level item(s), {len(self.expr_types)} typed expression(s)")

    def _check_function(self, decl: FuncDecl) -> None:
        func = self.global_scope.lookup_function(decl.name)
        if func is None or func.node is not decl:
            # Rejected by the declarator; still check the body on its own signature.
            func = function_from_decl(decl)

        frame = FunctionScope(self.global_scope)
        for param, param_node in zip(func.params, decl.params):
            try:
                frame.declare(param.type, param.name, node=param_node)
            except DuplicateDeclarationError:
                pass  # reported as SIG-0020

        saved = (self._frame, self._current_func, self._loop_depth)
        self._frame, self._current_func, self._loop_depth = frame, func, 0
        try:
            returns = self._check_block(decl.body)
            if func.return_type is not PigeonType.VOID and not returns:
                self._error(DiagnosticKind.STRUCTURAL, decl,
                            f"[TYP-0010] not all paths in function '{decl.name}' return a value "
                            f"of type '{format_type(func.return_type)}'")
        finally:
            frame.close()
            self._frame, self._current_func, self._loop_depth = saved

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _check_block(self, block: Block, *, push_new_scope: bool = True) -> bool:
        """Check a block; True when every path through it returns."""
        if push_new_scope:
            self._frame.enter()
        try:
            guarantees_return = False
            for stmt in block.stmts:
                if self._check_stmt(stmt):
                    guarantees_return = True
            return guarantees_return
        finally:
            if push_new_scope:
                self._frame.exit()

    def _check_stmt(self, stmt: Stmt) -> bool:
        if isinstance(stmt, Block):
            return self._check_block(stmt)

        if isinstance(stmt, VarDecl):
            self._check_var_decl(stmt)
            return False

        if isinstance(stmt, AssignStmt):
            self._check_assign(stmt)
            return False

        if isinstance(stmt, CallStmt):
            self._infer_expr(stmt.call)
            return False

        if isinstance(stmt, IfStmt):
            self._expect_bool(stmt.cond, "[TYP-0070] if condition")
            then_returns = self._check_block(stmt.then_block)
            else_returns = False
            if stmt.else_block is not None:
                else_returns = self._check_block(stmt.else_block)
            # An if guarantees a return only when both branches exist and do.
            return then_returns and else_returns

        if isinstance(stmt, WhileStmt):
            self._expect_bool(stmt.cond, "[TYP-0080] while condition")
            self._check_loop_body(stmt.body)
            return False

        if isinstance(stmt, DoWhileStmt):
            self._check_loop_body(stmt.body)
            self._expect_bool(stmt.cond, "[TYP-0081] do-while condition")
            return False

        if isinstance(stmt, ForStmt):
            self._check_for(stmt)
            return False

        if isinstance(stmt, BreakStmt):
            if self._loop_depth < 1:
                self._error(DiagnosticKind.STRUCTURAL, stmt, "[TYP-0110] 'break' outside of a loop")
            return False

        if isinstance(stmt, ContinueStmt):
            if self._loop_depth < 1:
                self._error(DiagnosticKind.STRUCTURAL, stmt, "[TYP-0120] 'continue' outside of a loop")
            return False

        if isinstance(stmt, ReturnStmt):
            self._check_return(stmt)
            return True

        raise InternalInterpreterError(f"[ICE-0030] unexpected statement {type(stmt).__name__}",
                                       ICELocation(self.filename, stmt.span))

    def _check_var_decl(self, stmt: VarDecl) -> None:
        value_ty = self._infer_expr(stmt.value)
        if value_ty is PigeonType.VOID:
            self._error(DiagnosticKind.TYPE_MISMATCH, stmt.value,
                        f"[TYP-0050] initializer for '{stmt.name}' is 'void', cannot assign to variable")
            value_ty = None
        try:
            self._frame.declare(value_ty, stmt.name, read_only=stmt.is_const, node=stmt)
        except DuplicateDeclarationError:
            self._error(DiagnosticKind.DUPLICATE_DECLARATION, stmt,
                        f"[TYP-0020] variable '{stmt.name}' is already declared in this scope")

    def _check_assign(self, stmt: AssignStmt) -> None:
        target: Optional[Variable] = None
        try:
            target = self._frame.check_assignable(stmt.name)
        except ScopeError as e:
            self._scope_error(stmt, e, assigning=True)

        value_ty = self._infer_expr(stmt.value)
        if target is None or target.type is None or value_ty is None:
            return

        if stmt.op == "=":
            if value_ty is not target.type:
                self._error(DiagnosticKind.TYPE_MISMATCH, stmt,
                            f"[TYP-0064] cannot assign a value of type '{format_type(value_ty)}' "
                            f"to variable '{stmt.name}' of type '{format_type(target.type)}'")
            return

        op = stmt.op[:-1]
        result_ty = binary_result(op, target.type, value_ty)
        if result_ty is None:
            self._error(DiagnosticKind.TYPE_MISMATCH, stmt,
                        f"[TYP-0065] operator '{stmt.op}' cannot combine '{format_type(target.type)}' "
                        f"and '{format_type(value_ty)}'")
        elif result_ty is not target.type:
            self._error(DiagnosticKind.TYPE_MISMATCH, stmt,
                        f"[TYP-0064] '{stmt.name} {stmt.op} ...' produces '{format_type(result_ty)}', "
                        f"but '{stmt.name}' has type '{format_type(target.type)}'")

    def _check_loop_body(self, body: Block, *, push_new_scope: bool = True) -> None:
        self._loop_depth += 1
        try:
            self._check_block(body, push_new_scope=push_new_scope)
        finally:
            self._loop_depth -= 1

    def _check_for(self, stmt: ForStmt) -> None:
        start_ty = self._infer_expr(stmt.start)
        if start_ty is not None and start_ty is not PigeonType.INT:
            self._error(DiagnosticKind.TYPE_MISMATCH, stmt.start,
                        f"[TYP-0090] for-loop start must have type 'int', got '{format_type(start_ty)}'")

        # The counter scope also holds the body's declarations and is where
        # the bound is evaluated.
        self._frame.enter()
        try:
            self._frame.declare(PigeonType.INT, stmt.counter, node=stmt)
            bound_ty = self._infer_expr(stmt.bound)
            if bound_ty is not None and bound_ty is not PigeonType.INT:
                self._error(DiagnosticKind.TYPE_MISMATCH, stmt.bound,
                            f"[TYP-0090] for-loop bound must have type 'int', got '{format_type(bound_ty)}'")
            self._check_loop_body(stmt.body, push_new_scope=False)
        finally:
            self._frame.exit()

    def _check_return(self, stmt: ReturnStmt) -> None:
        actual = self._infer_expr(stmt.value) if stmt.value is not None else None

        if self._current_func is None:
            self._error(DiagnosticKind.STRUCTURAL, stmt, "[TYP-0260] return statement outside of function")
            return

        expected = self._current_func.return_type
        if stmt.value is None:
            if expected is not PigeonType.VOID:
                self._error(DiagnosticKind.TYPE_MISMATCH, stmt,
                            f"[TYP-0261] function '{self._current_func.name}' must return a value "
                            f"of type '{format_type(expected)}'")
            return

        if expected is PigeonType.VOID:
            self._error(DiagnosticKind.TYPE_MISMATCH, stmt,
                        f"[TYP-0262] void function '{self._current_func.name}' cannot return a value")
        elif actual is not None and actual is not expected:
            self._error(DiagnosticKind.TYPE_MISMATCH, stmt.value,
                        f"[TYP-0263] return value has type '{format_type(actual)}', "
                        f"expected '{format_type(expected)}'")

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _infer_expr(self, expr: Expr) -> Optional[PigeonType]:
        """Type of `expr`, or None when it cannot be determined (already reported)."""
        ty = self._infer_expr_uncached(expr)
        if ty is not None:
            self.expr_types[id(expr)] = ty
        return ty

    def _infer_expr_uncached(self, expr: Expr) -> Optional[PigeonType]:
        if isinstance(expr, IntLiteral):
            return PigeonType.INT
        if isinstance(expr, FloatLiteral):
            return PigeonType.FLOAT
        if isinstance(expr, StringLiteral):
            return PigeonType.STRING
        if isinstance(expr, BoolLiteral):
            return PigeonType.BOOL
        if isinstance(expr, VarRef):
            return self._infer_var_ref(expr)
        if isinstance(expr, ParenExpr):
            return self._infer_expr(expr.inner)
        if isinstance(expr, UnaryOp):
            return self._infer_unary(expr)
        if isinstance(expr, BinaryOp):
            return self._infer_binary(expr)
        if isinstance(expr, TernaryOp):
            return self._infer_ternary(expr)
        if isinstance(expr, CallExpr):
            return self._infer_call(expr)
        raise InternalInterpreterError(f"[ICE-0031] unexpected expression {type(expr).__name__}",
                                       ICELocation(self.filename, expr.span))

    def _infer_var_ref(self, expr: VarRef) -> Optional[PigeonType]:
        try:
            return self._frame.resolve_variable(expr.name).type
        except ScopeError as e:
            self._scope_error(expr, e, assigning=False)
            return None

    def _infer_unary(self, expr: UnaryOp) -> Optional[PigeonType]:
        operand_ty = self._infer_expr(expr.operand)
        fallback = PigeonType.BOOL if expr.op == "!" else operand_ty
        if operand_ty is None:
            return fallback

        result = unary_result(expr.op, operand_ty)
        if result is not None:
            return result
        if expr.op == "!":
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"[TYP-0161] unary '!' expects operand of type 'bool', got '{format_type(operand_ty)}'")
        else:
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"[TYP-0160] unary '{expr.op}' expects a numeric operand, got '{format_type(operand_ty)}'")
        return fallback

    def _infer_binary(self, expr: BinaryOp) -> Optional[PigeonType]:
        op = expr.op
        left_ty = self._infer_expr(expr.left)
        right_ty = self._infer_expr(expr.right)

        yields_bool = op in RELATIONAL_OPERATORS or op in EQUALITY_OPERATORS or op in LOGICAL_OPERATORS
        fallback = PigeonType.BOOL if yields_bool else left_ty

        if left_ty is None or right_ty is None:
            return fallback if yields_bool else None

        if left_ty is PigeonType.VOID or right_ty is PigeonType.VOID:
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"[TYP-0175] operator '{op}' cannot take a 'void' operand")
            return fallback if yields_bool else None

        result = binary_result(op, left_ty, right_ty)
        if result is not None:
            return result

        operands = f"got '{format_type(left_ty)}' and '{format_type(right_ty)}'"
        if op in ARITHMETIC_OPERATORS:
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"[TYP-0170] operator '{op}' expects numeric operands, {operands}")
        elif op == "%":
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"[TYP-0173] operator '%' expects operands of type 'int', {operands}")
        elif op in RELATIONAL_OPERATORS:
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"[TYP-0174] operator '{op}' expects numeric operands, {operands}")
        elif op in EQUALITY_OPERATORS:
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"[TYP-0172] equality operator '{op}' requires both operands to have the same type, {operands}")
        else:
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"[TYP-0171] operator '{op}' expects operands of type 'bool', {operands}")
        return fallback

    def _infer_ternary(self, expr: TernaryOp) -> Optional[PigeonType]:
        self._expect_bool(expr.cond, "[TYP-0180] ternary condition")
        then_ty = self._infer_expr(expr.then_expr)
        else_ty = self._infer_expr(expr.else_expr)
        # Branch types are not unified; the then-branch decides.
        return then_ty if then_ty is not None else else_ty

    def _infer_call(self, expr: CallExpr) -> Optional[PigeonType]:
        arg_types = [self._infer_expr(arg) for arg in expr.args]

        sym = self.global_scope.symbols.get(expr.name)
        if sym is None:
            self._error(DiagnosticKind.UNKNOWN_IDENTIFIER, expr, f"[TYP-0189] unknown function '{expr.name}'")
            return None
        if not isinstance(sym, Function):
            self._error(DiagnosticKind.TYPE_MISMATCH, expr, f"[TYP-0181] symbol '{expr.name}' is not callable")
            return None

        if len(sym.params) != len(expr.args):
            self._error(DiagnosticKind.ARGUMENT_MISMATCH, expr,
                        f"[TYP-0183] function '{expr.name}' expects {len(sym.params)} argument(s), "
                        f"got {len(expr.args)}")

        for index, (arg, arg_ty) in enumerate(zip(expr.args, arg_types)):
            if arg_ty is PigeonType.VOID:
                self._error(DiagnosticKind.TYPE_MISMATCH, arg,
                            f"[TYP-0185] argument {index + 1} to function '{expr.name}' is 'void'")
                continue
            if arg_ty is None or index >= len(sym.params):
                continue
            param_ty = sym.params[index].type
            if not accepts(param_ty, arg_ty):
                self._error(DiagnosticKind.ARGUMENT_MISMATCH, arg,
                            f"[TYP-0184] argument {index + 1} to function '{expr.name}' has type "
                            f"'{format_type(arg_ty)}', expected '{format_type(param_ty)}'")
        return sym.return_type

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _expect_bool(self, expr: Expr, what: str) -> None:
        ty = self._infer_expr(expr)
        if ty is not None and ty is not PigeonType.BOOL:
            self._error(DiagnosticKind.TYPE_MISMATCH, expr,
                        f"{what} must have type 'bool', got '{format_type(ty)}'")

    def _scope_error(self, node: Node, error: ScopeError, *, assigning: bool) -> None:
        codes = {
            DiagnosticKind.UNKNOWN_IDENTIFIER: "TYP-0060",
            DiagnosticKind.IMMUTABLE_ASSIGNMENT: "TYP-0062",
            DiagnosticKind.TYPE_MISMATCH: "TYP-0063" if assigning else "TYP-0061",
        }
        code = codes.get(error.kind)
        if code is None:
            raise InternalInterpreterError(f"[ICE-0032] unexpected scope failure: {error.message}",
                                           ICELocation(self.filename, node.span))
        self._error(error.kind, node, f"[{code}] {error.message}")

    def _error(self, kind: DiagnosticKind, node: Optional[Node], message: str) -> None:
        self.diagnostics.append(diag_from_node(kind, message, filename=self.filename, node=node))

