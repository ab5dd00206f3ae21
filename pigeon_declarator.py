#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import List, Optional, Set

from pigeon_ast import FuncDecl, Program
from pigeon_diagnostics import Diagnostic, DiagnosticKind, diag_from_node
from pigeon_scopes import DuplicateDeclarationError, GlobalScope
from pigeon_symbols import Function, Parameter
from pigeon_types import PigeonType, type_from_name


def function_from_decl(decl: FuncDecl) -> Function:
    """Build the Function symbol described by a declaration."""
    params = [Parameter(p.name, type_from_name(p.type_name)) for p in decl.params]
    return Function(decl.name, type_from_name(decl.return_type), params, decl.body, node=decl)


class FunctionDeclarator:
    """
    Registers every top-level function in the Global Scope before any type
    checking, so calls may refer to functions declared later in the source
    (including the caller itself).

    The first declaration of a name wins; later ones, and clashes with
    natives, are reported and left out of the Global Scope.
    """

    def __init__(self, global_scope: GlobalScope, filename: Optional[str] = None):
        self.global_scope = global_scope
        self.filename = filename
        self.diagnostics: List[Diagnostic] = []

    def declare(self, program: Program) -> None:
        for decl in program.functions:
            self._check_params(decl)
            try:
                self.global_scope.declare_symbol(function_from_decl(decl))
            except DuplicateDeclarationError:
                existing = self.global_scope.symbols[decl.name]
                what = "function" if existing.node is not None else "native"
                self._error(DiagnosticKind.DUPLICATE_DECLARATION, decl,
                            f"[SIG-0010] function '{decl.name}' conflicts with an existing {what} of the same name")

    def _check_params(self, decl: FuncDecl) -> None:
        seen: Set[str] = set()
        for param in decl.params:
            if param.name in seen:
                self._error(DiagnosticKind.DUPLICATE_DECLARATION, param,
                            f"[SIG-0020] duplicate parameter '{param.name}' in function '{decl.name}'")
            seen.add(param.name)
            if type_from_name(param.type_name) is PigeonType.VOID:
                self._error(DiagnosticKind.TYPE_MISMATCH, param,
                            f"[SIG-0030] parameter '{param.name}' of function '{decl.name}' cannot have type 'void'")

    def _error(self, kind: DiagnosticKind, node, message: str) -> None:
        self.diagnostics.append(diag_from_node(kind, message, filename=self.filename, node=node))
