"""
Scope chain

Scopes are records in a ScopeArena, addressed by integer handles; each record
holds the handle of its enclosing scope. The Global Scope is the arena root.
A FunctionScope is one call frame: a stack of block-scope handles whose
outermost block hangs off the Global Scope, so lookups never reach into
another frame.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pigeon_ast import Node
from pigeon_diagnostics import DiagnosticKind
from pigeon_internal_error import InternalInterpreterError
from pigeon_symbols import Symbol, Variable, Function
from pigeon_types import PigeonType
from pigeon_values import Value


class ScopeError(Exception):
    """Base class for failed scope operations; `kind` classifies the failure."""
    kind: DiagnosticKind = DiagnosticKind.STRUCTURAL

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name
        self.message = message


class DuplicateDeclarationError(ScopeError):
    kind = DiagnosticKind.DUPLICATE_DECLARATION


class UnknownIdentifierError(ScopeError):
    kind = DiagnosticKind.UNKNOWN_IDENTIFIER


class ImmutableAssignmentError(ScopeError):
    kind = DiagnosticKind.IMMUTABLE_ASSIGNMENT


class NotAVariableError(ScopeError):
    kind = DiagnosticKind.TYPE_MISMATCH


@dataclass
class Scope:
    parent: Optional[int]
    symbols: Dict[str, Symbol] = field(default_factory=dict)


class ScopeArena:
    """
    Owns every scope record of one interpreted unit.

    Released slots are recycled, so the arena size tracks the deepest
    simultaneous nesting rather than the total number of blocks executed.
    """

    def __init__(self) -> None:
        self._scopes: List[Optional[Scope]] = []
        self._free: List[int] = []

    def new_scope(self, parent: Optional[int]) -> int:
        scope = Scope(parent=parent)
        if self._free:
            handle = self._free.pop()
            self._scopes[handle] = scope
            return handle
        self._scopes.append(scope)
        return len(self._scopes) - 1

    def release(self, handle: int) -> None:
        if self._scopes[handle] is None:
            raise InternalInterpreterError(f"[ICE-0020] scope {handle} released twice")
        self._scopes[handle] = None
        self._free.append(handle)

    def get(self, handle: int) -> Scope:
        scope = self._scopes[handle]
        if scope is None:
            raise InternalInterpreterError(f"[ICE-0021] use of released scope {handle}")
        return scope

    def find(self, handle: Optional[int], name: str) -> Optional[Symbol]:
        """Look `name` up starting at `handle` and walking outward."""
        while handle is not None:
            scope = self.get(handle)
            sym = scope.symbols.get(name)
            if sym is not None:
                return sym
            handle = scope.parent
        return None

    @property
    def live_count(self) -> int:
        return sum(1 for s in self._scopes if s is not None)


class GlobalScope:
    """
    Outermost scope: native variables and functions plus every top-level
    user function.
    """

    def __init__(self, arena: Optional[ScopeArena] = None) -> None:
        self.arena = arena or ScopeArena()
        self.handle = self.arena.new_scope(parent=None)

    @property
    def symbols(self) -> Dict[str, Symbol]:
        return self.arena.get(self.handle).symbols

    def declare_symbol(self, symbol: Symbol) -> None:
        if symbol.name in self.symbols:
            raise DuplicateDeclarationError(symbol.name, f"'{symbol.name}' is already declared in the global scope")
        self.symbols[symbol.name] = symbol

    def lookup_function(self, name: str) -> Optional[Function]:
        sym = self.symbols.get(name)
        return sym if isinstance(sym, Function) else None

    def __contains__(self, name: str) -> bool:
        return name in self.symbols


class FunctionScope:
    """
    One call frame: a stack of block scopes.

    The four mutating operations are `declare`, `assign`, `enter` and `exit`;
    `lookup` and `resolve` only read.
    """

    def __init__(self, global_scope: GlobalScope) -> None:
        self.global_scope = global_scope
        self.arena = global_scope.arena
        self._blocks: List[int] = [self.arena.new_scope(parent=global_scope.handle)]

    def enter(self) -> None:
        self._blocks.append(self.arena.new_scope(parent=self._blocks[-1]))

    def exit(self) -> None:
        if len(self._blocks) <= 1:
            raise InternalInterpreterError("[ICE-0022] cannot exit the root block of a function scope")
        self.arena.release(self._blocks.pop())

    def close(self) -> None:
        """Release every block of this frame."""
        while self._blocks:
            self.arena.release(self._blocks.pop())

    def declare(self, typ: Optional[PigeonType], name: str, value: Optional[Value] = None, *,
                read_only: bool = False, node: Optional[Node] = None) -> Variable:
        symbols = self.arena.get(self._blocks[-1]).symbols
        if name in symbols:
            raise DuplicateDeclarationError(name, f"'{name}' is already declared in this scope")
        var = Variable(name, typ, read_only=read_only, value=value, node=node)
        symbols[name] = var
        return var

    def resolve(self, name: str) -> Symbol:
        sym = self.arena.find(self._blocks[-1], name)
        if sym is None:
            raise UnknownIdentifierError(name, f"unknown identifier '{name}'")
        return sym

    def resolve_variable(self, name: str) -> Variable:
        sym = self.resolve(name)
        if not isinstance(sym, Variable):
            raise NotAVariableError(name, f"'{name}' is a function, not a variable")
        return sym

    def check_assignable(self, name: str) -> Variable:
        var = self.resolve_variable(name)
        if var.read_only:
            raise ImmutableAssignmentError(name, f"cannot assign to read-only variable '{name}'")
        return var

    def assign(self, name: str, value: Value) -> None:
        self.check_assignable(name).value = value

    def lookup(self, name: str) -> Value:
        var = self.resolve_variable(name)
        if var.value is None:
            raise InternalInterpreterError(f"[ICE-0023] variable '{name}' has no value")
        return var.value
