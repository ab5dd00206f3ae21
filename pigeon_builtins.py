"""
Native registration surface.

A host collects native variables and functions in a Builtins object before
interpretation; each Interpreter installs fresh symbols from it into its own
Global Scope and restores the native variables before every evaluation, so
runs never share mutable state.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO, Tuple

from pigeon_internal_error import EvaluationError
from pigeon_scopes import GlobalScope
from pigeon_symbols import Function, NativeCallback, Parameter, Variable
from pigeon_types import PigeonType
from pigeon_values import Value, make_value


@dataclass
class _NativeVariable:
    type: PigeonType
    name: str
    read_only: bool
    initial_value: object


@dataclass
class _NativeFunction:
    return_type: PigeonType
    name: str
    callback: NativeCallback
    param_types: Tuple[PigeonType, ...]


class Builtins:
    def __init__(self) -> None:
        self._variables: List[_NativeVariable] = []
        self._functions: List[_NativeFunction] = []
        self._names: set = set()

    def _claim(self, name: str) -> None:
        if name in self._names:
            raise ValueError(f"native '{name}' is already registered")
        self._names.add(name)

    def register_variable(self, typ: PigeonType, name: str, is_read_only: bool, initial_value: object) -> None:
        if typ in (PigeonType.VOID, PigeonType.ANY):
            raise ValueError(f"native variable '{name}' cannot have type '{typ.value}'")
        make_value(typ, initial_value)  # validate early
        self._claim(name)
        self._variables.append(_NativeVariable(typ, name, is_read_only, initial_value))

    def register_function(self, return_type: PigeonType, name: str, callback: NativeCallback,
                          *param_types: PigeonType) -> None:
        if return_type is PigeonType.ANY:
            raise ValueError(f"native function '{name}' cannot return 'any'")
        if PigeonType.VOID in param_types:
            raise ValueError(f"native function '{name}' cannot take a 'void' parameter")
        self._claim(name)
        self._functions.append(_NativeFunction(return_type, name, callback, tuple(param_types)))

    def register(self, global_scope: GlobalScope) -> None:
        """Install all registered natives into `global_scope`."""
        for nv in self._variables:
            global_scope.declare_symbol(
                Variable(nv.name, nv.type, read_only=nv.read_only, value=make_value(nv.type, nv.initial_value))
            )
        for nf in self._functions:
            params = [Parameter(f"arg{i}", t) for i, t in enumerate(nf.param_types)]
            global_scope.declare_symbol(Function(nf.name, nf.return_type, params, nf.callback))

    def reset(self, global_scope: GlobalScope) -> None:
        """Give every native variable in `global_scope` its registered initial value again."""
        for nv in self._variables:
            global_scope.symbols[nv.name].value = make_value(nv.type, nv.initial_value)

    @property
    def names(self) -> List[str]:
        return [v.name for v in self._variables] + [f.name for f in self._functions]


def console_builtins(out: Optional[TextIO] = None, inp: Optional[TextIO] = None) -> Builtins:
    """
    The console natives: print(any), prompt(string) -> string and the typed
    prompt_i / prompt_f / prompt_b variants.
    """
    b = Builtins()

    def _out() -> TextIO:
        return out if out is not None else sys.stdout

    def _read_line(args: List[Value]) -> str:
        stream = _out()
        stream.write(str(args[0]))
        stream.flush()
        line = (inp if inp is not None else sys.stdin).readline()
        return line.rstrip("\r\n")

    def _print(args: List[Value]) -> None:
        print(str(args[0]), file=_out())

    def _prompt_i(args: List[Value]) -> int:
        text = _read_line(args)
        try:
            return int(text.strip())
        except ValueError:
            raise EvaluationError(f"[RUN-0030] cannot read an int from '{text}'")

    def _prompt_f(args: List[Value]) -> float:
        text = _read_line(args)
        try:
            return float(text.strip())
        except ValueError:
            raise EvaluationError(f"[RUN-0030] cannot read a float from '{text}'")

    def _prompt_b(args: List[Value]) -> bool:
        text = _read_line(args).strip().lower()
        if text not in ("true", "false"):
            raise EvaluationError(f"[RUN-0030] cannot read a bool from '{text}'")
        return text == "true"

    b.register_function(PigeonType.VOID, "print", _print, PigeonType.ANY)
    b.register_function(PigeonType.STRING, "prompt", _read_line, PigeonType.STRING)
    b.register_function(PigeonType.INT, "prompt_i", _prompt_i, PigeonType.STRING)
    b.register_function(PigeonType.FLOAT, "prompt_f", _prompt_f, PigeonType.STRING)
    b.register_function(PigeonType.BOOL, "prompt_b", _prompt_b, PigeonType.STRING)
    return b
