"""
Runtime values.

Every value carries its type tag next to its payload. `Value.expect` reads a
payload of a known type and fails loudly on a tag mismatch.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass

from pigeon_internal_error import InternalInterpreterError
from pigeon_types import PigeonType, format_type

_INT_BITS = 64
_INT_MODULUS = 1 << _INT_BITS
_INT_SIGN = 1 << (_INT_BITS - 1)


def wrap_int(n: int) -> int:
    """Wrap an unbounded integer to the 64-bit two's complement range."""
    n &= _INT_MODULUS - 1
    return n - _INT_MODULUS if n & _INT_SIGN else n


@dataclass(frozen=True)
class Value:
    type: PigeonType
    data: object

    def expect(self, expected: PigeonType) -> object:
        if self.type is not expected:
            raise InternalInterpreterError(
                f"[ICE-0010] expected a value of type '{format_type(expected)}', got '{format_type(self.type)}'"
            )
        return self.data

    def as_float(self) -> float:
        """Numeric payload widened to float."""
        if self.type is PigeonType.INT:
            return float(self.data)
        return self.expect(PigeonType.FLOAT)

    def __str__(self) -> str:
        return format_value(self)


VOID = Value(PigeonType.VOID, None)


def int_value(n: int) -> Value:
    return Value(PigeonType.INT, wrap_int(n))


def float_value(x: float) -> Value:
    return Value(PigeonType.FLOAT, float(x))


def bool_value(b: bool) -> Value:
    return Value(PigeonType.BOOL, bool(b))


def string_value(s: str) -> Value:
    return Value(PigeonType.STRING, s)


def make_value(typ: PigeonType, data: object) -> Value:
    """
    Build a Value of type `typ` from a host payload, checking that the payload
    fits the type. Used for native variables and native function results.
    """
    if isinstance(data, Value):
        if data.type is not typ:
            raise TypeError(f"expected a '{format_type(typ)}' value, got '{format_type(data.type)}'")
        return data
    if typ is PigeonType.VOID:
        if data is not None:
            raise TypeError(f"void value must be None, got {data!r}")
        return VOID
    # bool is a subclass of int in Python; keep the two apart.
    if typ is PigeonType.INT and isinstance(data, int) and not isinstance(data, bool):
        return int_value(data)
    if typ is PigeonType.FLOAT and isinstance(data, (int, float)) and not isinstance(data, bool):
        return float_value(data)
    if typ is PigeonType.BOOL and isinstance(data, bool):
        return bool_value(data)
    if typ is PigeonType.STRING and isinstance(data, str):
        return string_value(data)
    raise TypeError(f"cannot use {data!r} as a value of type '{format_type(typ)}'")


def format_value(value: Value) -> str:
    """Text form of a value, as produced by string concatenation."""
    if value.type is PigeonType.BOOL:
        return "true" if value.data else "false"
    if value.type is PigeonType.FLOAT:
        return repr(value.data)
    if value.type is PigeonType.VOID:
        return ""
    return str(value.data)
