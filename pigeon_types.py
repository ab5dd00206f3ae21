#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from enum import Enum
from typing import Optional

# ========================================
# The semantic type system for Pigeon.
# ========================================


class PigeonType(Enum):
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    VOID = "void"
    ANY = "any"  # native parameters only


# Types that can be spelled in source code
PIGEON_TYPE_NAMES = ("int", "float", "bool", "string", "void")

NUMERIC_TYPES = (PigeonType.INT, PigeonType.FLOAT)

ARITHMETIC_OPERATORS = ("+", "-", "*", "/")
RELATIONAL_OPERATORS = ("<", ">", "<=", ">=")
EQUALITY_OPERATORS = ("==", "!=")
LOGICAL_OPERATORS = ("&&", "||")


def type_from_name(name: str) -> PigeonType:
    """
    Map a type keyword to its PigeonType.
    """
    if name not in PIGEON_TYPE_NAMES:
        raise ValueError(f"unknown type name '{name}'")
    return PigeonType(name)


def is_numeric(t: Optional[PigeonType]) -> bool:
    return t in NUMERIC_TYPES


def accepts(param_type: PigeonType, arg_type: PigeonType) -> bool:
    """Can a value of arg_type be passed where param_type is expected?"""
    if arg_type is PigeonType.VOID:
        return False
    return param_type is PigeonType.ANY or param_type is arg_type


# --- operator typing rules, shared by the analyzer and the evaluator ---

def arithmetic_result(op: str, left: PigeonType, right: PigeonType) -> Optional[PigeonType]:
    """
    Result type of `left op right` for + - * /, or None when the operands are
    not acceptable.

    Both int -> int; both numeric -> float; '+' with at least one
    non-numeric operand is string concatenation.
    """
    if left is PigeonType.VOID or right is PigeonType.VOID:
        return None
    if left is PigeonType.INT and right is PigeonType.INT:
        return PigeonType.INT
    if is_numeric(left) and is_numeric(right):
        return PigeonType.FLOAT
    if op == "+":
        return PigeonType.STRING
    return None


def binary_result(op: str, left: PigeonType, right: PigeonType) -> Optional[PigeonType]:
    """
    Result type of any binary operator, or None on an operand mismatch.
    """
    if op in ARITHMETIC_OPERATORS:
        return arithmetic_result(op, left, right)
    if op == "%":
        if left is PigeonType.INT and right is PigeonType.INT:
            return PigeonType.INT
        return None
    if op in RELATIONAL_OPERATORS:
        if is_numeric(left) and is_numeric(right):
            return PigeonType.BOOL
        return None
    if op in EQUALITY_OPERATORS:
        if left is right and left is not PigeonType.VOID:
            return PigeonType.BOOL
        return None
    if op in LOGICAL_OPERATORS:
        if left is PigeonType.BOOL and right is PigeonType.BOOL:
            return PigeonType.BOOL
        return None
    raise ValueError(f"unknown binary operator '{op}'")


def unary_result(op: str, operand: PigeonType) -> Optional[PigeonType]:
    if op in ("+", "-"):
        return operand if is_numeric(operand) else None
    if op == "!":
        return PigeonType.BOOL if operand is PigeonType.BOOL else None
    raise ValueError(f"unknown unary operator '{op}'")


# --- type stringification for diagnostics ---

def format_type(t: Optional[PigeonType]) -> str:
    if t is None:
        return "<none>"
    return t.value
