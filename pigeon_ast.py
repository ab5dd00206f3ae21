#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Optional, List, Union


# ==========================
# Syntax tree definitions
# ==========================


@dataclass
class Span:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class Node:
    span: Optional[Span] = field(default=None, repr=False, compare=False, kw_only=True)


# --- declarations ---

@dataclass
class Param(Node):
    name: str
    type_name: str  # "int", "float", "bool" or "string"


@dataclass
class FuncDecl(Node):
    name: str
    params: List[Param]
    return_type: str  # one of the type keywords, including "void"
    body: "Block"


@dataclass
class Program(Node):
    items: List[Union[FuncDecl, "Stmt"]]
    filename: Optional[str] = field(default=None, repr=False, compare=False, kw_only=True)

    @property
    def functions(self) -> List[FuncDecl]:
        return [item for item in self.items if isinstance(item, FuncDecl)]

    @property
    def statements(self) -> List["Stmt"]:
        return [item for item in self.items if not isinstance(item, FuncDecl)]


# --- statements ---

@dataclass
class Stmt(Node):
    pass


@dataclass
class Block(Stmt):
    stmts: List[Stmt]
    braced: bool = True  # False for a single statement used as a block


@dataclass
class VarDecl(Stmt):
    name: str
    value: "Expr"
    is_const: bool = False


@dataclass
class AssignStmt(Stmt):
    name: str
    op: str  # "=", "+=", "-=", "*=", "/=", "%="
    value: "Expr"


@dataclass
class CallStmt(Stmt):
    call: "CallExpr"


@dataclass
class IfStmt(Stmt):
    cond: "Expr"
    then_block: Block
    else_block: Optional[Block]


@dataclass
class WhileStmt(Stmt):
    cond: "Expr"
    body: Block


@dataclass
class DoWhileStmt(Stmt):
    body: Block
    cond: "Expr"


@dataclass
class ForStmt(Stmt):
    counter: str
    start: "Expr"
    bound: "Expr"
    direction: str  # "to" or "downto"
    body: Block

    @property
    def is_ascending(self) -> bool:
        return self.direction == "to"


@dataclass
class ReturnStmt(Stmt):
    value: Optional["Expr"]


@dataclass
class BreakStmt(Stmt):
    pass


@dataclass
class ContinueStmt(Stmt):
    pass


# --- expressions ---

class Expr(Node):
    pass


@dataclass
class IntLiteral(Expr):
    value: int


@dataclass
class FloatLiteral(Expr):
    value: float


@dataclass
class StringLiteral(Expr):
    value: str


@dataclass
class BoolLiteral(Expr):
    value: bool


@dataclass
class VarRef(Expr):
    name: str


@dataclass
class ParenExpr(Expr):
    inner: Expr


@dataclass
class UnaryOp(Expr):
    op: str
    operand: Expr


@dataclass
class BinaryOp(Expr):
    op: str
    left: Expr
    right: Expr


@dataclass
class TernaryOp(Expr):
    cond: Expr
    then_expr: Expr
    else_expr: Expr


@dataclass
class CallExpr(Expr):
    name: str
    args: List[Expr]
