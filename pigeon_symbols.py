#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from pigeon_ast import Block, Node
from pigeon_types import PigeonType
from pigeon_values import Value

# Host function: receives the evaluated arguments in order and returns a
# Value, a plain Python payload of the declared return type, or None for void.
NativeCallback = Callable[[List[Value]], object]


@dataclass
class Symbol:
    name: str


@dataclass
class Variable(Symbol):
    """
    A variable binding. At analysis time `value` is None; at run time it holds
    the current Value.
    """
    type: Optional[PigeonType]  # None while analyzing an ill-typed declaration
    read_only: bool = False
    value: Optional[Value] = None
    node: Optional[Node] = field(default=None, repr=False, compare=False)  # declaring node, None for natives


@dataclass
class Parameter:
    name: str
    type: PigeonType


@dataclass
class Function(Symbol):
    """
    A callable: either host-provided (`body` is a NativeCallback) or declared
    in source (`body` is the statement block to execute).
    """
    return_type: PigeonType
    params: List[Parameter]
    body: Union[NativeCallback, Block] = field(repr=False)
    node: Optional[Node] = field(default=None, repr=False, compare=False)

    @property
    def is_native(self) -> bool:
        return not isinstance(self.body, Block)
