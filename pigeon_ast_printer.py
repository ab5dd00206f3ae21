#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import is_dataclass, fields
from typing import Any, List, Optional

from pigeon_ast import Span, Node, Program


def _format_span(span: Optional[Span]) -> str:
    if span is None:
        return ""
    return f" @{span.start_line}:{span.start_column}-{span.end_line}:{span.end_column}"


def format_node(node: Any, indent: int = 0, *, spans: bool = True) -> List[str]:
    """
    Reflection-based syntax tree printer.

    Each node prints as `ClassName(scalar=...)` followed by its span, with
    child nodes and statement lists on indented lines below it. Fields marked
    `repr=False` (span, filename) are left out of the header.
    """
    ind = "  " * indent

    if isinstance(node, list):
        lines: List[str] = []
        for elem in node:
            lines.extend(format_node(elem, indent, spans=spans))
        return lines

    if not (isinstance(node, Node) and is_dataclass(node)):
        return [ind + repr(node)]

    scalars = []
    children = []
    for f in fields(node):
        if not f.repr:
            continue
        value = getattr(node, f.name)
        if isinstance(value, (Node, list)):
            children.append((f.name, value))
        elif value is not None:
            scalars.append((f.name, value))

    header = node.__class__.__name__
    if scalars:
        header += "(" + ", ".join(f"{name}={value!r}" for name, value in scalars) + ")"
    if spans:
        header += _format_span(node.span)

    lines = [ind + header]
    for name, value in children:
        if isinstance(value, list) and not value:
            continue
        lines.append(f"{ind}  {name}:")
        lines.extend(format_node(value, indent + 2, spans=spans))
    return lines


def format_program(program: Program, *, spans: bool = True) -> str:
    """Pretty-print a whole program as a string."""
    return "\n".join(format_node(program, spans=spans))
