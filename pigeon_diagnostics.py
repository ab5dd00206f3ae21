#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pigeon_ast import Node
from pigeon_lexer import Token


DIAGNOSTIC_CODE_FAMILIES = {
    "LEX": [
        "LEX-0010",
        "LEX-0040",
        "LEX-0041",
        "LEX-0042",
        "LEX-0059",
        "LEX-0060",
        "LEX-0061",
        "LEX-0062",
        "LEX-0070",
    ],
    "PAR": [
        "PAR-0040",
        "PAR-0041",
        "PAR-0042",
        "PAR-0043",
        "PAR-0044",
        "PAR-0045",
        "PAR-0091",
        "PAR-0100",
        "PAR-0101",
        "PAR-0102",
        "PAR-0110",
        "PAR-0111",
        "PAR-0112",
        "PAR-0113",
        "PAR-0114",
        "PAR-0115",
        "PAR-0120",
        "PAR-0130",
        "PAR-0133",
        "PAR-0134",
        "PAR-0135",
        "PAR-0140",
        "PAR-0141",
        "PAR-0142",
        "PAR-0143",
        "PAR-0150",
        "PAR-0151",
        "PAR-0190",
        "PAR-0191",
        "PAR-0200",
        "PAR-0201",
        "PAR-0209",
        "PAR-0210",
        "PAR-0212",
        "PAR-0220",
        "PAR-0224",
        "PAR-0225",
    ],
    "SIG": [
        "SIG-0010",
        "SIG-0020",
        "SIG-0030",
    ],
    # ICE codes are internal interpreter errors and RUN codes are run-time
    # failures; both are raised as exceptions and excluded from this registry.
    "TYP": [
        "TYP-0010", "TYP-0020", "TYP-0050", "TYP-0060", "TYP-0061",
        "TYP-0062", "TYP-0063", "TYP-0064", "TYP-0065", "TYP-0070",
        "TYP-0080", "TYP-0081", "TYP-0090", "TYP-0110", "TYP-0120",
        "TYP-0160", "TYP-0161", "TYP-0170", "TYP-0171", "TYP-0172",
        "TYP-0173", "TYP-0174", "TYP-0175", "TYP-0180",
        "TYP-0181", "TYP-0183", "TYP-0184", "TYP-0185", "TYP-0189",
        "TYP-0260", "TYP-0261", "TYP-0262", "TYP-0263",
    ],
}


class DiagnosticKind(Enum):
    SYNTAX = "syntax"
    DUPLICATE_DECLARATION = "duplicate-declaration"
    UNKNOWN_IDENTIFIER = "unknown-identifier"
    IMMUTABLE_ASSIGNMENT = "immutable-assignment"
    TYPE_MISMATCH = "type-mismatch"
    ARGUMENT_MISMATCH = "argument-mismatch"
    STRUCTURAL = "structural"


@dataclass
class Diagnostic:
    kind: DiagnosticKind
    message: str
    filename: Optional[str] = None  # file path

    # Primary location (start of the span)
    line: Optional[int] = None
    column: Optional[int] = None

    # Optional end of span (exclusive)
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    # One-line rendering; consumers decide how to present it
    def format(self) -> str:
        loc = ""
        if self.filename is not None:
            loc += f"{os.path.abspath(str(self.filename))}"
        if self.line is not None:
            loc += f":{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
        if loc:
            loc += ": "
        return f"{loc}{self.kind.value} error: {self.message}"


def diag_from_node(
        kind: DiagnosticKind,
        message: str,
        *,
        filename: Optional[str],
        node: Optional[Node],
) -> Diagnostic:
    line = column = end_line = end_column = None
    if node is not None and node.span is not None:
        s = node.span
        line = s.start_line
        column = s.start_column
        end_line = s.end_line
        end_column = s.end_column
    return Diagnostic(
        kind=kind,
        message=message,
        filename=filename,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
    )


def diag_from_token(
        kind: DiagnosticKind,
        message: str,
        *,
        filename: Optional[str],
        token: Optional[Token],
) -> Diagnostic:
    line = column = None
    if token is not None:
        line = token.line
        column = token.column
    return Diagnostic(
        kind=kind,
        message=message,
        filename=filename,
        line=line,
        column=column,
    )
