#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import re

import pytest

from pigeon_diagnostics import DIAGNOSTIC_CODE_FAMILIES, Diagnostic, DiagnosticKind
from pigeon_internal_error import EvaluationError, InternalInterpreterError, ICELocation
from pigeon_ast import Span

CODE_PATTERN = re.compile(r"\b(LEX|PAR|SIG|TYP)-(\d{4})\b")


def _codes_in_sources(repo_root):
    found = set()
    for path in sorted(repo_root.glob("pigeon_*.py")):
        if path.name == "pigeon_diagnostics.py":
            continue
        for family, number in CODE_PATTERN.findall(path.read_text()):
            found.add(f"{family}-{number}")
    return found


def _registered():
    return {code for codes in DIAGNOSTIC_CODE_FAMILIES.values() for code in codes}


def test_every_emitted_code_is_registered(repo_root):
    missing = _codes_in_sources(repo_root) - _registered()

    assert not missing, f"unregistered diagnostic codes: {sorted(missing)}"


def test_every_registered_code_is_emitted(repo_root):
    unused = _registered() - _codes_in_sources(repo_root)

    assert not unused, f"registered but never emitted: {sorted(unused)}"


@pytest.mark.parametrize("family", sorted(DIAGNOSTIC_CODE_FAMILIES))
def test_family_codes_are_unique_and_sorted(family):
    codes = DIAGNOSTIC_CODE_FAMILIES[family]

    assert all(code.startswith(family + "-") for code in codes)
    assert codes == sorted(set(codes))


def test_diagnostic_format_without_location():
    diag = Diagnostic(DiagnosticKind.STRUCTURAL, "[TYP-0110] 'break' outside of a loop")

    assert diag.format() == "structural error: [TYP-0110] 'break' outside of a loop"


def test_internal_error_format_adds_default_code():
    err = InternalInterpreterError("something broke", ICELocation("demo.pg", Span(3, 4, 3, 9)))

    assert err.format() == "demo.pg:3:4: internal interpreter error: [ICE-9999] something broke"


def test_evaluation_error_format():
    err = EvaluationError("[RUN-0010] integer division by zero", Span(2, 7, 2, 12))

    assert err.format() == "2:7: runtime error: [RUN-0010] integer division by zero"
