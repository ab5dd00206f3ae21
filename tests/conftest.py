#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import io
import sys
from pathlib import Path
from textwrap import dedent

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pigeon_builtins import Builtins, console_builtins
from pigeon_interpreter import Interpreter


@pytest.fixture
def repo_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def analyze():
    """Run the front end over a source string and return the Interpreter.

    Usage:
        def test_something(analyze):
            interp = analyze('''
                int f() { return 42; }
            ''')
            assert interp.has_no_errors()
    """

    def _analyze(src: str, builtins: Builtins | None = None) -> Interpreter:
        return Interpreter(dedent(src), builtins or console_builtins(out=io.StringIO()))

    return _analyze


@pytest.fixture
def run_program():
    """Analyze and evaluate a program, returning everything it printed.

    Fails the test if the program has diagnostics.

    Usage:
        def test_something(run_program):
            out = run_program('''
                print(1 + 2);
            ''')
            assert out == "3\\n"
    """

    def _run(src: str, stdin: str = "") -> str:
        out = io.StringIO()
        interp = Interpreter(dedent(src), console_builtins(out=out, inp=io.StringIO(stdin)))
        assert interp.has_no_errors(), interp.format_errors()
        interp.evaluate()
        return out.getvalue()

    return _run


def has_error_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given error code.

    Args:
        diagnostics: List of Diagnostic objects
        code: Error code string like "TYP-0110" or "[TYP-0110]"

    Returns:
        True if any diagnostic message contains the error code
    """
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)
