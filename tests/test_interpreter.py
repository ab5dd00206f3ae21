#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import io

import pytest

from conftest import has_error_code
from pigeon_builtins import console_builtins
from pigeon_context import InterpreterContext, LogLevel
from pigeon_diagnostics import DiagnosticKind
from pigeon_internal_error import EvaluationError
from pigeon_interpreter import Interpreter
from pigeon_types import PigeonType


def test_syntax_error_is_a_single_diagnostic_and_stops_the_pipeline():
    interp = Interpreter("let x = ;\nlet y = 1 - true;")

    assert len(interp.diagnostics) == 1
    diag = interp.diagnostics[0]
    assert diag.kind is DiagnosticKind.SYNTAX
    assert has_error_code(interp.diagnostics, "PAR-0225")
    assert (diag.line, diag.column) == (1, 9)
    assert interp.analysis.program is None
    assert interp.format_tree() == ""


def test_lexer_error_becomes_syntax_diagnostic():
    interp = Interpreter("let x = 1 # 2;")

    assert [d.kind for d in interp.diagnostics] == [DiagnosticKind.SYNTAX]
    assert has_error_code(interp.diagnostics, "LEX-0040")


def test_format_errors_includes_location_kind_and_message():
    interp = Interpreter("let a = 1;\nlet b = a + nope;", filename="demo.pg")
    text = interp.format_errors()

    assert text.endswith("demo.pg:2:13: unknown-identifier error: [TYP-0060] unknown identifier 'nope'")


def test_clean_program_runs():
    out = io.StringIO()
    interp = Interpreter('print("hello");', console_builtins(out=out))

    assert interp.has_no_errors()
    interp.evaluate()
    assert out.getvalue() == "hello\n"


def test_program_without_natives_can_still_run():
    interp = Interpreter("let x = 1; x += 1;")

    assert interp.has_no_errors()
    interp.evaluate()


def test_each_interpreter_gets_its_own_global_scope():
    b = console_builtins(out=io.StringIO())
    first = Interpreter("int f() { return 1; }", b)
    second = Interpreter("int f() { return 2; }", b)

    assert first.has_no_errors() and second.has_no_errors()
    assert first.analysis.global_scope is not second.analysis.global_scope


def test_format_tree():
    interp = Interpreter("int one() { return 1; }\nprint(one());")
    tree = interp.format_tree()

    assert tree.splitlines()[0].startswith("Program @1:1-")
    assert "FuncDecl(name='one', return_type='int') @1:1-1:24" in tree
    assert "IntLiteral(value=1)" in tree
    assert "CallExpr(name='print')" in tree


def test_stage_logging_goes_to_stderr(capsys):
    ctx = InterpreterContext(log_level=LogLevel.DEBUG)
    Interpreter("let x = 1;", context=ctx, filename="demo.pg")
    err = capsys.readouterr().err

    assert "Parsing 'demo.pg'" in err
    assert "Declaring functions..." in err
    assert "Analyzing..." in err
    assert "Analysis complete: 0 error(s)" in err


def test_default_context_is_quiet(capsys):
    Interpreter("let x = 1;")

    assert capsys.readouterr().err == ""


def test_native_variables_are_restored_before_each_evaluation():
    out = io.StringIO()
    b = console_builtins(out=out)
    b.register_variable(PigeonType.INT, "counter", False, 0)
    interp = Interpreter("counter += 1; print(counter);", b)

    interp.evaluate()
    interp.evaluate()

    assert out.getvalue() == "1\n1\n"


def test_runtime_errors_are_logged(capsys):
    interp = Interpreter("let z = 0; let q = 1 / z;", filename="demo.pg")

    with pytest.raises(EvaluationError):
        interp.evaluate()
    assert "runtime error: [RUN-0010] integer division by zero" in capsys.readouterr().err


def test_silent_context_does_not_log_runtime_errors(capsys):
    interp = Interpreter("let z = 0; let q = 1 / z;", context=InterpreterContext(log_level=LogLevel.SILENT))

    with pytest.raises(EvaluationError):
        interp.evaluate()
    assert capsys.readouterr().err == ""
