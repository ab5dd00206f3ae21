#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from conftest import has_error_code
from pigeon_builtins import Builtins
from pigeon_diagnostics import DiagnosticKind
from pigeon_types import PigeonType


def _kinds(interp):
    return [d.kind for d in interp.diagnostics]


def test_well_typed_program_has_no_diagnostics(analyze):
    interp = analyze(
        """
        int fact(int n) {
            if n <= 1 { return 1; }
            return n * fact(n - 1);
        }

        let total = 0;
        for i = 1 to 5 {
            total += fact(i);
        }
        let label = "total: " + total;
        print(label);
        """
    )

    assert interp.has_no_errors(), interp.format_errors()


def test_forward_reference_to_later_function(analyze):
    interp = analyze(
        """
        print(later(2));
        int later(int x) { return x + 1; }
        """
    )

    assert interp.has_no_errors(), interp.format_errors()


def test_duplicate_variable_in_same_scope(analyze):
    interp = analyze("let x = 1; let x = 2;")

    assert _kinds(interp) == [DiagnosticKind.DUPLICATE_DECLARATION]
    assert has_error_code(interp.diagnostics, "TYP-0020")


def test_shadowing_in_inner_block_is_allowed(analyze):
    interp = analyze(
        """
        let x = 1;
        if true {
            let x = "inner";
            print(x);
        }
        x = 2;
        """
    )

    assert interp.has_no_errors(), interp.format_errors()


def test_variable_is_not_visible_after_its_block(analyze):
    interp = analyze(
        """
        if true { let y = 1; }
        print(y);
        """
    )

    assert _kinds(interp) == [DiagnosticKind.UNKNOWN_IDENTIFIER]
    assert has_error_code(interp.diagnostics, "TYP-0060")


def test_functions_do_not_see_top_level_variables(analyze):
    interp = analyze(
        """
        let secret = 42;
        int peek() { return secret; }
        """
    )

    assert has_error_code(interp.diagnostics, "TYP-0060")


def test_function_used_as_variable(analyze):
    interp = analyze(
        """
        int f() { return 1; }
        let x = f;
        """
    )

    assert has_error_code(interp.diagnostics, "TYP-0061")


def test_assignment_to_function(analyze):
    interp = analyze(
        """
        int f() { return 1; }
        f = 2;
        """
    )

    assert has_error_code(interp.diagnostics, "TYP-0063")


def test_assignment_to_read_only_native(analyze):
    b = Builtins()
    b.register_variable(PigeonType.FLOAT, "PI", True, 3.14159)
    interp = analyze("PI = 3.0;", builtins=b)

    assert _kinds(interp) == [DiagnosticKind.IMMUTABLE_ASSIGNMENT]
    assert has_error_code(interp.diagnostics, "TYP-0062")


def test_assignment_to_const(analyze):
    interp = analyze("const c = 1; c += 1;")

    assert _kinds(interp) == [DiagnosticKind.IMMUTABLE_ASSIGNMENT]


def test_writable_native_variable(analyze):
    b = Builtins()
    b.register_variable(PigeonType.INT, "counter", False, 0)
    interp = analyze("counter += 1;", builtins=b)

    assert interp.has_no_errors(), interp.format_errors()


def test_assignment_type_mismatch(analyze):
    interp = analyze('let x = 1; x = "one";')

    assert has_error_code(interp.diagnostics, "TYP-0064")


def test_compound_assignment_rules(analyze):
    ok = analyze('let s = "n="; s += 1; let f = 1.5; f *= 2; let i = 7; i %= 2;')
    widened = analyze("let i = 1; i += 0.5;")
    bad = analyze("let b = true; b -= 1;")

    assert ok.has_no_errors(), ok.format_errors()
    assert has_error_code(widened.diagnostics, "TYP-0064")
    assert has_error_code(bad.diagnostics, "TYP-0065")


def test_break_and_continue_outside_loop(analyze):
    interp = analyze(
        """
        break;
        void f() { continue; }
        """
    )

    assert has_error_code(interp.diagnostics, "TYP-0110")
    assert has_error_code(interp.diagnostics, "TYP-0120")
    assert _kinds(interp) == [DiagnosticKind.STRUCTURAL, DiagnosticKind.STRUCTURAL]


def test_break_inside_nested_blocks_of_a_loop(analyze):
    interp = analyze("while true { if true { break; } }")

    assert interp.has_no_errors(), interp.format_errors()


def test_return_checks(analyze):
    interp = analyze(
        """
        return;
        int a() { return; }
        void b() { return 1; }
        int c() { return "x"; }
        """
    )

    assert has_error_code(interp.diagnostics, "TYP-0260")
    assert has_error_code(interp.diagnostics, "TYP-0261")
    assert has_error_code(interp.diagnostics, "TYP-0262")
    assert has_error_code(interp.diagnostics, "TYP-0263")
    assert len(interp.diagnostics) == 4


def test_missing_return_path(analyze):
    interp = analyze(
        """
        int only_then(bool c) { if c { return 1; } }
        int both(bool c) { if c { return 1; } else { return 2; } }
        int loop_only() { while true { return 1; } }
        """
    )

    missing = [d for d in interp.diagnostics if "[TYP-0010]" in d.message]
    assert len(missing) == 2
    assert "only_then" in missing[0].message
    assert "loop_only" in missing[1].message


def test_call_checks(analyze):
    interp = analyze(
        """
        int two(int a, float b) { return a; }
        let x = two(1);
        let y = two(1, "b");
        let z = nope(1);
        let w = two(1, 2.0);
        """
    )

    assert has_error_code(interp.diagnostics, "TYP-0183")
    assert has_error_code(interp.diagnostics, "TYP-0184")
    assert has_error_code(interp.diagnostics, "TYP-0189")
    assert len(interp.diagnostics) == 3
    assert _kinds(interp) == [
        DiagnosticKind.ARGUMENT_MISMATCH,
        DiagnosticKind.ARGUMENT_MISMATCH,
        DiagnosticKind.UNKNOWN_IDENTIFIER,
    ]


def test_calling_a_variable(analyze):
    b = Builtins()
    b.register_variable(PigeonType.INT, "answer", True, 42)
    interp = analyze("let x = answer();", builtins=b)

    assert has_error_code(interp.diagnostics, "TYP-0181")


def test_any_parameter_accepts_everything_but_void(analyze):
    interp = analyze(
        """
        void nothing() { }
        print(1);
        print(2.5);
        print(true);
        print("s");
        print(nothing());
        """
    )

    assert len(interp.diagnostics) == 1
    assert has_error_code(interp.diagnostics, "TYP-0185")


def test_diagnostics_accumulate(analyze):
    interp = analyze(
        """
        let a = 1 - true;
        let b = "x" - 2;
        """
    )

    assert len(interp.diagnostics) == 2
    assert all(d.kind is DiagnosticKind.TYPE_MISMATCH for d in interp.diagnostics)


def test_diagnostic_positions(analyze):
    interp = analyze("let a = 1;\nlet b = a + missing;")

    diag = interp.diagnostics[0]
    assert (diag.line, diag.column) == (2, 13)
