#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import io
from textwrap import dedent

import pytest

from pigeon_builtins import Builtins, console_builtins
from pigeon_evaluator import Completion, CompletionKind, Evaluator, NORMAL, BREAK
from pigeon_internal_error import EvaluationError, IllegalUsageError
from pigeon_interpreter import Interpreter
from pigeon_types import PigeonType
from pigeon_values import VOID, int_value


def _lines(out: str):
    return out.splitlines()


def test_completion_values():
    assert NORMAL.kind is CompletionKind.NORMAL and NORMAL.value is None
    assert BREAK.kind is CompletionKind.BREAK
    ret = Completion.returning(int_value(3))
    assert ret.kind is CompletionKind.RETURN and ret.value == int_value(3)


def test_counted_loops_in_both_directions(run_program):
    out = run_program(
        """
        for i = 1 to 3 print(i);
        for j = 3 downto 1 print(j);
        for k = 5 to 4 print(k);
        """
    )

    assert _lines(out) == ["1", "2", "3", "3", "2", "1"]


def test_loop_bound_is_re_evaluated_each_iteration(run_program):
    out = run_program(
        """
        let n = 3;
        let runs = 0;
        for i = 1 to n {
            runs += 1;
            if i == 1 { n = 5; }
        }
        print(runs);
        """
    )

    assert out == "5\n"


def test_assigning_the_counter_lasts_for_one_iteration(run_program):
    out = run_program(
        """
        for i = 1 to 3 {
            i = i * 100;
            print(i);
        }
        """
    )

    assert _lines(out) == ["100", "200", "300"]


def test_loop_body_declarations_are_fresh_each_iteration(run_program):
    out = run_program(
        """
        for i = 1 to 3 {
            let doubled = i * 2;
            print(doubled);
        }
        let i = "after";
        print(i);
        """
    )

    assert _lines(out) == ["2", "4", "6", "after"]


def test_break_and_continue_in_nested_loops(run_program):
    out = run_program(
        """
        for i = 1 to 3 {
            let j = 0;
            while true {
                j += 1;
                if j == 2 { continue; }
                if j > 3 { break; }
                print(i + ":" + j);
            }
            if i == 2 { break; }
        }
        """
    )

    assert _lines(out) == ["1:1", "1:3", "2:1", "2:3"]


def test_continue_in_counted_loop_still_advances(run_program):
    out = run_program(
        """
        for i = 1 to 5 {
            if i % 2 == 0 { continue; }
            print(i);
        }
        """
    )

    assert _lines(out) == ["1", "3", "5"]


def test_while_and_do_while(run_program):
    out = run_program(
        """
        let n = 0;
        while n < 3 { n += 1; }
        print(n);
        do { n -= 1; } while n > 10;
        print(n);
        do {
            n += 1;
            if n == 4 { continue; }
            if n == 6 { break; }
        } while true;
        print(n);
        """
    )

    assert _lines(out) == ["3", "2", "6"]


def test_return_from_inside_loops(run_program):
    out = run_program(
        """
        int first_multiple(int of, int limit) {
            for i = 1 to limit {
                while true {
                    if i % of == 0 { return i; }
                    break;
                }
            }
            return -1;
        }
        print(first_multiple(4, 10));
        print(first_multiple(40, 10));
        """
    )

    assert _lines(out) == ["4", "-1"]


def test_scopes_are_released_after_a_run():
    interp = Interpreter(dedent(
        """
        int fib(int n) { if n < 2 { return n; } return fib(n - 1) + fib(n - 2); }
        for i = 0 to 5 { let f = fib(i); if f > 3 { break; } }
        """
    ), console_builtins(out=io.StringIO()))
    interp.evaluate()

    # only the Global Scope remains
    assert interp.analysis.global_scope.arena.live_count == 1


def test_integer_division_by_zero_raises():
    interp = Interpreter("let z = 0; print(1 / z);", console_builtins(out=io.StringIO()))

    with pytest.raises(EvaluationError) as excinfo:
        interp.evaluate()
    assert "[RUN-0010]" in excinfo.value.message
    assert excinfo.value.span is not None


def test_modulo_by_zero_raises():
    interp = Interpreter("let z = 0; let r = 5; r %= z;", console_builtins(out=io.StringIO()))

    with pytest.raises(EvaluationError):
        interp.evaluate()


def test_operator_without_meaning_for_runtime_types_raises():
    interp = Interpreter('let x = false ? 1 : "a"; print(x % 2);', console_builtins(out=io.StringIO()))

    assert interp.has_no_errors()
    with pytest.raises(EvaluationError) as excinfo:
        interp.evaluate()
    assert "[RUN-0040]" in excinfo.value.message
    assert "'string' and 'int'" in excinfo.value.message


def test_condition_must_be_bool_at_run_time():
    interp = Interpreter('if (false ? false : 1) print("no");', console_builtins(out=io.StringIO()))

    assert interp.has_no_errors()
    with pytest.raises(EvaluationError) as excinfo:
        interp.evaluate()
    assert "[RUN-0040]" in excinfo.value.message


def test_runaway_recursion_raises_evaluation_error():
    interp = Interpreter("int down(int n) { return down(n + 1); } print(down(0));",
                         console_builtins(out=io.StringIO()))

    with pytest.raises(EvaluationError) as excinfo:
        interp.evaluate()
    assert "[RUN-0020]" in excinfo.value.message


def test_evaluation_is_refused_with_diagnostics():
    interp = Interpreter('let a = 1 - true; let b = "x" - 2;', console_builtins(out=io.StringIO()))

    assert not interp.has_no_errors()
    assert len(interp.diagnostics) == 2
    with pytest.raises(IllegalUsageError):
        interp.evaluate()
    with pytest.raises(IllegalUsageError):
        Evaluator(interp.analysis)


def test_native_functions_and_variables():
    calls = []

    def record(args):
        calls.append([a.data for a in args])

    b = Builtins()
    b.register_variable(PigeonType.INT, "base", True, 40)
    b.register_variable(PigeonType.STRING, "name", False, "pigeon")
    b.register_function(PigeonType.VOID, "record", record, PigeonType.ANY, PigeonType.INT)
    b.register_function(PigeonType.FLOAT, "half", lambda args: args[0].data / 2, PigeonType.INT)

    interp = Interpreter(
        """
        name += "!";
        record(name, base + 2);
        record(half(base), 1);
        """,
        b,
    )
    assert interp.has_no_errors(), interp.format_errors()
    interp.evaluate()

    assert calls == [["pigeon!", 42], [20.0, 1]]


def test_native_returning_wrong_type_is_a_usage_error():
    b = Builtins()
    b.register_function(PigeonType.INT, "broken", lambda args: "not an int")
    interp = Interpreter("let x = broken();", b)

    with pytest.raises(IllegalUsageError):
        interp.evaluate()


def test_void_native_result_is_void():
    seen = []
    b = Builtins()
    b.register_function(PigeonType.VOID, "sink", lambda args: seen.append(args[0]) or VOID, PigeonType.INT)
    interp = Interpreter("sink(7);", b)
    interp.evaluate()

    assert seen == [int_value(7)]


def test_prompt_natives_read_input(run_program):
    out = run_program(
        """
        let n = prompt_i("n? ");
        let x = prompt_f("x? ");
        let yes = prompt_b("ok? ");
        let who = prompt("who? ");
        print(who + ": " + (n + 1) + " " + x + " " + yes);
        """,
        stdin="41\n0.5\ntrue\nAda\n",
    )

    assert out == "n? x? ok? who? Ada: 42 0.5 true\n"
