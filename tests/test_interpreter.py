import io
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.append(str(SRC))

from lfi3a.interpreter import (  # noqa: E402
    DivisionByZeroError,
    Interpreter,
    NumericConversionError,
    RecursionDepthError,
    UndefinedFunctionError,
    UndefinedVariableError,
)
from lfi3a.lexer import tokenize  # noqa: E402
from lfi3a.parser import parse  # noqa: E402


def log_feature(name: str):
    print(f"[feature] {name}")


def execute(code: str, **kwargs):
    out = io.StringIO()
    interp = Interpreter(output=out, **kwargs)
    interp.run(parse(tokenize(code)))
    return out.getvalue(), interp


def output(code: str) -> list:
    return execute(code)[0].splitlines()


def value_of(expr: str) -> str:
    _, interp = execute(f"dir result = {expr};")
    return interp.variables["result"]


def test_print_joins_with_spaces():
    log_feature("print")
    assert execute('kteb("a", 1, s7i7)')[0] == "a 1 s7i7\n"


def test_empty_print_emits_newline():
    assert execute("kteb()")[0] == "\n"


def test_print_defaults_to_stdout(capsys):
    Interpreter().run(parse(tokenize('kteb("hi")')))
    assert capsys.readouterr().out == "hi\n"


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("3 + 2", "5"),
        ("3 + 2.5", "5.500000"),
        ("6 / 2", "3"),
        ("7 / 2", "3.500000"),
        ("2 * 3.5", "7"),
        ("10 - 12", "-2"),
        ("1.5 - 0.25", "1.250000"),
        ("-(4)", "-4"),
        ("--4", "4"),
        ("-2.5", "-2.500000"),
    ],
)
def test_arithmetic_integer_collapse(expr, expected):
    log_feature("arithmetic")
    assert value_of(expr) == expected


@pytest.mark.parametrize(
    "expr, expected",
    [
        ('"ab" + "cd"', "abcd"),
        ('"3" + 4', "7"),
        ('"3 " + 1', "4"),
        ('"3a" + 4', "3a4"),
        ('s7i7 + 1', "s7i71"),
        ('"" + 1', "1"),
        ('"x" + 1 + 2', "x12"),
        ('1 + 2 + "x"', "3x"),
    ],
)
def test_addition_falls_back_to_concatenation(expr, expected):
    log_feature("addition fallback")
    assert value_of(expr) == expected


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("3 == 3", "s7i7"),
        ("3 == 3.0", "ghalat"),
        ('3 == "3"', "s7i7"),
        ("6 / 2 == 3", "s7i7"),
        ("1 != 2", "s7i7"),
        ('"a" != "a"', "ghalat"),
    ],
)
def test_equality_is_textual(expr, expected):
    log_feature("textual equality")
    assert value_of(expr) == expected


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("1 < 2", "s7i7"),
        ("2 < 1", "ghalat"),
        ("2 > 1", "s7i7"),
        ("2 <= 2", "s7i7"),
        ("3 >= 4", "ghalat"),
        ('"10" > 9', "s7i7"),
        ("3.0 <= 3", "s7i7"),
    ],
)
def test_comparisons_are_numeric(expr, expected):
    assert value_of(expr) == expected


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("s7i7 w s7i7", "s7i7"),
        ("s7i7 w ghalat", "ghalat"),
        ("ghalat wla s7i7", "s7i7"),
        ("ghalat wla 0", "ghalat"),
        ('"0.00" w 1', "s7i7"),
        ('"" wla 0.0', "ghalat"),
    ],
)
def test_logical_operators(expr, expected):
    log_feature("logical operators")
    assert value_of(expr) == expected


def test_logical_operators_do_not_short_circuit():
    with pytest.raises(UndefinedVariableError):
        execute("dir r = ghalat w missing;")
    with pytest.raises(UndefinedVariableError):
        execute("dir r = s7i7 wla missing;")


@pytest.mark.parametrize("op", ["-", "*", "/", "<", ">", "<=", ">="])
def test_numeric_operators_reject_text(op):
    with pytest.raises(NumericConversionError) as exc:
        execute(f'dir r = "abc" {op} 1;')
    assert exc.value.text == "abc"
    assert exc.value.op == op


def test_unary_minus_rejects_text():
    with pytest.raises(NumericConversionError):
        execute('dir r = -"x";')


def test_division_by_zero():
    log_feature("division by zero")
    out = io.StringIO()
    interp = Interpreter(output=out)
    with pytest.raises(DivisionByZeroError):
        interp.run(parse(tokenize('kteb("before"); kteb(5 / 0); kteb("after");')))
    assert out.getvalue() == "before\n"


def test_division_by_zero_decimal_divisor():
    with pytest.raises(DivisionByZeroError):
        execute("dir r = 1 / 0.0;")


def test_undefined_variable():
    with pytest.raises(UndefinedVariableError) as exc:
        execute("kteb(nope)")
    assert exc.value.name == "nope"
    assert str(exc.value) == "Undefined variable 'nope'"
    assert exc.value.line == 1


def test_var_decl_and_assignment_are_interchangeable():
    _, interp = execute("x = 1; dir x = 2; x = x + 1;")
    assert interp.variables["x"] == "3"


def test_if_elseif_else():
    log_feature("if / wila / wla")
    code = """
    dalla grade(s) {
        ila (s >= 90) { rje3 "A"; }
        wila (s >= 80) { rje3 "B"; }
        wila (s >= 70) { rje3 "C"; }
        wla { rje3 "F"; }
    }
    kteb(grade(95), grade(85), grade(75), grade(10))
    """
    assert output(code) == ["A B C F"]


def test_first_true_elseif_wins():
    code = """
    ila (ghalat) { kteb(1) }
    wila (s7i7) { kteb(2) }
    wila (s7i7) { kteb(3) }
    wla { kteb(4) }
    """
    assert output(code) == ["2"]


def test_if_condition_uses_truthiness():
    code = """
    ila ("0.00") { kteb("a") }
    ila ("0.0") { kteb("b") }
    ila ("ghalat ") { kteb("c") }
    ila (ghalat) { kteb("d") }
    """
    assert output(code) == ["a", "c"]


def test_while_loop():
    log_feature("while loop")
    code = "dir n = 3; ma7ad (n > 0) { kteb(n); n = n - 1; }"
    assert output(code) == ["3", "2", "1"]


def test_for_loop_increment_as_expression():
    log_feature("for loop")
    out, interp = execute("kol (dir i = 0; i < 3; i++) { kteb(i); }")
    assert out.splitlines() == ["0", "1", "2"]
    assert interp.variables["i"] == "3"


def test_for_loop_condition_false_initially():
    out, interp = execute("kol (dir i = 5; i < 3; i++) { kteb(i); }")
    assert out == ""
    assert interp.variables["i"] == "5"


def test_post_increment_yields_original_value():
    log_feature("post-increment")
    _, interp = execute("dir i = 4; dir j = i++;")
    assert interp.variables["j"] == "4"
    assert interp.variables["i"] == "5"


def test_post_increment_stores_truncated_integer():
    _, interp = execute("dir i = 1.5; dir j = i++;")
    assert interp.variables["j"] == "1.500000"
    assert interp.variables["i"] == "2"


def test_post_increment_on_non_identifier_is_zero():
    _, interp = execute("dir j = 5++;")
    assert interp.variables["j"] == "0"


def test_bare_expression_statement_is_inert():
    code = """
    dir i = 0;
    i++;
    dalla loud() { kteb("called"); }
    loud();
    kteb(i)
    """
    assert output(code) == ["0"]


def test_kalla_runs_call_for_side_effects():
    code = 'dalla loud(x) { kteb("called", x); rje3 x; } kalla loud(7);'
    assert output(code) == ["called 7"]


def test_function_return_value():
    log_feature("function call")
    code = "dalla add(a, b) { rje3 a + b; } kteb(add(2, 3))"
    assert output(code) == ["5"]


def test_function_without_return_yields_zero():
    code = "dalla f() { dir y = 1; } kteb(f())"
    assert output(code) == ["0"]


def test_bare_return_yields_zero():
    code = 'dalla f() { rje3; kteb("unreachable"); } kteb(f())'
    assert output(code) == ["0"]


def test_call_isolation_restores_globals():
    log_feature("call isolation")
    code = """
    dir x = 1;
    dalla change() {
        x = 99;
        rje3 x * 2;
    }
    dir r = change();
    kteb(x, r);
    """
    out, interp = execute(code)
    assert out.splitlines() == ["1 198"]
    assert interp.variables["x"] == "1"


def test_callee_sees_caller_locals():
    code = """
    dalla show() { rje3 secret; }
    dalla outer() {
        dir secret = "from outer";
        rje3 show();
    }
    kteb(outer())
    """
    assert output(code) == ["from outer"]


def test_parameters_vanish_after_call():
    code = "dalla f(p) { rje3 p; } dir r = f(3); kteb(p)"
    with pytest.raises(UndefinedVariableError):
        execute(code)


def test_new_bindings_vanish_after_call():
    _, interp = execute("dalla f() { dir made = 1; } dir r = f();")
    assert "made" not in interp.variables


def test_parameter_shadows_and_restores():
    code = "dir a = 1; dalla f(a) { rje3 a; } kteb(f(5), a)"
    assert output(code) == ["5 1"]


def test_arguments_are_evaluated_before_binding():
    code = "dir a = 1; dalla f(a, b) { rje3 b; } kteb(f(10, a))"
    assert output(code) == ["1"]


def test_argument_side_effects_are_undone():
    code = "dir i = 0; dalla f(v) { rje3 v; } dir r = f(i++); kteb(r, i)"
    assert output(code) == ["0 0"]


def test_extra_arguments_are_ignored():
    code = "dalla f(a) { rje3 a; } kteb(f(1, 2, 3))"
    assert output(code) == ["1"]


def test_extra_arguments_are_not_evaluated():
    code = "dalla f(a) { rje3 a; } kteb(f(1, missing))"
    assert output(code) == ["1"]


def test_missing_arguments_stay_unbound():
    code = "dalla f(a, b) { rje3 b; } kteb(f(1))"
    with pytest.raises(UndefinedVariableError):
        execute(code)


def test_recursion():
    log_feature("recursion")
    code = """
    dalla fib(n) {
        ila (n < 2) { rje3 n; }
        rje3 fib(n - 1) + fib(n - 2);
    }
    kteb(fib(15))
    """
    assert output(code) == ["610"]


def test_deep_recursion_within_limit():
    code = """
    dalla sum(n) {
        ila (n == 0) { rje3 0; }
        rje3 n + sum(n - 1);
    }
    kteb(sum(150))
    """
    assert output(code) == ["11325"]


def test_recursion_depth_is_bounded():
    code = "dalla loop(n) { rje3 loop(n + 1); } kteb(loop(0))"
    with pytest.raises(RecursionDepthError):
        execute(code, max_call_depth=50)


def test_return_inside_loops_propagates():
    code = """
    dalla find() {
        dir i = 0;
        ma7ad (s7i7) {
            kol (dir j = 0; j < 10; j++) {
                ila (i * 10 + j == 23) { rje3 i + ":" + j; }
            }
            i = i + 1;
        }
    }
    kteb(find())
    """
    assert output(code) == ["2:3"]


def test_for_stops_before_increment_on_return():
    code = """
    dalla f() {
        kol (dir i = 0; i < 5; i++) {
            ila (i == 2) { rje3 i; }
        }
    }
    kteb(f())
    """
    assert output(code) == ["2"]


def test_top_level_return_stops_program():
    code = 'kteb("one"); rje3; kteb("two");'
    assert output(code) == ["one"]


def test_forward_reference_is_undefined():
    log_feature("no hoisting")
    code = "dir r = later(); dalla later() { rje3 1; }"
    with pytest.raises(UndefinedFunctionError) as exc:
        execute(code)
    assert exc.value.name == "later"


def test_function_redeclaration_overwrites():
    code = """
    dalla f() { rje3 1; }
    kteb(f());
    dalla f() { rje3 2; }
    kteb(f());
    """
    assert output(code) == ["1", "2"]


def test_nested_declaration_registers_when_executed():
    code = """
    dalla outer() {
        dalla inner() { rje3 "inner"; }
        rje3 inner();
    }
    kteb(outer(), inner())
    """
    assert output(code) == ["inner inner"]


def test_block_statement_shares_variables():
    code = "{ dir x = 5; } kteb(x)"
    assert output(code) == ["5"]


def test_assignment_as_for_increment_does_not_run():
    code = """
    dalla probe() {
        dir n = 0;
        kol (dir i = 0; i < 3; i = i + 1) {
            n = n + 1;
            ila (n == 5) { rje3 "stuck at " + i; }
        }
    }
    kteb(probe())
    """
    assert output(code) == ["stuck at 0"]


def test_module_level_run_pipeline():
    from lfi3a import parse as parse_tokens, run, tokenize as lex

    out = io.StringIO()
    interp = run(parse_tokens(lex("dir a = 2; kteb(a * 21)")), output=out)
    assert out.getvalue() == "42\n"
    assert interp.variables == {"a": "2"}


def test_long_operator_chain_at_top_level():
    assert value_of(" + ".join(["1"] * 500)) == "500"


def test_excessive_expression_depth_is_a_runtime_error():
    log_feature("expression depth")
    with pytest.raises(RecursionDepthError) as exc:
        execute("dir r = " + " + ".join(["1"] * 20000) + ";")
    assert str(exc.value) == "Expression nested too deeply"
    assert exc.value.line == 1
