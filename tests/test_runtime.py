"""Tests for the typetag interpreter, run directly without the typechecker."""

import io

import pytest

from typetag import parse, run
from typetag.ast import Pos
from typetag.errors import ErrorKind, RuntimeFault
from typetag.runtime import (
    Environment,
    Interpreter,
    VBool,
    VFunc,
    VInt,
    VNil,
    VString,
    interpret,
    truthy,
    values_equal,
)


def _run(source: str) -> str:
    out = io.StringIO()
    interpret(parse(source), out)
    return out.getvalue()


def _fault(source: str) -> RuntimeFault:
    with pytest.raises(RuntimeFault) as exc:
        _run(source)
    return exc.value


# ── Calls ──


def test_missing_argument_names_both_counts():
    err = _fault("func greet(name: String) { print(name) }\ngreet()")
    assert err.msg == "Expected 1 arguments but got 0"
    assert "1" in str(err) and "0" in str(err)


def test_arity_checked_before_arguments_are_evaluated():
    err = _fault("func g() { }\ng(nope)")
    assert err.msg == "Expected 0 arguments but got 1"


def test_undefined_function():
    err = _fault("nope()")
    assert err.msg == "Undefined function 'nope'"
    assert err.kind == ErrorKind.RUNTIME
    assert (err.pos.line, err.pos.col) == (1, 1)


def test_undefined_variable():
    err = _fault("print(String[a])\nprint(missing)")
    assert err.msg == "Undefined variable 'missing'"
    assert err.pos.line == 2


def test_not_a_function():
    err = _fault("func f(x: String) { x() }\nf(String[a])")
    assert err.msg == "'x' is not a function"


def test_function_stub_is_not_bound_at_runtime():
    err = _fault("function(String[a])")
    assert err.msg == "Undefined function 'function'"


def test_arguments_evaluated_left_to_right():
    out = _run(
        "func a() { print(String[a]) }\n"
        "func b() { print(String[b]) }\n"
        "func f(x: Unknown, y: Unknown) { }\n"
        "f(a(), b())"
    )
    assert out == "a\nb\n"


# ── print ──


def test_print_writes_each_argument_on_its_own_line():
    assert _run("print(String[a], Integer[2])") == "a\n2\n"


def test_print_with_no_arguments_writes_nothing():
    assert _run("print()") == ""


def test_user_function_named_print_is_the_builtin():
    out = _run(
        "func print(a: Unknown, b: String) {\n"
        "  // do something here\n"
        "}\n"
        "print(String[Hello])\n"
        "print(Integer[123123])"
    )
    assert out == "Hello\n123123\n"


def test_print_dispatch_ignores_declared_body():
    out = _run("func print() { nope() }\nprint(String[x], String[y])")
    assert out == "x\ny\n"


def test_print_defaults_to_stdout(capsys):
    interpret(parse("print(String[captured])"))
    assert capsys.readouterr().out == "captured\n"


# ── Scoping ──


def test_callee_resolves_names_in_caller_scope():
    out = _run(
        "func show() { print(x) }\n"
        "func wrap(x: String) { show() }\n"
        "wrap(String[first])\n"
        "wrap(String[second])"
    )
    assert out == "first\nsecond\n"


def test_callee_scope_is_discarded_after_call():
    err = _fault("func f(x: String) { }\nf(String[a])\nprint(x)")
    assert err.msg == "Undefined variable 'x'"


def test_scope_restored_after_failed_call():
    interp = Interpreter(io.StringIO())
    program = parse("func f(x: String) { nope() }\nf(String[a])")
    with pytest.raises(RuntimeFault):
        interp.run(program)
    assert len(interp.env._scopes) == 1
    assert interp.env.lookup("x") is None


def test_rebinding_between_definition_and_call_is_observed():
    out = _run(
        "func label() { String[old] }\n"
        "func show() { print(label()) }\n"
        "show()\n"
        "func label() { String[new] }\n"
        "show()"
    )
    assert out == "old\nnew\n"


def test_if_body_runs_in_current_scope():
    out = _run(
        "if Integer[1] is Integer[1] { func inner() { String[hi] } }\nprint(inner())"
    )
    assert out == "hi\n"


def test_function_values_capture_declaration():
    program = parse("func f(x: String) { print(x) }")
    interp = Interpreter(io.StringIO())
    interp.run(program)
    fn = interp.env.get("f")
    assert isinstance(fn, VFunc)
    assert fn.name == "f"
    assert [p.name for p in fn.params] == ["x"]
    assert len(fn.body) == 1


# ── Typed values ──


def test_string_tag_takes_identifier_text():
    assert _run("print(String[True])") == "True\n"


def test_integer_tag_parses_identifier_text():
    err = _fault("print(Integer[abc])")
    assert err.msg == "Cannot convert 'abc' to Integer"


def test_tag_payload_mismatch():
    err = _fault("String[Integer[1]]")
    assert err.msg == "Type mismatch: expected String, got Integer(1)"


def test_tag_payload_mismatch_on_string():
    err = _fault("Integer[String(x)]")
    assert err.msg == 'Type mismatch: expected Integer, got String("x")'


# ── Values ──


def test_to_string():
    assert VString("a b").to_string() == "a b"
    assert VInt(-3).to_string() == "-3"
    assert VBool(True).to_string() == "true"
    assert VBool(False).to_string() == "false"
    assert VNil().to_string() == "null"
    assert VFunc("f", [], []).to_string() == "<function f>"


def test_truthy():
    assert truthy(VBool(True))
    assert not truthy(VBool(False))
    assert not truthy(VNil())
    assert not truthy(VInt(0))
    assert truthy(VInt(-1))
    assert not truthy(VString(""))
    assert truthy(VString("0"))
    assert truthy(VFunc("f", [], []))


def test_values_equal():
    assert values_equal(VString("a"), VString("a"))
    assert not values_equal(VString("1"), VInt(1))
    assert values_equal(VInt(1), VInt(1))
    assert values_equal(VBool(False), VBool(False))
    assert values_equal(VNil(), VNil())
    assert not values_equal(VBool(False), VNil())
    f = VFunc("f", [], [])
    assert not values_equal(f, f)


# ── Environment ──


def test_environment_define_shadows_outer():
    env = Environment()
    env.define("a", VInt(1))
    env.push_scope()
    env.define("a", VInt(2))
    assert env.get("a") == VInt(2)
    env.pop_scope()
    assert env.get("a") == VInt(1)


def test_environment_assign_updates_nearest_binding():
    env = Environment()
    env.define("a", VInt(1))
    env.push_scope()
    env.assign("a", VInt(5))
    env.pop_scope()
    assert env.get("a") == VInt(5)


def test_environment_assign_unbound_fails():
    env = Environment()
    with pytest.raises(RuntimeFault):
        env.assign("a", VInt(1))


def test_environment_get_unbound_fails():
    env = Environment()
    assert env.lookup("a") is None
    with pytest.raises(RuntimeFault):
        env.get("a")


def test_environment_get_reports_position():
    env = Environment()
    with pytest.raises(RuntimeFault) as exc:
        env.get("a", Pos(3, 4))
    assert str(exc.value) == "Undefined variable 'a' at line 3 col 4"


def test_environment_root_cannot_be_popped():
    env = Environment()
    with pytest.raises(RuntimeError):
        env.pop_scope()


# ── Pipeline ──


def test_run_keeps_output_before_failure():
    result = run("print(String[before])\nprint(Integer[oops])")
    assert result.exit_code == 1
    assert result.stdout == "before\n"
    assert result.stderr.startswith("runtime error: Cannot convert 'oops' to Integer")


def test_run_reports_type_errors_before_running():
    result = run("print(String[a])\nnope()")
    assert result.exit_code == 1
    assert result.stdout == ""
    assert result.stderr == "type error: Undefined function 'nope' at line 2 col 1\n"


def test_run_arity_is_caught_by_the_checker():
    result = run("func greet(name: String) { }\ngreet()")
    assert result.exit_code == 1
    assert "1" in result.stderr and "0" in result.stderr


def test_run_success():
    result = run("print(String[ok])")
    assert (result.exit_code, result.stdout, result.stderr) == (0, "ok\n", "")
