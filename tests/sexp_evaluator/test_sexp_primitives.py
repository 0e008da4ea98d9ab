"""
Tests for the built-in primitives.
"""

import logging

import pytest

from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from rowwise.sexp_evaluator.sexp_primitives import is_number
from rowwise.system.errors import SexpEvaluationError


@pytest.fixture
def env():
    return SexpEnvironment(bindings={
        "a": 10,
        "b": 3,
        "f": 2.5,
        "col": [1, 2, 3],
        "name": "row",
        "record": {"id": 7, "label": "seven"},
    })


# --- Arithmetic ---

@pytest.mark.parametrize("text,expected", [
    ("(+)", 0),
    ("(+ a b)", 13),
    ("(+ a b 1 2)", 16),
    ("(+ a f)", 12.5),
    ("(*)", 1),
    ("(* 2 b)", 6),
    ("(* a b 2)", 60),
    ("(- a)", -10),
    ("(- a b)", 7),
    ("(/ a 4)", 2.5),
    ("(+ a (* 2 b))", 16),
])
def test_arithmetic(evaluator, env, text, expected):
    assert evaluator.evaluate_string(text, env) == expected

def test_division_by_zero(evaluator, env):
    with pytest.raises(SexpEvaluationError, match="Division by zero"):
        evaluator.evaluate_string("(/ a (- b 3))", env)

def test_arithmetic_rejects_whole_column(evaluator, env):
    """Numeric primitives do not broadcast over lists."""
    with pytest.raises(SexpEvaluationError, match="must be a number, got list of length 3"):
        evaluator.evaluate_string("(+ col 1)", env)

@pytest.mark.parametrize("text", [
    "(+ a name)",
    "(* true 2)",
    "(- a \"x\")",
    "(/ a nil)",
])
def test_arithmetic_type_errors(evaluator, env, text):
    with pytest.raises(SexpEvaluationError):
        evaluator.evaluate_string(text, env)

@pytest.mark.parametrize("text", ["(-)", "(- 1 2 3)", "(/ 1)", "(/ 1 2 3)"])
def test_arithmetic_arity(evaluator, env, text):
    with pytest.raises(SexpEvaluationError):
        evaluator.evaluate_string(text, env)

def test_is_number():
    assert is_number(1)
    assert is_number(1.5)
    assert not is_number(True)
    assert not is_number("1")
    assert not is_number([1])


# --- Comparison and predicates ---

@pytest.mark.parametrize("text,expected", [
    ("(< b a)", True),
    ("(> b a)", False),
    ("(<= a 10)", True),
    ("(>= a 11)", False),
    ("(= a 10)", True),
    ("(= f 2.5)", True),
    ("(eq? name \"row\")", True),
    ("(equal? col (list 1 2 3))", True),
    ("(null? nil)", True),
    ("(nil? a)", False),
    ("(not false)", True),
    ("(not a)", False),
])
def test_comparisons_and_predicates(evaluator, env, text, expected):
    assert evaluator.evaluate_string(text, env) is expected

def test_comparison_requires_numbers(evaluator, env):
    with pytest.raises(SexpEvaluationError):
        evaluator.evaluate_string("(< name 1)", env)


# --- Lists, strings and fields ---

def test_list(evaluator, env):
    assert evaluator.evaluate_string("(list a (+ b 1) name)", env) == [10, 4, "row"]

def test_length(evaluator, env):
    assert evaluator.evaluate_string("(length col)", env) == 3
    assert evaluator.evaluate_string("(length name)", env) == 3
    with pytest.raises(SexpEvaluationError):
        evaluator.evaluate_string("(length a)", env)

def test_string_append(evaluator, env):
    assert evaluator.evaluate_string("(string-append name \"-\" a)", env) == "row-10"

def test_string_append_rejects_lists(evaluator, env):
    with pytest.raises(SexpEvaluationError):
        evaluator.evaluate_string("(string-append name col)", env)

def test_get_field(evaluator, env):
    assert evaluator.evaluate_string("(get-field record \"label\")", env) == "seven"
    assert evaluator.evaluate_string("(get-field record (quote id))", env) == 7

def test_get_field_missing_key(evaluator, env):
    with pytest.raises(SexpEvaluationError, match="not found"):
        evaluator.evaluate_string("(get-field record \"nope\")", env)

def test_log_message(evaluator, env, caplog):
    with caplog.at_level(logging.INFO, logger="rowwise.sexp_evaluator.sexp_primitives"):
        result = evaluator.evaluate_string("(log-message \"value:\" a)", env)
    assert result == 10
    assert "SEXP LOG: value: 10" in caplog.text


# --- map ---

def test_map_single_list(evaluator, env):
    assert evaluator.evaluate_string("(map (lambda (v) (* v v)) col)", env) == [1, 4, 9]

def test_map_multiple_lists(evaluator):
    env = SexpEnvironment(bindings={"a": [10, 11], "b": [3, 4]})
    result = evaluator.evaluate_string("(map (lambda (a b) (+ a (* 2 b))) a b)", env)
    assert result == [16, 19]

def test_map_python_callable(evaluator, env):
    env.define("neg", lambda v: -v)
    assert evaluator.evaluate_string("(map neg col)", env) == [-1, -2, -3]

def test_map_unequal_lengths(evaluator):
    env = SexpEnvironment(bindings={"a": [1, 2], "b": [1, 2, 3]})
    with pytest.raises(SexpEvaluationError, match="same length"):
        evaluator.evaluate_string("(map (lambda (x y) x) a b)", env)

def test_map_requires_lists(evaluator, env):
    with pytest.raises(SexpEvaluationError, match="must be a list"):
        evaluator.evaluate_string("(map (lambda (x) x) a)", env)

def test_map_arity_mismatch(evaluator, env):
    with pytest.raises(SexpEvaluationError, match="Arity mismatch"):
        evaluator.evaluate_string("(map (lambda (x y) x) col)", env)
