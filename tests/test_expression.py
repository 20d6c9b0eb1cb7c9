"""Tests for expression.py: whitelist compilation and per-sample evaluation."""

import dataclasses
import math

import numpy as np
import pytest

import expression
from expression import (
    CompileError, EvaluationError, ParameterSet, RANDOM_EXPRESSIONS,
    compile_expression, random_expression,
)


def _at(expr, x, a=1.0, b=0.0, c=1.0):
    return expr.evaluate({"x": x, "a": a, "b": b, "c": c})


class TestCompile:
    """Accepted syntax."""

    def test_default_formula(self):
        expr = compile_expression("sin(a*x + b)*c")
        assert _at(expr, math.pi / 2, c=2.0) == pytest.approx(2.0)

    @pytest.mark.parametrize("text, x, expected", [
        ("x*x - 1", 3.0, 8.0),
        ("-x + +2", 1.0, 1.0),
        ("x % 3", 7.0, 1.0),
        ("x**2", 3.0, 9.0),
        ("abs(x)", -4.0, 4.0),
        ("exp(0)", 5.0, 1.0),
        ("sqrt(x)", 16.0, 4.0),
        ("pow(x, 3)", 2.0, 8.0),
        ("cos(0) + tan(0)", 0.0, 1.0),
        ("pi", 0.0, math.pi),
        ("e", 0.0, math.e),
    ])
    def test_arithmetic(self, text, x, expected):
        assert _at(compile_expression(text), x) == pytest.approx(expected)

    def test_caret_is_power(self):
        expr = compile_expression("x^2")
        assert _at(expr, 3.0) == pytest.approx(9.0)

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_is_zero(self, text):
        expr = compile_expression(text)
        assert expr.text == "0"
        assert _at(expr, 123.0) == 0.0

    def test_text_is_stripped(self):
        assert compile_expression("  x + 1 ").text == "x + 1"

    def test_names_collected(self):
        expr = compile_expression("sin(x) * c + pi")
        assert expr.names == frozenset({"x", "c"})

    def test_only_used_names_required(self):
        expr = compile_expression("sin(x)")
        assert expr.evaluate({"x": 0.0}) == 0.0

    def test_integer_literals_become_floats(self):
        """10**10**10 must not turn into an unbounded integer computation."""
        expr = compile_expression("10**10**10")
        with pytest.raises(EvaluationError):
            _at(expr, 0.0)

    def test_all_presets_compile(self):
        for text in RANDOM_EXPRESSIONS:
            compile_expression(text)


class TestCompileRejects:
    """Anything outside the arithmetic whitelist is a CompileError."""

    @pytest.mark.parametrize("text", [
        "__import__('os')",
        "x.real",
        "[x]",
        "lambda: 1",
        "y",
        "sin",
        "sin(x, 2)",
        "pow(x)",
        "sin(*[x])",
        "sin(x=1)",
        "x if a else b",
        "x < 1",
        "'abc'",
        "1j",
        "True",
        "x // 2",
        "x & 1",
        "x @ x",
        "~x",
        "not x",
        "sin(x",
        "x; 1",
        "open('f')",
        "(lambda: 0).__globals__",
    ])
    def test_rejected(self, text):
        with pytest.raises(CompileError):
            compile_expression(text)

    def test_compile_error_is_value_error(self):
        assert issubclass(CompileError, ValueError)

    def test_huge_literal(self):
        with pytest.raises(CompileError):
            compile_expression("1" + "0" * 400)

    def test_long_chain(self):
        with pytest.raises(CompileError):
            compile_expression("+".join(["x"] * 200000))

    def test_deep_unary_nesting(self):
        with pytest.raises(CompileError):
            compile_expression("-" * 200000 + "x")

    def test_deep_parentheses(self):
        with pytest.raises(CompileError):
            compile_expression("(" * 100000 + "x" + ")" * 100000)

    def test_validator_message_kept(self):
        with pytest.raises(CompileError, match="Unknown name 'y'"):
            compile_expression("y")


class TestEvaluate:
    """Per-sample failures are EvaluationErrors; non-finite values pass through."""

    def test_division_by_zero(self):
        with pytest.raises(EvaluationError):
            _at(compile_expression("1/x"), 0.0)

    def test_sqrt_domain(self):
        with pytest.raises(EvaluationError):
            _at(compile_expression("sqrt(x)"), -1.0)

    def test_fractional_power_of_negative(self):
        """Python would return a complex number; that is not a real sample."""
        with pytest.raises(EvaluationError):
            _at(compile_expression("x**0.5"), -1.0)

    def test_pow_domain(self):
        with pytest.raises(EvaluationError):
            _at(compile_expression("pow(x, 0.5)"), -1.0)

    def test_overflow(self):
        with pytest.raises(EvaluationError):
            _at(compile_expression("exp(x)"), 1000.0)

    def test_missing_binding(self):
        with pytest.raises(EvaluationError):
            compile_expression("a*x").evaluate({"x": 1.0})

    def test_recursion_during_evaluation(self, monkeypatch):
        def deep(_v):
            raise RecursionError("maximum recursion depth exceeded")

        monkeypatch.setitem(expression._GLOBALS, "sin", deep)
        with pytest.raises(EvaluationError):
            _at(compile_expression("sin(x)"), 1.0)

    def test_infinity_returned(self):
        value = _at(compile_expression("x*1e308*10"), 1.0)
        assert math.isinf(value)

    def test_bindings_not_retained(self):
        expr = compile_expression("a*x")
        assert _at(expr, 2.0, a=3.0) == 6.0
        assert _at(expr, 2.0, a=-1.0) == -2.0

    def test_bindings_cannot_shadow_functions(self):
        expr = compile_expression("sin(x)")
        value = expr.evaluate({"x": 0.0, "sin": lambda v: 99.0})
        assert value == 0.0

    def test_expression_is_immutable(self):
        expr = compile_expression("x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            expr.text = "x + 1"


class TestParameterSet:

    def test_defaults(self):
        params = ParameterSet()
        assert (params.a, params.b, params.c) == (1.0, 0.0, 1.0)

    def test_bindings_are_fresh(self):
        params = ParameterSet(a=2.0)
        first = params.bindings(1.0)
        params.a = 5.0
        second = params.bindings(1.0)
        assert first["a"] == 2.0
        assert second["a"] == 5.0
        assert second == {"x": 1.0, "a": 5.0, "b": 0.0, "c": 1.0}


class TestRandomExpression:

    def test_picks_a_preset(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            assert random_expression(rng) in RANDOM_EXPRESSIONS

    def test_seeded_choice_reproducible(self):
        first = [random_expression(np.random.default_rng(9)) for _ in range(3)]
        assert len(set(first)) == 1

    def test_default_generator(self):
        assert random_expression() in RANDOM_EXPRESSIONS
