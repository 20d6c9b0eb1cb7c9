"""Expression evaluator: compile a formula in x, a, b, c into a callable.

The formula text is untrusted. It is parsed with :mod:`ast`, checked
against a whitelist of arithmetic nodes and the fixed function set
(sin, cos, tan, abs, exp, sqrt, pow), then compiled once to a code
object that is evaluated with no builtins. Nothing outside the declared
names is reachable from the text.
"""

from __future__ import annotations

import ast
import math
from collections.abc import Mapping
from dataclasses import dataclass, field

import numpy as np

# Sample variable and free parameters
VARIABLE = "x"
PARAMETERS = ("a", "b", "c")

FUNCTIONS = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "abs": abs,
    "exp": math.exp,
    "sqrt": math.sqrt,
    "pow": math.pow,
}

CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

# Presets offered by the "random function" action
RANDOM_EXPRESSIONS = (
    "sin(a*x + b)*c",
    "cos(a*x + b)*c",
    "sin(a*x) + cos(b*x)",
    "sin(a*x) * cos(b*x) * c",
    "sin(a*x*x + b) * c",
    "tan(a*x + b)*c",
)

DEFAULT_EXPRESSION = RANDOM_EXPRESSIONS[0]

_BINARY_OPS = (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Mod, ast.Pow)
_UNARY_OPS = (ast.UAdd, ast.USub)

# Shared, never mutated; bindings are passed as the locals mapping
_GLOBALS = {"__builtins__": {}, **FUNCTIONS, **CONSTANTS}


class CompileError(ValueError):
    """Raised when expression text is malformed or uses forbidden syntax."""


class EvaluationError(ArithmeticError):
    """Raised when a single evaluation fails (domain error, division by zero...)."""


@dataclass
class ParameterSet:
    """The three free parameters of an expression."""

    a: float = 1.0
    b: float = 0.0
    c: float = 1.0

    def bindings(self, x: float) -> dict[str, float]:
        """Return a fresh binding set for one sample point."""
        return {"x": x, "a": float(self.a), "b": float(self.b), "c": float(self.c)}


class _Validator(ast.NodeTransformer):
    """Reject non-whitelisted nodes; rewrite ``^`` to ``**`` and numbers to floats."""

    def __init__(self):
        self.names: set[str] = set()

    def visit_Expression(self, node):
        node.body = self.visit(node.body)
        return node

    def visit_Constant(self, node):
        value = node.value
        # bool is an int subclass; complex literals are not real numbers
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise CompileError(f"Unsupported literal {value!r}")
        try:
            value = float(value)
        except OverflowError:
            raise CompileError("Numeric literal too large") from None
        return ast.copy_location(ast.Constant(value), node)

    def visit_Name(self, node):
        if node.id in FUNCTIONS:
            raise CompileError(f"Function '{node.id}' must be called")
        if node.id != VARIABLE and node.id not in PARAMETERS and node.id not in CONSTANTS:
            raise CompileError(f"Unknown name '{node.id}'")
        if node.id not in CONSTANTS:
            self.names.add(node.id)
        return node

    def visit_BinOp(self, node):
        if isinstance(node.op, ast.BitXor):
            node.op = ast.Pow()
        if not isinstance(node.op, _BINARY_OPS):
            raise CompileError(f"Operator {type(node.op).__name__} not allowed")
        node.left = self.visit(node.left)
        node.right = self.visit(node.right)
        return node

    def visit_UnaryOp(self, node):
        if not isinstance(node.op, _UNARY_OPS):
            raise CompileError(f"Operator {type(node.op).__name__} not allowed")
        node.operand = self.visit(node.operand)
        return node

    def visit_Call(self, node):
        if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
            name = getattr(node.func, "id", "?")
            raise CompileError(f"Function '{name}' not allowed")
        if node.keywords:
            raise CompileError("Keyword arguments not allowed")
        if any(isinstance(arg, ast.Starred) for arg in node.args):
            raise CompileError("Argument unpacking not allowed")
        expected = 2 if node.func.id == "pow" else 1
        if len(node.args) != expected:
            raise CompileError(
                f"{node.func.id}() takes {expected} argument(s), got {len(node.args)}"
            )
        node.args = [self.visit(arg) for arg in node.args]
        return node

    def generic_visit(self, node):
        raise CompileError(f"Unsupported syntax: {type(node).__name__}")


@dataclass(frozen=True)
class Expression:
    """An immutable formula and its compiled evaluation procedure.

    Build instances with :func:`compile_expression`. A changed formula is
    a new Expression; compiled code is never mutated.
    """

    text: str
    names: frozenset[str]
    _code: object = field(repr=False, compare=False)

    def evaluate(self, bindings: Mapping[str, float]) -> float:
        """Evaluate at one binding set {x, a, b, c}.

        Returns:
            The real result, which may be ``inf`` or ``nan``.

        Raises:
            EvaluationError: on arithmetic faults, a complex result, or a
                missing binding.
        """
        try:
            scope = {name: bindings[name] for name in self.names}
        except KeyError as exc:
            raise EvaluationError(f"Missing binding for {exc.args[0]!r}") from None
        try:
            value = eval(self._code, _GLOBALS, scope)
        except (ArithmeticError, ValueError, TypeError, RecursionError) as exc:
            raise EvaluationError(str(exc)) from exc
        if isinstance(value, complex):
            raise EvaluationError(f"Non-real result {value!r}")
        return float(value)


def compile_expression(text: str | None) -> Expression:
    """Compile formula text into an :class:`Expression`.

    Empty or whitespace-only text compiles to the constant 0.

    Raises:
        CompileError: if the text does not parse or uses anything outside
            the arithmetic whitelist, or is nested too deeply to compile.
    """
    source = (text or "").strip() or "0"
    validator = _Validator()
    try:
        tree = ast.parse(source, mode="eval")
        tree = ast.fix_missing_locations(validator.visit(tree))
        code = compile(tree, "<expression>", "eval")
    except CompileError:
        raise
    except (SyntaxError, ValueError) as exc:
        raise CompileError(f"Invalid function: {exc}") from exc
    except (RecursionError, MemoryError) as exc:
        raise CompileError("Expression too complex") from exc
    return Expression(text=source, names=frozenset(validator.names), _code=code)


def random_expression(rng: np.random.Generator | None = None) -> str:
    """Pick one of the preset formulas."""
    if rng is None:
        rng = np.random.default_rng()
    return RANDOM_EXPRESSIONS[int(rng.integers(len(RANDOM_EXPRESSIONS)))]
