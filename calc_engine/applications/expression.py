"""Restricted arithmetic expressions over buffer pH (BpH) and water pH (WpH).

Equation text is parsed once into a closure. Only numeric literals, the two
soil variables, ``+ - * /``, parentheses, unary signs and members of the math
namespace (``Math.sqrt(...)`` or ``math.sqrt(...)``) are accepted; anything
else is rejected when the equation is compiled, never at evaluation time.
"""

import ast
import math
from typing import Callable, Dict

from calc_engine.errors import NonFiniteResult, UnsafeExpression

BUFFER_PH = "BpH"
WATER_PH = "WpH"
ALLOWED_VARIABLES = (BUFFER_PH, WATER_PH)
MATH_NAMESPACES = ("Math", "math")

Evaluator = Callable[[float, float], float]

_MATH_FUNCTIONS: Dict[str, Callable[..., float]] = {
    "abs": abs,
    "min": min,
    "max": max,
    "pow": math.pow,
    "sqrt": math.sqrt,
    "exp": math.exp,
    "log": math.log,
    "log10": math.log10,
    "floor": math.floor,
    "ceil": math.ceil,
    "round": lambda x: math.floor(x + 0.5),
}

_MATH_CONSTANTS: Dict[str, float] = {
    "PI": math.pi,
    "pi": math.pi,
    "E": math.e,
    "e": math.e,
}

_BINARY_OPS = {
    ast.Add: lambda a, b: a + b,
    ast.Sub: lambda a, b: a - b,
    ast.Mult: lambda a, b: a * b,
    ast.Div: lambda a, b: a / b,
}

_UNARY_OPS = {
    ast.USub: lambda a: -a,
    ast.UAdd: lambda a: +a,
}


def _math_member(node: ast.Attribute, source: str) -> str:
    if not (isinstance(node.value, ast.Name) and node.value.id in MATH_NAMESPACES):
        raise UnsafeExpression(f"Attribute access outside the math namespace in {source!r}")
    return node.attr


def _compile_node(node: ast.AST, source: str) -> Evaluator:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise UnsafeExpression(f"Non-numeric literal {node.value!r} in {source!r}")
        value = float(node.value)
        return lambda bph, wph: value

    if isinstance(node, ast.Name):
        if node.id == BUFFER_PH:
            return lambda bph, wph: bph
        if node.id == WATER_PH:
            return lambda bph, wph: wph
        raise UnsafeExpression(
            f"Unknown name {node.id!r} in {source!r}; allowed: {', '.join(ALLOWED_VARIABLES)}"
        )

    if isinstance(node, ast.BinOp):
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise UnsafeExpression(f"Operator {type(node.op).__name__} not allowed in {source!r}")
        left = _compile_node(node.left, source)
        right = _compile_node(node.right, source)
        return lambda bph, wph: op(left(bph, wph), right(bph, wph))

    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise UnsafeExpression(f"Operator {type(node.op).__name__} not allowed in {source!r}")
        operand = _compile_node(node.operand, source)
        return lambda bph, wph: op(operand(bph, wph))

    if isinstance(node, ast.Attribute):
        name = _math_member(node, source)
        if name not in _MATH_CONSTANTS:
            raise UnsafeExpression(f"Unknown math constant {name!r} in {source!r}")
        value = _MATH_CONSTANTS[name]
        return lambda bph, wph: value

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Attribute) or node.keywords:
            raise UnsafeExpression(f"Only math namespace calls are allowed in {source!r}")
        name = _math_member(node.func, source)
        func = _MATH_FUNCTIONS.get(name)
        if func is None:
            raise UnsafeExpression(f"Unknown math function {name!r} in {source!r}")
        args = [_compile_node(arg, source) for arg in node.args]
        if not args:
            raise UnsafeExpression(f"math.{name} called without arguments in {source!r}")
        return lambda bph, wph: func(*(a(bph, wph) for a in args))

    raise UnsafeExpression(f"Unsupported syntax {type(node).__name__} in {source!r}")


def compile_equation(source: str) -> Evaluator:
    """
    Compile equation text into ``f(buffer_ph, water_ph) -> float``.

    Raises:
        UnsafeExpression: text does not parse or uses a disallowed token.

    The returned callable raises NonFiniteResult when the value is NaN,
    infinite, or the arithmetic is undefined (division by zero, domain errors).
    """
    if not isinstance(source, str) or not source.strip():
        raise UnsafeExpression("Equation text is empty")
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        raise UnsafeExpression(f"Cannot parse equation {source!r}: {exc.msg}") from exc

    fn = _compile_node(tree.body, source)

    def evaluate(buffer_ph: float, water_ph: float) -> float:
        try:
            value = float(fn(float(buffer_ph), float(water_ph)))
        except (ZeroDivisionError, OverflowError, ValueError) as exc:
            raise NonFiniteResult(f"Equation {source!r} is undefined: {exc}") from exc
        if not math.isfinite(value):
            raise NonFiniteResult(f"Equation {source!r} returned {value}")
        return value

    return evaluate
