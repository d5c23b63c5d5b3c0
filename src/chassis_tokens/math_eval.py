"""
Arithmetic in token values.

Token values such as ``"4px * 2"`` or ``"(16 + 8) / 2"`` are evaluated to
numbers. Evaluation walks a parsed ``ast`` tree over a closed set of node
types and never calls Python's ``eval()``.

A unit attached to the numbers is carried through when every number
uses the same unit (``"4px * 2"`` -> ``"8px"``). Mixed units cannot be
evaluated.
"""

from __future__ import annotations

import ast
import math
import operator
import re
from collections.abc import Callable
from typing import Any

_NUMBER_WITH_UNIT = re.compile(r"(?<![\w.])(\d*\.?\d+)([a-zA-Z%]+)")
_PLAIN_NUMBER = re.compile(r"^[+-]?(\d*\.?\d+)([a-zA-Z%]*)$")
_ARITHMETIC_ONLY = re.compile(r"^[\d\s.+\-*/()]+$")

# Decimal places kept after evaluation
PRECISION = 3

_BINARY_OPS: dict[type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class MathError(ValueError):
    """Error during arithmetic evaluation."""


def _strip_units(text: str) -> tuple[str, set[str]]:
    units: set[str] = set()

    def _drop(match: re.Match[str]) -> str:
        units.add(match.group(2))
        return match.group(1)

    return _NUMBER_WITH_UNIT.sub(_drop, text), units


def _contains_binop(node: ast.AST) -> bool:
    return any(isinstance(n, ast.BinOp) for n in ast.walk(node))


def is_math_expression(value: Any) -> bool:
    """Return True if ``value`` is a string holding an arithmetic expression.

    Space-separated lists of plain numbers (``"8px 4px"``) are multi-values,
    not expressions.
    """
    if not isinstance(value, str) or not value.strip():
        return False
    parts = value.split()
    if all(_PLAIN_NUMBER.match(part) for part in parts):
        return False

    stripped, _units = _strip_units(value)
    if not _ARITHMETIC_ONLY.match(stripped):
        return False
    try:
        tree = ast.parse(stripped.strip(), mode="eval")
    except SyntaxError:
        return False
    return _contains_binop(tree)


def _interpret(node: ast.AST) -> float:
    if isinstance(node, ast.Expression):
        return _interpret(node.body)

    if isinstance(node, ast.Constant) and isinstance(node.value, int | float):
        return float(node.value)

    if isinstance(node, ast.BinOp):
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise MathError(f"Unsupported operator: {type(node.op).__name__}")
        left = _interpret(node.left)
        right = _interpret(node.right)
        try:
            return op(left, right)
        except ZeroDivisionError:
            raise MathError("Division by zero") from None

    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise MathError(f"Unsupported operator: {type(node.op).__name__}")
        return op(_interpret(node.operand))

    raise MathError(f"Unsupported expression element: {type(node).__name__}")


def evaluate(expression: str) -> tuple[float, str]:
    """Evaluate an arithmetic expression.

    Args:
        expression: Expression text, optionally with units on its numbers.

    Returns:
        Tuple of (result, unit); unit is "" for unitless expressions.

    Raises:
        MathError: If the expression is malformed, mixes units or does not
            produce a finite number.
    """
    stripped, units = _strip_units(expression)
    if len(units) > 1:
        raise MathError(f"Cannot combine different units {sorted(units)}")
    if not _ARITHMETIC_ONLY.match(stripped):
        raise MathError("Expression contains non-numeric terms")
    try:
        tree = ast.parse(stripped.strip(), mode="eval")
    except SyntaxError as e:
        raise MathError(f"Malformed expression: {e.msg}") from e

    result = _interpret(tree)
    if not math.isfinite(result):
        raise MathError("Expression does not evaluate to a finite number")
    return round(result, PRECISION), units.pop() if units else ""


def format_number(value: float) -> str:
    """Format a number without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.{PRECISION + 3}f}".rstrip("0").rstrip(".")


def check_and_evaluate(value: Any) -> Any:
    """Evaluate ``value`` if it is an arithmetic expression, else return it unchanged.

    Unitless results come back as numbers, results with a unit as strings.
    """
    if not is_math_expression(value):
        return value
    result, unit = evaluate(value)
    if unit:
        return f"{format_number(result)}{unit}"
    return int(result) if result.is_integer() else result
