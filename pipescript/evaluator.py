from __future__ import annotations
import operator
from typing import TYPE_CHECKING, Optional

from .ast import ExpressionNode, TokenKind
from .errors import EvaluationError, ScriptTypeError, VariableReferenceError
from .types import Value, ValueTag, tag_of

if TYPE_CHECKING:
    from .environment import Environment


def _divide(left: int, right: int) -> int:
    # truncates toward zero
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


OPERATIONS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
    "&": operator.and_,
    "|": operator.or_,
    "^": operator.xor,
}


def evaluate(node: ExpressionNode, env: "Environment", line: Optional[int] = None,
             argnum: Optional[int] = None) -> Value:
    kind = node.token.kind
    if kind == TokenKind.String:
        return node.token.value
    if kind == TokenKind.Number:
        return int(node.token.value)
    if kind == TokenKind.Variable:
        name = node.token.value
        if name not in env:
            if env.config.strict_variables:
                raise VariableReferenceError(f"Variable ${name} is not defined", line, argnum)
            return None
        return env[name]
    op = node.token.value
    left = evaluate(node.left, env, line, argnum)
    right = evaluate(node.right, env, line, argnum)
    for operand in (left, right):
        tag = tag_of(operand)
        if tag != ValueTag.Number:
            raise ScriptTypeError(f"Cannot apply {op} to a {tag.value} value", line, argnum)
    operation = OPERATIONS.get(op)
    if operation is None:
        raise EvaluationError(f"Unknown operator {op}", line, argnum)
    try:
        return operation(left, right)
    except ZeroDivisionError:
        raise EvaluationError("Division by zero", line, argnum) from None


def variable_name(node: ExpressionNode, line: Optional[int] = None, argnum: Optional[int] = None) -> str:
    """Name of a bare ``$variable`` argument, for commands that write variables."""
    if node.token.kind != TokenKind.Variable:
        raise VariableReferenceError("Argument is not a variable reference", line, argnum)
    return node.token.value
