"""
Operators for template expressions.

Each operator applies to already evaluated operands; there is no
short-circuiting. Arithmetic follows a coercion ladder:
- `+`: integer, then float, then string concatenation
- `-` `*`: integer, then float
- `/`: always float
- `%`: integers only
Integer results outside the signed 64-bit range are recomputed in float.
"""

from typing import Any, Callable, Dict

from minipoml.errors import EvaluatorError
from minipoml.values import (
    cast_as_float,
    cast_as_int,
    cast_as_string,
    in_int64_range,
    is_integer,
    is_truthy,
    strict_equals,
    type_name
)

# Binary operators grouped by precedence, tightest first
MULTIPLICATIVE = ('*', '/', '%')
ADDITIVE = ('+', '-')
RELATIONAL = ('<', '<=', '>', '>=', 'in')
EQUALITY = ('===', '!==')
LOGICAL_AND = ('&&',)
LOGICAL_OR = ('||',)

PRECEDENCE = (MULTIPLICATIVE, ADDITIVE, RELATIONAL, EQUALITY, LOGICAL_AND, LOGICAL_OR)

UNARY = ('!', '-')


def _describe(value: Any) -> str:
    return f"{type_name(value)} {cast_as_string(value) or ''}".rstrip()


def _int_or_float(left: Any, right: Any,
                  int_op: Callable[[int, int], int],
                  float_op: Callable[[float, float], float]) -> Any:
    left_int, right_int = cast_as_int(left), cast_as_int(right)
    if left_int is not None and right_int is not None:
        result = int_op(left_int, right_int)
        if in_int64_range(result):
            return result
        return float_op(float(left_int), float(right_int))

    left_float, right_float = cast_as_float(left), cast_as_float(right)
    if left_float is not None and right_float is not None:
        return float_op(left_float, right_float)

    return None


def add(left: Any, right: Any) -> Any:
    result = _int_or_float(left, right, lambda a, b: a + b, lambda a, b: a + b)
    if result is not None:
        return result

    left_text, right_text = cast_as_string(left), cast_as_string(right)
    if left_text is not None and right_text is not None:
        return left_text + right_text

    raise EvaluatorError(f"Cannot apply '+' to {_describe(left)} and {_describe(right)}")


def subtract(left: Any, right: Any) -> Any:
    result = _int_or_float(left, right, lambda a, b: a - b, lambda a, b: a - b)
    if result is None:
        raise EvaluatorError(f"Cannot apply '-' to {_describe(left)} and {_describe(right)}")
    return result


def multiply(left: Any, right: Any) -> Any:
    result = _int_or_float(left, right, lambda a, b: a * b, lambda a, b: a * b)
    if result is None:
        raise EvaluatorError(f"Cannot apply '*' to {_describe(left)} and {_describe(right)}")
    return result


def divide(left: Any, right: Any) -> float:
    left_float, right_float = cast_as_float(left), cast_as_float(right)
    if left_float is None or right_float is None:
        raise EvaluatorError(f"Cannot apply '/' to {_describe(left)} and {_describe(right)}")
    if right_float == 0:
        raise EvaluatorError("Division by zero")
    return left_float / right_float


def modulo(left: Any, right: Any) -> int:
    left_int, right_int = cast_as_int(left), cast_as_int(right)
    if left_int is None or right_int is None:
        raise EvaluatorError(f"Cannot apply '%' to {_describe(left)} and {_describe(right)}")
    if right_int == 0:
        raise EvaluatorError("Modulo by zero")
    # Truncated remainder: the result takes the sign of the dividend
    remainder = abs(left_int) % abs(right_int)
    return remainder if left_int >= 0 else -remainder


def _compare(symbol: str, left: Any, right: Any,
             compare: Callable[[float, float], bool]) -> bool:
    left_float, right_float = cast_as_float(left), cast_as_float(right)
    if left_float is None or right_float is None:
        raise EvaluatorError(
            f"Cannot compare {_describe(left)} and {_describe(right)} with '{symbol}'"
        )
    return compare(left_float, right_float)


def contains(left: Any, right: Any) -> bool:
    """`left in right`: index membership for arrays, key membership for objects."""
    if isinstance(right, list):
        if not is_integer(left):
            raise EvaluatorError(
                f"Left side of 'in' must be an integer index for an array, got {type_name(left)}"
            )
        return 0 <= left < len(right)

    if isinstance(right, dict):
        if not isinstance(left, str):
            raise EvaluatorError(
                f"Left side of 'in' must be a string key for an object, got {type_name(left)}"
            )
        return left in right

    raise EvaluatorError(
        f"Right side of 'in' must be an array or an object, got {type_name(right)}"
    )


BINARY_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    '+': add,
    '-': subtract,
    '*': multiply,
    '/': divide,
    '%': modulo,
    '<': lambda a, b: _compare('<', a, b, lambda x, y: x < y),
    '<=': lambda a, b: _compare('<=', a, b, lambda x, y: x <= y),
    '>': lambda a, b: _compare('>', a, b, lambda x, y: x > y),
    '>=': lambda a, b: _compare('>=', a, b, lambda x, y: x >= y),
    'in': contains,
    '===': strict_equals,
    '!==': lambda a, b: not strict_equals(a, b),
    '&&': lambda a, b: is_truthy(a) and is_truthy(b),
    '||': lambda a, b: is_truthy(a) or is_truthy(b),
}


def apply_binary(symbol: str, left: Any, right: Any) -> Any:
    """
    Apply a binary operator.

    Raises:
        EvaluatorError: If the operator is unknown or the operands do not
            coerce to a type the operator accepts
    """
    operator = BINARY_OPERATORS.get(symbol)
    if operator is None:
        raise EvaluatorError(f"Unknown operator: {symbol}")
    return operator(left, right)


def apply_unary(symbol: str, value: Any) -> Any:
    """Apply a prefix operator: logical not or numeric negation."""
    if symbol == '!':
        return not is_truthy(value)

    if symbol == '-':
        number = cast_as_int(value)
        if number is not None:
            return -number if in_int64_range(-number) else -float(number)
        real = cast_as_float(value)
        if real is not None:
            return -real
        raise EvaluatorError(f"Cannot negate {_describe(value)}")

    raise EvaluatorError(f"Unknown unary operator: {symbol}")
