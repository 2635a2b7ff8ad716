"""
Helpers for the dynamic values handled by the renderer.

Values are plain JSON-compatible Python objects: None, bool, int, float,
str, list and dict. This module implements the casting rules used by the
expression operators, truthiness, display text, strict structural equality
and the typed parsing used by <let>.
"""

import json
import re
from typing import Any, Optional

from minipoml.errors import RendererError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

FALSE_TEXTS = ('0', 'false', '', 'null', 'NaN')

LET_TYPES = ('string', 'integer', 'number', 'boolean', 'array', 'object')

_INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')


def is_integer(value: Any) -> bool:
    """True for ints that are not booleans."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    return is_integer(value) or isinstance(value, float)


def in_int64_range(value: int) -> bool:
    return INT64_MIN <= value <= INT64_MAX


def type_name(value: Any) -> str:
    """Name of the value variant, for error messages."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if is_integer(value):
        return 'integer'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    return type(value).__name__


def cast_as_int(value: Any) -> Optional[int]:
    """Cast to a 64-bit integer. Booleans become 0/1; floats, null and others fail."""
    if isinstance(value, bool):
        return 1 if value else 0
    if is_integer(value) and in_int64_range(value):
        return value
    return None


def cast_as_float(value: Any) -> Optional[float]:
    """Cast to a float. Booleans become 0.0/1.0; null, strings and containers fail."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_integer(value):
        return float(value)
    if isinstance(value, float):
        return value
    return None


def cast_as_string(value: Any) -> Optional[str]:
    """Cast a scalar to its display string. Arrays and objects never coerce."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if is_integer(value):
        return str(value)
    if isinstance(value, float):
        # Integral floats print without a fractional part: 2.0 -> "2"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    return None


def is_truthy(value: Any) -> bool:
    """
    Truthiness used by `!`, `&&`, `||`, the ternary operator and `if`.

    False for false, null, numeric zero and the empty string. Everything
    else is true, including empty arrays and objects.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    if isinstance(value, str):
        return value != ''
    return True


def is_false_text(text: str) -> bool:
    """
    Truthiness of an already substituted attribute value.

    True (the value is false) for the FALSE_TEXTS and for any numeric text equal to zero
    ("0.0", "-0", "0.00").
    """
    text = text.strip()
    if text in FALSE_TEXTS:
        return True
    return _parse_float(text) == 0.0


def strict_equals(left: Any, right: Any) -> bool:
    """Structural equality without coercion: 1 !== 1.0 and true !== 1."""
    if type_name(left) != type_name(right):
        return False
    if isinstance(left, list):
        return len(left) == len(right) and all(
            strict_equals(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, dict):
        return left.keys() == right.keys() and all(
            strict_equals(left[key], right[key]) for key in left
        )
    return left == right


def display_text(value: Any) -> str:
    """Text spliced into the output for an interpolated value."""
    text = cast_as_string(value)
    if text is not None:
        return text
    return json.dumps(value, ensure_ascii=False)


# Typed parsing for <let>

def _parse_integer(text: str) -> Optional[int]:
    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    number = int(text)
    return number if in_int64_range(number) else None


def _parse_float(text: str) -> Optional[float]:
    if not text or text != text.strip() or '_' in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return None


def parse_typed_value(text: str, value_type: str) -> Any:
    """
    Parse `text` as the given <let> type.

    Args:
        text: The substituted value text
        value_type: One of string, integer, number, boolean, array, object

    Returns:
        The parsed value

    Raises:
        RendererError: If the text does not parse as the requested type
    """
    if value_type == 'string':
        return text

    if value_type == 'integer':
        number = _parse_integer(text)
        if number is None:
            raise RendererError(f"Failed to convert value to integer {text}")
        return number

    if value_type == 'number':
        if '.' in text:
            number = _parse_float(text)
        else:
            number = _parse_integer(text)
        if number is None:
            raise RendererError(f"Failed to convert value to number {text}")
        return number

    if value_type == 'boolean':
        return not is_false_text(text)

    if value_type == 'array':
        parsed = _parse_json(text)
        if not isinstance(parsed, list):
            raise RendererError(f"Failed to parse value to array: {text}")
        return parsed

    if value_type == 'object':
        parsed = _parse_json(text)
        if not isinstance(parsed, dict):
            raise RendererError(f"Failed to parse value to object: {text}")
        return parsed

    raise RendererError(f"Unknown type for variable: {value_type}")


def infer_value(text: str) -> Any:
    """
    Guess the type of an untyped <let> value.

    Tries boolean, integer, float, array and object in that order and
    falls back to the string itself.
    """
    if text in ('true', 'false'):
        return text == 'true'

    number = _parse_integer(text)
    if number is not None:
        return number

    real = _parse_float(text)
    if real is not None and real == real and real not in (float('inf'), float('-inf')):
        return real

    parsed = _parse_json(text)
    if isinstance(parsed, (list, dict)):
        return parsed

    return text


def parse_object(text: str) -> Optional[dict]:
    """Parse `text` as a JSON object, or None when it is anything else."""
    parsed = _parse_json(text)
    return parsed if isinstance(parsed, dict) else None
