"""
Expression evaluator.

Evaluation runs in two steps:
1. Tokens are folded into a flat, alternating sequence of values and
   operators. Literals, references, parenthesized groups, array and
   object literals and postfix access (`.field`, `[index]`) are resolved
   to values on the way.
2. The sequence is collapsed by a fixed cascade of reduction passes,
   one per precedence level:
   unary `!` `-`, `* / %`, `+ -`, `< <= > >= in`, `=== !==`, `&&`, `||`
   and finally the ternary `?:`, which reduces right-to-left.
"""

import copy
from dataclasses import dataclass
from typing import Any, List, Tuple

from minipoml.errors import EvaluatorError
from minipoml.expression.operators import PRECEDENCE, apply_binary, apply_unary
from minipoml.expression.tokenizer import Token, TokenType
from minipoml.values import in_int64_range, is_integer, is_truthy, type_name

TERMINATORS = (TokenType.RBRACKET, TokenType.RBRACE, TokenType.COMMA, TokenType.RPAREN)

KEYWORD_VALUES = {
    'true': True,
    'false': False,
    'null': None,
}

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
}


@dataclass
class Operator:
    """An operator slot in the flat value/operator sequence."""
    symbol: str
    position: int = 0
    unary: bool = False


def decode_string_literal(literal: str) -> str:
    """Strip the matching quotes of a string token and resolve backslash escapes."""
    body = literal[1:-1]
    if '\\' not in body:
        return body

    chars = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == '\\' and index + 1 < len(body):
            index += 1
            chars.append(ESCAPES.get(body[index], body[index]))
        else:
            chars.append(char)
        index += 1
    return ''.join(chars)


def parse_number_literal(literal: str) -> Any:
    """Numbers with a dot are floats; integers must fit in 64 bits."""
    if '.' in literal:
        return float(literal)

    number = int(literal)
    if not in_int64_range(number):
        raise EvaluatorError(f"Integer literal out of range: {literal}")
    return number


class ExpressionEvaluator:
    """
    Evaluates expression tokens against a render context.

    The context only needs a `get_value(name)` method returning the bound
    value, or None when the name is unbound. Looked up values are copied,
    so evaluation never mutates the bindings.

    Usage:
        evaluator = ExpressionEvaluator(context)
        value = evaluator.evaluate(tokenize_expression("a + 1"))
    """

    def __init__(self, context):
        self.context = context

    def evaluate(self, tokens: List[Token]) -> Any:
        """
        Evaluate a complete expression.

        Raises:
            EvaluatorError: If the expression is empty, malformed, leaves
                tokens unconsumed, or an operator or access fails
        """
        if not tokens:
            raise EvaluatorError("Empty expression")

        value, pos = self.evaluate_expression_value(tokens, 0)
        if pos != len(tokens):
            token = tokens[pos]
            raise EvaluatorError(
                f"Unexpected {token.value!r} at position {token.position} of the expression"
            )
        return value

    def evaluate_expression_value(self, tokens: List[Token], start: int) -> Tuple[Any, int]:
        """
        Evaluate tokens from `start` up to the next terminator.

        Returns:
            The value and the position of the terminator (or the end)
        """
        parts: List[Any] = []
        expect_value = True
        pos = start

        while pos < len(tokens):
            token = tokens[pos]
            if token.type in TERMINATORS:
                break

            if expect_value:
                if token.type == TokenType.EXCLAMATION or (
                    token.type == TokenType.OPERATOR and token.value == '-'
                ):
                    parts.append(Operator(token.value, token.position, unary=True))
                    pos += 1
                    continue

                value, pos = self.recognize_next_value(tokens, pos)
                parts.append(value)
                expect_value = False
                continue

            if token.type in (TokenType.OPERATOR, TokenType.QUESTION, TokenType.COLON):
                parts.append(Operator(token.value, token.position))
                expect_value = True
                pos += 1
                continue

            raise EvaluatorError(
                f"Expect an operator at position {token.position}, but found {token.value!r}"
            )

        if not parts:
            raise EvaluatorError("Empty expression")
        if expect_value:
            raise EvaluatorError("Expression ends with an operator that has no operand")

        return self._reduce(parts), pos

    def recognize_next_value(self, tokens: List[Token], pos: int) -> Tuple[Any, int]:
        """
        Resolve the value starting at `pos`, including any postfix access.

        Returns:
            The value and the position right after it
        """
        token = tokens[pos]
        path = token.value

        if token.type == TokenType.LPAREN:
            value, pos = self.evaluate_expression_value(tokens, pos + 1)
            self._expect(tokens, pos, TokenType.RPAREN, ')')
            pos += 1
            path = '(...)'
        elif token.type == TokenType.LBRACKET:
            value, pos = self._evaluate_array(tokens, pos + 1)
            path = '[...]'
        elif token.type == TokenType.LBRACE:
            value, pos = self._evaluate_object(tokens, pos + 1)
            path = '{...}'
        elif token.type == TokenType.NUMBER:
            value = parse_number_literal(token.value)
            pos += 1
        elif token.type == TokenType.STRING:
            value = decode_string_literal(token.value)
            pos += 1
        elif token.type == TokenType.REF:
            if token.value in KEYWORD_VALUES:
                value = KEYWORD_VALUES[token.value]
            else:
                value = copy.deepcopy(self.context.get_value(token.value))
            pos += 1
        else:
            raise EvaluatorError(
                f"Expect a value at position {token.position}, but found {token.value!r}"
            )

        return self._resolve_access(tokens, pos, value, path)

    def _resolve_access(self, tokens: List[Token], pos: int, value: Any, path: str) -> Tuple[Any, int]:
        """Apply chained `.field` and `[index]` access to a resolved value."""
        while pos < len(tokens):
            token = tokens[pos]

            if token.type == TokenType.DOT:
                if pos + 1 >= len(tokens) or tokens[pos + 1].type != TokenType.REF:
                    raise EvaluatorError(
                        f"Expect a field name after '.' at position {token.position}"
                    )
                key = tokens[pos + 1].value
                value = self._access(value, key, path)
                path = f"{path}.{key}"
                pos += 2

            elif token.type == TokenType.LBRACKET:
                key, pos = self.evaluate_expression_value(tokens, pos + 1)
                self._expect(tokens, pos, TokenType.RBRACKET, ']')
                pos += 1
                value = self._access(value, key, path)
                path = f"{path}[{key!r}]" if isinstance(key, str) else f"{path}[{key}]"

            else:
                break

        return value, pos

    def _access(self, base: Any, key: Any, path: str) -> Any:
        if base is None:
            raise EvaluatorError(f"Cannot access {key!r} of null value: {path}")

        if isinstance(base, dict):
            if not isinstance(key, str):
                raise EvaluatorError(
                    f"Object {path} can only be indexed by a string, got {type_name(key)}"
                )
            return base.get(key)

        if isinstance(base, list):
            if not is_integer(key) or key < 0:
                raise EvaluatorError(
                    f"Array {path} can only be indexed by a non-negative integer, got {key!r}"
                )
            if key >= len(base):
                raise EvaluatorError(
                    f"Index {key} is out of bounds for {path} with length {len(base)}"
                )
            return base[key]

        raise EvaluatorError(f"Cannot access {key!r} of {type_name(base)} value: {path}")

    def _evaluate_array(self, tokens: List[Token], pos: int) -> Tuple[list, int]:
        items = []
        if pos < len(tokens) and tokens[pos].type == TokenType.RBRACKET:
            return items, pos + 1

        while True:
            item, pos = self.evaluate_expression_value(tokens, pos)
            items.append(item)
            if pos < len(tokens) and tokens[pos].type == TokenType.COMMA:
                pos += 1
                continue
            self._expect(tokens, pos, TokenType.RBRACKET, ']')
            return items, pos + 1

    def _evaluate_object(self, tokens: List[Token], pos: int) -> Tuple[dict, int]:
        fields = {}
        if pos < len(tokens) and tokens[pos].type == TokenType.RBRACE:
            return fields, pos + 1

        while True:
            if pos >= len(tokens) or tokens[pos].type not in (TokenType.REF, TokenType.STRING):
                raise EvaluatorError("Expect a name or a string literal as object key")
            key_token = tokens[pos]
            key = key_token.value
            if key_token.type == TokenType.STRING:
                key = decode_string_literal(key)

            self._expect(tokens, pos + 1, TokenType.COLON, ':')
            fields[key], pos = self.evaluate_expression_value(tokens, pos + 2)

            if pos < len(tokens) and tokens[pos].type == TokenType.COMMA:
                pos += 1
                continue
            self._expect(tokens, pos, TokenType.RBRACE, '}')
            return fields, pos + 1

    def _expect(self, tokens: List[Token], pos: int, token_type: TokenType, text: str):
        if pos >= len(tokens):
            raise EvaluatorError(f"Expect '{text}' but the expression ended")
        if tokens[pos].type != token_type:
            raise EvaluatorError(
                f"Expect '{text}' at position {tokens[pos].position}, "
                f"but found {tokens[pos].value!r}"
            )

    # Reduction passes

    def _reduce(self, parts: List[Any]) -> Any:
        parts = self._reduce_unary(parts)
        for symbols in PRECEDENCE:
            parts = self._reduce_binary(parts, symbols)
        parts = self._reduce_ternary(parts)

        if len(parts) != 1:
            operator = next(part for part in parts if isinstance(part, Operator))
            raise EvaluatorError(
                f"Operator {operator.symbol!r} at position {operator.position} was not consumed"
            )
        return parts[0]

    def _reduce_unary(self, parts: List[Any]) -> List[Any]:
        """Apply prefix operators right-to-left so `!!x` negates twice."""
        result: List[Any] = []
        for part in reversed(parts):
            if isinstance(part, Operator) and part.unary:
                result[-1] = apply_unary(part.symbol, result[-1])
            else:
                result.append(part)
        result.reverse()
        return result

    def _reduce_binary(self, parts: List[Any], symbols: Tuple[str, ...]) -> List[Any]:
        """Collapse `value op value` triples for one precedence level, left-to-right."""
        result: List[Any] = []
        for part in parts:
            if (
                not isinstance(part, Operator)
                and len(result) >= 2
                and isinstance(result[-1], Operator)
                and result[-1].symbol in symbols
            ):
                operator = result.pop()
                left = result.pop()
                result.append(apply_binary(operator.symbol, left, part))
            else:
                result.append(part)
        return result

    def _reduce_ternary(self, parts: List[Any]) -> List[Any]:
        """Collapse `cond ? a : b` right-to-left so nested ternaries nest in the else branch."""
        parts = list(parts)
        while True:
            index = self._last_operator(parts, '?')
            if index is None:
                break

            question = parts[index]
            if index + 2 >= len(parts) or not self._is_operator(parts[index + 2], ':'):
                raise EvaluatorError(
                    f"Expect ':' for the ternary operator at position {question.position}"
                )

            condition = parts[index - 1]
            chosen = parts[index + 1] if is_truthy(condition) else parts[index + 3]
            parts[index - 1:index + 4] = [chosen]

        return parts

    def _last_operator(self, parts: List[Any], symbol: str):
        for index in range(len(parts) - 1, -1, -1):
            if self._is_operator(parts[index], symbol):
                return index
        return None

    def _is_operator(self, part: Any, symbol: str) -> bool:
        return isinstance(part, Operator) and part.symbol == symbol
