"""
POML Expression Module

Provides tokenizing and evaluation of the expressions embedded in
templates with {{ ... }}.
"""

from typing import Any

from minipoml.expression.tokenizer import Token, TokenType, ExpressionTokenizer, tokenize_expression
from minipoml.expression.evaluator import ExpressionEvaluator, Operator
from minipoml.expression.operators import apply_binary, apply_unary


def evaluate_expression(expression: str, context) -> Any:
    """
    Tokenize and evaluate an expression.

    Args:
        expression: Expression text without the surrounding braces
        context: Anything with a `get_value(name)` method

    Returns:
        The resulting value
    """
    return ExpressionEvaluator(context).evaluate(tokenize_expression(expression))


__all__ = [
    'Token',
    'TokenType',
    'ExpressionTokenizer',
    'tokenize_expression',
    'ExpressionEvaluator',
    'Operator',
    'apply_binary',
    'apply_unary',
    'evaluate_expression'
]
