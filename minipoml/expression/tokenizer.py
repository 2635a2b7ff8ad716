"""
Tokenizer for template expressions.

Turns the text between '{{' and '}}' into tokens for the evaluator.

Supported syntax:
- References: name, user_1 (true, false and null are resolved by the evaluator)
- Numbers: 12, 1.5, .5
- Strings: 'single' or "double" quoted, backslash escapes
- Operators: + - * / % < <= > >= === !== && || ! in
- Punctuation: ( ) [ ] { } , : . ?
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from minipoml.errors import EvaluatorError


class TokenType(Enum):
    """Token types for expressions."""
    # Values
    REF = 'REF'
    NUMBER = 'NUMBER'
    STRING = 'STRING'

    # Every binary operator plus the `in` keyword
    OPERATOR = 'OPERATOR'

    # Structure
    LPAREN = 'LPAREN'           # (
    RPAREN = 'RPAREN'           # )
    LBRACKET = 'LBRACKET'       # [
    RBRACKET = 'RBRACKET'       # ]
    LBRACE = 'LBRACE'           # {
    RBRACE = 'RBRACE'           # }
    COMMA = 'COMMA'             # ,
    COLON = 'COLON'             # :
    DOT = 'DOT'                 # .
    EXCLAMATION = 'EXCLAMATION' # !
    QUESTION = 'QUESTION'       # ?


@dataclass
class Token:
    """A token produced by the expression tokenizer."""
    type: TokenType
    value: str
    position: int = 0

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


PUNCTUATION = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    ',': TokenType.COMMA,
    ':': TokenType.COLON,
    '?': TokenType.QUESTION,
}

KEYWORD_OPERATORS = ('in',)


def is_digit(char: str) -> bool:
    return '0' <= char <= '9'


def is_identifier_start(char: str) -> bool:
    return char.isalpha() or char == '_'


def is_identifier_char(char: str) -> bool:
    return char.isalnum() or char == '_'


class ExpressionTokenizer:
    """Tokenizer for a single expression."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """
        Tokenize the whole expression.

        Returns:
            List of tokens

        Raises:
            EvaluatorError: On unsupported characters or operators,
                unterminated strings and malformed numbers
        """
        self.tokens = []
        self.pos = 0

        while self.pos < len(self.text):
            char = self.text[self.pos]

            if char.isspace():
                self.pos += 1
            elif is_identifier_start(char):
                self._read_identifier()
            elif is_digit(char):
                self._read_number()
            elif char == '.':
                self._read_dot()
            elif char in ('"', "'"):
                self._read_string(char)
            elif char in '+-*/%':
                self._add(TokenType.OPERATOR, char)
            elif char in '&|':
                if self._peek(2) != char * 2:
                    raise EvaluatorError(f"Operator {char!r} has not been supported!")
                self._add(TokenType.OPERATOR, char * 2)
            elif char in '<>':
                if self._peek(2) == char + '=':
                    self._add(TokenType.OPERATOR, char + '=')
                else:
                    self._add(TokenType.OPERATOR, char)
            elif char == '=':
                if self._peek(3) != '===':
                    raise EvaluatorError("Operator '=' has not been supported, use '==='")
                self._add(TokenType.OPERATOR, '===')
            elif char == '!':
                if self._peek(3) == '!==':
                    self._add(TokenType.OPERATOR, '!==')
                else:
                    self._add(TokenType.EXCLAMATION, '!')
            elif char in PUNCTUATION:
                self._add(PUNCTUATION[char], char)
            else:
                raise EvaluatorError(f"Invalid char {char!r} encountered in expression")

        return self.tokens

    def _read_identifier(self):
        start = self.pos
        self.pos += 1
        while self.pos < len(self.text) and is_identifier_char(self.text[self.pos]):
            self.pos += 1

        value = self.text[start:self.pos]
        token_type = TokenType.OPERATOR if value in KEYWORD_OPERATORS else TokenType.REF
        self.tokens.append(Token(token_type, value, start))

    def _read_number(self):
        """Read a number literal; at most one dot is accepted."""
        start = self.pos
        has_dot = False

        while self.pos < len(self.text):
            char = self.text[self.pos]
            if is_digit(char):
                self.pos += 1
            elif char == '.':
                if has_dot:
                    raise EvaluatorError(
                        f"Multiple dots found in a number literal: {self.text[start:self.pos + 1]}"
                    )
                has_dot = True
                self.pos += 1
            else:
                break

        self.tokens.append(Token(TokenType.NUMBER, self.text[start:self.pos], start))

    def _read_dot(self):
        """A dot is a number (.5) when a digit follows, field access otherwise."""
        if self.pos + 1 >= len(self.text):
            raise EvaluatorError("No content following dot operator.")
        if is_digit(self.text[self.pos + 1]):
            self._read_number()
        else:
            self._add(TokenType.DOT, '.')

    def _read_string(self, quote: str):
        """Read a string literal; the token value keeps its quotes."""
        start = self.pos
        cursor = start + 1

        while cursor < len(self.text):
            char = self.text[cursor]
            if char == quote:
                self.pos = cursor + 1
                self.tokens.append(Token(TokenType.STRING, self.text[start:self.pos], start))
                return
            cursor += 2 if char == '\\' else 1

        raise EvaluatorError(f"String literal doesn't end in the expression: {self.text[start:]}")

    def _peek(self, count: int) -> str:
        return self.text[self.pos:self.pos + count]

    def _add(self, token_type: TokenType, value: str):
        self.tokens.append(Token(token_type, value, self.pos))
        self.pos += len(value)


def tokenize_expression(text: str) -> List[Token]:
    """Tokenize an expression string."""
    return ExpressionTokenizer(text).tokenize()
