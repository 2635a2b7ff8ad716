"""
Markup tokenizer for POML documents.

Splits the source text into a flat stream of elements:
- Tag: from '<' to the next unquoted '>' ("<p>", "</p>", "<br/>")
- Whitespace: a run of whitespace characters
- Text: anything else, up to the next '<' or line break
"""

from bisect import bisect_left
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from minipoml.errors import ParserError

WHITESPACE = ' \t\n\r\x0c'


class ElementKind(Enum):
    """Kinds of lexical elements."""
    TAG = 'TAG'
    TEXT = 'TEXT'
    WHITESPACE = 'WHITESPACE'


@dataclass
class Element:
    """A lexical element covering source[start:end]."""
    kind: ElementKind
    start: int
    end: int

    def __repr__(self):
        return f"Element({self.kind.name}, {self.start}, {self.end})"


class MarkupLexer:
    """
    Tokenizer for POML markup.

    Construction indexes the line-ending offsets (for (line, col)
    diagnostics) and moves the cursor to the first non-whitespace
    character of the document.
    """

    def __init__(self, source: str):
        self.source = source
        self.line_ends: List[int] = [
            pos for pos, char in enumerate(source) if char == '\n'
        ]
        if not source or source[-1] != '\n':
            self.line_ends.append(len(source))
        self.pos = self.skip_whitespace(0)

    def tokenize(self) -> List[Element]:
        """
        Tokenize the rest of the document.

        Returns:
            List of elements in document order
        """
        elements = []
        element = self.next_element()
        while element is not None:
            elements.append(element)
            element = self.next_element()
        return elements

    def next_element(self) -> Optional[Element]:
        """Classify the character at the cursor and consume one element."""
        if self.pos >= len(self.source):
            return None

        start = self.pos
        char = self.source[start]

        if char in WHITESPACE:
            end = self.skip_whitespace(start)
            kind = ElementKind.WHITESPACE
        elif char == '<':
            end = self._seek_tag_end(start + 1)
            if end is None:
                raise ParserError(
                    f"Tag starting at position {self.position_of(start)} is not complete",
                    position=self.position_of(start)
                )
            kind = ElementKind.TAG
        else:
            end = self._seek_text_end(start + 1)
            kind = ElementKind.TEXT

        self.pos = end
        return Element(kind, start, end)

    def skip_whitespace(self, pos: int) -> int:
        """First position at or after `pos` that is not whitespace."""
        while pos < len(self.source) and self.source[pos] in WHITESPACE:
            pos += 1
        return pos

    def position_of(self, pos: int) -> Tuple[int, int]:
        """
        Line and column of an offset, for error messages.

        Lines are counted from 0. The column is the distance from the
        preceding line break, so on lines after the first it starts at 1.
        """
        if pos >= len(self.source):
            return len(self.line_ends), 0
        line = bisect_left(self.line_ends, pos)
        offset = self.line_ends[line - 1] if line > 0 else 0
        return line, pos - offset

    def _seek_tag_end(self, pos: int) -> Optional[int]:
        """Position after the next '>' outside a quoted attribute value."""
        in_string = False
        while pos < len(self.source):
            char = self.source[pos]
            if char == '>' and not in_string:
                return pos + 1
            if char == '"':
                in_string = not in_string
            elif char == '\\' and in_string:
                # Skip the escaped character
                pos += 1
            pos += 1
        return None

    def _seek_text_end(self, pos: int) -> int:
        while pos < len(self.source) and self.source[pos] not in '<\r\n':
            pos += 1
        return pos
