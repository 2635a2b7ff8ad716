"""
Tree builder for POML documents.

Consumes the element stream of the markup lexer and builds a tag tree
with an explicit stack of open tags. The resulting document always has
exactly one top-level `poml` tag: when the document has no explicit
<poml> wrapper one is synthesized around its content.
"""

import logging
from typing import List, Optional, Tuple

from minipoml.errors import ParserError
from minipoml.parser.lexer import Element, ElementKind, MarkupLexer, WHITESPACE
from minipoml.parser.ast import Span, TagNode, TextNode, WhitespaceNode

logger = logging.getLogger(__name__)

ROOT_TAG = 'poml'


class PomlParser:
    """
    Parser for POML markup.

    Usage:
        parser = PomlParser(source)
        root = parser.parse_as_node()
    """

    def __init__(self, source: str):
        self.source = source
        self.lexer = MarkupLexer(source)

    def parse_as_elements(self) -> List[Element]:
        """Tokenize the document into lexical elements."""
        return self.lexer.tokenize()

    def parse_as_node(self) -> TagNode:
        """
        Parse the document into a tag tree.

        Returns:
            The `poml` root TagNode

        Raises:
            ParserError: On malformed tags or attributes, unbalanced tags,
                or content after the end of the document
        """
        elements = self.parse_as_elements()
        if not elements:
            raise ParserError("Document is empty")

        stack: List[TagNode] = []
        implicit_root = False
        document: Optional[TagNode] = None

        for element in elements:
            if document is not None:
                if element.kind == ElementKind.WHITESPACE:
                    continue
                raise ParserError(
                    f"Content appears at position {self._position(element.start)} "
                    f"after the end of the document",
                    position=self._position(element.start)
                )

            if element.kind == ElementKind.WHITESPACE:
                stack[-1].children.append(
                    WhitespaceNode(span=Span(element.start, element.end))
                )
                continue

            if element.kind == ElementKind.TEXT:
                if not stack:
                    stack.append(self._implicit_root())
                    implicit_root = True
                stack[-1].children.append(TextNode(
                    content=self.source[element.start:element.end],
                    span=Span(element.start, element.end)
                ))
                continue

            if self._is_close_tag(element):
                document = self._close_tag(element, stack)
                continue

            tag = self._create_tag(element)

            if tag.name == ROOT_TAG and self._is_self_close_tag(element):
                raise ParserError(
                    f"<{ROOT_TAG}> tag should not close itself.",
                    position=self._position(element.start)
                )

            if not stack and tag.name != ROOT_TAG:
                stack.append(self._implicit_root())
                implicit_root = True

            if self._is_self_close_tag(element):
                stack[-1].children.append(tag)
            else:
                stack.append(tag)

        if document is not None:
            return document

        if implicit_root and len(stack) == 1:
            logger.debug(f"Synthesized implicit <{ROOT_TAG}> root")
            return stack.pop()

        raise ParserError("Document has not finished at the end")

    def _close_tag(self, element: Element, stack: List[TagNode]) -> Optional[TagNode]:
        """
        Pop the matching open tag and attach it to its parent.

        Returns:
            The closed tag if it was the outermost one (document complete),
            otherwise None
        """
        if not stack:
            raise ParserError(
                f"Close tag appears without an open tag at position {self._position(element.start)}",
                position=self._position(element.start)
            )

        node = stack.pop()
        tag_name, _ = self._consume_key(element.start + 2)
        if tag_name != node.name:
            raise ParserError(
                f"Close tag of </{tag_name}> appears at position {self._position(element.start)}, "
                f"but the open tag is <{node.name}> at position {self._position(node.span.start)}",
                position=self._position(element.start)
            )

        node.inner_span = Span(node.span.end, element.start)
        node.span = Span(node.span.start, element.end)

        if stack:
            stack[-1].children.append(node)
            return None
        return node

    def _create_tag(self, element: Element) -> TagNode:
        """Build a TagNode from an open or self-closing tag element."""
        tag_name, pos = self._consume_key(element.start + 1)
        if not tag_name:
            raise ParserError(
                f"Tag name is missing at position {self._position(element.start)}",
                position=self._position(element.start)
            )

        # The closing '>' (and '/' of self-closing tags) is excluded from the scan
        end = element.end - 1
        attributes: List[Tuple[str, str]] = []

        while True:
            pos = self._consume_space(pos, end)
            if pos >= end or not self.source[pos].isalnum():
                break

            attribute_start = pos
            attribute_name, pos = self._consume_key(pos)
            if any(key == attribute_name for key, _ in attributes):
                raise ParserError(
                    f"Duplicate attribute key at position {self._position(attribute_start)}: "
                    f"{attribute_name}",
                    position=self._position(attribute_start)
                )

            pos = self._consume_space(pos, end)
            if pos >= end or self.source[pos] != '=':
                raise ParserError(
                    f"Expect '=' for attribute declaration at position {self._position(pos)}, "
                    f"but not found.",
                    position=self._position(pos)
                )

            pos = self._consume_space(pos + 1, end)
            if pos >= end or self.source[pos] != '"':
                raise ParserError(
                    f"Expect '\"' for attribute value at position {self._position(pos)}, "
                    f"but not found.",
                    position=self._position(pos)
                )

            attribute_value, pos = self._consume_value_literal(pos, end)
            attributes.append((attribute_name, attribute_value))

        if pos < end and not (self.source[pos] == '/' and pos == end - 1):
            raise ParserError(
                f"Unexpected character {self.source[pos]!r} in tag at position {self._position(pos)}",
                position=self._position(pos)
            )

        return TagNode(
            name=tag_name,
            attributes=attributes,
            span=Span(element.start, element.end)
        )

    def _implicit_root(self) -> TagNode:
        return TagNode(name=ROOT_TAG, span=Span(0, len(self.source)))

    def _is_self_close_tag(self, element: Element) -> bool:
        return element.kind == ElementKind.TAG and self.source[element.end - 2] == '/'

    def _is_close_tag(self, element: Element) -> bool:
        return element.kind == ElementKind.TAG and self.source[element.start + 1] == '/'

    def _consume_key(self, pos: int) -> Tuple[str, int]:
        """
        Consume a tag or attribute name.

        Returns:
            The name and the position right after it
        """
        start = pos
        while pos < len(self.source):
            char = self.source[pos]
            if char.isalnum() or char in '-_':
                pos += 1
            else:
                break
        return self.source[start:pos], pos

    def _consume_value_literal(self, pos: int, end: int) -> Tuple[str, int]:
        """
        Consume a double-quoted attribute value starting at `pos`.

        A backslash escapes the following character.

        Returns:
            The raw literal including its quotes and the position after
            the closing quote
        """
        cursor = pos + 1
        while cursor < end:
            char = self.source[cursor]
            if char == '\\':
                cursor += 2
            elif char == '"':
                return self.source[pos:cursor + 1], cursor + 1
            else:
                cursor += 1

        raise ParserError(
            f"String literal has not reach an end at position {self._position(min(cursor, end))}",
            position=self._position(min(cursor, end))
        )

    def _consume_space(self, pos: int, end: int) -> int:
        while pos < end and self.source[pos] in WHITESPACE:
            pos += 1
        return pos

    def _position(self, pos: int) -> Tuple[int, int]:
        return self.lexer.position_of(pos)
