"""
Tree nodes for parsed POML documents.

Nodes keep (start, end) offsets into the immutable source text; text is
materialized once when the node is built.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class Span:
    """Half-open [start, end) range of offsets into the source text."""
    start: int = 0
    end: int = 0

    def slice(self, source: str) -> str:
        return source[self.start:self.end]


@dataclass
class PomlNode:
    """Base class for all tree nodes."""
    span: Span = field(default_factory=Span)

    def accept(self, visitor):
        """Accept a visitor (for visitor pattern)."""
        method_name = f'visit_{self.__class__.__name__}'
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


@dataclass
class TextNode(PomlNode):
    """
    A run of text without line breaks.

    Example: "Hello, {{ name }}!" in <p>Hello, {{ name }}!</p>
    """
    content: str = ""


@dataclass
class WhitespaceNode(PomlNode):
    """A run of whitespace between elements. Renders as a single space."""


@dataclass
class TagNode(PomlNode):
    """
    A tag with its attributes and children.

    Attributes:
        name: Tag name, e.g. 'p' or 'let'
        attributes: Ordered (key, raw value) pairs; the raw value keeps its quotes
        children: Child nodes in document order
        inner_span: Range between the end of the open tag and the start of the
            close tag; None for self-closing and synthesized tags
    """
    name: str = ""
    attributes: List[Tuple[str, str]] = field(default_factory=list)
    children: List[PomlNode] = field(default_factory=list)
    inner_span: Optional[Span] = None

    def get_attribute(self, key: str) -> Optional[str]:
        """Unquoted raw value of an attribute, or None if absent."""
        for name, raw_value in self.attributes:
            if name == key:
                return unquote(raw_value)
        return None

    def has_attribute(self, key: str) -> bool:
        return any(name == key for name, _ in self.attributes)


def unquote(raw_value: str) -> str:
    """Strip the surrounding double quotes of a raw attribute value."""
    return raw_value[1:-1]
