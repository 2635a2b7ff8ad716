"""
POML Parser Module

Provides tokenizing of POML markup into elements and building of the tag tree.
"""

from minipoml.parser.lexer import Element, ElementKind, MarkupLexer
from minipoml.parser.ast import (
    Span,
    PomlNode,
    TagNode,
    TextNode,
    WhitespaceNode,
    unquote
)
from minipoml.parser.parser import PomlParser, ROOT_TAG

__all__ = [
    'Element',
    'ElementKind',
    'MarkupLexer',
    'PomlParser',
    'ROOT_TAG',
    'Span',
    'PomlNode',
    'TagNode',
    'TextNode',
    'WhitespaceNode',
    'unquote'
]
