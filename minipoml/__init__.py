"""
POML rendering for prompt templates.

This package parses POML, a tag-based prompt markup, and renders it to text:
- Tags: <poml><p>Hello, <b>{{ name }}</b>!</p></poml>
- Expressions: {{ price * 1.1 }}, {{ user.tags[0] }}, {{ a ? b : c }}
- Conditionals: <p if="{{ show }}">...</p>
- Loops: <item for="x in items">{{ x }}</item>
- Variables: <let name="n" value="3" type="integer"/>
- Includes: <include src="partials/header.poml"/>

Usage:
    from minipoml import render_poml

    output = render_poml(template_text, {'name': 'world'})
"""

from typing import Any, Dict, Optional

from minipoml.errors import PomlError, ParserError, EvaluatorError, RendererError
from minipoml.parser import PomlParser
from minipoml.engine import (
    DictLoader,
    FileLoader,
    FileSystemLoader,
    RenderContext,
    Renderer
)
from minipoml.renderers import (
    BaseTagRenderer,
    DebugTagRenderer,
    MarkdownTagRenderer,
    default_registry
)

__version__ = '0.1.0'


def render_poml(
    source: str,
    variables: Optional[Dict[str, Any]] = None,
    tag_renderer: Optional[BaseTagRenderer] = None,
    loader: Optional[FileLoader] = None
) -> str:
    """
    Render a POML document.

    Args:
        source: POML document text
        variables: Initial variable bindings
        tag_renderer: Output format (default: Markdown)
        loader: File loader for <include> and <let src>

    Returns:
        The rendered text

    Raises:
        PomlError: The first parser, evaluator or renderer error
    """
    renderer = Renderer.create_from_doc_and_variables(
        source,
        variables,
        tag_renderer=tag_renderer,
        loader=loader
    )
    return renderer.render()


__all__ = [
    'render_poml',
    'Renderer',
    'RenderContext',
    'PomlParser',
    'FileLoader',
    'FileSystemLoader',
    'DictLoader',
    'BaseTagRenderer',
    'DebugTagRenderer',
    'MarkdownTagRenderer',
    'default_registry',
    'PomlError',
    'ParserError',
    'EvaluatorError',
    'RendererError'
]
