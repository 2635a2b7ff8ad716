"""
Render engine for POML documents.

Walks the tag tree and produces the output text:
- `if` and `for` control attributes
- <let> variable bindings and <include> of other documents
- {{ expression }} interpolation in text and attribute values
- every other tag is formatted by the pluggable tag renderer
"""

import dataclasses
import logging
import re
from typing import Any, Dict, List, Optional

from minipoml.engine.context import RenderContext
from minipoml.engine.interpolation import render_text
from minipoml.engine.loaders import FileLoader
from minipoml.errors import RendererError
from minipoml.parser.ast import PomlNode, TagNode, TextNode, WhitespaceNode, unquote
from minipoml.parser.parser import PomlParser
from minipoml.renderers.base import BaseTagRenderer
from minipoml.renderers.markdown import MarkdownTagRenderer
from minipoml.values import (
    infer_value,
    is_false_text,
    parse_object,
    parse_typed_value
)

logger = logging.getLogger(__name__)

CONTROL_ATTRIBUTES = ('if', 'for')

LOOP_SEPARATOR = ' in '
LOOP_VARIABLE = 'loop'

IDENTIFIER_PATTERN = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')


class Renderer:
    """
    Renders one POML document.

    Usage:
        renderer = Renderer.create_from_doc_and_variables(doc, {'name': 'world'})
        output = renderer.render()
    """

    def __init__(self, source: str, context: RenderContext, tag_renderer: BaseTagRenderer):
        self.source = source
        self.context = context
        self.tag_renderer = tag_renderer

    @classmethod
    def create_from_doc_and_variables(
        cls,
        source: str,
        variables: Optional[Dict[str, Any]] = None,
        tag_renderer: Optional[BaseTagRenderer] = None,
        loader: Optional[FileLoader] = None,
        max_include_depth: Optional[int] = None
    ) -> 'Renderer':
        """
        Build a renderer from document text and initial variable bindings.

        Args:
            source: POML document text
            variables: Bindings for the base scope
            tag_renderer: Output format (default: Markdown)
            loader: File loader for <include> and <let src>
            max_include_depth: Limit for nested <include> chains
        """
        context = RenderContext(variables, loader=loader, max_include_depth=max_include_depth)
        return cls(source, context, tag_renderer or MarkdownTagRenderer())

    def render(self) -> str:
        """
        Parse the document and render it.

        Raises:
            ParserError: If the document is malformed
            EvaluatorError: If an expression fails
            RendererError: If tags or attributes are misused
        """
        root = PomlParser(self.source).parse_as_node()
        return root.accept(self)

    # Node visitors

    def visit_TextNode(self, node: TextNode) -> str:
        return render_text(node.content, self.context)

    def visit_WhitespaceNode(self, node: WhitespaceNode) -> str:
        return " "

    def visit_TagNode(self, tag: TagNode) -> str:
        has_if = tag.has_attribute('if')
        has_for = tag.has_attribute('for')

        if has_if and has_for:
            raise RendererError(
                f"Control flow attributes `if` and `for` on the same node is not supported: <{tag.name}>"
            )

        if has_if:
            condition = render_text(tag.get_attribute('if'), self.context)
            if is_false_text(condition):
                return ""

        if has_for:
            return self._render_loop(tag)

        return self._render_tag(tag)

    def generic_visit(self, node: PomlNode) -> str:
        raise RendererError(f"Unknown node type: {type(node).__name__}")

    # Tags

    def _render_loop(self, tag: TagNode) -> str:
        """Render the tag once per item of the `for="name in expression"` range."""
        instruction = tag.get_attribute('for')
        components = instruction.split(LOOP_SEPARATOR)
        if len(components) != 2:
            raise RendererError(f"Invalid for-loop attribute value: {instruction}")

        item_name = components[0].strip()
        range_expression = components[1].strip()
        if not IDENTIFIER_PATTERN.fullmatch(item_name):
            raise RendererError(f"Invalid for-loop variable name: {item_name!r}")

        items = self.context.evaluate(range_expression)
        if not isinstance(items, list):
            raise RendererError(f"For loop range is not an array: {range_expression}")

        body = dataclasses.replace(
            tag,
            attributes=[(key, raw) for key, raw in tag.attributes if key != 'for']
        )

        results = []
        with self.context.scope():
            for index, item in enumerate(items):
                self.context.set_value(item_name, item)
                self.context.set_value(LOOP_VARIABLE, {
                    'index': index,
                    'length': len(items),
                    'first': index == 0,
                    'last': index == len(items) - 1
                })
                results.append(self._render_tag(body))

        return ''.join(results)

    def _render_tag(self, tag: TagNode) -> str:
        attributes = {
            key: render_text(unquote(raw), self.context)
            for key, raw in tag.attributes
            if key not in CONTROL_ATTRIBUTES
        }

        if tag.name == 'include':
            return self._process_include(attributes)

        children: List[str] = []
        if tag.children and tag.name not in self.tag_renderer.source_tags:
            with self.context.scope():
                children = [child.accept(self) for child in tag.children]

        if tag.name == 'let':
            return self._process_let(tag, attributes, children)

        return self.tag_renderer.render_tag(tag, attributes, children, self.source)

    def _process_let(self, tag: TagNode, attributes: Dict[str, str], children: List[str]) -> str:
        """
        Bind a variable in the current scope.

        The value comes from exactly one of: the `value` attribute, the file
        named by `src`, or the rendered children. With `name` the value is
        parsed by `type` (or inferred); without `name` it must be a JSON
        object whose fields are all bound.
        """
        sources = []
        if 'value' in attributes:
            sources.append(attributes['value'])
        if 'src' in attributes:
            sources.append(self.context.read_file_content(attributes['src']))
        if tag.children:
            sources.append(''.join(children))

        if not sources:
            raise RendererError("No value is provided for the <let> node")
        if len(sources) > 1:
            raise RendererError("More than one value is provided for the <let> node.")
        text = sources[0]

        name = attributes.get('name')
        if name is None:
            fields = parse_object(text)
            if fields is None:
                raise RendererError("Only object value can be used to set context variables")
            for key, value in fields.items():
                self.context.set_value(key, value)
            return ""

        value_type = attributes.get('type')
        if value_type is None:
            value = infer_value(text)
        else:
            value = parse_typed_value(text, value_type)

        self.context.set_value(name, value)
        return ""

    def _process_include(self, attributes: Dict[str, str]) -> str:
        """Render another document with a copy of the current context."""
        src = attributes.get('src')
        if src is None:
            raise RendererError("`src` attribute not found on <include>.")

        context = self.context.clone()
        with context.including(src):
            logger.debug(f"Including {src} at depth {len(context.include_chain)}")
            source = context.read_file_content(src)
            renderer = Renderer(source, context, self.tag_renderer.clone())
            return renderer.render()
