"""
Base classes for tag renderers.

A tag renderer turns one tag, its substituted attributes and the rendered
output of its children into text. The render engine handles control flow
(`if`, `for`), <let> and <include>; everything else is delegated here.
"""

import copy
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, List, Optional, Type

from minipoml.errors import RendererError
from minipoml.parser.ast import TagNode


class BaseTagRenderer(ABC):
    """
    Base class for all tag renderers.

    Subclasses must implement:
    - name: The renderer name (e.g., 'markdown')
    - render_tag(): The formatting logic

    Tags listed in `source_tags` are rendered from the document source
    text; the engine does not render their children, so expressions
    inside them are never substituted.
    """

    name: str = ""
    source_tags: FrozenSet[str] = frozenset()

    @abstractmethod
    def render_tag(
        self,
        tag: TagNode,
        attributes: Dict[str, str],
        children: List[str],
        source: str
    ) -> str:
        """
        Render a tag.

        Args:
            tag: The tag node
            attributes: Attribute values after interpolation, in document order
            children: Rendered output of each child, aligned with tag.children
            source: The full source text of the document the tag belongs to

        Returns:
            The rendered text

        Raises:
            RendererError: If the tag is unknown or misused
        """
        pass

    def clone(self) -> 'BaseTagRenderer':
        """Copy used to render included documents."""
        return copy.copy(self)

    def __repr__(self):
        return f"<TagRenderer: {self.name}>"


class DebugTagRenderer(BaseTagRenderer):
    """
    Renders every tag back as markup with its substituted attributes.

    Useful to inspect what the engine passes to a renderer:
        <p x="{{ 1 + 1 }}">hi</p>  ->  <p x="2">hi</p>
    """

    name = "debug"

    def render_tag(self, tag, attributes, children, source):
        rendered_attributes = ''.join(f' {key}="{value}"' for key, value in attributes.items())
        return f"<{tag.name}{rendered_attributes}>{''.join(children)}</{tag.name}>"


class TagRendererRegistry:
    """
    Registry of available tag renderers.

    Allows looking up renderers by name and registering custom renderers.
    """

    def __init__(self):
        self._renderers: Dict[str, Type[BaseTagRenderer]] = {}

    def register(self, renderer_class: Type[BaseTagRenderer]):
        """Register a renderer class under its name."""
        self._renderers[renderer_class.name.lower()] = renderer_class

    def get(self, name: str) -> Optional[Type[BaseTagRenderer]]:
        return self._renderers.get(name.lower())

    def has(self, name: str) -> bool:
        return name.lower() in self._renderers

    def list_renderers(self) -> List[str]:
        return list(self._renderers.keys())

    def create(self, name: str) -> BaseTagRenderer:
        """
        Instantiate a renderer by name.

        Raises:
            RendererError: If no renderer is registered under that name
        """
        renderer_class = self.get(name)
        if renderer_class is None:
            raise RendererError(f"Unknown tag renderer: {name}")
        return renderer_class()
