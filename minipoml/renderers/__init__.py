"""
POML Tag Renderers Module

Pluggable output formats. Each renderer implements BaseTagRenderer and is
registered in the default registry under its name.
"""

from minipoml.renderers.base import (
    BaseTagRenderer,
    DebugTagRenderer,
    TagRendererRegistry
)
from minipoml.renderers.captions import CaptionStyle
from minipoml.renderers.markdown import MarkdownTagRenderer


def create_default_registry() -> TagRendererRegistry:
    """Create a registry with all built-in renderers."""
    registry = TagRendererRegistry()
    registry.register(MarkdownTagRenderer)
    registry.register(DebugTagRenderer)
    return registry


# Default global registry
default_registry = create_default_registry()


__all__ = [
    'BaseTagRenderer',
    'DebugTagRenderer',
    'MarkdownTagRenderer',
    'CaptionStyle',
    'TagRendererRegistry',
    'create_default_registry',
    'default_registry'
]
