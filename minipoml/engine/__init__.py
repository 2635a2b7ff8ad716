"""
POML Engine Module

Provides the render engine, its scoped context, text interpolation and
the file loaders used by <include> and <let src>.
"""

from minipoml.engine.context import RenderContext, Scope
from minipoml.engine.interpolation import render_text
from minipoml.engine.loaders import DictLoader, FileLoader, FileSystemLoader
from minipoml.engine.renderer import Renderer

__all__ = [
    'RenderContext',
    'Scope',
    'render_text',
    'FileLoader',
    'FileSystemLoader',
    'DictLoader',
    'Renderer'
]
