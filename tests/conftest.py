"""
Pytest fixtures for POML tests
"""

import pytest

from minipoml.engine import DictLoader, RenderContext
from minipoml.renderers import DebugTagRenderer, MarkdownTagRenderer


@pytest.fixture
def variables():
    """Sample variables for rendering"""
    return {
        'name': 'world',
        'count': 3,
        'price': 2.5,
        'enabled': True,
        'nothing': None,
        'items': ['a', 'b', 'c'],
        'user': {
            'name': 'Ada',
            'tags': ['admin', 'dev'],
            'address': {'city': 'London'}
        }
    }


@pytest.fixture
def context(variables):
    """Render context over the sample variables with an empty in-memory loader"""
    return RenderContext(variables, loader=DictLoader({}))


@pytest.fixture
def markdown_renderer():
    return MarkdownTagRenderer()


@pytest.fixture
def debug_renderer():
    return DebugTagRenderer()
