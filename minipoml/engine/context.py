"""
Render context for the POML engine.

The context is a stack of scopes. Lookups walk the stack from the
innermost scope outwards and the first hit wins, so inner bindings
shadow outer ones. Assignments always go to the innermost scope.

Structure:
    [
        Scope({'name': 'world', 'items': [...]}),   # base scope from the caller
        Scope({'item': 1, 'loop': {...}}),          # pushed by a for loop
        Scope({'x': 2}),                            # pushed for a tag's children
    ]
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from minipoml.config import get_config
from minipoml.engine.loaders import FileLoader, FileSystemLoader
from minipoml.errors import RendererError
from minipoml.expression import evaluate_expression

logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """One layer of name to value bindings."""
    variables: Dict[str, Any] = field(default_factory=dict)

    def __contains__(self, name: str) -> bool:
        return name in self.variables

    def get(self, name: str) -> Any:
        return self.variables.get(name)

    def set(self, name: str, value: Any):
        self.variables[name] = value


class RenderContext:
    """
    Scoped variable bindings plus the file loader used while rendering.

    Args:
        variables: Initial bindings for the base scope
        loader: File loader for <include> and <let src>; defaults to a
            FileSystemLoader on the configured base directory
        max_include_depth: Limit for nested <include> chains
    """

    def __init__(
        self,
        variables: Optional[Dict[str, Any]] = None,
        loader: Optional[FileLoader] = None,
        max_include_depth: Optional[int] = None
    ):
        self.scopes: List[Scope] = [Scope(dict(variables or {}))]
        self.loader = loader or FileSystemLoader()
        self.max_include_depth = (
            max_include_depth if max_include_depth is not None
            else get_config().MAX_INCLUDE_DEPTH
        )
        self.include_chain: List[str] = []

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def get_value(self, name: str) -> Any:
        """Value bound to `name` in the innermost scope that has it, or None."""
        for scope in reversed(self.scopes):
            if name in scope:
                return scope.get(name)
        return None

    def has_value(self, name: str) -> bool:
        return any(name in scope for scope in self.scopes)

    def set_value(self, name: str, value: Any):
        """Bind `name` in the innermost scope."""
        self.scopes[-1].set(name, value)

    def push_scope(self):
        self.scopes.append(Scope())
        logger.debug(f"Pushed scope, depth {self.depth}")

    def pop_scope(self):
        if len(self.scopes) == 1:
            raise RendererError("Cannot pop the base scope of the render context")
        self.scopes.pop()
        logger.debug(f"Popped scope, depth {self.depth}")

    @contextmanager
    def scope(self) -> Iterator['RenderContext']:
        """Push a scope for the duration of the block; it is popped even on error."""
        self.push_scope()
        try:
            yield self
        finally:
            self.pop_scope()

    def evaluate(self, expression: str) -> Any:
        """Evaluate an expression against the current bindings."""
        return evaluate_expression(expression, self)

    def read_file_content(self, path: str) -> str:
        return self.loader.load(path)

    @contextmanager
    def including(self, path: str) -> Iterator[str]:
        """
        Track `path` on the include chain for the duration of the block.

        Raises:
            RendererError: If the file is already being included further up
                the chain, or the chain would exceed the depth limit
        """
        key = self.loader.resolve(path)
        if key in self.include_chain:
            chain = ' -> '.join(self.include_chain + [key])
            raise RendererError(f"Circular include detected: {chain}")
        if len(self.include_chain) >= self.max_include_depth:
            raise RendererError(
                f"Include depth exceeds the limit of {self.max_include_depth}: {path}"
            )

        self.include_chain.append(key)
        try:
            yield key
        finally:
            self.include_chain.pop()

    def clone(self) -> 'RenderContext':
        """Independent copy: changes to the clone never reach this context."""
        cloned = RenderContext.__new__(RenderContext)
        cloned.scopes = copy.deepcopy(self.scopes)
        cloned.loader = self.loader
        cloned.max_include_depth = self.max_include_depth
        cloned.include_chain = list(self.include_chain)
        return cloned
