"""
Exceptions raised while parsing, evaluating and rendering POML documents.

Every failure is terminal: the first error aborts the whole render and
propagates to the caller, optionally chained to the error that caused it
(decoding, I/O, number parsing).
"""

from typing import Optional, Tuple


class PomlError(Exception):
    """Base error for the POML renderer."""

    kind = "PomlError"

    def __init__(
        self,
        message: str,
        position: Optional[Tuple[int, int]] = None,
        cause: Optional[BaseException] = None
    ):
        self.message = message
        self.position = position
        self.cause = cause
        super().__init__(self.message)

    def __str__(self):
        text = f"{self.kind}: {self.message}"
        if self.cause is not None:
            text += f"\ncaused by {self.cause}"
        return text


class ParserError(PomlError):
    """Malformed markup: tag or attribute syntax, unbalanced tags, duplicate keys."""

    kind = "ParserError"


class EvaluatorError(PomlError):
    """Expression tokenizing or evaluation failure."""

    kind = "EvaluatorError"


class RendererError(PomlError):
    """Structural misuse of tags or attributes while rendering."""

    kind = "RendererError"
