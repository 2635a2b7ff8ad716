"""
Caption handling for captioned blocks (<role>, <task>, <hint>, <cp>, ...).

A captioned block has a caption and a body. How the caption is shown is
controlled by two attributes:
- captionStyle: hidden | bold | header | plain
- captionColon: whether a ':' follows the caption
"""

import logging
from enum import Enum
from typing import Dict

from minipoml.values import is_false_text

logger = logging.getLogger(__name__)


class CaptionStyle(Enum):
    """Presentation styles of a caption."""
    HIDDEN = 'hidden'
    BOLD = 'bold'
    HEADER = 'header'
    PLAIN = 'plain'

    @property
    def default_colon(self) -> bool:
        return self in (CaptionStyle.BOLD, CaptionStyle.PLAIN)


def get_caption_style(attributes: Dict[str, str], default: CaptionStyle) -> CaptionStyle:
    """Caption style from the `captionStyle` attribute, or `default` when absent or invalid."""
    value = attributes.get('captionStyle')
    if value is None:
        return default

    try:
        return CaptionStyle(value.strip())
    except ValueError:
        logger.warning(f"Invalid captionStyle {value!r}, falling back to {default.value}")
        return default


def get_caption_colon(attributes: Dict[str, str], style: CaptionStyle) -> bool:
    value = attributes.get('captionColon')
    if value is None:
        return style.default_colon
    return not is_false_text(value)


def format_caption(caption: str, style: CaptionStyle, colon: bool) -> str:
    """
    Caption text for a style, without the body.

    Examples:
        header -> "# Task"
        bold   -> "**Hint:**"
        plain  -> "Hint:"
        hidden -> ""
    """
    text = f"{caption}:" if colon else caption

    if style == CaptionStyle.HEADER:
        return f"# {text}"
    if style == CaptionStyle.BOLD:
        return f"**{text}**"
    if style == CaptionStyle.PLAIN:
        return text
    return ""
