"""
Markdown tag renderer.

Formatting rules:
- <p>, <h>: paragraph and header blocks followed by a blank line
- <b>, <i>, <s>/<strike>: **bold**, *italic*, ~~strikethrough~~
- <br/>: line break
- <section>: re-levels nested headers by one '#'
- <list>/<item>: dash, star, plus or decimal markers; multi-line items
  continue on tab-indented lines
- <code>: verbatim source between the tags, inline or fenced
- captioned blocks (<role>, <task>, <hint>, <cp>, ...): caption in one of
  the caption styles followed by the body
- <meta>: renders nothing
"""

import logging
from typing import Dict, List, Optional, Tuple

from minipoml.errors import RendererError
from minipoml.parser.ast import TagNode, WhitespaceNode
from minipoml.renderers.base import BaseTagRenderer
from minipoml.renderers.captions import (
    CaptionStyle,
    format_caption,
    get_caption_colon,
    get_caption_style
)
from minipoml.values import is_false_text

logger = logging.getLogger(__name__)

# Tag name -> (default caption, default caption style)
CAPTIONED_BLOCKS: Dict[str, Tuple[Optional[str], CaptionStyle]] = {
    'role': ('Role', CaptionStyle.HEADER),
    'task': ('Task', CaptionStyle.HEADER),
    'output-format': ('Output Format', CaptionStyle.HEADER),
    'stepwise-instructions': ('Stepwise Instructions', CaptionStyle.HEADER),
    'examples': ('Examples', CaptionStyle.HEADER),
    'cp': (None, CaptionStyle.HEADER),
    'hint': ('Hint', CaptionStyle.BOLD),
    'input': ('Input', CaptionStyle.BOLD),
    'output': ('Output', CaptionStyle.BOLD),
    'example': ('Example', CaptionStyle.HIDDEN),
}

LIST_MARKERS = {
    'dash': '- ',
    'star': '* ',
    'plus': '+ ',
}


def relevel_headers(children: List[str]) -> str:
    """Join children, adding one '#' to every child that starts with a header."""
    return ''.join(f"#{child}" if child.startswith('#') else child for child in children)


class MarkdownTagRenderer(BaseTagRenderer):
    """
    Renders POML tags as Markdown.

    Usage:
        renderer = Renderer.create_from_doc_and_variables(
            doc, variables, tag_renderer=MarkdownTagRenderer()
        )
    """

    name = "markdown"
    source_tags = frozenset({'code'})

    HANDLERS = {
        'poml': '_render_poml',
        'p': '_render_paragraph',
        'b': '_render_bold',
        'i': '_render_italic',
        's': '_render_strikethrough',
        'strike': '_render_strikethrough',
        'br': '_render_line_break',
        'code': '_render_code',
        'h': '_render_header',
        'section': '_render_section',
        'item': '_render_item',
        'list': '_render_list',
        'meta': '_render_meta',
    }

    def render_tag(self, tag, attributes, children, source):
        if tag.name in CAPTIONED_BLOCKS:
            return self._render_captioned_block(tag, attributes, children)

        handler_name = self.HANDLERS.get(tag.name)
        if handler_name is None:
            raise RendererError(f"Unknown tag: <{tag.name}>")
        return getattr(self, handler_name)(tag, attributes, children, source)

    def _render_poml(self, tag, attributes, children, source):
        return ''.join(
            result for node, result in zip(tag.children, children)
            if not isinstance(node, WhitespaceNode)
        )

    def _render_paragraph(self, tag, attributes, children, source):
        return f"{''.join(children).strip()}\n\n"

    def _render_bold(self, tag, attributes, children, source):
        return f"**{''.join(children)}**"

    def _render_italic(self, tag, attributes, children, source):
        return f"*{''.join(children)}*"

    def _render_strikethrough(self, tag, attributes, children, source):
        return f"~~{''.join(children)}~~"

    def _render_line_break(self, tag, attributes, children, source):
        return "\n"

    def _render_header(self, tag, attributes, children, source):
        return f"# {''.join(children).strip()}\n\n"

    def _render_section(self, tag, attributes, children, source):
        return relevel_headers(children)

    def _render_meta(self, tag, attributes, children, source):
        return ""

    def _render_code(self, tag: TagNode, attributes, children, source):
        """Code is sliced from the source, so it is never interpolated."""
        code = tag.inner_span.slice(source) if tag.inner_span is not None else ""
        logger.debug(f"Rendering <code> from source range {tag.inner_span}")

        inline = attributes.get('inline')
        if inline is not None and not is_false_text(inline):
            return f"`{code}`"

        lang = attributes.get('lang', '')
        code = code.strip('\n')
        return f"```{lang}\n{code}\n```\n\n"

    def _render_item(self, tag, attributes, children, source):
        lines = ''.join(children).strip().split('\n')
        return '\n\t'.join(lines) + '\n'

    def _render_list(self, tag: TagNode, attributes, children, source):
        list_style = attributes.get('listStyle', 'dash')
        if list_style not in LIST_MARKERS and list_style != 'decimal':
            raise RendererError(f"Unknown list style: {list_style}")

        lines = []
        counter = 0
        for node, result in zip(tag.children, children):
            # An <item> with a for loop renders every iteration into one result
            if not isinstance(node, TagNode) or node.name != 'item' or not result.strip():
                continue

            for line in result.rstrip('\n').split('\n'):
                if line.startswith('\t'):
                    lines.append(line)
                    continue
                counter += 1
                marker = f"{counter}. " if list_style == 'decimal' else LIST_MARKERS[list_style]
                lines.append(f"{marker}{line}")

        return '\n'.join(lines) + '\n\n'

    def _render_captioned_block(self, tag: TagNode, attributes: Dict[str, str], children: List[str]) -> str:
        default_caption, default_style = CAPTIONED_BLOCKS[tag.name]
        caption = attributes.get('caption', default_caption)
        if caption is None:
            raise RendererError(f"Missing `caption` attribute for the <{tag.name}> tag.")

        style = get_caption_style(attributes, default_style)
        colon = get_caption_colon(attributes, style)

        if style == CaptionStyle.HEADER:
            body = relevel_headers(children).strip()
        else:
            body = ''.join(children).strip()

        heading = format_caption(caption, style, colon)
        if style == CaptionStyle.HIDDEN:
            return f"{body}\n\n" if body else ""
        if not body:
            return f"{heading}\n\n"
        if style == CaptionStyle.HEADER or '\n' in body:
            return f"{heading}\n\n{body}\n\n"
        return f"{heading} {body}\n\n"
