"""
Text interpolation.

Replaces every {{ expression }} in a piece of text with the display text
of its value and resolves the named escapes:

    #quot; #apos; #amp; #lt; #gt; #hash; #lbrace; #rbrace;

A '#' that does not start a known escape is kept as is.
"""

from minipoml.errors import RendererError
from minipoml.values import display_text

EXPRESSION_START = '{{'
EXPRESSION_END = '}}'

ESCAPES = (
    ('#quot;', '"'),
    ('#apos;', "'"),
    ('#amp;', '&'),
    ('#lt;', '<'),
    ('#gt;', '>'),
    ('#hash;', '#'),
    ('#lbrace;', '{'),
    ('#rbrace;', '}'),
)


def render_text(text: str, context) -> str:
    """
    Interpolate expressions and resolve escapes in `text`.

    Args:
        text: Text content or unquoted attribute value
        context: RenderContext the expressions are evaluated against

    Returns:
        The rendered text

    Raises:
        RendererError: If an expression is not closed with '}}'
        EvaluatorError: If an expression fails to evaluate
    """
    if '{' not in text and '#' not in text:
        return text

    parts = []
    pos = 0
    while pos < len(text):
        if text.startswith(EXPRESSION_START, pos):
            end = text.find(EXPRESSION_END, pos + len(EXPRESSION_START))
            if end == -1:
                raise RendererError("Expression end not found in text content.")
            expression = text[pos + len(EXPRESSION_START):end]
            parts.append(display_text(context.evaluate(expression)))
            pos = end + len(EXPRESSION_END)
            continue

        if text[pos] == '#':
            for pattern, replacement in ESCAPES:
                if text.startswith(pattern, pos):
                    parts.append(replacement)
                    pos += len(pattern)
                    break
            else:
                parts.append('#')
                pos += 1
            continue

        parts.append(text[pos])
        pos += 1

    return ''.join(parts)
