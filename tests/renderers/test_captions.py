"""
Tests for caption styles
"""

import pytest

from minipoml.renderers.captions import (
    CaptionStyle,
    format_caption,
    get_caption_colon,
    get_caption_style
)


class TestCaptionStyle:
    """Tests for reading caption attributes"""

    def test_default_when_absent(self):
        assert get_caption_style({}, CaptionStyle.BOLD) == CaptionStyle.BOLD

    @pytest.mark.parametrize('value,expected', [
        ('hidden', CaptionStyle.HIDDEN),
        ('bold', CaptionStyle.BOLD),
        ('header', CaptionStyle.HEADER),
        (' plain ', CaptionStyle.PLAIN),
    ])
    def test_from_attribute(self, value, expected):
        assert get_caption_style({'captionStyle': value}, CaptionStyle.BOLD) == expected

    def test_invalid_value_falls_back(self):
        assert get_caption_style({'captionStyle': 'Header'}, CaptionStyle.PLAIN) == CaptionStyle.PLAIN

    def test_default_colon_per_style(self):
        assert get_caption_colon({}, CaptionStyle.BOLD)
        assert get_caption_colon({}, CaptionStyle.PLAIN)
        assert not get_caption_colon({}, CaptionStyle.HEADER)
        assert not get_caption_colon({}, CaptionStyle.HIDDEN)

    @pytest.mark.parametrize('value,expected', [('true', True), ('false', False), ('0', False), ('yes', True)])
    def test_colon_attribute(self, value, expected):
        assert get_caption_colon({'captionColon': value}, CaptionStyle.HEADER) == expected


class TestFormatCaption:
    """Tests for format_caption()"""

    @pytest.mark.parametrize('style,colon,expected', [
        (CaptionStyle.HEADER, False, '# Task'),
        (CaptionStyle.HEADER, True, '# Task:'),
        (CaptionStyle.BOLD, True, '**Task:**'),
        (CaptionStyle.PLAIN, False, 'Task'),
        (CaptionStyle.HIDDEN, True, ''),
    ])
    def test_format(self, style, colon, expected):
        assert format_caption('Task', style, colon) == expected
