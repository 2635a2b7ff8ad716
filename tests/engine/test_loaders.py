"""
Tests for file loaders
"""

import os

import pytest

from minipoml.config import get_config
from minipoml.engine import DictLoader, FileSystemLoader
from minipoml.errors import RendererError


class TestFileSystemLoader:
    """Tests for FileSystemLoader"""

    def test_load_relative_to_base_dir(self, tmp_path):
        (tmp_path / 'partials').mkdir()
        (tmp_path / 'partials' / 'header.poml').write_text('<p>Header</p>', encoding='utf-8')

        loader = FileSystemLoader(str(tmp_path))
        assert loader.load('partials/header.poml') == '<p>Header</p>'

    def test_resolve_normalizes(self, tmp_path):
        loader = FileSystemLoader(str(tmp_path))
        assert loader.resolve('a/../b.poml') == os.path.join(str(tmp_path), 'b.poml')

    def test_missing_file(self, tmp_path):
        loader = FileSystemLoader(str(tmp_path))
        with pytest.raises(RendererError) as exc_info:
            loader.load('missing.poml')
        assert isinstance(exc_info.value.cause, OSError)
        assert 'caused by' in str(exc_info.value)

    def test_decoding_error(self, tmp_path):
        (tmp_path / 'latin.poml').write_bytes('caf\xe9'.encode('latin-1'))
        loader = FileSystemLoader(str(tmp_path), encoding='utf-8')
        with pytest.raises(RendererError) as exc_info:
            loader.load('latin.poml')
        assert isinstance(exc_info.value.cause, UnicodeDecodeError)

    def test_defaults_from_config(self, tmp_path, monkeypatch):
        monkeypatch.setattr(get_config(), 'BASE_DIR', str(tmp_path))
        loader = FileSystemLoader()
        assert loader.base_dir == str(tmp_path)
        assert loader.encoding == get_config().FILE_ENCODING

    def test_default_base_dir_is_current_directory(self, tmp_path, monkeypatch):
        monkeypatch.setattr(get_config(), 'BASE_DIR', None)
        monkeypatch.chdir(tmp_path)
        (tmp_path / 'here.poml').write_text('here', encoding='utf-8')

        loader = FileSystemLoader()
        assert loader.base_dir == os.getcwd()
        assert loader.load('here.poml') == 'here'


class TestDictLoader:
    """Tests for DictLoader"""

    def test_load(self):
        loader = DictLoader({'a.poml': 'A'})
        assert loader.load('a.poml') == 'A'
        assert loader.resolve('a.poml') == 'a.poml'

    def test_missing_key(self):
        with pytest.raises(RendererError):
            DictLoader({}).load('a.poml')
