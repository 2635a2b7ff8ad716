"""
File loaders for <include> and <let src="...">.

A loader maps a path to text. The render engine only ever goes through
this interface, so templates can be rendered from the file system or
from an in-memory mapping.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Optional

from minipoml.config import get_config
from minipoml.errors import RendererError

logger = logging.getLogger(__name__)


class FileLoader(ABC):
    """Base class for file loaders."""

    @abstractmethod
    def resolve(self, path: str) -> str:
        """
        Canonical key of a path.

        Two paths that load the same file resolve to the same key; include
        cycle detection compares these keys.
        """
        pass

    @abstractmethod
    def load(self, path: str) -> str:
        """
        Read the text behind a path.

        Raises:
            RendererError: If the file cannot be read or decoded
        """
        pass


class FileSystemLoader(FileLoader):
    """
    Loads files from disk relative to a base directory.

    Usage:
        loader = FileSystemLoader('/templates')
        text = loader.load('partials/header.poml')
    """

    def __init__(self, base_dir: Optional[str] = None, encoding: Optional[str] = None):
        config = get_config()
        if base_dir is None:
            base_dir = config.BASE_DIR or os.getcwd()
        self.base_dir = base_dir
        self.encoding = encoding or config.FILE_ENCODING

    def resolve(self, path: str) -> str:
        return os.path.normpath(os.path.join(self.base_dir, path))

    def load(self, path: str) -> str:
        full_path = self.resolve(path)
        logger.debug(f"Loading {path} from {full_path}")

        try:
            with open(full_path, 'r', encoding=self.encoding) as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise RendererError(f"Failed to read file: {path}", cause=e) from e


class DictLoader(FileLoader):
    """Serves file contents from an in-memory mapping of path to text."""

    def __init__(self, files: Dict[str, str]):
        self.files = dict(files)

    def resolve(self, path: str) -> str:
        return path

    def load(self, path: str) -> str:
        try:
            return self.files[path]
        except KeyError as e:
            raise RendererError(f"Failed to read file: {path}", cause=e) from e
