"""
Workspace file access.

A file store enumerates the source files to process and reads/writes their
text. Only allow-listed extensions are visited and dependency folders are
skipped.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Iterator, List

SUPPORTED_EXTENSIONS = ('.py', '.js', '.ts', '.java', '.cpp', '.c', '.html', '.css')
EXCLUDED_DIRS = ('node_modules',)


def is_supported(path: str) -> bool:
    """Check whether a path has an allow-listed extension."""
    return os.path.splitext(path)[1] in SUPPORTED_EXTENSIONS


class FileStore(ABC):
    """Source of (path, content) pairs and sink for rewritten content."""

    @abstractmethod
    def list_files(self) -> List[str]:
        """Return the paths to process, in a stable order."""
        pass

    @abstractmethod
    def read(self, path: str) -> str:
        pass

    @abstractmethod
    def write(self, path: str, content: str) -> None:
        pass

    def iter_files(self) -> Iterator[str]:
        for path in self.list_files():
            if is_supported(path):
                yield path


class LocalFileStore(FileStore):
    """
    File store over a directory tree on disk.

    Files are read and written as UTF-8 with newlines kept as they are.
    """

    def __init__(self, root: str, excluded_dirs: Iterable[str] = EXCLUDED_DIRS):
        """
        Initialize the store.

        Args:
            root: Workspace root directory
            excluded_dirs: Directory names never descended into

        Raises:
            NotADirectoryError: If root is not a directory
        """
        self.root = Path(root)
        if not self.root.is_dir():
            raise NotADirectoryError(f"Workspace root is not a directory: {root}")
        self.excluded_dirs = set(excluded_dirs)

    def list_files(self) -> List[str]:
        paths = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.excluded_dirs)
            for filename in sorted(filenames):
                path = os.path.join(dirpath, filename)
                if is_supported(path):
                    paths.append(path)
        return paths

    def read(self, path: str) -> str:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()

    def write(self, path: str, content: str) -> None:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)

    def path_in_root(self, name: str) -> str:
        """Path of a file directly under the workspace root."""
        return str(self.root / name)
