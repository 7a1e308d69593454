"""
Workspace batch processing.
"""

from .files import FileStore, LocalFileStore, SUPPORTED_EXTENSIONS
from .processor import WorkspaceProcessor, BatchReport, FileResult, auto_obfuscate

__all__ = [
    'FileStore',
    'LocalFileStore',
    'SUPPORTED_EXTENSIONS',
    'WorkspaceProcessor',
    'BatchReport',
    'FileResult',
    'auto_obfuscate',
]
