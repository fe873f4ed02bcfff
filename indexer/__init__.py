"""Directory fingerprinting, indexing and change detection."""

from .filesystem import FsEntry, list_children, scan_directory
from .fingerprint import generate_checksum
from .file_indexer import FileIndexer, IndexResult

__all__ = [
    'FsEntry', 'list_children', 'scan_directory',
    'generate_checksum', 'FileIndexer', 'IndexResult'
]
