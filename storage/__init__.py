"""Persistent index of observed files and directory checksums."""

from .models import FileEntry, DirectoryEntry
from .file_index import FileIndex, StoreError

__all__ = ['FileEntry', 'DirectoryEntry', 'FileIndex', 'StoreError']
