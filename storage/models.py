"""Entries recorded in the file index."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class FileEntry:
    """A non-directory entry, unique by (directory, name)."""
    
    directory: str
    name: str
    extension: str = ''
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'directory': self.directory,
            'name': self.name,
            'extension': self.extension
        }


@dataclass(frozen=True)
class DirectoryEntry:
    """A directory and the fingerprint computed at its last indexing."""
    
    path: str
    checksum: int
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'path': self.path,
            'checksum': self.checksum
        }
