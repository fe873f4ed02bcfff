"""Directory listing primitives used by the indexer."""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FsEntry:
    """A direct child of a listed directory."""
    
    path: str
    name: str
    is_dir: bool
    
    @property
    def last_modified(self) -> int:
        """Last modification time in milliseconds (0 if unavailable)."""
        return last_modified(self.path)
    
    @property
    def extension(self) -> str:
        """Extension without the leading dot, empty if there is none."""
        return file_extension(self.name)


def file_extension(name: str) -> str:
    """Get the text after the last dot of a file name.

    ``archive.tar.gz`` gives ``gz``, ``.bashrc`` gives ``bashrc`` and
    ``README`` gives an empty string.
    """
    _, dot, extension = name.rpartition('.')
    return extension if dot else ''


def last_modified(path: str) -> int:
    """Get the last modification time of a path in milliseconds.

    Args:
        path: Path to stat

    Returns:
        Modification time, or 0 if the path cannot be accessed
    """
    try:
        return os.stat(path).st_mtime_ns // 1_000_000
    except OSError:
        return 0


def scan_directory(path: str, follow_symlinks: bool = True) -> Optional[List[FsEntry]]:
    """List the direct children of a directory in filesystem order.

    Args:
        path: Directory to list
        follow_symlinks: Whether a symlink to a directory counts as a directory

    Returns:
        Children in the order the filesystem returns them, or None if the
        directory cannot be listed
    """
    entries = []
    try:
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
                except OSError:
                    is_dir = False
                entries.append(FsEntry(
                    path=os.path.join(path, entry.name),
                    name=entry.name,
                    is_dir=is_dir
                ))
    except OSError as e:
        # Permission errors or directories removed while traversing
        logger.debug(f"Cannot list {path}: {e}")
        return None

    return entries


def list_children(path: str, follow_symlinks: bool = True) -> List[FsEntry]:
    """List the direct children of a directory, empty if it cannot be listed."""
    return scan_directory(path, follow_symlinks) or []
