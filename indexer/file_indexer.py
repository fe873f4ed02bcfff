"""Breadth-first indexing and change detection over directory trees."""

import logging
import os
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

from storage.file_index import FileIndex
from .filesystem import FsEntry, list_children
from .fingerprint import generate_checksum

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class IndexResult:
    """Result of an indexing pass."""

    directories_indexed: int
    files_indexed: int
    time_taken: float

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'directories_indexed': self.directories_indexed,
            'files_indexed': self.files_indexed,
            'time_taken': self.time_taken
        }


class FileIndexer:
    """Maintains a file index for a set of root directories."""

    def __init__(
        self,
        directories: Iterable[PathLike],
        file_index: FileIndex,
        ignore_patterns: Optional[Iterable[str]] = None,
        follow_symlinks: bool = False
    ):
        """Initialize the indexer.

        Args:
            directories: Root directories to index
            file_index: Store the index is read from and written to
            ignore_patterns: Names (or ``*suffix`` patterns) to skip
            follow_symlinks: Whether to descend into symlinked directories
        """
        self.directories: List[str] = [os.path.abspath(d) for d in directories]
        if not self.directories:
            raise ValueError("At least one root directory is required")

        self.file_index = file_index
        self.ignore_patterns: Set[str] = set(ignore_patterns or [])
        self.follow_symlinks = follow_symlinks

    def should_ignore(self, name: str) -> bool:
        """Check if an entry name matches an ignore pattern."""
        for pattern in self.ignore_patterns:
            if pattern.startswith('*'):
                if name.endswith(pattern[1:]):
                    return True
            elif name == pattern:
                return True

        return False

    def _children(self, path: str) -> List[FsEntry]:
        return [
            child for child in list_children(path, self.follow_symlinks)
            if not self.should_ignore(child.name)
        ]

    def index_directories(self) -> IndexResult:
        """Create the file index for all root directories.

        Every directory gets its checksum stored and committed as soon as it
        is reached; file entries are committed with the next directory or at
        the end of the pass.

        Returns:
            IndexResult with statistics

        Raises:
            StoreError: If the file index cannot be written
        """
        start_time = time.time()
        directories_indexed = 0
        files_indexed = 0

        logger.info(f"Indexing {len(self.directories)} root directories")

        queue = deque()
        for root in self.directories:
            if os.path.isdir(root):
                self.file_index.add_directory(root, generate_checksum(root))
                self.file_index.commit()
                directories_indexed += 1
            queue.append(root)

        while queue:
            current = queue.popleft()

            for child in self._children(current):
                if child.is_dir:
                    self.file_index.add_directory(child.path, generate_checksum(child.path))
                    self.file_index.commit()  # Checkpoint at every directory
                    directories_indexed += 1

                    queue.append(child.path)
                else:
                    self.file_index.add_file(current, child.name, child.extension)
                    files_indexed += 1

        self.file_index.commit()

        result = IndexResult(
            directories_indexed=directories_indexed,
            files_indexed=files_indexed,
            time_taken=time.time() - start_time
        )
        logger.info(
            f"Indexed {directories_indexed} directories and {files_indexed} files "
            f"in {result.time_taken:.2f}s"
        )
        return result

    def detect_change(self, root: PathLike) -> Set[Path]:
        """Compare the file index to the filesystem under a root directory.

        Only subdirectories whose checksum differs from the stored one are
        descended into. Files missing from the index are added to it.

        Args:
            root: Directory to start from

        Returns:
            Directories whose checksum changed and files not previously indexed

        Raises:
            StoreError: If the file index cannot be accessed
        """
        root = os.path.abspath(root)
        changed: Set[Path] = set()
        files_added = 0

        if not self.checksum_matches(root):
            changed.add(Path(root))

        queue = deque([root])

        while queue:
            current = queue.popleft()

            for child in self._children(current):
                if child.is_dir:
                    if not self.checksum_matches(child.path):
                        changed.add(Path(child.path))
                        queue.append(child.path)
                elif not self.file_index.has_file(current, child.name):
                    self.file_index.add_file(current, child.name, child.extension)
                    changed.add(Path(child.path))
                    files_added += 1

        if files_added:
            self.file_index.commit()

        logger.info(f"Detected {len(changed)} changes under {root} ({files_added} new files)")
        return changed

    def checksum_matches(self, path: PathLike) -> bool:
        """Determine if a directory's checksum matches the stored checksum.

        Args:
            path: Directory to check

        Returns:
            True if the checksums match, False if they differ or none is stored
        """
        path = os.path.abspath(path)
        matches = generate_checksum(path) == self.file_index.get_checksum(path)
        if not matches:
            logger.debug(f"Checksum changed for {path}")
        return matches
