"""Persistent file index backed by SQLite key-value tables."""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional

from sqlitedict import SqliteDict

from .models import DirectoryEntry, FileEntry

logger = logging.getLogger(__name__)

STORAGE_ENV_VAR = 'FS_INDEX_STORAGE'

# Errors sqlitedict can surface from its worker connection
_BACKEND_ERRORS = (sqlite3.Error, RuntimeError, OSError, UnicodeError)


class StoreError(Exception):
    """Raised when the underlying store cannot be read, written or committed."""


def default_storage_dir() -> Path:
    """Get the storage directory from the environment, or ~/.fs_index."""
    return Path(os.getenv(STORAGE_ENV_VAR, str(Path.home() / '.fs_index')))


class FileIndex:
    """Index of observed files and directory checksums.

    Files live in ``files.db`` keyed by their parent directory, each row a
    mapping of file name to extension. Directories live in ``folders.db``
    keyed by path with the checksum as value. Keys are stored as filesystem
    bytes so paths with undecodable names round-trip. Writes are buffered
    and only become durable on ``commit()``.
    """

    def __init__(self, storage_dir: Optional[Path] = None):
        """Open (or create) the index.

        Args:
            storage_dir: Directory holding the database files
                (default: $FS_INDEX_STORAGE or ~/.fs_index)
        """
        if storage_dir is None:
            storage_dir = default_storage_dir()
        self.storage_dir = Path(storage_dir)
        self.files_path = self.storage_dir / 'files.db'
        self.folders_path = self.storage_dir / 'folders.db'

        # File upserts not yet merged into files.db, per directory
        self._pending_files: Dict[str, Dict[str, str]] = {}
        self._closed = False

        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            self._files_db = SqliteDict(
                str(self.files_path),
                tablename='files',
                autocommit=False,
                journal_mode="WAL",
                encode_key=os.fsencode,
                decode_key=os.fsdecode
            )
            self._folders_db = SqliteDict(
                str(self.folders_path),
                tablename='folders',
                autocommit=False,
                journal_mode="WAL",
                encode_key=os.fsencode,
                decode_key=os.fsdecode
            )
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot open file index in {self.storage_dir}: {e}") from e

        logger.debug(f"Opened file index in {self.storage_dir}")

    def __enter__(self) -> 'FileIndex':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("File index is closed")

    def add_file(self, directory: str, name: str, extension: str) -> None:
        """Add or replace a file entry.

        Args:
            directory: Absolute path of the file's parent directory
            name: Name of the file
            extension: Extension of the file such as ``jpg``, may be empty
        """
        self._check_open()
        self._pending_files.setdefault(directory, {})[name] = extension

    def add_directory(self, path: str, checksum: int) -> None:
        """Add or replace the checksum stored for a directory.

        Args:
            path: Absolute path of the directory
            checksum: Fingerprint of the directory
        """
        self._check_open()
        try:
            self._folders_db[path] = checksum
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot store directory {path}: {e}") from e

    def contains_file(self, directory: str) -> bool:
        """Determine if any file has been recorded under a directory key.

        This does not look at file names: it is true as soon as one file
        with this exact directory has been added. Use ``has_file`` to check
        for a specific file.

        Args:
            directory: Directory key to search for

        Returns:
            True if at least one file is recorded under the directory
        """
        self._check_open()
        if self._pending_files.get(directory):
            return True
        try:
            return bool(self._files_db.get(directory))
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot query files under {directory}: {e}") from e

    def has_file(self, directory: str, name: str) -> bool:
        """Determine if a specific file has been recorded.

        Args:
            directory: Absolute path of the file's parent directory
            name: Name of the file

        Returns:
            True if the (directory, name) pair is recorded
        """
        self._check_open()
        if name in self._pending_files.get(directory, {}):
            return True
        try:
            return name in self._files_db.get(directory, {})
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot query file {name} in {directory}: {e}") from e

    def get_checksum(self, path: str) -> Optional[int]:
        """Get the stored checksum for a directory.

        Args:
            path: Absolute path of the directory

        Returns:
            Stored checksum, or None if the directory has not been indexed
        """
        self._check_open()
        try:
            return self._folders_db.get(path)
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot read checksum for {path}: {e}") from e

    def get_directory(self, path: str) -> Optional[DirectoryEntry]:
        """Get the stored entry for a directory, or None."""
        checksum = self.get_checksum(path)
        if checksum is None:
            return None
        return DirectoryEntry(path=path, checksum=checksum)

    def get_files(self, directory: str) -> List[FileEntry]:
        """Get all file entries recorded under a directory.

        Args:
            directory: Absolute path of the parent directory

        Returns:
            File entries sorted by name
        """
        self._check_open()
        try:
            names = dict(self._files_db.get(directory, {}))
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot read files under {directory}: {e}") from e
        names.update(self._pending_files.get(directory, {}))

        return [
            FileEntry(directory=directory, name=name, extension=extension)
            for name, extension in sorted(names.items())
        ]

    def commit(self) -> None:
        """Commit all pending writes to the database files on disk.

        The two database files are committed one after the other, files first.
        A failure in between leaves new directory checksums uncommitted, so
        those directories are reported as changed on the next detection.
        """
        self._check_open()
        try:
            for directory, names in self._pending_files.items():
                stored = self._files_db.get(directory, {})
                stored.update(names)
                self._files_db[directory] = stored
            self._pending_files.clear()

            self._files_db.commit()
            self._folders_db.commit()
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot commit file index: {e}") from e

    def close(self) -> None:
        """Close the index. Writes since the last commit are discarded."""
        if self._closed:
            return
        self._closed = True
        self._pending_files.clear()
        try:
            try:
                self._files_db.close()
            finally:
                self._folders_db.close()
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot close file index: {e}") from e

        logger.debug(f"Closed file index in {self.storage_dir}")

    def get_stats(self) -> Dict:
        """Get statistics about the committed index.

        Returns:
            Dictionary with statistics
        """
        self._check_open()
        try:
            file_count = sum(len(names) for names in self._files_db.values())
            directory_count = len(self._folders_db)
        except _BACKEND_ERRORS as e:
            raise StoreError(f"Cannot read index statistics: {e}") from e

        return {
            'storage_dir': str(self.storage_dir),
            'file_count': file_count,
            'directory_count': directory_count
        }
