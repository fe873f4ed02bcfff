"""Directory fingerprints derived from listing metadata."""

import os
import zlib

from .filesystem import last_modified, scan_directory


def generate_checksum(path: str) -> int:
    """Generate an Adler-32 checksum for a directory.

    The checksum covers the absolute directory path, its last modified time
    and the names of all direct children in listing order, preceded by the
    child count. Children are not sorted, so the value is only stable while
    the filesystem keeps returning them in the same order.

    Args:
        path: Directory to fingerprint

    Returns:
        Checksum for the directory
    """
    path = os.path.abspath(path)

    parts = [path, str(last_modified(path))]

    children = scan_directory(path)
    if children is not None:
        parts.append(str(len(children)))
        parts.extend(child.name for child in children)

    data = ''.join(parts).encode('utf-8', 'surrogateescape')
    return zlib.adler32(data)
