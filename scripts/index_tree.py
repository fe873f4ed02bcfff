#!/usr/bin/env python3
"""Command-line tool for indexing directory trees and detecting changes."""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

# Add the parent directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from indexer.file_indexer import FileIndexer
from storage.file_index import FileIndex, StoreError, default_storage_dir


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Index directory trees and detect changes since the last index"
    )
    parser.add_argument(
        "--storage-dir",
        default=str(default_storage_dir()),
        help="Directory to store the index (default: $FS_INDEX_STORAGE or ~/.fs_index)"
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Skip entries with this name, or ending with it for '*suffix' (repeatable)"
    )
    parser.add_argument(
        "--follow-symlinks",
        action="store_true",
        help="Descend into symlinked directories"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Index one or more directories")
    index_parser.add_argument("directories", nargs="+", help="Root directories to index")

    detect_parser = subparsers.add_parser("detect", help="List changes since the last index")
    detect_parser.add_argument("directory", help="Directory to check for changes")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.command == "index":
        roots = [Path(d).resolve() for d in args.directories]
    else:
        roots = [Path(args.directory).resolve()]

    # Validate directories
    for root in roots:
        if not root.is_dir():
            logger.error(f"Not a directory: {root}")
            return 1

    storage_dir = Path(args.storage_dir)
    for root in roots:
        if storage_dir.resolve().is_relative_to(root):
            logger.warning(f"Storage directory {storage_dir} is inside {root}, its changes will show up")

    try:
        with FileIndex(storage_dir) as file_index:
            indexer = FileIndexer(
                roots,
                file_index,
                ignore_patterns=args.ignore,
                follow_symlinks=args.follow_symlinks
            )

            if args.command == "index":
                result = indexer.index_directories()
                stats = file_index.get_stats()
                logger.info(f"Directories indexed: {result.directories_indexed}")
                logger.info(f"Files indexed: {result.files_indexed}")
                logger.info(f"Index now holds {stats['directory_count']} directories "
                            f"and {stats['file_count']} files")
            else:
                changed = indexer.detect_change(roots[0])
                for path in sorted(changed):
                    print(path)
                logger.info(f"{len(changed)} changed entries")

    except StoreError as e:
        logger.error(f"File index error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
