"""Unit tests for directory fingerprints and listing primitives."""

import os
import zlib
from pathlib import Path

import pytest

import indexer.fingerprint as fingerprint
from indexer.filesystem import (
    FsEntry, file_extension, last_modified, list_children, scan_directory
)
from indexer.fingerprint import generate_checksum


def make_dir(root: Path) -> Path:
    """Create a directory with two files and a subdirectory."""
    (root / 'sub').mkdir()
    (root / 'a.txt').write_text('a')
    (root / 'b.py').write_text('b')
    return root


class TestFileExtension:

    @pytest.mark.parametrize('name, expected', [
        ('photo.jpg', 'jpg'),
        ('archive.tar.gz', 'gz'),
        ('README', ''),
        ('.bashrc', 'bashrc'),
        ('trailing.', ''),
    ])
    def test_extension(self, name, expected):
        assert file_extension(name) == expected

    def test_entry_extension(self):
        entry = FsEntry(path='/x/notes.md', name='notes.md', is_dir=False)
        assert entry.extension == 'md'


class TestScanDirectory:

    def test_lists_direct_children_only(self, tree_root):
        make_dir(tree_root)
        (tree_root / 'sub' / 'deep.txt').write_text('deep')

        children = scan_directory(str(tree_root))

        assert sorted(c.name for c in children) == ['a.txt', 'b.py', 'sub']
        by_name = {c.name: c for c in children}
        assert by_name['sub'].is_dir is True
        assert by_name['a.txt'].is_dir is False
        assert by_name['a.txt'].path == os.path.join(str(tree_root), 'a.txt')

    def test_missing_directory(self, tree_root):
        missing = str(tree_root / 'gone')

        assert scan_directory(missing) is None
        assert list_children(missing) == []

    def test_empty_directory(self, tree_root):
        assert scan_directory(str(tree_root)) == []

    def test_symlinked_directory(self, tree_root):
        target = tree_root / 'target'
        target.mkdir()
        (tree_root / 'link').symlink_to(target, target_is_directory=True)

        followed = {c.name: c.is_dir for c in scan_directory(str(tree_root), follow_symlinks=True)}
        not_followed = {c.name: c.is_dir for c in scan_directory(str(tree_root), follow_symlinks=False)}

        assert followed['link'] is True
        assert not_followed['link'] is False

    def test_last_modified(self, tree_root):
        expected = os.stat(tree_root).st_mtime_ns // 1_000_000

        assert last_modified(str(tree_root)) == expected
        assert last_modified(str(tree_root / 'gone')) == 0

    def test_entry_last_modified(self, tree_root):
        make_dir(tree_root)

        for entry in scan_directory(str(tree_root)):
            assert entry.last_modified == os.stat(entry.path).st_mtime_ns // 1_000_000

        gone = FsEntry(path=str(tree_root / 'gone'), name='gone', is_dir=False)
        assert gone.last_modified == 0


class TestGenerateChecksum:

    def test_matches_documented_inputs(self, tree_root):
        make_dir(tree_root)
        path = str(tree_root)
        names = [entry.name for entry in os.scandir(path)]
        mtime = os.stat(path).st_mtime_ns // 1_000_000

        data = path + str(mtime) + str(len(names)) + ''.join(names)

        assert generate_checksum(path) == zlib.adler32(data.encode('utf-8'))

    def test_deterministic(self, tree_root):
        make_dir(tree_root)

        assert generate_checksum(str(tree_root)) == generate_checksum(str(tree_root))

    def test_fits_in_64_bits(self, tree_root):
        make_dir(tree_root)
        checksum = generate_checksum(str(tree_root))

        assert 0 <= checksum < 2 ** 64

    def test_changes_when_child_added(self, tree_root):
        make_dir(tree_root)
        before = generate_checksum(str(tree_root))

        (tree_root / 'c.txt').write_text('c')

        assert generate_checksum(str(tree_root)) != before

    def test_ignores_deeper_contents(self, tree_root):
        make_dir(tree_root)
        before = generate_checksum(str(tree_root))
        mtime = os.stat(tree_root).st_mtime_ns

        (tree_root / 'sub' / 'deep.txt').write_text('deep')
        (tree_root / 'a.txt').write_text('rewritten')
        os.utime(tree_root, ns=(mtime, mtime))

        assert generate_checksum(str(tree_root)) == before

    def test_depends_on_path(self, tmp_path):
        first = tmp_path / 'one'
        second = tmp_path / 'two'
        first.mkdir()
        second.mkdir()
        os.utime(first, ns=(0, 0))
        os.utime(second, ns=(0, 0))

        assert generate_checksum(str(first)) != generate_checksum(str(second))

    def test_depends_on_listing_order(self, tree_root, monkeypatch):
        make_dir(tree_root)
        original = fingerprint.scan_directory
        forward = generate_checksum(str(tree_root))

        monkeypatch.setattr(
            fingerprint, 'scan_directory',
            lambda path: list(reversed(original(path)))
        )

        assert generate_checksum(str(tree_root)) != forward

    def test_relative_path_is_made_absolute(self, tree_root, monkeypatch):
        make_dir(tree_root)
        monkeypatch.chdir(tree_root.parent)

        assert generate_checksum(tree_root.name) == generate_checksum(str(tree_root))

    def test_vanished_directory(self, tree_root):
        missing = str(tree_root / 'gone')

        # No listing and no modification time: only the path and a zero remain
        assert generate_checksum(missing) == zlib.adler32((missing + '0').encode('utf-8'))
