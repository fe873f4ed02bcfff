"""Global pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path
from typing import Generator

# Add the package to Python path for testing
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from storage.file_index import FileIndex


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "storage: File index storage tests")
    config.addinivalue_line("markers", "indexer: Traversal and fingerprint tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path_str = str(item.fspath)
        
        if "tests/unit/" in path_str:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in path_str:
            item.add_marker(pytest.mark.integration)
        
        if "test_file_index" in path_str:
            item.add_marker(pytest.mark.storage)
        elif "test_fingerprint" in path_str or "test_file_indexer" in path_str:
            item.add_marker(pytest.mark.indexer)


@pytest.fixture
def tree_root(tmp_path: Path) -> Path:
    """Create an empty directory to build test trees in."""
    root = tmp_path / "tree"
    root.mkdir()
    return root


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Directory for index databases, outside of the indexed tree."""
    return tmp_path / "index"


@pytest.fixture
def file_index(storage_dir: Path) -> Generator[FileIndex, None, None]:
    """Open a file index in a temporary storage directory."""
    index = FileIndex(storage_dir)
    
    yield index
    
    index.close()
