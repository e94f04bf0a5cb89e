"""
Shared fixtures for scan pipeline tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

# Add src/ to sys.path so the 'duplicates' package is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 2 identical files + 1 identical copy in a subdirectory (group of 3)
    - 2 identical files (group of 2)
    - 2 unique files (same size as other files, different content)
    - 1 empty file (filtered by the default minimum size of 1 byte)
    - 1 file with .tmp extension (for name filter tests)
    """
    files = {}

    # Duplicate group #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate group #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Unique files: same sizes as the groups above, different content
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1024)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2048)

    # Empty file
    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    # Same content as group #1 but a different extension
    files["tmp"] = temp_dir / "ignore.tmp"
    files["tmp"].write_bytes(b"E" * 512)

    # Subdirectory with a copy of group #1
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


@pytest.fixture
def hello_tree(temp_dir) -> Path:
    """a.txt='hello', b.txt='hello', c.txt='world' (5 bytes each)."""
    (temp_dir / "a.txt").write_bytes(b"hello")
    (temp_dir / "b.txt").write_bytes(b"hello")
    (temp_dir / "c.txt").write_bytes(b"world")
    return temp_dir
