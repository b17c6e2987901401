"""Shared fixtures for lstreelib tests."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: large trees, excluded by run_tests.py")


def make_file(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


def lsize(path) -> int:
    return os.lstat(path).st_size


def deny_scandir_for(*denied):
    """Patch os.scandir so the given directories raise PermissionError."""
    real_scandir = os.scandir
    denied = {Path(p) for p in denied}

    def fake_scandir(path='.'):
        if Path(path) in denied:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    return patch('os.scandir', side_effect=fake_scandir)


@pytest.fixture
def sample_tree(tmp_path):
    """Create the reference tree.

    Structure:
        t/
        ├── a        (10 bytes)
        └── b/
            └── c    (5 bytes)
    """
    root = tmp_path / "t"
    root.mkdir()
    make_file(root / "a", 10)
    (root / "b").mkdir()
    make_file(root / "b" / "c", 5)
    return root


@pytest.fixture
def deep_tree(tmp_path):
    """Create a tree three directories deep with files at every level.

    Structure:
        deep/
        ├── top.txt         (100 bytes)
        ├── .hidden         (7 bytes)
        ├── notes.log       (3 bytes)
        ├── one/
        │   ├── f1          (11 bytes)
        │   └── two/
        │       ├── f2      (22 bytes)
        │       └── three/
        │           └── f3  (33 bytes)
        └── side/
            └── s1          (44 bytes)
    """
    root = tmp_path / "deep"
    root.mkdir()
    make_file(root / "top.txt", 100)
    make_file(root / ".hidden", 7)
    make_file(root / "notes.log", 3)
    make_file(root / "one" / "f1", 11)
    make_file(root / "one" / "two" / "f2", 22)
    make_file(root / "one" / "two" / "three" / "f3", 33)
    make_file(root / "side" / "s1", 44)
    return root


def child_names(meta):
    """Names of the children of a node, sorted (walk order is not stable)."""
    return sorted(child.name.name for child in meta.content)


def child(meta, name):
    for entry in meta.content:
        if entry.name.name == name:
            return entry
    raise KeyError(name)
