"""
Pytest configuration and shared fixtures.
"""

import os

import pytest


def pytest_configure(config):
    """Run async tests without explicit markers."""
    config.option.asyncio_mode = "auto"


@pytest.fixture
def base_path(tmp_path):
    """Directory with files a (2 B), b (3 B), c/d (4 B) and an empty directory."""
    root = tmp_path / "base_path"
    root.mkdir()
    (root / "a").write_bytes(b"aa")
    (root / "b").write_bytes(b"bbb")
    (root / "c").mkdir()
    (root / "c" / "d").write_bytes(b"dddd")
    (root / "emptyDir").mkdir()
    return root


@pytest.fixture
def deep_path(tmp_path):
    """Chain of 1100 nested ``d`` directories with a 2 byte file ``f`` at the bottom.

    Yields (root, depth). Torn down level by level so cleanup doesn't recurse.
    """
    depth = 1100
    root = tmp_path / "deep"
    root.mkdir()

    levels = []
    current = str(root)
    for _ in range(depth):
        current = os.path.join(current, "d")
        os.mkdir(current)
        levels.append(current)
    leaf = os.path.join(current, "f")
    with open(leaf, "wb") as f:
        f.write(b"ff")

    yield root, depth

    os.remove(leaf)
    for level in reversed(levels):
        os.rmdir(level)
