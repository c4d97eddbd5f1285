"""Gleam source discovery for a compilation unit."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from gleamtask.models import FileSet

LIBRARY_PATTERNS = ("*src", "*lib")
TEST_PATTERNS = ("*test",)
SOURCE_SUFFIX = ".gleam"


def find_files(root: Path, patterns: Iterable[str]) -> FileSet:
    """Collect ``*.gleam`` files below top-level directories matching *patterns*.

    Paths are relative to *root* and use forward slashes so that the
    fingerprint text is identical across platforms.
    """
    found: set[str] = set()
    for pattern in patterns:
        for directory in root.glob(pattern):
            if not directory.is_dir():
                continue
            for path in directory.rglob(f"*{SOURCE_SUFFIX}"):
                if path.is_file():
                    found.add(path.relative_to(root).as_posix())
    return FileSet(root=root, files=tuple(found))


def library_sources(root: Path) -> FileSet:
    return find_files(root, LIBRARY_PATTERNS)


def suite_sources(root: Path) -> FileSet:
    return find_files(root, TEST_PATTERNS)
