"""Content fingerprint derivation."""

from __future__ import annotations

import hashlib
from pathlib import Path

from gleamtask.models import FileSet

CHUNK_SIZE = 2048


def file_sha256(path: Path) -> str | None:
    if not path.is_file():
        return None
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        while chunk := handle.read(CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def fingerprint(file_set: FileSet) -> str:
    """Return ``"<path> <sha256>\\n"`` per file, in sorted path order."""
    lines = []
    for rel in sorted(file_set.files):
        lines.append(f"{rel} {file_sha256(file_set.root / rel) or ''}\n")
    return "".join(lines)
