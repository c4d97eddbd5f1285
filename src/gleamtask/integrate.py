"""Merge compiler output into the host build tree."""

from __future__ import annotations

import shutil
from pathlib import Path

from gleamtask.cache.store import CACHE_FILENAME


def integrate_artifacts(
    out_dir: Path,
    app_path: Path,
    *,
    private_dir: str = "priv",
) -> tuple[str, ...]:
    """Copy every top-level entry of *out_dir* into *app_path*.

    *private_dir* and the fingerprint files are left out. Existing entries of
    the same name are overwritten; directories are merged.
    """
    app_path.mkdir(parents=True, exist_ok=True)
    integrated: list[str] = []
    if not out_dir.is_dir():
        return ()
    for entry in sorted(out_dir.iterdir()):
        if entry.name == private_dir or entry.name.startswith(CACHE_FILENAME):
            continue
        target = app_path / entry.name
        if entry.is_dir():
            if target.is_symlink() or target.is_file():
                target.unlink()
            shutil.copytree(entry, target, dirs_exist_ok=True)
        else:
            if target.is_symlink():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)
            shutil.copy2(entry, target)
        integrated.append(entry.name)
    return tuple(integrated)
