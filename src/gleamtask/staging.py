"""Staging of a minimal package workspace for `gleam compile-package`.

`gleam compile-package` needs a ``gleam.toml`` naming the package. Units
that do not ship one get a workspace inside the host build tree instead:
a generated ``gleam.toml`` plus ``src``/``test`` views that are symlinks
to the real directories, or full copies where linking is not possible.
Writing the config there rather than in the unit's own root keeps the
Gleam language server from picking the unit up as a Gleam project.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from gleamtask.errors import StagingError
from gleamtask.models import CompilationUnit, MaterializeMode, StagingResult

PROJECT_DESCRIPTOR = "gleam.toml"
VIEW_DIRS = ("src", "test")


def materialize_view(source: Path, dest: Path, *, allow_symlinks: bool = True) -> MaterializeMode:
    """Make *dest* present the contents of *source*, replacing any previous view."""
    _remove(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    if allow_symlinks:
        try:
            os.symlink(source.resolve(), dest, target_is_directory=True)
            return "linked"
        except (OSError, NotImplementedError):
            _remove(dest)
    shutil.copytree(source, dest, symlinks=True)
    return "copied"


def stage_package(unit: CompilationUnit, *, allow_symlinks: bool = True) -> StagingResult:
    if (unit.source_root / PROJECT_DESCRIPTOR).is_file():
        return StagingResult(package_dir=unit.source_root, staged=False)

    build = unit.build_dir
    views: dict[str, MaterializeMode] = {}
    try:
        build.mkdir(parents=True, exist_ok=True)
        config = build / PROJECT_DESCRIPTOR
        if not config.is_file():
            config.write_text(f'name = "{unit.name}"\n', encoding="utf-8")

        for name in VIEW_DIRS:
            source = unit.source_root / name
            if not source.is_dir():
                _remove(build / name)
                continue
            views[name] = materialize_view(source, build / name, allow_symlinks=allow_symlinks)
    except OSError as exc:
        raise StagingError(
            "Failed to stage package workspace.",
            hint="Check permissions on the build directory.",
            context={
                "unit": unit.name,
                "build_dir": str(build),
                "error": str(exc),
            },
        ) from exc

    return StagingResult(package_dir=build, staged=True, views=views)


def _remove(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
