"""Per-unit fingerprint store deciding whether a recompile is needed."""

from __future__ import annotations

from pathlib import Path

from gleamtask.cache.keys import fingerprint
from gleamtask.models import OUTPUT_ROOT, FileSet, UnitKind
from gleamtask.policy import CacheCommit

CACHE_FILENAME = ".compile_cache"
TEST_CACHE_FILENAME = ".compile_cache.test"
SUCCESS_SUFFIX = ".ok"


class FingerprintStore:
    """Fingerprint slots kept in each unit's compiler output directory.

    The observed slot is overwritten as soon as a change is detected, before
    the compiler runs. With ``commit="on_success"`` skip decisions are made
    against a second slot written only by :meth:`mark_success`. The value
    written there is the fingerprint taken by the last :meth:`needs_compile`
    call for the unit, never a fresh scan.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        commit: CacheCommit = "immediate",
        filename: str = CACHE_FILENAME,
    ) -> None:
        self.root = Path(root)
        self.commit = commit
        self.filename = filename
        self._pending: dict[str, str] = {}

    def cache_dir(self, unit_name: str) -> Path:
        return self.root / OUTPUT_ROOT / unit_name

    def cache_path(self, unit_name: str) -> Path:
        return self.cache_dir(unit_name) / self.filename

    def success_path(self, unit_name: str) -> Path:
        return self.cache_dir(unit_name) / f"{self.filename}{SUCCESS_SUFFIX}"

    def needs_compile(self, kind: UnitKind, file_set: FileSet, unit_name: str) -> bool:
        if kind == "dep":
            return True
        if not file_set:
            return False

        current = fingerprint(file_set)
        self._pending[unit_name] = current
        if self.commit == "on_success":
            gate = self.success_path(unit_name)
        else:
            gate = self.cache_path(unit_name)
        if self._read(gate) == current:
            return False

        self._write(self.cache_path(unit_name), current)
        return True

    def observed(self, unit_name: str) -> str | None:
        return self._read(self.cache_path(unit_name))

    def mark_success(self, unit_name: str) -> None:
        current = self._pending.pop(unit_name, None)
        if current is not None:
            self._write(self.success_path(unit_name), current)

    def invalidate(self, unit_name: str) -> None:
        self.cache_path(unit_name).unlink(missing_ok=True)
        self.success_path(unit_name).unlink(missing_ok=True)

    def _read(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def _write(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(value, encoding="utf-8")
