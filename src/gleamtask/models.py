"""Core typed dataclasses for compilation units, staging and results."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import cbor2

UnitKind = Literal["app", "dep"]
MaterializeMode = Literal["linked", "copied"]
CompileStatus = Literal["skipped", "up_to_date", "compiled"]

# Manager tags that mean "compiled by this task" rather than by the
# dependency's own tooling.
NATIVE_MANAGER_TAGS = ("gleamtask", "mix")

# Where `gleam compile-package` writes each unit's output, relative to the
# unit's source root.
OUTPUT_ROOT = "build/dev/erlang"


@dataclass(frozen=True, slots=True)
class Unmanaged:
    def owns_compilation(self) -> bool:
        return False

    def __str__(self) -> str:
        return "unmanaged"


@dataclass(frozen=True, slots=True)
class ThisBuildSystem:
    def owns_compilation(self) -> bool:
        return False

    def __str__(self) -> str:
        return "gleamtask"


@dataclass(frozen=True, slots=True)
class ForeignManager:
    """A dependency compiled by its own tooling (rebar3, make, ...)."""

    name: str

    def owns_compilation(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.name


BuildManager = Unmanaged | ThisBuildSystem | ForeignManager


def parse_manager(tag: str | None) -> BuildManager:
    if not tag:
        return Unmanaged()
    if tag in NATIVE_MANAGER_TAGS:
        return ThisBuildSystem()
    return ForeignManager(tag)


@dataclass(frozen=True, slots=True)
class CompilationUnit:
    """One buildable package: the host application or a single dependency.

    ``build_dir`` is the unit's app path inside the host build tree; it is
    both the staging directory and the destination of integrated artifacts.
    ``lib_dir`` is the aggregate library directory shared by every unit.
    """

    kind: UnitKind
    name: str
    source_root: Path
    build_dir: Path
    lib_dir: Path
    options: Mapping[str, Any] = field(default_factory=dict)
    manager: BuildManager = field(default_factory=Unmanaged)

    @property
    def out_rel(self) -> str:
        """Compiler output directory, relative to ``source_root``."""
        return f"{OUTPUT_ROOT}/{self.name}"

    @property
    def out_dir(self) -> Path:
        return self.source_root / self.out_rel


@dataclass(frozen=True, slots=True)
class FileSet:
    root: Path
    files: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(sorted(self.files)))

    def __len__(self) -> int:
        return len(self.files)

    def __bool__(self) -> bool:
        return bool(self.files)

    def paths(self) -> tuple[Path, ...]:
        return tuple(self.root / rel for rel in self.files)


@dataclass(frozen=True, slots=True)
class StagingResult:
    package_dir: Path
    staged: bool
    views: Mapping[str, MaterializeMode] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CompilerInvocation:
    argv: tuple[str, ...]
    cwd: Path
    package_dir: Path
    out_dir: Path
    lib_dir: Path


@dataclass(frozen=True, slots=True)
class CompileResult:
    unit: str
    kind: UnitKind
    status: CompileStatus
    files: int = 0
    artifacts: tuple[str, ...] = ()
    staging: StagingResult | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "unit": self.unit,
            "kind": self.kind,
            "status": self.status,
            "files": self.files,
            "artifacts": list(self.artifacts),
        }
        if self.staging is not None:
            payload["package_dir"] = str(self.staging.package_dir)
            payload["staged"] = self.staging.staged
            payload["views"] = dict(sorted(self.staging.views.items()))
        return payload


@dataclass(slots=True)
class CompileReport:
    results: list[CompileResult] = field(default_factory=list)
    schema_version: int = 1

    def add(self, result: CompileResult) -> None:
        self.results.append(result)

    def compiled(self) -> tuple[str, ...]:
        return tuple(r.unit for r in self.results if r.status == "compiled")

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "results": [result.to_payload() for result in self.results],
        }
