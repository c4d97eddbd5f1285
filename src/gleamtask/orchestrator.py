"""Per-unit compile pipeline: gate, detect changes, stage, invoke, integrate."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from gleamtask.cache.store import CACHE_FILENAME, TEST_CACHE_FILENAME, FingerprintStore
from gleamtask.errors import CompilationError
from gleamtask.integrate import integrate_artifacts
from gleamtask.models import BuildManager, CompilationUnit, CompileResult, UnitKind
from gleamtask.observability import Level, StructuredLogger
from gleamtask.policy import Policy, is_forced, resolve_unit_name, should_compile
from gleamtask.runner import GleamCompiler
from gleamtask.sources import library_sources, suite_sources
from gleamtask.staging import stage_package


class Orchestrator:
    """Runs the Gleam compile pipeline for one unit at a time."""

    def __init__(
        self,
        policy: Policy | None = None,
        *,
        logger: StructuredLogger | None = None,
        compiler: GleamCompiler | None = None,
    ) -> None:
        self.policy = policy or Policy()
        self.logger = logger or StructuredLogger(debug=self.policy.debug)
        self.compiler = compiler or GleamCompiler(
            executable=self.policy.compiler,
            target=self.policy.target,
        )

    def compile(self, unit: CompilationUnit, *, tests: bool = False) -> CompileResult:
        if not should_compile(unit.options, unit.manager):
            self._log(unit, "gate", "Skipping Gleam compilation", level="debug",
                      extra={"manager": str(unit.manager)})
            return CompileResult(unit=unit.name, kind=unit.kind, status="skipped")
        return self.compile_package(unit, tests=tests)

    def compile_options(
        self,
        kind: UnitKind,
        options: Mapping[str, Any],
        manager: BuildManager,
        *,
        source_root: Path,
        project_root: Path,
        tests: bool = False,
    ) -> CompileResult:
        """Gate, identify and compile a unit described by its merged options.

        The unit name is only resolved once the gate has passed, so a
        disabled unit without an identity is not an error.
        """
        if not should_compile(options, manager):
            name = str(options.get("app") or source_root.name)
            self.logger.log(operation="compile", unit=name, kind=kind, phase="gate",
                            message="Skipping Gleam compilation", level="debug",
                            extra={"manager": str(manager)})
            return CompileResult(unit=name, kind=kind, status="skipped")
        name = resolve_unit_name(options)
        lib_dir = self.policy.lib_dir(project_root)
        unit = CompilationUnit(
            kind=kind,
            name=name,
            source_root=source_root,
            build_dir=lib_dir / name,
            lib_dir=lib_dir,
            options=dict(options),
            manager=manager,
        )
        return self.compile_package(unit, tests=tests)

    def compile_package(self, unit: CompilationUnit, *, tests: bool = False) -> CompileResult:
        """Compile *unit* if its sources changed and merge the output.

        Raises :class:`CompilationError` when the compiler exits non-zero;
        nothing is integrated in that case.
        """
        if tests:
            files = suite_sources(unit.source_root)
        else:
            files = library_sources(unit.source_root)
        store = FingerprintStore(
            unit.source_root,
            commit=self.policy.cache_commit,
            filename=TEST_CACHE_FILENAME if tests else CACHE_FILENAME,
        )

        # Always consulted so the observed fingerprint stays current.
        changed = store.needs_compile(unit.kind, files, unit.name)
        if not changed and not (files and is_forced(unit.options)):
            self._log(unit, "fingerprint", "Gleam sources unchanged", level="debug",
                      extra={"files": len(files)})
            return CompileResult(
                unit=unit.name, kind=unit.kind, status="up_to_date", files=len(files)
            )

        staging = stage_package(unit, allow_symlinks=self.policy.allow_symlinks)
        invocation = self.compiler.invocation(unit, staging.package_dir)

        count = len(files)
        label = "test file" if tests else "file"
        self._log(unit, "compile", f"Compiling {count} {label}{'' if count == 1 else 's'} (.gleam)")
        self._log(unit, "compile", "Compiler Command", level="debug",
                  extra={"command": " ".join(invocation.argv)})

        returncode = self.compiler.run(invocation)
        if returncode != 0:
            self._log(unit, "compile", "Compilation failed", level="error",
                      extra={"returncode": returncode})
            raise CompilationError(
                "Compilation failed",
                hint="Fix the reported errors, then rebuild with --force if sources are unchanged.",
                context={
                    "unit": unit.name,
                    "command": " ".join(invocation.argv),
                    "returncode": str(returncode),
                },
            )

        artifacts = integrate_artifacts(
            invocation.out_dir,
            unit.build_dir,
            private_dir=self.policy.private_dir,
        )
        store.mark_success(unit.name)
        self._log(unit, "integrate", "Integrated compiler output", level="debug",
                  extra={"artifacts": list(artifacts)})
        return CompileResult(
            unit=unit.name,
            kind=unit.kind,
            status="compiled",
            files=count,
            artifacts=artifacts,
            staging=staging,
        )

    def _log(
        self,
        unit: CompilationUnit,
        phase: str,
        message: str,
        *,
        level: Level = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.logger.log(
            operation="compile",
            unit=unit.name,
            kind=unit.kind,
            phase=phase,
            message=message,
            level=level,
            extra=extra,
        )
