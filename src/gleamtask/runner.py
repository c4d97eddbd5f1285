"""Synchronous execution of `gleam compile-package`."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from gleamtask.errors import CompilationError
from gleamtask.models import CompilationUnit, CompilerInvocation


@dataclass(slots=True)
class GleamCompiler:
    executable: str = "gleam"
    target: str = "erlang"

    def command(
        self,
        package_dir: Path | str,
        out_dir: Path | str,
        lib_dir: Path | str,
    ) -> tuple[str, ...]:
        return (
            self.executable,
            "compile-package",
            "--target",
            self.target,
            "--no-beam",
            "--package",
            str(package_dir),
            "--out",
            str(out_dir),
            "--lib",
            str(lib_dir),
        )

    def invocation(self, unit: CompilationUnit, package_dir: Path) -> CompilerInvocation:
        return CompilerInvocation(
            argv=self.command(package_dir, unit.out_rel, unit.lib_dir),
            cwd=unit.source_root,
            package_dir=package_dir,
            out_dir=unit.out_dir,
            lib_dir=unit.lib_dir,
        )

    def run(self, invocation: CompilerInvocation) -> int:
        """Run the compiler to completion and return its exit code.

        Output is not captured so compiler diagnostics reach the terminal.
        There is no timeout.
        """
        try:
            result = subprocess.run(
                list(invocation.argv),
                cwd=str(invocation.cwd),
                check=False,
            )
        except FileNotFoundError as exc:
            raise CompilationError(
                "Gleam compiler not found.",
                hint="Install gleam or point GLEAM_BIN at the executable.",
                context={
                    "compiler": self.executable,
                    "command": " ".join(invocation.argv),
                },
            ) from exc
        return result.returncode
