from pathlib import Path

import pytest

from gleamtask.errors import CompilationError
from gleamtask.models import CompilationUnit
from gleamtask.runner import GleamCompiler


def _unit(root: Path) -> CompilationUnit:
    lib = root / "_build" / "dev" / "lib"
    return CompilationUnit(
        kind="app",
        name="demo",
        source_root=root,
        build_dir=lib / "demo",
        lib_dir=lib,
    )


def test_command_is_a_structured_argument_list() -> None:
    compiler = GleamCompiler()

    command = compiler.command(
        Path("/tmp/my build/lib/demo"),
        "build/dev/erlang/demo",
        Path("/tmp/my build/lib"),
    )

    assert command == (
        "gleam",
        "compile-package",
        "--target",
        "erlang",
        "--no-beam",
        "--package",
        "/tmp/my build/lib/demo",
        "--out",
        "build/dev/erlang/demo",
        "--lib",
        "/tmp/my build/lib",
    )


def test_invocation_targets_unit_output_directory(tmp_path: Path) -> None:
    unit = _unit(tmp_path)
    compiler = GleamCompiler(executable="/opt/gleam/bin/gleam")

    invocation = compiler.invocation(unit, unit.build_dir)

    assert invocation.argv[0] == "/opt/gleam/bin/gleam"
    assert invocation.cwd == tmp_path
    assert invocation.out_dir == tmp_path / "build" / "dev" / "erlang" / "demo"
    assert invocation.lib_dir == unit.lib_dir
    assert "build/dev/erlang/demo" in invocation.argv


def test_run_returns_exit_code_from_subprocess(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[tuple[list[str], str]] = []

    def fake_run(argv: list[str], *, cwd: str, check: bool) -> object:
        calls.append((argv, cwd))
        return type("R", (), {"returncode": 3})()

    monkeypatch.setattr("gleamtask.runner.subprocess.run", fake_run)
    unit = _unit(tmp_path)
    compiler = GleamCompiler()

    assert compiler.run(compiler.invocation(unit, unit.build_dir)) == 3
    assert calls[0][0][:2] == ["gleam", "compile-package"]
    assert calls[0][1] == str(tmp_path)


def test_missing_compiler_raises_compilation_error(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def fake_run(argv: list[str], *, cwd: str, check: bool) -> object:
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr("gleamtask.runner.subprocess.run", fake_run)
    unit = _unit(tmp_path)
    compiler = GleamCompiler(executable="no-such-gleam")

    with pytest.raises(CompilationError) as excinfo:
        compiler.run(compiler.invocation(unit, unit.build_dir))

    assert excinfo.value.code == "E_COMPILATION"
    assert excinfo.value.context["compiler"] == "no-such-gleam"
    assert excinfo.value.hint is not None
