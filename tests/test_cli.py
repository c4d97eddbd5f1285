import json
from collections.abc import Callable
from pathlib import Path

import cbor2
import pytest

from gleamtask.cli import build_parser, cli_options, main

from tests.fakes import FakeGleam


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("GLEAM_BIN", "GLEAMTASK_ENV", "GLEAMTASK_CACHE_COMMIT", "GLEAMTASK_DEBUG"):
        monkeypatch.delenv(key, raising=False)


def test_unset_switches_do_not_override_options() -> None:
    args = build_parser().parse_args([])

    assert cli_options(args) == {}
    assert args.deps == []


def test_switches_and_positional_dependencies() -> None:
    args = build_parser().parse_args(["gleam_http", "gleam_otp", "--force-gleam", "--no-gleam"])

    assert args.deps == ["gleam_http", "gleam_otp"]
    assert cli_options(args) == {"force_gleam": True, "gleam": False}


def test_main_compiles_project_and_writes_report(
    demo_project: Path,
    fake_gleam: FakeGleam,
    capsys: pytest.CaptureFixture[str],
) -> None:
    report_path = demo_project.parent / "report.json"

    assert main(["--project", str(demo_project), "--report", str(report_path)]) == 0

    assert "Compiling 2 files (.gleam)" in capsys.readouterr().out
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["results"][0]["unit"] == "demo"
    assert report["results"][0]["status"] == "compiled"
    assert fake_gleam.arg("--out") == "build/dev/erlang/demo"


def test_main_second_run_is_up_to_date(demo_project: Path, fake_gleam: FakeGleam) -> None:
    report_path = demo_project.parent / "report.cbor"

    assert main(["--project", str(demo_project)]) == 0
    assert main(["--project", str(demo_project), "--report", str(report_path)]) == 0

    report = cbor2.loads(report_path.read_bytes())
    assert report["results"][0]["status"] == "up_to_date"
    assert len(fake_gleam.calls) == 1


def test_main_no_gleam_skips_everything(demo_project: Path, fake_gleam: FakeGleam) -> None:
    assert main(["--project", str(demo_project), "--no-gleam"]) == 0
    assert fake_gleam.calls == []


def test_main_compiles_selected_dependencies_in_manifest_order(
    demo_project: Path,
    add_dependency: Callable[..., Path],
    fake_gleam: FakeGleam,
) -> None:
    add_dependency("gleam_http")
    add_dependency("cowboy", manager="rebar3")
    add_dependency("gleam_otp")

    assert main(["--project", str(demo_project), "gleam_otp", "cowboy", "gleam_http"]) == 0

    outs = [call["argv"][call["argv"].index("--out") + 1] for call in fake_gleam.calls]
    assert outs == ["build/dev/erlang/gleam_http", "build/dev/erlang/gleam_otp"]
    assert fake_gleam.calls[0]["cwd"] == str((demo_project / "deps" / "gleam_http").resolve())


def test_main_force_compiles_foreign_managed_dependency(
    demo_project: Path,
    add_dependency: Callable[..., Path],
    fake_gleam: FakeGleam,
) -> None:
    add_dependency("cowboy", manager="rebar3")

    assert main(["--project", str(demo_project), "cowboy", "--force"]) == 0
    assert len(fake_gleam.calls) == 1


def test_main_reports_compile_failure(
    demo_project: Path,
    fake_gleam: FakeGleam,
    capsys: pytest.CaptureFixture[str],
) -> None:
    fake_gleam.returncode = 1
    log_file = demo_project.parent / "logs" / "compile.jsonl"

    assert main(["--project", str(demo_project), "--log-file", str(log_file)]) == 1

    assert "error: Compilation failed" in capsys.readouterr().err
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert any(record["level"] == "error" for record in records)


def test_main_reports_unknown_dependency(
    demo_project: Path,
    fake_gleam: FakeGleam,
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert main(["--project", str(demo_project), "nope"]) == 1
    assert "Unknown dependencies" in capsys.readouterr().err
    assert fake_gleam.calls == []


def test_main_reports_missing_dependency_directory(
    demo_project: Path,
    fake_gleam: FakeGleam,
    capsys: pytest.CaptureFixture[str],
) -> None:
    manifest = {"app": "demo", "deps": [{"name": "ghost", "lock": ["hex", "ghost", "1.0.0"]}]}
    (demo_project / "gleamtask.json").write_text(json.dumps(manifest), encoding="utf-8")

    assert main(["--project", str(demo_project), "ghost"]) == 1

    assert "error: Dependency `ghost` has no source directory." in capsys.readouterr().err
    assert fake_gleam.calls == []


def test_main_debug_output_includes_compiler_command(
    demo_project: Path,
    fake_gleam: FakeGleam,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("GLEAMTASK_DEBUG", "1")

    assert main(["--project", str(demo_project)]) == 0

    out = capsys.readouterr().out
    assert "[gleamtask] Compile Start" in out
    assert "[gleamtask] Compiler Command" in out
    assert "compile-package" in out
