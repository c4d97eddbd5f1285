"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from tests.fakes import FakeGleam


@pytest.fixture
def fake_gleam(monkeypatch: pytest.MonkeyPatch) -> FakeGleam:
    fake = FakeGleam()
    monkeypatch.setattr("gleamtask.runner.subprocess.run", fake)
    return fake


@pytest.fixture
def demo_project(tmp_path: Path) -> Path:
    """A host project named `demo` with two Gleam sources and no gleam.toml."""
    root = tmp_path / "demo"
    (root / "src").mkdir(parents=True)
    (root / "test").mkdir()
    (root / "src" / "a.gleam").write_text("1", encoding="utf-8")
    (root / "src" / "b.gleam").write_text("2", encoding="utf-8")
    (root / "test" / "a_test.gleam").write_text("3", encoding="utf-8")
    (root / "gleamtask.json").write_text(json.dumps({"app": "demo"}), encoding="utf-8")
    return root


def _write_dependency(project: Path, name: str, **entry: Any) -> Path:
    dep_root = project / "deps" / name
    (dep_root / "src").mkdir(parents=True, exist_ok=True)
    (dep_root / "src" / f"{name}.gleam").write_text("pub fn x() { 1 }\n", encoding="utf-8")

    manifest_path = project / "gleamtask.json"
    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    deps = manifest.setdefault("deps", [])
    deps.append({"name": name, "lock": ["hex", name, "1.0.0"], **entry})
    manifest_path.write_text(json.dumps(manifest), encoding="utf-8")
    return dep_root


@pytest.fixture
def add_dependency(demo_project: Path) -> Callable[..., Path]:
    """Add a dependency with one Gleam source to the demo project's manifest."""

    def add(name: str, **entry: Any) -> Path:
        return _write_dependency(demo_project, name, **entry)

    return add
