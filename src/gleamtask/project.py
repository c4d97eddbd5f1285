"""Host project manifest: the application and its dependency registry.

A project is described by ``gleamtask.json`` at its root::

    {
      "app": "demo",
      "options": {"gleam": true},
      "deps": [
        {
          "name": "gleam_stdlib",
          "path": "deps/gleam_stdlib",
          "manager": "rebar3",
          "lock": ["hex", "gleam_stdlib", "0.30.0"],
          "options": {}
        }
      ]
    }
"""

from __future__ import annotations

import contextlib
import json
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from gleamtask.errors import ConfigurationError
from gleamtask.models import BuildManager, parse_manager

MANIFEST_FILENAME = "gleamtask.json"

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Dependency:
    name: str
    path: Path
    manager: BuildManager
    options: Mapping[str, Any] = field(default_factory=dict)

    def merged_options(self, overrides: Mapping[str, Any]) -> dict[str, Any]:
        return {**self.options, **overrides}


@dataclass(frozen=True, slots=True)
class Project:
    root: Path
    options: Mapping[str, Any] = field(default_factory=dict)
    deps: tuple[Dependency, ...] = ()

    def merged_options(self, overrides: Mapping[str, Any]) -> dict[str, Any]:
        return {**self.options, **overrides}

    def filter_by_name(self, names: Iterable[str]) -> tuple[Dependency, ...]:
        """Return the named dependencies in manifest order."""
        wanted = list(dict.fromkeys(names))
        known = {dep.name for dep in self.deps}
        unknown = [name for name in wanted if name not in known]
        if unknown:
            raise ConfigurationError(
                "Unknown dependencies requested.",
                hint=f"Declare them under `deps` in {MANIFEST_FILENAME}.",
                context={"dependencies": ", ".join(unknown)},
            )
        return tuple(dep for dep in self.deps if dep.name in wanted)


def in_dependency(dep: Dependency, callback: Callable[[Dependency], T]) -> T:
    """Run *callback* with the working directory set to the dependency root."""
    if not dep.path.is_dir():
        raise ConfigurationError(
            f"Dependency `{dep.name}` has no source directory.",
            hint=f"Fetch the dependency or fix its `path` in {MANIFEST_FILENAME}.",
            context={"dependency": dep.name, "path": str(dep.path)},
        )
    with contextlib.chdir(dep.path):
        return callback(dep)


def load_project(root: str | Path) -> Project:
    project_root = Path(root).resolve()
    manifest_path = project_root / MANIFEST_FILENAME
    try:
        raw = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigurationError(
            "Project manifest does not exist.",
            hint=f"Create {MANIFEST_FILENAME} at the project root.",
            context={"path": str(manifest_path)},
        ) from exc
    return parse_project(raw, root=project_root)


def parse_project(raw: str, *, root: Path) -> Project:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError("Invalid project manifest JSON.", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise ConfigurationError("Invalid project manifest payload type.")

    options = _optional_dict(payload, "options")
    app = payload.get("app")
    if app is not None:
        if not isinstance(app, str) or not app:
            raise ConfigurationError("Invalid project manifest `app` value.")
        options["app"] = app

    deps_raw = payload.get("deps", [])
    if not isinstance(deps_raw, list):
        raise ConfigurationError("Invalid project manifest `deps` value.")
    deps = tuple(_parse_dependency(item, root=root) for item in deps_raw)

    names = [dep.name for dep in deps]
    if len(names) != len(set(names)):
        raise ConfigurationError("Duplicate dependency names in project manifest.")
    return Project(root=root, options=options, deps=deps)


def _parse_dependency(item: Any, *, root: Path) -> Dependency:
    if not isinstance(item, dict):
        raise ConfigurationError("Invalid dependency entry in project manifest.")
    name = _required_str(item, "name")
    options = _optional_dict(item, "options")

    lock = item.get("lock")
    if lock is not None:
        if not isinstance(lock, list) or not all(isinstance(part, str) for part in lock):
            raise ConfigurationError(f"Invalid `lock` value for dependency `{name}`.")
        options["lock"] = tuple(lock)

    manager = item.get("manager")
    if manager is not None and not isinstance(manager, str):
        raise ConfigurationError(f"Invalid `manager` value for dependency `{name}`.")

    path = item.get("path", f"deps/{name}")
    if not isinstance(path, str) or not path:
        raise ConfigurationError(f"Invalid `path` value for dependency `{name}`.")

    return Dependency(
        name=name,
        path=(root / path).resolve(),
        manager=parse_manager(manager),
        options=options,
    )


def _required_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"Invalid project manifest `{key}` value.")
    return value


def _optional_dict(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ConfigurationError(f"Invalid project manifest `{key}` value.")
    return dict(value)
