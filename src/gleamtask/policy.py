"""Policy configuration and compile gating helpers."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, cast

from gleamtask.errors import ConfigurationError
from gleamtask.models import BuildManager

CacheCommit = Literal["immediate", "on_success"]

_CACHE_COMMIT_VALUES = ("immediate", "on_success")
_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("", "0", "false", "no", "off")

FORCE_OPTIONS = ("force", "force_gleam")


@dataclass(frozen=True, slots=True)
class Policy:
    compiler: str = "gleam"
    target: str = "erlang"
    build_path: Path = Path("_build")
    env: str = "dev"
    private_dir: str = "priv"
    cache_commit: CacheCommit = "immediate"
    allow_symlinks: bool = True
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Policy:
        environ = os.environ if environ is None else environ
        cache_commit = environ.get("GLEAMTASK_CACHE_COMMIT", "immediate")
        if cache_commit not in _CACHE_COMMIT_VALUES:
            raise ConfigurationError(
                "Unknown cache commit policy.",
                hint="Use 'immediate' or 'on_success'.",
                context={"GLEAMTASK_CACHE_COMMIT": cache_commit},
            )
        return cls(
            compiler=environ.get("GLEAM_BIN", "gleam"),
            env=environ.get("GLEAMTASK_ENV", "dev"),
            cache_commit=cast(CacheCommit, cache_commit),
            debug=_env_flag(environ, "GLEAMTASK_DEBUG"),
        )

    def lib_dir(self, project_root: Path) -> Path:
        return project_root / self.build_path / self.env / "lib"


def should_compile(options: Mapping[str, Any], manager: BuildManager) -> bool:
    """Decide whether the compile pipeline runs for a unit at all.

    ``compile`` in *options* marks a unit whose compilation was already
    requested programmatically; such units, and units owned by a foreign
    build manager, are skipped unless forced.
    """
    if not options.get("gleam", True):
        return False
    proceed = not manager.owns_compilation() and options.get("compile") is None
    return is_forced(options) or proceed


def is_forced(options: Mapping[str, Any]) -> bool:
    return any(options.get(key, False) for key in FORCE_OPTIONS)


def resolve_unit_name(options: Mapping[str, Any]) -> str:
    app = options.get("app")
    if app:
        return str(app)
    # Lock entries look like ("hex", "<name>", "<version>", ...).
    lock = options.get("lock")
    if isinstance(lock, (list, tuple)) and len(lock) > 1 and lock[1]:
        return str(lock[1])
    raise ConfigurationError(
        "Unable to find app name",
        hint="Declare `app` in the project options or provide a lock entry.",
    )


def _env_flag(environ: Mapping[str, str], key: str) -> bool:
    raw = environ.get(key, "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ConfigurationError(
        f"Invalid boolean value for {key}.",
        hint="Use 1/0, true/false, yes/no or on/off.",
        context={key: raw},
    )
