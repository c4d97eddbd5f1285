"""Command-line entry point.

Usage:
    gleamtask                          # compile the main project
    gleamtask gleam_stdlib             # compile a dependency
    gleamtask gleam_http gleam_otp     # compile several dependencies
    gleamtask gleam_plug --force       # force Gleam compilation
    gleamtask --no-gleam               # disable Gleam compilation
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from gleamtask.errors import GleamTaskError
from gleamtask.models import CompileReport, ThisBuildSystem
from gleamtask.observability import StructuredLogger
from gleamtask.orchestrator import Orchestrator
from gleamtask.policy import Policy
from gleamtask.project import Dependency, in_dependency, load_project

SWITCHES = ("force", "force_gleam", "gleam")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gleamtask",
        description="Compile Gleam sources of a project or its dependencies to Erlang.",
    )
    parser.add_argument("deps", nargs="*", help="Dependencies to compile instead of the project")
    parser.add_argument("--force", action="store_true", default=None, help="Force recompilation")
    parser.add_argument(
        "--force-gleam",
        dest="force_gleam",
        action="store_true",
        default=None,
        help="Alias for --force",
    )
    parser.add_argument(
        "--gleam",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable or disable Gleam compilation",
    )
    parser.add_argument("--project", type=Path, default=Path("."), help="Project root")
    parser.add_argument("--tests", action="store_true", help="Compile test sources")
    parser.add_argument("--log-file", type=Path, help="Write structured logs as JSON lines")
    parser.add_argument("--report", type=Path, help="Write a compile report (.json or .cbor)")
    return parser


def cli_options(args: argparse.Namespace) -> dict[str, Any]:
    """Options given on the command line; unset switches are left out so
    they do not override project or dependency options."""
    return {key: getattr(args, key) for key in SWITCHES if getattr(args, key) is not None}


def run(args: argparse.Namespace, *, policy: Policy, logger: StructuredLogger) -> CompileReport:
    orchestrator = Orchestrator(policy, logger=logger)
    project = load_project(args.project)
    overrides = cli_options(args)
    report = CompileReport()

    logger.log(operation="run", unit=None, kind=None, phase=None,
               message="Compile Start", level="debug")
    if not args.deps:
        report.add(
            orchestrator.compile_options(
                "app",
                project.merged_options(overrides),
                ThisBuildSystem(),
                source_root=project.root,
                project_root=project.root,
                tests=args.tests,
            )
        )
    else:
        def compile_dep(dep: Dependency) -> None:
            report.add(
                orchestrator.compile_options(
                    "dep",
                    dep.merged_options(overrides),
                    dep.manager,
                    source_root=dep.path,
                    project_root=project.root,
                    tests=args.tests,
                )
            )

        for dep in project.filter_by_name(args.deps):
            in_dependency(dep, compile_dep)
    logger.log(operation="run", unit=None, kind=None, phase=None,
               message="Compile End", level="debug")
    return report


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger: StructuredLogger | None = None
    try:
        policy = Policy.from_env()
        logger = StructuredLogger(debug=policy.debug)
        report = run(args, policy=policy, logger=logger)
        if args.report is not None:
            if args.report.suffix == ".cbor":
                report.to_cbor(args.report)
            else:
                report.to_json(args.report)
    except GleamTaskError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        if logger is not None and args.log_file is not None:
            logger.to_json_lines(args.log_file)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
