"""Incremental `gleam compile-package` integration for host builds."""

from .errors import (
    CompilationError,
    ConfigurationError,
    ErrorCode,
    GleamTaskError,
    StagingError,
)
from .models import (
    CompilationUnit,
    CompileReport,
    CompileResult,
    FileSet,
    ForeignManager,
    StagingResult,
    ThisBuildSystem,
    Unmanaged,
)
from .orchestrator import Orchestrator
from .policy import Policy

__all__ = [
    "CompilationError",
    "CompilationUnit",
    "CompileReport",
    "CompileResult",
    "ConfigurationError",
    "ErrorCode",
    "FileSet",
    "ForeignManager",
    "GleamTaskError",
    "Orchestrator",
    "Policy",
    "StagingError",
    "StagingResult",
    "ThisBuildSystem",
    "Unmanaged",
]
