from wirecheck.validation._check import check, check_definition
from wirecheck.validation._dry_run import dry_run, dry_run_async
from wirecheck.validation.abc import DiagnosticsSink
from wirecheck.validation.error import BrokenDefinitionError


__all__ = [
    "BrokenDefinitionError",
    "DiagnosticsSink",
    "check",
    "check_definition",
    "dry_run",
    "dry_run_async",
]
