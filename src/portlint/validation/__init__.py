"""Post-build validation of installed package trees.

The check functions live in ``rules``, the ordered table that gates them in
``catalogue`` and the orchestrator in ``framework``.
"""

from .catalogue import DEFAULT_CHECKS, CheckDefinition, find_check
from .diagnostics import Diagnostic, DiagnosticLog, LintStatus, Severity
from .framework import (
    CheckOutcome,
    CheckState,
    LintContext,
    PostBuildValidator,
    perform_all_checks,
    ValidationReport,
)

__all__ = [
    "DEFAULT_CHECKS",
    "CheckDefinition",
    "CheckOutcome",
    "CheckState",
    "Diagnostic",
    "DiagnosticLog",
    "LintContext",
    "LintStatus",
    "PostBuildValidator",
    "Severity",
    "ValidationReport",
    "find_check",
    "perform_all_checks",
]
