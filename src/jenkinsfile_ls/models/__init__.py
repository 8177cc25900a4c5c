"""Data models for Jenkinsfile validation."""

from jenkinsfile_ls.models.diagnostics import Diagnostic, DiagnosticSeverity
from jenkinsfile_ls.models.outcome import (
    Accepted,
    Crumb,
    FailureKind,
    Rejected,
    TransportFailure,
    ValidationOutcome,
)

__all__ = [
    "Accepted",
    "Crumb",
    "Diagnostic",
    "DiagnosticSeverity",
    "FailureKind",
    "Rejected",
    "TransportFailure",
    "ValidationOutcome",
]
