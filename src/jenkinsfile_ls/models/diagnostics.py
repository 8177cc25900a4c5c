"""Structured diagnostics anchored to Jenkinsfile source positions."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict

DIAGNOSTIC_SOURCE = "jenkinsfile-ls"


class DiagnosticSeverity(IntEnum):
    """Severity levels, numbered as in the LSP wire format."""

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


class Diagnostic(BaseModel):
    """A single validation message at a 0-based line/column position."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    message: str
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
    source: str = DIAGNOSTIC_SOURCE
