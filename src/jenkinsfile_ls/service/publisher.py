"""Outbound interface from the orchestrator to the editor."""

from __future__ import annotations

from abc import ABC, abstractmethod

from jenkinsfile_ls.models.diagnostics import Diagnostic
from jenkinsfile_ls.models.outcome import TransportFailure


class DiagnosticsPublisher(ABC):
    @abstractmethod
    async def publish_diagnostics(
        self, uri: str, diagnostics: list[Diagnostic], version: int | None = None
    ) -> None:
        """Replace the full diagnostic set shown for *uri*."""

    @abstractmethod
    async def report_failure(self, uri: str, failure: TransportFailure) -> None:
        """Surface a failed validation without touching *uri*'s diagnostics."""
