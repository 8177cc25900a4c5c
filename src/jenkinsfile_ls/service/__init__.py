"""Document tracking and validation orchestration."""

from jenkinsfile_ls.service.document_store import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
)
from jenkinsfile_ls.service.orchestrator import ValidationOrchestrator, ValidationState
from jenkinsfile_ls.service.publisher import DiagnosticsPublisher

__all__ = [
    "DiagnosticsPublisher",
    "DocumentNotFoundError",
    "DocumentSnapshot",
    "DocumentStore",
    "ValidationOrchestrator",
    "ValidationState",
]
