"""Validation outcomes and the CSRF crumb exchanged with Jenkins."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Crumb(BaseModel):
    """CSRF token pair issued by ``/crumbIssuer/api/json``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    crumb: str
    crumb_request_field: str = Field(alias="crumbRequestField")

    def as_header(self) -> dict[str, str]:
        return {self.crumb_request_field: self.crumb}


class FailureKind(StrEnum):
    AUTH = "auth"
    ENDPOINT_MISSING = "endpoint_missing"
    NETWORK = "network"
    REMOTE = "remote"


_HINTS: dict[FailureKind, str] = {
    FailureKind.AUTH: "Jenkins authentication failed. Check JENKINS_USER_ID and JENKINS_API_TOKEN.",
    FailureKind.ENDPOINT_MISSING: (
        "Jenkins validation endpoint not found. "
        "Ensure the pipeline-model-definition plugin is installed."
    ),
    FailureKind.NETWORK: "Could not reach Jenkins. Validation will be retried on the next save.",
    FailureKind.REMOTE: "Jenkins returned an unexpected response.",
}


@dataclass(frozen=True)
class Accepted:
    """Jenkins reported the Jenkinsfile as valid."""


@dataclass(frozen=True)
class Rejected:
    """Jenkins answered with error text; feed ``raw_message`` to the parser."""

    raw_message: str


@dataclass(frozen=True)
class TransportFailure:
    """Validation could not be completed.  Never turned into diagnostics."""

    kind: FailureKind
    detail: str
    status_code: int | None = None

    def user_message(self) -> str:
        """Actionable message for the editor, including the remote detail."""
        return f"{_HINTS[self.kind]} ({self.detail})"


ValidationOutcome = Accepted | Rejected | TransportFailure
