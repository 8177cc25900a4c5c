"""Shared test fixtures for jenkinsfile-ls."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx
import pytest

from jenkinsfile_ls.client.jenkins import JenkinsClient
from jenkinsfile_ls.models.diagnostics import Diagnostic
from jenkinsfile_ls.models.outcome import Accepted, TransportFailure, ValidationOutcome
from jenkinsfile_ls.service.document_store import DocumentStore
from jenkinsfile_ls.service.orchestrator import ValidationOrchestrator
from jenkinsfile_ls.service.publisher import DiagnosticsPublisher
from jenkinsfile_ls.settings import Settings

JENKINS_URL = "https://jenkins.example.com"
URI = "file:///work/Jenkinsfile"

SAMPLE_JENKINSFILE = """\
pipeline {
    agent any
    stages {
        stage('Build') {
            steps {
                sh 'make'
            }
        }
    }
}
"""

SAMPLE_ERROR_RESPONSE = """\
Errors encountered validating Jenkinsfile:
WorkflowScript: 10: Unexpected input @ line 10, column 5.
Some other output line
WorkflowScript: 20: Missing closing brace @ line 20, column 3.
"""

CRUMB_JSON = {
    "_class": "hudson.security.csrf.DefaultCrumbIssuer",
    "crumb": "abc123",
    "crumbRequestField": "Jenkins-Crumb",
}


@pytest.fixture
def settings() -> Settings:
    """Settings built from explicit values only (env and files still apply below them)."""
    return Settings(
        jenkins_url=JENKINS_URL,
        username="alice",
        api_token="s3cret",
        request_timeout_seconds=5,
        crumb_ttl_seconds=60,
    )


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., JenkinsClient]:
    """Build a JenkinsClient whose network layer is *handler*."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response], **overrides: object
    ) -> JenkinsClient:
        client_settings = settings.model_copy(update=overrides) if overrides else settings
        return JenkinsClient(client_settings, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore()


class RecordingPublisher(DiagnosticsPublisher):
    """Publisher that records every call for assertions."""

    def __init__(self) -> None:
        self.published: list[tuple[str, list[Diagnostic], int | None]] = []
        self.failures: list[tuple[str, TransportFailure]] = []

    async def publish_diagnostics(
        self, uri: str, diagnostics: list[Diagnostic], version: int | None = None
    ) -> None:
        self.published.append((uri, list(diagnostics), version))

    async def report_failure(self, uri: str, failure: TransportFailure) -> None:
        self.failures.append((uri, failure))


class FakeClient:
    """Stand-in for JenkinsClient with scripted, optionally gated outcomes.

    Each call to :meth:`validate_full` pops the next scripted outcome (the
    last one repeats).  When ``gated`` is set, calls block until
    :meth:`release` is called for that call index.
    """

    def __init__(self, *outcomes: ValidationOutcome, gated: bool = False) -> None:
        self._outcomes = list(outcomes) or [Accepted()]
        self._gated = gated
        self._gates: list[asyncio.Event] = []
        self.contents: list[str] = []
        self.started = asyncio.Event()

    async def validate_full(self, content: str) -> ValidationOutcome:
        index = len(self.contents)
        self.contents.append(content)
        outcome = self._outcomes[min(index, len(self._outcomes) - 1)]
        if self._gated:
            gate = asyncio.Event()
            self._gates.append(gate)
            self.started.set()
            await gate.wait()
        return outcome

    def release(self, index: int) -> None:
        self._gates[index].set()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def make_orchestrator(
    store: DocumentStore, publisher: RecordingPublisher
) -> Callable[[FakeClient], ValidationOrchestrator]:
    def _make(client: FakeClient) -> ValidationOrchestrator:
        return ValidationOrchestrator(store, client, publisher)  # type: ignore[arg-type]

    return _make
