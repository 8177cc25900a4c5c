"""Per-document validation state machine.

Open and save trigger a validation; change only updates the cached text;
close clears diagnostics.  Each validation runs as its own asyncio task.
A newer trigger for the same URI cancels the in-flight task, and any result
whose snapshot is no longer the store's current version is dropped before
publishing, so diagnostics always reflect the latest validated text.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum

from jenkinsfile_ls.client.jenkins import JenkinsClient
from jenkinsfile_ls.models.outcome import Accepted, Rejected, TransportFailure
from jenkinsfile_ls.parser.diagnostics import parse_validation_response
from jenkinsfile_ls.service.document_store import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
)
from jenkinsfile_ls.service.publisher import DiagnosticsPublisher

logger = logging.getLogger("jenkinsfile_ls.orchestrator")


class ValidationState(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"


class ValidationOrchestrator:
    """Glues the document store, the Jenkins client and the publisher."""

    def __init__(
        self,
        store: DocumentStore,
        client: JenkinsClient,
        publisher: DiagnosticsPublisher,
    ) -> None:
        self._store = store
        self._client = client
        self._publisher = publisher
        self._tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def store(self) -> DocumentStore:
        return self._store

    # -- editor events -------------------------------------------------------

    async def did_open(
        self, uri: str, text: str, version: int | None = None
    ) -> asyncio.Task[None] | None:
        logger.info("Document opened: %s (version %s)", uri, version)
        self._store.put(uri, text, version)
        return self.trigger(uri)

    async def did_change(self, uri: str, text: str, version: int | None = None) -> None:
        logger.debug("Document changed: %s (version %s)", uri, version)
        self._store.put(uri, text, version)

    async def did_save(self, uri: str, text: str | None = None) -> asyncio.Task[None] | None:
        logger.info("Document saved: %s", uri)
        if text is not None:
            try:
                editor_version = self._store.get(uri).editor_version
            except DocumentNotFoundError:
                logger.warning("Save for a document that is not open, skipping: %s", uri)
                return None
            self._store.put(uri, text, editor_version)
        return self.trigger(uri)

    async def did_close(self, uri: str) -> None:
        logger.info("Document closed: %s", uri)
        self._cancel(uri)
        self._store.remove(uri)
        await self._publisher.publish_diagnostics(uri, [])

    # -- scheduling ----------------------------------------------------------

    def trigger(self, uri: str) -> asyncio.Task[None] | None:
        """Start validating *uri*, superseding any validation in flight.

        Returns ``None`` without validating if the document is not open.
        """
        try:
            snapshot = self._store.get(uri)
        except DocumentNotFoundError:
            logger.warning("Document not found in cache, skipping validation: %s", uri)
            return None

        self._cancel(uri)
        task = asyncio.get_running_loop().create_task(
            self._validate(snapshot), name=f"validate:{uri}"
        )
        self._tasks[uri] = task
        task.add_done_callback(lambda t: self._forget(uri, t))
        return task

    def state(self, uri: str) -> ValidationState:
        task = self._tasks.get(uri)
        if task is not None and not task.done():
            return ValidationState.VALIDATING
        return ValidationState.IDLE

    async def wait_idle(self) -> None:
        """Wait until no validation is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel every in-flight validation and wait for the tasks to unwind."""
        tasks = list(self._tasks.values())
        for uri in list(self._tasks):
            self._cancel(uri)
        await asyncio.gather(*tasks, return_exceptions=True)

    # -- internal ------------------------------------------------------------

    def _cancel(self, uri: str) -> None:
        task = self._tasks.pop(uri, None)
        if task is not None and not task.done():
            logger.debug("Cancelling superseded validation for %s", uri)
            task.cancel()

    def _forget(self, uri: str, task: asyncio.Task[None]) -> None:
        if self._tasks.get(uri) is task:
            del self._tasks[uri]
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Validation task for %s crashed", uri, exc_info=task.exception()
            )

    def _is_current(self, snapshot: DocumentSnapshot) -> bool:
        current = self._store.current_version(snapshot.uri)
        if current == snapshot.version:
            return True
        logger.debug(
            "Discarding stale result for %s (validated v%d, current %s)",
            snapshot.uri,
            snapshot.version,
            f"v{current}" if current is not None else "closed",
        )
        return False

    async def _validate(self, snapshot: DocumentSnapshot) -> None:
        uri = snapshot.uri
        logger.info("Validating document: %s (version %d)", uri, snapshot.version)
        outcome = await self._client.validate_full(snapshot.content)

        match outcome:
            case Accepted():
                if not self._is_current(snapshot):
                    return
                logger.info("Validation successful: %s", uri)
                await self._publisher.publish_diagnostics(uri, [], snapshot.editor_version)
            case Rejected(raw_message=raw):
                if not self._is_current(snapshot):
                    return
                diagnostics = parse_validation_response(raw)
                logger.info("Validation returned %d error(s): %s", len(diagnostics), uri)
                await self._publisher.publish_diagnostics(
                    uri, diagnostics, snapshot.editor_version
                )
            case TransportFailure(kind=kind, detail=detail):
                logger.error("Validation of %s failed (%s): %s", uri, kind, detail)
                if not self._is_current(snapshot):
                    return
                await self._publisher.report_failure(uri, outcome)
