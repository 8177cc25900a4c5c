"""Two-step authenticated exchange with Jenkins: crumb fetch + validate POST.

Every remote or network condition is returned as a value
(:class:`TransportFailure`); nothing here raises for a bad response.
"""

from __future__ import annotations

import logging
import time
from types import TracebackType

import httpx

from jenkinsfile_ls.models.outcome import (
    Accepted,
    Crumb,
    FailureKind,
    Rejected,
    TransportFailure,
    ValidationOutcome,
)
from jenkinsfile_ls.parser.diagnostics import SUCCESS_MESSAGE
from jenkinsfile_ls.settings import Settings

CRUMB_PATH = "/crumbIssuer/api/json"
VALIDATE_PATH = "/pipeline-model-converter/validate"

logger = logging.getLogger("jenkinsfile_ls.client")


def _status_failure(response: httpx.Response, action: str) -> TransportFailure:
    """Classify a non-2xx response from either endpoint (404 handled by callers)."""
    status = response.status_code
    if status in (401, 403):
        kind = FailureKind.AUTH
        detail = f"{action}: HTTP {status}"
    else:
        kind = FailureKind.REMOTE
        body = response.text.strip()
        detail = f"{action}: HTTP {status}" + (f" - {body[:200]}" if body else "")
    return TransportFailure(kind=kind, detail=detail, status_code=status)


def _network_failure(exc: httpx.TransportError, action: str) -> TransportFailure:
    if isinstance(exc, httpx.TimeoutException):
        reason = "timed out"
    else:
        reason = str(exc) or type(exc).__name__
    return TransportFailure(kind=FailureKind.NETWORK, detail=f"{action}: {reason}")


class JenkinsClient:
    """Validates Jenkinsfiles against ``{jenkins_url}/pipeline-model-converter``.

    Holds a single ``httpx.AsyncClient`` with basic auth, the configured
    timeout and TLS verification switch.  Crumbs are reused for
    ``crumb_ttl_seconds``; a 403 on validate drops the cached crumb and the
    POST is retried once with a fresh one.

    *transport* replaces the network layer (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._crumb_ttl = settings.crumb_ttl_seconds
        self._cached_crumb: Crumb | None = None
        self._crumb_fetched_at = 0.0
        self._http = httpx.AsyncClient(
            base_url=settings.jenkins_url,
            auth=httpx.BasicAuth(settings.username, settings.api_token.get_secret_value()),
            verify=not settings.insecure,
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )
        if settings.insecure:
            logger.warning("TLS certificate verification disabled for %s", settings.jenkins_url)

    # -- lifecycle -----------------------------------------------------------

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> JenkinsClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # -- public API ----------------------------------------------------------

    async def fetch_crumb(self) -> Crumb | None | TransportFailure:
        """Ask Jenkins for a CSRF crumb.

        Returns the crumb, ``None`` when the crumb issuer is absent (CSRF
        protection disabled, which is not an error), or a failure.
        """
        try:
            response = await self._http.get(CRUMB_PATH)
        except httpx.TransportError as exc:
            return _network_failure(exc, "crumb request failed")

        if response.status_code == 404:
            logger.debug("Crumb issuer not found; CSRF protection appears disabled")
            return None
        if not response.is_success:
            return _status_failure(response, "crumb request failed")
        try:
            return Crumb.model_validate(response.json())
        except ValueError as exc:
            return TransportFailure(
                kind=FailureKind.REMOTE,
                detail=f"malformed crumb response: {exc}",
                status_code=response.status_code,
            )

    async def validate(self, content: str, crumb: Crumb | None) -> ValidationOutcome:
        """POST *content* to the validator, with the crumb header if given."""
        headers = crumb.as_header() if crumb is not None else {}
        files = {"jenkinsfile": (None, content.encode("utf-8"))}
        try:
            response = await self._http.post(VALIDATE_PATH, files=files, headers=headers)
        except httpx.TransportError as exc:
            return _network_failure(exc, "validation request failed")

        if response.status_code == 404:
            return TransportFailure(
                kind=FailureKind.ENDPOINT_MISSING,
                detail=f"{VALIDATE_PATH} returned HTTP 404",
                status_code=404,
            )
        if not response.is_success:
            return _status_failure(response, "validation request failed")

        body = response.text
        if SUCCESS_MESSAGE in body:
            return Accepted()
        return Rejected(raw_message=body)

    async def validate_full(self, content: str) -> ValidationOutcome:
        """Fetch (or reuse) a crumb, then validate.

        A crumb failure is returned without attempting validation.  A 403
        from a POST that carried a crumb is treated as a stale crumb: one
        fresh crumb is fetched and the POST retried once.
        """
        crumb = await self._get_crumb()
        if isinstance(crumb, TransportFailure):
            return crumb

        outcome = await self.validate(content, crumb)
        stale_crumb = (
            crumb is not None
            and isinstance(outcome, TransportFailure)
            and outcome.status_code == 403
        )
        if stale_crumb:
            logger.info("Jenkins rejected the crumb; retrying with a fresh one")
            self.invalidate_crumb()
            crumb = await self._get_crumb()
            if isinstance(crumb, TransportFailure):
                return crumb
            outcome = await self.validate(content, crumb)
        return outcome

    def invalidate_crumb(self) -> None:
        self._cached_crumb = None

    # -- internal ------------------------------------------------------------

    async def _get_crumb(self) -> Crumb | None | TransportFailure:
        now = time.monotonic()
        if self._cached_crumb is not None and now - self._crumb_fetched_at < self._crumb_ttl:
            return self._cached_crumb

        result = await self.fetch_crumb()
        if isinstance(result, Crumb) and self._crumb_ttl > 0:
            self._cached_crumb = result
            self._crumb_fetched_at = now
        else:
            self._cached_crumb = None
        return result
