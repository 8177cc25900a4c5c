"""pygls language server exposing Jenkinsfile validation over stdio.

Run via::

    jenkinsfile-ls                          # reads env / .env / config.toml
    jenkinsfile-ls --config ./jenkins.toml

Validation runs on open and save; edits only update the cached text.
Settings are loaded from environment variables (``JENKINS_URL``,
``JENKINS_USER_ID``, ``JENKINS_API_TOKEN``, ``JENKINS_INSECURE``), a
``.env`` file, or ``~/.config/jenkinsfile-ls/config.toml``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from jenkinsfile_ls import __version__
from jenkinsfile_ls.client.jenkins import JenkinsClient
from jenkinsfile_ls.models.diagnostics import Diagnostic
from jenkinsfile_ls.models.outcome import TransportFailure
from jenkinsfile_ls.service.document_store import DocumentStore
from jenkinsfile_ls.service.orchestrator import ValidationOrchestrator
from jenkinsfile_ls.service.publisher import DiagnosticsPublisher
from jenkinsfile_ls.settings import DEFAULT_CONFIG_PATH, ConfigError, load_settings

# ---------------------------------------------------------------------------
# Server + shared state
# ---------------------------------------------------------------------------

logger = logging.getLogger("jenkinsfile_ls.lsp")

CONFIG_HELP = f"""\
Please set the following environment variables:
  JENKINS_URL         - Jenkins instance URL (e.g., https://jenkins.example.com)
  JENKINS_USER_ID     - Jenkins username
  JENKINS_API_TOKEN   - Jenkins API token

Optional:
  JENKINS_INSECURE    - Set to '1' or 'true' to skip TLS verification

Or create a config file at: {DEFAULT_CONFIG_PATH}
"""


class JenkinsfileLanguageServer(LanguageServer):
    """Language server holding the validation orchestrator (set in :func:`main`)."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.orchestrator: ValidationOrchestrator | None = None
        self.client: JenkinsClient | None = None


server = JenkinsfileLanguageServer(
    "jenkinsfile-ls",
    f"v{__version__}",
    text_document_sync_kind=types.TextDocumentSyncKind.Full,
)


def to_lsp_diagnostic(diagnostic: Diagnostic) -> types.Diagnostic:
    position = types.Position(line=diagnostic.line, character=diagnostic.column)
    return types.Diagnostic(
        range=types.Range(start=position, end=position),
        message=diagnostic.message,
        severity=types.DiagnosticSeverity(int(diagnostic.severity)),
        source=diagnostic.source,
    )


class LspPublisher(DiagnosticsPublisher):
    """Sends orchestrator results to the editor through *ls*."""

    def __init__(self, ls: LanguageServer) -> None:
        self._ls = ls

    async def publish_diagnostics(
        self, uri: str, diagnostics: list[Diagnostic], version: int | None = None
    ) -> None:
        self._ls.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(
                uri=uri,
                diagnostics=[to_lsp_diagnostic(d) for d in diagnostics],
                version=version,
            )
        )

    async def report_failure(self, uri: str, failure: TransportFailure) -> None:
        message = failure.user_message()
        self._ls.window_log_message(
            types.LogMessageParams(type=types.MessageType.Error, message=f"{uri}: {message}")
        )
        self._ls.window_show_message(
            types.ShowMessageParams(type=types.MessageType.Error, message=message)
        )


def _orchestrator(ls: JenkinsfileLanguageServer) -> ValidationOrchestrator:
    if ls.orchestrator is None:
        raise RuntimeError("Validation orchestrator not initialised")
    return ls.orchestrator


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@server.feature(types.INITIALIZED)
def initialized(ls: JenkinsfileLanguageServer, params: types.InitializedParams) -> None:
    logger.info("Jenkinsfile LSP server initialized")
    ls.window_log_message(
        types.LogMessageParams(
            type=types.MessageType.Info, message="Jenkinsfile LSP server initialized"
        )
    )


@server.feature(types.SHUTDOWN)
async def shutdown(ls: JenkinsfileLanguageServer, params: None) -> None:
    logger.info("Shutting down Jenkinsfile LSP server")
    if ls.orchestrator is not None:
        await ls.orchestrator.shutdown()
    if ls.client is not None:
        await ls.client.aclose()


# ---------------------------------------------------------------------------
# Document events
# ---------------------------------------------------------------------------


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
async def did_open(ls: JenkinsfileLanguageServer, params: types.DidOpenTextDocumentParams) -> None:
    doc = params.text_document
    await _orchestrator(ls).did_open(doc.uri, doc.text, doc.version)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
async def did_change(
    ls: JenkinsfileLanguageServer, params: types.DidChangeTextDocumentParams
) -> None:
    # Full sync: the last change carries the whole document.
    if not params.content_changes:
        return
    await _orchestrator(ls).did_change(
        params.text_document.uri,
        params.content_changes[-1].text,
        params.text_document.version,
    )


@server.feature(types.TEXT_DOCUMENT_DID_SAVE, types.SaveOptions(include_text=True))
async def did_save(ls: JenkinsfileLanguageServer, params: types.DidSaveTextDocumentParams) -> None:
    await _orchestrator(ls).did_save(params.text_document.uri, params.text)


@server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
async def did_close(
    ls: JenkinsfileLanguageServer, params: types.DidCloseTextDocumentParams
) -> None:
    await _orchestrator(ls).did_close(params.text_document.uri)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def configure(ls: JenkinsfileLanguageServer, client: JenkinsClient) -> ValidationOrchestrator:
    """Attach a fresh store + orchestrator backed by *client* to *ls*."""
    ls.client = client
    ls.orchestrator = ValidationOrchestrator(DocumentStore(), client, LspPublisher(ls))
    return ls.orchestrator


def main(argv: list[str] | None = None) -> None:
    """Run the language server on stdio."""
    parser = argparse.ArgumentParser(
        prog="jenkinsfile-ls",
        description="Language server validating Jenkinsfiles against a Jenkins instance.",
    )
    parser.add_argument("--config", type=Path, default=None, help="path to a TOML config file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"Failed to load configuration: {exc}\n", file=sys.stderr)
        print(CONFIG_HELP, file=sys.stderr)
        sys.exit(1)

    # stdout carries the LSP stream; logs go to stderr.
    logging.basicConfig(level=settings.log_level.upper(), stream=sys.stderr)
    logger.info("Starting jenkinsfile-ls v%s", __version__)
    logger.debug("Jenkins URL: %s, user: %s", settings.jenkins_url, settings.username)

    configure(server, JenkinsClient(settings))
    logger.info("LSP server starting on stdio")
    server.start_io()
    logger.info("LSP server shutting down")


if __name__ == "__main__":
    main()
