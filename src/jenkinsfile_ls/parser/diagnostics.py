"""Parse the plain-text error blob returned by Jenkins' pipeline validator.

Jenkins reports each compilation error as::

    WorkflowScript: 46: unexpected token: } @ line 46, column 1.

The blob may hold several of these, interleaved with unrelated output
(stack traces, ``Errors encountered validating Jenkinsfile:`` headers).
Anything that does not fit the pattern is skipped.
"""

from __future__ import annotations

import re

from jenkinsfile_ls.models.diagnostics import Diagnostic, DiagnosticSeverity

SUCCESS_MESSAGE = "Jenkinsfile successfully validated."

# The message is non-greedy and may not cross a newline, so a fragment
# without its "@ line L, column C." suffix cannot swallow the next error.
_ERROR_RE = re.compile(
    r"WorkflowScript:[ \t]*\d+:[ \t]*(?P<message>[^\r\n]+?)[ \t]*"
    r"@[ \t]*line[ \t]+(?P<line>\d+),[ \t]*column[ \t]+(?P<column>\d+)\."
)


def parse_validation_response(text: str) -> list[Diagnostic]:
    """Return one ERROR diagnostic per well-formed fragment, in source order.

    Line and column are converted from Jenkins' 1-based numbering to the
    0-based positions used by LSP.  Empty or unmatched input yields ``[]``.
    """
    if not text or SUCCESS_MESSAGE in text:
        return []

    diagnostics: list[Diagnostic] = []
    for match in _ERROR_RE.finditer(text):
        message = match.group("message").strip()
        if not message:
            continue
        diagnostics.append(
            Diagnostic(
                line=max(int(match.group("line")) - 1, 0),
                column=max(int(match.group("column")) - 1, 0),
                message=message,
                severity=DiagnosticSeverity.ERROR,
            )
        )
    return diagnostics
