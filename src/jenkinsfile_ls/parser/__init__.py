"""Conversion of Jenkins validator output into diagnostics."""

from jenkinsfile_ls.parser.diagnostics import SUCCESS_MESSAGE, parse_validation_response

__all__ = [
    "SUCCESS_MESSAGE",
    "parse_validation_response",
]
