"""Jenkinsfile language server backed by a remote Jenkins validator."""

__version__ = "0.1.0"
