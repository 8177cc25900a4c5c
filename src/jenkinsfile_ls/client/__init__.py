"""HTTP client for the Jenkins pipeline validator."""

from jenkinsfile_ls.client.jenkins import CRUMB_PATH, VALIDATE_PATH, JenkinsClient

__all__ = [
    "CRUMB_PATH",
    "VALIDATE_PATH",
    "JenkinsClient",
]
