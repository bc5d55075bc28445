"""Typed errors raised by the package-manager helpers.

Errors that can be reported back to the job runner expose an ``error_type``
and a ``details()`` mapping; ``job.reporting`` turns them into payloads.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class HelperError(Exception):
    """Base class for all helper errors."""

    error_type = "unknown_error"

    def details(self) -> Dict[str, Any]:
        return {
            "error-class": type(self).__name__,
            "error-message": str(self),
        }


class HelperSubprocessFailed(HelperError):
    """Raised when an external command exits with a nonzero status.

    ``error_context`` carries the fingerprint of the command, never the
    literal command line.
    """

    def __init__(self, message: str, error_context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_context = error_context or {}

    def details(self) -> Dict[str, Any]:
        return {
            "error-class": type(self).__name__,
            "error-message": self.message,
            "command": self.error_context.get("command"),
        }


class MisconfiguredTooling(HelperError):
    """The repository's tool configuration prevents the tool from running."""

    error_type = "misconfigured_tooling"

    def __init__(self, tool_name: str, tool_message: str):
        super().__init__(f"{tool_name} misconfigured: {tool_message}")
        self.tool_name = tool_name
        self.tool_message = tool_message

    def details(self) -> Dict[str, Any]:
        return {"tool-name": self.tool_name, "tool-message": self.tool_message}


class ToolVersionNotSupported(HelperError):
    """The resolved tool version falls in a rejected band."""

    error_type = "tool_version_not_supported"

    def __init__(self, tool_name: str, detected_version: str, supported_versions: str):
        super().__init__(
            f"{tool_name} version {detected_version} is not supported. "
            f"Supported versions: {supported_versions}"
        )
        self.tool_name = tool_name
        self.detected_version = detected_version
        self.supported_versions = supported_versions

    def details(self) -> Dict[str, Any]:
        return {
            "tool-name": self.tool_name,
            "detected-version": self.detected_version,
            "supported-versions": self.supported_versions,
        }


class ParseFailure(HelperError):
    """A lockfile could not be parsed; callers recover with a default."""


class JobRepoNotFound(HelperError):
    """The repository named in the job could not be found."""

    error_type = "job_repo_not_found"

    def details(self) -> Dict[str, Any]:
        return {"message": str(self)}
