"""Classify package-manager subprocess failures into typed errors.

Known failure signatures are kept as data in ``FAILURE_PATTERNS``; anything
that matches none of them is re-raised unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import NoReturn, Optional, Pattern, Tuple

from common.errors import HelperSubprocessFailed, MisconfiguredTooling

logger = logging.getLogger(__name__)

YARN_PATH_NOT_FOUND = re.compile(
    r"^.*(?P<error>The \"yarn-path\" option has been set \(in [^)]+\), "
    r"but the specified location doesn't exist)",
    re.MULTILINE,
)

# ${VAR} placeholders without a "-default" fallback
ENV_PLACEHOLDER = re.compile(r"\$\{[^}-]+\}")


@dataclass(frozen=True)
class FailurePattern:
    """One known failure signature and the tooling error it maps to.

    A pattern matches either through ``regex`` or when every entry of
    ``substrings`` appears in the output. With ``group`` set, the tool
    message is that named group with the working directory shortened to
    ``.``; otherwise it is the whole output.
    """

    tool_name: str
    regex: Optional[Pattern[str]] = None
    substrings: Tuple[str, ...] = ()
    group: Optional[str] = None

    def tool_message(self, message: str, cwd: Optional[str]) -> Optional[str]:
        if self.regex is not None:
            match = self.regex.search(message)
            if not match:
                return None
            if self.group is None:
                return message
            detail = match.group(self.group)
            return detail.replace(cwd, ".", 1) if cwd else detail
        if self.substrings and all(s in message for s in self.substrings):
            return message
        return None


FAILURE_PATTERNS: Tuple[FailurePattern, ...] = (
    FailurePattern("Yarn", regex=YARN_PATH_NOT_FOUND, group="error"),
    FailurePattern("Invalid .yarnrc.yml file", substrings=("Internal Error", ".yarnrc.yml")),
)


def classify_failure(error: HelperSubprocessFailed, cwd: Optional[str] = None) -> Optional[MisconfiguredTooling]:
    for pattern in FAILURE_PATTERNS:
        tool_message = pattern.tool_message(error.message, cwd)
        if tool_message is not None:
            return MisconfiguredTooling(pattern.tool_name, tool_message)
    return None


def handle_subprocess_failure(error: HelperSubprocessFailed, cwd: Optional[str] = None) -> NoReturn:
    """Raise the typed error for a known signature, else re-raise ``error``."""
    classified = classify_failure(error, cwd)
    if classified is not None:
        logger.warning("Misconfigured tooling: %s", classified.tool_name)
        raise classified from error
    raise error


def missing_env_var_path(message: str, cwd: str) -> Optional[str]:
    """Return the file (relative to ``cwd``) yarn could not expand a variable in."""
    pattern = re.compile(
        r"Environment variable not found \((?:[^)]+)\) in "
        + re.escape(cwd.rstrip("/"))
        + r"/(?P<path>\S+)"
    )
    match = pattern.search(message)
    return match.group("path") if match else None


def strip_env_placeholders(path: str) -> None:
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    with open(path, "w", encoding="utf-8") as f:
        f.write(ENV_PLACEHOLDER.sub("", content))
