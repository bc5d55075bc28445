"""Single entry point for running package-manager executables.

Every external command goes through ``run_shell_command`` so that logging
only ever sees the redacted fingerprint of a command.
"""
from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import Dict, Optional

from common.errors import HelperSubprocessFailed
from common.logging_utils import Timer, extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


def run_shell_command(
    command: str,
    *,
    fingerprint: Optional[str] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> str:
    """Run ``command`` and return its combined stdout and stderr.

    Args:
        command: Command line; split with shell quoting rules, never run
            through a shell.
        fingerprint: Redacted form of the command used for logs and errors.
            Defaults to the command itself.
        cwd: Working directory for the command.
        env: Extra environment variables layered over the current process
            environment.

    Raises:
        HelperSubprocessFailed: On a nonzero exit or when the executable
            cannot be started.
    """
    fingerprint = fingerprint or command
    argv = shlex.split(command)
    full_env = os.environ.copy()
    if env:
        full_env.update(env)

    logger.info("Running: %s", fingerprint)
    with Timer() as t:
        try:
            proc = subprocess.run(  # noqa: S603
                argv,
                cwd=cwd,
                env=full_env,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise HelperSubprocessFailed(
                f"Unable to start {argv[0] if argv else fingerprint}: {exc}",
                {"command": fingerprint},
            ) from exc

    output = (proc.stdout or "") + (proc.stderr or "")
    if is_debug_enabled(logger):
        logger.debug(
            "Command finished",
            extra=extra_context(
                event="subprocess",
                component="shell",
                action=fingerprint,
                outcome="success" if proc.returncode == 0 else "failure",
                exit_code=proc.returncode,
                duration_ms=t.duration_ms(),
            ),
        )

    if proc.returncode == 0:
        return output

    raise HelperSubprocessFailed(
        output,
        {
            "command": fingerprint,
            "time_taken": t.duration_ms(),
            "process_exit_value": proc.returncode,
        },
    )
