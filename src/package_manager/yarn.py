"""Configure and run yarn (berry) and the other package managers.

Yarn commands should only be run through ``YarnTooling`` so that
``enableScripts`` is set before anything else executes: postinstall
scripts are untrusted code and must never run during an update.
"""

from __future__ import annotations

import logging
import os
import shlex
from typing import Callable, Optional, Sequence, Tuple, Union

import semantic_version
import yaml

from common.errors import HelperSubprocessFailed, MisconfiguredTooling
from common.shell import run_shell_command
from constants import Constants, YarnVersions
from package_manager.failures import (
    handle_subprocess_failure,
    missing_env_var_path,
    strip_env_placeholders,
)
from tooling_config import ToolingEnvironment

logger = logging.getLogger(__name__)

# Number of times an unresolved ${VAR} in a yarn config file is repaired
MAX_ENV_REPAIRS = 1

YarnCommand = Union[str, Tuple[str, Optional[str]]]


def run_npm_command(
    command: str,
    fingerprint: Optional[str] = None,
    *,
    cwd: Optional[str] = None,
    runner: Optional[Callable[..., str]] = None,
) -> str:
    """Run an npm command through corepack.

    corepack adds no shim for npm, so it has to be called explicitly to
    respect ``packageManager`` in package.json.
    """
    return (runner or run_shell_command)(
        f"corepack npm {command}",
        fingerprint=f"corepack npm {fingerprint or command}",
        cwd=cwd,
    )


def run_pnpm_command(
    command: str,
    fingerprint: Optional[str] = None,
    *,
    cwd: Optional[str] = None,
    runner: Optional[Callable[..., str]] = None,
) -> str:
    return (runner or run_shell_command)(
        f"pnpm {command}",
        fingerprint=f"pnpm {fingerprint or command}",
        cwd=cwd,
    )


class YarnTooling:
    """Yarn helpers bound to one working directory."""

    def __init__(
        self,
        cwd: Optional[str] = None,
        environment: Optional[ToolingEnvironment] = None,
        runner: Optional[Callable[..., str]] = None,
    ):
        self.cwd = os.path.abspath(cwd or os.getcwd())
        self.environment = environment or ToolingEnvironment()
        self._run = runner or run_shell_command
        self._major_version: Optional[int] = None

    def _path(self, relative: str) -> str:
        return os.path.join(self.cwd, relative)

    # ---------- .yarnrc.yml / workspace state ----------

    def fetch_yarnrc_yml_value(self, key: str, default_value):
        path = self._path(Constants.YARNRC_YML_FILE)
        if not os.path.isfile(path):
            return default_value
        with open(path, "r", encoding="utf-8") as f:
            yarnrc = yaml.safe_load(f)
        if not isinstance(yarnrc, dict):
            return default_value
        return yarnrc.get(key, default_value)

    def yarn_zero_install(self) -> bool:
        return os.path.exists(self._path(Constants.YARN_PNP_FILE))

    def yarn_offline_cache(self) -> bool:
        cache_dir = self.fetch_yarnrc_yml_value("cacheFolder", Constants.YARN_DEFAULT_CACHE_FOLDER)
        return (
            os.path.exists(self._path(str(cache_dir)))
            and self.fetch_yarnrc_yml_value("nodeLinker", "") == "node-modules"
        )

    # ---------- version ----------

    def yarn_major_version(self) -> int:
        if self._major_version is None:
            self._major_version = self._read_major_version()
        return self._major_version

    def _read_major_version(self) -> int:
        repairs = 0
        while True:
            try:
                output = self._run_single_yarn_command("--version")
                break
            except HelperSubprocessFailed as e:
                path = missing_env_var_path(e.message, self.cwd)
                if path is None:
                    handle_subprocess_failure(e, self.cwd)
                if repairs >= MAX_ENV_REPAIRS:
                    raise MisconfiguredTooling(
                        "Yarn", f"Unresolved environment variable in {path} after repair"
                    ) from e
                logger.warning("Removing unresolved environment variables from %s", path)
                strip_env_placeholders(self._path(path))
                repairs += 1

        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if not lines:
            raise MisconfiguredTooling("Yarn", "yarn --version printed no version")
        try:
            return semantic_version.Version.coerce(lines[-1]).major
        except ValueError as e:
            raise MisconfiguredTooling("Yarn", f"Unexpected yarn --version output: {lines[-1]}") from e

    def yarn_4_or_higher(self) -> bool:
        return self.yarn_major_version() >= YarnVersions.V4

    # ---------- berry modes ----------

    def yarn_berry_skip_build(self) -> bool:
        return self.yarn_major_version() >= YarnVersions.V3 and (
            self.yarn_zero_install() or self.yarn_offline_cache()
        )

    def yarn_berry_disable_scripts(self) -> bool:
        return self.yarn_major_version() == YarnVersions.V2 or not self.yarn_zero_install()

    def yarn_berry_args(self) -> str:
        if self.yarn_major_version() == YarnVersions.V2:
            return ""
        if self.yarn_berry_skip_build():
            return "--mode=skip-build"
        # update-lockfile leaves stale versions in a managed cache, so only
        # use it when the cache is not committed
        return "--mode=update-lockfile"

    def setup_yarn_berry(self) -> None:
        # CI detection would otherwise turn on immutable installs and block updates
        self._run_single_yarn_command("config set enableImmutableInstalls false")
        if not self.yarn_berry_skip_build():
            self._run_single_yarn_command("config set enableGlobalCache true")
        # Either enableScripts=false or --mode=skip-build must be in effect
        if self.yarn_berry_disable_scripts():
            self._run_single_yarn_command("config set enableScripts false")

        env = self.environment
        if env.http_proxy:
            self._run_single_yarn_command(
                f"config set httpProxy {shlex.quote(env.http_proxy)}",
                fingerprint="config set httpProxy <proxy>",
            )
        if env.https_proxy:
            self._run_single_yarn_command(
                f"config set httpsProxy {shlex.quote(env.https_proxy)}",
                fingerprint="config set httpsProxy <proxy>",
            )
        if env.node_extra_ca_certs:
            key = "httpsCaFilePath" if self.yarn_4_or_higher() else "caFilePath"
            self._run_single_yarn_command(f"config set {key} {shlex.quote(env.node_extra_ca_certs)}")

    # ---------- running ----------

    def run_yarn_commands(self, *commands: YarnCommand) -> Sequence[str]:
        """Set up berry once, then run each command.

        Each command is a string or a ``(command, fingerprint)`` pair.
        """
        self.setup_yarn_berry()
        outputs = []
        for entry in commands:
            command, fingerprint = (entry, None) if isinstance(entry, str) else entry
            outputs.append(self._run_single_yarn_command(command, fingerprint=fingerprint))
        return outputs

    def run_yarn_command(self, command: str, fingerprint: Optional[str] = None) -> str:
        self.setup_yarn_berry()
        return self._run_single_yarn_command(command, fingerprint=fingerprint)

    def _run_single_yarn_command(self, command: str, fingerprint: Optional[str] = None) -> str:
        return self._run(
            f"yarn {command}",
            fingerprint=f"yarn {fingerprint or command}",
            cwd=self.cwd,
        )
