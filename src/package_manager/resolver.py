"""Resolve which package-manager version to install and invoke.

Precedence, highest first:

1. ``packageManager`` declaring the tool with a version (``yarn@3.3.1``)
2. ``engines`` constraint for the tool (with or without a bare
   ``packageManager: "<tool>"``)
3. lockfile format markers
4. the configured default major
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Callable, Optional, Tuple

import semantic_version

from common.errors import ToolVersionNotSupported
from common.shell import run_shell_command
from constants import Constants, PackageManagers, PnpmVersions
from package_manager.engines import engine_version
from package_manager.lockfile_version import version_numeric
from package_manager.models import LockfileSet, Manifest, ResolutionSource, ResolvedTool
from tooling_config import ResolverConfig

logger = logging.getLogger(__name__)

# Installing a tool mutates corepack's global state
_INSTALL_LOCK = threading.Lock()

PNPM_SUPPORTED_VERSIONS = "7.*, 8.*, 9.*"


def _declared_version(manifest: Manifest, tool_name: str) -> Tuple[bool, Optional[semantic_version.Version]]:
    """Return (names_tool, version) for the manifest's ``packageManager``.

    ``names_tool`` is True for ``pnpm`` and ``pnpm@...``; ``version`` is set
    only when a full ``X.Y.Z`` follows the ``@``. Integrity suffixes such as
    ``+sha512.abc`` are ignored.
    """
    declared = manifest.package_manager
    if not declared:
        return False, None
    if declared == tool_name:
        return True, None
    if not declared.startswith(f"{tool_name}@"):
        return False, None

    match = re.match(rf"^{re.escape(tool_name)}@(?P<version>\d+\.\d+\.\d+)", declared)
    if not match:
        return True, None
    return True, semantic_version.Version(match.group("version"))


def raise_if_unsupported(resolved: ResolvedTool) -> None:
    if resolved.name != PackageManagers.PNPM.value:
        return
    if resolved.major < PnpmVersions.MIN_SUPPORTED:
        raise ToolVersionNotSupported("PNPM", resolved.install_spec, PNPM_SUPPORTED_VERSIONS)


def _resolve_unvalidated(
    manifest: Manifest,
    lockfiles: LockfileSet,
    tool_name: str,
    config: ResolverConfig,
) -> ResolvedTool:
    names_tool, declared = _declared_version(manifest, tool_name)
    if declared is not None:
        logger.info(
            'Found "packageManager" : "%s". Skipped checking "engines".',
            manifest.package_manager,
        )
        return ResolvedTool(tool_name, declared, ResolutionSource.DECLARED)

    engine = engine_version(manifest, tool_name, config.known_releases.get(tool_name, []))
    if engine is not None:
        if names_tool:
            logger.info('"packageManager" names %s without a version; using "engines"', tool_name)
        return ResolvedTool(tool_name, engine, ResolutionSource.ENGINES)

    lockfile = lockfiles.get(tool_name)
    if lockfile is not None and lockfile.exists:
        major = version_numeric(tool_name, lockfile, config)
        logger.info('Guessed version info "%s" : "%s"', tool_name, major)
        return ResolvedTool(
            tool_name,
            semantic_version.Version(major=major, minor=0, patch=0),
            ResolutionSource.LOCKFILE,
        )

    major = config.default_major(tool_name)
    logger.debug("Using default %s major %s", tool_name, major)
    return ResolvedTool(
        tool_name,
        semantic_version.Version(major=major, minor=0, patch=0),
        ResolutionSource.DEFAULT,
    )


def resolve(
    manifest: Manifest,
    lockfiles: LockfileSet,
    tool_name: str,
    config: Optional[ResolverConfig] = None,
) -> ResolvedTool:
    """Resolve one concrete version of ``tool_name``.

    Raises:
        ToolVersionNotSupported: If the result falls in a rejected band.
        ValueError: If ``tool_name`` is not npm, yarn or pnpm.
    """
    if tool_name not in Constants.SUPPORTED_PACKAGES:
        raise ValueError(f"Unsupported package manager: {tool_name}")

    resolved = _resolve_unvalidated(manifest, lockfiles, tool_name, config or ResolverConfig())
    raise_if_unsupported(resolved)
    return resolved


class PackageManagerSetup:
    """Resolve a tool for a workspace and install it through corepack."""

    def __init__(
        self,
        manifest: Manifest,
        lockfiles: LockfileSet,
        *,
        config: Optional[ResolverConfig] = None,
        cwd: Optional[str] = None,
        runner: Optional[Callable[..., str]] = None,
    ):
        self.manifest = manifest
        self.lockfiles = lockfiles
        self.config = config or ResolverConfig()
        self.cwd = cwd
        self._run = runner or run_shell_command

    def setup(self, tool_name: str) -> ResolvedTool:
        """Resolve, validate, then install when the version is pinned.

        Lockfile guesses are only installed for pnpm; other tools rely on
        the version corepack already provides.
        """
        resolved = resolve(self.manifest, self.lockfiles, tool_name, self.config)
        if self._should_install(resolved):
            self.install(resolved)
        return resolved

    @staticmethod
    def _should_install(resolved: ResolvedTool) -> bool:
        if resolved.source in (ResolutionSource.DECLARED, ResolutionSource.ENGINES):
            return True
        return (
            resolved.source == ResolutionSource.LOCKFILE
            and resolved.name == PackageManagers.PNPM.value
        )

    def install(self, resolved: ResolvedTool) -> str:
        logger.info('Installing "%s@%s"', resolved.name, resolved.install_spec)
        with _INSTALL_LOCK:
            return self._run(
                f"corepack install {resolved.name}@{resolved.install_spec} --global --cache-only",
                fingerprint="corepack install <name>@<version> --global --cache-only",
                cwd=self.cwd,
            )
