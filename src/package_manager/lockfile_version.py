"""Infer package-manager major versions from lockfile format markers.

- package-lock.json: the integer ``lockfileVersion`` field
- yarn.lock: a ``__metadata`` key marks the berry (v2+) lineage
- pnpm-lock.yaml: the ``lockfileVersion`` line, banded by value

Mapping from pnpm lockfile versions to pnpm releases is simplified from
https://github.com/pnpm/spec/tree/main/lockfile.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, Optional

import yaml

from common.errors import ParseFailure
from constants import NpmVersions, PackageManagers, PnpmVersions, YarnVersions
from package_manager.models import Lockfile
from tooling_config import ResolverConfig

logger = logging.getLogger(__name__)

PNPM_LOCKFILE_VERSION = re.compile(
    r"""^lockfileVersion: ['"]?(?P<version>[\d.]+)""", re.MULTILINE
)


def _load_json(lockfile: Lockfile) -> Dict[str, Any]:
    try:
        data = json.loads(lockfile.content or "")
    except json.JSONDecodeError as e:
        raise ParseFailure(f"{lockfile.name}: {e}") from e
    if not isinstance(data, dict):
        raise ParseFailure(f"{lockfile.name}: top level is not an object")
    return data


def _to_int(value: Any) -> int:
    """Lenient integer conversion; anything unparseable counts as 0."""
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _has_content(lockfile: Optional[Lockfile]) -> bool:
    return bool(lockfile and lockfile.exists and lockfile.content and lockfile.content.strip())


def npm_version_numeric_npm6_or_higher(lockfile: Lockfile) -> int:
    """npm 8 for lockfileVersion >= 2, npm 6 for older or missing versions.

    Unreadable lockfiles resolve to the default npm version.
    """
    if not _has_content(lockfile):
        return NpmVersions.DEFAULT
    try:
        data = _load_json(lockfile)
    except ParseFailure as e:
        logger.warning("Failed to parse package-lock.json: %s", e)
        return NpmVersions.DEFAULT

    if _to_int(data.get("lockfileVersion")) >= 2:
        return NpmVersions.V8
    return NpmVersions.V6


def npm_version_numeric_npm8_or_higher(lockfile: Lockfile) -> int:
    # npm 7 and 8 write lockfileVersion 2, npm 9 writes 3; all map to npm 8 for now.
    if not _has_content(lockfile):
        return NpmVersions.DEFAULT
    try:
        data = _load_json(lockfile)
    except ParseFailure as e:
        logger.warning("Failed to parse package-lock.json: %s", e)
        return NpmVersions.DEFAULT

    raw = data.get("lockfileVersion")
    if raw is None or str(raw).strip() == "":
        return NpmVersions.DEFAULT
    if _to_int(raw) >= 2:
        return NpmVersions.V8
    return NpmVersions.DEFAULT


def npm_version_numeric(lockfile: Lockfile, fallback_version_above_v6: bool = False) -> int:
    """Pick the npm major for a package-lock.json.

    With ``fallback_version_above_v6`` set, old lockfiles no longer pull
    the version down to npm 6.
    """
    if fallback_version_above_v6:
        return npm_version_numeric_npm8_or_higher(lockfile)
    return npm_version_numeric_npm6_or_higher(lockfile)


def npm8(package_lock: Optional[Lockfile], fallback_version_above_v6: bool = False) -> bool:
    if package_lock is None:
        return True
    return npm_version_numeric(package_lock, fallback_version_above_v6) == NpmVersions.V8


def yarn_berry(yarn_lock: Optional[Lockfile]) -> bool:
    """True when the yarn.lock was written by yarn 2 or later."""
    if yarn_lock is None or yarn_lock.content is None:
        return False
    try:
        data = yaml.safe_load(yarn_lock.content)
    except yaml.YAMLError:
        return False
    return isinstance(data, dict) and "__metadata" in data


def yarn_version_numeric(yarn_lock: Lockfile) -> int:
    if yarn_berry(yarn_lock):
        return YarnVersions.DEFAULT
    return YarnVersions.FALLBACK


def pnpm_lockfile_version(pnpm_lock: Lockfile) -> Optional[str]:
    match = PNPM_LOCKFILE_VERSION.search(pnpm_lock.content or "")
    if not match:
        return None
    return match.group("version")


def _leading_float(value: str) -> float:
    match = re.match(r"\d+(?:\.\d+)?", value)
    return float(match.group(0)) if match else 0.0


def pnpm_version_numeric(pnpm_lock: Lockfile) -> int:
    raw = pnpm_lockfile_version(pnpm_lock)
    if raw is None:
        logger.debug("No lockfileVersion line in %s", pnpm_lock.name)
        return PnpmVersions.FALLBACK

    lockfile_version = _leading_float(raw)
    if lockfile_version >= 9.0:
        return PnpmVersions.V9
    if lockfile_version >= 6.0:
        return PnpmVersions.V8
    if lockfile_version >= 5.4:
        return PnpmVersions.V7
    return PnpmVersions.FALLBACK


def version_numeric(tool_name: str, lockfile: Lockfile, config: ResolverConfig) -> int:
    """Dispatch to the lockfile sniffer for ``tool_name``."""
    sniffers: Dict[str, Callable[[Lockfile], int]] = {
        PackageManagers.NPM.value: lambda lf: npm_version_numeric(
            lf, config.npm_fallback_version_above_v6
        ),
        PackageManagers.YARN.value: yarn_version_numeric,
        PackageManagers.PNPM.value: pnpm_version_numeric,
    }
    sniffer = sniffers.get(tool_name)
    if sniffer is None:
        raise ValueError(f"Unsupported package manager: {tool_name}")
    return sniffer(lockfile)
