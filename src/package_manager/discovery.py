"""Load package.json and lockfiles from a workspace directory."""

from __future__ import annotations

import json
import logging
import os
from typing import Optional, Tuple

from constants import Constants, PackageManagers
from package_manager.models import Lockfile, LockfileSet, Manifest

logger = logging.getLogger(__name__)

LOCKFILE_NAMES = {
    PackageManagers.NPM.value: Constants.PACKAGE_LOCK_FILE,
    PackageManagers.YARN.value: Constants.YARN_LOCK_FILE,
    PackageManagers.PNPM.value: Constants.PNPM_LOCK_FILE,
}


def _read_text(path: str) -> Optional[str]:
    if not os.path.isfile(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def load_manifest(dir_path: str) -> Manifest:
    """Read package.json; a missing or unparseable file yields an empty Manifest."""
    path = os.path.join(dir_path, Constants.PACKAGE_JSON_FILE)
    content = _read_text(path)
    if content is None:
        logger.debug("No %s in %s", Constants.PACKAGE_JSON_FILE, dir_path)
        return Manifest()
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("Couldn't parse %s: %s", path, e)
        return Manifest()
    if not isinstance(data, dict):
        return Manifest()
    return Manifest.from_dict(data)


def discover_lockfiles(dir_path: str) -> LockfileSet:
    """Map each tool to its lockfile, or None when the file is absent."""
    lockfiles: LockfileSet = {}
    for tool_name, file_name in LOCKFILE_NAMES.items():
        content = _read_text(os.path.join(dir_path, file_name))
        lockfiles[tool_name] = Lockfile(file_name, content) if content is not None else None
    found = [lf.name for lf in lockfiles.values() if lf is not None]
    logger.debug("Discovered lockfiles in %s: %s", dir_path, ", ".join(found) or "none")
    return lockfiles


def load_workspace(dir_path: str) -> Tuple[Manifest, LockfileSet]:
    return load_manifest(dir_path), discover_lockfiles(dir_path)
