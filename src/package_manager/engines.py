"""Resolve ``engines`` ranges from package.json to a concrete tool release."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

import semantic_version

from package_manager.models import Manifest

logger = logging.getLogger(__name__)


def _normalize_spec(spec_str: str) -> str:
    """Normalize npm range syntax (hyphen, x-ranges) into SimpleSpec-compatible form."""
    s = spec_str.strip()

    # Hyphen ranges: "1.2.3 - 1.4.5" => ">=1.2.3,<=1.4.5"
    m = re.match(r'^\s*([0-9A-Za-z\.\-\+]+)\s+-\s+([0-9A-Za-z\.\-\+]+)\s*$', s)
    if m:
        return f">={m.group(1)},<={m.group(2)}"

    s2 = s.replace('*', 'x').lower()
    m = re.match(r'^\s*(\d+)\.(\d+)\.x\s*$', s2)
    if m:
        major, minor = int(m.group(1)), int(m.group(2))
        return f">={major}.{minor}.0,<{major}.{minor + 1}.0"

    m = re.match(r'^\s*(\d+)(?:\.x)?\s*$', s2)
    if m:
        major = int(m.group(1))
        return f">={major}.0.0,<{major + 1}.0.0"

    return spec_str


def _parse_range(spec_str: str):
    try:
        return semantic_version.NpmSpec(spec_str)
    except ValueError:
        # Fallback to normalized SimpleSpec if NpmSpec cannot parse
        return semantic_version.SimpleSpec(_normalize_spec(spec_str))


def pick_release(spec_str: str, candidates: Iterable[str]) -> Optional[semantic_version.Version]:
    """Return the highest candidate satisfying ``spec_str``.

    Pre-releases are never picked. Returns None when the range is invalid
    or nothing matches.
    """
    try:
        spec = _parse_range(spec_str)
    except ValueError as e:
        logger.warning("Invalid engines range '%s': %s", spec_str, e)
        return None

    matching = []
    for raw in candidates:
        try:
            ver = semantic_version.Version(raw)
        except ValueError:
            continue
        if ver.prerelease:
            continue
        if spec.match(ver):
            matching.append(ver)

    if not matching:
        return None
    return max(matching)


def engine_version(manifest: Manifest, tool_name: str, candidates: Iterable[str]) -> Optional[semantic_version.Version]:
    """Resolve ``engines[tool_name]`` against the known releases of the tool."""
    constraint = manifest.engines.get(tool_name)
    if not constraint:
        return None

    version = pick_release(constraint, candidates)
    if version is None:
        logger.info("No known %s release satisfies engines range '%s'", tool_name, constraint)
        return None

    logger.info('Returned (engines) info "%s" : "%s"', tool_name, version)
    return version
