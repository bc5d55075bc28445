"""Explicit configuration threaded through the resolver and yarn helpers.

Defaults come from ``constants``; a YAML file may override them and the
process environment is captured once, at the edge, by
``ToolingEnvironment.from_env``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import yaml

from constants import (
    Constants,
    NpmVersions,
    PackageManagers,
    PnpmVersions,
    YarnVersions,
)

logger = logging.getLogger(__name__)


def _default_majors() -> Dict[str, int]:
    return {
        PackageManagers.NPM.value: NpmVersions.DEFAULT,
        PackageManagers.YARN.value: YarnVersions.DEFAULT,
        PackageManagers.PNPM.value: PnpmVersions.DEFAULT,
    }


def _default_releases() -> Dict[str, List[str]]:
    return {k: list(v) for k, v in Constants.KNOWN_RELEASES.items()}


@dataclass
class ResolverConfig:
    """Tunables for version resolution."""

    default_majors: Dict[str, int] = field(default_factory=_default_majors)
    known_releases: Dict[str, List[str]] = field(default_factory=_default_releases)
    npm_fallback_version_above_v6: bool = False

    def default_major(self, tool_name: str) -> int:
        return self.default_majors[tool_name]


@dataclass
class ToolingEnvironment:
    """Proxy and certificate settings forwarded to package managers."""

    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    node_extra_ca_certs: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ToolingEnvironment":
        """Capture the relevant variables; empty values count as unset."""
        env = os.environ if environ is None else environ
        return cls(
            http_proxy=env.get(Constants.ENV_HTTP_PROXY) or None,
            https_proxy=env.get(Constants.ENV_HTTPS_PROXY) or None,
            node_extra_ca_certs=env.get(Constants.ENV_NODE_EXTRA_CA_CERTS) or None,
        )


def _read_yaml(config_path: str) -> Dict[str, Any]:
    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error("Failed to load config %s: %s", config_path, e)
            return {}
    return data if isinstance(data, dict) else {}


def load_config(config_path: Optional[str] = None) -> ResolverConfig:
    """Build a ResolverConfig, overlaying the ``resolver`` section of a YAML file.

    Recognized keys::

        resolver:
          default_majors: {npm: 8, yarn: 3, pnpm: 9}
          known_releases: {pnpm: ["9.15.4"]}
          npm_fallback_version_above_v6: true
    """
    config = ResolverConfig()
    if not config_path:
        return config

    section = _read_yaml(config_path).get("resolver", {})
    if not isinstance(section, dict):
        logger.warning("Ignoring malformed 'resolver' section in %s", config_path)
        return config

    majors = section.get("default_majors") or {}
    for tool_name, major in majors.items():
        if tool_name in config.default_majors:
            config.default_majors[tool_name] = int(major)

    releases = section.get("known_releases") or {}
    for tool_name, versions in releases.items():
        if tool_name in config.known_releases and isinstance(versions, list):
            config.known_releases[tool_name] = [str(v) for v in versions]

    if "npm_fallback_version_above_v6" in section:
        config.npm_fallback_version_above_v6 = bool(section["npm_fallback_version_above_v6"])

    return config
