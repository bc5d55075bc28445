"""Data models for package-manager version resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import semantic_version


class ResolutionSource(Enum):
    """Where a resolved tool version came from."""
    DECLARED = "declared"
    ENGINES = "engines"
    LOCKFILE = "lockfile"
    DEFAULT = "default"


@dataclass
class Manifest:
    """The parts of package.json that influence tool selection."""
    package_manager: Optional[str] = None
    engines: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Manifest":
        package_manager = data.get("packageManager")
        engines = data.get("engines")
        return cls(
            package_manager=package_manager.strip() if isinstance(package_manager, str) else None,
            engines={str(k): str(v) for k, v in engines.items()} if isinstance(engines, dict) else {},
        )


@dataclass
class Lockfile:
    """Raw lockfile content; ``exists`` is False for a file that was not found."""
    name: str
    content: Optional[str]
    exists: bool = True


# Tool name -> lockfile (or None when the repository has none)
LockfileSet = Dict[str, Optional[Lockfile]]


@dataclass
class ResolvedTool:
    """Outcome of a resolution call."""
    name: str
    version: semantic_version.Version
    source: ResolutionSource

    @property
    def major(self) -> int:
        return self.version.major

    @property
    def install_spec(self) -> str:
        """Version string handed to corepack.

        Inferred and default resolutions only know the major, so corepack is
        left to pick the newest release within it.
        """
        if self.source in (ResolutionSource.LOCKFILE, ResolutionSource.DEFAULT):
            return str(self.version.major)
        return str(self.version)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": str(self.version),
            "source": self.source.value,
            "install_spec": self.install_spec,
        }
