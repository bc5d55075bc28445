"""Experiment flags carried in a job's ``experiments`` map.

Only the flags listed in ``RECOGNIZED_EXPERIMENTS`` are read; any other key,
whatever its value type, is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from job.models import load_job_file
from tooling_config import ResolverConfig

RECOGNIZED_EXPERIMENTS = {
    "nuget_legacy_dependency_solver": "use_legacy_dependency_solver",
    "npm_fallback_version_above_v6": "npm_fallback_version_above_v6",
}


def is_enabled(experiments: Optional[Mapping[str, Any]], experiment_name: str) -> bool:
    """True when the flag's value renders as "true", ignoring case."""
    if not experiments:
        return False
    value = experiments.get(experiment_name)
    return str(value).lower() == "true"


@dataclass(frozen=True)
class ExperimentsManager:
    use_legacy_dependency_solver: bool = False
    npm_fallback_version_above_v6: bool = False

    @classmethod
    def from_experiments(cls, experiments: Optional[Mapping[str, Any]]) -> "ExperimentsManager":
        return cls(**{
            attr: is_enabled(experiments, name)
            for name, attr in RECOGNIZED_EXPERIMENTS.items()
        })

    @classmethod
    def from_job_file(cls, job_file_path: str) -> "ExperimentsManager":
        return cls.from_experiments(load_job_file(job_file_path).job.experiments)

    def apply_to(self, config: ResolverConfig) -> ResolverConfig:
        """Return a copy of ``config`` with experiment-driven settings applied."""
        return replace(
            config,
            npm_fallback_version_above_v6=(
                config.npm_fallback_version_above_v6 or self.npm_fallback_version_above_v6
            ),
        )
