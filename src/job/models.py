"""Data models for job description files.

Job files are JSON with kebab-case keys under a top-level ``job`` object::

    {"job": {"package-manager": "npm_and_yarn",
             "source": {"provider": "github", "repo": "org/repo"}, ...}}

``deserialize`` validates the document against ``JOB_FILE_SCHEMA`` before
building the dataclasses, so required fields fail fast with a JSON path.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from job.schema import JOB_FILE_SCHEMA, SchemaError, validate_input


def _list(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    return value if isinstance(value, list) else []


def _bool(data: Mapping[str, Any], key: str) -> bool:
    return bool(data.get(key) or False)


@dataclass
class AllowedUpdate:
    dependency_type: str = "all"
    dependency_name: Optional[str] = None
    update_type: str = "all"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AllowedUpdate":
        return cls(
            dependency_type=data.get("dependency-type") or "all",
            dependency_name=data.get("dependency-name"),
            update_type=data.get("update-type") or "all",
        )


@dataclass
class DependencyGroup:
    name: str
    rules: Dict[str, Any] = field(default_factory=dict)
    applies_to: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DependencyGroup":
        return cls(
            name=data.get("name", ""),
            rules=data.get("rules") or {},
            applies_to=data.get("applies-to"),
        )


@dataclass
class PullRequestDependency:
    dependency_name: str
    dependency_version: Optional[str] = None
    dependency_removed: bool = False
    directory: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PullRequestDependency":
        return cls(
            dependency_name=data.get("dependency-name", ""),
            dependency_version=data.get("dependency-version"),
            dependency_removed=_bool(data, "dependency-removed"),
            directory=data.get("directory"),
        )


@dataclass
class GroupPullRequest:
    dependency_group_name: str
    dependencies: List[PullRequestDependency] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GroupPullRequest":
        return cls(
            dependency_group_name=data.get("dependency-group-name", ""),
            dependencies=[PullRequestDependency.from_dict(d) for d in _list(data, "dependencies")],
        )


@dataclass
class IgnoreCondition:
    dependency_name: str
    source: Optional[str] = None
    update_types: List[str] = field(default_factory=list)
    version_requirement: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IgnoreCondition":
        return cls(
            dependency_name=data.get("dependency-name", ""),
            source=data.get("source"),
            update_types=_list(data, "update-types"),
            version_requirement=data.get("version-requirement"),
        )


@dataclass
class SecurityAdvisory:
    dependency_name: str
    affected_versions: List[str] = field(default_factory=list)
    patched_versions: List[str] = field(default_factory=list)
    unaffected_versions: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SecurityAdvisory":
        return cls(
            dependency_name=data.get("dependency-name", ""),
            affected_versions=_list(data, "affected-versions"),
            patched_versions=_list(data, "patched-versions"),
            unaffected_versions=_list(data, "unaffected-versions"),
        )


@dataclass
class JobSource:
    provider: str
    repo: str
    directory: Optional[str] = None
    directories: Optional[List[str]] = None
    hostname: Optional[str] = None
    api_endpoint: Optional[str] = None
    branch: Optional[str] = None
    commit: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobSource":
        return cls(
            provider=data["provider"],
            repo=data["repo"],
            directory=data.get("directory"),
            directories=data.get("directories"),
            hostname=data.get("hostname"),
            api_endpoint=data.get("api-endpoint"),
            branch=data.get("branch"),
            commit=data.get("commit"),
        )


@dataclass
class CommitOptions:
    prefix: Optional[str] = None
    prefix_development: Optional[str] = None
    include_scope: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CommitOptions":
        return cls(
            prefix=data.get("prefix"),
            prefix_development=data.get("prefix-development"),
            include_scope=data.get("include-scope"),
        )


@dataclass
class Job:
    package_manager: str
    source: JobSource
    allowed_updates: List[AllowedUpdate] = field(default_factory=lambda: [AllowedUpdate()])
    debug: bool = False
    dependency_groups: List[DependencyGroup] = field(default_factory=list)
    dependencies: Optional[List[str]] = None
    dependency_group_to_refresh: Optional[str] = None
    existing_pull_requests: List[List[PullRequestDependency]] = field(default_factory=list)
    existing_group_pull_requests: List[GroupPullRequest] = field(default_factory=list)
    experiments: Optional[Dict[str, Any]] = None
    ignore_conditions: List[IgnoreCondition] = field(default_factory=list)
    lockfile_only: bool = False
    requirements_update_strategy: Optional[str] = None
    security_advisories: List[SecurityAdvisory] = field(default_factory=list)
    security_updates_only: bool = False
    update_subdependencies: bool = False
    updating_a_pull_request: bool = False
    vendor_dependencies: bool = False
    reject_external_code: bool = False
    repo_private: bool = False
    commit_message_options: Optional[CommitOptions] = None
    credentials_metadata: List[Dict[str, Any]] = field(default_factory=list)
    max_updater_run_time: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Job":
        allowed = [AllowedUpdate.from_dict(a) for a in _list(data, "allowed-updates")]
        commit_options = data.get("commit-message-options")
        return cls(
            package_manager=data["package-manager"],
            source=JobSource.from_dict(data["source"]),
            allowed_updates=allowed or [AllowedUpdate()],
            debug=_bool(data, "debug"),
            dependency_groups=[DependencyGroup.from_dict(g) for g in _list(data, "dependency-groups")],
            dependencies=data.get("dependencies"),
            dependency_group_to_refresh=data.get("dependency-group-to-refresh"),
            existing_pull_requests=[
                [PullRequestDependency.from_dict(d) for d in pr]
                for pr in _list(data, "existing-pull-requests")
                if isinstance(pr, list)
            ],
            existing_group_pull_requests=[
                GroupPullRequest.from_dict(g) for g in _list(data, "existing-group-pull-requests")
            ],
            experiments=data.get("experiments"),
            ignore_conditions=[IgnoreCondition.from_dict(c) for c in _list(data, "ignore-conditions")],
            lockfile_only=_bool(data, "lockfile-only"),
            requirements_update_strategy=data.get("requirements-update-strategy"),
            security_advisories=[SecurityAdvisory.from_dict(a) for a in _list(data, "security-advisories")],
            security_updates_only=_bool(data, "security-updates-only"),
            update_subdependencies=_bool(data, "update-subdependencies"),
            updating_a_pull_request=_bool(data, "updating-a-pull-request"),
            vendor_dependencies=_bool(data, "vendor-dependencies"),
            reject_external_code=_bool(data, "reject-external-code"),
            repo_private=_bool(data, "repo-private"),
            commit_message_options=CommitOptions.from_dict(commit_options) if commit_options else None,
            credentials_metadata=_list(data, "credentials-metadata"),
            max_updater_run_time=int(data.get("max-updater-run-time") or 0),
        )


@dataclass
class JobFile:
    job: Job


def deserialize(content: str) -> JobFile:
    """Parse and validate a job description document.

    Raises:
        SchemaError: If the text is not JSON or required fields are missing.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Job file is not valid JSON: {e}") from e
    validate_input(JOB_FILE_SCHEMA, data)
    return JobFile(job=Job.from_dict(data["job"]))


def load_job_file(path: str) -> JobFile:
    with open(path, "r", encoding="utf-8") as f:
        return deserialize(f.read())
