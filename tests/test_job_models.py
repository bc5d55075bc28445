"""Tests for job file deserialization and error serialization."""

import json

import pytest

from common.errors import JobRepoNotFound, MisconfiguredTooling, ToolVersionNotSupported
from job.models import deserialize, load_job_file
from job.reporting import error_payload, serialize_error
from job.schema import SchemaError

FULL_JOB = """
{
  "job": {
    "package-manager": "nuget",
    "allowed-updates": [
      {
        "update-type": "all"
      }
    ],
    "debug": false,
    "dependency-groups": [],
    "dependencies": null,
    "dependency-group-to-refresh": null,
    "existing-pull-requests": [],
    "existing-group-pull-requests": [],
    "experiments": null,
    "ignore-conditions": [],
    "lockfile-only": false,
    "requirements-update-strategy": null,
    "security-advisories": [],
    "security-updates-only": false,
    "source": {
      "provider": "github",
      "repo": "some-org/some-repo",
      "directory": "specific-sdk",
      "hostname": null,
      "api-endpoint": null
    },
    "update-subdependencies": false,
    "updating-a-pull-request": false,
    "vendor-dependencies": false,
    "reject-external-code": false,
    "repo-private": false,
    "commit-message-options": null,
    "credentials-metadata": [
      {
        "host": "github.com",
        "type": "git_source"
      }
    ],
    "max-updater-run-time": 0
  }
}
"""


def _job(**overrides):
    job = {
        "package-manager": "npm_and_yarn",
        "source": {"provider": "github", "repo": "some-org/some-repo", "directory": "/"},
    }
    job.update(overrides)
    return json.dumps({"job": job})


class TestDeserializeJob:
    """Mapping of kebab-case JSON onto the job dataclasses."""

    def test_full_job(self):
        job = deserialize(FULL_JOB).job
        assert job.package_manager == "nuget"
        assert job.source.provider == "github"
        assert job.source.repo == "some-org/some-repo"
        assert job.source.directory == "specific-sdk"
        assert job.source.hostname is None
        assert job.allowed_updates[0].update_type == "all"
        assert job.experiments is None
        assert job.credentials_metadata == [{"host": "github.com", "type": "git_source"}]
        assert job.commit_message_options is None

    def test_minimal_job_gets_defaults(self):
        job = deserialize(_job()).job
        assert [a.update_type for a in job.allowed_updates] == ["all"]
        assert job.dependency_groups == []
        assert job.security_updates_only is False
        assert job.max_updater_run_time == 0

    def test_nested_collections(self):
        job = deserialize(_job(**{
            "dependency-groups": [{"name": "dev", "rules": {"patterns": ["*"]}, "applies-to": "version-updates"}],
            "existing-pull-requests": [[{"dependency-name": "lodash", "dependency-version": "4.17.21"}]],
            "existing-group-pull-requests": [{
                "dependency-group-name": "dev",
                "dependencies": [{"dependency-name": "jest", "dependency-version": "29.7.0"}],
            }],
            "ignore-conditions": [{"dependency-name": "react", "update-types": ["version-update:semver-major"]}],
            "security-advisories": [{"dependency-name": "minimist", "affected-versions": ["<1.2.6"]}],
            "commit-message-options": {"prefix": "deps", "include-scope": True},
            "source": {
                "provider": "github", "repo": "org/repo", "branch": "main",
                "commit": "abc123", "directories": ["/", "/web"],
            },
        })).job
        assert job.dependency_groups[0].rules == {"patterns": ["*"]}
        assert job.dependency_groups[0].applies_to == "version-updates"
        assert job.existing_pull_requests[0][0].dependency_version == "4.17.21"
        assert job.existing_group_pull_requests[0].dependencies[0].dependency_name == "jest"
        assert job.ignore_conditions[0].update_types == ["version-update:semver-major"]
        assert job.security_advisories[0].affected_versions == ["<1.2.6"]
        assert job.commit_message_options.prefix == "deps"
        assert job.commit_message_options.include_scope is True
        assert job.source.directories == ["/", "/web"]
        assert job.source.branch == "main"

    def test_load_job_file(self, tmp_path):
        path = tmp_path / "job.json"
        path.write_text(_job())
        assert load_job_file(str(path)).job.source.repo == "some-org/some-repo"


class TestRequiredFields:
    """Fail fast on missing required fields."""

    def test_missing_repo(self):
        payload = json.dumps({"job": {"package-manager": "npm_and_yarn", "source": {"provider": "github"}}})
        with pytest.raises(SchemaError) as exc:
            deserialize(payload)
        assert "job/source" in str(exc.value)
        assert "repo" in str(exc.value)

    def test_missing_provider(self):
        payload = json.dumps({"job": {"package-manager": "npm_and_yarn", "source": {"repo": "o/r"}}})
        with pytest.raises(SchemaError):
            deserialize(payload)

    def test_missing_package_manager(self):
        payload = json.dumps({"job": {"source": {"provider": "github", "repo": "o/r"}}})
        with pytest.raises(SchemaError):
            deserialize(payload)

    def test_missing_job(self):
        with pytest.raises(SchemaError):
            deserialize("{}")

    def test_not_json(self):
        with pytest.raises(SchemaError):
            deserialize("job: yes")

    def test_wrong_toggle_type(self):
        with pytest.raises(SchemaError):
            deserialize(_job(debug="yes"))

    @pytest.mark.parametrize("key", [
        "allowed-updates",
        "dependency-groups",
        "existing-group-pull-requests",
        "ignore-conditions",
        "security-advisories",
        "credentials-metadata",
    ])
    def test_non_object_entries(self, key):
        with pytest.raises(SchemaError) as exc:
            deserialize(_job(**{key: ["all"]}))
        assert f"job/{key}/0" in str(exc.value)

    def test_non_object_pull_request_dependency(self):
        with pytest.raises(SchemaError):
            deserialize(_job(**{"existing-pull-requests": [["lodash"]]}))
        with pytest.raises(SchemaError):
            deserialize(_job(**{"existing-pull-requests": ["lodash"]}))

    def test_non_object_group_pull_request_dependency(self):
        with pytest.raises(SchemaError):
            deserialize(_job(**{"existing-group-pull-requests": [
                {"dependency-group-name": "dev", "dependencies": ["jest"]},
            ]}))


class TestSerializeError:
    """Error payloads reported to the job runner."""

    def test_job_repo_not_found(self):
        expected = '{"data":{"error-type":"job_repo_not_found","error-details":{"message":"some message"}}}'
        assert serialize_error(JobRepoNotFound("some message")) == expected

    def test_tool_version_not_supported(self):
        payload = error_payload(ToolVersionNotSupported("PNPM", "6.0.2", "7.*, 8.*, 9.*"))
        assert payload == {
            "data": {
                "error-type": "tool_version_not_supported",
                "error-details": {
                    "tool-name": "PNPM",
                    "detected-version": "6.0.2",
                    "supported-versions": "7.*, 8.*, 9.*",
                },
            }
        }

    def test_misconfigured_tooling(self):
        payload = error_payload(MisconfiguredTooling("Yarn", "bad yarn-path"))
        assert payload["data"]["error-type"] == "misconfigured_tooling"
        assert payload["data"]["error-details"] == {"tool-name": "Yarn", "tool-message": "bad yarn-path"}

    def test_unexpected_exception(self):
        payload = error_payload(RuntimeError("kaboom"))
        assert payload["data"]["error-type"] == "unknown_error"
        assert payload["data"]["error-details"] == {"error-class": "RuntimeError", "error-message": "kaboom"}
