"""JSON Schema for job description files and the validator around it.

Only the fields consumers rely on are required; everything else is
optional and additional properties are allowed so newer job producers
keep working.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator


class SchemaError(ValueError):
    """Raised when data fails to validate against a provided schema."""


_STRING_OR_NULL = {"type": ["string", "null"]}
_BOOL_OR_NULL = {"type": ["boolean", "null"]}
_ARRAY_OR_NULL = {"type": ["array", "null"]}
_OBJECTS_OR_NULL = {"type": ["array", "null"], "items": {"type": "object"}}

JOB_FILE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["job"],
    "properties": {
        "job": {
            "type": "object",
            "required": ["package-manager", "source"],
            "properties": {
                "package-manager": {"type": "string", "minLength": 1},
                "allowed-updates": _OBJECTS_OR_NULL,
                "debug": _BOOL_OR_NULL,
                "dependency-groups": _OBJECTS_OR_NULL,
                "dependencies": _ARRAY_OR_NULL,
                "dependency-group-to-refresh": _STRING_OR_NULL,
                "existing-pull-requests": {
                    "type": ["array", "null"],
                    "items": {"type": "array", "items": {"type": "object"}},
                },
                "existing-group-pull-requests": {
                    "type": ["array", "null"],
                    "items": {
                        "type": "object",
                        "properties": {"dependencies": _OBJECTS_OR_NULL},
                    },
                },
                "experiments": {"type": ["object", "null"]},
                "ignore-conditions": _OBJECTS_OR_NULL,
                "lockfile-only": _BOOL_OR_NULL,
                "requirements-update-strategy": _STRING_OR_NULL,
                "security-advisories": _OBJECTS_OR_NULL,
                "security-updates-only": _BOOL_OR_NULL,
                "source": {
                    "type": "object",
                    "required": ["provider", "repo"],
                    "properties": {
                        "provider": {"type": "string", "minLength": 1},
                        "repo": {"type": "string", "minLength": 1},
                        "directory": _STRING_OR_NULL,
                        "directories": _ARRAY_OR_NULL,
                        "hostname": _STRING_OR_NULL,
                        "api-endpoint": _STRING_OR_NULL,
                        "branch": _STRING_OR_NULL,
                        "commit": _STRING_OR_NULL,
                    },
                },
                "update-subdependencies": _BOOL_OR_NULL,
                "updating-a-pull-request": _BOOL_OR_NULL,
                "vendor-dependencies": _BOOL_OR_NULL,
                "reject-external-code": _BOOL_OR_NULL,
                "repo-private": _BOOL_OR_NULL,
                "commit-message-options": {"type": ["object", "null"]},
                "credentials-metadata": _OBJECTS_OR_NULL,
                "max-updater-run-time": {"type": ["integer", "null"]},
            },
        },
    },
}


def validate_input(schema: Dict[str, Any], data: Any) -> None:
    """Validate ``data`` strictly and raise on the first error.

    Args:
        schema: Draft-07 JSON Schema dict.
        data:   Payload to validate.
    """
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        msg = f"Invalid job at '{path}': {first.message}"
        raise SchemaError(msg)
