"""Serialize errors into the payload reported back to the job runner."""

from __future__ import annotations

import json
from typing import Any, Dict

from common.errors import HelperError


def error_payload(error: BaseException) -> Dict[str, Any]:
    if isinstance(error, HelperError):
        error_type, details = error.error_type, error.details()
    else:
        error_type = "unknown_error"
        details = {"error-class": type(error).__name__, "error-message": str(error)}
    return {"data": {"error-type": error_type, "error-details": details}}


def serialize_error(error: BaseException) -> str:
    """Compact JSON, e.g. ``{"data":{"error-type":"job_repo_not_found",...}}``."""
    return json.dumps(error_payload(error), separators=(",", ":"))
