"""Job description deserialization."""

from .experiments import ExperimentsManager
from .models import Job, JobFile, JobSource, deserialize, load_job_file
from .reporting import serialize_error
from .schema import SchemaError

__all__ = [
    "ExperimentsManager",
    "Job",
    "JobFile",
    "JobSource",
    "SchemaError",
    "deserialize",
    "load_job_file",
    "serialize_error",
]
