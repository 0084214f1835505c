"""jirakit: session and cache layer over the Jira REST API."""

__version__ = "0.1.0"

from jirakit.exceptions import (
    JirakitError,
    ValidationError,
    PreconditionError,
    RemoteError,
    ConfigurationError,
)
from jirakit.models import (
    Project,
    IssueType,
    User,
    Issue,
    LookupOutcome,
    LookupResult,
)

__all__ = [
    "__version__",
    "JirakitError",
    "ValidationError",
    "PreconditionError",
    "RemoteError",
    "ConfigurationError",
    "Project",
    "IssueType",
    "User",
    "Issue",
    "LookupOutcome",
    "LookupResult",
]
