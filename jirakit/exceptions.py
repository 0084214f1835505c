"""Exception types raised by jirakit.

Lookup misses are not exceptions; they come back as
:class:`jirakit.models.LookupResult` values.
"""

from typing import List, Optional


class JirakitError(Exception):
    """Base exception for all jirakit errors."""

    pass


class ValidationError(JirakitError):
    """Raised when an option value is rejected before any remote call.

    This includes:
    - Unknown status filter or event type
    - Malformed time window tokens
    - Issue fields of the wrong type or an unknown issue type
    """

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        super().__init__(message)
        self.problems = problems or []


class PreconditionError(JirakitError):
    """Raised when session state required by an operation is missing.

    This includes:
    - No tracker client connected
    - No current project selected
    """

    pass


class RemoteError(JirakitError):
    """Raised when the tracker itself fails a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_text: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class ConfigurationError(JirakitError):
    """Raised when configuration is invalid."""

    pass
