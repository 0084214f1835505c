"""Core session, query and cache logic."""

from jirakit.core.client import TrackerClient
from jirakit.core.query import QueryBuilder, check_time_window
from jirakit.core.metadata import MetadataCache
from jirakit.core.session import ProjectSession, MAX_ISSUES, create_session_from_config
from jirakit.core.operations import IssueOperations, assemble_issue_fields

__all__ = [
    "TrackerClient",
    "QueryBuilder",
    "check_time_window",
    "MetadataCache",
    "ProjectSession",
    "MAX_ISSUES",
    "create_session_from_config",
    "IssueOperations",
    "assemble_issue_fields",
]
