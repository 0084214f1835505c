"""Capability interface the session layer needs from a tracker client."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from jirakit.models import Issue, IssueType, Project


@runtime_checkable
class TrackerClient(Protocol):
    """The six tracker operations the session, cache and issue operations use.

    :class:`jirakit.integrations.jira.JiraClient` implements it over REST;
    tests use an in-memory fake.
    """

    def list_projects(self) -> List[Project]:
        ...

    def list_issue_types(self) -> List[IssueType]:
        ...

    def search(
        self,
        jql: str,
        fields: Optional[List[str]] = None,
        start_at: int = 0,
        max_results: int = 50,
    ) -> List[Issue]:
        ...

    def create_issue(self, fields: Dict[str, Any]) -> Issue:
        ...

    def save_issue(self, issue: Issue, fields: Dict[str, Any]) -> Issue:
        ...

    def delete_issue(self, issue: Issue) -> bool:
        ...
