"""Jira REST API v2 client."""

from typing import Any, Dict, List, Optional

import requests
import structlog

from jirakit.config.settings import TrackerSettings
from jirakit.exceptions import RemoteError
from jirakit.models import Issue, IssueType, Project

logger = structlog.get_logger(__name__)


class JiraError(RemoteError):
    """Raised when Jira operations fail."""

    pass


class JiraClient:
    """Client for the Jira REST API.

    Implements :class:`jirakit.core.client.TrackerClient`.
    """

    def __init__(self, settings: TrackerSettings, session: Optional[requests.Session] = None):
        """Initialize Jira client.

        Args:
            settings: Connection settings
            session: Optional pre-built HTTP session
        """
        self.settings = settings
        self.base_url = settings.base_url
        self.api_url = f"{self.base_url}/rest/api/2"

        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if settings.auth_type == "token":
            self.session.headers["Authorization"] = f"Bearer {settings.token}"
        else:
            self.session.auth = (settings.username, settings.password or "")
        self.session.verify = settings.use_ssl

        logger.info(
            "jira_client_initialized",
            url=self.base_url,
            auth_type=settings.auth_type,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.settings.timeout,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            logger.error("jira_request_failed", method=method, path=path, error=str(e))
            raise JiraError(f"Request to Jira failed: {e}")

        if response.status_code >= 400:
            logger.error(
                "jira_request_rejected",
                method=method,
                path=path,
                status=response.status_code,
            )
            raise JiraError(
                f"{method} {path} failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                response_text=response.text,
            )
        return response

    def test_connection(self) -> bool:
        """Test connection to Jira.

        Returns:
            True if connection successful

        Raises:
            JiraError: If connection fails
        """
        user = self._request("GET", "/myself").json()
        logger.info(
            "jira_connection_successful",
            user=user.get("displayName"),
            name=user.get("name"),
        )
        return True

    def list_projects(self) -> List[Project]:
        data = self._request("GET", "/project").json()
        return [Project.from_api(item) for item in data]

    def list_issue_types(self) -> List[IssueType]:
        data = self._request("GET", "/issuetype").json()
        return [IssueType.from_api(item) for item in data]

    def search(
        self,
        jql: str,
        fields: Optional[List[str]] = None,
        start_at: int = 0,
        max_results: int = 50,
    ) -> List[Issue]:
        """Search for issues using JQL.

        Args:
            jql: JQL query string
            fields: Fields to return (default: Jira's navigable fields)
            start_at: Index of the first result
            max_results: Maximum number of results

        Returns:
            List of Issue objects
        """
        params: Dict[str, Any] = {
            "jql": jql,
            "startAt": start_at,
            "maxResults": max_results,
        }
        if fields:
            params["fields"] = ",".join(fields)

        data = self._request("GET", "/search", params=params).json()
        issues = [Issue.from_api(item) for item in data.get("issues", [])]

        logger.info("jira_search_complete", count=len(issues), jql=jql[:80])
        return issues

    def get_issue(self, issue_key: str) -> Optional[Issue]:
        """Get a Jira issue by key.

        Returns:
            Issue or None if not found
        """
        try:
            data = self._request("GET", f"/issue/{issue_key}").json()
        except JiraError as e:
            if e.status_code == 404:
                return None
            raise
        return Issue.from_api(data)

    def create_issue(self, fields: Dict[str, Any]) -> Issue:
        """Create an issue from an assembled field payload."""
        data = self._request("POST", "/issue", json={"fields": fields}).json()

        logger.info("jira_issue_created", key=data.get("key"))
        return Issue(
            key=data.get("key", ""),
            id=str(data.get("id", "")),
            fields=dict(fields),
            url=data.get("self", ""),
        )

    def save_issue(self, issue: Issue, fields: Dict[str, Any]) -> Issue:
        """Save ``fields`` on ``issue`` and fold them into the handle."""
        self._request("PUT", f"/issue/{issue.key}", json={"fields": fields})
        issue.apply_fields(fields)

        logger.info("jira_issue_saved", key=issue.key, fields=sorted(fields))
        return issue

    def delete_issue(self, issue: Issue) -> bool:
        response = self._request("DELETE", f"/issue/{issue.key}")

        logger.info("jira_issue_deleted", key=issue.key)
        return response.status_code == 204


def connect(settings: TrackerSettings) -> JiraClient:
    """Open a client for the tracker described by ``settings``."""
    return JiraClient(settings)
