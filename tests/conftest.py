"""Pytest configuration and fixtures for jirakit tests."""

import copy
import io
import logging
import re
from typing import Any, Dict, List, Optional

import pytest
import structlog
from rich.console import Console

from jirakit.core.operations import IssueOperations
from jirakit.core.session import ProjectSession
from jirakit.models import Issue, IssueType, Project


def make_issue(
    key: str,
    summary: str,
    status: str = "Open",
    assignee: Optional[str] = None,
    email: str = "",
    issue_type: str = "Bug",
    description: str = "",
) -> Issue:
    fields: Dict[str, Any] = {
        "summary": summary,
        "description": description,
        "status": {"name": status},
        "issuetype": {"name": issue_type},
        "project": {"key": key.split("-")[0]},
        "assignee": None,
    }
    if assignee:
        fields["assignee"] = {"name": assignee, "emailAddress": email, "displayName": assignee}
    return Issue(key=key, id=key.split("-")[1], fields=fields)


_STATUS_IN = re.compile(r"^status in \((.*)\)$")


def _clause_matches(issue: Issue, clause: str) -> bool:
    clause = clause.strip()
    if clause.startswith("project = "):
        return issue.project_key == clause[len("project = "):]
    if clause.startswith("assignee = "):
        assignee = issue.assignee
        return assignee is not None and assignee.name.upper() == clause[len("assignee = "):]
    if clause.startswith("status = "):
        return issue.status == clause[len("status = "):].strip("'")
    match = _STATUS_IN.match(clause)
    if match:
        names = [name.strip().strip("'") for name in match.group(1).split(",")]
        return issue.status in names
    # Time clauses are not evaluated by the fake.
    return True


class FakeTrackerClient:
    """In-memory tracker implementing the TrackerClient operations."""

    def __init__(
        self,
        projects: List[Project],
        issue_types: List[IssueType],
        issues: List[Issue],
    ):
        self.projects = list(projects)
        self.issue_types = list(issue_types)
        self.issues: Dict[str, Issue] = {issue.key: issue for issue in issues}
        self.calls: List[tuple] = []
        self._counter = 1000

    def list_projects(self) -> List[Project]:
        self.calls.append(("list_projects",))
        return list(self.projects)

    def list_issue_types(self) -> List[IssueType]:
        self.calls.append(("list_issue_types",))
        return list(self.issue_types)

    def search(self, jql, fields=None, start_at=0, max_results=50) -> List[Issue]:
        self.calls.append(("search", jql, max_results))
        clauses = jql.split(" AND ") if jql else []
        found = [
            copy.deepcopy(issue)
            for issue in self.issues.values()
            if all(_clause_matches(issue, clause) for clause in clauses)
        ]
        return found[start_at:start_at + max_results]

    def create_issue(self, fields: Dict[str, Any]) -> Issue:
        self.calls.append(("create_issue", fields))
        project = fields["project"]
        if "id" in project:
            key = next(p.key for p in self.projects if str(p.id) == project["id"])
        else:
            key = project["key"]
        self._counter += 1
        issue = make_issue(
            f"{key}-{self._counter}",
            fields.get("summary", ""),
            assignee=(fields.get("assignee") or {}).get("name"),
            issue_type=fields["issuetype"]["name"],
            description=fields.get("description", ""),
        )
        self.issues[issue.key] = issue
        return copy.deepcopy(issue)

    def save_issue(self, issue: Issue, fields: Dict[str, Any]) -> Issue:
        self.calls.append(("save_issue", issue.key, fields))
        issue.apply_fields(fields)
        self.issues[issue.key].apply_fields(copy.deepcopy(fields))
        return issue

    def delete_issue(self, issue: Issue) -> bool:
        self.calls.append(("delete_issue", issue.key))
        return self.issues.pop(issue.key, None) is not None

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo CLI logging configuration between tests."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger("jirakit")
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def sample_projects() -> List[Project]:
    return [
        Project(key="ISC", id=11020, name="Information Supply Chain"),
        Project(key="APEX", id=11021, name="Apex Platform"),
        Project(key="ISO", id=11030, name="ISO Compliance"),
    ]


@pytest.fixture
def sample_issue_types() -> List[IssueType]:
    return [
        IssueType(name="Requirement", id=6, description="A product requirement."),
        IssueType(
            name="Bug",
            id=1,
            description="A problem which impairs or prevents the functions of the product.",
        ),
        IssueType(
            name="Improvement",
            id=4,
            description="An improvement or enhancement to an existing feature or task.",
        ),
    ]


@pytest.fixture
def sample_issues() -> List[Issue]:
    return [
        make_issue(
            "ISC-463",
            "Add in Jira API to Origen",
            assignee="B07507",
            email="brian.caquelin@example.com",
            issue_type="Improvement",
            description="A general purpose API for talking to Jira.",
        ),
        make_issue("ISC-464", "Importer drops rows", status="In Progress", assignee="A12345"),
        make_issue("ISC-470", "Timeout on export", status="Resolved", assignee="B07507"),
        make_issue("ISC-471", "Flaky nightly", status="In Progress", assignee="B07507"),
        make_issue(
            "APEX-1",
            "Define platform limits",
            assignee="C99999",
            issue_type="Requirement",
            description="Apex platform requirement.",
        ),
        make_issue("APEX-2", "Memory leak", status="In Progress"),
    ]


@pytest.fixture
def fake_client(sample_projects, sample_issue_types, sample_issues) -> FakeTrackerClient:
    return FakeTrackerClient(sample_projects, sample_issue_types, sample_issues)


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def session(fake_client, output) -> ProjectSession:
    return ProjectSession(
        fake_client,
        site="https://jira.example.com",
        default_assignee="b07507",
        console=Console(file=output, width=200),
    )


@pytest.fixture
def isc_session(session) -> ProjectSession:
    session.select_project("ISC")
    return session


@pytest.fixture
def operations(session) -> IssueOperations:
    return IssueOperations(session)


@pytest.fixture
def config_file(tmp_path):
    """Write a minimal valid config file."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "jira:\n"
        "  site: https://jira.example.com\n"
        "  username: b07507\n"
        "  password: secret\n"
    )
    return path
