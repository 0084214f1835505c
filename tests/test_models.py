"""Tests for data models."""

import dataclasses

import pytest

from jirakit.models import (
    Issue,
    IssueEvent,
    IssueType,
    LookupOutcome,
    LookupResult,
    Project,
    QueryOptions,
    StatusFilter,
    User,
)


class TestProject:
    """Tests for Project."""

    def test_from_api(self):
        project = Project.from_api(
            {
                "key": "ISC",
                "id": "11020",
                "name": "Information Supply Chain",
                "self": "https://jira.example.com/rest/api/2/project/11020",
            }
        )
        assert project.key == "ISC"
        assert project.id == 11020
        assert project.url.endswith("/project/11020")

    def test_frozen(self):
        project = Project(key="ISC", id=11020, name="ISC")
        with pytest.raises(dataclasses.FrozenInstanceError):
            project.key = "APEX"

    def test_bad_id_becomes_zero(self):
        assert Project.from_api({"key": "X", "id": None}).id == 0


class TestIssueType:
    """Tests for IssueType."""

    def test_from_api(self):
        issue_type = IssueType.from_api(
            {"name": "Sub-task", "id": "5", "description": None, "subtask": True}
        )
        assert issue_type == IssueType(name="Sub-task", id=5, description="", subtask=True)


class TestIssue:
    """Tests for Issue accessors."""

    @pytest.fixture
    def api_issue(self):
        return Issue.from_api(
            {
                "key": "ISC-463",
                "id": 70001,
                "self": "https://jira.example.com/rest/api/2/issue/70001",
                "fields": {
                    "summary": "Add in Jira API to Origen",
                    "description": None,
                    "status": {"name": "Open"},
                    "issuetype": {"name": "Improvement", "id": "4"},
                    "assignee": {
                        "name": "B07507",
                        "emailAddress": "brian.caquelin@example.com",
                        "displayName": "Brian Caquelin",
                    },
                },
            }
        )

    def test_accessors(self, api_issue):
        assert api_issue.id == "70001"
        assert api_issue.summary == "Add in Jira API to Origen"
        assert api_issue.description == ""
        assert api_issue.status == "Open"
        assert api_issue.issue_type.id == 4
        assert api_issue.assignee == User(
            name="B07507",
            email="brian.caquelin@example.com",
            display_name="Brian Caquelin",
        )

    def test_project_key_falls_back_to_key_prefix(self, api_issue):
        assert api_issue.project_key == "ISC"

    def test_unassigned(self):
        issue = Issue(key="APEX-2", fields={"assignee": None})
        assert issue.assignee is None
        assert issue.issue_type is None
        assert issue.status == ""

    def test_apply_fields_merges_nested(self, api_issue):
        api_issue.apply_fields({"summary": "Renamed", "issuetype": {"name": "Bug"}})

        assert api_issue.summary == "Renamed"
        assert api_issue.fields["issuetype"] == {"name": "Bug", "id": "4"}


class TestLookupResult:
    """Tests for tagged lookup results."""

    def test_single_match_found(self):
        result = LookupResult.from_matches(["ISC"])
        assert result.outcome is LookupOutcome.FOUND
        assert result.value == "ISC"
        assert result

    def test_many_matches_ambiguous(self):
        result = LookupResult.from_matches(["ISC", "ISO"])
        assert result.ambiguous
        assert result.value is None
        assert result.matches == ["ISC", "ISO"]

    def test_keys(self):
        result = LookupResult.from_matches(
            [Project(key="ISC", id=1, name="a"), IssueType(name="Bug", id=2)]
        )
        assert result.keys == ["ISC", "Bug"]

    def test_no_match(self):
        result = LookupResult.from_matches([])
        assert result.outcome is LookupOutcome.NOT_FOUND
        assert not result


class TestEnums:
    """Tests for filter vocabularies."""

    def test_status_filter_values(self):
        assert [s.value for s in StatusFilter] == ["Open", "In Progress", "Resolved", "All", "All Open"]

    def test_status_filter_is_str(self):
        assert StatusFilter.IN_PROGRESS == "In Progress"

    def test_events(self):
        assert [e.value for e in IssueEvent] == ["created", "resolved", "updated"]

    def test_query_options_defaults(self):
        options = QueryOptions()
        assert options.status == "All Open"
        assert options.assignee is None
        assert options.fields == []
