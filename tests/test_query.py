"""Tests for JQL construction."""

import pytest
from structlog.testing import capture_logs

from jirakit.core.query import (
    EVENT_TYPES,
    STATUS_TYPES,
    QueryBuilder,
    check_time_window,
)
from jirakit.exceptions import ValidationError
from jirakit.models import IssueEvent, StatusFilter


class TestStatusClause:
    """Tests for status filter translation."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            ("Open", "status = Open"),
            ("In Progress", "status = 'In Progress'"),
            ("Resolved", "status = Resolved"),
            ("All Open", "status in (Open, 'In Progress')"),
            ("All", None),
        ],
    )
    def test_known_statuses(self, status, expected):
        """Every known filter maps to its documented clause."""
        assert QueryBuilder.status_clause(status) == expected

    @pytest.mark.parametrize(
        "status,expected",
        [
            (StatusFilter.OPEN, "status = Open"),
            (StatusFilter.IN_PROGRESS, "status = 'In Progress'"),
            (StatusFilter.ALL_OPEN, "status in (Open, 'In Progress')"),
            (StatusFilter.ALL, None),
        ],
    )
    def test_enum_members_render_values(self, status, expected):
        assert QueryBuilder.status_clause(status) == expected

    def test_status_vocabulary(self):
        assert STATUS_TYPES == ["Open", "In Progress", "Resolved", "All", "All Open"]

    @pytest.mark.parametrize("status", ["Closed", "open", "", "ALL"])
    def test_unknown_status_rejected(self, status):
        """Unknown filters raise and are logged."""
        with capture_logs() as logs:
            with pytest.raises(ValidationError) as exc_info:
                QueryBuilder.status_clause(status)

        assert "choose from" in str(exc_info.value)
        assert logs[0]["event"] == "invalid_status_filter"


class TestTimeWindow:
    """Tests for relative time window checks."""

    @pytest.mark.parametrize("time", ["-1d", "+2w", "30m", "4h", "-1y", "-1w 2d", ["-3d", "+1h"]])
    def test_valid_windows(self, time):
        assert check_time_window(time) is True

    @pytest.mark.parametrize("time", ["1", "d", "-1x", "yesterday", "-1d two", "1.5d", ["-1d", "x"]])
    def test_invalid_windows(self, time):
        assert check_time_window(time) is False

    def test_each_bad_token_logged(self):
        with capture_logs() as logs:
            assert check_time_window("-1d bad -2q") is False

        bad = [entry["token"] for entry in logs if entry["event"] == "invalid_time_token"]
        assert bad == ["bad", "-2q"]

    def test_empty_window_rejected(self):
        assert check_time_window("") is False
        assert check_time_window(None) is False


class TestTimeClause:
    """Tests for event/time clauses."""

    def test_default_event(self):
        assert QueryBuilder.time_clause("-1d") == "created <= '-1d'"

    @pytest.mark.parametrize("event", EVENT_TYPES)
    def test_each_event(self, event):
        assert QueryBuilder.time_clause("-2w", event) == f"{event} <= '-2w'"

    def test_token_list_joined(self):
        assert QueryBuilder.time_clause(["-1w", "2d"], "updated") == "updated <= '-1w 2d'"

    def test_bad_event_and_time_reported_together(self):
        with pytest.raises(ValidationError) as exc_info:
            QueryBuilder.time_clause("soon", "deleted")

        assert len(exc_info.value.problems) == 2

    def test_bad_event_logged(self):
        with capture_logs() as logs:
            with pytest.raises(ValidationError):
                QueryBuilder.time_clause("-1d", "closed")

        assert logs[0]["event"] == "invalid_event_type"
        assert logs[0]["event_type"] == "closed"

    @pytest.mark.parametrize("event", list(IssueEvent))
    def test_enum_events_render_values(self, event):
        assert QueryBuilder.time_clause("-1d", event) == f"{event.value} <= '-1d'"


class TestBuild:
    """Tests for full query assembly."""

    def test_clause_order(self):
        builder = QueryBuilder()
        jql = builder.build(
            assignee="b07507",
            project="ISC",
            status="All Open",
            time="-1d",
            event="updated",
        )
        assert jql == "assignee = B07507 AND project = ISC AND status in (Open, 'In Progress') AND updated <= '-1d'"

    def test_current_project_used_when_none_given(self):
        builder = QueryBuilder(current_project="ISC")
        assert builder.build(assignee="x") == "assignee = X AND project = ISC"

    def test_explicit_project_wins(self):
        builder = QueryBuilder(current_project="ISC")
        assert builder.build(project="APEX") == "project = APEX"

    def test_no_project_clause_without_project(self):
        assert QueryBuilder().build(assignee="b07507", status="Open") == "assignee = B07507 AND status = Open"

    def test_require_project(self):
        with pytest.raises(ValidationError):
            QueryBuilder().build(assignee="b07507", require_project=True)

    def test_all_status_omits_clause(self):
        assert QueryBuilder(current_project="ISC").build(status="All") == "project = ISC"

    def test_invalid_status_builds_nothing(self):
        builder = QueryBuilder(current_project="ISC")
        with capture_logs() as logs:
            with pytest.raises(ValidationError):
                builder.build(assignee="b07507", status="Done")

        assert any(entry["event"] == "query_not_built" for entry in logs)

    def test_one_bad_token_invalidates_window(self):
        with pytest.raises(ValidationError) as exc_info:
            QueryBuilder(current_project="ISC").build(time="-1d nope")

        assert "could not parse time window" in exc_info.value.problems[0]

    def test_all_problems_collected(self):
        with pytest.raises(ValidationError) as exc_info:
            QueryBuilder().build(assignee="", status="Nope", time="x", event="closed", require_project=True)

        assert len(exc_info.value.problems) == 5

    def test_enum_options(self):
        jql = QueryBuilder().build(
            assignee="b07507",
            project="ISC",
            status=StatusFilter.RESOLVED,
            time="-2w",
            event=IssueEvent.UPDATED,
        )
        assert jql == "assignee = B07507 AND project = ISC AND status = Resolved AND updated <= '-2w'"

    def test_project_query(self):
        assert QueryBuilder.project_query("ISC") == "project = ISC"

    def test_output_is_deterministic(self):
        builder = QueryBuilder(current_project="ISC")
        first = builder.build(assignee="b07507", status="Resolved")
        second = builder.build(assignee="b07507", status="Resolved")
        assert first == second
