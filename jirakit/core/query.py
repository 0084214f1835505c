"""JQL construction for issue searches.

Filters are expressed as plain options (assignee, project, status, time
window, event) and turned into a single JQL string. Every option is
checked against its vocabulary first; if any check fails nothing is
built and :class:`~jirakit.exceptions.ValidationError` is raised with
all of the problems found.

Clause order is fixed: assignee, project, status, then the time clause.
"""

import re
from typing import Iterable, List, Optional, Union

import structlog

from jirakit.exceptions import ValidationError
from jirakit.models import IssueEvent, StatusFilter

logger = structlog.get_logger(__name__)

STATUS_TYPES = [status.value for status in StatusFilter]
EVENT_TYPES = [event.value for event in IssueEvent]

# e.g. "-1d", "+2w", "30m"
TIME_TOKEN_PATTERN = re.compile(r"^[-+]?\d+[dhmwy]$")

TimeWindow = Union[str, Iterable[str]]


def _time_tokens(time: Optional[TimeWindow]) -> List[str]:
    if time is None:
        return []
    if isinstance(time, str):
        return time.split()
    return [str(token) for token in time]


def check_time_window(time: Optional[TimeWindow]) -> bool:
    """Return True if every token of ``time`` is a relative time offset.

    Each bad token is logged; a single bad token rejects the whole window.
    """
    tokens = _time_tokens(time)
    if not tokens:
        logger.warning("empty_time_window")
        return False

    result = True
    for token in tokens:
        if not TIME_TOKEN_PATTERN.match(token):
            logger.warning("invalid_time_token", token=token)
            result = False
    return result


class QueryBuilder:
    """Builds JQL filters, falling back to the session's current project."""

    def __init__(self, current_project: Optional[str] = None):
        """Initialize builder.

        Args:
            current_project: Key of the session's current project, used
                when no explicit project is passed to :meth:`build`
        """
        self.current_project = current_project

    @staticmethod
    def project_query(project_key: str) -> str:
        return f"project = {project_key}"

    def resolve_project(self, project: Optional[str] = None) -> Optional[str]:
        """Explicit project wins over the current project."""
        if project is not None and str(project) != "":
            return str(project)
        return self.current_project

    @staticmethod
    def status_clause(status: str) -> Optional[str]:
        """Translate a status filter into a clause.

        Returns None for ``All``, which filters nothing.

        Raises:
            ValidationError: If ``status`` is not a known filter
        """
        try:
            status = StatusFilter(status).value
        except ValueError:
            message = f"status option '{status}' is not valid, choose from {', '.join(STATUS_TYPES)}"
            logger.warning("invalid_status_filter", status=str(status), choices=STATUS_TYPES)
            raise ValidationError(message, [message])

        if status == StatusFilter.ALL_OPEN.value:
            return "status in (Open, 'In Progress')"
        if status == StatusFilter.ALL.value:
            return None
        if " " in status:
            return f"status = '{status}'"
        return f"status = {status}"

    @staticmethod
    def time_clause(time: TimeWindow, event: str = IssueEvent.CREATED.value) -> str:
        """Build ``<event> <= '<time>'``.

        Raises:
            ValidationError: If the event or any time token is invalid
        """
        problems = []
        try:
            event = IssueEvent(event).value
        except ValueError:
            problems.append(f"event '{event}' is not supported, choose from {', '.join(EVENT_TYPES)}")
            logger.warning("invalid_event_type", event_type=str(event), choices=EVENT_TYPES)
        if not check_time_window(time):
            problems.append(f"could not parse time window '{time}'")
        if problems:
            raise ValidationError("; ".join(problems), problems)

        return f"{event} <= '{' '.join(_time_tokens(time))}'"

    def build(
        self,
        assignee: Optional[str] = None,
        project: Optional[str] = None,
        status: str = StatusFilter.ALL.value,
        time: Optional[TimeWindow] = None,
        event: Optional[str] = None,
        require_project: bool = False,
    ) -> str:
        """Build a JQL string from filter options.

        Args:
            assignee: Assignee name, upper-cased in the query
            project: Project key; defaults to the current project
            status: One of ``STATUS_TYPES``
            time: Relative time window, e.g. ``"-1d"`` or ``["-1w", "2d"]``
            event: One of ``EVENT_TYPES``; defaults to ``created`` when a
                time window is given
            require_project: Fail instead of omitting the project clause

        Returns:
            Clauses joined with ``AND``

        Raises:
            ValidationError: If any option is invalid
        """
        problems = []
        clauses = []

        if assignee is not None:
            if not isinstance(assignee, str) or not assignee.strip():
                problems.append("assignee option must be a non-empty string")
            else:
                clauses.append(f"assignee = {assignee.strip().upper()}")

        project_key = self.resolve_project(project)
        if project_key is not None:
            clauses.append(self.project_query(project_key))
        elif require_project:
            problems.append("a project must be given or a current project selected")

        try:
            status_clause = self.status_clause(status)
        except ValidationError as e:
            problems.extend(e.problems)
        else:
            if status_clause:
                clauses.append(status_clause)

        if time is not None or event is not None:
            try:
                clauses.append(self.time_clause(time, event or IssueEvent.CREATED.value))
            except ValidationError as e:
                problems.extend(e.problems)

        if problems:
            logger.warning("query_not_built", problems=problems)
            raise ValidationError("; ".join(problems), problems)

        jql = " AND ".join(clauses)
        logger.debug("query_built", jql=jql)
        return jql
