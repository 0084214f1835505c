"""Project session: the current project and its cached issue set.

A session starts with no project selected. Selecting a project loads
that project's issues; switching projects discards the previous set and
loads the new one. Metadata and issues are swapped in under one lock, so
the cached issue set always belongs to the current project.

Mutations made through :class:`~jirakit.core.operations.IssueOperations`
are not mirrored into the cache; call :meth:`ProjectSession.refresh` to
see them.
"""

import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional

import structlog
from rich.console import Console

from jirakit.config.settings import TrackerSettings, settings_from_config
from jirakit.core.client import TrackerClient
from jirakit.core.metadata import Matcher, MetadataCache
from jirakit.core.query import QueryBuilder, TimeWindow
from jirakit.core.reporters.console import ConsoleReporter
from jirakit.exceptions import PreconditionError, ValidationError
from jirakit.integrations.jira import connect
from jirakit.models import Issue, IssueEvent, IssueType, Project, QueryOptions, StatusFilter

logger = structlog.get_logger(__name__)

MAX_ISSUES = 100_000


class ProjectSession:
    """One logical tracker session: client, metadata and current project."""

    def __init__(
        self,
        client: Optional[TrackerClient] = None,
        site: str = "",
        default_assignee: Optional[str] = None,
        max_results: int = MAX_ISSUES,
        console: Optional[Console] = None,
        reporter: Optional[ConsoleReporter] = None,
    ):
        """Initialize session.

        Args:
            client: Tracker client; metadata is loaded from it right away
            site: Site URL the client is connected to
            default_assignee: Assignee used when a query names none
            max_results: Upper bound passed to every issue search
            console: Console used for table output
            reporter: Table renderer
        """
        self._lock = threading.RLock()
        self._client: Optional[TrackerClient] = None
        self._current_project: Optional[Project] = None
        self._issues: Dict[str, Issue] = {}
        self.metadata = MetadataCache()
        self.site = site
        self.default_assignee = default_assignee.upper() if default_assignee else None
        self.max_results = max_results
        self.console = console or Console()
        self.reporter = reporter or ConsoleReporter()

        if client is not None:
            self.attach_client(client)

    @classmethod
    def launch(cls, settings: TrackerSettings, **kwargs: Any) -> "ProjectSession":
        """Connect to the tracker described by ``settings`` and load metadata."""
        client = connect(settings)
        session = cls(
            client,
            site=settings.site,
            default_assignee=settings.default_assignee or settings.username,
            max_results=settings.max_results,
            **kwargs,
        )
        logger.info("session_launched", site=settings.site)
        return session

    # -- state -------------------------------------------------------------

    @property
    def client(self) -> Optional[TrackerClient]:
        return self._client

    @property
    def current_project(self) -> Optional[Project]:
        return self._current_project

    @property
    def has_project(self) -> bool:
        return self._current_project is not None

    @property
    def projects(self) -> Dict[str, Project]:
        return self.metadata.projects

    @property
    def issue_types(self) -> Dict[str, IssueType]:
        return self.metadata.issue_types

    def issue_type_mapping(self) -> Dict[str, int]:
        return self.metadata.issue_type_mapping()

    def require_client(self) -> TrackerClient:
        if self._client is None:
            logger.error("no_client_connected")
            raise PreconditionError("No tracker client connected, launch a session first")
        return self._client

    def require_project(self) -> Project:
        if self._current_project is None:
            logger.error("no_current_project")
            raise PreconditionError("No current project set, select a project first")
        return self._current_project

    def attach_client(self, client: TrackerClient) -> None:
        """Bind a (new) client, reload metadata and drop the current project."""
        metadata = MetadataCache()
        metadata.load(client)
        with self._lock:
            self._client = client
            self.metadata = metadata
            self._current_project = None
            self._issues = {}

    # -- project selection -------------------------------------------------

    def _search(
        self,
        jql: str,
        fields: Optional[List[str]] = None,
        start_at: int = 0,
        max_results: Optional[int] = None,
    ) -> Dict[str, Issue]:
        client = self.require_client()
        found = client.search(
            jql,
            fields=fields or [],
            start_at=start_at,
            max_results=max_results or self.max_results,
        )
        return {issue.key: issue for issue in found}

    def select_project(
        self,
        project: Matcher,
        fields: Optional[List[str]] = None,
        start_at: int = 0,
        max_results: Optional[int] = None,
    ) -> Optional[Project]:
        """Make ``project`` current and load its issues.

        Args:
            project: Project key, numeric id, pattern or predicate

        Returns:
            The selected project, or None if the lookup was ambiguous or
            found nothing (the session is then left with no project)
        """
        self.require_client()
        result = self.metadata.lookup_project(project)

        if not result.found:
            with self._lock:
                self._current_project = None
                self._issues = {}
            logger.warning("project_deselected", matcher=str(project), outcome=result.outcome.value)
            return None

        selected = result.value
        issues = self._search(
            QueryBuilder.project_query(selected.key),
            fields=fields,
            start_at=start_at,
            max_results=max_results,
        )
        with self._lock:
            self._current_project = selected
            self._issues = issues

        logger.info("project_selected", key=selected.key, issue_count=len(issues))
        return selected

    def clear_project(self) -> None:
        with self._lock:
            self._current_project = None
            self._issues = {}

    def refresh(
        self,
        fields: Optional[List[str]] = None,
        start_at: int = 0,
        max_results: Optional[int] = None,
    ) -> None:
        """Reload metadata and the current project's issues.

        Raises:
            PreconditionError: If no project is selected or no client is
                connected; nothing is changed in that case
        """
        problems = []
        if self._current_project is None:
            problems.append("refresh needs a current project to be set")
        if self._client is None:
            problems.append("refresh needs a connected client")
        if problems:
            for problem in problems:
                logger.error("refresh_precondition_failed", reason=problem)
            raise PreconditionError("; ".join(problems))

        client = self._client
        metadata = MetadataCache()
        metadata.load(client)

        project = metadata.projects.get(self._current_project.key)
        if project is None:
            logger.warning("current_project_vanished", key=self._current_project.key)
            with self._lock:
                self.metadata = metadata
                self._current_project = None
                self._issues = {}
            return

        issues = self._search(
            QueryBuilder.project_query(project.key),
            fields=fields,
            start_at=start_at,
            max_results=max_results,
        )
        with self._lock:
            self.metadata = metadata
            self._current_project = project
            self._issues = issues

        logger.info("session_refreshed", key=project.key, issue_count=len(issues))

    # -- issue access ------------------------------------------------------

    def issues(self, verbose: bool = False) -> Dict[str, Issue]:
        """Cached issues of the current project, keyed by issue key."""
        with self._lock:
            if self._current_project is None:
                return {}
            issues = dict(self._issues)
        if verbose:
            self.show_issues(issues)
        return issues

    def issue(self, key: str) -> Optional[Issue]:
        with self._lock:
            return self._issues.get(key)

    def query_builder(self) -> QueryBuilder:
        project = self._current_project
        return QueryBuilder(current_project=project.key if project else None)

    def my_issues(self, options: Optional[QueryOptions] = None, **kwargs: Any) -> Dict[str, Issue]:
        """Issues assigned to a user; the cached set is not touched.

        Options may be given as a :class:`QueryOptions` or as keyword
        arguments of the same names; keyword arguments override the
        fields of a given :class:`QueryOptions`.

        Raises:
            ValidationError: If the assignee or status is invalid
            PreconditionError: If no client is connected
        """
        if options is None:
            options = QueryOptions(**kwargs)
        elif kwargs:
            options = replace(options, **kwargs)
        assignee = options.assignee or self.default_assignee
        if not isinstance(assignee, str) or not assignee:
            logger.error("assignee_missing", assignee=assignee)
            raise ValidationError(
                "assignee option must be a string", ["assignee option must be a string"]
            )

        jql = self.query_builder().build(
            assignee=assignee,
            project=options.project,
            status=options.status,
        )
        issues = self._search(
            jql,
            fields=options.fields,
            start_at=options.start_at,
            max_results=options.max_results,
        )
        logger.info("my_issues_fetched", assignee=assignee.upper(), count=len(issues))

        if options.verbose:
            self.show_issues(issues)
        return issues

    def latest_issues(
        self,
        time: TimeWindow,
        event: str = IssueEvent.CREATED.value,
        assignee: Optional[str] = None,
        status: str = StatusFilter.ALL.value,
        fields: Optional[List[str]] = None,
        max_results: Optional[int] = None,
        verbose: bool = False,
    ) -> Dict[str, Issue]:
        """Issues of the current project whose ``event`` happened within ``time``.

        Args:
            time: Relative window such as ``"-1d"`` or ``"-2w"``
            event: One of ``created``, ``resolved``, ``updated``

        Raises:
            PreconditionError: If no project is selected or no client is
                connected
            ValidationError: If ``event`` or ``time`` is invalid
        """
        problems = []
        if self._current_project is None:
            problems.append("latest issues need a current project to be set")
        if self._client is None:
            problems.append("latest issues need a connected client")
        if problems:
            for problem in problems:
                logger.error("latest_issues_precondition_failed", reason=problem)
            raise PreconditionError("; ".join(problems))

        jql = self.query_builder().build(
            assignee=assignee or self.default_assignee,
            status=status,
            time=time,
            event=event,
            require_project=True,
        )
        issues = self._search(jql, fields=fields, max_results=max_results)

        if verbose:
            self.show_issues(issues)
        return issues

    def show_issues(self, issues: Dict[str, Issue]) -> None:
        table = self.reporter.render(issues, self._current_project)
        self.console.print(table, markup=False, highlight=False, soft_wrap=True)


def create_session_from_config(config: Dict[str, Any], **kwargs: Any) -> ProjectSession:
    """Launch a session from a loaded configuration dictionary."""
    return ProjectSession.launch(settings_from_config(config), **kwargs)
