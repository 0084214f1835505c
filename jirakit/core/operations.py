"""Create, update and delete issues through a session."""

from dataclasses import fields as dataclass_fields, replace
from typing import Any, Dict, List, Optional, Tuple

import structlog

from jirakit.core.session import ProjectSession
from jirakit.exceptions import PreconditionError, ValidationError
from jirakit.models import Issue, IssueFields

logger = structlog.get_logger(__name__)

DEFAULT_PRIORITY = 3

STRING_FIELDS = ("type", "summary", "description", "assignee")


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.isdigit()


def _normalize_component(component: Any) -> Dict[str, str]:
    if _is_numeric(component):
        return {"id": str(component)}
    return {"name": str(component)}


def assemble_issue_fields(options: IssueFields, project_attr: str = "key") -> Dict[str, Any]:
    """Map issue options onto the tracker's nested field shapes.

    Unset options are skipped. Anything in ``options.extra`` has no
    mapping and is dropped with a warning.
    """
    payload: Dict[str, Any] = {}

    for name in ("summary", "description"):
        value = getattr(options, name)
        if value is not None:
            payload[name] = value

    if options.project is not None:
        payload["project"] = {project_attr: str(options.project)}
    if options.type is not None:
        payload["issuetype"] = {"name": options.type}
    if options.assignee is not None:
        payload["assignee"] = {"name": options.assignee}
    if options.priority is not None:
        payload["priority"] = {"id": str(options.priority)}
    if options.components is not None:
        components = options.components
        if not isinstance(components, (list, tuple)):
            components = [components]
        payload["components"] = [_normalize_component(c) for c in components]

    for name in options.extra:
        logger.warning("issue_option_not_recognized", option=name)

    return payload


class IssueOperations:
    """Validates issue options and hands them to the session's client.

    The session's cached issue set is never updated here.
    """

    def __init__(self, session: ProjectSession):
        self.session = session

    @staticmethod
    def _coerce(options: Optional[IssueFields], kwargs: Dict[str, Any]) -> IssueFields:
        if options is not None:
            return options
        known = {f.name for f in dataclass_fields(IssueFields)} - {"extra"}
        extra = {k: v for k, v in kwargs.items() if k not in known}
        return IssueFields(extra=extra, **{k: v for k, v in kwargs.items() if k in known})

    def check_issue_fields(
        self,
        options: IssueFields,
        creating: bool,
    ) -> Tuple[IssueFields, str]:
        """Validate ``options`` and resolve the project reference.

        Returns:
            The normalized options and the project attribute (``id`` or
            ``key``) the payload should use

        Raises:
            ValidationError: With every problem found
        """
        problems: List[str] = []
        project = options.project
        project_attr = "key"

        if project is None:
            if creating:
                current = self.session.current_project
                if current is None:
                    problems.append("project must be supplied or a current project be selected")
                else:
                    project = str(current.id)
                    project_attr = "id"
        elif _is_numeric(project):
            project = str(project)
            project_attr = "id"
        elif not isinstance(project, str):
            problems.append(
                f"project '{project}' must be a String (project key) or Integer (project id)"
            )

        for name in STRING_FIELDS:
            value = getattr(options, name)
            if value is not None and not isinstance(value, str):
                problems.append(f"issue option '{name}' must be a String, got {value!r}")

        if creating and options.summary is None:
            problems.append("issue option 'summary' is required")

        if creating or options.type is not None:
            if not self.session.metadata.has_issue_type(options.type):
                problems.append(
                    f"issue type '{options.type}' is not valid, choose from "
                    f"{', '.join(sorted(self.session.issue_types))}"
                )

        if options.priority is not None and not _is_numeric(options.priority):
            problems.append(f"priority '{options.priority}' must be an Integer id")

        if options.components is not None:
            components = options.components
            if not isinstance(components, (list, tuple)):
                components = [components]
            for component in components:
                if isinstance(component, bool) or not isinstance(component, (str, int)):
                    problems.append(
                        f"component '{component}' is not the correct type, choose from String or Integer"
                    )

        if problems:
            for problem in problems:
                logger.warning("issue_option_invalid", problem=problem)
            raise ValidationError("; ".join(problems), problems)

        return replace(options, project=project), project_attr

    def create_issue(self, options: Optional[IssueFields] = None, **kwargs: Any) -> Issue:
        """Create an issue in the given or current project.

        Defaults: the session's default assignee and priority
        ``DEFAULT_PRIORITY``. Call :meth:`ProjectSession.refresh` to see the
        new issue in the cached set.

        Raises:
            ValidationError: If the options are invalid (no remote call made)
            PreconditionError: If no client is connected
        """
        options = self._coerce(options, kwargs)
        if options.assignee is None:
            options = replace(options, assignee=self.session.default_assignee)
        if options.priority is None:
            options = replace(options, priority=DEFAULT_PRIORITY)

        client = self.session.require_client()
        options, project_attr = self.check_issue_fields(options, creating=True)
        payload = assemble_issue_fields(options, project_attr)

        issue = client.create_issue(payload)
        logger.info("issue_created", key=issue.key, project=options.project)
        return issue

    def _cached_issue(self, key: str, action: str) -> Optional[Issue]:
        if not self.session.has_project:
            logger.error(f"{action}_without_project", key=key)
            raise PreconditionError(f"Cannot {action} issue '{key}', set the current project first")

        issue = self.session.issue(key)
        if issue is None:
            logger.warning(
                "issue_not_found",
                key=key,
                project=self.session.current_project.key,
                candidates=sorted(self.session.issues())[:10],
            )
        return issue

    def update_issue(self, key: str, options: Optional[IssueFields] = None, **kwargs: Any) -> Optional[Issue]:
        """Save changed fields of a cached issue.

        Returns:
            The updated issue handle, or None if ``key`` is not cached

        Raises:
            PreconditionError: If no project is selected or no client is connected
            ValidationError: If the options are invalid
        """
        options = self._coerce(options, kwargs)
        issue = self._cached_issue(key, "update")
        if issue is None:
            return None

        client = self.session.require_client()
        options, project_attr = self.check_issue_fields(options, creating=False)
        payload = assemble_issue_fields(options, project_attr)
        if not payload:
            logger.warning("issue_update_empty", key=key)
            return issue

        updated = client.save_issue(issue, payload)
        logger.info("issue_updated", key=key, fields=sorted(payload))
        return updated

    def delete_issue(self, key: str) -> bool:
        """Delete a cached issue; the cached set keeps it until a refresh.

        Returns:
            True if the tracker deleted it, False if ``key`` is not cached

        Raises:
            PreconditionError: If no project is selected or no client is connected
        """
        issue = self._cached_issue(key, "delete")
        if issue is None:
            return False

        client = self.session.require_client()
        deleted = client.delete_issue(issue)
        logger.info("issue_deleted", key=key, deleted=deleted)
        return deleted
