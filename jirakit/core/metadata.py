"""Project and issue-type metadata cache."""

import re
from typing import Callable, Dict, List, Pattern, TypeVar, Union

import structlog

from jirakit.core.client import TrackerClient
from jirakit.models import IssueType, LookupResult, Project

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Matcher = Union[str, int, Pattern, Callable[[T], bool]]


def _select(items: Dict[str, T], matcher: Matcher, id_of: Callable[[T], int]) -> List[T]:
    """Resolve ``matcher`` against a keyed mapping.

    Ints (and all-digit strings) match ids, strings match a key exactly or
    else as a case-insensitive substring, compiled patterns are searched
    against keys and callables are used as predicates on the values.
    """
    if isinstance(matcher, bool):
        return []
    if isinstance(matcher, int):
        return [item for item in items.values() if id_of(item) == matcher]
    if isinstance(matcher, str):
        if matcher in items:
            return [items[matcher]]
        if matcher.isdigit():
            return [item for item in items.values() if id_of(item) == int(matcher)]
        needle = matcher.lower()
        return [item for key, item in items.items() if needle in key.lower()]
    if isinstance(matcher, re.Pattern):
        return [item for key, item in items.items() if matcher.search(key)]
    if callable(matcher):
        return [item for item in items.values() if matcher(item)]
    return []


class MetadataCache:
    """Holds project-key -> Project and issue-type-name -> IssueType maps.

    Both maps are replaced wholesale by :meth:`load`.
    """

    def __init__(self):
        self.projects: Dict[str, Project] = {}
        self.issue_types: Dict[str, IssueType] = {}

    def load(self, client: TrackerClient) -> None:
        """Replace both maps with fresh snapshots from ``client``."""
        projects = {project.key: project for project in client.list_projects()}
        issue_types = {issue_type.name: issue_type for issue_type in client.list_issue_types()}

        self.projects = projects
        self.issue_types = issue_types

        logger.info(
            "metadata_loaded",
            projects=len(projects),
            issue_types=len(issue_types),
        )

    def clear(self) -> None:
        self.projects = {}
        self.issue_types = {}

    def lookup_project(self, matcher: Matcher) -> LookupResult[Project]:
        """Find a project by key, numeric id, pattern or predicate."""
        result = LookupResult.from_matches(
            _select(self.projects, matcher, lambda project: project.id)
        )
        self._warn_unless_found("project", matcher, result, sorted(self.projects))
        return result

    def lookup_issue_type(self, matcher: Matcher) -> LookupResult[IssueType]:
        """Find an issue type by name, numeric id, pattern or predicate."""
        result = LookupResult.from_matches(
            _select(self.issue_types, matcher, lambda issue_type: issue_type.id)
        )
        self._warn_unless_found("issue_type", matcher, result, sorted(self.issue_types))
        return result

    def has_issue_type(self, name: str) -> bool:
        return isinstance(name, str) and name in self.issue_types

    def issue_type_mapping(self) -> Dict[str, int]:
        """Issue type name -> tracker id."""
        return {name: issue_type.id for name, issue_type in self.issue_types.items()}

    @staticmethod
    def _warn_unless_found(kind: str, matcher: Matcher, result: LookupResult, keys: List[str]) -> None:
        if result.ambiguous:
            logger.warning(
                f"{kind}_ambiguous",
                matcher=str(matcher),
                candidates=result.keys,
            )
        elif not result.found:
            logger.warning(f"{kind}_not_found", matcher=str(matcher), candidates=keys)
