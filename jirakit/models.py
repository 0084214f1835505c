"""Data models for tracker metadata, issues and lookup results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


def _to_int(value: Any) -> int:
    """Tracker ids arrive as numeric strings."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class Project:
    """Immutable snapshot of a tracker project."""

    key: str  # e.g., "ISC"
    id: int
    name: str
    url: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            key=data.get("key", ""),
            id=_to_int(data.get("id")),
            name=data.get("name", ""),
            url=data.get("self", ""),
        )


@dataclass(frozen=True)
class IssueType:
    """Immutable snapshot of an issue type (Bug, Requirement, ...)."""

    name: str
    id: int
    description: str = ""
    subtask: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "IssueType":
        return cls(
            name=data.get("name", ""),
            id=_to_int(data.get("id")),
            description=data.get("description", "") or "",
            subtask=bool(data.get("subtask", False)),
        )


@dataclass(frozen=True)
class User:
    """Tracker user as it appears on an issue."""

    name: str
    email: str = ""
    display_name: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "User":
        return cls(
            name=data.get("name", ""),
            email=data.get("emailAddress", "") or "",
            display_name=data.get("displayName", "") or "",
        )


@dataclass
class Issue:
    """A tracker issue.

    The raw field map is the source of truth; the typed accessors read
    from it so fields saved back to the tracker show up immediately.
    """

    key: str  # e.g., "ISC-463"
    id: str = ""
    fields: Dict[str, Any] = field(default_factory=dict)
    url: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Issue":
        return cls(
            key=data.get("key", ""),
            id=str(data.get("id", "")),
            fields=dict(data.get("fields") or {}),
            url=data.get("self", ""),
        )

    @property
    def summary(self) -> str:
        return self.fields.get("summary") or ""

    @property
    def description(self) -> str:
        return self.fields.get("description") or ""

    @property
    def status(self) -> str:
        status = self.fields.get("status") or {}
        return status.get("name", "")

    @property
    def assignee(self) -> Optional[User]:
        assignee = self.fields.get("assignee")
        if not assignee:
            return None
        return User.from_api(assignee)

    @property
    def issue_type(self) -> Optional[IssueType]:
        issue_type = self.fields.get("issuetype")
        if not issue_type:
            return None
        return IssueType.from_api(issue_type)

    @property
    def project_key(self) -> str:
        project = self.fields.get("project") or {}
        if project.get("key"):
            return project["key"]
        return self.key.rsplit("-", 1)[0] if "-" in self.key else ""

    def apply_fields(self, fields: Dict[str, Any]) -> None:
        """Fold a saved field payload into the local handle."""
        for name, value in fields.items():
            current = self.fields.get(name)
            if isinstance(current, dict) and isinstance(value, dict):
                merged = dict(current)
                merged.update(value)
                self.fields[name] = merged
            else:
                self.fields[name] = value


class StatusFilter(str, Enum):
    """Status filters accepted by issue queries."""

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    ALL = "All"
    ALL_OPEN = "All Open"


class IssueEvent(str, Enum):
    """Issue events usable in relative time queries."""

    CREATED = "created"
    RESOLVED = "resolved"
    UPDATED = "updated"


class LookupOutcome(Enum):
    """Outcome of a metadata lookup."""

    FOUND = "found"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class LookupResult(Generic[T]):
    """Tagged result of a project or issue-type lookup."""

    outcome: LookupOutcome
    matches: List[T] = field(default_factory=list)

    @classmethod
    def from_matches(cls, matches: List[T]) -> "LookupResult[T]":
        if len(matches) == 1:
            return cls(LookupOutcome.FOUND, list(matches))
        if len(matches) > 1:
            return cls(LookupOutcome.AMBIGUOUS, list(matches))
        return cls(LookupOutcome.NOT_FOUND, [])

    @property
    def found(self) -> bool:
        return self.outcome is LookupOutcome.FOUND

    @property
    def ambiguous(self) -> bool:
        return self.outcome is LookupOutcome.AMBIGUOUS

    @property
    def keys(self) -> List[str]:
        """Keys (projects) or names (issue types) of every match."""
        return [getattr(m, "key", None) or getattr(m, "name", "") for m in self.matches]

    @property
    def value(self) -> Optional[T]:
        """The single match, or None when not found or ambiguous."""
        return self.matches[0] if self.found else None

    def __bool__(self) -> bool:
        return self.found


@dataclass
class IssueFields:
    """Options accepted when creating or updating an issue.

    Anything the tracker payload has no mapping for goes in ``extra`` and
    is dropped with a warning during assembly.
    """

    project: Optional[Any] = None  # project key (str) or id (int / numeric str)
    type: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    assignee: Optional[str] = None
    priority: Optional[Any] = None
    components: Optional[Any] = None  # single value or list, names or ids
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class QueryOptions:
    """Options for assignee-scoped issue queries.

    Defaults: the session's default assignee, the current project and
    the ``All Open`` status filter.
    """

    assignee: Optional[str] = None
    project: Optional[str] = None
    status: str = StatusFilter.ALL_OPEN.value
    fields: List[str] = field(default_factory=list)
    start_at: int = 0
    max_results: Optional[int] = None
    verbose: bool = False
