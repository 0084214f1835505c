"""Fixed-column text table of issues."""

from dataclasses import astuple, dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from jirakit.models import Issue, Project

COLUMNS = ("Key", "Assignee", "Status", "Summary")
WHITESPACE_PADDING = 3


@dataclass(frozen=True)
class IssueRow:
    """One table row."""

    key: str
    assignee: str
    status: str
    summary: str

    @classmethod
    def from_issue(cls, key: str, issue: Issue) -> "IssueRow":
        assignee = issue.assignee
        return cls(
            key=key,
            assignee=assignee.name if assignee else "",
            status=issue.status,
            summary=issue.summary,
        )


class ConsoleReporter:
    """Renders an issue mapping as a bordered table.

    Each column is as wide as its longest cell or header label, plus
    ``padding``. Rendering has no side effects.
    """

    def __init__(self, padding: int = WHITESPACE_PADDING):
        self.padding = padding

    def rows(self, issues: Mapping[str, Issue]) -> List[IssueRow]:
        return [IssueRow.from_issue(key, issue) for key, issue in issues.items()]

    def column_widths(self, rows: Iterable[IssueRow]) -> Dict[str, int]:
        rows = list(rows)
        widths = {}
        for index, column in enumerate(COLUMNS):
            longest = max((len(astuple(row)[index]) for row in rows), default=0)
            widths[column] = max(len(column), longest) + self.padding
        return widths

    def render(self, issues: Mapping[str, Issue], project: Optional[Project] = None) -> str:
        """Render ``issues`` under a ``KEY: name`` title row."""
        rows = self.rows(issues)
        widths = self.column_widths(rows)

        title = f"{project.key}: {project.name}" if project else "Issues"
        # The last column absorbs any extra width a long title needs.
        shortfall = len(f"| {title} ") - sum(widths.values())
        if shortfall > 0:
            widths[COLUMNS[-1]] += shortfall

        header = "".join(f"| {column}".ljust(widths[column]) for column in COLUMNS)
        title_row = f"| {title}".ljust(len(header)) + "|"
        header += "|"

        table = [
            "-" * len(header),
            title_row,
            "=" * len(header),
            header,
            "=" * len(header),
        ]
        for row in rows:
            table.append(
                "".join(
                    f"| {value}".ljust(widths[column])
                    for column, value in zip(COLUMNS, astuple(row))
                )
                + "|"
            )
        table.append("-" * len(header))
        return "\n".join(table)


def render_issue_table(issues: Mapping[str, Issue], project: Optional[Project] = None) -> str:
    return ConsoleReporter().render(issues, project)
