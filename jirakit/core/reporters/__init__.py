"""Report renderers."""

from jirakit.core.reporters.console import ConsoleReporter, IssueRow, render_issue_table

__all__ = ["ConsoleReporter", "IssueRow", "render_issue_table"]
