"""Main CLI entry point for jirakit."""

import logging
from pathlib import Path
from typing import Optional, Tuple

import click
import structlog
from pydantic import ValidationError as SettingsValidationError
from rich.console import Console
from rich.table import Table

from jirakit import __version__
from jirakit.config.loader import load_config
from jirakit.core.operations import IssueOperations
from jirakit.core.query import EVENT_TYPES, STATUS_TYPES
from jirakit.core.session import ProjectSession, create_session_from_config
from jirakit.exceptions import (
    ConfigurationError,
    JirakitError,
    PreconditionError,
    ValidationError,
)
from jirakit.logger import configure_logging
from jirakit.models import QueryOptions

console = Console()

logger = structlog.get_logger(__name__)


def _open_session(ctx: click.Context) -> ProjectSession:
    """Load the config and launch a session, aborting on failure."""
    try:
        config = load_config(ctx.obj["config_path"])
        return create_session_from_config(config, console=console)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise click.Abort()
    except SettingsValidationError as e:
        console.print(f"[red]Invalid jira settings: {e}[/red]")
        raise click.Abort()
    except JirakitError as e:
        console.print(f"[red]Could not connect: {e}[/red]")
        raise click.Abort()


def _select(session: ProjectSession, project: str, max_results: Optional[int] = None) -> None:
    if session.select_project(project, max_results=max_results) is None:
        console.print(f"[red]Project '{project}' not found or ambiguous.[/red]")
        console.print(f"[cyan]Projects:[/cyan] {', '.join(sorted(session.projects))}")
        raise click.Abort()


def _report_error(e: JirakitError) -> None:
    if isinstance(e, ValidationError) and e.problems:
        console.print("[red]Invalid options:[/red]")
        for problem in e.problems:
            console.print(f"  - {problem}")
    elif isinstance(e, PreconditionError):
        console.print(f"[yellow]{e}[/yellow]")
    else:
        console.print(f"[red]Error: {e}[/red]")


@click.group()
@click.version_option(version=__version__, prog_name="jirakit")
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    envvar="JIRAKIT_CONFIG",
    help="Path to configuration file (default: config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: bool, debug: bool) -> None:
    """jirakit: query and edit Jira issues from the command line."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config or Path("config.yaml")

    if debug:
        configure_logging(logging.DEBUG)
    elif verbose:
        configure_logging(logging.INFO)
    else:
        configure_logging(logging.WARNING)

    logger.debug("cli_initialized", config=str(config), verbose=verbose, debug=debug)


@cli.command(name="test-connection")
@click.pass_context
def test_connection(ctx: click.Context) -> None:
    """Test connection to Jira."""
    session = _open_session(ctx)
    try:
        session.client.test_connection()
    except JirakitError as e:
        console.print(f"[red]Connection failed: {e}[/red]")
        raise click.Abort()

    console.print("[green]Jira connection test passed.[/green]")
    console.print(f"[cyan]URL:[/cyan] {session.site}")
    console.print(f"[cyan]Projects visible:[/cyan] {len(session.projects)}")


@cli.command()
@click.pass_context
def projects(ctx: click.Context) -> None:
    """List projects."""
    session = _open_session(ctx)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    for key in sorted(session.projects):
        project = session.projects[key]
        table.add_row(project.key, str(project.id), project.name)
    console.print(table)


@cli.command(name="issue-types")
@click.pass_context
def issue_types(ctx: click.Context) -> None:
    """List issue types."""
    session = _open_session(ctx)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Name")
    table.add_column("ID", justify="right")
    table.add_column("Description")
    for name, issue_type in session.issue_types.items():
        table.add_row(name, str(issue_type.id), issue_type.description)
    console.print(table)


@cli.command()
@click.argument("project")
@click.option("--max-results", type=int, help="Upper bound on issues fetched")
@click.pass_context
def issues(ctx: click.Context, project: str, max_results: Optional[int]) -> None:
    """Show all issues of PROJECT."""
    session = _open_session(ctx)
    _select(session, project, max_results=max_results)
    session.issues(verbose=True)


@cli.command(name="my-issues")
@click.option("--project", "-p", help="Project key (default: all projects)")
@click.option("--assignee", "-a", help="Assignee (default: configured user)")
@click.option(
    "--status",
    "-s",
    type=click.Choice(STATUS_TYPES),
    default="All Open",
    show_default=True,
)
@click.pass_context
def my_issues(ctx: click.Context, project: Optional[str], assignee: Optional[str], status: str) -> None:
    """Show issues assigned to you."""
    session = _open_session(ctx)
    try:
        found = session.my_issues(
            QueryOptions(assignee=assignee, project=project, status=status, verbose=True)
        )
    except JirakitError as e:
        _report_error(e)
        raise click.Abort()

    if not found:
        console.print("[yellow]No issues found.[/yellow]")


@cli.command()
@click.argument("project")
@click.argument("time")
@click.option("--event", "-e", type=click.Choice(EVENT_TYPES), default="created", show_default=True)
@click.option("--assignee", "-a", help="Assignee (default: configured user)")
@click.pass_context
def latest(ctx: click.Context, project: str, time: str, event: str, assignee: Optional[str]) -> None:
    """Show issues of PROJECT whose EVENT happened within TIME.

    TIME is a relative window such as -1w; put it after -- so it is not
    read as an option.
    """
    session = _open_session(ctx)
    _select(session, project)
    try:
        found = session.latest_issues(time, event=event, assignee=assignee, verbose=True)
    except JirakitError as e:
        _report_error(e)
        raise click.Abort()

    if not found:
        console.print("[yellow]No issues found.[/yellow]")


@cli.command()
@click.option("--project", "-p", required=True, help="Project key or id")
@click.option("--type", "-t", "issue_type", required=True, help="Issue type name, e.g. Bug")
@click.option("--summary", "-s", required=True, help="Issue summary/title")
@click.option("--description", "-d", help="Issue description")
@click.option("--assignee", "-a", help="Assignee name (default: configured user)")
@click.option("--priority", type=int, help="Priority id")
@click.option("--component", "components", multiple=True, help="Component name or id (repeatable)")
@click.pass_context
def create(
    ctx: click.Context,
    project: str,
    issue_type: str,
    summary: str,
    description: Optional[str],
    assignee: Optional[str],
    priority: Optional[int],
    components: Tuple[str, ...],
) -> None:
    """Create an issue."""
    session = _open_session(ctx)
    try:
        issue = IssueOperations(session).create_issue(
            project=project,
            type=issue_type,
            summary=summary,
            description=description,
            assignee=assignee,
            priority=priority,
            components=list(components) or None,
        )
    except JirakitError as e:
        _report_error(e)
        raise click.Abort()

    console.print("[green]Issue created successfully.[/green]")
    console.print(f"[cyan]Key:[/cyan] {issue.key}")
    console.print(f"[cyan]URL:[/cyan] {session.site}/browse/{issue.key}")


@cli.command()
@click.argument("project")
@click.argument("key")
@click.option("--type", "-t", "issue_type", help="New issue type")
@click.option("--summary", "-s", help="New summary")
@click.option("--description", "-d", help="New description")
@click.option("--assignee", "-a", help="New assignee")
@click.option("--priority", type=int, help="New priority id")
@click.pass_context
def update(
    ctx: click.Context,
    project: str,
    key: str,
    issue_type: Optional[str],
    summary: Optional[str],
    description: Optional[str],
    assignee: Optional[str],
    priority: Optional[int],
) -> None:
    """Update issue KEY of PROJECT."""
    session = _open_session(ctx)
    _select(session, project)
    try:
        issue = IssueOperations(session).update_issue(
            key,
            type=issue_type,
            summary=summary,
            description=description,
            assignee=assignee,
            priority=priority,
        )
    except JirakitError as e:
        _report_error(e)
        raise click.Abort()

    if issue is None:
        console.print(f"[red]Issue '{key}' not found in {project}.[/red]")
        raise click.Abort()
    console.print(f"[green]Issue {issue.key} updated.[/green]")


@cli.command()
@click.argument("project")
@click.argument("key")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, project: str, key: str, yes: bool) -> None:
    """Delete issue KEY of PROJECT."""
    session = _open_session(ctx)
    _select(session, project)

    if not yes and not click.confirm(f"Delete {key}?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return

    try:
        deleted = IssueOperations(session).delete_issue(key)
    except JirakitError as e:
        _report_error(e)
        raise click.Abort()

    if not deleted:
        console.print(f"[red]Issue '{key}' was not deleted.[/red]")
        raise click.Abort()
    console.print(f"[green]Issue {key} deleted.[/green]")


if __name__ == "__main__":
    cli(obj={})
