"""Tracker integrations."""

from jirakit.integrations.jira import JiraClient, JiraError, connect

__all__ = ["JiraClient", "JiraError", "connect"]
