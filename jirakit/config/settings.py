"""Connection settings for a tracker session."""

from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_RESULTS = 100_000


class TrackerSettings(BaseSettings):
    """Credentials and session defaults.

    Values come from the ``jira`` section of the config file, with
    ``JIRAKIT_*`` environment variables as fallback.
    """

    model_config = SettingsConfigDict(
        env_prefix="JIRAKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    site: str = Field(description="Tracker site URL, e.g. https://jira.example.com")
    username: str = Field(description="Account used for basic auth and default assignee")
    password: Optional[str] = Field(default=None, description="Password for basic auth")
    token: Optional[str] = Field(default=None, description="Personal access token")
    auth_type: str = Field(default="basic", description="basic or token")
    use_ssl: bool = Field(default=True, description="Verify TLS certificates")
    context_path: str = Field(default="", description="Path prefix the tracker is served under")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, description="Search result bound")
    default_assignee: Optional[str] = Field(
        default=None, description="Assignee for my-issues queries and new issues"
    )

    @field_validator("site")
    @classmethod
    def strip_site(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("site cannot be empty")
        return v

    @field_validator("auth_type")
    @classmethod
    def validate_auth_type(cls, v: str) -> str:
        v = v.lower()
        if v not in {"basic", "token"}:
            raise ValueError("auth_type must be one of: basic, token")
        return v

    @field_validator("context_path")
    @classmethod
    def normalize_context_path(cls, v: str) -> str:
        v = v.strip().strip("/")
        return f"/{v}" if v else ""

    @field_validator("max_results")
    @classmethod
    def validate_max_results(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_results must be positive")
        return v

    @model_validator(mode="after")
    def check_credentials(self) -> "TrackerSettings":
        if self.auth_type == "token" and not self.token:
            raise ValueError("token auth requires a token")
        return self

    @property
    def base_url(self) -> str:
        return f"{self.site}{self.context_path}"


def settings_from_config(config: Dict[str, Any]) -> TrackerSettings:
    """Build settings from the ``jira`` section of a loaded config."""
    section = config.get("jira") or {}
    return TrackerSettings(**{k: v for k, v in section.items() if v is not None})
